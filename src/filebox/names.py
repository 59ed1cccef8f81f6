"""
Human-friendly random names for stored containers.

The alphabet leaves out characters that are easy to confuse when a name is
read aloud or typed from a screenshot (`0/O`, `1/l/I`, `5/S`, `u/v`, ...).
"""

from __future__ import annotations

import random
from typing import Final

NAME_CHARSET: Final = "abcdefghkmnoprstwxzABCDEFGHJKLMNPQRTWXY34689"
"""Characters a generated name is drawn from."""


class NameGenerator:
    """
    Draws names uniformly from `NAME_CHARSET`.

    Owns its random source. Pass a seeded `random.Random` for reproducible
    names in tests.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.SystemRandom()

    def generate_name(self, length: int) -> str:
        """Return a name of `length` characters, or an empty string if `length` <= 0."""
        if length <= 0:
            return ""
        chars = [""] * length
        for i in range(length):
            chars[i] = self._rng.choice(NAME_CHARSET)
        return "".join(chars)


_default_generator = NameGenerator()


def generate_random_name(length: int) -> str:
    """Return a random name of `length` characters from the shared generator."""
    return _default_generator.generate_name(length)
