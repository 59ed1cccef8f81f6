"""
Runtime configuration for the container codec.

Defaults are module constants. Deployments override them through
environment variables read by `ContainerConfig.from_env`.
"""

from __future__ import annotations

import os
from typing import Final

from pydantic import Field

from filebox.types import StrictBaseModel

DEFAULT_COMPRESSION_LEVEL: Final = 6
"""gzip level used when none is configured. Matches zlib's own default."""

DEFAULT_COPY_BUFFER_SIZE: Final = 64 * 1024
"""Chunk size for stream copies in bytes."""

COMPRESSION_LEVEL_ENV: Final = "FILEBOX_COMPRESSION_LEVEL"
"""Environment variable overriding the compression level."""

COPY_BUFFER_SIZE_ENV: Final = "FILEBOX_COPY_BUFFER_SIZE"
"""Environment variable overriding the copy buffer size."""


class ContainerConfig(StrictBaseModel):
    """Tunables for writing and reading containers."""

    compression_level: int = Field(default=DEFAULT_COMPRESSION_LEVEL, ge=0, le=9)
    """gzip compression level, 0 (store) to 9 (smallest)."""

    copy_buffer_size: int = Field(default=DEFAULT_COPY_BUFFER_SIZE, gt=0)
    """Bytes moved per read/write call when copying streams."""

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ContainerConfig:
        """
        Build a configuration from environment variables.

        Unset variables fall back to the defaults.

        Raises:
            ValueError: If a variable is set to a non-integer or out-of-range value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, int] = {}
        for field_name, var in (
            ("compression_level", COMPRESSION_LEVEL_ENV),
            ("copy_buffer_size", COPY_BUFFER_SIZE_ENV),
        ):
            raw = env.get(var)
            if raw is None:
                continue
            try:
                values[field_name] = int(raw.strip())
            except ValueError:
                raise ValueError(
                    f"Invalid {var} environment variable: '{raw}'. Expected an integer."
                ) from None
        # pydantic.ValidationError is a ValueError subclass.
        return cls(**values)


DEFAULT_CONFIG: Final = ContainerConfig()
"""Configuration used when callers do not pass one."""
