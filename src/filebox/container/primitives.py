"""
Primitive field codecs.

Fixed-width big-endian unsigned integers and 16-bit length-prefixed strings.
Writers operate on any object with a `write` method, readers on any object
with a `read` method.
"""

from __future__ import annotations

from typing import IO

from .constants import STRING_LENGTH_BYTES, TEXT_ENCODING, TEXT_ERRORS
from .streams import read_exact


def write_uint(value: int, byte_count: int, out: IO[bytes]) -> int:
    """
    Write `value` as `byte_count` big-endian bytes.

    Bits above `byte_count * 8` are dropped silently; callers must ensure
    the value fits.

    Returns:
        The number of bytes written.
    """
    mask = (1 << (8 * byte_count)) - 1
    out.write((value & mask).to_bytes(byte_count, "big"))
    return byte_count


def read_uint(byte_count: int, stream: IO[bytes], what: str | None = None) -> int:
    """
    Read a `byte_count`-byte big-endian unsigned integer.

    Raises:
        ShortReadError: If fewer than `byte_count` bytes are available.
    """
    data = read_exact(stream, byte_count, what or f"uint{byte_count * 8}")
    return int.from_bytes(data, "big")


def write_length_prefixed_string(text: str, out: IO[bytes]) -> int:
    """
    Write `text` as a 2-byte length followed by its UTF-8 bytes.

    Strings longer than 65535 encoded bytes overflow the prefix: the prefix
    wraps, but every byte of the string is still written.

    Returns:
        The number of bytes written.
    """
    data = text.encode(TEXT_ENCODING, TEXT_ERRORS)
    written = write_uint(len(data), STRING_LENGTH_BYTES, out)
    out.write(data)
    return written + len(data)


def read_length_prefixed_string(stream: IO[bytes], what: str = "string") -> tuple[str, int]:
    """
    Read a 2-byte length, then exactly that many bytes as text.

    The bytes are not validated as UTF-8. Invalid sequences come back as
    surrogate escapes and encode back to the original bytes.

    Returns:
        The decoded string and the number of bytes consumed, prefix included.

    Raises:
        ShortReadError: If the stream ends inside the prefix or the string.
    """
    length = int.from_bytes(read_exact(stream, STRING_LENGTH_BYTES, f"{what} length"), "big")
    data = read_exact(stream, length, what)
    return data.decode(TEXT_ENCODING, TEXT_ERRORS), STRING_LENGTH_BYTES + length
