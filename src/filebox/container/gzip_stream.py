"""
Incremental gzip decompression over a byte stream.

WHY NOT gzip.GzipFile?
----------------------
`gzip.GzipFile` parses the member header on the first read. A container
handle must report a malformed payload when decompression is switched on,
before any read happens. `GzipReader` therefore pulls and validates the
fixed member header in its constructor.


STREAM STRUCTURE
----------------
A gzip stream (RFC 1952) is one or more members laid back-to-back::

    [member_1][member_2]...[member_n]

Each member is::

    [header: 10+ bytes][deflate data][crc32: 4 LE][isize: 4 LE]

The fixed part of the header is::

    0x1f 0x8b  magic
    0x08       compression method (deflate)
    flags, mtime (4), extra flags, OS

Optional fields (extra, name, comment, header CRC) follow when flagged.
zlib parses all of it and checks the trailer CRC and size.
"""

from __future__ import annotations

import io
import logging
import zlib
from typing import IO, Final

from filebox.config import DEFAULT_COPY_BUFFER_SIZE
from filebox.types import DecompressionError, DecompressionInitError, ShortReadError

from .streams import read_exact

logger = logging.getLogger(__name__)

GZIP_MAGIC: Final = b"\x1f\x8b"
"""First two bytes of every gzip member."""

GZIP_FIXED_HEADER_BYTES: Final = 10
"""Size of the mandatory part of a gzip member header."""

_GZIP_WBITS: Final = 16 + zlib.MAX_WBITS
"""zlib window setting that accepts gzip framing only."""


class GzipReader(io.RawIOBase):
    """
    Readable stream of the decompressed bytes of a gzip source.

    The source is read lazily in `chunk_size` pieces. The reader never closes
    the source; its owner does.
    """

    def __init__(self, source: IO[bytes], *, chunk_size: int = DEFAULT_COPY_BUFFER_SIZE) -> None:
        """
        Validate the first member header and prepare for reading.

        Exactly `GZIP_FIXED_HEADER_BYTES` bytes are consumed from `source`.

        Raises:
            DecompressionInitError: If the source is empty, too short, or does
                not begin with a valid gzip member header.
        """
        super().__init__()
        self._source = source
        self._chunk_size = chunk_size
        self._inflater = zlib.decompressobj(_GZIP_WBITS)
        self._pending = b""
        self._finished = False

        try:
            head = read_exact(source, GZIP_FIXED_HEADER_BYTES, "gzip header")
        except ShortReadError as e:
            raise DecompressionInitError(
                f"Compressed payload too short for a gzip header: {e.actual_bytes} bytes"
            ) from e

        if head[:2] != GZIP_MAGIC:
            raise DecompressionInitError(
                f"Compressed payload does not start with gzip magic: found {head[:2].hex()}"
            )

        try:
            self._pending = self._inflater.decompress(head, self._chunk_size)
        except zlib.error as e:
            raise DecompressionInitError(f"Invalid gzip header: {e}") from e

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        """Fill `buffer` with decompressed bytes. Returns 0 at the end of the last member."""
        self._checkClosed()
        while not self._pending and not self._finished:
            self._fill()

        n = min(len(buffer), len(self._pending))
        memoryview(buffer)[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self) -> None:
        self._pending = b""
        super().close()

    def _fill(self) -> None:
        """Decompress the next piece of input into the pending buffer."""
        inflater = self._inflater

        if inflater.eof:
            # Member complete. Anything after it must be another member.
            data = inflater.unused_data or self._source.read(self._chunk_size)
            if not data:
                self._finished = True
                return
            logger.debug("Starting next gzip member")
            inflater = self._inflater = zlib.decompressobj(_GZIP_WBITS)
        elif inflater.unconsumed_tail:
            data = inflater.unconsumed_tail
        else:
            data = self._source.read(self._chunk_size)
            if not data:
                raise DecompressionError("Compressed payload ended before the gzip trailer")

        try:
            self._pending = inflater.decompress(data, self._chunk_size)
        except zlib.error as e:
            raise DecompressionError(f"Corrupt gzip data: {e}") from e
