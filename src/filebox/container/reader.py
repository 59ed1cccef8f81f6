"""
Container reader and the file handle it returns.

Reading a container happens in two stages:

1. `read_container` checks the magic marker and parses the header.
2. The returned `FileHandle` exposes the payload, either as the raw gzip
   bytes or decompressed on the fly.

Decompression is lazy. Callers that only need the header never build a
decompressor.


HANDLE STATES
-------------
::

    RawState(source, decompressor=None)
        |  set_mode(DECOMPRESSED): build decompressor once
        v
    DecompressedState(source, decompressor)
        |  set_mode(RAW): keep decompressor
        v
    RawState(source, decompressor)

Reads always go to the active end of the current state.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from os import PathLike
from typing import IO

from filebox.config import DEFAULT_CONFIG, ContainerConfig
from filebox.types import BadMagicError, InvalidArgumentError

from .constants import HEADER_LENGTH_BYTES, MAGIC
from .gzip_stream import GzipReader
from .header import FileHeader, decode_header
from .primitives import read_uint
from .streams import copy_stream, read_exact, read_upto, require_stream

logger = logging.getLogger(__name__)


class ReadMode(Enum):
    """Which bytes a `FileHandle` returns."""

    RAW = "raw"
    """The gzip-compressed payload exactly as stored."""

    DECOMPRESSED = "decompressed"
    """The original uploaded bytes."""


@dataclass(frozen=True, slots=True)
class RawState:
    """Reads come straight from the source."""

    source: IO[bytes]
    """The container stream, positioned inside the compressed payload."""

    decompressor: GzipReader | None = None
    """Decompressor kept from an earlier switch, if any."""

    @property
    def mode(self) -> ReadMode:
        return ReadMode.RAW

    @property
    def active(self) -> IO[bytes]:
        return self.source


@dataclass(frozen=True, slots=True)
class DecompressedState:
    """Reads go through the decompressor layered on the source."""

    source: IO[bytes]
    """The container stream feeding the decompressor."""

    decompressor: GzipReader
    """The one decompressor this handle will ever build."""

    @property
    def mode(self) -> ReadMode:
        return ReadMode.DECOMPRESSED

    @property
    def active(self) -> IO[bytes]:
        return self.decompressor


HandleState = RawState | DecompressedState
"""Every state a `FileHandle` can be in."""


def transition(
    state: HandleState,
    mode: ReadMode,
    open_decompressor: Callable[[IO[bytes]], GzipReader],
) -> HandleState:
    """
    Compute the state after switching to `mode`.

    `open_decompressor` is only called when moving to decompressed mode
    without an existing decompressor. Its errors propagate.

    Raises:
        InvalidArgumentError: If `mode` is not a `ReadMode`.
    """
    match mode:
        case ReadMode.RAW:
            return RawState(state.source, state.decompressor)
        case ReadMode.DECOMPRESSED:
            decompressor = state.decompressor
            if decompressor is None:
                decompressor = open_decompressor(state.source)
            return DecompressedState(state.source, decompressor)
        case _:
            raise InvalidArgumentError("mode", f"expected a ReadMode, got {mode!r}")


class FileHandle(io.RawIOBase):
    """
    An opened container: its header plus a readable payload.

    The handle owns the source stream and closes it in `close`. It starts in
    raw mode. Not safe for concurrent use from several threads.
    """

    def __init__(
        self,
        header: FileHeader,
        source: IO[bytes],
        *,
        config: ContainerConfig | None = None,
    ) -> None:
        self._state: HandleState = RawState(source)
        super().__init__()
        self._header = header
        self._config = config or DEFAULT_CONFIG

    @property
    def header(self) -> FileHeader:
        """The parsed container header."""
        return self._header

    @property
    def mode(self) -> ReadMode:
        """The current read mode."""
        return self._state.mode

    @property
    def state(self) -> HandleState:
        """The current state, for inspection."""
        return self._state

    def readable(self) -> bool:
        return True

    def set_mode(self, mode: ReadMode) -> None:
        """
        Switch between raw and decompressed reads.

        The first switch to decompressed mode builds the decompressor, which
        consumes the gzip member header from the source. Later switches reuse
        it, so reads continue where they left off.

        Raises:
            DecompressionInitError: If the payload is not a valid gzip stream.
            InvalidArgumentError: If `mode` is not a `ReadMode`.
        """
        self._checkClosed()
        self._state = transition(self._state, mode, self._open_decompressor)

    def readinto(self, buffer: bytearray | memoryview) -> int | None:  # type: ignore[override]
        """
        Read from the active source into `buffer`.

        Returns 0 at end of file, or None if a non-blocking source has no
        data ready.
        """
        self._checkClosed()
        data = self._state.active.read(len(buffer))
        if data is None:
            return None
        n = len(data)
        memoryview(buffer)[:n] = data
        return n

    def write_to(self, destination: IO[bytes]) -> int:
        """
        Copy the remaining bytes in the current mode to `destination`, then close.

        The handle is closed even if the copy fails.

        Returns:
            The number of bytes written to `destination`.

        Raises:
            InvalidArgumentError: If `destination` is not a writable stream.
        """
        require_stream(destination, "destination", "write")
        try:
            return copy_stream(self, destination, self._config.copy_buffer_size)
        finally:
            self.close()

    def close(self) -> None:
        """
        Close the decompressor, if built, then the source, if closable.

        Both are attempted. The first failure is re-raised after both ran.
        """
        if self.closed:
            return

        first_error: Exception | None = None
        for resource in (self._state.decompressor, self._state.source):
            close = getattr(resource, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.warning("Additional error while closing %r: %s", resource, e)
        super().close()

        if first_error is not None:
            raise first_error

    def _open_decompressor(self, source: IO[bytes]) -> GzipReader:
        logger.debug("Building decompressor for %r", self._header.original_name)
        return GzipReader(source, chunk_size=self._config.copy_buffer_size)


def read_header(source: IO[bytes]) -> tuple[FileHeader, int]:
    """
    Parse the magic marker and header, leaving `source` at the payload.

    Returns:
        The header and the number of bytes consumed from `source`.

    Raises:
        InvalidArgumentError: If `source` is not a readable stream.
        BadMagicError: If the first two bytes are not `FA FA`.
        ShortReadError: If the stream ends inside the header length or header.
        TruncatedHeaderError: If a header field runs past the declared length.
        InvalidHeaderFieldError: If the timestamp cannot be represented.
    """
    require_stream(source, "source", "read")

    # Strict check: both bytes must be the marker.
    magic = read_upto(source, len(MAGIC))
    if magic != MAGIC:
        raise BadMagicError(magic, MAGIC)

    header_length = read_uint(HEADER_LENGTH_BYTES, source, "header length")
    header = decode_header(read_exact(source, header_length, "header"))
    return header, len(MAGIC) + HEADER_LENGTH_BYTES + header_length


def read_container(source: IO[bytes], *, config: ContainerConfig | None = None) -> FileHandle:
    """
    Open a container stream.

    On success the returned handle owns `source`. On failure `source` is
    left open for the caller.

    Raises:
        InvalidArgumentError: If `source` is not a readable stream.
        BadMagicError: If the stream does not start with the marker.
        ShortReadError: If the stream ends inside the framing.
        TruncatedHeaderError: If the header is malformed.
        InvalidHeaderFieldError: If the timestamp cannot be represented.
    """
    header, consumed = read_header(source)
    logger.debug(
        "Read container header for %r (%s, %d bytes)",
        header.original_name,
        header.mime_type,
        consumed,
    )
    return FileHandle(header, source, config=config)


def open_container(
    path: str | PathLike[str], *, config: ContainerConfig | None = None
) -> FileHandle:
    """
    Open the container file at `path`.

    The file is closed again if the header cannot be read.
    """
    stream = open(path, "rb")
    try:
        return read_container(stream, config=config)
    except BaseException:
        stream.close()
        raise
