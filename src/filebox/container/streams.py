"""Helpers for working with caller-supplied byte streams."""

from __future__ import annotations

from typing import IO, Any

from filebox.types import InvalidArgumentError, ShortReadError


def require_stream(value: Any, argument: str, method: str) -> None:
    """
    Check that `value` is a stream exposing `method`.

    Raises:
        InvalidArgumentError: If `value` is None or has no callable `method`.
    """
    if value is None:
        raise InvalidArgumentError(argument, "a stream is required, got None")
    if not callable(getattr(value, method, None)):
        raise InvalidArgumentError(
            argument, f"{type(value).__name__} has no {method}() method"
        )


def read_upto(stream: IO[bytes], count: int) -> bytes:
    """Read until `count` bytes arrived or the stream ended, whichever comes first."""
    chunks: list[bytes] = []
    received = 0
    while received < count:
        chunk = stream.read(count - received)
        if not chunk:
            break
        chunks.append(chunk)
        received += len(chunk)
    return b"".join(chunks)


def read_exact(stream: IO[bytes], count: int, what: str) -> bytes:
    """
    Read exactly `count` bytes from `stream`.

    Raises:
        ShortReadError: If the stream ends before `count` bytes arrived.
    """
    data = read_upto(stream, count)
    if len(data) < count:
        raise ShortReadError(what, expected_bytes=count, actual_bytes=len(data))
    return data


def copy_stream(source: IO[bytes], destination: IO[bytes], buffer_size: int) -> int:
    """Copy `source` to `destination` until end of file. Returns the bytes copied."""
    copied = 0
    while True:
        chunk = source.read(buffer_size)
        if not chunk:
            return copied
        destination.write(chunk)
        copied += len(chunk)


class CountingWriter:
    """Write-through wrapper that counts the bytes handed to the wrapped stream."""

    def __init__(self, stream: IO[bytes]) -> None:
        self._stream = stream
        self.count = 0

    def write(self, data: bytes) -> int:
        written = self._stream.write(data)
        # Some writers return None instead of a count.
        n = len(data) if written is None else written
        self.count += n
        return n

    def flush(self) -> None:
        flush = getattr(self._stream, "flush", None)
        if flush is not None:
            flush()
