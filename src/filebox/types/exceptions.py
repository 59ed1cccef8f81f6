"""Exception hierarchy for the container codec."""

from __future__ import annotations


class ContainerError(Exception):
    """
    Base exception for all container-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidArgumentError(ContainerError):
    """
    Raised when an operation receives an absent or unusable argument.

    Raised before any stream is touched.

    Attributes:
        argument: Name of the offending argument.
        detail: Why the argument was rejected.
    """

    def __init__(self, argument: str, detail: str) -> None:
        self.argument = argument
        self.detail = detail
        super().__init__(f"Invalid argument '{argument}': {detail}")


class BadMagicError(ContainerError):
    """
    Raised when a stream does not begin with the container magic marker.

    Attributes:
        found: The leading bytes that were read instead.
    """

    def __init__(self, found: bytes, expected: bytes) -> None:
        self.found = found
        self.expected = expected
        super().__init__(
            f"Stream does not begin with magic {expected.hex()}: found {found.hex() or 'nothing'}"
        )


class ShortReadError(ContainerError):
    """
    Raised when a stream ends before a declared number of bytes arrived.

    Attributes:
        what: The field or framing element being read.
        expected_bytes: Number of bytes requested.
        actual_bytes: Number of bytes actually available.
    """

    def __init__(
        self,
        what: str,
        *,
        expected_bytes: int,
        actual_bytes: int,
    ) -> None:
        self.what = what
        self.expected_bytes = expected_bytes
        self.actual_bytes = actual_bytes
        super().__init__(
            f"Stream ended prematurely while reading {what}: "
            f"expected {expected_bytes} bytes, got {actual_bytes}"
        )


class TruncatedHeaderError(ShortReadError):
    """
    Raised when a header field's declared length runs past the header buffer.

    Attributes:
        offset: Byte offset inside the header where the field starts.
    """

    def __init__(
        self,
        what: str,
        *,
        expected_bytes: int,
        actual_bytes: int,
        offset: int,
    ) -> None:
        super().__init__(what, expected_bytes=expected_bytes, actual_bytes=actual_bytes)
        self.offset = offset
        self.message = f"Truncated header: {self.message} (at byte offset {offset})"
        self.args = (self.message,)


class InvalidHeaderFieldError(ContainerError):
    """
    Raised when a header field is complete but its value cannot be represented.

    Attributes:
        what: The header field.
        offset: Byte offset inside the header where the field starts.
        detail: Why the value was rejected.
    """

    def __init__(self, what: str, *, offset: int, detail: str) -> None:
        self.what = what
        self.offset = offset
        self.detail = detail
        super().__init__(f"Invalid header field {what} (at byte offset {offset}): {detail}")


class DecompressionInitError(ContainerError):
    """Raised when the payload does not start with a valid compressed stream header."""


class DecompressionError(ContainerError):
    """Raised when the compressed payload is corrupt past its header."""
