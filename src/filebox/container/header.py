"""
Container header record and its binary codec.

The header carries the metadata stored alongside an uploaded file::

    offset  size  field
    0       5     upload_date, whole Unix seconds
    5       1     api_key_id
    6       2+n   mime_type (2-byte length n, then n bytes)
    8+n     2+m   original_name (2-byte length m, then m bytes)

There is no padding and no version field.
"""

from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

from pydantic import field_validator

from filebox.types import (
    InvalidHeaderFieldError,
    ShortReadError,
    StrictBaseModel,
    TruncatedHeaderError,
    Uint8,
)

from .constants import API_KEY_ID_BYTES, TIMESTAMP_BYTES
from .primitives import (
    read_length_prefixed_string,
    read_uint,
    write_length_prefixed_string,
    write_uint,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
"""Reference point for the on-wire timestamp."""

_ONE_SECOND = timedelta(seconds=1)


class FileHeader(StrictBaseModel):
    """Metadata stored at the front of every container."""

    upload_date: datetime
    """When the upload was received. Naive values are taken as UTC."""

    api_key_id: Uint8
    """Index of the API key used for the upload. Only meaningful to its owner."""

    mime_type: str
    """Caller-supplied MIME type. Not checked against any registry."""

    original_name: str
    """Caller-supplied original file name."""

    @field_validator("upload_date", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        # Negative seconds would wrap to the far end of the 40-bit field.
        if value < EPOCH:
            raise ValueError(f"upload_date {value.isoformat()} is before the Unix epoch")
        return value

    @property
    def unix_seconds(self) -> int:
        """Upload date as whole seconds since the Unix epoch, rounded down."""
        return (self.upload_date - EPOCH) // _ONE_SECOND

    def truncated(self) -> FileHeader:
        """Return a copy whose upload date is cut to whole seconds, as stored on the wire."""
        return self.copy(upload_date=self.upload_date.replace(microsecond=0))

    def encode_bytes(self) -> bytes:
        """Serialize the header. See `encode_header`."""
        return encode_header(self)

    @classmethod
    def decode_bytes(cls, data: bytes) -> FileHeader:
        """Deserialize a header. See `decode_header`."""
        return decode_header(data)


def encode_header(header: FileHeader) -> bytes:
    """
    Serialize `header` into its binary form.

    Sub-second precision is dropped. Text fields longer than 65535 encoded
    bytes overflow their length prefix and produce a corrupt encoding.
    """
    with io.BytesIO() as buffer:
        write_uint(header.unix_seconds, TIMESTAMP_BYTES, buffer)
        buffer.write(header.api_key_id.to_bytes())
        write_length_prefixed_string(header.mime_type, buffer)
        write_length_prefixed_string(header.original_name, buffer)
        return buffer.getvalue()


def decode_header(data: bytes) -> FileHeader:
    """
    Deserialize a header produced by `encode_header`.

    Bytes after the last field are ignored.

    Raises:
        TruncatedHeaderError: If any field extends past the end of `data`.
        InvalidHeaderFieldError: If the timestamp is past the largest `datetime`.
    """
    with io.BytesIO(data) as stream:
        # Start of the field being read, reported on truncation.
        offset = 0
        try:
            seconds = read_uint(TIMESTAMP_BYTES, stream, "upload_date")
            offset = stream.tell()
            api_key_id = Uint8(read_uint(API_KEY_ID_BYTES, stream, "api_key_id"))
            offset = stream.tell()
            mime_type, _ = read_length_prefixed_string(stream, "mime_type")
            offset = stream.tell()
            original_name, _ = read_length_prefixed_string(stream, "original_name")
        except ShortReadError as e:
            raise TruncatedHeaderError(
                e.what,
                expected_bytes=e.expected_bytes,
                actual_bytes=e.actual_bytes,
                offset=offset,
            ) from e

    try:
        upload_date = EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        # The field reaches year 36812; datetime stops at 9999.
        raise InvalidHeaderFieldError(
            "upload_date",
            offset=0,
            detail=f"{seconds} seconds is past the largest representable date",
        ) from None

    return FileHeader(
        upload_date=upload_date,
        api_key_id=api_key_id,
        mime_type=mime_type,
        original_name=original_name,
    )
