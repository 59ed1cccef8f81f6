"""
Wire format constants for the filebox container.

Layout (all integers big-endian, unsigned)::

    [magic: 2][header_length: 2][header: header_length][gzip payload ... EOF]

Header layout::

    [upload_date: 5][api_key_id: 1][mime_len: 2][mime][name_len: 2][name]
"""

from __future__ import annotations

from typing import Final

from filebox.types import Uint8, Uint16, Uint40

MAGIC: Final = b"\xfa\xfa"
"""Marker every container starts with."""

HEADER_LENGTH_BYTES: Final = Uint16.byte_length()
"""Width of the header length field that follows the magic."""

TIMESTAMP_BYTES: Final = Uint40.byte_length()
"""Width of the upload timestamp in whole Unix seconds."""

API_KEY_ID_BYTES: Final = Uint8.byte_length()
"""Width of the API key index."""

STRING_LENGTH_BYTES: Final = Uint16.byte_length()
"""Width of the length prefix in front of each text field."""

MAX_STRING_BYTES: Final = int(Uint16.max_value())
"""Longest text field, in encoded bytes, that the length prefix can describe."""

MAX_HEADER_BYTES: Final = int(Uint16.max_value())
"""Longest encoded header the header length field can describe."""

TEXT_ENCODING: Final = "utf-8"
"""Encoding of the text fields."""

TEXT_ERRORS: Final = "surrogateescape"
"""Codec error handler so undecodable bytes survive a decode/encode round trip."""
