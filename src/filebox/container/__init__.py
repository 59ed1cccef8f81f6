"""
The filebox container codec.

A container stores one uploaded file together with its metadata::

    [FA FA][header length: 2][header][gzip-compressed payload ... EOF]

Usage::

    from filebox.container import FileHeader, ReadMode, read_container, write_container

    with open("upload.fbx", "wb") as out, open("photo.png", "rb") as src:
        write_container(out, header, src)

    with read_container(open("upload.fbx", "rb")) as handle:
        handle.set_mode(ReadMode.DECOMPRESSED)
        data = handle.read()
"""

from .constants import MAGIC
from .gzip_stream import GzipReader
from .header import FileHeader, decode_header, encode_header
from .primitives import (
    read_length_prefixed_string,
    read_uint,
    write_length_prefixed_string,
    write_uint,
)
from .reader import (
    DecompressedState,
    FileHandle,
    RawState,
    ReadMode,
    open_container,
    read_container,
    read_header,
)
from .writer import write_container

__all__ = [
    # Container API
    "write_container",
    "read_container",
    "read_header",
    "open_container",
    "FileHandle",
    "ReadMode",
    "RawState",
    "DecompressedState",
    # Header
    "FileHeader",
    "encode_header",
    "decode_header",
    # Primitives
    "write_uint",
    "read_uint",
    "write_length_prefixed_string",
    "read_length_prefixed_string",
    # Compression
    "GzipReader",
    "MAGIC",
]
