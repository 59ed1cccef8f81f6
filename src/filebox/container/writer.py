"""
Container writer.

Frames a source stream with the magic marker and an encoded header, then
gzip-compresses the source into the destination::

    [FA FA][header length: 2][header][gzip stream of source]

Writing is not atomic. A failure part way leaves a truncated container in
the destination; callers that need atomicity write to a temporary location
and rename on success.
"""

from __future__ import annotations

import gzip
import logging
from typing import IO

from filebox.config import DEFAULT_CONFIG, ContainerConfig

from .constants import HEADER_LENGTH_BYTES, MAGIC, MAX_HEADER_BYTES
from .header import FileHeader, encode_header
from .primitives import write_uint
from .streams import CountingWriter, copy_stream, require_stream

logger = logging.getLogger(__name__)


def write_container(
    destination: IO[bytes],
    header: FileHeader,
    source: IO[bytes],
    *,
    config: ContainerConfig | None = None,
) -> int:
    """
    Write `header` and the compressed contents of `source` to `destination`.

    The compressor is closed before returning, also when the copy fails, so
    its trailer always reaches `destination`. `destination` is flushed only
    after a successful copy; a copy error is never replaced by a flush error.

    Returns:
        Bytes written to `destination`: marker, header length, header and the
        compressed payload. Not the size of the uncompressed source.

    Raises:
        InvalidArgumentError: If `destination` or `source` is not a stream.
            Nothing is written in that case.
        OSError: Any I/O failure of either stream, unchanged.
    """
    require_stream(destination, "destination", "write")
    require_stream(source, "source", "read")
    config = config or DEFAULT_CONFIG

    header_bytes = encode_header(header)
    if len(header_bytes) > MAX_HEADER_BYTES:
        logger.warning(
            "Encoded header for %r is %d bytes, over the %d byte limit; "
            "the container will not be readable",
            header.original_name[:64],
            len(header_bytes),
            MAX_HEADER_BYTES,
        )

    out = CountingWriter(destination)
    out.write(MAGIC)
    write_uint(len(header_bytes), HEADER_LENGTH_BYTES, out)
    out.write(header_bytes)
    framing_bytes = out.count

    # mtime=0 and an empty name keep the gzip header independent of the
    # destination and the clock.
    with gzip.GzipFile(
        filename="",
        mode="wb",
        compresslevel=config.compression_level,
        fileobj=out,  # type: ignore[arg-type]
        mtime=0,
    ) as compressor:
        payload_bytes = copy_stream(source, compressor, config.copy_buffer_size)
    out.flush()

    logger.debug(
        "Wrote container for %r: %d payload bytes -> %d bytes (%d framing)",
        header.original_name,
        payload_bytes,
        out.count,
        framing_bytes,
    )
    return out.count
