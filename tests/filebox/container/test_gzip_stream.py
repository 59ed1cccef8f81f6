"""Tests for the incremental gzip reader."""

from __future__ import annotations

import gzip
import io

import pytest

from filebox.container.gzip_stream import GZIP_FIXED_HEADER_BYTES, GzipReader
from filebox.types import DecompressionError, DecompressionInitError
from tests.filebox.helpers import TrackingStream

SAMPLE = b"Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 300


class TestConstruction:
    """Tests for the eager header check."""

    def test_consumes_fixed_header_only(self) -> None:
        """Exactly the 10-byte member header is read up front."""
        source = io.BytesIO(gzip.compress(SAMPLE))
        GzipReader(source)
        assert source.tell() == GZIP_FIXED_HEADER_BYTES

    def test_empty_source(self) -> None:
        """An empty source cannot hold a gzip header."""
        with pytest.raises(DecompressionInitError, match="0 bytes"):
            GzipReader(io.BytesIO(b""))

    def test_short_source(self) -> None:
        """A source shorter than the fixed header is rejected."""
        with pytest.raises(DecompressionInitError, match="too short"):
            GzipReader(io.BytesIO(b"\x1f\x8b\x08"))

    def test_wrong_magic(self) -> None:
        """Other formats are rejected by their leading bytes."""
        with pytest.raises(DecompressionInitError, match="504b"):
            GzipReader(io.BytesIO(b"PK\x03\x04" + bytes(32)))

    def test_unknown_method(self) -> None:
        """A method byte other than deflate is rejected."""
        with pytest.raises(DecompressionInitError, match="Invalid gzip header"):
            GzipReader(io.BytesIO(b"\x1f\x8b\x07" + bytes(32)))


class TestReading:
    """Tests for decompressing member data."""

    def test_single_member(self) -> None:
        """A standard gzip stream decompresses fully."""
        assert GzipReader(io.BytesIO(gzip.compress(SAMPLE))).read() == SAMPLE

    def test_multiple_members(self) -> None:
        """Concatenated members decompress to the concatenated data."""
        data = gzip.compress(b"first member, ") + gzip.compress(b"second member")
        assert GzipReader(io.BytesIO(data)).read() == b"first member, second member"

    def test_empty_member_between_members(self) -> None:
        """Empty members contribute nothing."""
        data = gzip.compress(b"a") + gzip.compress(b"") + gzip.compress(b"b")
        assert GzipReader(io.BytesIO(data), chunk_size=3).read() == b"ab"

    @pytest.mark.parametrize("chunk_size", [1, 5, 64, 1 << 20])
    def test_chunk_sizes(self, chunk_size: int) -> None:
        """Output is independent of the chunk size."""
        reader = GzipReader(io.BytesIO(gzip.compress(SAMPLE)), chunk_size=chunk_size)
        assert reader.read() == SAMPLE

    def test_bounded_reads(self) -> None:
        """read(n) never returns more than n bytes."""
        reader = GzipReader(io.BytesIO(gzip.compress(SAMPLE)))
        parts = []
        while chunk := reader.read(1000):
            assert len(chunk) <= 1000
            parts.append(chunk)
        assert b"".join(parts) == SAMPLE

    def test_header_with_name_field(self) -> None:
        """Optional header fields after the fixed part are handled."""
        out = io.BytesIO()
        with gzip.GzipFile(filename="upload.bin", mode="wb", fileobj=out, mtime=0) as f:
            f.write(SAMPLE)
        assert GzipReader(io.BytesIO(out.getvalue())).read() == SAMPLE

    def test_does_not_close_source(self) -> None:
        """Closing the reader leaves the source open."""
        source = TrackingStream(gzip.compress(SAMPLE))
        reader = GzipReader(source)
        reader.close()
        assert source.close_calls == 0

    def test_read_after_close(self) -> None:
        """A closed reader refuses reads."""
        reader = GzipReader(io.BytesIO(gzip.compress(SAMPLE)))
        reader.close()
        with pytest.raises(ValueError):
            reader.read()


class TestCorruption:
    """Tests for damaged payloads past the header."""

    def test_missing_trailer(self) -> None:
        """A stream cut before the trailer fails."""
        data = gzip.compress(SAMPLE)[:-4]
        with pytest.raises(DecompressionError, match="ended before the gzip trailer"):
            GzipReader(io.BytesIO(data)).read()

    def test_invalid_block(self) -> None:
        """Garbage deflate data fails."""
        data = gzip.compress(b"")[:GZIP_FIXED_HEADER_BYTES] + b"\xff" * 32
        with pytest.raises(DecompressionError, match="Corrupt gzip data"):
            GzipReader(io.BytesIO(data)).read()

    def test_checksum_mismatch(self) -> None:
        """A damaged CRC fails once the trailer is reached."""
        data = bytearray(gzip.compress(SAMPLE))
        data[-8] ^= 0xFF
        with pytest.raises(DecompressionError):
            GzipReader(io.BytesIO(bytes(data))).read()

    def test_trailing_garbage(self) -> None:
        """Bytes after the last member must form another member."""
        data = gzip.compress(b"abc") + b"trailing garbage"
        with pytest.raises(DecompressionError):
            GzipReader(io.BytesIO(data)).read()
