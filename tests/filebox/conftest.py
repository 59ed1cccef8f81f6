"""
Shared pytest fixtures for filebox tests.

Provides the reference header and payload used across the container tests.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from filebox.container import FileHeader, write_container

SCENARIO_TIMESTAMP = 1481834107
"""Upload time of the reference header, in Unix seconds."""


@pytest.fixture
def scenario_header() -> FileHeader:
    """The reference header: a PNG screenshot uploaded with key 1."""
    return FileHeader(
        upload_date=datetime.fromtimestamp(SCENARIO_TIMESTAMP, tz=timezone.utc),
        api_key_id=1,
        mime_type="image/png",
        original_name="Screenshot at todo",
    )


@pytest.fixture
def payload() -> bytes:
    """A payload large enough to span several copy chunks."""
    line = b"The quick brown fox jumps over the lazy dog. 0123456789\n"
    return line * 5000 + bytes(range(256)) * 64


@pytest.fixture
def container_factory() -> Callable[[FileHeader, bytes], bytes]:
    """Factory that writes a header and payload into container bytes."""

    def _create(header: FileHeader, data: bytes) -> bytes:
        out = io.BytesIO()
        write_container(out, header, io.BytesIO(data))
        return out.getvalue()

    return _create
