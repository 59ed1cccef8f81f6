"""Test helpers for filebox unit tests."""

from __future__ import annotations

from .mocks import (
    FailingCloseStream,
    FailingFlushStream,
    FailingStream,
    NotReadyStream,
    TrackingStream,
    TrickleStream,
)

__all__ = [
    "FailingCloseStream",
    "FailingFlushStream",
    "FailingStream",
    "NotReadyStream",
    "TrackingStream",
    "TrickleStream",
]
