"""Reusable type definitions for filebox."""

from .base import CamelModel, StrictBaseModel
from .exceptions import (
    BadMagicError,
    ContainerError,
    DecompressionError,
    DecompressionInitError,
    InvalidArgumentError,
    InvalidHeaderFieldError,
    ShortReadError,
    TruncatedHeaderError,
)
from .uint import BaseUint, Uint8, Uint16, Uint40

__all__ = [
    # Core types
    "BaseUint",
    "Uint8",
    "Uint16",
    "Uint40",
    "CamelModel",
    "StrictBaseModel",
    # Exceptions
    "ContainerError",
    "InvalidArgumentError",
    "BadMagicError",
    "ShortReadError",
    "TruncatedHeaderError",
    "InvalidHeaderFieldError",
    "DecompressionInitError",
    "DecompressionError",
]
