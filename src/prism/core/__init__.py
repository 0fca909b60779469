"""Core configuration, error taxonomy and collaborator interfaces.

This package provides:
- Configuration classes (PrismConfig, ChainConfig)
- Error kinds and exceptions (PrismError and its subclasses)

Feed models and ledger records live in `prism.core.models`, and the store /
chain protocols in `prism.core.interfaces`.
"""

from prism.core.config import ChainConfig, PrismConfig
from prism.core.errors import (
    DataAbsentError,
    ErrorKind,
    InvalidActionObjectError,
    InvalidScaleError,
    MalformedAssetError,
    PrismError,
    ValidationError,
)

__all__ = [
    "ChainConfig",
    "PrismConfig",
    "DataAbsentError",
    "ErrorKind",
    "InvalidActionObjectError",
    "InvalidScaleError",
    "MalformedAssetError",
    "PrismError",
    "ValidationError",
]
