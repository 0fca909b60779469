from __future__ import annotations

from .api.service import PrismService
from .codec.asset import Asset, AssetDecimal, decode_asset, encode_asset, format_quantity, parse_asset_decimal
from .core.config import ChainConfig, PrismConfig
from .core.errors import (
    DataAbsentError,
    ErrorKind,
    InvalidActionObjectError,
    InvalidScaleError,
    MalformedAssetError,
    PrismError,
    ValidationError,
)
from .dispersal.disperser import Disperser, DisperseStats
from .queries.builder import QueryBuilder
from .storage.memory import InMemoryLedgerStore
from .vesting.conversion import VestingConverter

__all__ = [
    "PrismService",
    "Asset",
    "AssetDecimal",
    "decode_asset",
    "encode_asset",
    "format_quantity",
    "parse_asset_decimal",
    "ChainConfig",
    "PrismConfig",
    "DataAbsentError",
    "ErrorKind",
    "InvalidActionObjectError",
    "InvalidScaleError",
    "MalformedAssetError",
    "PrismError",
    "ValidationError",
    "Disperser",
    "DisperseStats",
    "QueryBuilder",
    "InMemoryLedgerStore",
    "VestingConverter",
]
