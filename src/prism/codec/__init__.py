"""Fixed-point asset codec (decode / encode / decimal parse)."""

from prism.codec.asset import (
    Asset,
    AssetDecimal,
    asset_symbol,
    check_decs,
    decode_asset,
    encode_asset,
    format_quantity,
    parse_asset_decimal,
)

__all__ = [
    "Asset",
    "AssetDecimal",
    "asset_symbol",
    "check_decs",
    "decode_asset",
    "encode_asset",
    "format_quantity",
    "parse_asset_decimal",
]
