"""Fixed-point asset codec.

An asset string is `"<integer>.<fraction> <SYMBOL>"`. The number of
fraction digits (`decs`) is the scale; it is fixed per semantic quantity
(shares 6, liquid tokens 3) and cannot be inferred from a single value.

Functions
---------
- decode_asset: text → `Asset` (integer units + scale + symbol).
- encode_asset: `Asset` → text; exact inverse of `decode_asset`.
- parse_asset_decimal: text → `AssetDecimal` keeping the original literal.
- format_quantity: `Asset` → text via a decimal shift.

Every malformed input raises `MalformedAssetError`; nothing returns a
partial value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from prism.core.errors import InvalidScaleError, MalformedAssetError

_DIGITS = re.compile(r"[0-9]+")


@dataclass(slots=True, frozen=True)
class Asset:
    """Integer units of `symbol` at scale `decs` (value = amount / 10**decs)."""

    symbol: str
    amount: int
    decs: int


@dataclass(slots=True, frozen=True)
class AssetDecimal:
    """Asset literal kept next to its arbitrary-precision value."""

    raw: str
    value: Decimal
    symbol: str | None


def decode_asset(text: Any) -> Asset:
    """Decode `"123.456 GOLOS"` into `Asset("GOLOS", 123456, 3)`."""
    if not isinstance(text, str):
        raise MalformedAssetError(text, "not a string")

    parts = text.split(" ")
    if len(parts) != 2:
        raise MalformedAssetError(text, "expected '<amount> <SYMBOL>'")
    number, symbol = parts
    if not symbol:
        raise MalformedAssetError(text, "missing symbol")
    if number.count(".") != 1:
        raise MalformedAssetError(text, "missing decimal point")

    int_part, frac_part = number.split(".")
    sign = ""
    if int_part.startswith("-"):
        sign, int_part = "-", int_part[1:]
    if not _DIGITS.fullmatch(int_part) or not _DIGITS.fullmatch(frac_part):
        raise MalformedAssetError(text, "non-digit characters")

    return Asset(symbol=symbol, amount=int(sign + int_part + frac_part), decs=len(frac_part))


def encode_asset(asset: Asset) -> str:
    """Render `asset` with exactly `decs` fraction digits."""
    sign = "-" if asset.amount < 0 else ""
    if asset.decs == 0:
        return f"{asset.amount} {asset.symbol}"
    whole, frac = divmod(abs(asset.amount), 10**asset.decs)
    return f"{sign}{whole}.{frac:0{asset.decs}d} {asset.symbol}"


def parse_asset_decimal(text: Any) -> AssetDecimal:
    """Split `text` into its literal, decimal value and symbol."""
    if not text:
        raise MalformedAssetError(text, "asset is not defined")
    if not isinstance(text, str):
        raise MalformedAssetError(text, "not a string")

    raw, _, symbol = text.partition(" ")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise MalformedAssetError(text, "not a number") from None
    if not value.is_finite():
        raise MalformedAssetError(text, "not a number")
    return AssetDecimal(raw=raw, value=value, symbol=symbol or None)


def format_quantity(asset: Asset) -> str:
    """Shift integer units by `-decs` places and append the symbol.

    Public helper for callers holding a decoded `Asset`; the conversion
    engine renders its results with `encode_asset`.
    """
    shifted = Decimal(asset.amount).scaleb(-asset.decs)
    return f"{shifted:f} {asset.symbol}"


def asset_symbol(text: Any) -> str:
    """Symbol after the space separator; the amount may have any precision."""
    if not isinstance(text, str):
        raise MalformedAssetError(text, "not a string")
    _, _, symbol = text.partition(" ")
    if not symbol or " " in symbol:
        raise MalformedAssetError(text, "missing symbol")
    return symbol


def check_decs(asset: Asset, required: int) -> None:
    """Raise `InvalidScaleError` unless `asset` has exactly `required` fraction digits."""
    if asset.decs != required:
        raise InvalidScaleError(asset.decs, required)
