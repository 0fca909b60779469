"""Vesting share ↔ liquid token conversion engine."""

from prism.vesting.conversion import (
    SupplyAndBalance,
    VestingConverter,
    calculate_convert_amount,
    calculate_next_payout,
)

__all__ = [
    "SupplyAndBalance",
    "VestingConverter",
    "calculate_convert_amount",
    "calculate_next_payout",
]
