"""Share ↔ token conversion.

The exchange rate is implicit: `pool_balance / total_shares`, where
`pool_balance` is the liquid balance held by the vesting pool account and
`total_shares` is the `supply` of the singleton vesting stat. The two
documents are read independently; a conversion may observe them at
different points of the update timeline.

All arithmetic is on integer units and truncates
(`amount * multiplier // divider`) before re-encoding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from prism import constants
from prism.codec.asset import (
    Asset,
    AssetDecimal,
    check_decs,
    decode_asset,
    encode_asset,
    parse_asset_decimal,
)
from prism.core.config import PrismConfig
from prism.core.errors import DataAbsentError
from prism.core.interfaces import ILedgerStore
from prism.core.models import Balance, VestingBalance, Withdrawal

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SupplyAndBalance:
    """Integer units of both sides of the rate."""

    balance: int  # pool liquid balance, liquid scale
    supply: int  # total vesting shares, share scale


def calculate_convert_amount(base: int, multiplier: int, divider: int) -> int:
    """Return `base * multiplier / divider` truncated toward zero."""
    product = base * multiplier
    quotient = abs(product) // divider
    return quotient if product >= 0 else -quotient


def calculate_next_payout(timestamp: datetime, interval_s: int) -> datetime:
    return timestamp + timedelta(seconds=interval_s)


class VestingConverter:
    """Converts between vesting shares and liquid tokens using stored counters.

    Parameters
    ----------
    store : ILedgerStore
        Source of the vesting stat, pool balance, vesting balances and
        withdrawals. Nothing is cached between calls.
    config : PrismConfig
        Symbols, scales, pool account and withdraw interval.
    """

    def __init__(self, store: ILedgerStore, config: PrismConfig | None = None) -> None:
        self.store = store
        self.config = config or PrismConfig()

    async def get_vesting_info(self) -> dict[str, Any]:
        """Return `{"stat": <payload>}`, or `{}` if no stat has been seen yet."""
        doc = await self.store.find_one(constants.VESTING_STATS)
        if doc is None:
            return {}
        return {"stat": doc["stat"]}

    async def supply_and_balance(self) -> SupplyAndBalance:
        cfg = self.config

        stat_doc = await self.store.find_one(constants.VESTING_STATS)
        if stat_doc is None or not stat_doc.get("stat", {}).get("supply"):
            logger.error("convert: no records about vesting stats in base")
            raise DataAbsentError()

        pool_doc = await self.store.find_one(constants.BALANCES, {"name": cfg.vesting_pool_account})
        pool_text = Balance.from_document(pool_doc).balances.get(cfg.liquid_symbol) if pool_doc else None
        if pool_text is None:
            logger.error("convert: no %s balance for %s account", cfg.liquid_symbol, cfg.vesting_pool_account)
            raise DataAbsentError()

        out = SupplyAndBalance(
            balance=decode_asset(pool_text).amount,
            supply=decode_asset(stat_doc["stat"]["supply"]).amount,
        )
        if out.balance <= 0 or out.supply <= 0:
            logger.error("convert: empty vesting pool (balance=%s, supply=%s)", out.balance, out.supply)
            raise DataAbsentError()
        return out

    async def shares_to_token(self, text: str) -> str:
        """Convert a share amount (scale 6) into liquid tokens (scale 3)."""
        cfg = self.config
        shares = decode_asset(text)
        check_decs(shares, cfg.share_decs)

        rate = await self.supply_and_balance()
        return encode_asset(
            Asset(
                symbol=cfg.liquid_symbol,
                amount=calculate_convert_amount(shares.amount, rate.balance, rate.supply),
                decs=cfg.liquid_decs,
            )
        )

    async def token_to_shares(self, text: str) -> str:
        """Convert liquid tokens (scale 3) into a share amount (scale 6)."""
        cfg = self.config
        tokens = decode_asset(text)
        check_decs(tokens, cfg.liquid_decs)

        rate = await self.supply_and_balance()
        return encode_asset(
            Asset(
                symbol=cfg.share_symbol,
                amount=calculate_convert_amount(tokens.amount, rate.supply, rate.balance),
                decs=cfg.share_decs,
            )
        )

    async def convert_vesting_to_token(self, vesting: str, mode: str = "string") -> str | AssetDecimal:
        """`mode == "string"` returns the asset text; anything else its decimal parse."""
        result = await self.shares_to_token(vesting)
        if mode == "string":
            return result
        return parse_asset_decimal(result)

    async def _raw_in_tokens(self, text: str) -> str:
        converted = await self.convert_vesting_to_token(text, mode="parsed")
        return converted.raw

    async def assemble_vesting_position(self, account: str) -> dict[str, Any]:
        """Vesting, delegated and received amounts in both units, plus any pending withdrawal."""
        doc = await self.store.find_one(constants.VESTING_BALANCES, {"account": account})
        if doc is None:
            return {}

        vb = VestingBalance(
            account=account,
            vesting=doc.get("vesting"),
            delegated=doc.get("delegated"),
            received=doc.get("received"),
        )
        position: dict[str, Any] = {"account": account}
        for name in ("vesting", "delegated", "received"):
            text = getattr(vb, name)
            position[name] = {
                self.config.share_symbol: parse_asset_decimal(text).raw,
                self.config.liquid_symbol: await self._raw_in_tokens(text),
            }

        position["withdraw"] = await self._withdraw_summary(account)
        return position

    async def _withdraw_summary(self, account: str) -> dict[str, Any]:
        doc = await self.store.find_one(constants.WITHDRAWALS, {"owner": account})
        if doc is None:
            return {}

        withdrawal = Withdrawal.from_document(doc)
        sym = self.config.liquid_symbol
        return {
            "quantity": f"{await self._raw_in_tokens(withdrawal.quantity)} {sym}",
            "remainingPayments": withdrawal.remaining_payments,
            "nextPayout": calculate_next_payout(withdrawal.next_payout, self.config.withdraw_interval_s),
            "toWithdraw": f"{await self._raw_in_tokens(withdrawal.to_withdraw)} {sym}",
        }
