"""Unit tests for share ↔ token conversion."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from prism.core.config import PrismConfig
from prism.core.errors import DataAbsentError, InvalidScaleError, MalformedAssetError
from prism.storage.memory import InMemoryLedgerStore
from prism.vesting.conversion import VestingConverter, calculate_convert_amount, calculate_next_payout


def _store(pool: str, supply: str) -> InMemoryLedgerStore:
    return InMemoryLedgerStore(
        {
            "balances": [{"name": "gls.vesting", "balances": ["7.0000 CYBER", pool], "payments": []}],
            "vestingstats": [{"stat": {"supply": supply}}],
        }
    )


class TestConversion:
    """Pool 1000.000 GOLOS against 2000.000000 GESTS: one share is half a token."""

    @pytest.mark.asyncio
    async def test_shares_to_token(self, funded_store: InMemoryLedgerStore) -> None:
        converter = VestingConverter(funded_store)
        assert await converter.shares_to_token("500.000000 GESTS") == "250.000 GOLOS"

    @pytest.mark.asyncio
    async def test_token_to_shares(self, funded_store: InMemoryLedgerStore) -> None:
        converter = VestingConverter(funded_store)
        assert await converter.token_to_shares("250.000 GOLOS") == "500.000000 GESTS"

    @pytest.mark.asyncio
    async def test_pool_entry_found_by_symbol(self) -> None:
        converter = VestingConverter(_store("1000.000 GOLOS", "2000.000000 GESTS"))
        assert await converter.shares_to_token("2.000000 GESTS") == "1.000 GOLOS"

    @pytest.mark.asyncio
    async def test_pool_with_zero_precision_entry(self) -> None:
        store = InMemoryLedgerStore(
            {
                "balances": [{"name": "gls.vesting", "balances": ["5 POINT", "1000.000 GOLOS"]}],
                "vestingstats": [{"stat": {"supply": "2000.000000 GESTS"}}],
            }
        )
        assert await VestingConverter(store).shares_to_token("2.000000 GESTS") == "1.000 GOLOS"

    @pytest.mark.asyncio
    async def test_convert_vesting_to_token_modes(self, funded_store: InMemoryLedgerStore) -> None:
        converter = VestingConverter(funded_store)

        assert await converter.convert_vesting_to_token("1.000000 GESTS", "string") == "0.500 GOLOS"
        parsed = await converter.convert_vesting_to_token("1.000000 GESTS", "parsed")
        assert parsed.raw == "0.500"
        assert parsed.value == Decimal("0.5")
        assert parsed.symbol == "GOLOS"


class TestRounding:
    """Integer units are truncated before re-encoding."""

    def test_calculate_convert_amount_truncates(self) -> None:
        assert calculate_convert_amount(10, 2, 3) == 6
        assert calculate_convert_amount(-10, 2, 3) == -6

    @pytest.mark.asyncio
    async def test_shares_to_token_drops_remainder(self) -> None:
        converter = VestingConverter(_store("1000.000 GOLOS", "3000.000000 GESTS"))

        assert await converter.shares_to_token("1.000000 GESTS") == "0.333 GOLOS"
        assert await converter.shares_to_token("0.002999 GESTS") == "0.000 GOLOS"

    @pytest.mark.asyncio
    async def test_token_to_shares_drops_remainder(self) -> None:
        converter = VestingConverter(_store("3000.000 GOLOS", "1000.000000 GESTS"))

        assert await converter.token_to_shares("0.001 GOLOS") == "0.000333 GESTS"


class TestValidation:
    @pytest.mark.asyncio
    async def test_shares_scale_must_be_six(self, funded_store: InMemoryLedgerStore) -> None:
        with pytest.raises(InvalidScaleError) as exc:
            await VestingConverter(funded_store).shares_to_token("500.000 GESTS")
        assert exc.value.code == 805

    @pytest.mark.asyncio
    async def test_token_scale_must_be_three(self, funded_store: InMemoryLedgerStore) -> None:
        with pytest.raises(InvalidScaleError):
            await VestingConverter(funded_store).token_to_shares("250.000000 GOLOS")

    @pytest.mark.asyncio
    async def test_malformed_input(self, funded_store: InMemoryLedgerStore) -> None:
        with pytest.raises(MalformedAssetError):
            await VestingConverter(funded_store).shares_to_token("500 GESTS")

    @pytest.mark.asyncio
    async def test_missing_stat(self) -> None:
        store = InMemoryLedgerStore({"balances": [{"name": "gls.vesting", "balances": ["1.000 GOLOS"]}]})

        with pytest.raises(DataAbsentError) as exc:
            await VestingConverter(store).shares_to_token("1.000000 GESTS")
        assert exc.value.to_payload() == {"code": 811, "message": "Data is absent in base"}

    @pytest.mark.asyncio
    async def test_missing_pool_balance(self) -> None:
        store = InMemoryLedgerStore({"vestingstats": [{"stat": {"supply": "1.000000 GESTS"}}]})

        with pytest.raises(DataAbsentError):
            await VestingConverter(store).token_to_shares("1.000 GOLOS")

    @pytest.mark.asyncio
    async def test_pool_without_liquid_symbol(self) -> None:
        store = InMemoryLedgerStore(
            {
                "balances": [{"name": "gls.vesting", "balances": ["1.0000 CYBER"]}],
                "vestingstats": [{"stat": {"supply": "1.000000 GESTS"}}],
            }
        )

        with pytest.raises(DataAbsentError):
            await VestingConverter(store).shares_to_token("1.000000 GESTS")

    @pytest.mark.asyncio
    async def test_zero_supply(self) -> None:
        with pytest.raises(DataAbsentError):
            await VestingConverter(_store("1.000 GOLOS", "0.000000 GESTS")).shares_to_token("1.000000 GESTS")


class TestVestingInfo:
    @pytest.mark.asyncio
    async def test_no_stat(self, store: InMemoryLedgerStore) -> None:
        assert await VestingConverter(store).get_vesting_info() == {}

    @pytest.mark.asyncio
    async def test_stat(self, funded_store: InMemoryLedgerStore) -> None:
        assert await VestingConverter(funded_store).get_vesting_info() == {"stat": {"supply": "2000.000000 GESTS"}}


class TestVestingPosition:
    @pytest.mark.asyncio
    async def test_no_vesting_balance(self, funded_store: InMemoryLedgerStore) -> None:
        assert await VestingConverter(funded_store).assemble_vesting_position("alice") == {}

    @pytest.mark.asyncio
    async def test_position_with_withdrawal(self, funded_store: InMemoryLedgerStore) -> None:
        payout = datetime(2019, 8, 1, 12, 0, tzinfo=timezone.utc)
        await funded_store.insert(
            "vestingbalances",
            {
                "account": "alice",
                "vesting": "200.000000 GESTS",
                "delegated": "10.000000 GESTS",
                "received": "0.000000 GESTS",
            },
        )
        await funded_store.insert(
            "withdrawals",
            {
                "owner": "alice",
                "quantity": "20.000000 GESTS",
                "to_withdraw": "100.000000 GESTS",
                "remaining_payments": 5,
                "next_payout": payout,
            },
        )
        converter = VestingConverter(funded_store, PrismConfig(withdraw_interval_s=3600))

        position = await converter.assemble_vesting_position("alice")

        assert position == {
            "account": "alice",
            "vesting": {"GESTS": "200.000000", "GOLOS": "100.000"},
            "delegated": {"GESTS": "10.000000", "GOLOS": "5.000"},
            "received": {"GESTS": "0.000000", "GOLOS": "0.000"},
            "withdraw": {
                "quantity": "10.000 GOLOS",
                "remainingPayments": 5,
                "nextPayout": datetime(2019, 8, 1, 13, 0, tzinfo=timezone.utc),
                "toWithdraw": "50.000 GOLOS",
            },
        }
        # projection only: the stored payout is unchanged
        assert (await funded_store.find_one("withdrawals", {"owner": "alice"}))["next_payout"] == payout

    def test_calculate_next_payout(self) -> None:
        ts = datetime(2019, 1, 1, 23, 59, 30)
        assert calculate_next_payout(ts, 45) == datetime(2019, 1, 2, 0, 0, 15)
