from unittest.mock import AsyncMock

import pytest

from prism.core.config import PrismConfig
from prism.storage.memory import InMemoryLedgerStore


@pytest.fixture
def config() -> PrismConfig:
    return PrismConfig()


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def funded_store() -> InMemoryLedgerStore:
    """Pool holds 1000.000 GOLOS against 2000.000000 GESTS outstanding."""
    return InMemoryLedgerStore(
        {
            "balances": [{"name": "gls.vesting", "balances": ["1000.000 GOLOS"], "payments": []}],
            "vestingstats": [{"stat": {"supply": "2000.000000 GESTS"}}],
        }
    )


@pytest.fixture
def mock_chain():
    chain = AsyncMock()
    chain.fetch_account = AsyncMock(return_value={"account_name": "alice", "stake_info": {"staked": 10}})
    return chain
