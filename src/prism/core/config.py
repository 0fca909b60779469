from __future__ import annotations

from dataclasses import dataclass

from prism import constants


@dataclass(frozen=True)
class PrismConfig:
    """Configuration for dispersal routing and vesting conversion."""

    token_contract: str = constants.TOKEN_CONTRACT
    vesting_contract: str = constants.VESTING_CONTRACT
    control_contract: str = constants.CONTROL_CONTRACT
    social_contract: str = constants.SOCIAL_CONTRACT
    vesting_pool_account: str = constants.VESTING_CONTRACT  # holds the liquid side of the rate
    liquid_symbol: str = constants.LIQUID_SYMBOL
    liquid_decs: int = constants.LIQUID_DECS
    share_symbol: str = constants.SHARE_SYMBOL
    share_decs: int = constants.SHARE_DECS
    withdraw_interval_s: int = 120
    community_id: str = constants.GLS_COMMUNITY


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for the chain RPC client."""

    rpc_url: str
    timeout_s: int = 20
    max_connections: int = 16
