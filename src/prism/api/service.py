"""Public operations and the request boundary.

`PrismService` wires the disperser, conversion engine and query builder
over one store, and exposes:

1) typed operations (`disperse`, `get_balance`, ...) for in-process callers;
2) `handle(method, params)`, which validates raw request arguments, runs the
   operation and turns any `PrismError` into its `{code, message}` payload.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import asdict
from typing import Any

import pydantic

from prism import constants
from prism.api.params import extract_argument_list, extract_single_argument
from prism.codec.asset import AssetDecimal
from prism.core.config import PrismConfig
from prism.core.errors import PrismError, ValidationError
from prism.core.interfaces import IChainClient, ILedgerStore
from prism.dispersal.disperser import Disperser, DisperseStats, RawTransaction
from prism.queries.builder import QueryBuilder
from prism.vesting.conversion import VestingConverter

logger = logging.getLogger(__name__)

RequestHandler = Callable[[Any], Awaitable[Any]]


class PrismService:
    """Facade over the ledger services.

    Parameters
    ----------
    store : ILedgerStore
        Shared ledger store.
    config : PrismConfig | None
        Routing / conversion configuration, built once at startup.
    chain : IChainClient | None
        Chain client for stake lookups; passed explicitly, never global.
    """

    def __init__(
        self,
        store: ILedgerStore,
        config: PrismConfig | None = None,
        chain: IChainClient | None = None,
    ) -> None:
        self.config = config or PrismConfig()
        self.store = store
        self.disperser = Disperser(store, self.config)
        self.converter = VestingConverter(store, self.config)
        self.queries = QueryBuilder(store, self.converter, chain)
        self._methods: dict[str, RequestHandler] = {
            "disperse": self._disperse_request,
            "getBalance": self._get_balance_request,
            "getVestingInfo": self._get_vesting_info_request,
            "convertTokensToVesting": self._convert_tokens_request,
            "convertVestingToToken": self._convert_vesting_request,
            "getVestingDelegationProposals": self._proposals_request,
        }

    # ---- operations ----

    async def disperse(self, transactions: Iterable[RawTransaction]) -> DisperseStats:
        return await self.disperser.disperse(transactions)

    async def get_balance(
        self,
        user_id: str,
        currencies: Iterable[str] = (constants.ALL_CURRENCIES,),
        type: str | None = None,
        should_fetch_stake: bool = False,
    ) -> dict[str, Any]:
        return await self.queries.get_balance(user_id, currencies, type, should_fetch_stake)

    async def get_vesting_info(self) -> dict[str, Any]:
        return await self.converter.get_vesting_info()

    async def convert_tokens_to_vesting(self, tokens: str) -> str:
        return await self.converter.token_to_shares(tokens)

    async def convert_vesting_to_token(self, vesting: str, mode: str = "string") -> str | AssetDecimal:
        return await self.converter.convert_vesting_to_token(vesting, mode)

    async def get_vesting_delegation_proposals(self, app: str, user_id: str) -> list[dict[str, Any]]:
        return await self.queries.get_vesting_delegation_proposals(app, user_id)

    # ---- request boundary ----

    async def handle(self, method: str, params: Any = None) -> dict[str, Any]:
        """Run `method` with raw `params`; return `{"result": ...}` or `{"error": {...}}`."""
        try:
            handler = self._methods.get(method)
            if handler is None:
                raise ValidationError(f"Wrong arguments: unknown method {method!r}")
            return {"result": await handler(params)}
        except PrismError as e:
            logger.warning("%s failed: %s %s", method, e.code, e.message)
            return {"error": e.to_payload()}

    async def _disperse_request(self, params: Any) -> dict[str, Any]:
        transactions = params.get("transactions") if isinstance(params, dict) else params
        if not isinstance(transactions, list):
            raise ValidationError()
        try:
            stats = await self.disperse(transactions)
        except pydantic.ValidationError as e:
            logger.warning("disperse: malformed transaction: %s", e.errors(include_url=False))
            raise ValidationError() from e
        return asdict(stats)

    async def _get_balance_request(self, params: Any) -> dict[str, Any]:
        if isinstance(params, list):
            params = dict(zip(["userId", "currencies", "type", "shouldFetchStake"], params))
        user_id = extract_single_argument(params, "userId")
        args = extract_argument_list(params, ["currencies", "type", "shouldFetchStake"])
        currencies = args.get("currencies") or [constants.ALL_CURRENCIES]
        if isinstance(currencies, str):
            currencies = [currencies]
        if not isinstance(currencies, list) or not all(isinstance(c, str) for c in currencies):
            raise ValidationError()
        return await self.get_balance(
            user_id,
            currencies,
            args.get("type"),
            bool(args.get("shouldFetchStake")),
        )

    async def _get_vesting_info_request(self, params: Any) -> dict[str, Any]:
        return await self.get_vesting_info()

    async def _convert_tokens_request(self, params: Any) -> str:
        return await self.convert_tokens_to_vesting(extract_single_argument(params, "tokens"))

    async def _convert_vesting_request(self, params: Any) -> str:
        # responses carry the asset text; the parsed mode is for in-process callers only
        return await self.convert_vesting_to_token(extract_single_argument(params, "vesting"), "string")

    async def _proposals_request(self, params: Any) -> list[dict[str, Any]]:
        args = extract_argument_list(params, ["app", "userId"])
        app, user_id = args.get("app"), args.get("userId")
        if not isinstance(app, str) or not isinstance(user_id, str) or not user_id:
            raise ValidationError()
        return await self.get_vesting_delegation_proposals(app, user_id)
