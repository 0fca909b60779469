"""
builder.py
----------

Composite read views over the ledger collections.

Includes:
    - Account balances (liquid balances / payments and the vesting position)
    - Pending vesting delegation proposals addressed to an account

Every call re-reads the store; nothing is cached between calls.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from prism import constants
from prism.codec.asset import parse_asset_decimal
from prism.core.errors import ValidationError
from prism.core.interfaces import IChainClient, ILedgerStore
from prism.vesting.conversion import VestingConverter

logger = logging.getLogger(__name__)


class QueryBuilder:
    """Read side of the ledger.

    Args:
        store: Ledger store the views are assembled from.
        converter: Conversion engine used for the vesting position.
        chain: Optional chain client; required only for stake lookups.
    """

    def __init__(
        self,
        store: ILedgerStore,
        converter: VestingConverter,
        chain: IChainClient | None = None,
    ) -> None:
        self.store = store
        self.converter = converter
        self.chain = chain

    # =====================================================================
    # BALANCES
    # =====================================================================

    async def get_balance(
        self,
        user_id: str,
        currencies: Iterable[str] = (constants.ALL_CURRENCIES,),
        type: str | None = None,
        should_fetch_stake: bool = False,
    ) -> dict[str, Any]:
        """Assemble the balance view of one account.

        Args:
            user_id: Account name.
            currencies: Symbols to keep in the liquid view; "all" means every
                known token symbol.
            type: "liquid" drops the vesting view, "vesting" drops the liquid
                view, anything else keeps both.
            should_fetch_stake: Attach `stakeInfo` from the chain node.

        Returns:
            Dict with `userId` and the requested `vesting` / `liquid` / `stakeInfo` parts.
        """
        result: dict[str, Any] = {"userId": user_id}

        if type != "liquid":
            position = await self.converter.assemble_vesting_position(user_id)
            result["vesting"] = {
                "total": position.get("vesting"),
                "outDelegate": position.get("delegated"),
                "inDelegated": position.get("received"),
                "withdraw": position.get("withdraw"),
            }

        if type != "vesting":
            liquid = await self._liquid_view(user_id, currencies)
            if liquid is not None:
                result["liquid"] = liquid

        if should_fetch_stake:
            if self.chain is None:
                logger.warning("get_balance: stake requested but no chain client is configured")
                raise ValidationError("Wrong arguments: stake lookup is not available")
            account = await self.chain.fetch_account(user_id)
            result["stakeInfo"] = account.get("stake_info")

        return result

    async def _liquid_view(self, user_id: str, currencies: Iterable[str]) -> dict[str, Any] | None:
        doc = await self.store.find_one(constants.BALANCES, {"name": user_id})
        if doc is None:
            return None

        wanted = await self._resolve_currencies(currencies)
        liquid: dict[str, dict[str, str]] = {"balances": {}, "payments": {}}
        for part in ("balances", "payments"):
            for text in doc.get(part) or []:
                parsed = parse_asset_decimal(text)
                if parsed.symbol in wanted:
                    liquid[part][parsed.symbol] = parsed.raw
        return liquid

    async def _resolve_currencies(self, currencies: Iterable[str]) -> set[str]:
        wanted = set(currencies)
        if constants.ALL_CURRENCIES in wanted:
            tokens = await self.store.find(constants.TOKENS)
            return {t["sym"] for t in tokens}
        return wanted

    # =====================================================================
    # DELEGATION PROPOSALS
    # =====================================================================

    async def get_vesting_delegation_proposals(
        self,
        app: str,
        user_id: str,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Live, author-signed proposals addressed to `user_id`, soonest expiry first.

        Args:
            app: "gls" selects proposals of the gls community, anything else
                selects every other community.
            user_id: Recipient account.
            now: Reference time for expiry; defaults to the current UTC time.

        Returns:
            Proposals with `username` attached when the proposer's meta is known.
        """
        community = self.converter.config.community_id
        match: dict[str, Any] = {
            "toUserId": user_id,
            "expiration": {"$gt": now or datetime.now(timezone.utc)},
            "isSignedByAuthor": True,
            "communityId": community if app == community else {"$ne": community},
        }

        proposals = await self.store.aggregate(
            constants.DELEGATE_VESTING_PROPOSALS,
            [
                {"$match": match},
                {"$sort": {"expiration": 1}},
                {
                    "$lookup": {
                        "from": constants.USER_METAS,
                        "localField": "userId",
                        "foreignField": "userId",
                        "as": "usermeta",
                    }
                },
                {
                    "$project": {
                        "_id": False,
                        "proposer": True,
                        "proposalId": True,
                        "expiration": True,
                        "userId": True,
                        "data": True,
                        "usermeta.username": True,
                    }
                },
            ],
        )

        for proposal in proposals:
            usermeta = proposal.pop("usermeta", [])
            if usermeta:
                proposal["username"] = usermeta[0].get("username")
        return proposals
