from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from prism.core.config import PrismConfig
from prism.core.interfaces import ILedgerStore
from prism.core.models import Transaction, TrxMeta
from prism.dispersal.registry import make_registry, make_token_event_routes, make_vesting_event_routes
from prism.dispersal.specs import ActionKey, ActionRegistry, DispersalContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class DisperseStats:
    """
    Counters for one `disperse` call.

    - transactions: transactions fully processed
    - skipped: empty transactions logged and skipped
    - routed / ignored: actions with / without a registered handler
    """

    transactions: int = 0
    skipped: int = 0
    routed: int = 0
    ignored: int = 0


RawTransaction = Transaction | Mapping[str, Any] | None


# ---------------------------------------------------------------------------
# Domain service – Disperser
# ---------------------------------------------------------------------------


class Disperser:
    """
    Turns feed transactions into ledger upserts.

    The routing table and nested event routes are resolved once here; each
    action is then looked up by its `(code, receiver, action)` key. The
    disperser keeps no state between calls.

    Notes
    -----
    - Actions and events run strictly in array order.
    - A handler failure propagates and stops the current transaction; the
      handlers that already ran are not undone. Redelivery is safe because
      every write is an append or a natural-key upsert.
    """

    def __init__(
        self,
        store: ILedgerStore,
        config: PrismConfig | None = None,
        registry: ActionRegistry | None = None,
    ) -> None:
        config = config or PrismConfig()
        self._registry = registry if registry is not None else make_registry(config)
        self._ctx = DispersalContext(
            store=store,
            config=config,
            token_events=make_token_event_routes(config),
            vesting_events=make_vesting_event_routes(config),
        )

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    async def disperse(self, transactions: Iterable[RawTransaction]) -> DisperseStats:
        """Process `transactions` one at a time, in delivery order."""
        stats = DisperseStats()
        for raw in transactions:
            if not raw:
                logger.error("Empty transaction! But continue.")
                stats.skipped += 1
                continue
            trx = raw if isinstance(raw, Transaction) else Transaction.model_validate(raw)
            await self.disperse_transaction(trx, stats)
            stats.transactions += 1
        return stats

    async def disperse_transaction(self, trx: Transaction, stats: DisperseStats | None = None) -> None:
        stats = stats if stats is not None else DisperseStats()
        meta = TrxMeta.from_transaction(trx)

        for action in trx.actions:
            handler = self._registry.get(ActionKey.of(action))
            if handler is None:
                logger.debug("No handler for %s/%s:%s in %s", action.code, action.receiver, action.action, trx.id)
                stats.ignored += 1
                continue
            await handler(self._ctx, action, meta)
            stats.routed += 1
