"""Action and event handlers.

Action handlers receive `(ctx, action, trx)`; event handlers receive
`(ctx, event)`. Every write is either an append (Transfer, VestingChange)
or an upsert by natural key, so a replayed transaction converges to the
same documents.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from prism import constants
from prism.codec.asset import asset_symbol
from prism.core.errors import InvalidActionObjectError
from prism.core.interfaces import ILedgerStore
from prism.core.models import (
    Action,
    Balance,
    Event,
    Token,
    Transfer,
    TrxMeta,
    UserMeta,
    VestingBalance,
    VestingChange,
    VestingStat,
)
from prism.dispersal.specs import DispersalContext, EventRoutes

logger = logging.getLogger(__name__)


# ---------- helper functions ----------


def _require_args(action: Action) -> dict[str, Any]:
    if action.args is None:
        raise InvalidActionObjectError()
    return action.args


def _require_field(event: Event, name: str) -> Any:
    value = event.args.get(name)
    if value is None:
        raise InvalidActionObjectError(f"Invalid action object: {event.event} event without {name!r}")
    return value


async def upsert(store: ILedgerStore, collection: str, key: Mapping[str, Any], document: dict[str, Any]) -> bool:
    """Update the document matching `key`, or insert it. Return True on update."""
    if await store.find_one(collection, key) is not None:
        await store.update_one(collection, key, document)
        return True
    await store.insert(collection, document)
    return False


async def dispatch_events(ctx: DispersalContext, routes: EventRoutes, events: Iterable[Event]) -> None:
    """Apply every matching route to every event, both in order."""
    for event in events:
        for route, handler in routes:
            if route.matches(event):
                await handler(ctx, event)


# ---------- action handlers ----------


async def handle_transfer(ctx: DispersalContext, action: Action, trx: TrxMeta) -> None:
    args = _require_args(action)
    transfer = Transfer(
        trx_id=trx.trx_id,
        block=trx.block,
        timestamp=trx.timestamp,
        sender=args.get("from"),
        receiver=args.get("to"),
        quantity=args.get("quantity"),
        memo=args.get("memo"),
    )
    await ctx.store.insert(constants.TRANSFERS, transfer.to_document())
    logger.info("Created transfer object: %s", transfer)

    await dispatch_events(ctx, ctx.token_events, action.events)


async def handle_token_events(ctx: DispersalContext, action: Action, trx: TrxMeta) -> None:
    _require_args(action)
    await dispatch_events(ctx, ctx.token_events, action.events)


async def handle_vesting_events(ctx: DispersalContext, action: Action, trx: TrxMeta) -> None:
    _require_args(action)
    await dispatch_events(ctx, ctx.vesting_events, action.events)


async def handle_change_vest(ctx: DispersalContext, action: Action, trx: TrxMeta) -> None:
    args = _require_args(action)
    change = VestingChange(
        trx_id=trx.trx_id,
        block=trx.block,
        timestamp=trx.timestamp,
        who=args.get("who"),
        diff=args.get("diff"),
    )
    await ctx.store.insert(constants.VESTING_CHANGES, change.to_document())
    logger.info("Created vesting change object: %s", change)


async def handle_update_meta(ctx: DispersalContext, action: Action, trx: TrxMeta) -> None:
    args = _require_args(action)
    meta = UserMeta(user_id=args.get("account"), username=(args.get("meta") or {}).get("name"))
    if not meta.user_id:
        raise InvalidActionObjectError("Invalid action object: updatemeta without account")

    updated = await upsert(ctx.store, constants.USER_METAS, meta.key(), meta.to_document())
    logger.info("%s meta data of user %s: %s", "Changed" if updated else "Created", meta.user_id, meta)


# ---------- token events ----------


async def handle_balance_event(ctx: DispersalContext, event: Event) -> None:
    account = _require_field(event, "account")
    text = _require_field(event, "balance")

    doc = await ctx.store.find_one(constants.BALANCES, {"name": account})
    if doc is None:
        balance = Balance(name=account)
        balance.set_balance(text)
        await ctx.store.insert(constants.BALANCES, balance.to_document())
        logger.info("Created balance object of user %s: %s", account, text)
        return

    balance = Balance.from_document(doc)
    balance.set_balance(text)
    await ctx.store.update_one(constants.BALANCES, balance.key(), {"balances": balance.to_document()["balances"]})
    logger.info("Updated balance object of user %s: %s", account, text)


async def handle_currency_event(ctx: DispersalContext, event: Event) -> None:
    supply = _require_field(event, "supply")
    token = Token(
        sym=asset_symbol(supply),
        issuer=event.args.get("issuer"),
        supply=supply,
        max_supply=event.args.get("max_supply"),
    )
    updated = await upsert(ctx.store, constants.TOKENS, token.key(), token.to_document())
    logger.info("%s %s token info: %s", "Updated" if updated else "Created", token.sym, token)


# ---------- vesting events ----------


async def handle_vesting_stat_event(ctx: DispersalContext, event: Event) -> None:
    stat = VestingStat(stat=dict(event.args))
    # singleton: the empty filter addresses the only document
    updated = await upsert(ctx.store, constants.VESTING_STATS, {}, stat.to_document())
    logger.info("%s vesting stat: %s", "Updated" if updated else "Created", stat.stat)


async def handle_vesting_balance_event(ctx: DispersalContext, event: Event) -> None:
    if "vesting" not in event.args:
        logger.debug("Skipping balance event without vesting fields: %s", event.args)
        return

    vesting = VestingBalance(
        account=_require_field(event, "account"),
        vesting=event.args.get("vesting"),
        delegated=event.args.get("delegated"),
        received=event.args.get("received"),
    )
    updated = await upsert(ctx.store, constants.VESTING_BALANCES, vesting.key(), vesting.to_document())
    logger.info(
        "%s vesting balance object of user %s: %s",
        "Updated" if updated else "Created",
        vesting.account,
        vesting,
    )
