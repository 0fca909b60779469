"""Default routing tables for the disperser.

This module exposes:
- `make_registry(config)` → ActionRegistry prefilled with the ledger handlers
- `add_handler(registry, key, handler)` → bind one handler
- `add_many(registry, entries)` → bind several
- `make_token_event_routes()` / `make_vesting_event_routes()` → nested event routes

Both tables are built once at startup; routing never inspects payloads.
"""

from __future__ import annotations

from collections.abc import Iterable

from prism.core.config import PrismConfig
from prism.dispersal import handlers
from prism.dispersal.specs import ActionHandler, ActionKey, ActionRegistry, EventRoute, EventRoutes


def make_registry(config: PrismConfig) -> ActionRegistry:
    """Build the action routing table for the configured contract names."""
    token = config.token_contract
    reg: ActionRegistry = {}
    add_many(
        reg,
        [
            (ActionKey(token, token, "transfer"), handlers.handle_transfer),
            (ActionKey(token, token, "issue"), handlers.handle_token_events),
            (ActionKey(token, token, "create"), handlers.handle_token_events),
            (ActionKey(token, config.vesting_contract, "transfer"), handlers.handle_vesting_events),
            (
                ActionKey(config.control_contract, config.control_contract, "changevest"),
                handlers.handle_change_vest,
            ),
            (
                ActionKey(config.social_contract, config.social_contract, "updatemeta"),
                handlers.handle_update_meta,
            ),
        ],
    )
    return reg


def add_handler(registry: ActionRegistry, key: ActionKey, handler: ActionHandler) -> None:
    """Bind `handler` to `key`, replacing any previous binding."""
    registry[key] = handler


def add_many(registry: ActionRegistry, entries: Iterable[tuple[ActionKey, ActionHandler]]) -> None:
    """Bind many handlers."""
    for key, handler in entries:
        add_handler(registry, key, handler)


def make_token_event_routes(config: PrismConfig) -> EventRoutes:
    """Balance then currency, both emitted by the token contract."""
    return [
        (EventRoute("balance", config.token_contract), handlers.handle_balance_event),
        (EventRoute("currency", config.token_contract), handlers.handle_currency_event),
    ]


def make_vesting_event_routes(config: PrismConfig) -> EventRoutes:
    """Stat then vesting balance; the emitting contract is not checked."""
    return [
        (EventRoute("stat"), handlers.handle_vesting_stat_event),
        (EventRoute("balance"), handlers.handle_vesting_balance_event),
    ]
