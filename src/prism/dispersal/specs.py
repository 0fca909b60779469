"""Dispatch primitives and registry typing.

Defines lightweight dataclasses describing how feed payloads are routed:
- `ActionKey`: the `(code, receiver, action)` triple an action handler is bound to
- `EventRoute`: an event name plus an optional contract code filter
- `DispersalContext`: what every handler receives (store, config, event routes)
- `ActionRegistry`: mapping from ActionKey → handler
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from prism.core.config import PrismConfig
from prism.core.interfaces import ILedgerStore
from prism.core.models import Action, Event, TrxMeta


@dataclass(frozen=True)
class ActionKey:
    """Routing key of one action handler."""

    code: str
    receiver: str
    action: str

    @staticmethod
    def of(action: Action) -> ActionKey:
        return ActionKey(code=action.code, receiver=action.receiver, action=action.action)


@dataclass(frozen=True)
class EventRoute:
    """Match events by name and, when `code` is set, by emitting contract."""

    event: str
    code: str | None = None  # None accepts any contract

    def matches(self, event: Event) -> bool:
        if event.event != self.event:
            return False
        return self.code is None or event.code == self.code


EventHandler = Callable[["DispersalContext", Event], Awaitable[None]]
EventRoutes = list[tuple[EventRoute, EventHandler]]


@dataclass(slots=True)
class DispersalContext:
    """
    Shared, read-only wiring for handlers (keeps handler signatures small).

    - `store` is an ILedgerStore: handlers only issue natural-key upserts
      and appends through it.
    - `token_events` / `vesting_events` are the nested event routes applied
      by the events-carrying action handlers, in order, to every event.
    """

    store: ILedgerStore
    config: PrismConfig
    token_events: EventRoutes = field(default_factory=list)
    vesting_events: EventRoutes = field(default_factory=list)


ActionHandler = Callable[[DispersalContext, Action, TrxMeta], Awaitable[None]]

# The full routing table keyed by (code, receiver, action).
ActionRegistry = dict[ActionKey, ActionHandler]
