"""Event dispersal: feed transactions → ledger record upserts.

This package provides:
- Routing primitives (ActionKey, EventRoute, DispersalContext)
- The default routing tables (make_registry, event routes)
- Action / event handlers
- The Disperser service that drives a transaction feed through them
"""

from prism.dispersal.disperser import Disperser, DisperseStats
from prism.dispersal.registry import (
    add_handler,
    add_many,
    make_registry,
    make_token_event_routes,
    make_vesting_event_routes,
)
from prism.dispersal.specs import (
    ActionHandler,
    ActionKey,
    ActionRegistry,
    DispersalContext,
    EventRoute,
)

__all__ = [
    "Disperser",
    "DisperseStats",
    "add_handler",
    "add_many",
    "make_registry",
    "make_token_event_routes",
    "make_vesting_event_routes",
    "ActionHandler",
    "ActionKey",
    "ActionRegistry",
    "DispersalContext",
    "EventRoute",
]
