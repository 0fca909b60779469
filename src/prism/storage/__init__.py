"""Storage components for the ledger collections.

This package provides:
- InMemoryLedgerStore: dict-backed document store with JSON snapshots
"""

from prism.storage.memory import InMemoryLedgerStore

__all__ = [
    "InMemoryLedgerStore",
]
