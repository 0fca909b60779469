from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

Document = dict[str, Any]
Filter = Mapping[str, Any]


# ---------------------------------------------------------------------------
# ILedgerStore
# ---------------------------------------------------------------------------

@runtime_checkable
class ILedgerStore(Protocol):
    """
    Abstract document store holding the ledger collections.

    Domain expectations:
    - Documents are plain dicts grouped by collection name.
    - Filters are equality maps; a value may instead be an operator map
      using `$gt`, `$gte`, `$lt`, `$lte`, `$ne` or `$in`.
    - Updates for one key are applied in the order they are issued.
    - No cross-document transactions: two reads may observe different
      points of the update timeline.
    """

    async def find_one(self, collection: str, filter: Filter | None = None) -> Document | None:
        """Return the first document matching `filter`, or None."""
        ...

    async def find(self, collection: str, filter: Filter | None = None) -> list[Document]:
        """Return every document matching `filter` in insertion order."""
        ...

    async def update_one(self, collection: str, filter: Filter, fields: Mapping[str, Any]) -> bool:
        """
        Set `fields` on the first document matching `filter`.

        Returns
        -------
        bool
            True if a document matched.
        """
        ...

    async def insert(self, collection: str, document: Document) -> None:
        """Insert a new document."""
        ...

    async def aggregate(self, collection: str, pipeline: Sequence[Mapping[str, Any]]) -> list[Document]:
        """
        Run a `$match` / `$sort` / `$lookup` / `$project` pipeline.

        Implementations:
        - InMemoryLedgerStore
        - A MongoDB collection's native `aggregate`
        """
        ...


# ---------------------------------------------------------------------------
# IChainClient
# ---------------------------------------------------------------------------

@runtime_checkable
class IChainClient(Protocol):
    """Chain node access, used only for account stake metadata."""

    async def fetch_account(self, user_id: str) -> dict[str, Any]:
        """Return the raw account object (including `stake_info`)."""
        ...
