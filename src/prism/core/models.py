"""Feed models and ledger records.

This module defines:
- `Transaction`, `Action`, `Event`: the upstream feed shape, validated with
  pydantic when raw dicts are handed in.
- `TrxMeta`: the per-transaction fields copied onto append-only records.
- Ledger records (`Transfer`, `Balance`, `Token`, ...) with their document
  (de)serialization for the ledger store.

Design notes
------------
- Every upserted record knows its natural key (`key()`), used as the store
  filter, so replays converge instead of duplicating.
- `Balance` keeps its amounts in ordered mappings keyed by symbol; the list
  shape only exists in the stored document.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from prism.codec.asset import asset_symbol

# === Feed ===


class Event(BaseModel):
    code: str | None = None
    event: str
    args: dict[str, Any] = Field(default_factory=dict)


class Action(BaseModel):
    code: str
    receiver: str
    action: str
    args: dict[str, Any] | None = None
    events: list[Event] = Field(default_factory=list)


class Transaction(BaseModel):
    id: str
    block_num: int
    block_time: Any = None
    actions: list[Action] = Field(default_factory=list)


@dataclass(slots=True, frozen=True)
class TrxMeta:
    """Transaction-level fields shared by append-only records."""

    trx_id: str
    block: int
    timestamp: Any

    @staticmethod
    def from_transaction(trx: Transaction) -> TrxMeta:
        return TrxMeta(trx_id=trx.id, block=trx.block_num, timestamp=trx.block_time)


# === Append-only records ===


@dataclass(slots=True)
class Transfer:
    trx_id: str
    block: int
    timestamp: Any
    sender: str | None
    receiver: str | None
    quantity: str | None
    memo: str | None

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class VestingChange:
    trx_id: str
    block: int
    timestamp: Any
    who: str | None
    diff: Any

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


# === Upserted records ===


def _by_symbol(entries: list[str] | None) -> dict[str, str]:
    out: dict[str, str] = {}
    for text in entries or []:
        out[asset_symbol(text)] = text
    return out


@dataclass(slots=True)
class Balance:
    """Liquid balances of one account, at most one entry per symbol."""

    name: str
    balances: dict[str, str] = field(default_factory=dict)
    payments: dict[str, str] = field(default_factory=dict)

    def key(self) -> dict[str, Any]:
        return {"name": self.name}

    def set_balance(self, text: str) -> bool:
        """Store `text` under its symbol; return True if an entry was replaced."""
        sym = asset_symbol(text)
        replaced = sym in self.balances
        self.balances[sym] = text  # replacing keeps the original position
        return replaced

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "balances": list(self.balances.values()),
            "payments": list(self.payments.values()),
        }

    @staticmethod
    def from_document(doc: dict[str, Any]) -> Balance:
        return Balance(
            name=doc["name"],
            balances=_by_symbol(doc.get("balances")),
            payments=_by_symbol(doc.get("payments")),
        )


@dataclass(slots=True)
class Token:
    sym: str
    issuer: str | None
    supply: str | None
    max_supply: str | None

    def key(self) -> dict[str, Any]:
        return {"sym": self.sym}

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class VestingStat:
    """Singleton holding the raw stat payload; `stat["supply"]` is the share total."""

    stat: dict[str, Any]

    def to_document(self) -> dict[str, Any]:
        return {"stat": dict(self.stat)}


@dataclass(slots=True)
class VestingBalance:
    account: str
    vesting: str | None
    delegated: str | None
    received: str | None

    def key(self) -> dict[str, Any]:
        return {"account": self.account}

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class UserMeta:
    user_id: str
    username: str | None

    def key(self) -> dict[str, Any]:
        return {"userId": self.user_id}

    def to_document(self) -> dict[str, Any]:
        return {"userId": self.user_id, "username": self.username}


# === Read-only records (written by other services) ===


@dataclass(slots=True)
class Withdrawal:
    owner: str
    quantity: str
    to_withdraw: str
    remaining_payments: int
    next_payout: datetime

    @staticmethod
    def from_document(doc: dict[str, Any]) -> Withdrawal:
        next_payout = doc["next_payout"]
        if isinstance(next_payout, str):
            next_payout = datetime.fromisoformat(next_payout)
        return Withdrawal(
            owner=doc["owner"],
            quantity=doc["quantity"],
            to_withdraw=doc["to_withdraw"],
            remaining_payments=int(doc.get("remaining_payments") or 0),
            next_payout=next_payout,
        )
