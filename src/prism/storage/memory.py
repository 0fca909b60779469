"""In-memory ledger store with JSON snapshots.

`InMemoryLedgerStore` implements `ILedgerStore` over plain dict documents.
It backs the CLI (state persisted between runs with `dump` / `load`) and the
test suite. Filters, `$set` updates and the aggregation stages follow the
document-store semantics the services rely on:

- filter values are either literals (equality) or operator maps
  (`$gt`, `$gte`, `$lt`, `$lte`, `$ne`, `$in`)
- `aggregate` supports `$match`, `$sort`, `$lookup`, `$project`
"""

from __future__ import annotations

import asyncio
import copy
import json
import os
from collections import defaultdict
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from prism.core.interfaces import Document, Filter, ILedgerStore

_MISSING = object()


def _get_path(doc: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path; return `_MISSING` if any segment is absent."""
    cur: Any = doc
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return _MISSING
        cur = cur[part]
    return cur


def _as_utc(value: datetime) -> datetime:
    # naive datetimes are stored as UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _sort_value(value: Any) -> Any:
    return _as_utc(value) if isinstance(value, datetime) else value


def _coerce_pair(a: Any, b: Any) -> tuple[Any, Any]:
    """Align datetime / ISO string pairs so snapshots compare like live values."""
    if isinstance(a, datetime) and isinstance(b, str):
        b = datetime.fromisoformat(b)
    elif isinstance(a, str) and isinstance(b, datetime):
        a = datetime.fromisoformat(a)
    if isinstance(a, datetime) and isinstance(b, datetime):
        return _as_utc(a), _as_utc(b)
    return a, b


def _ordered(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(value: Any, operand: Any) -> bool:
        if value is _MISSING or value is None:
            return False
        return op(*_coerce_pair(value, operand))

    return check


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": _ordered(lambda v, o: v > o),
    "$gte": _ordered(lambda v, o: v >= o),
    "$lt": _ordered(lambda v, o: v < o),
    "$lte": _ordered(lambda v, o: v <= o),
    "$ne": lambda v, o: (None if v is _MISSING else v) != o,
    "$in": lambda v, o: v is not _MISSING and v in o,
}


def _is_operator_map(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value) and all(str(k).startswith("$") for k in value)


def matches(doc: Mapping[str, Any], filter: Filter | None) -> bool:
    """Return True if `doc` satisfies every condition of `filter`."""
    for path, cond in (filter or {}).items():
        value = _get_path(doc, path)
        if _is_operator_map(cond):
            for op, operand in cond.items():
                check = _OPERATORS.get(op)
                if check is None:
                    raise ValueError(f"Unsupported filter operator {op!r}")
                if not check(value, operand):
                    return False
        elif value is _MISSING or value != cond:
            return False
    return True


def _project_value(value: Any, sub_paths: list[str]) -> Any:
    if isinstance(value, list):
        return [_project_value(v, sub_paths) for v in value]
    if isinstance(value, Mapping):
        return _project(value, {p: True for p in sub_paths})
    return value


def _project(doc: Mapping[str, Any], spec: Mapping[str, Any]) -> Document:
    """Inclusion projection with dotted paths (applied element-wise on lists)."""
    nested: dict[str, list[str]] = defaultdict(list)
    keep: list[str] = []
    for path, include in spec.items():
        if not include:
            continue
        head, _, rest = path.partition(".")
        if rest:
            nested[head].append(rest)
        else:
            keep.append(head)

    out: Document = {}
    for key in doc:
        if key in keep:
            out[key] = doc[key]
        elif key in nested:
            out[key] = _project_value(doc[key], nested[key])
    return out


class InMemoryLedgerStore(ILedgerStore):
    """Dict-backed document store.

    Documents are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, collections: Mapping[str, list[Document]] | None = None) -> None:
        self._collections: dict[str, list[Document]] = defaultdict(list)
        for name, docs in (collections or {}).items():
            self._collections[name] = copy.deepcopy(list(docs))

    # ---- ILedgerStore ----

    async def find_one(self, collection: str, filter: Filter | None = None) -> Document | None:
        for doc in self._collections[collection]:
            if matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def find(self, collection: str, filter: Filter | None = None) -> list[Document]:
        return [copy.deepcopy(d) for d in self._collections[collection] if matches(d, filter)]

    async def update_one(self, collection: str, filter: Filter, fields: Mapping[str, Any]) -> bool:
        for doc in self._collections[collection]:
            if matches(doc, filter):
                doc.update(copy.deepcopy(dict(fields)))
                return True
        return False

    async def insert(self, collection: str, document: Document) -> None:
        self._collections[collection].append(copy.deepcopy(document))

    async def aggregate(self, collection: str, pipeline: Sequence[Mapping[str, Any]]) -> list[Document]:
        docs = [copy.deepcopy(d) for d in self._collections[collection]]
        for stage in pipeline:
            if len(stage) != 1:
                raise ValueError(f"Pipeline stage must have exactly one operator: {stage!r}")
            (op, arg), = stage.items()
            match op:
                case "$match":
                    docs = [d for d in docs if matches(d, arg)]
                case "$sort":
                    # stable sorts applied from the least significant key
                    for path, direction in reversed(list(arg.items())):
                        docs.sort(key=lambda d, p=path: _sort_value(_get_path(d, p)), reverse=direction < 0)
                case "$lookup":
                    foreign = self._collections[arg["from"]]
                    for d in docs:
                        local = _get_path(d, arg["localField"])
                        d[arg["as"]] = [
                            copy.deepcopy(f)
                            for f in foreign
                            if local is not _MISSING and _get_path(f, arg["foreignField"]) == local
                        ]
                case "$project":
                    docs = [_project(d, arg) for d in docs]
                case _:
                    raise ValueError(f"Unsupported pipeline stage {op!r}")
        return docs

    # ---- snapshots ----

    def count(self, collection: str) -> int:
        return len(self._collections[collection])

    def snapshot(self) -> dict[str, list[Document]]:
        return {name: copy.deepcopy(docs) for name, docs in self._collections.items() if docs}

    async def dump(self, path: str | os.PathLike[str]) -> None:
        """Write all collections to `path` as JSON (datetimes tagged as `$date`)."""
        text = json.dumps(self.snapshot(), default=_encode_json, indent=2)
        await asyncio.to_thread(Path(path).write_text, text)

    @classmethod
    async def load(cls, path: str | os.PathLike[str]) -> InMemoryLedgerStore:
        """Load a snapshot written by `dump`; a missing file yields an empty store."""
        p = Path(path)
        if not p.exists():
            return cls()
        text = await asyncio.to_thread(p.read_text)
        return cls(json.loads(text, object_hook=_decode_json))


def _encode_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return {"$date": value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_json(obj: dict[str, Any]) -> Any:
    if set(obj) == {"$date"}:
        return datetime.fromisoformat(obj["$date"])
    return obj
