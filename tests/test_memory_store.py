from datetime import datetime, timezone
from pathlib import Path

import pytest

from prism.storage.memory import InMemoryLedgerStore, matches


def test_matches_operators() -> None:
    doc = {"n": 5, "s": "gls", "nested": {"k": 1}}

    assert matches(doc, {"n": 5, "nested.k": 1})
    assert matches(doc, {"n": {"$gt": 4, "$lte": 5}})
    assert not matches(doc, {"n": {"$lt": 5}})
    assert matches(doc, {"s": {"$ne": "other"}})
    assert not matches(doc, {"s": {"$ne": "gls"}})
    assert matches(doc, {"missing": {"$ne": "gls"}})
    assert not matches(doc, {"missing": {"$gt": 0}})
    assert matches(doc, {"s": {"$in": ["a", "gls"]}})
    assert matches(doc, None)


def test_matches_rejects_unknown_operator() -> None:
    with pytest.raises(ValueError):
        matches({"n": 1}, {"n": {"$regex": "1"}})


@pytest.mark.asyncio
async def test_update_and_find(store: InMemoryLedgerStore) -> None:
    await store.insert("tokens", {"sym": "GOLOS", "supply": "1.000 GOLOS"})

    assert await store.update_one("tokens", {"sym": "GOLOS"}, {"supply": "2.000 GOLOS"})
    assert not await store.update_one("tokens", {"sym": "CYBER"}, {"supply": "2.0000 CYBER"})
    assert await store.find("tokens") == [{"sym": "GOLOS", "supply": "2.000 GOLOS"}]
    assert await store.find_one("tokens", {"sym": "CYBER"}) is None


@pytest.mark.asyncio
async def test_returned_documents_are_copies(store: InMemoryLedgerStore) -> None:
    await store.insert("balances", {"name": "alice", "balances": ["1.000 GOLOS"]})

    doc = await store.find_one("balances", {"name": "alice"})
    doc["balances"].append("2.0000 CYBER")

    assert (await store.find_one("balances"))["balances"] == ["1.000 GOLOS"]


@pytest.mark.asyncio
async def test_aggregate_pipeline(store: InMemoryLedgerStore) -> None:
    for n, user in [(3, "bob"), (1, "carol"), (2, "bob")]:
        await store.insert("items", {"n": n, "userId": user, "hidden": True})
    await store.insert("usermetas", {"userId": "bob", "username": "Bob", "extra": 1})

    out = await store.aggregate(
        "items",
        [
            {"$match": {"n": {"$gte": 2}}},
            {"$sort": {"n": -1}},
            {"$lookup": {"from": "usermetas", "localField": "userId", "foreignField": "userId", "as": "meta"}},
            {"$project": {"_id": False, "n": True, "meta.username": True}},
        ],
    )

    assert out == [
        {"n": 3, "meta": [{"username": "Bob"}]},
        {"n": 2, "meta": [{"username": "Bob"}]},
    ]


@pytest.mark.asyncio
async def test_aggregate_rejects_unknown_stage(store: InMemoryLedgerStore) -> None:
    with pytest.raises(ValueError):
        await store.aggregate("items", [{"$group": {}}])


@pytest.mark.asyncio
async def test_dump_and_load_roundtrip(tmp_path: Path) -> None:
    when = datetime(2019, 8, 1, 12, 0, tzinfo=timezone.utc)
    store = InMemoryLedgerStore({"withdrawals": [{"owner": "alice", "next_payout": when}]})
    path = tmp_path / "state.json"

    await store.dump(path)
    loaded = await InMemoryLedgerStore.load(path)

    assert await loaded.find("withdrawals") == [{"owner": "alice", "next_payout": when}]
    assert await loaded.find_one("withdrawals", {"next_payout": {"$gt": datetime(2019, 1, 1, tzinfo=timezone.utc)}})


@pytest.mark.asyncio
async def test_load_missing_file(tmp_path: Path) -> None:
    store = await InMemoryLedgerStore.load(tmp_path / "absent.json")
    assert store.snapshot() == {}


def test_naive_datetimes_compare_as_utc() -> None:
    aware = datetime(2019, 8, 1, 12, 0, tzinfo=timezone.utc)
    doc = {"expiration": datetime(2019, 8, 1, 13, 0)}

    assert matches(doc, {"expiration": {"$gt": aware}})
    assert not matches(doc, {"expiration": {"$lt": aware}})
    assert matches({"expiration": "2019-08-01T13:00:00"}, {"expiration": {"$gt": aware}})


@pytest.mark.asyncio
async def test_sort_mixes_naive_and_aware_datetimes(store: InMemoryLedgerStore) -> None:
    await store.insert("items", {"n": 1, "at": datetime(2019, 8, 1, 14, 0)})
    await store.insert("items", {"n": 2, "at": datetime(2019, 8, 1, 13, 0, tzinfo=timezone.utc)})

    out = await store.aggregate("items", [{"$sort": {"at": 1}}, {"$project": {"n": True}}])

    assert out == [{"n": 2}, {"n": 1}]
