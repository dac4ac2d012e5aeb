import json

import pytest

from homebudget.domain import Frequency, GoalExpense, SavingsGoal, SpendingLimit, Theme, Transaction
from homebudget.storage import (
    GOAL_EXPENSES_KEY,
    GOALS_KEY,
    SPENDING_LIMITS_KEY,
    THEME_KEY,
    TRANSACTIONS_KEY,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordRepository,
    StorageError,
)


@pytest.mark.asyncio
async def test_empty_store_loads_defaults():
    repo = RecordRepository(InMemoryRecordStore())
    assert await repo.load_transactions() == ()
    assert await repo.load_goals() == ()
    assert await repo.load_goal_expenses() == ()
    assert await repo.load_limits() == SpendingLimit()
    assert await repo.load_theme() is Theme.LIGHT


@pytest.mark.asyncio
async def test_persisted_layout_uses_camel_case_keys():
    store = InMemoryRecordStore()
    repo = RecordRepository(store)
    await repo.save_transactions((Transaction("t1", "Tea", 2.0, "d", 10, "Food"),))
    await repo.save_limits(SpendingLimit(weekly=100))
    await repo.save_goal_transition(
        (SavingsGoal("g1", "Trip", 500, "2025-12-31", 200, 50, 20, 1),),
        (GoalExpense("e1", "g1", "dep", 20, "d", 2, Frequency.WEEKLY),),
    )
    await repo.save_theme(Theme.DARK)

    assert json.loads(await store.get(TRANSACTIONS_KEY)) == [
        {"id": "t1", "name": "Tea", "price": 2.0, "date": "d", "timestamp": 10, "category": "Food"}
    ]
    assert json.loads(await store.get(SPENDING_LIMITS_KEY)) == {"weekly": 100, "monthly": 0, "yearly": 0}
    goal = json.loads(await store.get(GOALS_KEY))[0]
    assert goal["targetAmount"] == 500
    assert goal["savedAmount"] == 20
    expense = json.loads(await store.get(GOAL_EXPENSES_KEY))[0]
    assert expense["goalId"] == "g1"
    assert expense["frequency"] == "weekly"
    assert await store.get(THEME_KEY) == "dark"


@pytest.mark.asyncio
async def test_reads_records_written_by_older_clients():
    store = InMemoryRecordStore({
        TRANSACTIONS_KEY: json.dumps([{"id": 17, "name": "Bus", "price": 3, "date": "x", "timestamp": 5}]),
        SPENDING_LIMITS_KEY: json.dumps({"weekly": 10, "monthly": 40}),
    })
    repo = RecordRepository(store)
    trans = await repo.load_transactions()
    assert trans[0].id == "17"
    assert trans[0].category == ""
    assert (await repo.load_limits()).yearly == 0


@pytest.mark.asyncio
async def test_clear_then_load_returns_empty():
    store = InMemoryRecordStore()
    repo = RecordRepository(store)
    await repo.save_transactions((Transaction("t1", "Tea", 2, "", 1, ""),))
    await repo.save_theme(Theme.DARK)
    await repo.clear()
    assert await repo.load_transactions() == ()
    assert await repo.load_theme() is Theme.LIGHT
    assert store.keys() == ()


@pytest.mark.asyncio
async def test_corrupt_value_raises_storage_error():
    repo = RecordRepository(InMemoryRecordStore({TRANSACTIONS_KEY: "{not json"}))
    with pytest.raises(StorageError) as err:
        await repo.load_transactions()
    assert err.value.key == TRANSACTIONS_KEY

    repo = RecordRepository(InMemoryRecordStore({GOALS_KEY: json.dumps({"id": "g1"})}))
    with pytest.raises(StorageError):
        await repo.load_goals()


@pytest.mark.asyncio
async def test_limits_that_are_not_an_object_raise_storage_error():
    for raw in ("[]", "3", '"weekly"'):
        repo = RecordRepository(InMemoryRecordStore({SPENDING_LIMITS_KEY: raw}))
        with pytest.raises(StorageError) as err:
            await repo.load_limits()
        assert err.value.key == SPENDING_LIMITS_KEY


@pytest.mark.asyncio
async def test_out_of_range_timestamp_raises_storage_error():
    tx = {"id": "t1", "name": "x", "price": 1, "date": "", "timestamp": 10 ** 17}
    repo = RecordRepository(InMemoryRecordStore({TRANSACTIONS_KEY: json.dumps([tx])}))
    with pytest.raises(StorageError):
        await repo.load_transactions()

    expense = {"id": "e1", "goalId": "g1", "amount": 5, "timestamp": -(10 ** 17)}
    repo = RecordRepository(InMemoryRecordStore({GOAL_EXPENSES_KEY: json.dumps([expense])}))
    with pytest.raises(StorageError):
        await repo.load_goal_expenses()


@pytest.mark.asyncio
async def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    first = JsonFileRecordStore(path)
    await first.set_many({"a": "1", "b": "2"})
    await first.set("a", "3")

    second = JsonFileRecordStore(path)
    assert await second.get("a") == "3"
    assert await second.get("b") == "2"
    assert await second.get("missing") is None
    assert [p.name for p in path.parent.iterdir()] == ["store.json"]

    await second.clear()
    assert await first.get("b") is None


@pytest.mark.asyncio
async def test_json_file_store_missing_file_is_empty(tmp_path):
    store = JsonFileRecordStore(tmp_path / "none.json")
    assert await store.get(TRANSACTIONS_KEY) is None


@pytest.mark.asyncio
async def test_json_file_store_unreadable_document(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(StorageError):
        await JsonFileRecordStore(path).get("a")
