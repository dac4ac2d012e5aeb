import asyncio

import pytest

from homebudget.domain import Theme
from homebudget.events import THEME_CHANGED, EventBus
from homebudget.refresh import PeriodicRefresher
from homebudget.services import BudgetService
from homebudget.storage import THEME_KEY, InMemoryRecordStore, RecordRepository, StorageError
from homebudget.theme import ThemeSettings


class BrokenStore(InMemoryRecordStore):
    async def set_many(self, items):
        raise StorageError("read-only")


@pytest.mark.asyncio
async def test_theme_defaults_to_light():
    settings = ThemeSettings(RecordRepository(InMemoryRecordStore()))
    assert await settings.load() is Theme.LIGHT
    assert settings.loaded
    assert not settings.is_dark


@pytest.mark.asyncio
async def test_theme_loads_saved_preference():
    store = InMemoryRecordStore({THEME_KEY: "dark"})
    settings = ThemeSettings(RecordRepository(store))
    await settings.load()
    assert settings.is_dark
    assert settings.palette()["background"] == "#0F172A"


@pytest.mark.asyncio
async def test_toggle_persists_and_notifies():
    store = InMemoryRecordStore()
    bus = EventBus()
    seen = []
    bus.subscribe(THEME_CHANGED, lambda e, p: seen.append(p["theme"]) or {})
    settings = ThemeSettings(RecordRepository(store), bus)

    assert await settings.toggle() is Theme.DARK
    assert await store.get(THEME_KEY) == "dark"
    assert await settings.toggle() is Theme.LIGHT
    assert await store.get(THEME_KEY) == "light"
    assert seen == ["dark", "light"]


@pytest.mark.asyncio
async def test_toggle_rolls_back_when_save_fails():
    settings = ThemeSettings(RecordRepository(BrokenStore()))
    with pytest.raises(StorageError):
        await settings.toggle()
    assert settings.theme is Theme.LIGHT


@pytest.mark.asyncio
async def test_clearing_data_resets_theme_to_light():
    store = InMemoryRecordStore({THEME_KEY: "dark"})
    repo = RecordRepository(store)
    bus = EventBus()
    settings = ThemeSettings(repo, bus)
    await settings.load()
    assert settings.is_dark

    assert (await BudgetService(repo, bus).clear_all()).is_right()
    assert settings.theme is Theme.LIGHT
    assert settings.plotly_template() == "plotly_white"
    assert await repo.load_theme() is Theme.LIGHT


@pytest.mark.asyncio
async def test_refresher_runs_until_stopped():
    calls = []

    async def load():
        calls.append(1)

    refresher = PeriodicRefresher(load, interval=0.01)
    refresher.start()
    await asyncio.sleep(0.05)
    assert refresher.running
    await refresher.stop()
    assert not refresher.running

    count = len(calls)
    assert count >= 2
    await asyncio.sleep(0.03)
    assert len(calls) == count


@pytest.mark.asyncio
async def test_refresher_survives_failing_load():
    async def load():
        raise StorageError("offline")

    refresher = PeriodicRefresher(load, interval=0.01)
    refresher.start()
    await asyncio.sleep(0.035)
    await refresher.stop()
    assert refresher.runs >= 2


@pytest.mark.asyncio
async def test_refresher_trigger_and_idempotent_start():
    calls = []

    async def load():
        calls.append(1)

    refresher = PeriodicRefresher(load, interval=60)
    await refresher.trigger()
    assert calls == [1]

    refresher.start()
    refresher.start()
    await asyncio.sleep(0)
    await refresher.stop()
    await refresher.stop()
    assert len(calls) == 2
