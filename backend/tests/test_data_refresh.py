"""Data refresh job and settings tests."""
import pytest

from jobs.data_refresh import refresh_all, run_data_refresh
from services.result_cache import result_cache
from services.settings_service import (
    DATA_REFRESH_PATH,
    RefreshSettings,
    load_refresh_settings,
    save_refresh_settings,
)

from factories import FakeStore

pytestmark = pytest.mark.asyncio

MINUTE_MS = 60 * 1000
T0 = 1_767_225_600_000


def _store(**settings):
    return FakeStore({"settings": {"data_refresh": settings}}) if settings else FakeStore()


async def test_defaults_when_nothing_stored():
    settings = await load_refresh_settings(_store())
    assert settings.auto_refresh is True
    assert settings.refresh_interval == 5
    assert settings.last_refresh is None


async def test_invalid_stored_settings_fall_back_to_defaults():
    settings = await load_refresh_settings(_store(autoRefresh=False, refreshInterval=7))
    assert settings == RefreshSettings()


async def test_refresh_all_drops_cache_and_stamps_time():
    store = _store()
    result_cache.put("kpis", None, {"adr": 1})

    stamped = await refresh_all(store, T0)

    assert stamped == T0
    assert len(result_cache) == 0
    assert store.data["settings"]["data_refresh"]["lastRefresh"] == T0


async def test_refresh_waits_for_interval():
    store = _store(autoRefresh=True, refreshInterval=5, lastRefresh=T0)

    assert await run_data_refresh(store, T0 + 4 * MINUTE_MS) is False
    assert await run_data_refresh(store, T0 + 5 * MINUTE_MS) is True
    assert store.data["settings"]["data_refresh"]["lastRefresh"] == T0 + 5 * MINUTE_MS


async def test_disabled_auto_refresh_never_runs():
    store = _store(autoRefresh=False, refreshInterval=1, lastRefresh=T0)
    assert await run_data_refresh(store, T0 + 60 * MINUTE_MS) is False


async def test_store_failure_is_logged_not_raised():
    store = _store()
    store.fail = True
    assert await run_data_refresh(store, T0) is False


async def test_settings_path():
    store = _store()
    await refresh_all(store, T0)
    assert ("PUT", DATA_REFRESH_PATH) in store.calls


async def test_cache_ttl_follows_refresh_interval():
    await load_refresh_settings(_store(autoRefresh=True, refreshInterval=15))
    assert result_cache.ttl_seconds == 15 * 60

    await save_refresh_settings(_store(), RefreshSettings(refresh_interval=1))
    assert result_cache.ttl_seconds == 60
