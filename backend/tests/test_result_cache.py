"""Result cache tests."""
import asyncio

import pytest

from services.result_cache import ResultCache

pytestmark = pytest.mark.asyncio


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


async def test_identical_requests_share_a_computation():
    cache = ResultCache()
    calls = []

    async def compute():
        calls.append(1)
        return {"revenue": 80000}

    params = {"from_date": "2026-03-01", "to_date": "2026-03-31"}
    first = await cache.get_or_compute("comparison", params, compute)
    second = await cache.get_or_compute("comparison", dict(reversed(list(params.items()))), compute)

    assert first is second
    assert len(calls) == 1


async def test_different_params_are_separate_entries():
    cache = ResultCache()

    async def compute():
        return object()

    a = await cache.get_or_compute("kpis", {"from_date": "2026-03-01"}, compute)
    b = await cache.get_or_compute("kpis", {"from_date": "2026-02-01"}, compute)
    assert a is not b
    assert len(cache) == 2


async def test_ttl_expiry():
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=60, clock=clock)
    cache.put("forecast", {"months": 3}, "old")

    clock.now += 30
    assert cache.get("forecast", {"months": 3}) == "old"

    clock.now += 31
    assert cache.get("forecast", {"months": 3}) is None


async def test_invalidate_by_name_and_all():
    cache = ResultCache()
    cache.put("goal_progress", {"day": "2026-03-15"}, [1])
    cache.put("goal_progress", {"day": "2026-03-16"}, [2])
    cache.put("kpis", None, {"adr": 1})

    assert cache.invalidate("goal_progress") == 2
    assert cache.get("kpis") == {"adr": 1}
    assert cache.invalidate_all() == 1
    assert len(cache) == 0


async def test_expired_entries_are_dropped_not_kept():
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=60, clock=clock)
    cache.put("kpis", {"from_date": "2026-01-01"}, 1)
    cache.put("kpis", {"from_date": "2026-02-01"}, 2)

    clock.now += 61
    assert cache.get("kpis", {"from_date": "2026-01-01"}) is None
    assert len(cache) == 1

    cache.put("kpis", {"from_date": "2026-03-01"}, 3)
    assert len(cache) == 1


async def test_distinct_windows_stay_within_the_size_cap():
    cache = ResultCache(max_entries=100)

    async def compute():
        return {"adr": 1}

    for offset in range(5000):
        await cache.get_or_compute("comparison", {"from_date": offset}, compute)

    assert len(cache) == 100
    # Oldest entries go first
    assert cache.get("comparison", {"from_date": 0}) is None
    assert cache.get("comparison", {"from_date": 4999}) == {"adr": 1}


async def test_concurrent_identical_requests_run_once():
    cache = ResultCache()
    release = asyncio.Event()
    calls = []

    async def compute():
        calls.append(1)
        await release.wait()
        return {"revenue": 80000}

    params = {"from_date": "2026-03-01", "to_date": "2026-03-31"}
    waiters = [asyncio.ensure_future(cache.get_or_compute("comparison", params, compute)) for _ in range(5)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*waiters)

    assert len(calls) == 1
    assert all(result is results[0] for result in results)
    assert cache.get("comparison", params) is results[0]


async def test_failed_computation_is_not_cached():
    cache = ResultCache()
    calls = []

    async def compute():
        calls.append(1)
        raise RuntimeError("store down")

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await cache.get_or_compute("kpis", None, compute)

    assert len(calls) == 2
    assert len(cache) == 0


async def test_result_finished_after_invalidation_is_not_stored():
    cache = ResultCache()
    release = asyncio.Event()

    async def compute():
        await release.wait()
        return "stale"

    waiter = asyncio.ensure_future(cache.get_or_compute("kpis", None, compute))
    await asyncio.sleep(0)
    cache.invalidate_all()
    release.set()

    assert await waiter == "stale"
    assert cache.get("kpis") is None
