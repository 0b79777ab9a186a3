from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from prayercompass.cache import PrayerTimesCache, cache_key
from prayercompass.methods import KARACHI, MUSLIM_WORLD_LEAGUE
from prayercompass.models import Coordinate
from prayercompass.solar import compute_daily_times

LONDON = Coordinate(51.5074, -0.1278)


def test_key_rounds_coordinates() -> None:
    a = cache_key(Coordinate(51.50741, -0.12779), date(2025, 1, 5), MUSLIM_WORLD_LEAGUE, "Europe/London")
    b = cache_key(Coordinate(51.50744, -0.12781), date(2025, 1, 5), MUSLIM_WORLD_LEAGUE, "Europe/London")
    assert a == b


def test_key_distinguishes_parameters_and_dates() -> None:
    base = cache_key(LONDON, date(2025, 1, 5), MUSLIM_WORLD_LEAGUE, "Europe/London")
    assert base != cache_key(LONDON, date(2025, 1, 5), KARACHI, "Europe/London")
    assert base != cache_key(LONDON, date(2025, 1, 6), MUSLIM_WORLD_LEAGUE, "Europe/London")


def test_get_or_compute_memoizes() -> None:
    cache = PrayerTimesCache()
    calls = []
    key = cache_key(LONDON, date(2025, 1, 5), MUSLIM_WORLD_LEAGUE, "Europe/London")

    def compute():
        calls.append(1)
        return compute_daily_times(LONDON, date(2025, 1, 5), MUSLIM_WORLD_LEAGUE, "Europe/London")

    first = cache.get_or_compute(key, compute)
    second = cache.get_or_compute(key, compute)
    assert first is second
    assert len(calls) == 1


def test_evicts_least_recently_used(sample_times) -> None:
    cache = PrayerTimesCache(max_entries=2)
    keys = [
        cache_key(LONDON, date(2025, 1, day), MUSLIM_WORLD_LEAGUE, "UTC") for day in (1, 2, 3)
    ]
    cache.put(keys[0], sample_times)
    cache.put(keys[1], sample_times)
    assert cache.get(keys[0]) is sample_times  # keys[1] is now least recent
    cache.put(keys[2], sample_times)
    assert len(cache) == 2
    assert cache.get(keys[1]) is None
    assert cache.get(keys[0]) is sample_times


def test_clear(sample_times) -> None:
    cache = PrayerTimesCache()
    cache.put(cache_key(LONDON, date(2025, 1, 1), MUSLIM_WORLD_LEAGUE, "UTC"), sample_times)
    cache.clear()
    assert len(cache) == 0


def test_rejects_empty_capacity() -> None:
    with pytest.raises(ValueError):
        PrayerTimesCache(max_entries=0)


def test_concurrent_access() -> None:
    cache = PrayerTimesCache()
    days = [date(2025, 1, d) for d in range(1, 6)]

    def lookup(day: date):
        key = cache_key(LONDON, day, MUSLIM_WORLD_LEAGUE, "Europe/London")
        return cache.get_or_compute(
            key, lambda: compute_daily_times(LONDON, day, MUSLIM_WORLD_LEAGUE, "Europe/London")
        )

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lookup, days * 8))

    assert len(cache) == 5
    for day, times in zip(days * 8, results):
        assert times.date == day
