"""Thread-safe memoization of DailyPrayerTimes, owned and injected by the caller."""

import logging
import threading
from collections import OrderedDict
from datetime import date, tzinfo
from typing import Callable, Hashable

from prayercompass.models import CalculationParameters, Coordinate, DailyPrayerTimes

logger = logging.getLogger(__name__)

CacheKey = tuple[float, float, date, CalculationParameters, Hashable]


def _zone_key(zone: str | tzinfo) -> Hashable:
    # pytz zones carry a stable name; other tzinfo objects are keyed by identity/equality
    return getattr(zone, "zone", None) or zone


def cache_key(
    coordinate: Coordinate,
    day: date,
    params: CalculationParameters,
    zone: str | tzinfo,
    precision: int = 4,
) -> CacheKey:
    """Key on the coordinate rounded to ``precision`` decimals (~11 m at 4)."""
    return (
        round(coordinate.latitude, precision),
        round(coordinate.longitude, precision),
        day,
        params,
        _zone_key(zone),
    )


class PrayerTimesCache:
    """Bounded LRU cache. Entries are immutable and only ever replaced."""

    def __init__(self, max_entries: int = 64) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[CacheKey, DailyPrayerTimes] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: CacheKey) -> DailyPrayerTimes | None:
        with self._lock:
            times = self._entries.get(key)
            if times is not None:
                self._entries.move_to_end(key)
            return times

    def put(self, key: CacheKey, times: DailyPrayerTimes) -> None:
        with self._lock:
            self._entries[key] = times
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def get_or_compute(
        self, key: CacheKey, compute: Callable[[], DailyPrayerTimes]
    ) -> DailyPrayerTimes:
        """Return the cached entry, computing it outside the lock on a miss.

        Two threads missing the same key both compute; the results are equal
        and the later insert replaces the earlier one.
        """
        times = self.get(key)
        if times is not None:
            logger.debug("cache hit for %s", key[:3])
            return times
        times = compute()
        self.put(key, times)
        return times

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
