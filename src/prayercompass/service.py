"""Caller-side orchestration: one location, an injectable clock, an injectable cache."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable

from pytz import utc

from prayercompass.cache import PrayerTimesCache, cache_key
from prayercompass.errors import InvalidInput
from prayercompass.location import timezone_for
from prayercompass.models import (
    CalculationParameters,
    Coordinate,
    DailyPrayerTimes,
    NextPrayer,
    PrayerNotification,
    PrayerWindow,
)
from prayercompass.notifications import plan_notifications
from prayercompass.qibla import bearing_to_kaaba
from prayercompass.solar import coerce_date, compute_daily_times, resolve_timezone
from prayercompass.tracker import (
    current_window,
    format_countdown,
    next_prayer,
    window_progress,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(utc)


@dataclass(frozen=True)
class DisplayTimes:
    """The day a prayer-times screen should show."""

    times: DailyPrayerTimes
    is_next_day: bool  # True once today's Isha has passed


@dataclass(frozen=True)
class PrayerStatus:
    """Everything a "now" card needs, computed for one instant."""

    now: datetime
    times: DailyPrayerTimes
    current: PrayerWindow
    next: NextPrayer
    countdown: str  # "Hh Mm" / "Mm"
    progress: float  # Through the current window, [0, 1]
    qibla: float  # Degrees from true north


class PrayerService:
    """Prayer times and status for one location.

    Replaces a process-wide singleton: each instance owns its clock and cache,
    and several instances may share one cache.
    """

    def __init__(
        self,
        coordinate: Coordinate,
        params: CalculationParameters,
        tz: str | tzinfo | None = None,
        clock: Clock | None = None,
        cache: PrayerTimesCache | None = None,
        lang: str = "en",
    ) -> None:
        self.coordinate = coordinate
        self.params = params
        self.tz = resolve_timezone(tz) if tz is not None else timezone_for(coordinate)
        self.lang = lang
        self._clock = clock or system_clock
        self._cache = cache if cache is not None else PrayerTimesCache()

    def now(self) -> datetime:
        instant = self._clock()
        if instant.utcoffset() is None:
            raise InvalidInput("clock must return timezone-aware datetimes")
        return instant.astimezone(self.tz)

    def times_for(self, day: date | datetime | str) -> DailyPrayerTimes:
        day = coerce_date(day)
        key = cache_key(self.coordinate, day, self.params, self.tz)
        return self._cache.get_or_compute(
            key,
            lambda: compute_daily_times(self.coordinate, day, self.params, self.tz),
        )

    def times_between(self, start: date, days: int) -> list[DailyPrayerTimes]:
        """Consecutive days starting at ``start``, e.g. for a monthly timetable."""
        start = coerce_date(start)
        return [self.times_for(start + timedelta(days=i)) for i in range(days)]

    def today(self) -> DailyPrayerTimes:
        return self.times_for(self.now().date())

    def tomorrow(self) -> DailyPrayerTimes:
        return self.times_for(self.now().date() + timedelta(days=1))

    def active_times(self, now: datetime) -> DailyPrayerTimes:
        """The record whose prayer day contains ``now``.

        Usually the record for ``now``'s date. When yesterday's Isha fell after
        midnight, yesterday's record stays active until today's Fajr.
        """
        today = self.times_for(now.date())
        yesterday = self.times_for(today.date - timedelta(days=1))
        late_isha = yesterday.isha.astimezone(self.tz).date() > yesterday.date
        if late_isha and now < yesterday.next_fajr:
            return yesterday
        return today

    def display_times(self) -> DisplayTimes:
        """The active day's times, or the next day's once its Isha has passed."""
        now = self.now()
        active = self.active_times(now)
        if now > active.isha:
            return DisplayTimes(self.times_for(active.date + timedelta(days=1)), True)
        return DisplayTimes(active, False)

    def status(self) -> PrayerStatus:
        now = self.now()
        today = self.active_times(now)
        tomorrow = None
        if now >= today.isha:
            tomorrow = self.times_for(today.date + timedelta(days=1))
        upcoming = next_prayer(today, now, tomorrow, self.lang)
        return PrayerStatus(
            now=now,
            times=today,
            current=current_window(
                today, now, tomorrow.fajr if tomorrow is not None else None
            ),
            next=upcoming,
            countdown=format_countdown(upcoming.timestamp - now),
            progress=window_progress(today, now, tomorrow),
            qibla=bearing_to_kaaba(self.coordinate),
        )

    def notifications(self, reminder_minutes: int = 10) -> list[PrayerNotification]:
        """Upcoming notifications from yesterday's record through tomorrow's."""
        now = self.now()
        plan = []
        for offset in (-1, 0, 1):
            times = self.times_for(now.date() + timedelta(days=offset))
            plan.extend(plan_notifications(times, now, reminder_minutes, self.lang))
        logger.debug("planned %d notifications", len(plan))
        return sorted(plan, key=lambda n: n.fire_at)
