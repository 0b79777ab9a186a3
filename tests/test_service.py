from datetime import date, datetime

import pytest
from pytz import timezone, utc

from prayercompass.cache import PrayerTimesCache, cache_key
from prayercompass.errors import InvalidInput
from prayercompass.methods import MUSLIM_WORLD_LEAGUE
from prayercompass.models import Coordinate, DailyPrayerTimes, PrayerWindow
from prayercompass.service import PrayerService

LONDON = Coordinate(51.5074, -0.1278, place_name="London")
LONDON_TZ = timezone("Europe/London")


def fixed_clock(hour: int, minute: int = 0, day: int = 5):
    instant = LONDON_TZ.localize(datetime(2025, 1, day, hour, minute))
    return lambda: instant


@pytest.fixture
def cache() -> PrayerTimesCache:
    return PrayerTimesCache()


def service_at(cache: PrayerTimesCache, hour: int, minute: int = 0) -> PrayerService:
    return PrayerService(
        LONDON,
        MUSLIM_WORLD_LEAGUE,
        tz="Europe/London",
        clock=fixed_clock(hour, minute),
        cache=cache,
    )


def test_status_midday(cache: PrayerTimesCache) -> None:
    status = service_at(cache, 12, 30).status()
    assert status.times.date == date(2025, 1, 5)
    assert status.current is PrayerWindow.DHUHR
    assert status.next.window is PrayerWindow.ASR
    assert status.next.is_tomorrow is False
    assert 0.0 < status.progress < 1.0
    assert status.countdown.endswith("m")
    assert status.qibla == pytest.approx(118.99, abs=0.5)


def test_status_after_isha_rolls_over(cache: PrayerTimesCache) -> None:
    service = service_at(cache, 23, 0)
    status = service.status()
    assert status.current is PrayerWindow.ISHA
    assert status.next.window is PrayerWindow.FAJR
    assert status.next.is_tomorrow is True
    assert status.next.timestamp == service.tomorrow().fajr
    assert status.next.timestamp > status.now


def test_display_times(cache: PrayerTimesCache) -> None:
    assert service_at(cache, 12, 30).display_times().is_next_day is False
    late = service_at(cache, 23, 0).display_times()
    assert late.is_next_day is True
    assert late.times.date == date(2025, 1, 6)


def test_shared_cache(cache: PrayerTimesCache) -> None:
    first = service_at(cache, 9, 0).today()
    second = service_at(cache, 15, 0).today()
    assert first is second
    assert len(cache) == 1


def test_times_between(cache: PrayerTimesCache) -> None:
    days = service_at(cache, 12, 0).times_between(date(2025, 1, 30), 4)
    assert [d.date for d in days] == [
        date(2025, 1, 30),
        date(2025, 1, 31),
        date(2025, 2, 1),
        date(2025, 2, 2),
    ]


def test_notifications_cover_today_and_tomorrow(cache: PrayerTimesCache) -> None:
    service = service_at(cache, 12, 30)
    plan = service.notifications()
    assert len(plan) == 16
    assert plan[0].identifier == "Asr-reminder"
    assert all(n.fire_at > service.now() for n in plan)


def test_naive_clock_rejected(cache: PrayerTimesCache) -> None:
    service = PrayerService(
        LONDON,
        MUSLIM_WORLD_LEAGUE,
        tz="Europe/London",
        clock=lambda: datetime(2025, 1, 5, 12, 0),
        cache=cache,
    )
    with pytest.raises(InvalidInput):
        service.status()


def test_timezone_looked_up_from_coordinate(cache: PrayerTimesCache) -> None:
    service = PrayerService(LONDON, MUSLIM_WORLD_LEAGUE, cache=cache)
    assert service.tz.zone == "Europe/London"


def _utc(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 6, day, hour, minute, tzinfo=utc)


def _late_isha_day(day: int) -> DailyPrayerTimes:
    """A day whose Isha starts 10 minutes after midnight."""
    return DailyPrayerTimes(
        date=date(2025, 6, day),
        fajr=_utc(day, 3, 0),
        sunrise=_utc(day, 4, 40),
        dhuhr=_utc(day, 12, 0),
        asr=_utc(day, 16, 30),
        maghrib=_utc(day, 21, 30),
        isha=_utc(day + 1, 0, 10),
        qiyam=_utc(day + 1, 1, 10),
        next_fajr=_utc(day + 1, 3, 0),
        tz=utc,
    )


@pytest.fixture
def late_isha_service(cache: PrayerTimesCache):
    for day in (20, 21, 22, 23):
        key = cache_key(LONDON, date(2025, 6, day), MUSLIM_WORLD_LEAGUE, utc)
        cache.put(key, _late_isha_day(day))

    def at(day: int, hour: int, minute: int = 0) -> PrayerService:
        instant = _utc(day, hour, minute)
        return PrayerService(
            LONDON, MUSLIM_WORLD_LEAGUE, tz="UTC", clock=lambda: instant, cache=cache
        )

    return at


def test_isha_after_midnight_is_next_before_midnight(late_isha_service) -> None:
    status = late_isha_service(21, 23, 50).status()
    assert status.times.date == date(2025, 6, 21)
    assert status.current is PrayerWindow.MAGHRIB
    assert status.next.window is PrayerWindow.ISHA
    assert status.next.timestamp == _utc(22, 0, 10)
    assert status.next.is_tomorrow is True


def test_yesterday_stays_active_until_fajr(late_isha_service) -> None:
    before_isha = late_isha_service(22, 0, 5).status()
    assert before_isha.times.date == date(2025, 6, 21)
    assert before_isha.current is PrayerWindow.MAGHRIB
    assert before_isha.next.window is PrayerWindow.ISHA

    during_isha = late_isha_service(22, 0, 30)
    status = during_isha.status()
    assert status.times.date == date(2025, 6, 21)
    assert status.current is PrayerWindow.ISHA
    assert status.next.window is PrayerWindow.FAJR
    assert status.next.timestamp == _utc(22, 3, 0)
    assert during_isha.display_times().times.date == date(2025, 6, 22)

    after_fajr = late_isha_service(22, 3, 30).status()
    assert after_fajr.times.date == date(2025, 6, 22)
    assert after_fajr.current is PrayerWindow.FAJR


def test_late_isha_still_notified_after_midnight(late_isha_service) -> None:
    plan = late_isha_service(22, 0, 5).notifications()
    assert plan[0].identifier == "Isha"
    assert plan[0].fire_at == _utc(22, 0, 10)
