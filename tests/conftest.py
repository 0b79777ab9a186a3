from datetime import date, datetime

import pytest
from pytz import utc

from prayercompass.models import DailyPrayerTimes


def at(hour: int, minute: int = 0, day: int = 10) -> datetime:
    return datetime(2025, 3, day, hour, minute, tzinfo=utc)


@pytest.fixture
def sample_times() -> DailyPrayerTimes:
    """Hand-built day in UTC so window boundaries are easy to read."""
    return DailyPrayerTimes(
        date=date(2025, 3, 10),
        fajr=at(5, 0),
        sunrise=at(6, 20),
        dhuhr=at(12, 10),
        asr=at(15, 30),
        maghrib=at(18, 0),
        isha=at(19, 20),
        qiyam=datetime(2025, 3, 11, 1, 18, 40, tzinfo=utc),
        next_fajr=at(4, 58, day=11),
        tz=utc,
    )
