from datetime import datetime, timedelta

from pytz import utc

from prayercompass.notifications import plan_notifications


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 10, hour, minute, tzinfo=utc)


def test_plan_skips_past_prayers(sample_times) -> None:
    plan = plan_notifications(sample_times, at(13, 0))
    assert [n.identifier for n in plan] == [
        "Asr-reminder",
        "Asr",
        "Maghrib-reminder",
        "Maghrib",
        "Isha-reminder",
        "Isha",
    ]
    assert plan[1].fire_at == sample_times.asr
    assert plan[0].fire_at == sample_times.asr - timedelta(minutes=10)
    assert plan[1].title == "Asr Prayer Time"
    assert plan[0].title == "Asr in 10 minutes"


def test_reminder_already_passed(sample_times) -> None:
    plan = plan_notifications(sample_times, at(15, 25))
    assert plan[0].identifier == "Asr"


def test_prayer_at_now_is_not_scheduled(sample_times) -> None:
    plan = plan_notifications(sample_times, sample_times.isha)
    assert plan == []


def test_reminders_disabled(sample_times) -> None:
    plan = plan_notifications(sample_times, at(0, 0), reminder_minutes=0)
    assert [n.identifier for n in plan] == ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]


def test_arabic_titles(sample_times) -> None:
    plan = plan_notifications(sample_times, at(19, 0), lang="ar")
    assert plan[-1].title == "حان وقت صلاة العشاء"
