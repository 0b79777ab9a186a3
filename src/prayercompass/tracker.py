"""Prayer-window classification, next-prayer lookup, and display formatting."""

from datetime import datetime, time, timedelta

from prayercompass.errors import InvalidInput
from prayercompass.i18n import t
from prayercompass.models import DailyPrayerTimes, NextPrayer, PrayerWindow
from prayercompass.solar import localize


def _require_aware(now: datetime) -> None:
    if not isinstance(now, datetime) or now.utcoffset() is None:
        raise InvalidInput(f"instant must be a timezone-aware datetime, got {now!r}")


def _end_of_day(times: DailyPrayerTimes) -> datetime:
    """Local midnight that closes the record's calendar date."""
    return localize(times.tz, datetime.combine(times.date + timedelta(days=1), time()))


def current_window(
    times: DailyPrayerTimes,
    now: datetime,
    tomorrow_fajr: datetime | None = None,
) -> PrayerWindow:
    """Classify ``now`` against a day's prayer times.

    Fajr stays current until Dhuhr. Isha stays current until the end of the
    record's calendar day (or until tomorrow's Fajr, if that comes first);
    after that the record is stale and ``now`` is Post-Isha. When Isha itself
    starts after local midnight, its window runs until tomorrow's Fajr.

    Args:
        times: The day's computed times.
        now: Query instant (timezone-aware).
        tomorrow_fajr: Following day's Fajr. Defaults to ``times.next_fajr``.

    Returns:
        The PrayerWindow containing ``now``.
    """
    _require_aware(now)
    if now < times.fajr:
        return PrayerWindow.PRE_FAJR
    if now < times.dhuhr:
        return PrayerWindow.FAJR
    if now < times.asr:
        return PrayerWindow.DHUHR
    if now < times.maghrib:
        return PrayerWindow.ASR
    if now < times.isha:
        return PrayerWindow.MAGHRIB

    cutoff = tomorrow_fajr if tomorrow_fajr is not None else times.next_fajr
    midnight = _end_of_day(times)
    if times.isha < midnight:
        cutoff = min(cutoff, midnight)
    return PrayerWindow.POST_ISHA if now >= cutoff else PrayerWindow.ISHA


def next_prayer(
    times: DailyPrayerTimes,
    now: datetime,
    tomorrow_times: DailyPrayerTimes | None = None,
    lang: str = "en",
) -> NextPrayer:
    """Return the first named prayer strictly after ``now``.

    A prayer whose time equals ``now`` has already started, and one whose
    local date is after ``times.date`` is flagged ``is_tomorrow``. Past the
    day's Isha the result is tomorrow's Fajr, taken from ``tomorrow_times``
    when given and otherwise from ``times.next_fajr``.

    Raises:
        InvalidInput: Naive ``now``, or ``tomorrow_times`` not for the next date.
    """
    _require_aware(now)
    for window, start in times.prayers():
        if start > now:
            return NextPrayer(
                window=window,
                timestamp=start,
                time_string=format_clock_time(start, lang),
                is_tomorrow=start.astimezone(times.tz).date() > times.date,
            )

    if tomorrow_times is not None:
        if tomorrow_times.date != times.date + timedelta(days=1):
            raise InvalidInput(
                f"tomorrow_times is for {tomorrow_times.date}, expected "
                f"{times.date + timedelta(days=1)}"
            )
        fajr = tomorrow_times.fajr
    else:
        fajr = times.next_fajr
    return NextPrayer(
        window=PrayerWindow.FAJR,
        timestamp=fajr,
        time_string=format_clock_time(fajr, lang),
        is_tomorrow=True,
    )


def format_countdown(duration: timedelta | float) -> str:
    """Format a duration (timedelta or seconds) as "Hh Mm" or "Mm".

    Whole minutes, floored; negative durations read as "0m".
    """
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    else:
        seconds = float(duration)
    minutes = max(int(seconds // 60), 0)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def time_until(prayer: NextPrayer | None, now: datetime) -> str:
    if prayer is None:
        return "0m"
    return format_countdown(prayer.timestamp - now)


def format_clock_time(instant: datetime, lang: str = "en") -> str:
    """Format an instant as "h:mm AM" in its own zone."""
    hour = instant.hour % 12 or 12
    marker = t("am" if instant.hour < 12 else "pm", lang)
    return f"{hour}:{instant.minute:02d} {marker}"


def progress_fraction(
    previous: datetime | None, next_: datetime, now: datetime
) -> float:
    """Fraction of the way from ``previous`` to ``next_``, clamped to [0, 1]."""
    if previous is None:
        return 0.0
    span = (next_ - previous).total_seconds()
    if span <= 0:
        return 1.0 if now >= next_ else 0.0
    fraction = (now - previous).total_seconds() / span
    return min(max(fraction, 0.0), 1.0)


def window_progress(
    times: DailyPrayerTimes,
    now: datetime,
    tomorrow_times: DailyPrayerTimes | None = None,
) -> float:
    """Progress through the current window toward the next prayer."""
    tomorrow_fajr = tomorrow_times.fajr if tomorrow_times is not None else None
    window = current_window(times, now, tomorrow_fajr)
    if window is PrayerWindow.PRE_FAJR:
        return 0.0
    if window is PrayerWindow.POST_ISHA:
        previous = times.isha
    else:
        previous = times.time_of(window)
    upcoming = next_prayer(times, now, tomorrow_times)
    return progress_fraction(previous, upcoming.timestamp, now)


def missed_prayers(
    times: DailyPrayerTimes, last_check: datetime, now: datetime
) -> list[tuple[PrayerWindow, datetime]]:
    """Named prayers that started after ``last_check`` and before ``now``."""
    _require_aware(last_check)
    _require_aware(now)
    return [
        (window, start) for window, start in times.prayers() if last_check < start < now
    ]


def day_progress(now: datetime) -> int:
    """Percent of the local calendar day elapsed at ``now``."""
    _require_aware(now)
    today = now.date()
    start = localize(now.tzinfo, datetime.combine(today, time()))
    end = localize(now.tzinfo, datetime.combine(today + timedelta(days=1), time()))
    elapsed = now.timestamp() - start.timestamp()
    return round(elapsed / (end.timestamp() - start.timestamp()) * 100)
