"""Notification plan: (title, body, fire time) triples for an external scheduler."""

from datetime import datetime, timedelta

from prayercompass.i18n import t
from prayercompass.models import DailyPrayerTimes, PrayerNotification


def plan_notifications(
    times: DailyPrayerTimes,
    now: datetime,
    reminder_minutes: int = 10,
    lang: str = "en",
) -> list[PrayerNotification]:
    """Notifications for every named prayer still ahead of ``now``.

    Each upcoming prayer gets one notification at its start and, when
    ``reminder_minutes`` is positive and the reminder is still in the future,
    one reminder that many minutes earlier. Ordered by fire time.
    """
    plan: list[PrayerNotification] = []
    for window, start in times.prayers():
        if start <= now:
            continue
        name = t(window.value, lang)
        plan.append(
            PrayerNotification(
                identifier=window.value,
                title=t("notify_title", lang).format(name=name),
                body=t("notify_body", lang).format(name=name),
                fire_at=start,
            )
        )
        if reminder_minutes <= 0:
            continue
        reminder_at = start - timedelta(minutes=reminder_minutes)
        if reminder_at > now:
            plan.append(
                PrayerNotification(
                    identifier=f"{window.value}-reminder",
                    title=t("reminder_title", lang).format(
                        name=name, minutes=reminder_minutes
                    ),
                    body=t("reminder_body", lang).format(name=name),
                    fire_at=reminder_at,
                )
            )
    return sorted(plan, key=lambda n: n.fire_at)
