"""Matplotlib static PNG timetable renderer."""

from collections.abc import Sequence
from datetime import datetime, time
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from prayercompass.i18n import t  # noqa: E402
from prayercompass.models import DailyPrayerTimes  # noqa: E402

_ROOT = Path(__file__).parent.parent.parent.parent

_SERIES: tuple[tuple[str, str], ...] = (
    ("fajr", "#7ec8e3"),
    ("sunrise", "#f6c177"),
    ("dhuhr", "#ffffff"),
    ("asr", "#ebbcba"),
    ("maghrib", "#eb6f92"),
    ("isha", "#9ccfd8"),
)


def local_hours(record: DailyPrayerTimes, instant: datetime) -> float:
    """Wall-clock hours since the record's local midnight (may exceed 24)."""
    midnight = datetime.combine(record.date, time())
    return (instant.replace(tzinfo=None) - midnight).total_seconds() / 3600


def render_timetable_chart(
    days: Sequence[DailyPrayerTimes],
    title: str | None = None,
    lang: str = "en",
    chart_size: int = 10,
) -> Figure:
    """Render a run of days as one line per prayer against the calendar date.

    Args:
        days: Consecutive DailyPrayerTimes, in date order.
        title: Figure title. Defaults to the translated "Prayer times".
        lang: Language for labels ('en' or 'ar').
        chart_size: Output image width in inches.

    Returns:
        matplotlib Figure object.
    """
    if not days:
        raise ValueError("days must not be empty")

    fig, ax = plt.subplots(figsize=(chart_size, chart_size * 0.6))
    fig.patch.set_facecolor("#050a1a")
    ax.set_facecolor("#050a1a")

    x_vals = np.arange(len(days))
    for name, color in _SERIES:
        y_vals = np.array([local_hours(d, getattr(d, name)) for d in days])
        approximated = np.array([name in d.approximated for d in days])
        ax.plot(x_vals, y_vals, color=color, linewidth=1.2, label=t(name.capitalize(), lang))
        if approximated.any():
            ax.scatter(
                x_vals[approximated],
                y_vals[approximated],
                s=8,
                color=color,
                marker="x",
                linewidths=0.8,
                zorder=3,
            )

    ticks = x_vals[:: max(len(days) // 10, 1)]
    ax.set_xticks(ticks)
    ax.set_xticklabels([days[i].date.strftime("%m-%d") for i in ticks], color="#e8e8e8")
    ax.set_ylim(0, 26)
    ax.set_yticks(range(0, 27, 2))
    ax.set_yticklabels([f"{h % 24:02d}:00" for h in range(0, 27, 2)], color="#e8e8e8")
    ax.grid(color="#ffffff", alpha=0.08)
    for spine in ax.spines.values():
        spine.set_color("#333a4d")
    ax.set_title(title or t("chart_title", lang), color="#e8e8e8")
    ax.legend(loc="upper right", fontsize=8, facecolor="#050a1a", labelcolor="#e8e8e8")
    return fig


def save_timetable_chart(
    days: Sequence[DailyPrayerTimes],
    output_path: Path | None = None,
    title: str | None = None,
    lang: str = "en",
) -> Path:
    """Save a timetable chart as a PNG file.

    Args:
        days: Consecutive DailyPrayerTimes, in date order.
        output_path: Destination path. Auto-generated under results/ if None.
        title: Figure title.
        lang: Language for labels.

    Returns:
        Path to the saved file.
    """
    if not days:
        raise ValueError("days must not be empty")
    if output_path is None:
        first, last = days[0].date, days[-1].date
        output_path = _ROOT / "results" / f"prayer_times__{first}__{last}.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_timetable_chart(days, title=title, lang=lang)
    try:
        fig.savefig(output_path, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)
    return output_path
