"""Command-line entry point: prayer times, current status and Qibla for one place.

Examples:
    prayercompass --address "London"
    prayercompass --lat 51.5074 --lng -0.1278 --when "2025-01-05 13:30"
    prayercompass --address "Istanbul" --chart results/istanbul.png --days 31
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from prayercompass.config import load_settings
from prayercompass.errors import InvalidInput, PrayerCompassError
from prayercompass.i18n import t
from prayercompass.location import resolve_location, timezone_for
from prayercompass.methods import get_method, parse_asr_convention
from prayercompass.models import Coordinate
from prayercompass.qibla import bearing_to_kaaba, distance_to_kaaba_km
from prayercompass.renderers.static import save_timetable_chart
from prayercompass.service import PrayerService
from prayercompass.solar import localize, resolve_timezone
from prayercompass.tracker import format_clock_time

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prayercompass",
        description="Prayer times, next prayer countdown and Qibla direction.",
    )
    parser.add_argument("--address", help="Place name or address to geocode")
    parser.add_argument("--lat", type=float, help="Latitude in decimal degrees")
    parser.add_argument("--lng", type=float, help="Longitude in decimal degrees")
    parser.add_argument("--tz", help="IANA timezone (looked up from the location if omitted)")
    parser.add_argument("--when", help='Local time "YYYY-MM-DD HH:MM" (default: now)')
    parser.add_argument("--method", help="Calculation method, e.g. MuslimWorldLeague")
    parser.add_argument("--asr", help="Asr convention: standard or hanafi")
    parser.add_argument("--lang", choices=("en", "ar"), help="Output language")
    parser.add_argument("--chart", type=Path, help="Save a timetable PNG to this path")
    parser.add_argument("--days", type=int, default=30, help="Days in the timetable chart")
    parser.add_argument(
        "--notifications", action="store_true", help="List upcoming notifications"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _parse_when(when: str) -> datetime:
    try:
        return datetime.strptime(when, "%Y-%m-%d %H:%M")
    except ValueError:
        raise InvalidInput(f'--when must be "YYYY-MM-DD HH:MM", got {when!r}') from None


def run(args: argparse.Namespace) -> None:
    settings = load_settings()
    lang = args.lang or settings.lang

    params = get_method(args.method) if args.method else settings.params
    if args.asr:
        params = params.with_asr(parse_asr_convention(args.asr))

    if args.lat is not None and args.lng is not None:
        coordinate = Coordinate(args.lat, args.lng)
    elif (args.lat is None) != (args.lng is None):
        raise InvalidInput("--lat and --lng must be given together")
    elif settings.coordinate is not None and not args.address:
        coordinate = settings.coordinate
    else:
        coordinate = resolve_location(args.address or settings.address)

    tz = args.tz or settings.timezone
    zone = resolve_timezone(tz) if tz else timezone_for(coordinate)
    clock = None
    if args.when:
        fixed = localize(zone, _parse_when(args.when))
        clock = lambda: fixed  # noqa: E731

    service = PrayerService(coordinate, params, tz=zone, clock=clock, lang=lang)
    status = service.status()
    times = status.times

    name = coordinate.place_name or "-"
    print(f"{name} ({coordinate.latitude:.4f}, {coordinate.longitude:.4f}) {zone}")
    print(f"{times.date.isoformat()}  {params.name} / Asr {params.asr_convention.value}")
    rows = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha", "qiyam")
    for row in rows:
        instant = getattr(times, row)
        marker = f"  ({t('label_approximated', lang)})" if row in times.approximated else ""
        print(f"  {t(row.capitalize(), lang):<10}{format_clock_time(instant, lang):>9}{marker}")

    nxt = status.next
    when_label = f" {t('label_tomorrow', lang)}" if nxt.is_tomorrow else ""
    print(f"{t('label_current', lang)}: {t(status.current.value, lang)}")
    print(
        f"{t('label_next', lang)}: {t(nxt.name, lang)} {nxt.time_string}{when_label}"
        f" ({status.countdown}, {status.progress:.0%})"
    )
    print(
        f"{t('label_qibla', lang)}: {bearing_to_kaaba(coordinate):.2f}°"
        f" ({distance_to_kaaba_km(coordinate):,.0f} km)"
    )

    if args.notifications:
        for note in service.notifications(settings.reminder_minutes):
            print(f"  {note.fire_at:%Y-%m-%d %H:%M}  {note.title}")

    if args.chart is not None:
        days = service.times_between(times.date, max(args.days, 1))
        path = save_timetable_chart(days, args.chart, title=name, lang=lang)
        print(f"Saved: {path}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except PrayerCompassError as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0
