"""Solar-position astronomy and the daily prayer-time calculation.

All angles at the module boundary are degrees; trigonometry is done in radians.
Times are first computed as fractional UTC hours relative to a UTC midnight
epoch, then turned into aware datetimes in the location's zone.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable

from pytz import UnknownTimeZoneError, timezone, utc

from prayercompass.errors import ConfigurationError, InvalidInput, UnattainableAngle
from prayercompass.models import CalculationParameters, Coordinate, DailyPrayerTimes

logger = logging.getLogger(__name__)

SUNRISE_ALTITUDE = -0.833  # Refraction + solar semi-diameter
NEAREST_LATITUDE = 48.5  # Substitute latitude when the sun never crosses the horizon
_J2000 = 2451545.0


def _sin(deg: float) -> float:
    return math.sin(math.radians(deg))


def _cos(deg: float) -> float:
    return math.cos(math.radians(deg))


def julian_day(day: date) -> float:
    """Julian day at 0h UTC of the given date."""
    return day.toordinal() + 1721424.5


def sun_position(jd: float) -> tuple[float, float]:
    """Low-precision solar coordinates (USNO approximation).

    Args:
        jd: Julian day (fractional).

    Returns:
        (declination in degrees, equation of time in hours within [-12, 12)).
    """
    d = jd - _J2000
    g = (357.529 + 0.98560028 * d) % 360  # Mean anomaly
    q = (280.459 + 0.98564736 * d) % 360  # Mean longitude
    ecliptic_lng = (q + 1.915 * _sin(g) + 0.020 * _sin(2 * g)) % 360
    obliquity = 23.439 - 0.00000036 * d

    ra = math.degrees(
        math.atan2(_cos(obliquity) * _sin(ecliptic_lng), _cos(ecliptic_lng))
    )
    ra_hours = (ra / 15) % 24
    declination = math.degrees(math.asin(_sin(obliquity) * _sin(ecliptic_lng)))
    # q/15 and ra_hours can sit on opposite sides of the 0h/24h seam near the equinox
    equation_of_time = (q / 15 - ra_hours + 12) % 24 - 12
    return declination, equation_of_time


def hour_angle(altitude: float, latitude: float, declination: float) -> float:
    """Hours between solar transit and the sun being at ``altitude``.

    Raises:
        UnattainableAngle: If the sun never reaches that altitude for this
            latitude/declination (including the poles, where it is undefined).
    """
    denominator = _cos(latitude) * _cos(declination)
    if abs(denominator) < 1e-12:
        raise UnattainableAngle(altitude, latitude)
    cos_h = (_sin(altitude) - _sin(latitude) * _sin(declination)) / denominator
    if not -1.0 <= cos_h <= 1.0:
        raise UnattainableAngle(altitude, latitude)
    return math.degrees(math.acos(cos_h)) / 15


def asr_altitude(shadow_factor: int, latitude: float, declination: float) -> float:
    """Sun altitude at which shadow length = factor × object + noon shadow."""
    zenith = abs(latitude - declination)
    if zenith >= 90:
        # Sun stays below the horizon at noon; there is no noon shadow to extend
        raise UnattainableAngle(0.0, latitude)
    return math.degrees(math.atan(1 / (shadow_factor + math.tan(math.radians(zenith)))))


def resolve_timezone(tz: str | tzinfo) -> tzinfo:
    """Accept a pytz zone name or any tzinfo and return a tzinfo.

    Raises:
        InvalidInput: On an unknown zone name or an unsupported type.
    """
    if isinstance(tz, tzinfo):
        return tz
    if isinstance(tz, str):
        try:
            return timezone(tz)
        except UnknownTimeZoneError:
            raise InvalidInput(f"Unknown timezone: {tz!r}") from None
    raise InvalidInput(f"timezone must be a zone name or tzinfo, got {tz!r}")


def localize(zone: tzinfo, naive: datetime) -> datetime:
    """Attach ``zone`` to a naive local datetime (pytz needs ``localize``)."""
    if hasattr(zone, "localize"):
        return zone.localize(naive)  # type: ignore[attr-defined]
    return naive.replace(tzinfo=zone)


def coerce_date(day: date | datetime | str) -> date:
    """Reduce a datetime to its date, parse ISO strings, reject everything else."""
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    if isinstance(day, str):
        try:
            return date.fromisoformat(day)
        except ValueError:
            raise InvalidInput(f"Malformed date: {day!r}") from None
    raise InvalidInput(f"date must be a date or 'YYYY-MM-DD' string, got {day!r}")


@dataclass(frozen=True)
class _SolarDay:
    """Sun geometry for one location around one transit."""

    latitude: float
    longitude: float
    jd0: float  # Julian day of the UTC epoch (midnight)
    shift: int  # Whole days between the epoch and the transit's UTC day

    def transit(self) -> float:
        """UTC hours after the epoch of the sun's meridian crossing."""
        base = 12 + 24 * self.shift - self.longitude / 15
        hours = base
        for _ in range(2):
            _, eqt = sun_position(self.jd0 + hours / 24)
            hours = base - eqt
        return hours

    def event(self, altitude_at: Callable[[float], float], direction: int) -> float:
        """UTC hours after the epoch when the sun reaches an altitude.

        ``direction`` is -1 for the morning side of transit, +1 for the evening.
        The first pass uses the sun at transit, the second refines at the event.
        """
        base = 12 + 24 * self.shift - self.longitude / 15
        hours = self.transit()
        for _ in range(2):
            decl, eqt = sun_position(self.jd0 + hours / 24)
            offset = hour_angle(altitude_at(decl), self.latitude, decl)
            hours = base - eqt + direction * offset
        return hours

    def at_latitude(self, latitude: float) -> "_SolarDay":
        return _SolarDay(latitude, self.longitude, self.jd0, self.shift)


def _fixed(altitude: float) -> Callable[[float], float]:
    return lambda _decl: altitude


def _twilight(solar: _SolarDay, angle: float, direction: int) -> float | None:
    try:
        return solar.event(_fixed(-angle), direction)
    except UnattainableAngle:
        return None


def _canonical_times(
    coordinate: Coordinate,
    day: date,
    params: CalculationParameters,
    zone: tzinfo,
) -> tuple[dict[str, datetime], tuple[str, ...]]:
    """The six canonical times for one local date, as UTC datetimes."""
    reference = localize(zone, datetime.combine(day, time(12))).astimezone(utc)
    epoch = datetime(reference.year, reference.month, reference.day, tzinfo=utc)
    jd0 = julian_day(epoch.date())

    solar = _SolarDay(coordinate.latitude, coordinate.longitude, jd0, 0)
    # Pick the transit nearest local clock noon; far-off zones can move it a day
    distance = (reference - epoch).total_seconds() / 3600 - solar.transit()
    solar = _SolarDay(
        coordinate.latitude, coordinate.longitude, jd0, round(distance / 24)
    )

    approximated: list[str] = []
    dhuhr = solar.transit()
    factor = params.asr_convention.shadow_factor
    try:
        sunrise = solar.event(_fixed(SUNRISE_ALTITUDE), -1)
        maghrib = solar.event(_fixed(SUNRISE_ALTITUDE), +1)
        asr = solar.event(
            lambda decl: asr_altitude(factor, solar.latitude, decl), +1
        )
    except UnattainableAngle as e:
        substitute = math.copysign(NEAREST_LATITUDE, coordinate.latitude)
        logger.debug(
            "%s on %s; computing the day at latitude %.1f", e, day, substitute
        )
        solar = solar.at_latitude(substitute)
        sunrise = solar.event(_fixed(SUNRISE_ALTITUDE), -1)
        maghrib = solar.event(_fixed(SUNRISE_ALTITUDE), +1)
        asr = solar.event(
            lambda decl: asr_altitude(factor, solar.latitude, decl), +1
        )
        approximated.extend(["fajr", "sunrise", "asr", "maghrib", "isha"])

    night = 24 - (maghrib - sunrise)
    rule = params.high_latitude_rule

    assert params.fajr_angle is not None
    fajr = _twilight(solar, params.fajr_angle, -1)
    fajr_limit = night * rule.night_portion(params.fajr_angle)
    if fajr is None or sunrise - fajr > fajr_limit:
        logger.debug("Fajr on %s falls back to %s", day, rule.value)
        fajr = sunrise - fajr_limit
        approximated.append("fajr")

    if params.isha_interval is not None:
        isha = maghrib + params.isha_interval / 60
    else:
        assert params.isha_angle is not None
        isha = _twilight(solar, params.isha_angle, +1)
        isha_limit = night * rule.night_portion(params.isha_angle)
        if isha is None or isha - maghrib > isha_limit:
            logger.debug("Isha on %s falls back to %s", day, rule.value)
            isha = maghrib + isha_limit
            approximated.append("isha")

    adjustments = params.adjustments
    hours = {
        "fajr": fajr + adjustments.fajr / 60,
        "sunrise": sunrise + adjustments.sunrise / 60,
        "dhuhr": dhuhr + adjustments.dhuhr / 60,
        "asr": asr + adjustments.asr / 60,
        "maghrib": maghrib + adjustments.maghrib / 60,
        "isha": isha + adjustments.isha / 60,
    }
    instants = {
        name: epoch + timedelta(seconds=round(value * 3600))
        for name, value in hours.items()
    }
    return instants, tuple(dict.fromkeys(approximated))


def compute_daily_times(
    coordinate: Coordinate,
    day: date | datetime | str,
    params: CalculationParameters,
    tz: str | tzinfo,
) -> DailyPrayerTimes:
    """Compute Fajr, Sunrise, Dhuhr, Asr, Maghrib, Isha and Qiyam for a date.

    Args:
        coordinate: Location of the observer.
        day: Local calendar date (datetime values are reduced to their date).
        params: Calculation convention.
        tz: Zone name (pytz) or tzinfo of the location; fixes the local clock.

    Returns:
        DailyPrayerTimes with every field populated. Times the sun geometry
        could not provide are replaced by the high-latitude fallback and
        listed in ``approximated``. Isha never passes the middle of the
        span from Maghrib to the next Fajr.

    Raises:
        InvalidInput: Bad coordinate, date or timezone.
        ConfigurationError: ``params`` is not a CalculationParameters.
    """
    if not isinstance(coordinate, Coordinate):
        raise InvalidInput(f"coordinate must be a Coordinate, got {coordinate!r}")
    if not isinstance(params, CalculationParameters):
        raise ConfigurationError(
            f"params must be CalculationParameters, got {type(params).__name__}"
        )
    day = coerce_date(day)
    zone = resolve_timezone(tz)
    try:
        following = day + timedelta(days=1)
    except OverflowError:
        raise InvalidInput(f"date out of range: {day}") from None

    today, approximated = _canonical_times(coordinate, day, params, zone)
    tomorrow, _ = _canonical_times(coordinate, following, params, zone)

    night = tomorrow["fajr"] - today["maghrib"]
    # Isha stays ahead of the last third of the night and of the next Fajr
    latest_isha = today["maghrib"] + timedelta(seconds=night.total_seconds() // 2)
    if today["isha"] > latest_isha:
        logger.debug("Isha on %s capped at the middle of the night", day)
        today["isha"] = latest_isha
        if "isha" not in approximated:
            approximated += ("isha",)

    qiyam = today["maghrib"] + timedelta(
        seconds=round(night.total_seconds() * 2 / 3)
    )

    return DailyPrayerTimes(
        date=day,
        fajr=today["fajr"].astimezone(zone),
        sunrise=today["sunrise"].astimezone(zone),
        dhuhr=today["dhuhr"].astimezone(zone),
        asr=today["asr"].astimezone(zone),
        maghrib=today["maghrib"].astimezone(zone),
        isha=today["isha"].astimezone(zone),
        qiyam=qiyam.astimezone(zone),
        next_fajr=tomorrow["fajr"].astimezone(zone),
        tz=zone,
        approximated=approximated,
    )
