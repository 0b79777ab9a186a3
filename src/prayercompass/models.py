"""Value types passed between the calculator, the tracker and the caller."""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, tzinfo
from enum import Enum

from prayercompass.errors import ConfigurationError, InvalidInput


def _check_range(name: str, value: object, limit: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or not -limit <= value <= limit:
        raise InvalidInput(f"{name} must be within [-{limit:g}, {limit:g}], got {value}")
    return float(value)


@dataclass(frozen=True)
class Coordinate:
    """Validated geographic position. Only lat/lng feed the calculations."""

    latitude: float  # Decimal degrees, [-90, 90]
    longitude: float  # Decimal degrees, [-180, 180]
    place_name: str | None = field(default=None, compare=False)  # For display only
    captured_at: datetime | None = field(default=None, compare=False)  # Fix time
    accuracy: float | None = field(default=None, compare=False)  # Metres, if known

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "latitude", _check_range("latitude", self.latitude, 90.0)
        )
        object.__setattr__(
            self, "longitude", _check_range("longitude", self.longitude, 180.0)
        )


class AsrConvention(Enum):
    """Shadow-length threshold for the start of Asr."""

    STANDARD = "standard"  # Shafi, Maliki, Hanbali: shadow = object length + noon shadow
    HANAFI = "hanafi"  # shadow = twice the object length + noon shadow

    @property
    def shadow_factor(self) -> int:
        return 2 if self is AsrConvention.HANAFI else 1


class HighLatitudeRule(Enum):
    """Fallback used when the twilight angle is not reached (or reached too late)."""

    MIDDLE_OF_THE_NIGHT = "middle_of_the_night"
    SEVENTH_OF_THE_NIGHT = "seventh_of_the_night"
    TWILIGHT_ANGLE = "twilight_angle"

    def night_portion(self, angle: float) -> float:
        """Fraction of the night between Fajr and Sunrise (or Maghrib and Isha)."""
        if self is HighLatitudeRule.SEVENTH_OF_THE_NIGHT:
            return 1 / 7
        if self is HighLatitudeRule.TWILIGHT_ANGLE:
            return angle / 60
        return 1 / 2


@dataclass(frozen=True)
class Adjustments:
    """Per-prayer offsets in minutes. Positive = later."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0


@dataclass(frozen=True)
class CalculationParameters:
    """A named calculation convention. Closed set of degrees of freedom."""

    name: str
    fajr_angle: float | None  # Degrees below the horizon
    isha_angle: float | None = None  # Degrees below the horizon
    isha_interval: int | None = None  # Minutes after Maghrib, replaces isha_angle
    asr_convention: AsrConvention = AsrConvention.STANDARD
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    adjustments: Adjustments = Adjustments()

    def __post_init__(self) -> None:
        if self.fajr_angle is None:
            raise ConfigurationError(f"{self.name}: fajr_angle is required")
        if self.isha_angle is None and self.isha_interval is None:
            raise ConfigurationError(
                f"{self.name}: one of isha_angle or isha_interval is required"
            )
        for label in ("fajr_angle", "isha_angle"):
            value = getattr(self, label)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{self.name}: {label} must be a number")
            if not 0 < value < 90:
                raise ConfigurationError(
                    f"{self.name}: {label} must be a positive depression angle, got {value}"
                )
        if self.isha_interval is not None and self.isha_interval <= 0:
            raise ConfigurationError(
                f"{self.name}: isha_interval must be positive, got {self.isha_interval}"
            )
        if not isinstance(self.asr_convention, AsrConvention):
            raise ConfigurationError(f"{self.name}: unknown Asr convention")
        if not isinstance(self.high_latitude_rule, HighLatitudeRule):
            raise ConfigurationError(f"{self.name}: unknown high-latitude rule")

    def with_asr(self, convention: AsrConvention) -> "CalculationParameters":
        return replace(self, asr_convention=convention)


class PrayerWindow(Enum):
    """Classification of an instant relative to a day's prayer times."""

    FAJR = "Fajr"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"
    PRE_FAJR = "Pre-Fajr"
    POST_ISHA = "Post-Isha"


NAMED_PRAYERS: tuple[PrayerWindow, ...] = (
    PrayerWindow.FAJR,
    PrayerWindow.DHUHR,
    PrayerWindow.ASR,
    PrayerWindow.MAGHRIB,
    PrayerWindow.ISHA,
)


@dataclass(frozen=True)
class DailyPrayerTimes:
    """Computed times for one calendar day. All instants are tz-aware, local zone."""

    date: date
    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime
    qiyam: datetime  # Start of the last third of the night
    next_fajr: datetime  # Following day's Fajr, the end of tonight
    tz: tzinfo  # Zone the instants are expressed in
    approximated: tuple[str, ...] = ()  # Times produced by a high-latitude fallback

    def prayers(self) -> tuple[tuple[PrayerWindow, datetime], ...]:
        """The five named prayers in fixed order."""
        return tuple((window, self.time_of(window)) for window in NAMED_PRAYERS)

    def time_of(self, window: PrayerWindow) -> datetime:
        if window not in NAMED_PRAYERS:
            raise InvalidInput(f"{window.value} has no start time")
        return getattr(self, window.name.lower())


@dataclass(frozen=True)
class NextPrayer:
    """The upcoming prayer relative to a query instant."""

    window: PrayerWindow
    timestamp: datetime
    time_string: str  # "h:mm AM/PM"
    is_tomorrow: bool

    @property
    def name(self) -> str:
        return self.window.value


@dataclass(frozen=True)
class PrayerNotification:
    """A (title, body, fire time) triple for the external scheduler."""

    identifier: str  # "Fajr" or "Fajr-reminder"
    title: str
    body: str
    fire_at: datetime
