"""Settings from the environment (and a .env file, if present)."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from dotenv import load_dotenv

from prayercompass.errors import ConfigurationError, InvalidInput
from prayercompass.methods import (
    get_method,
    parse_asr_convention,
    parse_high_latitude_rule,
)
from prayercompass.models import CalculationParameters, Coordinate

_LANGS = ("en", "ar")


@dataclass(frozen=True)
class Settings:
    """Resolved user settings. Location fields are optional."""

    params: CalculationParameters
    coordinate: Coordinate | None  # From PRAYER_LATITUDE/PRAYER_LONGITUDE
    address: str | None  # Geocoded when no coordinate is set
    timezone: str | None  # IANA name; looked up from the coordinate if None
    lang: str
    reminder_minutes: int


def _parse_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def settings_from_env(env: Mapping[str, str]) -> Settings:
    """Build Settings from an environment mapping.

    Raises:
        ConfigurationError: On unknown names or malformed numbers.
    """
    params = get_method(env.get("PRAYER_METHOD", "MuslimWorldLeague"))
    if env.get("PRAYER_ASR"):
        params = params.with_asr(parse_asr_convention(env["PRAYER_ASR"]))
    if env.get("PRAYER_HIGH_LAT_RULE"):
        rule = parse_high_latitude_rule(env["PRAYER_HIGH_LAT_RULE"])
        params = replace(params, high_latitude_rule=rule)

    lat = _parse_float(env, "PRAYER_LATITUDE")
    lng = _parse_float(env, "PRAYER_LONGITUDE")
    coordinate = None
    if lat is not None and lng is not None:
        try:
            coordinate = Coordinate(lat, lng)
        except InvalidInput as e:
            raise ConfigurationError(str(e)) from e
    elif (lat is None) != (lng is None):
        raise ConfigurationError(
            "PRAYER_LATITUDE and PRAYER_LONGITUDE must be set together"
        )

    lang = env.get("PRAYER_LANG", "en").strip().lower() or "en"
    if lang not in _LANGS:
        raise ConfigurationError(f"PRAYER_LANG must be one of {_LANGS}, got {lang!r}")

    reminder = _parse_float(env, "PRAYER_REMINDER_MINUTES")
    reminder_minutes = 10 if reminder is None else int(reminder)
    if reminder_minutes < 0:
        raise ConfigurationError("PRAYER_REMINDER_MINUTES must not be negative")

    return Settings(
        params=params,
        coordinate=coordinate,
        address=env.get("PRAYER_ADDRESS") or None,
        timezone=env.get("PRAYER_TIMEZONE") or None,
        lang=lang,
        reminder_minutes=reminder_minutes,
    )


def load_settings() -> Settings:
    """Load .env into the process environment, then read Settings from it."""
    load_dotenv()
    return settings_from_env(os.environ)
