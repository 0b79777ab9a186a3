"""Named calculation conventions and parsing of loose parameter mappings."""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from prayercompass.errors import ConfigurationError
from prayercompass.models import (
    Adjustments,
    AsrConvention,
    CalculationParameters,
    HighLatitudeRule,
)

MUSLIM_WORLD_LEAGUE = CalculationParameters("MuslimWorldLeague", 18.0, 17.0)
NORTH_AMERICA = CalculationParameters("NorthAmerica", 15.0, 15.0)
EGYPTIAN = CalculationParameters("Egyptian", 19.5, 17.5)
UMM_AL_QURA = CalculationParameters("UmmAlQura", 18.5, isha_interval=90)
KARACHI = CalculationParameters("Karachi", 18.0, 18.0)
TEHRAN = CalculationParameters("Tehran", 17.7, 14.0)
DUBAI = CalculationParameters("Dubai", 18.2, 18.2)
KUWAIT = CalculationParameters("Kuwait", 18.0, 17.5)
QATAR = CalculationParameters("Qatar", 18.0, isha_interval=90)
SINGAPORE = CalculationParameters("Singapore", 20.0, 18.0)
TURKEY = CalculationParameters("Turkey", 18.0, 17.0)

METHODS: dict[str, CalculationParameters] = {
    p.name.lower(): p
    for p in (
        MUSLIM_WORLD_LEAGUE,
        NORTH_AMERICA,
        EGYPTIAN,
        UMM_AL_QURA,
        KARACHI,
        TEHRAN,
        DUBAI,
        KUWAIT,
        QATAR,
        SINGAPORE,
        TURKEY,
    )
}

_ALIASES: dict[str, str] = {
    "mwl": "muslimworldleague",
    "isna": "northamerica",
    "egypt": "egyptian",
    "makkah": "ummalqura",
    "umm_al_qura": "ummalqura",
    "muslim_world_league": "muslimworldleague",
    "north_america": "northamerica",
}

_ASR_NAMES: dict[str, AsrConvention] = {
    "standard": AsrConvention.STANDARD,
    "shafi": AsrConvention.STANDARD,
    "maliki": AsrConvention.STANDARD,
    "hanbali": AsrConvention.STANDARD,
    "hanafi": AsrConvention.HANAFI,
}


def get_method(name: str) -> CalculationParameters:
    """Look up a named convention, case-insensitively.

    Raises:
        ConfigurationError: If the name is not a known convention.
    """
    key = name.strip().lower().replace(" ", "")
    key = _ALIASES.get(key, key)
    try:
        return METHODS[key]
    except KeyError:
        known = ", ".join(sorted(p.name for p in METHODS.values()))
        raise ConfigurationError(
            f"Unknown calculation method: {name!r} (known: {known})"
        ) from None


def parse_asr_convention(value: str | AsrConvention) -> AsrConvention:
    if isinstance(value, AsrConvention):
        return value
    try:
        return _ASR_NAMES[value.strip().lower()]
    except (KeyError, AttributeError):
        raise ConfigurationError(f"Unknown Asr convention: {value!r}") from None


def parse_high_latitude_rule(value: str | HighLatitudeRule) -> HighLatitudeRule:
    if isinstance(value, HighLatitudeRule):
        return value
    try:
        return HighLatitudeRule(value.strip().lower().replace("-", "_"))
    except (ValueError, AttributeError):
        raise ConfigurationError(f"Unknown high-latitude rule: {value!r}") from None


def parameters_from_mapping(options: Mapping[str, Any]) -> CalculationParameters:
    """Build CalculationParameters from a loose settings mapping.

    Recognized keys: ``method`` (base convention, default MuslimWorldLeague),
    ``fajr_angle``, ``isha_angle``, ``isha_interval``, ``asr`` (or ``madhab``),
    ``high_latitude_rule``, ``adjustments`` (mapping of prayer → minutes).
    Unknown keys are rejected so typos do not silently fall back to defaults.

    Raises:
        ConfigurationError: On unknown keys, unknown names or invalid angles.
    """
    allowed = {
        "method",
        "fajr_angle",
        "isha_angle",
        "isha_interval",
        "asr",
        "madhab",
        "high_latitude_rule",
        "adjustments",
    }
    unknown = set(options) - allowed
    if unknown:
        raise ConfigurationError(f"Unknown calculation options: {sorted(unknown)}")

    params = get_method(options.get("method", MUSLIM_WORLD_LEAGUE.name))
    changes: dict[str, Any] = {}
    if "fajr_angle" in options:
        changes["fajr_angle"] = options["fajr_angle"]
    if "isha_angle" in options:
        changes["isha_angle"] = options["isha_angle"]
        changes["isha_interval"] = None
    if "isha_interval" in options:
        changes["isha_interval"] = options["isha_interval"]
    asr = options.get("asr", options.get("madhab"))
    if asr is not None:
        changes["asr_convention"] = parse_asr_convention(asr)
    if "high_latitude_rule" in options:
        changes["high_latitude_rule"] = parse_high_latitude_rule(
            options["high_latitude_rule"]
        )
    if "adjustments" in options:
        try:
            changes["adjustments"] = Adjustments(**options["adjustments"])
        except TypeError as e:
            raise ConfigurationError(f"Invalid adjustments: {e}") from e
    if not changes:
        return params
    return replace(params, **changes)
