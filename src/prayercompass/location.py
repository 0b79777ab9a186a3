"""Location lookup: geocoding, timezone resolution and the default fallback."""

import logging
from datetime import datetime, timedelta, tzinfo

import httpx
from pytz import timezone, utc
from timezonefinder import TimezoneFinder

from prayercompass.errors import GeocodingError
from prayercompass.models import Coordinate

logger = logging.getLogger(__name__)

_tf = TimezoneFinder()

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
LOCATION_MAX_AGE = timedelta(minutes=30)  # Live fix reuse window
LAST_KNOWN_MAX_AGE = timedelta(hours=24)  # Stored fix reuse window


def default_location(now: datetime | None = None) -> Coordinate:
    """Mecca, used whenever no fix or geocoding result is available."""
    return Coordinate(
        latitude=21.4225,
        longitude=39.8262,
        place_name="Mecca, Saudi Arabia",
        captured_at=now,
    )


def _geocode_nominatim(address: str) -> tuple[float, float, str] | None:
    """Nominatim (OpenStreetMap) geocoder. Returns (lat, lng, display_name) or None."""
    params = {"q": address, "format": "json", "limit": 1}
    headers = {"User-Agent": "PrayerCompass/1.0 (prayer times and qibla direction)"}
    resp = httpx.get(NOMINATIM_URL, params=params, headers=headers, timeout=10)
    resp.raise_for_status()
    results = resp.json()
    if not results:
        return None
    r = results[0]
    return float(r["lat"]), float(r["lon"]), r["display_name"]


def geocode_address(address: str, now: datetime | None = None) -> Coordinate:
    """Resolve an address string to a Coordinate.

    Args:
        address: Free-form address or place name in any language.
        now: Capture timestamp stored on the result.

    Returns:
        Coordinate annotated with the geocoder's display name.

    Raises:
        GeocodingError: On HTTP failure or when the address cannot be found.
    """
    if not address or not address.strip():
        raise GeocodingError("Address is empty")
    try:
        result = _geocode_nominatim(address)
    except httpx.HTTPError as e:
        raise GeocodingError(f"Geocoder request failed: {e}") from e
    if result is None:
        raise GeocodingError(f"Address not found: {address}")
    lat, lng, display_name = result
    return Coordinate(
        latitude=lat, longitude=lng, place_name=display_name, captured_at=now
    )


def resolve_location(address: str | None, now: datetime | None = None) -> Coordinate:
    """Geocode ``address``, falling back to the default location on any failure."""
    if not address:
        logger.info("No address configured, using default location (Mecca)")
        return default_location(now)
    try:
        return geocode_address(address, now)
    except GeocodingError as e:
        logger.warning("%s; using default location (Mecca)", e)
        return default_location(now)


def timezone_for(coordinate: Coordinate) -> tzinfo:
    """IANA zone of a coordinate as a pytz timezone.

    Open sea has no IANA zone; the nautical zone for the longitude is used.
    """
    tz_str = _tf.timezone_at(lat=coordinate.latitude, lng=coordinate.longitude)
    if tz_str is None:
        offset = round(coordinate.longitude / 15)
        if offset == 0:
            return utc
        nautical = f"Etc/GMT{-offset:+d}"  # POSIX sign: Etc/GMT-3 is UTC+3
        logger.debug("No zone at %s, using %s", coordinate, nautical)
        return timezone(nautical)
    return timezone(tz_str)


def is_fresh(
    coordinate: Coordinate, now: datetime, max_age: timedelta = LOCATION_MAX_AGE
) -> bool:
    """Whether a fix is recent enough to reuse instead of requesting a new one."""
    if coordinate.captured_at is None:
        return False
    return now - coordinate.captured_at < max_age
