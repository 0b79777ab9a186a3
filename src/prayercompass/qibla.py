"""Qibla direction: great-circle bearing and distance to the Kaaba."""

import math

from prayercompass.models import Coordinate

KAABA = Coordinate(21.4225, 39.8262, place_name="Kaaba, Mecca")
EARTH_RADIUS_KM = 6371.0


def bearing_to_kaaba(coordinate: Coordinate) -> float:
    """Initial great-circle bearing from ``coordinate`` to the Kaaba.

    Args:
        coordinate: Observer position.

    Returns:
        Degrees clockwise from true north, in [0, 360). The Kaaba itself has
        no defined bearing and returns 0.0.
    """
    if (coordinate.latitude, coordinate.longitude) == (KAABA.latitude, KAABA.longitude):
        return 0.0

    lat1 = math.radians(coordinate.latitude)
    lat2 = math.radians(KAABA.latitude)
    delta_lng = math.radians(KAABA.longitude - coordinate.longitude)

    y = math.sin(delta_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        delta_lng
    )
    bearing = (math.degrees(math.atan2(y, x)) + 360) % 360
    # -1e-15 + 360 rounds to exactly 360.0 in floating point
    return 0.0 if bearing >= 360 else bearing


def distance_to_kaaba_km(coordinate: Coordinate) -> float:
    """Haversine distance to the Kaaba in kilometres."""
    d_lat = math.radians(KAABA.latitude - coordinate.latitude)
    d_lng = math.radians(KAABA.longitude - coordinate.longitude)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(coordinate.latitude))
        * math.cos(math.radians(KAABA.latitude))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def heading_from_magnetometer(x: float, y: float) -> float:
    """Device heading in [0, 360) from the magnetometer's horizontal components."""
    heading = math.degrees(math.atan2(y, x))
    return heading + 360 if heading < 0 else heading


def compass_rotation(bearing: float, heading: float) -> float:
    """Angle to rotate the Qibla needle given the device heading, in [0, 360)."""
    return (bearing - heading) % 360
