"""Error taxonomy shared by the calculation core and its collaborators."""


class PrayerCompassError(Exception):
    """Base class for every error raised by prayercompass."""


class InvalidInput(PrayerCompassError, ValueError):
    """Malformed coordinate, date, timezone or instant."""


class ConfigurationError(PrayerCompassError, ValueError):
    """Incomplete or inconsistent calculation parameters or settings."""


class UnattainableAngle(PrayerCompassError):
    """The sun never reaches the requested altitude on the given day.

    Raised inside the solar calculator and always converted into the
    high-latitude fallback; callers of ``compute_daily_times`` never see it.
    """

    def __init__(self, altitude: float, latitude: float) -> None:
        super().__init__(
            f"sun never reaches altitude {altitude:.3f}° at latitude {latitude:.4f}°"
        )
        self.altitude = altitude
        self.latitude = latitude


class GeocodingError(PrayerCompassError):
    """Geocoder call failure."""
