"""Environmental reading models and parsing - Pure functions.

This module handles parsing WeatherAPI.com "current conditions" JSON into
typed ReadingSnapshot objects. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ReadingSnapshot:
    """Immutable snapshot of current conditions at one location.

    Any field may be None when the upstream source did not report it.

    Attributes:
        pm25: Fine particulate matter (µg/m³)
        uv: UV index
        temp_c: Air temperature (°C)
        visibility_km: Visibility (km)
        wind_kph: Wind speed (km/h)
    """
    pm25: float | None = None
    uv: float | None = None
    temp_c: float | None = None
    visibility_km: float | None = None
    wind_kph: float | None = None

    @property
    def is_complete(self) -> bool:
        """True if every metric the classifier requires is present.

        Wind is optional and does not count.
        """
        return None not in (self.pm25, self.uv, self.temp_c, self.visibility_km)


def _to_float(value: Any) -> float | None:
    """Coerce a JSON value to float, None if missing or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_snapshot(payload: dict[str, Any]) -> ReadingSnapshot:
    """Parse a WeatherAPI current.json response into a ReadingSnapshot.

    Pure function. Missing or malformed fields become None.

    Args:
        payload: Response body from WeatherAPI current.json (with aqi=yes)

    Returns:
        ReadingSnapshot with whatever fields could be read
    """
    current = payload.get("current") or {}
    air_quality = current.get("air_quality") or {}

    return ReadingSnapshot(
        pm25=_to_float(air_quality.get("pm2_5")),
        uv=_to_float(current.get("uv")),
        temp_c=_to_float(current.get("temp_c")),
        visibility_km=_to_float(current.get("vis_km")),
        wind_kph=_to_float(current.get("wind_kph")),
    )
