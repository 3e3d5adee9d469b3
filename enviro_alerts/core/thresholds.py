"""Severity cut-points per metric - Pure data.

Warning-level values are part of the table so that configuration can carry
them, but the classifier does not act on them.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ThresholdTable:
    """Severity thresholds for each environmental metric.

    Attributes:
        pm25_warning: PM2.5 warning level (µg/m³), unused
        pm25_severe: PM2.5 above this is severe
        pm25_danger: PM2.5 above this is dangerous
        uv_warning: UV warning level, unused
        uv_danger: UV index above this is dangerous
        temp_warning: Temperature warning level (°C), unused
        temp_danger: Temperature above this is dangerous
        visibility_warning: Visibility warning level (km), unused
        visibility_danger: Visibility below this is dangerous
        wind_warning: Wind warning level (km/h), unused
        wind_danger: Wind speed above this is dangerous
    """
    pm25_warning: float = 12
    pm25_severe: float = 35
    pm25_danger: float = 55
    uv_warning: float = 3
    uv_danger: float = 6
    temp_warning: float = 35
    temp_danger: float = 40
    visibility_warning: float = 5
    visibility_danger: float = 2
    wind_warning: float = 40
    wind_danger: float = 70


DEFAULT_THRESHOLDS = ThresholdTable()
