"""Risk classification - Pure functions.

This module turns a ReadingSnapshot into classified alerts using the
threshold table. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from enum import Enum

from enviro_alerts.core.readings import ReadingSnapshot
from enviro_alerts.core.thresholds import DEFAULT_THRESHOLDS, ThresholdTable


class Severity(str, Enum):
    """Alert severity tiers."""
    WARNING = "warning"
    SEVERE = "severe"
    DANGER = "danger"


class AlertType(str, Enum):
    """Which metric and severity combination triggered an alert."""
    AIR_QUALITY_SEVERE = "AirQuality_severe"
    AIR_QUALITY_DANGER = "AirQuality_danger"
    UV_DANGER = "UV_danger"
    TEMP_DANGER = "Temp_danger"
    VISIBILITY_DANGER = "Visibility_danger"
    WIND_DANGER = "Wind_danger"


@dataclass(frozen=True)
class ClassifiedAlert:
    """A single threshold crossing.

    Attributes:
        type: Alert type identifier
        severity: Severity tier
        message: Human-readable text including the triggering value
    """
    type: AlertType
    severity: Severity
    message: str


def format_value(value: float) -> str:
    """Format a reading the way it was reported (7.0 -> '7', 7.5 -> '7.5').

    Pure function.
    """
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def classify_air_quality(pm25: float, thresholds: ThresholdTable) -> ClassifiedAlert | None:
    """Classify PM2.5. Danger and severe are mutually exclusive.

    Pure function.
    """
    if pm25 > thresholds.pm25_danger:
        return ClassifiedAlert(
            type=AlertType.AIR_QUALITY_DANGER,
            severity=Severity.DANGER,
            message=f"🫁 Hazardous air — PM2.5 at {pm25:.1f} µg/m³. Stay indoors.",
        )
    if pm25 > thresholds.pm25_severe:
        return ClassifiedAlert(
            type=AlertType.AIR_QUALITY_SEVERE,
            severity=Severity.SEVERE,
            message=f"😷 Unhealthy air — PM2.5 at {pm25:.1f} µg/m³. Wear a mask outdoors.",
        )
    return None


def classify_uv(uv: float, thresholds: ThresholdTable) -> ClassifiedAlert | None:
    """Classify UV index. Danger tier only.

    Pure function.
    """
    if uv > thresholds.uv_danger:
        return ClassifiedAlert(
            type=AlertType.UV_DANGER,
            severity=Severity.DANGER,
            message=f"☀️ Extreme UV index ({format_value(uv)}). Avoid direct sun, use SPF 50+.",
        )
    return None


def classify_temperature(temp_c: float, thresholds: ThresholdTable) -> ClassifiedAlert | None:
    """Classify air temperature. Danger tier only.

    Pure function.
    """
    if temp_c > thresholds.temp_danger:
        return ClassifiedAlert(
            type=AlertType.TEMP_DANGER,
            severity=Severity.DANGER,
            message=(
                f"🌡 Extreme heat — {format_value(temp_c)}°C. "
                "Risk of heatstroke. Stay indoors."
            ),
        )
    return None


def classify_visibility(visibility_km: float, thresholds: ThresholdTable) -> ClassifiedAlert | None:
    """Classify visibility. Lower is worse.

    Pure function.
    """
    if visibility_km < thresholds.visibility_danger:
        return ClassifiedAlert(
            type=AlertType.VISIBILITY_DANGER,
            severity=Severity.DANGER,
            message=f"🌫 Very poor visibility — {format_value(visibility_km)} km. Avoid driving.",
        )
    return None


def classify_wind(wind_kph: float, thresholds: ThresholdTable) -> ClassifiedAlert | None:
    """Classify wind speed. Danger tier only.

    Pure function.
    """
    if wind_kph > thresholds.wind_danger:
        return ClassifiedAlert(
            type=AlertType.WIND_DANGER,
            severity=Severity.DANGER,
            message=f"💨 Storm-level winds — {format_value(wind_kph)} km/h. Stay indoors.",
        )
    return None


def classify(
    snapshot: ReadingSnapshot,
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> list[ClassifiedAlert]:
    """Classify a reading snapshot into alerts.

    Pure function.

    Returns nothing unless PM2.5, UV, temperature and visibility are all
    present; a missing wind reading only skips the wind check. Alerts come
    back in a fixed order: air quality, UV, temperature, visibility, wind.

    Args:
        snapshot: Current conditions at one location
        thresholds: Severity cut-points

    Returns:
        Ordered list of classified alerts (possibly empty)
    """
    if not snapshot.is_complete:
        return []

    candidates = [
        classify_air_quality(snapshot.pm25, thresholds),
        classify_uv(snapshot.uv, thresholds),
        classify_temperature(snapshot.temp_c, thresholds),
        classify_visibility(snapshot.visibility_km, thresholds),
    ]

    if snapshot.wind_kph is not None:
        candidates.append(classify_wind(snapshot.wind_kph, thresholds))

    return [alert for alert in candidates if alert is not None]
