"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field, fields

from enviro_alerts.core.thresholds import ThresholdTable


PUSH_PROVIDER_FCM = "fcm"
PUSH_PROVIDER_EXPO = "expo"
PUSH_PROVIDERS = (PUSH_PROVIDER_FCM, PUSH_PROVIDER_EXPO)

DEFAULT_WEATHER_API_URL = "https://api.weatherapi.com/v1/current.json"


def is_placeholder(value: object) -> bool:
    """True for an unresolved ${VAR} or ${secret:name} reference.

    Pure function.
    """
    return isinstance(value, str) and value.startswith("${") and value.endswith("}")


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        weather_api_key: WeatherAPI.com key
        weather_api_url: Current-conditions endpoint
        cron_secret: Shared secret for the on-demand sweep trigger
        push_provider: Push transport, 'fcm' or 'expo'
        firebase_credentials: Service account JSON (path or inline) for FCM
        expo_access_token: Optional Expo access token
        sweep_interval_seconds: How often the internal scheduler sweeps
        sweep_workers: Subscribers processed in parallel per sweep
        request_timeout_seconds: Timeout for each external call
        thresholds: Severity cut-points
    """
    weather_api_key: str | None = None
    weather_api_url: str = DEFAULT_WEATHER_API_URL
    cron_secret: str | None = None
    push_provider: str = PUSH_PROVIDER_FCM
    firebase_credentials: str | None = None
    expo_access_token: str | None = None
    sweep_interval_seconds: int = 300
    sweep_workers: int = 1
    request_timeout_seconds: float = 10
    thresholds: ThresholdTable = field(default_factory=ThresholdTable)


@dataclass
class ConfigIssue:
    """A configuration validation problem.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ConfigValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ConfigIssue] = field(default_factory=list)

    @property
    def warnings(self) -> list[ConfigIssue]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ConfigIssue]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ConfigIssue]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ConfigIssue(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ConfigIssue(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_thresholds(thresholds: ThresholdTable) -> list[ConfigIssue]:
    """Validate that threshold tiers are ordered sensibly.

    Pure function.
    """
    errors = []

    for f in fields(thresholds):
        value = getattr(thresholds, f.name)
        if value < 0:
            errors.append(ConfigIssue(
                field=f"thresholds.{f.name}",
                message=f"Threshold must not be negative, got {value}",
            ))

    if not thresholds.pm25_warning <= thresholds.pm25_severe <= thresholds.pm25_danger:
        errors.append(ConfigIssue(
            field="thresholds",
            message=(
                "PM2.5 thresholds must satisfy warning <= severe <= danger "
                f"(got {thresholds.pm25_warning}/{thresholds.pm25_severe}/{thresholds.pm25_danger})"
            ),
        ))

    # Visibility is inverted: lower is worse
    if thresholds.visibility_danger > thresholds.visibility_warning:
        errors.append(ConfigIssue(
            field="thresholds",
            message=(
                f"visibility_danger ({thresholds.visibility_danger}) > "
                f"visibility_warning ({thresholds.visibility_warning})"
            ),
            severity="warning",
        ))

    return errors


def validate_config(config: Config) -> ConfigValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ConfigValidationResult with any errors/warnings found
    """
    errors: list[ConfigIssue] = []

    if config.push_provider not in PUSH_PROVIDERS:
        errors.append(ConfigIssue(
            field="push_provider",
            message=f"Unknown push provider '{config.push_provider}', expected one of {PUSH_PROVIDERS}",
        ))

    if not config.weather_api_key or is_placeholder(config.weather_api_key):
        errors.append(ConfigIssue(
            field="weather_api_key",
            message="Weather API key not set (or still contains placeholder)",
            severity="warning",
        ))

    if not config.cron_secret or is_placeholder(config.cron_secret):
        errors.append(ConfigIssue(
            field="cron_secret",
            message="No cron secret configured (or still contains placeholder); on-demand sweeps will be rejected",
            severity="warning",
        ))

    if config.push_provider == PUSH_PROVIDER_FCM and not config.firebase_credentials:
        errors.append(ConfigIssue(
            field="firebase_credentials",
            message="FCM selected but no Firebase service account configured",
            severity="warning",
        ))

    if config.sweep_interval_seconds <= 0:
        errors.append(ConfigIssue(
            field="sweep_interval_seconds",
            message=f"Sweep interval must be positive, got {config.sweep_interval_seconds}",
        ))

    if config.sweep_workers < 1:
        errors.append(ConfigIssue(
            field="sweep_workers",
            message=f"Sweep workers must be at least 1, got {config.sweep_workers}",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ConfigIssue(
            field="request_timeout_seconds",
            message=f"Request timeout must be positive, got {config.request_timeout_seconds}",
        ))

    errors.extend(validate_thresholds(config.thresholds))

    has_critical = any(e.severity == "error" for e in errors)

    return ConfigValidationResult(
        valid=not has_critical,
        errors=errors,
    )
