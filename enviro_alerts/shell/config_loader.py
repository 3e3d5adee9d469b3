"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, ThresholdTable) are defined in the core package
to avoid information leakage between layers.
"""

import logging
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Optional

import yaml

from enviro_alerts.core.config import (
    DEFAULT_WEATHER_API_URL,
    PUSH_PROVIDER_FCM,
    Config,
    is_placeholder,
    validate_config,
)
from enviro_alerts.core.thresholds import ThresholdTable
from enviro_alerts.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get a Secret Manager client.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_thresholds(data: dict[str, Any]) -> ThresholdTable:
    """Parse threshold overrides; unknown keys are ignored with a warning."""
    known = {f.name for f in fields(ThresholdTable)}
    overrides = {}

    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown threshold: %s", key)
            continue
        overrides[key] = float(value)

    return ThresholdTable(**overrides)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _credential(key: str, value: Any) -> str | None:
    """Credential value, or None if its placeholder stayed unresolved."""
    if is_placeholder(value):
        logger.warning("Unresolved placeholder for %s, leaving it unset", key)
        return None
    return _optional_str(value)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()

    def resolved(key: str, default: Any = None) -> Any:
        return _resolve_value(data.get(key, default), secret_client)

    return Config(
        weather_api_key=_credential("weather_api_key", resolved("weather_api_key")),
        weather_api_url=resolved("weather_api_url", DEFAULT_WEATHER_API_URL),
        cron_secret=_credential("cron_secret", resolved("cron_secret")),
        push_provider=str(data.get("push_provider", PUSH_PROVIDER_FCM)).lower(),
        firebase_credentials=_credential("firebase_credentials", resolved("firebase_credentials")),
        expo_access_token=_credential("expo_access_token", resolved("expo_access_token")),
        sweep_interval_seconds=int(data.get("sweep_interval_seconds", 300)),
        sweep_workers=int(data.get("sweep_workers", 1)),
        request_timeout_seconds=float(data.get("request_timeout_seconds", 10)),
        thresholds=_parse_thresholds(data.get("thresholds") or {}),
    )


def _log_validation(config: Config) -> None:
    """Log configuration problems without failing startup."""
    result = validate_config(config)
    for issue in result.errors:
        log = logger.error if issue.severity == "error" else logger.warning
        log("Config %s: %s", issue.field, issue.message)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)
    _log_validation(config)

    logger.info(
        "Loaded config: provider=%s, sweep every %ds",
        config.push_provider,
        config.sweep_interval_seconds,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        WEATHER_API_KEY: WeatherAPI.com key (or ${secret:name})
        CRON_SECRET: Shared secret for GET /check
        PUSH_PROVIDER: 'fcm' (default) or 'expo'
        FIREBASE_SERVICE_ACCOUNT: Service account JSON or path
        EXPO_ACCESS_TOKEN: Expo access token
        SWEEP_INTERVAL_SECONDS: Internal sweep interval (default 300)
        SWEEP_WORKERS: Parallel subscribers per sweep (default 1)
        REQUEST_TIMEOUT_SECONDS: Timeout per external call (default 10)

    Returns:
        Config object from environment
    """
    data: dict[str, Any] = {
        "weather_api_key": os.environ.get("WEATHER_API_KEY"),
        "cron_secret": os.environ.get("CRON_SECRET"),
        "push_provider": os.environ.get("PUSH_PROVIDER", PUSH_PROVIDER_FCM),
        "firebase_credentials": os.environ.get("FIREBASE_SERVICE_ACCOUNT"),
        "expo_access_token": os.environ.get("EXPO_ACCESS_TOKEN"),
        "sweep_interval_seconds": os.environ.get("SWEEP_INTERVAL_SECONDS", "300"),
        "sweep_workers": os.environ.get("SWEEP_WORKERS", "1"),
        "request_timeout_seconds": os.environ.get("REQUEST_TIMEOUT_SECONDS", "10"),
    }

    weather_api_url = os.environ.get("WEATHER_API_URL")
    if weather_api_url:
        data["weather_api_url"] = weather_api_url

    config = load_config_from_dict(data)
    _log_validation(config)
    return config
