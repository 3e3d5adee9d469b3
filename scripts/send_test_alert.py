#!/usr/bin/env python3
"""Send a test push alert to a single device.

⚠️  WARNING: This script sends a REAL notification to the given device!

This script builds a synthetic alert (or classifies the live conditions at a
location) and sends it using the same formatting as production alerts.
A [TEST] marker is added to the title.

Usage:
    # Dry run (preview only, no sends)
    python scripts/send_test_alert.py --token <push-token> --dry-run

    # Send a specific alert type
    python scripts/send_test_alert.py --token <push-token> --type AirQuality_danger

    # Classify live conditions at a location and send whatever fires
    python scripts/send_test_alert.py --token <push-token> --live --lat 28.61 --lon 77.21

Environment:
    CONFIG_PATH: Path to config file (otherwise read from environment)
    PUSH_PROVIDER: 'fcm' or 'expo'
    FIREBASE_SERVICE_ACCOUNT / EXPO_ACCESS_TOKEN: Push credentials
    WEATHER_API_KEY: Needed for --live
"""

import argparse
import logging
import os
import sys

from enviro_alerts.core.classifier import AlertType, ClassifiedAlert, classify
from enviro_alerts.core.formatter import format_notification, mask_address
from enviro_alerts.core.readings import ReadingSnapshot
from enviro_alerts.core.registration import is_valid_push_address
from enviro_alerts.orchestrator import create_push_client
from enviro_alerts.shell.config_loader import load_config, load_config_from_env
from enviro_alerts.shell.weather_client import WeatherClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


# Readings that trip exactly one alert each
SYNTHETIC_READINGS = {
    AlertType.AIR_QUALITY_DANGER: ReadingSnapshot(pm25=80.4, uv=1, temp_c=20, visibility_km=10),
    AlertType.AIR_QUALITY_SEVERE: ReadingSnapshot(pm25=41.2, uv=1, temp_c=20, visibility_km=10),
    AlertType.UV_DANGER: ReadingSnapshot(pm25=5, uv=9, temp_c=20, visibility_km=10),
    AlertType.TEMP_DANGER: ReadingSnapshot(pm25=5, uv=1, temp_c=44, visibility_km=10),
    AlertType.VISIBILITY_DANGER: ReadingSnapshot(pm25=5, uv=1, temp_c=20, visibility_km=0.8),
    AlertType.WIND_DANGER: ReadingSnapshot(pm25=5, uv=1, temp_c=20, visibility_km=10, wind_kph=95),
}


def create_test_alert(alert_type: AlertType) -> ClassifiedAlert:
    """Create a synthetic alert by classifying canned readings."""
    alerts = classify(SYNTHETIC_READINGS[alert_type])
    return alerts[0]


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a test push alert to one device")
    parser.add_argument("--token", required=True, help="Push token of the target device")
    parser.add_argument(
        "--type",
        default=AlertType.AIR_QUALITY_DANGER.value,
        choices=[t.value for t in AlertType],
        help="Alert type to send (default: AirQuality_danger)",
    )
    parser.add_argument("--live", action="store_true", help="Classify live conditions instead")
    parser.add_argument("--lat", type=float, help="Latitude for --live")
    parser.add_argument("--lon", type=float, help="Longitude for --live")
    parser.add_argument("--dry-run", action="store_true", help="Preview without sending")
    args = parser.parse_args()

    config = load_config() if os.environ.get("CONFIG_PATH") else load_config_from_env()

    if not is_valid_push_address(args.token, config.push_provider):
        logger.error("Token is not a valid %s push address", config.push_provider)
        return 1

    if args.live:
        if args.lat is None or args.lon is None:
            logger.error("--live requires --lat and --lon")
            return 1
        weather = WeatherClient(
            api_key=config.weather_api_key,
            base_url=config.weather_api_url,
            timeout=config.request_timeout_seconds,
        )
        snapshot = weather.fetch_current_conditions(args.lat, args.lon)
        logger.info("Conditions: %s", snapshot)
        alerts = classify(snapshot, config.thresholds)
        if not alerts:
            logger.info("No alerts for current conditions, nothing to send")
            return 0
    else:
        alerts = [create_test_alert(AlertType(args.type))]

    push_client = None if args.dry_run else create_push_client(config)
    failures = 0

    for alert in alerts:
        notification = format_notification(alert, is_test=True)
        print(f"\n{notification.title}\n{notification.body}\n")

        if push_client is None:
            logger.info("[DRY RUN] Would send [%s] to %s", alert.type.value, mask_address(args.token))
            continue

        result = push_client.send_notification(args.token, notification)
        if result.success:
            logger.info("  ✓ Sent [%s] (%s)", alert.type.value, result.message_id)
        else:
            logger.error("  ✗ Failed to send [%s]: %s", alert.type.value, result.error)
            failures += 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
