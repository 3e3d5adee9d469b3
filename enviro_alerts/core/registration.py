"""Registration validation - Pure functions.

Checks push addresses and coordinates before anything touches the
subscriber registry. Each provider has its own address format.
"""

import re
from typing import Any

from enviro_alerts.core.config import PUSH_PROVIDER_EXPO, PUSH_PROVIDER_FCM, validate_coordinates


# FCM registration tokens: URL-safe base64 plus ':' separators
FCM_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_:\-]{20,4096}$")

# Expo tokens: ExponentPushToken[xxx] or ExpoPushToken[xxx]
EXPO_TOKEN_PATTERN = re.compile(r"^Expo(nent)?PushToken\[[^\[\]\s]+\]$")


def is_valid_push_address(address: Any, provider: str) -> bool:
    """Check a push address against the provider's format.

    Pure function.
    """
    if not isinstance(address, str) or not address:
        return False

    if provider == PUSH_PROVIDER_EXPO:
        return EXPO_TOKEN_PATTERN.match(address) is not None
    if provider == PUSH_PROVIDER_FCM:
        return FCM_TOKEN_PATTERN.match(address) is not None
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_registration(
    address: Any,
    latitude: Any,
    longitude: Any,
    provider: str = PUSH_PROVIDER_FCM,
) -> list[str]:
    """Validate a registration or location update request.

    Pure function. Zero is a valid coordinate; only missing values are
    rejected.

    Args:
        address: Push address
        latitude: Latitude
        longitude: Longitude
        provider: Push provider whose address format applies

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if address is None or address == "":
        errors.append("Push token is required")
    elif not is_valid_push_address(address, provider):
        errors.append(f"Push token is not a valid {provider} address")

    if latitude is None or longitude is None:
        errors.append("latitude and longitude are required")
    elif not (_is_number(latitude) and _is_number(longitude)):
        errors.append("latitude and longitude must be numbers")
    else:
        errors.extend(
            issue.message
            for issue in validate_coordinates(latitude, longitude, "location")
        )

    return errors
