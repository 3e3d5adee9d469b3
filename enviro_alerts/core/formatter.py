"""Notification formatting - Pure functions.

This module turns classified alerts into push notification content.
All functions are pure with no side effects.
"""

from dataclasses import dataclass
from typing import Any

from enviro_alerts.core.classifier import ClassifiedAlert, Severity


# Accent colours shown on Android notifications
DANGER_COLOR = "#E879F9"
SEVERE_COLOR = "#F87171"

# Characters of a push address kept when logging
ADDRESS_LOG_PREFIX = 20


@dataclass(frozen=True)
class Notification:
    """Transport-neutral push notification content.

    Attributes:
        title: Notification title
        body: Notification body text
        color: Android accent colour (hex)
        alert_type: Alert type identifier, sent as data payload
        severity: Severity tier, sent as data payload
    """
    title: str
    body: str
    color: str
    alert_type: str
    severity: str


def get_notification_title(severity: Severity) -> str:
    """Get the notification title for a severity tier.

    Pure function.
    """
    if severity == Severity.DANGER:
        return "🚨 Dangerous Condition"
    return "⚠️ Severe Condition"


def get_notification_color(severity: Severity) -> str:
    """Get the Android accent colour for a severity tier.

    Pure function.
    """
    if severity == Severity.DANGER:
        return DANGER_COLOR
    return SEVERE_COLOR


def format_notification(alert: ClassifiedAlert, is_test: bool = False) -> Notification:
    """Format a classified alert as a push notification.

    Pure function.

    Args:
        alert: Alert to format
        is_test: Prefix the title with a [TEST] marker

    Returns:
        Notification content
    """
    title = get_notification_title(alert.severity)
    if is_test:
        title = f"[TEST] {title}"

    return Notification(
        title=title,
        body=alert.message,
        color=get_notification_color(alert.severity),
        alert_type=alert.type.value,
        severity=alert.severity.value,
    )


def format_expo_message(address: str, notification: Notification) -> dict[str, Any]:
    """Format a notification as an Expo push API message.

    Pure function.

    Args:
        address: Expo push token
        notification: Notification content

    Returns:
        Message dict for the Expo push endpoint
    """
    return {
        "to": address,
        "title": notification.title,
        "body": notification.body,
        "sound": "default",
        "priority": "high",
        "badge": 1,
        "channelId": "default",
        "data": {
            "type": notification.alert_type,
            "severity": notification.severity,
        },
    }


def mask_address(address: str) -> str:
    """Shorten a push address for log output.

    Pure function.
    """
    if len(address) <= ADDRESS_LOG_PREFIX:
        return address
    return f"{address[:ADDRESS_LOG_PREFIX]}..."
