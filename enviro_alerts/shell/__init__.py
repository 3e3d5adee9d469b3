"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Weather API client (HTTP)
- Push clients: FCM (Firebase Admin SDK) and Expo (HTTP)
- Secret Manager client
- Configuration loading (environment/files)
- Periodic sweep scheduler

Keep this layer thin and simple. All business logic should be in core.
"""

from enviro_alerts.shell.weather_client import WeatherClient
from enviro_alerts.shell.push_client import DispatchResult, DispatchStatus, PushClient
from enviro_alerts.shell.fcm_client import FCMPushClient
from enviro_alerts.shell.expo_client import ExpoPushClient
from enviro_alerts.shell.config_loader import load_config, load_config_from_env
from enviro_alerts.shell.scheduler import SweepScheduler

__all__ = [
    "WeatherClient",
    "DispatchResult",
    "DispatchStatus",
    "PushClient",
    "FCMPushClient",
    "ExpoPushClient",
    "load_config",
    "load_config_from_env",
    "SweepScheduler",
]
