"""Firebase Cloud Messaging Client - Imperative Shell.

This module delivers push notifications through FCM using the Firebase
Admin SDK. All I/O is contained here; notification content is formatted in
the core module.
"""

import json
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from enviro_alerts.core.config import PUSH_PROVIDER_FCM
from enviro_alerts.core.errors import DispatchPermanentError, DispatchTransientError
from enviro_alerts.core.formatter import Notification
from enviro_alerts.shell.push_client import PushClient


logger = logging.getLogger(__name__)


# Name of the Firebase app instance owned by this client
FIREBASE_APP_NAME = "enviro-alerts"

# Default timeout for FCM requests (seconds)
DEFAULT_TIMEOUT = 10


def load_service_account(value: str) -> dict[str, Any] | str:
    """Interpret a service account setting.

    Inline JSON is decoded; anything else is treated as a file path.
    """
    stripped = value.strip()
    if stripped.startswith("{"):
        return json.loads(stripped)
    return stripped


def build_message(address: str, notification: Notification) -> messaging.Message:
    """Build an FCM message for one device."""
    return messaging.Message(
        token=address,
        notification=messaging.Notification(
            title=notification.title,
            body=notification.body,
        ),
        data={
            "type": notification.alert_type,
            "severity": notification.severity,
        },
        android=messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                color=notification.color,
                sound="default",
            ),
        ),
        apns=messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(sound="default", badge=1),
            ),
        ),
    )


def _is_invalid_token_error(error: Exception) -> bool:
    """True if FCM rejected the token itself rather than the request."""
    if isinstance(error, (messaging.UnregisteredError, messaging.SenderIdMismatchError)):
        return True
    if isinstance(error, exceptions.InvalidArgumentError):
        return "registration token" in str(error).lower()
    return False


class FCMPushClient(PushClient):
    """Client for sending notifications via Firebase Cloud Messaging.

    This is part of the imperative shell - it handles I/O.
    """

    provider = PUSH_PROVIDER_FCM

    def __init__(
        self,
        service_account: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        app: firebase_admin.App | None = None,
    ) -> None:
        """Initialize FCM client.

        Args:
            service_account: Service account JSON (inline) or path to it;
                None uses Application Default Credentials
            timeout: Request timeout in seconds
            app: Pre-initialised Firebase app (created lazily if not provided)
        """
        self.service_account = service_account
        self.timeout = timeout
        self._app = app

    @property
    def app(self) -> firebase_admin.App:
        """Lazy initialization of the Firebase app."""
        if self._app is None:
            try:
                self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
            except ValueError:
                if self.service_account:
                    cred = credentials.Certificate(load_service_account(self.service_account))
                else:
                    cred = credentials.ApplicationDefault()
                self._app = firebase_admin.initialize_app(
                    cred,
                    options={"httpTimeout": self.timeout},
                    name=FIREBASE_APP_NAME,
                )
                logger.info("Firebase app initialized")
        return self._app

    def _send(self, address: str, notification: Notification) -> str | None:
        """Send one FCM message.

        This method performs HTTP I/O.
        """
        message = build_message(address, notification)

        try:
            return messaging.send(message, app=self.app)
        except exceptions.FirebaseError as e:
            if _is_invalid_token_error(e):
                raise DispatchPermanentError(f"FCM rejected token: {e}") from e
            raise DispatchTransientError(f"FCM error: {e}") from e
        except ValueError as e:
            raise DispatchTransientError(f"FCM request invalid: {e}") from e
