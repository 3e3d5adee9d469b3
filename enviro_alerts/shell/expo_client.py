"""Expo Push Client - Imperative Shell.

This module delivers push notifications through the Expo push service.
All I/O is contained here; message formatting is in the core module.
"""

import logging
from typing import Any

import requests

from enviro_alerts.core.config import PUSH_PROVIDER_EXPO
from enviro_alerts.core.errors import DispatchPermanentError, DispatchTransientError
from enviro_alerts.core.formatter import Notification, format_expo_message
from enviro_alerts.shell.push_client import PushClient


logger = logging.getLogger(__name__)


EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"

# Default timeout for push requests (seconds)
DEFAULT_TIMEOUT = 10

# Ticket error codes meaning the token will never work again
PERMANENT_TICKET_ERRORS = frozenset({"DeviceNotRegistered"})


class ExpoPushClient(PushClient):
    """Client for sending notifications via the Expo push API.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    provider = PUSH_PROVIDER_EXPO

    def __init__(
        self,
        access_token: str | None = None,
        push_url: str = EXPO_PUSH_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize Expo client.

        Args:
            access_token: Expo access token (only needed with enhanced security)
            push_url: Expo push endpoint
            timeout: Request timeout in seconds
        """
        self.access_token = access_token
        self.push_url = push_url
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _parse_ticket(self, body: dict[str, Any]) -> dict[str, Any]:
        """Extract the single push ticket from a response body."""
        if body.get("errors"):
            raise DispatchTransientError(f"Expo request rejected: {body['errors']}")

        data = body.get("data")
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            raise DispatchTransientError("Expo response contained no push ticket")
        return data

    def _send(self, address: str, notification: Notification) -> str | None:
        """Send one Expo push message.

        This method performs HTTP I/O.
        """
        payload = [format_expo_message(address, notification)]

        try:
            response = requests.post(
                self.push_url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise DispatchTransientError("Expo request timed out") from e
        except requests.RequestException as e:
            raise DispatchTransientError(f"Expo request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DispatchTransientError(
                f"Expo returned {response.status_code}: {response.text}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DispatchTransientError("Expo returned invalid JSON") from e

        ticket = self._parse_ticket(body)

        if ticket.get("status") == "ok":
            return ticket.get("id")

        error_code = (ticket.get("details") or {}).get("error")
        message = ticket.get("message", "unknown error")

        if error_code in PERMANENT_TICKET_ERRORS:
            raise DispatchPermanentError(f"{error_code}: {message}")
        raise DispatchTransientError(f"{error_code or 'error'}: {message}")
