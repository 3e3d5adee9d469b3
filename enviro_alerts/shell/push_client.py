"""Push Dispatch Service - Imperative Shell.

Common interface for the push transports. Subclasses implement _send() and
signal failures by raising DispatchTransientError or DispatchPermanentError;
dispatch() turns those into a DispatchResult so callers never see an
exception from a delivery attempt.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from enviro_alerts.core.classifier import ClassifiedAlert
from enviro_alerts.core.errors import DispatchPermanentError, DispatchTransientError
from enviro_alerts.core.formatter import Notification, format_notification, mask_address


logger = logging.getLogger(__name__)


class DispatchStatus(str, Enum):
    """Outcome of a single delivery attempt."""
    DELIVERED = "delivered"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENTLY_INVALID_ADDRESS = "permanently_invalid_address"


@dataclass
class DispatchResult:
    """Response from a push delivery attempt.

    Attributes:
        status: Delivery outcome
        message_id: Provider message/ticket ID if delivered
        error: Error message if failed
    """
    status: DispatchStatus
    message_id: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Returns True if the notification was accepted by the provider."""
        return self.status == DispatchStatus.DELIVERED

    @property
    def address_invalid(self) -> bool:
        """Returns True if the address should be forgotten."""
        return self.status == DispatchStatus.PERMANENTLY_INVALID_ADDRESS


class PushClient:
    """Base class for push transports.

    This is part of the imperative shell - it handles I/O.
    """

    provider = "unknown"

    def _send(self, address: str, notification: Notification) -> str | None:
        """Deliver a notification.

        Returns:
            Provider message ID, if any

        Raises:
            DispatchTransientError: Delivery failed, address may be valid
            DispatchPermanentError: Address is confirmed invalid
        """
        raise NotImplementedError

    def send_notification(self, address: str, notification: Notification) -> DispatchResult:
        """Send pre-formatted notification content to one address.

        This method performs I/O.
        """
        try:
            message_id = self._send(address, notification)
        except DispatchPermanentError as e:
            logger.warning(
                "Push address %s is no longer valid: %s",
                mask_address(address),
                e,
            )
            return DispatchResult(
                status=DispatchStatus.PERMANENTLY_INVALID_ADDRESS,
                error=str(e),
            )
        except DispatchTransientError as e:
            logger.warning(
                "Failed to send to %s: %s",
                mask_address(address),
                e,
            )
            return DispatchResult(
                status=DispatchStatus.TRANSIENT_FAILURE,
                error=str(e),
            )

        return DispatchResult(
            status=DispatchStatus.DELIVERED,
            message_id=message_id,
        )

    def dispatch(self, address: str, alert: ClassifiedAlert) -> DispatchResult:
        """Send a classified alert to one address.

        This method performs I/O.

        Args:
            address: Push address
            alert: Alert to deliver

        Returns:
            DispatchResult describing the outcome
        """
        # Format notification (pure core function)
        notification = format_notification(alert)

        result = self.send_notification(address, notification)

        if result.success:
            logger.info(
                "Sent [%s] to %s via %s",
                alert.type.value,
                mask_address(address),
                self.provider,
            )

        return result
