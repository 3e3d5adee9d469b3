"""Error taxonomy for the alerting service.

Every failure the service reports is one of these. Sweeps contain all of
them per subscriber; only registration surfaces ValidationError to callers.
"""


class AlertsError(Exception):
    """Base class for all service errors."""


class ValidationError(AlertsError):
    """Registration input was rejected.

    Attributes:
        messages: Human-readable descriptions of each problem
    """

    def __init__(self, messages: list[str]) -> None:
        self.messages = list(messages)
        super().__init__("; ".join(self.messages) or "Invalid registration")


class FetchError(AlertsError):
    """Weather data could not be fetched or parsed for one location."""


class DispatchError(AlertsError):
    """A push notification could not be delivered."""


class DispatchTransientError(DispatchError):
    """Delivery failed but the address may still be valid."""


class DispatchPermanentError(DispatchError):
    """The push address is confirmed invalid (unregistered or revoked)."""
