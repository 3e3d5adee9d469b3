"""Subscriber Registry - In-memory subscriber state.

Holds each push subscriber's last known location, foreground flag and the
set of alert types already notified. State is process-local and is lost on
restart; clients re-register (or send a location update) to rebuild it.

Locking:
- A registry lock guards the address -> subscriber map itself.
- A per-address lock serialises read/write-back sections for one subscriber,
  so sweeps and registration requests for the same address never interleave
  inside those sections. External I/O is never done while holding either.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from enviro_alerts.core.classifier import AlertType
from enviro_alerts.core.config import PUSH_PROVIDER_FCM, PUSH_PROVIDERS
from enviro_alerts.core.errors import ValidationError
from enviro_alerts.core.formatter import mask_address
from enviro_alerts.core.registration import validate_registration


logger = logging.getLogger(__name__)


@dataclass
class Subscriber:
    """A registered push subscriber.

    Attributes:
        address: Push address (registration token)
        latitude: Last known latitude
        longitude: Last known longitude
        app_open: True while the app is in the foreground and alerts locally
        alerted_types: Alert types notified and still active
        provider: Push provider the address belongs to
    """
    address: str
    latitude: float
    longitude: float
    app_open: bool = False
    alerted_types: frozenset[AlertType] = field(default_factory=frozenset)
    provider: str = PUSH_PROVIDER_FCM


class SubscriberRegistry:
    """Thread-safe in-memory store of subscribers keyed by push address.

    The registry does not validate address formats; callers do that via
    register_or_update() before writing.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def lock_for(self, address: str) -> threading.Lock:
        """Get the per-address lock, creating it if needed."""
        with self._lock:
            lock = self._locks.get(address)
            if lock is None:
                lock = self._locks[address] = threading.Lock()
            return lock

    def upsert(
        self,
        address: str,
        latitude: float,
        longitude: float,
        app_open: bool | None = False,
        provider: str = PUSH_PROVIDER_FCM,
    ) -> tuple[Subscriber, bool]:
        """Create a subscriber or overwrite its location, flags and provider.

        The alerted-type set is never reset on update.

        Args:
            address: Push address
            latitude: Latitude
            longitude: Longitude
            app_open: Foreground flag; None keeps the stored value
            provider: Push provider the address belongs to

        Returns:
            Tuple of (copy of the stored subscriber, True if newly created)
        """
        with self.lock_for(address), self._lock:
            existing = self._subscribers.get(address)

            if existing is None:
                subscriber = Subscriber(
                    address=address,
                    latitude=latitude,
                    longitude=longitude,
                    app_open=bool(app_open),
                    provider=provider,
                )
                self._subscribers[address] = subscriber
                return replace(subscriber), True

            existing.latitude = latitude
            existing.longitude = longitude
            existing.provider = provider
            if app_open is not None:
                existing.app_open = app_open
            return replace(existing), False

    def get(self, address: str) -> Subscriber | None:
        """Get a copy of a subscriber, or None if not registered."""
        with self._lock:
            subscriber = self._subscribers.get(address)
            return replace(subscriber) if subscriber is not None else None

    def remove(self, address: str) -> bool:
        """Remove a subscriber and forget its lock.

        Returns:
            True if the subscriber existed
        """
        with self._lock:
            self._locks.pop(address, None)
            return self._subscribers.pop(address, None) is not None

    def set_alerted_types(self, address: str, alerted_types: Iterable[AlertType]) -> bool:
        """Replace a subscriber's alerted-type set.

        Only the alerted-type set is written, so a location update that
        arrived meanwhile is preserved.

        Returns:
            False if the subscriber is no longer registered
        """
        with self._lock:
            subscriber = self._subscribers.get(address)
            if subscriber is None:
                return False
            subscriber.alerted_types = frozenset(alerted_types)
            return True

    def all_entries(self) -> list[tuple[str, Subscriber]]:
        """Snapshot of all (address, subscriber copy) pairs.

        Safe to iterate while the registry is being modified.
        """
        with self._lock:
            return [(a, replace(s)) for a, s in self._subscribers.items()]

    def size(self) -> int:
        """Number of registered subscribers."""
        with self._lock:
            return len(self._subscribers)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._subscribers

    def clear(self) -> None:
        """Drop all subscribers."""
        with self._lock:
            self._subscribers.clear()
            self._locks.clear()


def register_or_update(
    registry: SubscriberRegistry,
    address: str,
    latitude: float,
    longitude: float,
    app_open: bool | None = None,
    provider: str = PUSH_PROVIDER_FCM,
) -> tuple[Subscriber, bool]:
    """Validate and write a registration or location update.

    Creates the subscriber if it is not registered yet, so clients recover
    transparently after a process restart.

    Args:
        registry: Registry to write to
        address: Push address
        latitude: Latitude
        longitude: Longitude
        app_open: Foreground flag; None keeps the stored value (False if new)
        provider: Push provider whose address format applies

    Returns:
        Tuple of (stored subscriber copy, True if newly created)

    Raises:
        ValidationError: If the address or coordinates are invalid
    """
    if provider not in PUSH_PROVIDERS:
        raise ValidationError([f"Unknown push provider: {provider}"])

    errors = validate_registration(address, latitude, longitude, provider)
    if errors:
        raise ValidationError(errors)

    subscriber, created = registry.upsert(
        address,
        float(latitude),
        float(longitude),
        app_open=app_open,
        provider=provider,
    )

    logger.info(
        "%s device %s at %.4f, %.4f",
        "Registered" if created else "Updated",
        mask_address(address),
        subscriber.latitude,
        subscriber.longitude,
    )

    return subscriber, created
