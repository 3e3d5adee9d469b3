"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components for one sweep over all
subscribers:

    registry snapshot -> fetch conditions -> classify -> reconcile
        -> dispatch new alerts -> write back alerted types
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from enviro_alerts.core.classifier import ClassifiedAlert, classify
from enviro_alerts.core.config import PUSH_PROVIDER_EXPO, Config
from enviro_alerts.core.dedup import reconcile
from enviro_alerts.core.errors import FetchError
from enviro_alerts.core.formatter import mask_address
from enviro_alerts.registry import SubscriberRegistry
from enviro_alerts.shell.expo_client import ExpoPushClient
from enviro_alerts.shell.fcm_client import FCMPushClient
from enviro_alerts.shell.push_client import DispatchResult, DispatchStatus, PushClient
from enviro_alerts.shell.weather_client import WeatherClient


logger = logging.getLogger(__name__)


def create_push_client(config: Config) -> PushClient:
    """Create the push transport selected by configuration."""
    if config.push_provider == PUSH_PROVIDER_EXPO:
        return ExpoPushClient(
            access_token=config.expo_access_token,
            timeout=config.request_timeout_seconds,
        )
    return FCMPushClient(
        service_account=config.firebase_credentials,
        timeout=config.request_timeout_seconds,
    )


@dataclass
class AlertResult:
    """Result of dispatching a single alert to a subscriber.

    Attributes:
        address: Push address the alert was sent to
        alert: The alert that was dispatched
        success: Whether the alert was delivered
        error: Error message if failed
    """
    address: str
    alert: ClassifiedAlert
    success: bool
    error: str | None = None


@dataclass
class SubscriberResult:
    """Result of processing one subscriber during a sweep.

    Attributes:
        address: Push address
        skipped: True if the app was open (nothing fetched or sent)
        missing: True if unregistered before it could be processed
        fetch_failed: True if conditions could not be fetched
        removed: True if the address was found invalid and removed
        alerts_sent: Delivered alerts
        alerts_failed: Failed delivery attempts
        alerts_suppressed: Active alerts not sent because already notified
        error: Error message if processing failed
    """
    address: str
    skipped: bool = False
    missing: bool = False
    fetch_failed: bool = False
    removed: bool = False
    alerts_sent: list[AlertResult] = field(default_factory=list)
    alerts_failed: list[AlertResult] = field(default_factory=list)
    alerts_suppressed: int = 0
    error: str | None = None


@dataclass
class SweepResult:
    """Result of a complete sweep.

    Attributes:
        subscribers_total: Subscribers registered when the sweep started
        subscribers_checked: Subscribers whose conditions were evaluated
        subscribers_skipped: Subscribers skipped because their app was open
        subscribers_removed: Addresses removed as permanently invalid
        fetch_failures: Subscribers whose conditions could not be fetched
        alerts_sent: Successfully delivered alerts
        alerts_failed: Failed delivery attempts
        alerts_suppressed: Active alerts suppressed as already notified
        errors: Per-subscriber error descriptions
        skipped_in_flight: True if rejected because a sweep was running
    """
    subscribers_total: int = 0
    subscribers_checked: int = 0
    subscribers_skipped: int = 0
    subscribers_removed: list[str] = field(default_factory=list)
    fetch_failures: int = 0
    alerts_sent: list[AlertResult] = field(default_factory=list)
    alerts_failed: list[AlertResult] = field(default_factory=list)
    alerts_suppressed: int = 0
    errors: list[str] = field(default_factory=list)
    skipped_in_flight: bool = False

    @property
    def success(self) -> bool:
        """Returns True if no subscriber hit an error."""
        return len(self.errors) == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the sweep."""
        if self.skipped_in_flight:
            return "Skipped: a sweep is already in progress"
        return (
            f"Checked {self.subscribers_checked} of {self.subscribers_total} subscribers "
            f"({self.subscribers_skipped} app open, {self.fetch_failures} fetch failures), "
            f"{len(self.alerts_sent)} alerts sent, "
            f"{len(self.alerts_failed)} failed, "
            f"{self.alerts_suppressed} suppressed, "
            f"{len(self.subscribers_removed)} removed"
        )

    def add(self, result: SubscriberResult) -> None:
        """Fold one subscriber's result into the sweep totals."""
        if result.missing:
            return

        if result.skipped:
            self.subscribers_skipped += 1
        elif result.fetch_failed:
            self.fetch_failures += 1
        else:
            self.subscribers_checked += 1

        if result.removed:
            self.subscribers_removed.append(result.address)

        self.alerts_sent.extend(result.alerts_sent)
        self.alerts_failed.extend(result.alerts_failed)
        self.alerts_suppressed += result.alerts_suppressed

        if result.error:
            self.errors.append(f"{mask_address(result.address)}: {result.error}")


class SweepOrchestrator:
    """Coordinates environmental checks and push alerting.

    This class wires together:
    - Subscriber registry (locations and alerted-type history)
    - Weather client (fetches current conditions)
    - Core functions (classification, deduplication)
    - Push client (FCM or Expo delivery)
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        config: Config | None = None,
        weather_client: WeatherClient | None = None,
        push_client: PushClient | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            registry: Subscriber registry to sweep
            config: Application configuration
            weather_client: Weather client (created if not provided)
            push_client: Push client (created from config if not provided)
        """
        self.registry = registry
        self.config = config or Config()
        self.weather_client = weather_client or WeatherClient(
            api_key=self.config.weather_api_key,
            base_url=self.config.weather_api_url,
            timeout=self.config.request_timeout_seconds,
        )
        self.push_client = push_client or create_push_client(self.config)
        self._sweep_lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        """Returns True while a sweep is running."""
        return self._sweep_lock.locked()

    def _dispatch(self, address: str, alert: ClassifiedAlert) -> DispatchResult:
        """Dispatch one alert, converting unexpected errors to transient failures."""
        try:
            return self.push_client.dispatch(address, alert)
        except Exception as e:
            logger.exception("Unexpected error dispatching to %s", mask_address(address))
            return DispatchResult(
                status=DispatchStatus.TRANSIENT_FAILURE,
                error=str(e),
            )

    def _process_subscriber(self, address: str) -> SubscriberResult:
        """Run fetch, classify, reconcile and dispatch for one subscriber.

        Args:
            address: Push address to process

        Returns:
            SubscriberResult describing what happened
        """
        result = SubscriberResult(address=address)

        with self.registry.lock_for(address):
            subscriber = self.registry.get(address)

        if subscriber is None:
            # Removed since the sweep started
            result.missing = True
            return result

        if subscriber.app_open:
            logger.debug("Skipping %s: app is open", mask_address(address))
            result.skipped = True
            return result

        # Step 1: Fetch current conditions
        try:
            snapshot = self.weather_client.fetch_current_conditions(
                subscriber.latitude,
                subscriber.longitude,
            )
        except FetchError as e:
            logger.warning("Failed to check user %s: %s", mask_address(address), e)
            result.fetch_failed = True
            return result
        except Exception as e:
            logger.exception("Unexpected error fetching conditions for %s", mask_address(address))
            result.fetch_failed = True
            result.error = f"Failed to fetch conditions: {e}"
            return result

        # Step 2: Classify and reconcile (pure core functions)
        all_alerts = classify(snapshot, self.config.thresholds)
        reconciliation = reconcile(all_alerts, subscriber.alerted_types)

        result.alerts_suppressed = (
            len(reconciliation.alerted_types) - len(reconciliation.to_notify)
        )

        # Step 3: Dispatch new alerts, in order, one at a time
        for alert in reconciliation.to_notify:
            dispatch_result = self._dispatch(address, alert)

            alert_result = AlertResult(
                address=address,
                alert=alert,
                success=dispatch_result.success,
                error=dispatch_result.error,
            )

            if dispatch_result.success:
                result.alerts_sent.append(alert_result)
            else:
                result.alerts_failed.append(alert_result)

            if dispatch_result.address_invalid:
                with self.registry.lock_for(address):
                    self.registry.remove(address)
                logger.info("Removed invalid address %s", mask_address(address))
                result.removed = True
                return result

        # Step 4: Replace alerted types (lets cleared conditions fire again)
        with self.registry.lock_for(address):
            self.registry.set_alerted_types(address, reconciliation.alerted_types)

        return result

    def _safe_process(self, address: str) -> SubscriberResult:
        """Process a subscriber, containing any unexpected error."""
        try:
            return self._process_subscriber(address)
        except Exception as e:
            logger.exception("Failed to process subscriber %s", mask_address(address))
            return SubscriberResult(address=address, error=str(e))

    def run_sweep(self) -> SweepResult:
        """Run one sweep over every registered subscriber.

        Only one sweep runs at a time; a call made while another sweep is
        in flight returns immediately with skipped_in_flight set.

        Returns:
            SweepResult with details of what happened
        """
        if not self._sweep_lock.acquire(blocking=False):
            logger.warning("Sweep already in progress, skipping")
            return SweepResult(skipped_in_flight=True)

        try:
            return self._run_sweep()
        finally:
            self._sweep_lock.release()

    def _run_sweep(self) -> SweepResult:
        entries = self.registry.all_entries()
        sweep = SweepResult(subscribers_total=len(entries))

        if not entries:
            logger.info("No subscribers registered, nothing to check")
            return sweep

        logger.info("Checking %d subscriber(s)", len(entries))

        addresses = [address for address, _ in entries]
        workers = max(1, self.config.sweep_workers)

        if workers == 1:
            results = [self._safe_process(address) for address in addresses]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sweep") as pool:
                results = list(pool.map(self._safe_process, addresses))

        for result in results:
            sweep.add(result)

        logger.info("Sweep complete: %s", sweep.summary)

        return sweep
