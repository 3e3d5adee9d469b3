"""Deduplication logic - Pure functions.

This module decides which alerts are new for a subscriber and which alert
types should be remembered as already notified. All functions are pure with
no side effects.

Note: The per-subscriber alerted-type set itself lives in the subscriber
registry. This module only contains the pure logic.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from enviro_alerts.core.classifier import AlertType, ClassifiedAlert, Severity


ACTIVE_SEVERITIES = frozenset({Severity.SEVERE, Severity.DANGER})


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of comparing current alerts with a subscriber's history.

    Attributes:
        to_notify: Alerts that crossed threshold since the last sweep
        alerted_types: Replacement alerted-type set for the subscriber
    """
    to_notify: list[ClassifiedAlert]
    alerted_types: frozenset[AlertType]


def filter_active(alerts: Iterable[ClassifiedAlert]) -> list[ClassifiedAlert]:
    """Keep only severe-or-above alerts, preserving order.

    Pure function.
    """
    return [a for a in alerts if a.severity in ACTIVE_SEVERITIES]


def get_alert_types(alerts: Iterable[ClassifiedAlert]) -> frozenset[AlertType]:
    """Extract the set of alert types from alerts.

    Pure function.
    """
    return frozenset(a.type for a in alerts)


def filter_already_alerted(
    alerts: Iterable[ClassifiedAlert],
    already_alerted_types: Iterable[AlertType],
) -> list[ClassifiedAlert]:
    """Filter out alerts whose type has already been notified.

    Pure function.

    Args:
        alerts: Alerts to filter
        already_alerted_types: Types already notified and still active

    Returns:
        Alerts not yet notified, in their original order
    """
    seen = frozenset(already_alerted_types)
    return [a for a in alerts if a.type not in seen]


def reconcile(
    all_alerts: Iterable[ClassifiedAlert],
    prior_alerted_types: Iterable[AlertType],
) -> Reconciliation:
    """Compute which alerts to notify and the new alerted-type set.

    Pure function.

    The returned set replaces the prior one rather than merging with it, so
    a condition that clears this sweep is free to fire again later.

    Args:
        all_alerts: Classified alerts from the current sweep
        prior_alerted_types: Types notified and active after the last sweep

    Returns:
        Reconciliation with alerts to notify and the replacement set
    """
    active = filter_active(all_alerts)

    return Reconciliation(
        to_notify=filter_already_alerted(active, prior_alerted_types),
        alerted_types=get_alert_types(active),
    )
