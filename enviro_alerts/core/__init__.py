"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Weather payload parsing
- Risk classification against thresholds
- Alert deduplication
- Notification formatting
- Registration validation

All functions here are deterministic and have no I/O.
"""

from enviro_alerts.core.readings import ReadingSnapshot, parse_snapshot
from enviro_alerts.core.thresholds import ThresholdTable, DEFAULT_THRESHOLDS
from enviro_alerts.core.classifier import AlertType, ClassifiedAlert, Severity, classify
from enviro_alerts.core.dedup import Reconciliation, reconcile
from enviro_alerts.core.formatter import Notification, format_notification, mask_address
from enviro_alerts.core.registration import validate_registration

__all__ = [
    # Readings
    "ReadingSnapshot",
    "parse_snapshot",
    # Thresholds
    "ThresholdTable",
    "DEFAULT_THRESHOLDS",
    # Classifier
    "AlertType",
    "ClassifiedAlert",
    "Severity",
    "classify",
    # Dedup
    "Reconciliation",
    "reconcile",
    # Formatter
    "Notification",
    "format_notification",
    "mask_address",
    # Registration
    "validate_registration",
]
