"""Unit tests for deduplication logic.

Pure function tests - no mocks needed.
"""

import pytest

from enviro_alerts.core.classifier import AlertType, ClassifiedAlert, Severity
from enviro_alerts.core.dedup import (
    filter_active,
    filter_already_alerted,
    get_alert_types,
    reconcile,
)


def make_alert(alert_type: AlertType, severity: Severity = Severity.DANGER) -> ClassifiedAlert:
    return ClassifiedAlert(type=alert_type, severity=severity, message=f"{alert_type.value} test")


@pytest.fixture
def alerts():
    """Create a list of active alerts in classifier order."""
    return [
        make_alert(AlertType.AIR_QUALITY_SEVERE, Severity.SEVERE),
        make_alert(AlertType.UV_DANGER),
        make_alert(AlertType.WIND_DANGER),
    ]


class TestFilterActive:
    """Tests for filter_active() function."""

    def test_drops_warning(self, alerts):
        """Warning-level alerts are not active."""
        warning = make_alert(AlertType.TEMP_DANGER, Severity.WARNING)

        result = filter_active([warning, *alerts])

        assert result == alerts

    def test_keeps_severe_and_danger(self, alerts):
        assert filter_active(alerts) == alerts


class TestGetAlertTypes:
    """Tests for get_alert_types() function."""

    def test_extracts_types(self, alerts):
        assert get_alert_types(alerts) == {
            AlertType.AIR_QUALITY_SEVERE,
            AlertType.UV_DANGER,
            AlertType.WIND_DANGER,
        }

    def test_empty_list(self):
        assert get_alert_types([]) == frozenset()


class TestFilterAlreadyAlerted:
    """Tests for filter_already_alerted() function."""

    def test_filters_alerted(self, alerts):
        """Should remove already-alerted types, keeping order."""
        result = filter_already_alerted(alerts, {AlertType.UV_DANGER})

        assert [a.type for a in result] == [AlertType.AIR_QUALITY_SEVERE, AlertType.WIND_DANGER]

    def test_all_alerted(self, alerts):
        result = filter_already_alerted(alerts, get_alert_types(alerts))
        assert result == []


class TestReconcile:
    """Tests for reconcile() function."""

    def test_first_sweep_notifies_everything(self, alerts):
        """With no history, every active alert is new."""
        result = reconcile(alerts, set())

        assert result.to_notify == alerts
        assert result.alerted_types == get_alert_types(alerts)

    def test_idempotent_when_nothing_changed(self, alerts):
        """Same conditions as last sweep notify nothing."""
        prior = get_alert_types(alerts)

        result = reconcile(alerts, prior)

        assert result.to_notify == []
        assert result.alerted_types == prior

    def test_only_new_types_notified(self, alerts):
        """A type added since last sweep is the only one notified."""
        prior = {AlertType.AIR_QUALITY_SEVERE, AlertType.WIND_DANGER}

        result = reconcile(alerts, prior)

        assert [a.type for a in result.to_notify] == [AlertType.UV_DANGER]

    def test_cleared_condition_is_forgotten(self):
        """No alerts clears the set."""
        result = reconcile([], {AlertType.AIR_QUALITY_DANGER})

        assert result.to_notify == []
        assert result.alerted_types == frozenset()

    def test_cleared_condition_refires(self):
        """After clearing, the same condition fires again."""
        alert = make_alert(AlertType.AIR_QUALITY_DANGER)

        cleared = reconcile([], {AlertType.AIR_QUALITY_DANGER})
        result = reconcile([alert], cleared.alerted_types)

        assert result.to_notify == [alert]

    def test_set_is_replaced_not_merged(self):
        """Types that are no longer active drop out of the set."""
        alert = make_alert(AlertType.UV_DANGER)

        result = reconcile([alert], {AlertType.WIND_DANGER, AlertType.TEMP_DANGER})

        assert result.alerted_types == {AlertType.UV_DANGER}

    def test_tier_change_notifies(self):
        """Severe escalating to danger is a new type and notifies."""
        danger = make_alert(AlertType.AIR_QUALITY_DANGER)

        result = reconcile([danger], {AlertType.AIR_QUALITY_SEVERE})

        assert result.to_notify == [danger]
        assert result.alerted_types == {AlertType.AIR_QUALITY_DANGER}

    def test_warning_alerts_never_notified(self):
        """Warning-level alerts are neither notified nor remembered."""
        warning = make_alert(AlertType.TEMP_DANGER, Severity.WARNING)

        result = reconcile([warning], set())

        assert result.to_notify == []
        assert result.alerted_types == frozenset()
