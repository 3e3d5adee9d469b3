"""Tests for the HTTP service.

Uses FastAPI's TestClient; the sweep orchestrator is mocked so no
external calls are made.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from enviro_alerts.core.classifier import AlertType
from enviro_alerts.core.config import Config
from enviro_alerts.main import _is_authorized, create_app
from enviro_alerts.orchestrator import SweepResult
from enviro_alerts.registry import SubscriberRegistry


TOKEN = "fcm-token-0123456789:APA91bRegisteredDevice"
SECRET = "cron-secret"


@pytest.fixture
def registry():
    return SubscriberRegistry()


@pytest.fixture
def mock_orchestrator():
    orchestrator = Mock()
    orchestrator.run_sweep.return_value = SweepResult(subscribers_total=1, subscribers_checked=1)
    return orchestrator


@pytest.fixture
def client(registry, mock_orchestrator):
    app = create_app(
        config=Config(cron_secret=SECRET),
        registry=registry,
        orchestrator=mock_orchestrator,
        start_scheduler=False,
    )
    return TestClient(app)


class TestIsAuthorized:
    """Tests for _is_authorized()."""

    def test_match(self):
        assert _is_authorized("abc", "abc") is True

    def test_mismatch(self):
        assert _is_authorized("abc", "abd") is False

    def test_no_secret_configured_denies(self):
        assert _is_authorized(None, "anything") is False
        assert _is_authorized("", "") is False

    def test_missing_provided(self):
        assert _is_authorized("abc", None) is False

    def test_placeholder_secret_denies(self):
        assert _is_authorized("${CRON_SECRET}", "${CRON_SECRET}") is False


class TestRegister:
    """Tests for POST /register."""

    def test_registers_device(self, client, registry):
        response = client.post(
            "/register",
            json={"fcmToken": TOKEN, "latitude": 28.61, "longitude": 77.21},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Device registered for alerts"}
        subscriber = registry.get(TOKEN)
        assert subscriber.latitude == 28.61
        assert subscriber.app_open is False

    def test_accepts_push_token_field(self, client, registry):
        response = client.post(
            "/register",
            json={"pushToken": TOKEN, "latitude": 0, "longitude": 0},
        )

        assert response.status_code == 200
        assert TOKEN in registry

    def test_invalid_token_rejected(self, client, registry):
        response = client.post(
            "/register",
            json={"fcmToken": "short", "latitude": 1, "longitude": 2},
        )

        assert response.status_code == 400
        assert "not a valid fcm address" in response.json()["error"]
        assert len(registry) == 0

    def test_missing_token_rejected(self, client):
        response = client.post("/register", json={"latitude": 1, "longitude": 2})

        assert response.status_code == 400
        assert "Push token is required" in response.json()["details"]

    def test_missing_coordinates_rejected(self, client):
        response = client.post("/register", json={"fcmToken": TOKEN})

        assert response.status_code == 400
        assert "latitude and longitude are required" in response.json()["details"]

    def test_out_of_range_rejected(self, client):
        response = client.post(
            "/register",
            json={"fcmToken": TOKEN, "latitude": 95, "longitude": 0},
        )

        assert response.status_code == 400

    def test_non_numeric_coordinates_rejected(self, client, registry):
        response = client.post(
            "/register",
            json={"fcmToken": TOKEN, "latitude": "abc", "longitude": 0},
        )

        assert response.status_code == 400
        assert response.json()["details"][0].startswith("latitude:")
        assert len(registry) == 0

    def test_reregister_keeps_alerted_types(self, client, registry):
        registry.upsert(TOKEN, 1.0, 2.0)
        registry.set_alerted_types(TOKEN, [AlertType.UV_DANGER])

        client.post("/register", json={"fcmToken": TOKEN, "latitude": 3, "longitude": 4})

        assert registry.get(TOKEN).alerted_types == {AlertType.UV_DANGER}


class TestUpdateLocation:
    """Tests for POST /update-location."""

    def test_creates_unknown_device(self, client, registry):
        response = client.post(
            "/update-location",
            json={"fcmToken": TOKEN, "latitude": 51.5, "longitude": -0.12},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "registered": True}
        assert TOKEN in registry

    def test_updates_existing_device(self, client, registry):
        registry.upsert(TOKEN, 1.0, 2.0)

        response = client.post(
            "/update-location",
            json={"fcmToken": TOKEN, "latitude": 51.5, "longitude": -0.12, "appOpen": True},
        )

        assert response.json()["registered"] is False
        subscriber = registry.get(TOKEN)
        assert (subscriber.latitude, subscriber.longitude) == (51.5, -0.12)
        assert subscriber.app_open is True

    def test_app_open_omitted_keeps_flag(self, client, registry):
        registry.upsert(TOKEN, 1.0, 2.0, app_open=True)

        client.post("/update-location", json={"fcmToken": TOKEN, "latitude": 5, "longitude": 6})

        assert registry.get(TOKEN).app_open is True

    def test_invalid_body(self, client):
        response = client.post(
            "/update-location",
            json={"fcmToken": TOKEN, "latitude": 200, "longitude": 0},
        )

        assert response.status_code == 400


class TestCheck:
    """Tests for GET /check."""

    def test_missing_secret(self, client, mock_orchestrator):
        response = client.get("/check")

        assert response.status_code == 401
        mock_orchestrator.run_sweep.assert_not_called()

    def test_wrong_secret(self, client, mock_orchestrator):
        response = client.get("/check", params={"secret": "nope"})

        assert response.status_code == 401
        mock_orchestrator.run_sweep.assert_not_called()

    def test_query_secret(self, client, mock_orchestrator):
        response = client.get("/check", params={"secret": SECRET})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["skipped_in_flight"] is False
        assert "Checked 1 of 1" in body["summary"]
        mock_orchestrator.run_sweep.assert_called_once()

    def test_header_secret(self, client, mock_orchestrator):
        response = client.get("/check", headers={"X-Cron-Secret": SECRET})

        assert response.status_code == 200
        mock_orchestrator.run_sweep.assert_called_once()

    def test_reports_in_flight(self, client, mock_orchestrator):
        mock_orchestrator.run_sweep.return_value = SweepResult(skipped_in_flight=True)

        body = client.get("/check", params={"secret": SECRET}).json()

        assert body["skipped_in_flight"] is True

    def test_no_secret_configured_denies(self, registry, mock_orchestrator):
        app = create_app(
            config=Config(),
            registry=registry,
            orchestrator=mock_orchestrator,
            start_scheduler=False,
        )

        response = TestClient(app).get("/check", params={"secret": ""})

        assert response.status_code == 401

    def test_unresolved_secret_placeholder_denies(self, registry, mock_orchestrator):
        placeholder = "${secret:cron-secret}"
        app = create_app(
            config=Config(cron_secret=placeholder),
            registry=registry,
            orchestrator=mock_orchestrator,
            start_scheduler=False,
        )

        response = TestClient(app).get("/check", params={"secret": placeholder})

        assert response.status_code == 401
        mock_orchestrator.run_sweep.assert_not_called()


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client, registry):
        registry.upsert(TOKEN, 1.0, 2.0)

        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["users"] == 1
        assert "time" in body


class TestLifespan:
    """Tests for app startup and shutdown."""

    def test_shutdown_clears_registry(self, registry, mock_orchestrator):
        app = create_app(
            config=Config(cron_secret=SECRET),
            registry=registry,
            orchestrator=mock_orchestrator,
            start_scheduler=False,
        )

        with TestClient(app) as client:
            client.post("/register", json={"fcmToken": TOKEN, "latitude": 1, "longitude": 2})
            assert len(registry) == 1

        assert len(registry) == 0
