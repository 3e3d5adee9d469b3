"""Tests for the Subscriber Registry.

A fresh registry is built for each test.
"""

import threading

import pytest

from enviro_alerts.core.classifier import AlertType
from enviro_alerts.core.errors import ValidationError
from enviro_alerts.registry import SubscriberRegistry, register_or_update


FCM_TOKEN = "fcm-token-0123456789:APA91bExampleToken"


@pytest.fixture
def registry():
    """Create an empty registry."""
    return SubscriberRegistry()


class TestUpsert:
    """Tests for SubscriberRegistry.upsert()."""

    def test_creates_subscriber(self, registry):
        subscriber, created = registry.upsert(FCM_TOKEN, 28.6, 77.2)

        assert created is True
        assert subscriber.address == FCM_TOKEN
        assert subscriber.alerted_types == frozenset()
        assert subscriber.app_open is False
        assert registry.size() == 1

    def test_update_overwrites_location_and_app_open(self, registry):
        registry.upsert(FCM_TOKEN, 28.6, 77.2, app_open=True)

        subscriber, created = registry.upsert(FCM_TOKEN, 19.0, 72.8)

        assert created is False
        assert (subscriber.latitude, subscriber.longitude) == (19.0, 72.8)
        assert subscriber.app_open is False

    def test_update_keeps_alerted_types(self, registry):
        registry.upsert(FCM_TOKEN, 28.6, 77.2)
        registry.set_alerted_types(FCM_TOKEN, {AlertType.UV_DANGER})

        registry.upsert(FCM_TOKEN, 19.0, 72.8)

        assert registry.get(FCM_TOKEN).alerted_types == {AlertType.UV_DANGER}

    def test_none_app_open_keeps_flag(self, registry):
        registry.upsert(FCM_TOKEN, 28.6, 77.2, app_open=True)

        registry.upsert(FCM_TOKEN, 28.6, 77.2, app_open=None)

        assert registry.get(FCM_TOKEN).app_open is True

    def test_stores_and_overwrites_provider(self, registry):
        subscriber, _ = registry.upsert(FCM_TOKEN, 28.6, 77.2)
        assert subscriber.provider == "fcm"

        subscriber, _ = registry.upsert(FCM_TOKEN, 28.6, 77.2, provider="expo")

        assert subscriber.provider == "expo"
        assert registry.get(FCM_TOKEN).provider == "expo"


class TestAccessors:
    """Tests for get/remove/all_entries."""

    def test_get_missing(self, registry):
        assert registry.get("unknown") is None

    def test_get_returns_copy(self, registry):
        """Mutating a returned subscriber does not change the registry."""
        registry.upsert(FCM_TOKEN, 28.6, 77.2)

        copy = registry.get(FCM_TOKEN)
        copy.latitude = 0.0

        assert registry.get(FCM_TOKEN).latitude == 28.6

    def test_remove(self, registry):
        registry.upsert(FCM_TOKEN, 28.6, 77.2)

        assert registry.remove(FCM_TOKEN) is True
        assert registry.get(FCM_TOKEN) is None
        assert registry.remove(FCM_TOKEN) is False

    def test_all_entries_is_a_snapshot(self, registry):
        """Modifying the registry while iterating entries is safe."""
        registry.upsert("a" * 25, 1.0, 1.0)
        registry.upsert("b" * 25, 2.0, 2.0)

        for address, _ in registry.all_entries():
            registry.remove(address)
            registry.upsert(address + "x", 3.0, 3.0)

        assert len(registry) == 2

    def test_set_alerted_types_on_missing(self, registry):
        assert registry.set_alerted_types("gone", {AlertType.UV_DANGER}) is False

    def test_contains(self, registry):
        registry.upsert(FCM_TOKEN, 1.0, 1.0)
        assert FCM_TOKEN in registry

    def test_clear(self, registry):
        registry.upsert(FCM_TOKEN, 1.0, 1.0)
        registry.clear()
        assert registry.size() == 0

    def test_lock_for_is_stable(self, registry):
        assert registry.lock_for(FCM_TOKEN) is registry.lock_for(FCM_TOKEN)

    def test_remove_forgets_lock(self, registry):
        """Rotated and invalid tokens do not leave locks behind."""
        for i in range(1000):
            address = f"token-{i:04d}-padding-characters"
            registry.upsert(address, 1.0, 1.0)
            with registry.lock_for(address):
                registry.remove(address)

        assert registry.size() == 0
        assert len(registry._locks) == 0

    def test_concurrent_upserts(self, registry):
        """Parallel registrations all land."""
        def worker(n):
            for i in range(50):
                registry.upsert(f"token-{n:02d}-{i:03d}-padding-chars", float(n), float(i))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.size() == 400


class TestRegisterOrUpdate:
    """Tests for register_or_update()."""

    def test_registers(self, registry):
        subscriber, created = register_or_update(registry, FCM_TOKEN, 28.6, 77.2)

        assert created is True
        assert registry.get(FCM_TOKEN) == subscriber

    def test_auto_creates_on_update(self, registry):
        """An update for an unknown device registers it."""
        _, created = register_or_update(registry, FCM_TOKEN, 28.6, 77.2, app_open=False)

        assert created is True
        assert registry.size() == 1

    def test_invalid_address_rejected(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            register_or_update(registry, "bad", 28.6, 77.2)

        assert "not a valid fcm address" in exc_info.value.messages[0]
        assert registry.size() == 0

    def test_invalid_update_leaves_state(self, registry):
        register_or_update(registry, FCM_TOKEN, 28.6, 77.2)

        with pytest.raises(ValidationError):
            register_or_update(registry, FCM_TOKEN, 200, 77.2)

        assert registry.get(FCM_TOKEN).latitude == 28.6

    def test_unknown_provider(self, registry):
        with pytest.raises(ValidationError):
            register_or_update(registry, FCM_TOKEN, 1.0, 1.0, provider="sms")

    def test_expo_provider(self, registry):
        subscriber, created = register_or_update(
            registry, "ExponentPushToken[abc]", 1.0, 1.0, provider="expo",
        )
        assert created is True
        assert subscriber.provider == "expo"
