"""Tests for the stateful subscription monitor and its wiring."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from premium.app.services import subscriptions as subscription_services
from premium.app.subscriptions import config as subscription_config
from premium.app.subscriptions import (
    CustomerInfo,
    EntitlementSnapshot,
    LifecycleEventType,
    Notification,
    Platform,
    SubscriptionMonitor,
    SubscriptionState,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.sent.append(notification)


def _info(**entitlement_overrides) -> CustomerInfo:
    values = {
        "product_identifier": "premium_monthly",
        "is_active": True,
        "will_renew": True,
        "expiration_date": NOW + timedelta(days=30),
    }
    values.update(entitlement_overrides)
    snapshot = EntitlementSnapshot(**values)
    return CustomerInfo(entitlements={"active": {"premium": snapshot}, "all": {"premium": snapshot}})


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def monitor(notifier) -> SubscriptionMonitor:
    return SubscriptionMonitor(entitlement_id="premium", notifier=notifier, clock=lambda: NOW)


def test_first_payload_is_baseline(monitor, notifier):
    update = monitor.handle_customer_info(_info())

    assert update.events == ()
    assert update.status.status == SubscriptionState.ACTIVE
    assert notifier.sent == []
    assert monitor.last_seen is not None


def test_purchase_after_free_state_notifies(monitor, notifier):
    monitor.handle_customer_info(CustomerInfo())

    update = monitor.handle_customer_info(_info())

    assert [event.event_type for event in update.events] == [LifecycleEventType.ACTIVATED]
    assert [note.title for note in notifier.sent] == ["Welcome to Premium!"]
    assert "4/9/2025" in notifier.sent[0].body


def test_renewal_is_silent(monitor, notifier):
    monitor.handle_customer_info(_info())

    update = monitor.handle_customer_info(_info(expiration_date=NOW + timedelta(days=60)))

    assert [event.event_type for event in update.events] == [LifecycleEventType.RENEWED]
    assert len(update.notifications) == 1
    assert update.notifications[0].silent is True
    assert notifier.sent == []


def test_cancellation_updates_status_and_notifies(monitor, notifier):
    monitor.handle_customer_info(_info())

    update = monitor.handle_customer_info(_info(will_renew=False))

    assert update.status.status == SubscriptionState.CANCELLED
    assert [note.event_type for note in notifier.sent] == [LifecycleEventType.CANCELLED]


def test_reset_forgets_baseline(monitor, notifier):
    monitor.handle_customer_info(CustomerInfo())
    monitor.reset()

    update = monitor.handle_customer_info(_info())

    assert update.events == ()
    assert notifier.sent == []


def test_service_wiring_logs_notifications(monkeypatch, caplog):
    monkeypatch.setenv("PREMIUM_ENTITLEMENT_ID", "premium")
    monkeypatch.setattr(subscription_config, "load_dotenv", lambda: False)
    subscription_services.get_subscription_monitor.cache_clear()
    try:
        base = {"entitlements": {"active": {}, "all": {}}}
        active_entitlement = {
            "productIdentifier": "premium_monthly",
            "isActive": True,
            "willRenew": True,
            "expirationDate": "2099-01-01T00:00:00Z",
        }
        subscription_services.handle_customer_info_update(base)
        with caplog.at_level(logging.WARNING, logger="subscriptions"):
            update = subscription_services.handle_customer_info_update(
                {"entitlements": {"active": {"premium": active_entitlement}, "all": {}}}
            )
    finally:
        subscription_services.get_subscription_monitor.cache_clear()

    assert [event.event_type for event in update.events] == [LifecycleEventType.ACTIVATED]
    assert "activated" in caplog.text


class FlakyNotifier(RecordingNotifier):
    def notify(self, notification: Notification) -> None:
        if notification.event_type == LifecycleEventType.CANCELLED:
            raise RuntimeError("push gateway unavailable")
        super().notify(notification)


def test_failed_delivery_does_not_drop_later_notifications(caplog):
    notifier = FlakyNotifier()
    monitor = SubscriptionMonitor(entitlement_id="premium", notifier=notifier, clock=lambda: NOW)
    monitor.handle_customer_info(_info())

    with caplog.at_level(logging.ERROR):
        update = monitor.handle_customer_info(
            _info(will_renew=False, billing_issue_detected_at=NOW - timedelta(hours=2))
        )

    assert [event.event_type for event in update.events] == [
        LifecycleEventType.CANCELLED,
        LifecycleEventType.BILLING_ISSUE_DETECTED,
    ]
    assert [note.event_type for note in notifier.sent] == [LifecycleEventType.BILLING_ISSUE_DETECTED]
    assert "Failed to deliver cancelled notification" in caplog.text


def test_management_target_uses_configured_platform(notifier):
    monitor = SubscriptionMonitor(
        entitlement_id="premium",
        notifier=notifier,
        platform=Platform.ANDROID,
        clock=lambda: NOW,
    )
    monitor.handle_customer_info(_info())

    target = monitor.management_target()

    assert target.url == "https://play.google.com/store/account/subscriptions"
    assert target.summary.startswith("Product: premium_monthly")


def test_service_management_target_follows_platform_setting(monkeypatch):
    monkeypatch.setenv("PREMIUM_PLATFORM", "android")
    monkeypatch.setattr(subscription_config, "load_dotenv", lambda: False)
    subscription_services.get_subscription_monitor.cache_clear()
    try:
        target = subscription_services.get_management_target()
    finally:
        subscription_services.get_subscription_monitor.cache_clear()

    assert target.from_sdk is False
    assert target.url == "https://play.google.com/store/account/subscriptions"
