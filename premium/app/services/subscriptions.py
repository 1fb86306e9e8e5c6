"""Application wiring for the subscription monitor."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping

from ..subscriptions import (
    ManagementTarget,
    Notification,
    SubscriptionMonitor,
    SubscriptionNotifier,
    load_subscription_config,
    parse_customer_info,
)
from ..subscriptions.monitor import MonitorUpdate


logger = logging.getLogger("subscriptions")


class LoggingSubscriptionNotifier(SubscriptionNotifier):
    """Notifier that records lifecycle notifications to the application logger."""

    def notify(self, notification: Notification) -> None:
        logger.warning(
            "Subscription notification %s title=%r actions=%s",
            notification.event_type.value,
            notification.title,
            [action.label for action in notification.actions],
        )


@lru_cache(maxsize=1)
def get_subscription_monitor() -> SubscriptionMonitor:
    config = load_subscription_config()
    logger.info(
        "Tracking entitlement %s (platform=%s)",
        config.entitlement_id,
        config.platform.value,
    )
    return SubscriptionMonitor(
        entitlement_id=config.entitlement_id,
        notifier=LoggingSubscriptionNotifier(),
        renewing_soon_days=config.renewing_soon_days,
        platform=config.platform,
    )


def handle_customer_info_update(payload: Mapping[str, Any]) -> MonitorUpdate:
    """Entry point for the SDK's customer-info update listener."""

    info = parse_customer_info(payload)
    return get_subscription_monitor().handle_customer_info(info)


def get_management_target() -> ManagementTarget:
    """Management link for the most recently seen customer payload."""

    return get_subscription_monitor().management_target()


__all__ = [
    "get_subscription_monitor",
    "handle_customer_info_update",
    "get_management_target",
    "LoggingSubscriptionNotifier",
]
