"""Stateful wrapper that feeds SDK updates through status and transition logic."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol, Tuple

from .management import ManagementTarget, Platform, resolve_management_target
from .models import CustomerInfo, LifecycleEvent, SubscriptionStatus
from .notifications import Notification, render_notification
from .status import DEFAULT_RENEWING_SOON_DAYS, derive_customer_status
from .transitions import classify_customer_update

logger = logging.getLogger(__name__)


class SubscriptionNotifier(Protocol):
    """Delivers lifecycle notifications to the customer."""

    def notify(self, notification: Notification) -> None:
        ...


@dataclass(frozen=True)
class MonitorUpdate:
    """Result of processing a single customer payload."""

    status: SubscriptionStatus
    events: Tuple[LifecycleEvent, ...]
    notifications: Tuple[Notification, ...]


@dataclass
class SubscriptionMonitor:
    """Tracks the last-seen customer payload for one entitlement.

    The classification functions are pure; this object owns the previous
    payload and serializes the compare-and-record step so updates arriving
    from several listener threads are classified against a consistent
    baseline.
    """

    entitlement_id: str
    notifier: SubscriptionNotifier
    renewing_soon_days: int = DEFAULT_RENEWING_SOON_DAYS
    platform: Platform = Platform.IOS
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(timezone.utc))
    _previous: Optional[CustomerInfo] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def last_seen(self) -> Optional[CustomerInfo]:
        return self._previous

    def handle_customer_info(self, info: CustomerInfo) -> MonitorUpdate:
        """Process one update from the SDK listener."""

        with self._lock:
            previous = self._previous
            events = classify_customer_update(previous, info, self.entitlement_id)
            self._previous = info

        status = derive_customer_status(
            info,
            self.entitlement_id,
            now=self.clock(),
            renewing_soon_days=self.renewing_soon_days,
        )
        logger.debug(
            "Entitlement %s status=%s events=%s",
            self.entitlement_id,
            status.status.value,
            [event.event_type.value for event in events],
        )

        notifications: List[Notification] = []
        for event in events:
            notification = render_notification(event)
            notifications.append(notification)
            if notification.silent:
                logger.info(
                    "Silent lifecycle event %s for entitlement %s",
                    event.event_type.value,
                    self.entitlement_id,
                )
                continue
            try:
                self.notifier.notify(notification)
            except Exception:
                logger.exception(
                    "Failed to deliver %s notification for entitlement %s",
                    event.event_type.value,
                    self.entitlement_id,
                )

        return MonitorUpdate(
            status=status,
            events=tuple(events),
            notifications=tuple(notifications),
        )

    def management_target(self, info: Optional[CustomerInfo] = None) -> ManagementTarget:
        """Where to manage the subscription, based on ``info`` or the last payload."""

        if info is None:
            info = self._previous if self._previous is not None else CustomerInfo()
        return resolve_management_target(
            info,
            self.entitlement_id,
            self.platform,
        )

    def reset(self) -> None:
        """Forget the baseline, e.g. after the signed-in customer changes."""

        with self._lock:
            self._previous = None
