"""Static notification templates for lifecycle events."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import EntitlementSnapshot, LifecycleEvent, LifecycleEventType
from .status import format_display_date


@dataclass(frozen=True)
class NotificationAction:
    """Button offered with a notification."""

    label: str
    style: str = "default"
    intent: Optional[str] = None


@dataclass(frozen=True)
class NotificationTemplate:
    """Describes how a lifecycle event is surfaced to the customer."""

    event_type: LifecycleEventType
    title: str
    body: str
    actions: Tuple[NotificationAction, ...] = ()
    silent: bool = False


@dataclass(frozen=True)
class Notification:
    """A rendered notification ready for the UI layer."""

    event_type: LifecycleEventType
    title: str
    body: str
    actions: Tuple[NotificationAction, ...]
    silent: bool = False


NOTIFICATION_CATALOG: Dict[LifecycleEventType, NotificationTemplate] = {
    LifecycleEventType.ACTIVATED: NotificationTemplate(
        event_type=LifecycleEventType.ACTIVATED,
        title="Welcome to Premium!",
        body="Thank you for subscribing!\n\nYour subscription is now active until {expiration}.",
        actions=(NotificationAction(label="Awesome!"),),
    ),
    LifecycleEventType.EXPIRED: NotificationTemplate(
        event_type=LifecycleEventType.EXPIRED,
        title="Subscription Expired",
        body=(
            "Your premium access has ended. Subscribe again to continue enjoying"
            " premium features!"
        ),
        actions=(
            NotificationAction(label="Maybe Later", style="cancel"),
            NotificationAction(label="Resubscribe", intent="show_offerings"),
        ),
    ),
    LifecycleEventType.CANCELLED: NotificationTemplate(
        event_type=LifecycleEventType.CANCELLED,
        title="Subscription Cancelled",
        body=(
            "We're sorry to see you go!\n\nYou'll still have access until {expiration}."
            " You can resubscribe anytime before then to keep your premium benefits."
        ),
        actions=(NotificationAction(label="OK"),),
    ),
    LifecycleEventType.REACTIVATED: NotificationTemplate(
        event_type=LifecycleEventType.REACTIVATED,
        title="Welcome Back!",
        body="Your subscription has been reactivated. Enjoy your premium features!",
        actions=(NotificationAction(label="Great!"),),
    ),
    LifecycleEventType.RENEWED: NotificationTemplate(
        event_type=LifecycleEventType.RENEWED,
        title="Subscription Renewed",
        body="Subscription renewed until {expiration}.",
        silent=True,
    ),
    LifecycleEventType.BILLING_ISSUE_DETECTED: NotificationTemplate(
        event_type=LifecycleEventType.BILLING_ISSUE_DETECTED,
        title="Payment Issue",
        body=(
            "There was a problem processing your subscription payment. Please update"
            " your payment method to avoid losing access."
        ),
        actions=(
            NotificationAction(label="Later", style="cancel"),
            NotificationAction(label="Update Payment", intent="manage_subscription"),
        ),
    ),
}


def get_notification_template(event_type: LifecycleEventType) -> NotificationTemplate:
    """Return the template for an event type, raising if unsupported."""

    try:
        return NOTIFICATION_CATALOG[event_type]
    except KeyError as exc:  # pragma: no cover - guarded by static catalog
        raise KeyError(f"Unknown lifecycle event: {event_type}") from exc


def _expiration_text(snapshot: Optional[EntitlementSnapshot]) -> str:
    if snapshot is None:
        return "the end of the current period"
    return format_display_date(snapshot.expiration_date) or "the end of the current period"


def render_notification(event: LifecycleEvent) -> Notification:
    """Fill the event's template with details from its snapshot."""

    template = get_notification_template(event.event_type)
    return Notification(
        event_type=template.event_type,
        title=template.title,
        body=template.body.format(expiration=_expiration_text(event.snapshot)),
        actions=template.actions,
        silent=template.silent,
    )
