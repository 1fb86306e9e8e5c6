"""Subscription lifecycle models, status derivation and transition detection."""

from .config import SubscriptionConfig, load_subscription_config
from .exceptions import CustomerInfoValidationError
from .management import ManagementTarget, Platform, describe_entitlement, resolve_management_target
from .models import (
    CustomerInfo,
    EntitlementInfos,
    EntitlementSnapshot,
    LifecycleEvent,
    LifecycleEventType,
    PeriodType,
    SubscriptionState,
    SubscriptionStatus,
    parse_customer_info,
)
from .monitor import MonitorUpdate, SubscriptionMonitor, SubscriptionNotifier
from .notifications import (
    NOTIFICATION_CATALOG,
    Notification,
    NotificationAction,
    NotificationTemplate,
    get_notification_template,
    render_notification,
)
from .status import available_actions, derive_customer_status, derive_status
from .transitions import NO_BASELINE, classify_customer_update, classify_transition

__all__ = [
    "SubscriptionConfig",
    "load_subscription_config",
    "CustomerInfoValidationError",
    "ManagementTarget",
    "Platform",
    "describe_entitlement",
    "resolve_management_target",
    "CustomerInfo",
    "EntitlementInfos",
    "EntitlementSnapshot",
    "LifecycleEvent",
    "LifecycleEventType",
    "PeriodType",
    "SubscriptionState",
    "SubscriptionStatus",
    "parse_customer_info",
    "MonitorUpdate",
    "SubscriptionMonitor",
    "SubscriptionNotifier",
    "NOTIFICATION_CATALOG",
    "Notification",
    "NotificationAction",
    "NotificationTemplate",
    "get_notification_template",
    "render_notification",
    "available_actions",
    "derive_customer_status",
    "derive_status",
    "NO_BASELINE",
    "classify_customer_update",
    "classify_transition",
]
