"""Derive a display status from the current entitlement snapshot."""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from .models import (
    CustomerInfo,
    EntitlementSnapshot,
    PeriodType,
    SubscriptionState,
    SubscriptionStatus,
)

DEFAULT_RENEWING_SOON_DAYS = 3

_ONE_DAY = timedelta(days=1)

_STATUS_ACTIONS = {
    SubscriptionState.ACTIVE: ("manage",),
    SubscriptionState.CANCELLED: ("resubscribe", "manage"),
    SubscriptionState.EXPIRED: ("subscribe_again",),
}


def format_display_date(value: Optional[datetime]) -> Optional[str]:
    """Render a date the way the purchase screens show it (``M/D/YYYY``)."""

    if value is None:
        return None
    return f"{value.month}/{value.day}/{value.year}"


def days_until(expiration_date: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days left before expiry, rounding any partial day up."""

    if expiration_date is None:
        return None
    try:
        remaining = expiration_date - now
    except TypeError:
        # naive ``now`` against an aware expiration date
        return None
    return math.ceil(remaining / _ONE_DAY)


def derive_status(
    current: Optional[EntitlementSnapshot],
    ever_held: Optional[EntitlementSnapshot],
    *,
    now: Optional[datetime] = None,
    renewing_soon_days: int = DEFAULT_RENEWING_SOON_DAYS,
) -> SubscriptionStatus:
    """Compute the subscription status for one entitlement.

    ``current`` is the entitlement when it presently confers access and
    ``ever_held`` the most recent historical record for the same identifier.
    ``ever_held`` is only consulted when ``current`` is absent.

    Exactly one status is produced; when several apply the precedence is
    cancelled, renewing soon, trial, active.
    """

    if current is None:
        if ever_held is None:
            return SubscriptionStatus(
                status=SubscriptionState.NONE,
                message="No active subscription",
            )
        return SubscriptionStatus(
            status=SubscriptionState.EXPIRED,
            message="Your subscription has expired",
            product_id=ever_held.product_identifier,
            expiration_date=ever_held.expiration_date,
        )

    reference = now or datetime.now(timezone.utc)
    days_left = days_until(current.expiration_date, reference)

    status = SubscriptionState.ACTIVE
    message = "Your subscription is active"

    if not current.will_renew:
        status = SubscriptionState.CANCELLED
        access_until = format_display_date(current.expiration_date) or "the end of the current period"
        message = f"Cancelled - Access until {access_until}"
    elif days_left is not None and days_left <= renewing_soon_days:
        status = SubscriptionState.RENEWING_SOON
        message = f"Renews in {days_left} day{'' if days_left == 1 else 's'}"
    elif current.period_type == PeriodType.TRIAL:
        status = SubscriptionState.TRIAL
        if days_left is None:
            message = "Free trial active"
        else:
            message = f"Free trial - {days_left} day{'' if days_left == 1 else 's'} remaining"

    return SubscriptionStatus(
        status=status,
        message=message,
        days_until_expiry=days_left,
        billing_issue=current.has_billing_issue,
        product_id=current.product_identifier,
        expiration_date=current.expiration_date,
        will_renew=current.will_renew,
        period_type=current.period_type,
        billing_issue_date=current.billing_issue_detected_at,
    )


def derive_customer_status(
    info: CustomerInfo,
    entitlement_id: str,
    *,
    now: Optional[datetime] = None,
    renewing_soon_days: int = DEFAULT_RENEWING_SOON_DAYS,
) -> SubscriptionStatus:
    """Derive the status for ``entitlement_id`` from a full customer payload."""

    return derive_status(
        info.active_entitlement(entitlement_id),
        info.historical_entitlement(entitlement_id),
        now=now,
        renewing_soon_days=renewing_soon_days,
    )


def available_actions(status: SubscriptionStatus) -> Tuple[str, ...]:
    """Follow-up actions offered alongside a status card."""

    return _STATUS_ACTIONS.get(status.status, ())
