"""Helpers for pointing customers at the store's subscription settings."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .models import CustomerInfo, EntitlementSnapshot
from .status import format_display_date


class Platform(str, Enum):
    """Store platforms with their own subscription settings pages."""

    IOS = "ios"
    ANDROID = "android"


STORE_SUBSCRIPTION_URLS = {
    Platform.IOS: "https://apps.apple.com/account/subscriptions",
    Platform.ANDROID: "https://play.google.com/store/account/subscriptions",
}

MANUAL_INSTRUCTIONS = {
    Platform.IOS: (
        "Open Settings app",
        "Tap your name at the top",
        'Tap "Subscriptions"',
        "Find and tap this app",
    ),
    Platform.ANDROID: (
        "Open Google Play Store",
        "Tap Menu → Subscriptions",
        "Find and tap this app",
    ),
}


@dataclass(frozen=True)
class ManagementTarget:
    """Where to send a customer who wants to manage their subscription."""

    url: str
    from_sdk: bool
    summary: str
    instructions: tuple = ()


def describe_entitlement(snapshot: Optional[EntitlementSnapshot]) -> List[str]:
    """Summary lines shown before opening subscription settings."""

    if snapshot is None:
        return []
    return [
        f"Product: {snapshot.product_identifier}",
        f"Expires: {format_display_date(snapshot.expiration_date) or 'Never'}",
        f"Will Renew: {'Yes' if snapshot.will_renew else 'No'}",
    ]


def resolve_management_target(
    info: CustomerInfo,
    entitlement_id: str,
    platform: Platform,
) -> ManagementTarget:
    """Prefer the SDK-provided management URL, falling back to the store page.

    Sandbox accounts frequently have no management URL, in which case manual
    instructions for the platform accompany the store link.
    """

    summary = "\n".join(describe_entitlement(info.active_entitlement(entitlement_id)))
    if info.management_url:
        return ManagementTarget(url=info.management_url, from_sdk=True, summary=summary)
    return ManagementTarget(
        url=STORE_SUBSCRIPTION_URLS[platform],
        from_sdk=False,
        summary=summary,
        instructions=MANUAL_INSTRUCTIONS[platform],
    )
