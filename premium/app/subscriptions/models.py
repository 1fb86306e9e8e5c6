"""Domain models for entitlement snapshots and derived subscription state."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import CustomerInfoValidationError


class PeriodType(str, Enum):
    """Billing period an entitlement is currently in."""

    NORMAL = "normal"
    TRIAL = "trial"
    INTRO = "intro"
    PREPAID = "prepaid"


class SubscriptionState(str, Enum):
    """Discrete status shown to the customer."""

    NONE = "none"
    EXPIRED = "expired"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    RENEWING_SOON = "renewing_soon"
    TRIAL = "trial"


class LifecycleEventType(str, Enum):
    """Transitions detected between two successive snapshots."""

    ACTIVATED = "activated"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    REACTIVATED = "reactivated"
    RENEWED = "renewed"
    BILLING_ISSUE_DETECTED = "billing_issue_detected"


def coerce_timestamp(value: object) -> Optional[datetime]:
    """Best-effort conversion of SDK date values to aware datetimes.

    Accepts ``datetime`` instances, ISO-8601 strings (a trailing ``Z`` is
    understood) and epoch milliseconds. Anything else yields ``None``.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class EntitlementSnapshot(BaseModel):
    """Point-in-time record of one entitlement as reported by the commerce SDK."""

    product_identifier: str = Field(alias="productIdentifier")
    is_active: bool = Field(default=False, alias="isActive")
    will_renew: bool = Field(default=False, alias="willRenew")
    expiration_date: Optional[datetime] = Field(default=None, alias="expirationDate")
    period_type: PeriodType = Field(default=PeriodType.NORMAL, alias="periodType")
    billing_issue_detected_at: Optional[datetime] = Field(
        default=None, alias="billingIssueDetectedAt"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("expiration_date", "billing_issue_detected_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: object) -> Optional[datetime]:
        return coerce_timestamp(value)

    @field_validator("period_type", mode="before")
    @classmethod
    def _normalize_period_type(cls, value: object) -> PeriodType:
        if isinstance(value, PeriodType):
            return value
        if isinstance(value, str):
            try:
                return PeriodType(value.strip().lower())
            except ValueError:
                pass
        return PeriodType.NORMAL

    @field_validator("is_active", "will_renew", mode="before")
    @classmethod
    def _null_flag_is_false(cls, value: object) -> object:
        return False if value is None else value

    @property
    def has_billing_issue(self) -> bool:
        return self.billing_issue_detected_at is not None


class EntitlementInfos(BaseModel):
    """Entitlements keyed by identifier, split into active and all-time maps."""

    active: Dict[str, EntitlementSnapshot] = Field(default_factory=dict)
    all: Dict[str, EntitlementSnapshot] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class CustomerInfo(BaseModel):
    """Normalized customer payload delivered by the SDK update listener."""

    original_app_user_id: Optional[str] = Field(default=None, alias="originalAppUserId")
    entitlements: EntitlementInfos = Field(default_factory=EntitlementInfos)
    active_subscriptions: Sequence[str] = Field(default_factory=tuple, alias="activeSubscriptions")
    all_purchased_product_identifiers: Sequence[str] = Field(
        default_factory=tuple, alias="allPurchasedProductIdentifiers"
    )
    management_url: Optional[str] = Field(default=None, alias="managementURL")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("active_subscriptions", "all_purchased_product_identifiers", mode="before")
    @classmethod
    def _keys_as_tuple(cls, value: object) -> object:
        # The SDK ships some of these as objects keyed by product id.
        if value is None:
            return ()
        if isinstance(value, dict):
            return tuple(value.keys())
        return value

    def active_entitlement(self, entitlement_id: str) -> Optional[EntitlementSnapshot]:
        """Return the entitlement if it currently confers access."""

        snapshot = self.entitlements.active.get(entitlement_id)
        if snapshot is None or not snapshot.is_active:
            return None
        return snapshot

    def historical_entitlement(self, entitlement_id: str) -> Optional[EntitlementSnapshot]:
        return self.entitlements.all.get(entitlement_id)

    def has_entitlement(self, entitlement_id: str) -> bool:
        return self.active_entitlement(entitlement_id) is not None


class SubscriptionStatus(BaseModel):
    """Display-oriented status derived from a single snapshot."""

    status: SubscriptionState
    message: str
    days_until_expiry: Optional[int] = None
    billing_issue: bool = False
    product_id: Optional[str] = None
    expiration_date: Optional[datetime] = None
    will_renew: Optional[bool] = None
    period_type: Optional[PeriodType] = None
    billing_issue_date: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class LifecycleEvent(BaseModel):
    """A single detected transition, tagged by ``event_type``."""

    event_type: LifecycleEventType
    snapshot: Optional[EntitlementSnapshot] = None

    model_config = ConfigDict(frozen=True)


def parse_customer_info(payload: Mapping[str, Any]) -> CustomerInfo:
    """Validate a raw SDK customer payload once, at the boundary."""

    try:
        return CustomerInfo.model_validate(payload)
    except ValidationError as exc:
        raise CustomerInfoValidationError(
            exc.errors(include_url=False, include_context=False)
        ) from exc
