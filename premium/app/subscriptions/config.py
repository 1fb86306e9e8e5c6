"""Configuration helpers for subscription lifecycle tracking."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional
import os

from dotenv import load_dotenv

from .management import Platform
from .status import DEFAULT_RENEWING_SOON_DAYS


@dataclass(frozen=True)
class SubscriptionConfig:
    """Identifiers and thresholds used when interpreting SDK payloads."""

    entitlement_id: str
    renewing_soon_days: int
    platform: Platform


def _to_int(value: Optional[str], *, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected integer value, got {value!r}") from exc


def _to_platform(value: Optional[str], *, default: Platform) -> Platform:
    if value is None:
        return default
    lowered = value.strip().lower()
    try:
        return Platform(lowered)
    except ValueError:
        return default


def load_subscription_config(env: Optional[Mapping[str, str]] = None) -> SubscriptionConfig:
    """Load :class:`SubscriptionConfig` from environment variables.

    When ``env`` is omitted the process environment is used, after merging in
    any ``.env`` file found by ``python-dotenv``.
    """

    if env is None:
        load_dotenv()
        env_mapping: Mapping[str, str] = os.environ
    else:
        env_mapping = env

    entitlement_id = (env_mapping.get("PREMIUM_ENTITLEMENT_ID") or "premium").strip() or "premium"
    renewing_soon_days = max(
        0,
        _to_int(env_mapping.get("PREMIUM_RENEWING_SOON_DAYS"), default=DEFAULT_RENEWING_SOON_DAYS),
    )
    platform = _to_platform(env_mapping.get("PREMIUM_PLATFORM"), default=Platform.IOS)

    return SubscriptionConfig(
        entitlement_id=entitlement_id,
        renewing_soon_days=renewing_soon_days,
        platform=platform,
    )
