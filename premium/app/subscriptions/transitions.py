"""Classify the change between two successive entitlement snapshots."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from .models import CustomerInfo, EntitlementSnapshot, LifecycleEvent, LifecycleEventType


class _Baseline(Enum):
    NONE = "no_baseline"

    def __repr__(self) -> str:
        return "NO_BASELINE"


NO_BASELINE = _Baseline.NONE
"""Marker for "nothing observed yet", distinct from an observed absent entitlement."""

PreviousSnapshot = Union[Optional[EntitlementSnapshot], _Baseline]


def classify_transition(
    previous: PreviousSnapshot,
    current: Optional[EntitlementSnapshot],
) -> List[LifecycleEvent]:
    """Return the lifecycle events implied by moving from ``previous`` to ``current``.

    ``previous`` is ``None`` when the entitlement was observed to be absent and
    :data:`NO_BASELINE` when nothing has been observed yet; a baseline snapshot
    is not a transition, so the latter never yields events.

    Each check is independent and results are returned in a fixed order:
    activated, expired, cancelled, reactivated, renewed, billing issue.
    Any change of expiration date counts as a renewal, including a decrease.
    """

    if previous is NO_BASELINE:
        return []

    events: List[LifecycleEvent] = []
    if previous is None:
        if current is not None:
            events.append(LifecycleEvent(event_type=LifecycleEventType.ACTIVATED, snapshot=current))
        return events
    if current is None:
        events.append(LifecycleEvent(event_type=LifecycleEventType.EXPIRED))
        return events

    if previous.will_renew and not current.will_renew:
        events.append(LifecycleEvent(event_type=LifecycleEventType.CANCELLED, snapshot=current))
    if not previous.will_renew and current.will_renew:
        events.append(LifecycleEvent(event_type=LifecycleEventType.REACTIVATED, snapshot=current))
    if previous.expiration_date != current.expiration_date:
        events.append(LifecycleEvent(event_type=LifecycleEventType.RENEWED, snapshot=current))
    if not previous.has_billing_issue and current.has_billing_issue:
        events.append(
            LifecycleEvent(event_type=LifecycleEventType.BILLING_ISSUE_DETECTED, snapshot=current)
        )
    return events


def classify_customer_update(
    previous_info: Optional[CustomerInfo],
    current_info: CustomerInfo,
    entitlement_id: str,
) -> List[LifecycleEvent]:
    """Classify a customer payload update for a single entitlement.

    A missing ``previous_info`` means no payload has been seen this session.
    """

    previous: PreviousSnapshot
    if previous_info is None:
        previous = NO_BASELINE
    else:
        previous = previous_info.active_entitlement(entitlement_id)
    return classify_transition(previous, current_info.active_entitlement(entitlement_id))
