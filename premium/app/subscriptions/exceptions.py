"""Errors raised at the SDK boundary."""
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple


class CustomerInfoValidationError(ValueError):
    """Raised when an SDK payload cannot be turned into a ``CustomerInfo``.

    ``errors`` holds pydantic's error entries for the rejected payload.
    """

    def __init__(self, errors: Sequence[Dict[str, Any]]) -> None:
        self.errors: Tuple[Dict[str, Any], ...] = tuple(errors)
        super().__init__(
            f"Customer info payload failed validation at {', '.join(self.locations) or 'root'}"
        )

    @property
    def locations(self) -> List[str]:
        """Dotted payload paths of each failing field, e.g. ``entitlements.active.premium.productIdentifier``."""

        return [".".join(str(part) for part in error.get("loc", ())) for error in self.errors]
