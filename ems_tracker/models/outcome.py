"""
Mutation outcomes.

Every store, reconciler, and ledger mutator returns a ``MutationResult``
rather than silently doing nothing, so callers can tell a validation failure
from an unknown key or a stock shortfall. Business failures never raise;
programming errors (bad types, storage failures) still do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class MutationStatus(StrEnum):
    """Outcome category of one mutation."""

    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    INVALID_TRANSITION = "invalid_transition"


@dataclass(frozen=True)
class MutationResult:
    """Result of one mutation.

    Attributes:
        status: Outcome category.
        message: Human-readable summary for CLI / log output.
        detail: Structured extras, e.g. ``{"order_id": ...}`` on success or
            ``{"shortfall": {...}}`` on insufficient inventory.
    """

    status: MutationStatus
    message: str = ""
    detail: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == MutationStatus.SUCCESS

    @classmethod
    def success(cls, message: str = "", **detail: Any) -> "MutationResult":
        return cls(MutationStatus.SUCCESS, message, detail)

    @classmethod
    def failure(
        cls, status: MutationStatus, message: str, **detail: Any
    ) -> "MutationResult":
        return cls(status, message, detail)
