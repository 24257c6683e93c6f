"""
Deduction ledger — per-rider running totals in four categories.

Adding a deduction adds its amount to one category of the rider's totals.
Negative amounts act as credits and are accepted unless the ledger is built
with ``allow_credits=False``. The free-text ``reason`` goes to the log only.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ems_tracker.models.forms import DeductionForm, describe_validation_error
from ems_tracker.models.outcome import MutationResult, MutationStatus
from ems_tracker.store.domain_store import DomainStore
from ems_tracker.taxonomy.equipment_taxonomy import DeductionType

logger = logging.getLogger(__name__)


class DeductionLedger:
    """Reads and updates rider deduction totals held in a ``DomainStore``."""

    def __init__(self, store: DomainStore, allow_credits: bool = True) -> None:
        self.store = store
        self.allow_credits = allow_credits

    def add_deduction(
        self,
        rider_code: str,
        deduction: Union[DeductionForm, Mapping[str, Any]],
    ) -> MutationResult:
        """Add ``deduction.amount`` to the rider's ``deduction.type`` total.

        Returns:
            ``NOT_FOUND`` for an unknown rider, ``VALIDATION_FAILED`` for a bad
            type or amount (or a credit while credits are disabled), otherwise
            ``SUCCESS`` with the new category total in ``detail["total"]``.
        """
        with self.store.lock:
            rider = self.store.get_rider(rider_code)
            if rider is None:
                return MutationResult.failure(
                    MutationStatus.NOT_FOUND,
                    f"Rider '{rider_code}' not found.",
                    code=rider_code,
                )
            try:
                form = DeductionForm.model_validate(deduction)
            except ValidationError as exc:
                return MutationResult.failure(
                    MutationStatus.VALIDATION_FAILED,
                    f"Invalid deduction: {describe_validation_error(exc)}",
                )
            if form.amount < 0 and not self.allow_credits:
                return MutationResult.failure(
                    MutationStatus.VALIDATION_FAILED,
                    f"Negative deduction {form.amount} rejected: credits are disabled.",
                )

            totals = rider.deductions.added(form.type, form.amount)
            self.store.replace_rider(rider.model_copy(update={"deductions": totals}))

        logger.info(
            "Deduction for rider %s: %s %+.2f (reason: %s).",
            rider_code, form.type.value, form.amount, form.reason or "-",
            extra={
                "rider_code": rider_code,
                "deduction_type": form.type.value,
                "amount": form.amount,
                "reason": form.reason,
            },
        )
        return MutationResult.success(
            f"{form.type.value} for rider '{rider_code}' is now {totals.get(form.type):.2f}.",
            code=rider_code,
            type=form.type.value,
            total=totals.get(form.type),
        )

    def total_for(self, rider_code: str) -> Optional[float]:
        """Sum of all four category totals for one rider, or ``None`` if unknown."""
        rider = self.store.get_rider(rider_code)
        return None if rider is None else rider.total_deductions

    def totals_by_type(self) -> dict[DeductionType, float]:
        """Fleet-wide sum of each category."""
        return {
            kind: sum(r.deductions.get(kind) for r in self.store.riders)
            for kind in DeductionType
        }

    def fleet_total(self) -> float:
        return sum(self.totals_by_type().values())
