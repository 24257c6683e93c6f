"""
Rider model and running deduction totals.

``DeductionTotals`` holds one running total per ``DeductionType``; the
ledger only ever adds to it. ``Rider.total_deductions`` is the derived sum
shown next to each rider.
"""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator

from ems_tracker.models.base import StorageModel
from ems_tracker.taxonomy.equipment_taxonomy import DeductionType, VehicleType


class DeductionTotals(StorageModel):
    """Running totals per deduction category (currency units)."""

    advance: float = 0.0
    security_check: float = 0.0
    previous_debt: float = 0.0
    deduction: float = 0.0

    def get(self, kind: DeductionType) -> float:
        return getattr(self, kind.attr)

    def added(self, kind: DeductionType, amount: float) -> "DeductionTotals":
        """Return new totals with ``amount`` added to ``kind``."""
        return self.model_copy(update={kind.attr: self.get(kind) + amount})

    @property
    def total(self) -> float:
        return sum(self.get(kind) for kind in DeductionType)


class Rider(StorageModel):
    """A delivery rider issued equipment and charged deductions.

    Attributes:
        code: Unique key, e.g. ``"R1"``.
        name: Display name.
        region: Free-text region label.
        vehicle_type: ``motorcycle`` or ``bicycle``.
        tshirt_quantity: T-shirts issued; at least one.
        equipment_photo: Embedded ``data:`` URI of the issued-equipment photo,
            or ``None`` if no photo was uploaded.
        deductions: Running deduction totals.
    """

    code: str
    name: str
    region: str = ""
    vehicle_type: VehicleType = VehicleType.MOTORCYCLE
    tshirt_quantity: int = 1
    equipment_photo: Optional[str] = None
    deductions: DeductionTotals = DeductionTotals()

    @field_validator("code", "name")
    @classmethod
    def required_text(cls, v: str) -> str:
        if not v:
            raise ValueError("Rider code and name must not be empty.")
        return v

    @field_validator("tshirt_quantity")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"tshirt_quantity must be >= 1, got {v}.")
        return v

    @property
    def total_deductions(self) -> float:
        return self.deductions.total

    def matches(self, query: str) -> bool:
        """Return ``True`` if ``query`` occurs in the name, code, or region.

        Matching is a plain (case-sensitive) substring test; an empty query
        matches every rider.
        """
        if not query:
            return True
        return query in self.name or query in self.code or query in self.region
