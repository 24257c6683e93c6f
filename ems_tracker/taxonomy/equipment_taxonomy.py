"""
Enumerations shared by every EMS Tracker layer.

  - ``EquipmentItem``  — the three stock lines held in the pool.
  - ``VehicleType``    — what a rider delivers on.
  - ``OrderStatus``    — lifecycle of a supervisor equipment request.
  - ``DeductionType``  — the four running deduction categories per rider.
  - ``RejectPolicy``   — which orders may be rejected (``[orders] reject_policy``).

Enum values are the persisted (camelCase) names, so a value read from a
storage document or a CLI argument maps directly onto a member.
``EquipmentItem.attr`` and ``DeductionType.attr`` give the snake_case model
attribute for each member.

This module has NO imports from any other ``ems_tracker`` package.
"""

from enum import StrEnum


class EquipmentItem(StrEnum):
    """A stock line tracked in the central inventory pool."""

    MOTORCYCLE_POUCHES = "motorcyclePouches"
    BICYCLE_POUCHES = "bicyclePouches"
    TSHIRTS = "tshirts"

    @property
    def attr(self) -> str:
        """Model attribute holding this item's count."""
        return _EQUIPMENT_ATTRS[self]


_EQUIPMENT_ATTRS: dict[EquipmentItem, str] = {
    EquipmentItem.MOTORCYCLE_POUCHES: "motorcycle_pouches",
    EquipmentItem.BICYCLE_POUCHES: "bicycle_pouches",
    EquipmentItem.TSHIRTS: "tshirts",
}


class VehicleType(StrEnum):
    """Vehicle a rider uses; decides which pouch they are issued."""

    MOTORCYCLE = "motorcycle"
    BICYCLE = "bicycle"


class OrderStatus(StrEnum):
    """Order lifecycle. ``PENDING`` is the only non-terminal status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DeductionType(StrEnum):
    """Category of a monetary charge against a rider."""

    ADVANCE = "advance"
    SECURITY_CHECK = "securityCheck"
    PREVIOUS_DEBT = "previousDebt"
    DEDUCTION = "deduction"

    @property
    def attr(self) -> str:
        """Model attribute holding this category's running total."""
        return _DEDUCTION_ATTRS[self]


_DEDUCTION_ATTRS: dict[DeductionType, str] = {
    DeductionType.ADVANCE: "advance",
    DeductionType.SECURITY_CHECK: "security_check",
    DeductionType.PREVIOUS_DEBT: "previous_debt",
    DeductionType.DEDUCTION: "deduction",
}


class RejectPolicy(StrEnum):
    """Which orders may be rejected, and whether rejection returns stock.

    ``ANY`` rejects from any status and never returns stock (the browser
    app's behaviour). ``PENDING_ONLY`` refuses finished orders. ``REVERSE``
    returns an approved order's quantities to the pool.
    """

    ANY = "any"
    PENDING_ONLY = "pending_only"
    REVERSE = "reverse"
