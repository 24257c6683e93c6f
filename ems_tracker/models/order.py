"""
Order model — a supervisor's request to draw stock from the pool.

Orders are never deleted. ``status`` starts at ``pending``; the reconciler
moves it to ``approved`` or ``rejected``.
"""

from __future__ import annotations

from pydantic import field_validator

from ems_tracker.models.base import StorageModel
from ems_tracker.models.inventory import EquipmentCounts
from ems_tracker.taxonomy.equipment_taxonomy import OrderStatus


class Order(StorageModel):
    """An equipment request.

    Attributes:
        id: Time-derived unique id (epoch milliseconds, strictly increasing).
        supervisor_code: Requesting supervisor; not checked against the
            supervisor list and may be empty.
        motorcycle_pouches: Requested motorcycle pouches.
        bicycle_pouches: Requested bicycle pouches.
        tshirts: Requested t-shirts.
        status: Current lifecycle status.
    """

    id: int
    supervisor_code: str = ""
    motorcycle_pouches: int = 0
    bicycle_pouches: int = 0
    tshirts: int = 0
    status: OrderStatus = OrderStatus.PENDING

    @field_validator("motorcycle_pouches", "bicycle_pouches", "tshirts")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Requested quantity must be >= 0, got {v}.")
        return v

    @property
    def requested(self) -> EquipmentCounts:
        """The requested quantities as an ``EquipmentCounts``."""
        return EquipmentCounts(
            motorcycle_pouches=self.motorcycle_pouches,
            bicycle_pouches=self.bicycle_pouches,
            tshirts=self.tshirts,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def with_status(self, status: OrderStatus) -> "Order":
        return self.model_copy(update={"status": status})
