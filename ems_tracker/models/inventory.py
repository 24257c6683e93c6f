"""
Equipment counts and the central inventory pool.

``EquipmentCounts`` is a plain triple of non-negative quantities — used for a
supervisor's (informational) inventory and for the quantities an order asks
for. ``InventoryPool`` is the single source of truth for available stock; it
adds the clamped adjustment and the shortfall check used at approval time.
"""

from __future__ import annotations

from pydantic import field_validator

from ems_tracker.models.base import StorageModel
from ems_tracker.taxonomy.equipment_taxonomy import EquipmentItem


class EquipmentCounts(StorageModel):
    """Quantities of each equipment item.

    Attributes:
        motorcycle_pouches: Motorcycle delivery pouches.
        bicycle_pouches: Bicycle delivery pouches.
        tshirts: Branded t-shirts.
    """

    motorcycle_pouches: int = 0
    bicycle_pouches: int = 0
    tshirts: int = 0

    @field_validator("motorcycle_pouches", "bicycle_pouches", "tshirts")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Equipment quantity must be >= 0, got {v}.")
        return v

    def get(self, item: EquipmentItem) -> int:
        """Return the quantity held for ``item``."""
        return getattr(self, item.attr)

    def as_dict(self) -> dict[EquipmentItem, int]:
        """Return ``{item: quantity}`` for every equipment item, in enum order."""
        return {item: self.get(item) for item in EquipmentItem}

    @property
    def total(self) -> int:
        return self.motorcycle_pouches + self.bicycle_pouches + self.tshirts


class InventoryPool(EquipmentCounts):
    """The central stock from which every order is filled."""

    def adjusted(self, item: EquipmentItem, delta: int) -> "InventoryPool":
        """Return a new pool with ``item`` moved by ``delta``, clamped at zero."""
        return self.model_copy(update={item.attr: max(0, self.get(item) + delta)})

    def shortfall(self, requested: EquipmentCounts) -> dict[EquipmentItem, int]:
        """Return ``{item: missing}`` for each item the pool cannot cover.

        An empty dict means every requested quantity is available.
        """
        missing: dict[EquipmentItem, int] = {}
        for item, wanted in requested.as_dict().items():
            available = self.get(item)
            if wanted > available:
                missing[item] = wanted - available
        return missing
