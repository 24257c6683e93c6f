"""
``StoreSnapshot`` — the four collections as one value.

Used by the storage codec (one document per field) and by JSON
export/import, whose document is exactly ``snapshot.to_document()``::

    {"supervisors": [...], "riders": [...], "inventory": {...}, "orders": [...]}
"""

from __future__ import annotations

from ems_tracker.models.base import StorageModel
from ems_tracker.models.inventory import InventoryPool
from ems_tracker.models.order import Order
from ems_tracker.models.rider import Rider
from ems_tracker.models.supervisor import Supervisor


class StoreSnapshot(StorageModel):
    """Immutable view of every collection held by a ``DomainStore``."""

    supervisors: tuple[Supervisor, ...] = ()
    riders: tuple[Rider, ...] = ()
    inventory: InventoryPool = InventoryPool()
    orders: tuple[Order, ...] = ()
