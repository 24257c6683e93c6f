"""
Overview figures for the dashboard/CLI summary.

``build_overview()`` returns a flat dict:
  - ``supervisors``, ``riders``: collection sizes
  - ``orders_pending`` / ``orders_approved`` / ``orders_rejected``
  - ``inventory``: ``{item: count}`` keyed by the camelCase item name
  - ``inventory_value``: approximate pool value from per-unit prices
  - ``deductions_total``: fleet-wide sum of every rider's deductions
  - ``currency``: label for the money figures
"""

from __future__ import annotations

from typing import Iterable

from ems_tracker.config import UnitPricesConfig
from ems_tracker.models.inventory import EquipmentCounts
from ems_tracker.models.rider import Rider
from ems_tracker.models.snapshot import StoreSnapshot
from ems_tracker.taxonomy.equipment_taxonomy import EquipmentItem, OrderStatus


def inventory_value(pool: EquipmentCounts, prices: UnitPricesConfig) -> float:
    """Approximate money value of ``pool`` at ``prices`` per unit."""
    return sum(
        pool.get(item) * getattr(prices, item.attr) for item in EquipmentItem
    )


def search_riders(riders: Iterable[Rider], query: str) -> list[Rider]:
    """Return riders whose name, code, or region contains ``query``."""
    return [r for r in riders if r.matches(query)]


def build_overview(
    snapshot: StoreSnapshot,
    prices: UnitPricesConfig | None = None,
    currency: str = "EGP",
) -> dict:
    """Summarise ``snapshot`` for display.

    Args:
        snapshot: Current store contents.
        prices: Per-unit prices; defaults to ``UnitPricesConfig()``.
        currency: Currency label carried through to the output.
    """
    prices = prices or UnitPricesConfig()
    status_counts = {status: 0 for status in OrderStatus}
    for order in snapshot.orders:
        status_counts[order.status] += 1

    return {
        "supervisors":      len(snapshot.supervisors),
        "riders":           len(snapshot.riders),
        "orders_pending":   status_counts[OrderStatus.PENDING],
        "orders_approved":  status_counts[OrderStatus.APPROVED],
        "orders_rejected":  status_counts[OrderStatus.REJECTED],
        "inventory":        {item.value: snapshot.inventory.get(item) for item in EquipmentItem},
        "inventory_value":  inventory_value(snapshot.inventory, prices),
        "deductions_total": sum(r.total_deductions for r in snapshot.riders),
        "currency":         currency,
    }
