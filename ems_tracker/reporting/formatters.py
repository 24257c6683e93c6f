"""
ASCII terminal formatters for CLI commands.

All formatters accept models or overview dicts and return plain multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from typing import Iterable

from ems_tracker.models.inventory import InventoryPool
from ems_tracker.models.order import Order
from ems_tracker.models.outcome import MutationResult
from ems_tracker.models.rider import Rider
from ems_tracker.models.supervisor import Supervisor
from ems_tracker.taxonomy.equipment_taxonomy import DeductionType, EquipmentItem

_ITEM_LABELS: dict[str, str] = {
    EquipmentItem.MOTORCYCLE_POUCHES.value: "Motorcycle pouches",
    EquipmentItem.BICYCLE_POUCHES.value:    "Bicycle pouches",
    EquipmentItem.TSHIRTS.value:            "T-shirts",
}


def _money(amount: float, currency: str = "") -> str:
    text = f"{amount:,.2f}"
    return f"{text} {currency}" if currency else text


# ── Overview ──────────────────────────────────────────────────────────────────


def format_overview(overview: dict) -> str:
    """Format a ``build_overview()`` dict as a short dashboard block."""
    currency = overview.get("currency", "")
    lines: list[str] = []
    lines.append("")
    lines.append("=== Overview ===")
    lines.append(f"  Supervisors:        {overview['supervisors']}")
    lines.append(f"  Riders:             {overview['riders']}")
    lines.append(
        f"  Orders:             {overview['orders_pending']} pending, "
        f"{overview['orders_approved']} approved, {overview['orders_rejected']} rejected"
    )
    lines.append("")
    lines.append("  [INVENTORY]")
    for item, count in overview["inventory"].items():
        lines.append(f"    {_ITEM_LABELS.get(item, item):<20} {count:>8}")
    lines.append(f"    {'Approx. value':<20} {_money(overview['inventory_value'], currency):>8}")
    lines.append("")
    lines.append(f"  Deductions (all riders): {_money(overview['deductions_total'], currency)}")
    return "\n".join(lines)


def format_inventory(pool: InventoryPool) -> str:
    lines = ["", "=== Inventory Pool ==="]
    for item, count in pool.as_dict().items():
        lines.append(f"  {_ITEM_LABELS[item.value]:<20} {count:>8}")
    return "\n".join(lines)


# ── Collections ───────────────────────────────────────────────────────────────


def format_supervisors_table(supervisors: Iterable[Supervisor]) -> str:
    rows = list(supervisors)
    lines = ["", "=== Supervisors ==="]
    if not rows:
        lines.append("  (no supervisors — add one with 'supervisor add')")
        return "\n".join(lines)
    header = f"  {'Code':<12}  {'Name':<24}  {'Region':<16}  {'Username':<16}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for s in rows:
        lines.append(f"  {s.code:<12}  {s.name[:24]:<24}  {s.region[:16]:<16}  {s.username[:16]:<16}")
    return "\n".join(lines)


def format_riders_table(riders: Iterable[Rider], currency: str = "") -> str:
    """Format riders with their deduction total.

    ::

        Code    Name        Region   Vehicle     Shirts  Deductions  Photo
        -----------------------------------------------------------------
        R1      Ali         Cairo    motorcycle       2      150.00    yes
    """
    rows = list(riders)
    lines = ["", "=== Riders ==="]
    if not rows:
        lines.append("  (no riders found)")
        return "\n".join(lines)
    header = (
        f"  {'Code':<12}  {'Name':<24}  {'Region':<16}  {'Vehicle':<10}  "
        f"{'Shirts':>6}  {'Deductions':>12}  {'Photo':>5}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for r in rows:
        lines.append(
            f"  {r.code:<12}  {r.name[:24]:<24}  {r.region[:16]:<16}  "
            f"{r.vehicle_type.value:<10}  {r.tshirt_quantity:>6}  "
            f"{_money(r.total_deductions):>12}  {'yes' if r.equipment_photo else 'no':>5}"
        )
    if currency:
        lines.append(f"  (amounts in {currency})")
    return "\n".join(lines)


def format_rider_deductions(rider: Rider, currency: str = "") -> str:
    lines = ["", f"=== Deductions: {rider.name} ({rider.code}) ==="]
    for kind in DeductionType:
        lines.append(f"  {kind.value:<16} {_money(rider.deductions.get(kind), currency):>16}")
    lines.append(f"  {'total':<16} {_money(rider.total_deductions, currency):>16}")
    return "\n".join(lines)


def format_orders_table(orders: Iterable[Order]) -> str:
    rows = list(orders)
    lines = ["", "=== Orders ==="]
    if not rows:
        lines.append("  (no orders — request one with 'order request')")
        return "\n".join(lines)
    header = (
        f"  {'Order':>14}  {'Supervisor':<12}  {'Moto':>5}  {'Bike':>5}  "
        f"{'Shirts':>6}  {'Status':<9}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for o in rows:
        lines.append(
            f"  {o.id:>14}  {(o.supervisor_code or 'N/A'):<12}  {o.motorcycle_pouches:>5}  "
            f"{o.bicycle_pouches:>5}  {o.tshirts:>6}  {o.status.value:<9}"
        )
    return "\n".join(lines)


# ── Results ───────────────────────────────────────────────────────────────────


def format_result(result: MutationResult) -> str:
    """One-line ``[OK]`` / ``[ERROR]`` summary, plus status, shortfall or skipped rows."""
    tag = "[OK]" if result.ok else f"[ERROR:{result.status.value}]"
    lines = [f"{tag} {result.message}"]
    if "current_status" in result.detail:
        lines.append(f"  current status: {result.detail['current_status']}")
    for item, missing in result.detail.get("shortfall", {}).items():
        lines.append(f"  short by {missing:>5}: {_ITEM_LABELS.get(item, item)}")
    for row_number, reason in result.detail.get("skipped", []):
        lines.append(f"  row {row_number}: {reason}")
    return "\n".join(lines)
