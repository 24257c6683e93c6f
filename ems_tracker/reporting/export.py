"""
Export and import helpers.

``export_snapshot()`` writes the whole store as one indented JSON document::

    {"supervisors": [...], "riders": [...], "inventory": {...}, "orders": [...]}

``load_snapshot()`` reads such a document back into a validated
``StoreSnapshot`` for ``DomainStore.replace_all``; exporting and re-importing
reproduces every collection field for field.

``flatten_riders_for_export()`` produces one flat row per rider (deduction
categories as separate columns) for ``export_to_csv``, so the deductions
sheet opens directly in Excel.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ems_tracker.models.rider import Rider
from ems_tracker.models.snapshot import StoreSnapshot
from ems_tracker.taxonomy.equipment_taxonomy import DeductionType

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FILENAME = "ems-data.json"

RIDER_EXPORT_COLUMNS: list[str] = [
    "code", "name", "region", "vehicleType", "tshirtQuantity",
    *(kind.value for kind in DeductionType),
    "totalDeductions", "hasPhoto",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and not fieldnames:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed (2-space indented) JSON file.

    Args:
        data: Dict or list to serialise.
        path: Destination file path (parent dirs created if missing).

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8"
    )
    return path


def export_snapshot(snapshot: StoreSnapshot, path: Path) -> Path:
    """Write ``snapshot`` as the single-document JSON export."""
    written = export_to_json(snapshot.to_document(), path)
    logger.info(
        "Exported %d supervisors, %d riders, %d orders to %s",
        len(snapshot.supervisors), len(snapshot.riders), len(snapshot.orders), path,
    )
    return written


def load_snapshot(path: Path) -> StoreSnapshot:
    """Read a JSON export back into a ``StoreSnapshot``.

    Missing top-level keys take their defaults (empty collections, empty
    pool).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not valid JSON or fails model validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Export file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return StoreSnapshot.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid export file {path.name}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Export file {path.name} is not valid JSON: {exc}") from exc


def flatten_riders_for_export(riders: list[Rider] | tuple[Rider, ...]) -> list[dict]:
    """Flatten riders into one CSV-ready row each (see ``RIDER_EXPORT_COLUMNS``)."""
    rows: list[dict] = []
    for rider in riders:
        row: dict = {
            "code":           rider.code,
            "name":           rider.name,
            "region":         rider.region,
            "vehicleType":    rider.vehicle_type.value,
            "tshirtQuantity": rider.tshirt_quantity,
        }
        for kind in DeductionType:
            row[kind.value] = rider.deductions.get(kind)
        row["totalDeductions"] = rider.total_deductions
        row["hasPhoto"] = rider.equipment_photo is not None
        rows.append(row)
    return rows
