"""
Storage codec — ``StoreSnapshot`` ↔ four independently keyed JSON documents.

Layout (matches what the browser app wrote to local storage)::

    ems_supervisors_v1  → [ {code, name, region, username, password, inventory}, ... ]
    ems_riders_v1       → [ {code, name, region, vehicleType, tshirtQuantity,
                             equipmentPhoto, deductions}, ... ]
    ems_inventory_v1    → {motorcyclePouches, bicyclePouches, tshirts}
    ems_orders_v1       → [ {id, supervisorCode, motorcyclePouches,
                             bicyclePouches, tshirts, status}, ... ]

Decoding never raises. A missing document falls back to its default. A
collection document that is not a parseable JSON array is logged and falls
back to an empty collection; inside a readable array, each record is
validated on its own and only the invalid ones are logged and dropped. An
unreadable inventory document falls back to the default pool. Other
documents are unaffected.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ems_tracker.models.forms import describe_validation_error
from ems_tracker.models.inventory import InventoryPool
from ems_tracker.models.order import Order
from ems_tracker.models.rider import Rider
from ems_tracker.models.snapshot import StoreSnapshot
from ems_tracker.models.supervisor import Supervisor

logger = logging.getLogger(__name__)

STORAGE_KEYS: dict[str, str] = {
    "supervisors": "ems_supervisors_v1",
    "riders": "ems_riders_v1",
    "inventory": "ems_inventory_v1",
    "orders": "ems_orders_v1",
}

_M = TypeVar("_M", bound=BaseModel)


def encode_snapshot(snapshot: StoreSnapshot) -> dict[str, str]:
    """Return ``{storage_key: json_text}`` for all four collections."""
    return {
        STORAGE_KEYS["supervisors"]: _dumps([s.to_document() for s in snapshot.supervisors]),
        STORAGE_KEYS["riders"]: _dumps([r.to_document() for r in snapshot.riders]),
        STORAGE_KEYS["inventory"]: _dumps(snapshot.inventory.to_document()),
        STORAGE_KEYS["orders"]: _dumps([o.to_document() for o in snapshot.orders]),
    }


def decode_documents(
    documents: Mapping[str, Optional[str]],
    default_inventory: Optional[InventoryPool] = None,
) -> StoreSnapshot:
    """Rebuild a ``StoreSnapshot`` from stored documents.

    Args:
        documents: Storage key → JSON text, or ``None`` for a missing key.
        default_inventory: Pool to use when the inventory document is missing
            or unreadable. Defaults to an empty pool.

    Returns:
        A snapshot; unreadable collections are replaced by their defaults.
    """
    fallback_pool = default_inventory or InventoryPool()
    return StoreSnapshot(
        supervisors=_decode_list(documents, "supervisors", Supervisor),
        riders=_decode_list(documents, "riders", Rider),
        inventory=_decode_inventory(documents, fallback_pool),
        orders=_decode_list(documents, "orders", Order),
    )


# ── Private helpers ────────────────────────────────────────────────────────────

def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False)


def _decode_list(
    documents: Mapping[str, Optional[str]],
    collection: str,
    model: type[_M],
) -> tuple[_M, ...]:
    key = STORAGE_KEYS[collection]
    raw = documents.get(key)
    if raw is None:
        return ()
    try:
        data = json.loads(raw)
    except ValueError as exc:
        logger.warning(
            "Failed to parse %s from storage key '%s'; using empty collection: %s",
            collection, key, exc,
        )
        return ()
    if not isinstance(data, list):
        logger.warning(
            "Storage key '%s' holds a JSON %s, not an array; using empty %s.",
            key, type(data).__name__, collection,
        )
        return ()

    records: list[_M] = []
    for index, item in enumerate(data):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Dropped invalid %s record %d from storage key '%s': %s",
                collection, index, key, describe_validation_error(exc),
                extra={"storage_key": key, "record_index": index},
            )
    return tuple(records)


def _decode_inventory(
    documents: Mapping[str, Optional[str]],
    fallback: InventoryPool,
) -> InventoryPool:
    key = STORAGE_KEYS["inventory"]
    raw = documents.get(key)
    if raw is None:
        return fallback
    try:
        return InventoryPool.model_validate(json.loads(raw))
    except (ValueError, TypeError, ValidationError) as exc:
        logger.warning(
            "Failed to load inventory from storage key '%s'; using default pool: %s",
            key, exc,
        )
        return fallback
