"""
Domain store — owner of the four collections.

``DomainStore`` holds supervisors, riders, the inventory pool, and orders as
one immutable ``StoreSnapshot``. Every mutator validates its input, builds a
new snapshot, writes all four storage documents, and only then swaps the new
snapshot in — a failed write leaves the in-memory state untouched.

There is no module-level store. Whoever opens the storage (a CLI command, a
test) constructs the store and hands it to the ``OrderReconciler`` and
``DeductionLedger`` that need it.

Write discipline:
  All mutators run under ``store.lock`` (a re-entrant lock). Compound
  operations such as order approval hold the same lock across their
  read-check-write sequence, so no other mutation can interleave.

Usage::

    with get_connection(config.storage.db_path) as conn:
        apply_schema(conn)
        store = DomainStore(StorageDocumentRepository(conn))
        store.load()
        result = store.add_rider({"code": "R1", "name": "Ali"})
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from ems_tracker.db.repositories.document_repo import StorageDocumentRepository
from ems_tracker.models.forms import (
    RiderForm,
    SupervisorForm,
    describe_validation_error,
    parse_whole_number,
)
from ems_tracker.models.inventory import InventoryPool
from ems_tracker.models.order import Order
from ems_tracker.models.outcome import MutationResult, MutationStatus
from ems_tracker.models.rider import Rider
from ems_tracker.models.snapshot import StoreSnapshot
from ems_tracker.models.supervisor import Supervisor
from ems_tracker.store.codec import STORAGE_KEYS, decode_documents, encode_snapshot
from ems_tracker.taxonomy.equipment_taxonomy import EquipmentItem

logger = logging.getLogger(__name__)


class DomainStore:
    """The four collections plus their invariant-preserving mutators.

    Args:
        repository: Storage backend. ``None`` keeps the store in memory only.
        default_inventory: Pool used before anything has been stored.

    Attributes:
        lock: Re-entrant lock serialising every mutation.
    """

    def __init__(
        self,
        repository: Optional[StorageDocumentRepository] = None,
        default_inventory: Optional[InventoryPool] = None,
    ) -> None:
        self._repository = repository
        self._default_inventory = default_inventory or InventoryPool()
        self._snapshot = StoreSnapshot(inventory=self._default_inventory)
        self.lock = threading.RLock()

    # ── Read access ───────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def supervisors(self) -> tuple[Supervisor, ...]:
        return self._snapshot.supervisors

    @property
    def riders(self) -> tuple[Rider, ...]:
        return self._snapshot.riders

    @property
    def inventory(self) -> InventoryPool:
        return self._snapshot.inventory

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._snapshot.orders

    def get_supervisor(self, code: str) -> Optional[Supervisor]:
        return next((s for s in self.supervisors if s.code == code), None)

    def get_rider(self, code: str) -> Optional[Rider]:
        return next((r for r in self.riders if r.code == code), None)

    def get_order(self, order_id: int) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)

    # ── Persistence ───────────────────────────────────────────────────────────

    def load(self) -> StoreSnapshot:
        """Replace in-memory state with what the repository holds.

        Unreadable documents fall back to their defaults (see ``codec``).
        A store without a repository is left unchanged.
        """
        if self._repository is None:
            return self._snapshot
        with self.lock:
            documents = self._repository.get_many(STORAGE_KEYS.values())
            self._snapshot = decode_documents(documents, self._default_inventory)
        logger.info(
            "Loaded store: %d supervisors, %d riders, %d orders.",
            len(self.supervisors), len(self.riders), len(self.orders),
        )
        return self._snapshot

    def _commit(self, **changes: Any) -> StoreSnapshot:
        """Persist a snapshot with ``changes`` applied, then make it current."""
        updated = self._snapshot.model_copy(update=changes)
        if self._repository is not None:
            self._repository.put_many(encode_snapshot(updated))
        self._snapshot = updated
        return updated

    def replace_all(self, snapshot: StoreSnapshot) -> MutationResult:
        """Replace all four collections at once (JSON import)."""
        with self.lock:
            self._commit(
                supervisors=snapshot.supervisors,
                riders=snapshot.riders,
                inventory=snapshot.inventory,
                orders=snapshot.orders,
            )
        logger.info(
            "Replaced store contents: %d supervisors, %d riders, %d orders.",
            len(snapshot.supervisors), len(snapshot.riders), len(snapshot.orders),
        )
        return MutationResult.success("Store contents replaced.")

    # ── Supervisors ───────────────────────────────────────────────────────────

    def add_supervisor(
        self, form: Union[SupervisorForm, Mapping[str, Any]]
    ) -> MutationResult:
        """Append a supervisor with zeroed inventory.

        Fails with ``VALIDATION_FAILED`` when code or name is empty or the code
        is already taken.
        """
        try:
            validated = SupervisorForm.model_validate(form)
        except ValidationError as exc:
            return MutationResult.failure(
                MutationStatus.VALIDATION_FAILED,
                f"Invalid supervisor: {describe_validation_error(exc)}",
            )
        with self.lock:
            if self.get_supervisor(validated.code) is not None:
                return MutationResult.failure(
                    MutationStatus.VALIDATION_FAILED,
                    f"Supervisor '{validated.code}' already exists.",
                    code=validated.code,
                )
            supervisor = validated.to_supervisor()
            self._commit(supervisors=self.supervisors + (supervisor,))
        logger.info(
            "Added supervisor %s (%s).", supervisor.code, supervisor.name,
            extra={"supervisor_code": supervisor.code},
        )
        return MutationResult.success(
            f"Supervisor '{supervisor.code}' added.", code=supervisor.code
        )

    def remove_supervisor(self, code: str) -> MutationResult:
        with self.lock:
            remaining = tuple(s for s in self.supervisors if s.code != code)
            if len(remaining) == len(self.supervisors):
                return MutationResult.failure(
                    MutationStatus.NOT_FOUND, f"Supervisor '{code}' not found.", code=code
                )
            self._commit(supervisors=remaining)
        logger.info("Removed supervisor %s.", code)
        return MutationResult.success(f"Supervisor '{code}' removed.", code=code)

    # ── Riders ────────────────────────────────────────────────────────────────

    def add_rider(self, form: Union[RiderForm, Mapping[str, Any]]) -> MutationResult:
        """Append a rider with zero deductions and no photo.

        Fails with ``VALIDATION_FAILED`` when code or name is empty, the
        vehicle type or t-shirt quantity is invalid, or the code is taken.
        """
        try:
            validated = RiderForm.model_validate(form)
        except ValidationError as exc:
            return MutationResult.failure(
                MutationStatus.VALIDATION_FAILED,
                f"Invalid rider: {describe_validation_error(exc)}",
            )
        with self.lock:
            if self.get_rider(validated.code) is not None:
                return MutationResult.failure(
                    MutationStatus.VALIDATION_FAILED,
                    f"Rider '{validated.code}' already exists.",
                    code=validated.code,
                )
            rider = validated.to_rider()
            self._commit(riders=self.riders + (rider,))
        logger.info("Added rider %s (%s).", rider.code, rider.name, extra={"rider_code": rider.code})
        return MutationResult.success(f"Rider '{rider.code}' added.", code=rider.code)

    def remove_rider(self, code: str) -> MutationResult:
        with self.lock:
            remaining = tuple(r for r in self.riders if r.code != code)
            if len(remaining) == len(self.riders):
                return MutationResult.failure(
                    MutationStatus.NOT_FOUND, f"Rider '{code}' not found.", code=code
                )
            self._commit(riders=remaining)
        logger.info("Removed rider %s.", code, extra={"rider_code": code})
        return MutationResult.success(f"Rider '{code}' removed.", code=code)

    def set_rider_photo(self, code: str, image_data: Optional[str]) -> MutationResult:
        """Replace the equipment photo reference of rider ``code``."""
        with self.lock:
            rider = self.get_rider(code)
            if rider is None:
                return MutationResult.failure(
                    MutationStatus.NOT_FOUND, f"Rider '{code}' not found.", code=code
                )
            self.replace_rider(rider.model_copy(update={"equipment_photo": image_data}))
        logger.info("Updated equipment photo for rider %s.", code, extra={"rider_code": code})
        return MutationResult.success(f"Photo updated for rider '{code}'.", code=code)

    def replace_rider(self, rider: Rider) -> None:
        """Swap in ``rider`` for the stored rider with the same code.

        Raises:
            KeyError: If no rider with that code exists.
        """
        with self.lock:
            if self.get_rider(rider.code) is None:
                raise KeyError(rider.code)
            self._commit(
                riders=tuple(rider if r.code == rider.code else r for r in self.riders)
            )

    def bulk_import_riders(
        self, rows: Iterable[Mapping[str, Any]]
    ) -> MutationResult:
        """Append one rider per valid row.

        Each row is ``{code, name, region, vehicleType, tshirtQuantity}`` with
        the ``RiderForm`` defaults applied. Rows that fail validation or reuse
        a code already present (in the store or earlier in ``rows``) are
        skipped and listed in ``detail["skipped"]`` as ``(row_number, reason)``.

        Returns:
            ``SUCCESS`` if any row was imported or there were no rows;
            ``VALIDATION_FAILED`` if every row was skipped.
        """
        imported: list[Rider] = []
        skipped: list[tuple[int, str]] = []
        with self.lock:
            seen = {r.code for r in self.riders}
            for row_number, row in enumerate(rows, start=1):
                try:
                    rider = RiderForm.model_validate(row).to_rider()
                except ValidationError as exc:
                    skipped.append((row_number, describe_validation_error(exc)))
                    continue
                if rider.code in seen:
                    skipped.append((row_number, f"duplicate rider code '{rider.code}'"))
                    continue
                seen.add(rider.code)
                imported.append(rider)
            if imported:
                self._commit(riders=self.riders + tuple(imported))

        for row_number, reason in skipped:
            logger.warning("Skipped rider import row %d: %s", row_number, reason)
        logger.info(
            "Imported %d rider(s), skipped %d.", len(imported), len(skipped),
            extra={"imported": len(imported), "skipped": len(skipped)},
        )

        if skipped and not imported:
            return MutationResult.failure(
                MutationStatus.VALIDATION_FAILED,
                f"No riders imported; {len(skipped)} row(s) rejected.",
                imported=0,
                skipped=skipped,
            )
        return MutationResult.success(
            f"Imported {len(imported)} rider(s).",
            imported=len(imported),
            skipped=skipped,
        )

    # ── Inventory ─────────────────────────────────────────────────────────────

    def adjust_inventory(
        self, item: Union[EquipmentItem, str], delta: int
    ) -> MutationResult:
        """Set ``pool[item] = max(0, pool[item] + delta)``.

        ``delta`` must be a whole number; anything else fails with
        ``VALIDATION_FAILED`` and leaves the pool unchanged.
        """
        try:
            equipment = EquipmentItem(item)
        except ValueError:
            valid = sorted(e.value for e in EquipmentItem)
            return MutationResult.failure(
                MutationStatus.VALIDATION_FAILED,
                f"Unknown inventory item '{item}'. Valid items: {valid}",
            )
        step = parse_whole_number(delta)
        if step is None:
            return MutationResult.failure(
                MutationStatus.VALIDATION_FAILED,
                f"Inventory adjustment must be a whole number, got {delta!r}.",
                item=equipment.value,
            )
        with self.lock:
            before = self.inventory.get(equipment)
            pool = self._commit(inventory=self.inventory.adjusted(equipment, step)).inventory
            after = pool.get(equipment)
        logger.info(
            "Inventory %s: %d → %d (delta %+d).", equipment.value, before, after, step,
            extra={"item": equipment.value, "before": before, "after": after},
        )
        return MutationResult.success(
            f"{equipment.value}: {before} → {after}",
            item=equipment.value,
            before=before,
            after=after,
        )

    # ── Orders (used by OrderReconciler) ──────────────────────────────────────

    def append_order(self, order: Order) -> None:
        """Append a new order.

        Raises:
            ValueError: If an order with the same id already exists.
        """
        with self.lock:
            if self.get_order(order.id) is not None:
                raise ValueError(f"Order id {order.id} already exists.")
            self._commit(orders=self.orders + (order,))

    def apply_order(self, order: Order, inventory: InventoryPool) -> None:
        """Store ``order`` over the one with the same id, together with ``inventory``.

        Both are written in a single commit, so an order transition and the
        stock movement it causes are persisted together or not at all.

        Raises:
            KeyError: If no order with that id exists.
        """
        with self.lock:
            if self.get_order(order.id) is None:
                raise KeyError(order.id)
            self._commit(
                inventory=inventory,
                orders=tuple(order if o.id == order.id else o for o in self.orders),
            )
