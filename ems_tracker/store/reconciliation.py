"""
Order reconciliation — request, approve, and reject equipment orders.

Rules:
  - A request must ask for at least one item; it is stored as ``pending``
    with a fresh time-derived id. The supervisor code is not checked.
  - Approval checks every requested quantity against the pool *at approval
    time*. If any item falls short, nothing changes, the order stays
    ``pending``, and the result carries the per-item shortfall. Otherwise the
    reduced pool and the ``approved`` order are written in one commit. The
    check and the write run under the store lock as one step.
  - Only ``pending`` orders can be approved.
  - Rejection follows the configured ``RejectPolicy``:
      ``any``          — any order becomes ``rejected``; an approved order
                         keeps its deduction (the browser app's behaviour).
      ``pending_only`` — only ``pending`` orders may be rejected.
      ``reverse``      — rejecting an ``approved`` order first returns its
                         quantities to the pool.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Union

from pydantic import ValidationError

from ems_tracker.models.forms import OrderForm, describe_validation_error
from ems_tracker.models.inventory import EquipmentCounts
from ems_tracker.models.order import Order
from ems_tracker.models.outcome import MutationResult, MutationStatus
from ems_tracker.store.domain_store import DomainStore
from ems_tracker.taxonomy.equipment_taxonomy import OrderStatus, RejectPolicy
from ems_tracker.utils.time_utils import next_order_id, utcnow

logger = logging.getLogger(__name__)


class OrderReconciler:
    """Applies order transitions to a ``DomainStore``.

    Args:
        store: The store whose pool and order list are reconciled.
        reject_policy: One of ``RejectPolicy`` (or its string value).
        clock: Source of "now" for order ids; override in tests.
    """

    def __init__(
        self,
        store: DomainStore,
        reject_policy: Union[RejectPolicy, str] = RejectPolicy.ANY,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.reject_policy = RejectPolicy(reject_policy)
        self._clock = clock

    # ── Reads ─────────────────────────────────────────────────────────────────

    def pending_orders(self) -> list[Order]:
        return [o for o in self.store.orders if o.is_pending]

    def orders_for_supervisor(self, supervisor_code: str) -> list[Order]:
        return [o for o in self.store.orders if o.supervisor_code == supervisor_code]

    # ── Transitions ───────────────────────────────────────────────────────────

    def request_order(
        self,
        supervisor_code: str,
        quantities: Union[EquipmentCounts, Mapping[str, Any]],
    ) -> MutationResult:
        """Create a pending order for ``quantities``.

        Args:
            supervisor_code: Requesting supervisor (may be empty).
            quantities: ``EquipmentCounts`` or a mapping keyed by item name
                (``motorcyclePouches`` or ``motorcycle_pouches`` etc.).

        Returns:
            ``SUCCESS`` with ``detail["order_id"]``, or ``VALIDATION_FAILED``
            when nothing (or a negative / non-numeric amount) was requested.
        """
        if isinstance(quantities, EquipmentCounts):
            quantities = quantities.model_dump()
        try:
            form = OrderForm.model_validate(
                {**quantities, "supervisor_code": supervisor_code}
            )
        except ValidationError as exc:
            return MutationResult.failure(
                MutationStatus.VALIDATION_FAILED,
                f"Invalid order: {describe_validation_error(exc)}",
            )

        with self.store.lock:
            order_id = next_order_id((o.id for o in self.store.orders), now=self._clock())
            order = form.to_order(order_id)
            self.store.append_order(order)

        logger.info(
            "Order %d requested by '%s': motorcycle=%d bicycle=%d tshirts=%d.",
            order.id, order.supervisor_code,
            order.motorcycle_pouches, order.bicycle_pouches, order.tshirts,
            extra={"order_id": order.id, "supervisor_code": order.supervisor_code},
        )
        return MutationResult.success(f"Order {order.id} requested.", order_id=order.id)

    def approve_order(self, order_id: int) -> MutationResult:
        """Approve a pending order if the pool covers every requested item.

        The reduced pool and the ``approved`` status are committed together,
        so a failed write leaves both the pool and the order as they were.
        """
        with self.store.lock:
            order = self.store.get_order(order_id)
            if order is None:
                return self._not_found(order_id)
            if not order.is_pending:
                return self._already_finished(order)

            pool = self.store.inventory
            shortfall = pool.shortfall(order.requested)
            if shortfall:
                missing = {item.value: qty for item, qty in shortfall.items()}
                logger.warning(
                    "Order %d not approved: insufficient inventory %s.", order_id, missing,
                    extra={"order_id": order_id, "shortfall": missing},
                )
                return MutationResult.failure(
                    MutationStatus.INSUFFICIENT_INVENTORY,
                    "Not enough inventory to approve order.",
                    order_id=order_id,
                    shortfall=missing,
                )

            for item, qty in order.requested.as_dict().items():
                pool = pool.adjusted(item, -qty)
            self.store.apply_order(order.with_status(OrderStatus.APPROVED), pool)

        logger.info(
            "Order %d approved.", order_id,
            extra={"order_id": order_id, "inventory": pool.to_document()},
        )
        return MutationResult.success(f"Order {order_id} approved.", order_id=order_id)

    def reject_order(self, order_id: int) -> MutationResult:
        """Mark an order ``rejected`` according to ``reject_policy``."""
        with self.store.lock:
            order = self.store.get_order(order_id)
            if order is None:
                return self._not_found(order_id)

            previous = order.status
            if self.reject_policy is RejectPolicy.PENDING_ONLY and not order.is_pending:
                return self._already_finished(order)

            pool = self.store.inventory
            restored = (
                self.reject_policy is RejectPolicy.REVERSE
                and previous == OrderStatus.APPROVED
            )
            if restored:
                for item, qty in order.requested.as_dict().items():
                    pool = pool.adjusted(item, qty)
            self.store.apply_order(order.with_status(OrderStatus.REJECTED), pool)

        extra = {"order_id": order_id, "previous_status": previous.value}
        if previous == OrderStatus.APPROVED:
            logger.warning(
                "Order %d rejected after approval (stock %s).",
                order_id, "returned to pool" if restored else "not returned",
                extra=extra,
            )
        else:
            logger.info("Order %d rejected (was %s).", order_id, previous.value, extra=extra)
        return MutationResult.success(
            f"Order {order_id} rejected.",
            order_id=order_id,
            previous_status=previous.value,
            stock_restored=restored,
        )

    @staticmethod
    def _not_found(order_id: int) -> MutationResult:
        return MutationResult.failure(
            MutationStatus.NOT_FOUND, f"Order {order_id} not found.", order_id=order_id
        )

    @staticmethod
    def _already_finished(order: Order) -> MutationResult:
        return MutationResult.failure(
            MutationStatus.INVALID_TRANSITION,
            f"Order {order.id} is already {order.status.value}.",
            order_id=order.id,
            current_status=order.status.value,
        )
