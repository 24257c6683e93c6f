"""
Shared pytest fixtures for the EMS Tracker test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - ``store``: A ``DomainStore`` persisting to ``in_memory_db`` with a
    5/5/5 starting pool.
  - ``fixed_clock``: Deterministic "now" for order ids.
  - Sample entity factories for use in multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Generator

import pytest

from ems_tracker.db.repositories.document_repo import StorageDocumentRepository
from ems_tracker.db.schema import apply_schema
from ems_tracker.models.inventory import EquipmentCounts, InventoryPool
from ems_tracker.models.order import Order
from ems_tracker.models.rider import DeductionTotals, Rider
from ems_tracker.models.snapshot import StoreSnapshot
from ems_tracker.models.supervisor import Supervisor
from ems_tracker.store.domain_store import DomainStore
from ems_tracker.taxonomy.equipment_taxonomy import OrderStatus, VehicleType

FIXED_NOW = datetime(2024, 9, 15, 12, 0, 0, tzinfo=timezone.utc)


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def repository(in_memory_db) -> StorageDocumentRepository:
    return StorageDocumentRepository(in_memory_db)


@pytest.fixture
def five_pool() -> InventoryPool:
    return InventoryPool(motorcycle_pouches=5, bicycle_pouches=5, tshirts=5)


@pytest.fixture
def store(repository, five_pool) -> DomainStore:
    """A loaded ``DomainStore`` over an empty database and a 5/5/5 pool."""
    s = DomainStore(repository, default_inventory=five_pool)
    s.load()
    return s


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def sample_supervisor() -> Supervisor:
    return Supervisor(
        code="S1",
        name="Omar",
        region="Cairo",
        username="omar",
        password="secret",
        inventory=EquipmentCounts(motorcycle_pouches=1),
    )


@pytest.fixture
def sample_rider() -> Rider:
    return Rider(
        code="R1",
        name="Ali",
        region="Cairo",
        vehicle_type=VehicleType.MOTORCYCLE,
        tshirt_quantity=2,
        equipment_photo="data:image/png;base64,iVBORw0KGgo=",
        deductions=DeductionTotals(advance=100.0, security_check=25.5),
    )


@pytest.fixture
def sample_order() -> Order:
    return Order(
        id=1726401600000,
        supervisor_code="S1",
        motorcycle_pouches=2,
        bicycle_pouches=1,
        tshirts=3,
        status=OrderStatus.PENDING,
    )


@pytest.fixture
def sample_snapshot(sample_supervisor, sample_rider, sample_order) -> StoreSnapshot:
    return StoreSnapshot(
        supervisors=(sample_supervisor,),
        riders=(sample_rider, Rider(code="R2", name="Sara", vehicle_type=VehicleType.BICYCLE)),
        inventory=InventoryPool(motorcycle_pouches=7, bicycle_pouches=0, tshirts=42),
        orders=(
            sample_order,
            sample_order.model_copy(update={"id": 1726401600001, "status": OrderStatus.REJECTED}),
        ),
    )
