"""
Supervisor model.

Supervisors request equipment from the central pool on behalf of the riders
in their region. ``username`` and ``password`` are stored as entered and never
checked against anything. ``inventory`` is zeroed on creation and carried
through storage and exports; no reconciliation rule reads it.
"""

from __future__ import annotations

from pydantic import field_validator

from ems_tracker.models.base import StorageModel
from ems_tracker.models.inventory import EquipmentCounts


class Supervisor(StorageModel):
    """A regional supervisor.

    Attributes:
        code: Unique key, e.g. ``"S-001"``.
        name: Display name.
        region: Free-text region label.
        username: Stored login name (not enforced).
        password: Stored password (not enforced).
        inventory: Per-supervisor equipment counts (informational only).
    """

    code: str
    name: str
    region: str = ""
    username: str = ""
    password: str = ""
    inventory: EquipmentCounts = EquipmentCounts()

    @field_validator("code", "name")
    @classmethod
    def required_text(cls, v: str) -> str:
        if not v:
            raise ValueError("Supervisor code and name must not be empty.")
        return v
