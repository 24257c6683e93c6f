"""
Validated input forms.

Raw input (CLI arguments, CSV rows, imported dicts) always passes through one
of these forms before it becomes an entity. A form either validates into a
well-typed value or raises ``pydantic.ValidationError``; there is no
half-coerced record in between.

Coercion rules:
  - Text fields are whitespace-stripped; ``None`` becomes ``""``.
  - ``SupervisorForm`` / ``RiderForm`` require a non-empty ``code`` and ``name``.
  - ``RiderForm.vehicle_type``: blank → ``motorcycle``; otherwise must be a
    ``VehicleType`` value (case-insensitive).
  - ``RiderForm.tshirt_quantity``: blank or unparseable → ``1``; a parsed
    value below 1 is rejected.
  - ``OrderForm`` quantities: blank → ``0``; unparseable or negative values
    are rejected, and so is an order requesting nothing at all.
  - ``DeductionForm.amount``: must parse to a finite number.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ems_tracker.models.order import Order
from ems_tracker.models.rider import Rider
from ems_tracker.models.supervisor import Supervisor
from ems_tracker.taxonomy.equipment_taxonomy import DeductionType, VehicleType

_FORM_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


def parse_whole_number(value: Any) -> Optional[int]:
    """Return ``value`` as an int, or ``None`` if blank or not a whole number.

    Accepts ints, integral floats, and numeric strings such as ``"3"`` or
    ``" 3.0 "``. Booleans, fractions, NaN, and infinities yield ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)


def _blank_to_empty(v: Any) -> Any:
    return "" if v is None else v


class SupervisorForm(BaseModel):
    """Input for ``DomainStore.add_supervisor``."""

    model_config = _FORM_CONFIG

    code: str
    name: str
    region: str = ""
    username: str = ""
    password: str = ""

    @field_validator("code", "name", "region", "username", "password", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return _blank_to_empty(v)

    @field_validator("code", "name")
    @classmethod
    def required(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_supervisor(self) -> Supervisor:
        """Build a ``Supervisor`` with zeroed inventory."""
        return Supervisor(
            code=self.code,
            name=self.name,
            region=self.region,
            username=self.username,
            password=self.password,
        )


class RiderForm(BaseModel):
    """Input for ``DomainStore.add_rider`` and one bulk-import row."""

    model_config = _FORM_CONFIG

    code: str
    name: str
    region: str = ""
    vehicle_type: VehicleType = VehicleType.MOTORCYCLE
    tshirt_quantity: int = 1

    @field_validator("code", "name", "region", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return _blank_to_empty(v)

    @field_validator("code", "name")
    @classmethod
    def required(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def default_vehicle(cls, v: Any) -> Any:
        if v is None:
            return VehicleType.MOTORCYCLE
        if isinstance(v, str):
            text = v.strip().lower()
            return text or VehicleType.MOTORCYCLE
        return v

    @field_validator("tshirt_quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> int:
        parsed = parse_whole_number(v)
        return 1 if parsed is None else parsed

    @field_validator("tshirt_quantity")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}")
        return v

    def to_rider(self) -> Rider:
        """Build a ``Rider`` with zero deductions and no photo."""
        return Rider(
            code=self.code,
            name=self.name,
            region=self.region,
            vehicle_type=self.vehicle_type,
            tshirt_quantity=self.tshirt_quantity,
        )


class OrderForm(BaseModel):
    """Input for ``OrderReconciler.request_order``."""

    model_config = _FORM_CONFIG

    supervisor_code: str = ""
    motorcycle_pouches: int = 0
    bicycle_pouches: int = 0
    tshirts: int = 0

    @field_validator("supervisor_code", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return _blank_to_empty(v)

    @field_validator("motorcycle_pouches", "bicycle_pouches", "tshirts", mode="before")
    @classmethod
    def coerce_count(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        parsed = parse_whole_number(v)
        if parsed is None:
            raise ValueError(f"not a whole number: {v!r}")
        return parsed

    @field_validator("motorcycle_pouches", "bicycle_pouches", "tshirts")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"must be >= 0, got {v}")
        return v

    @model_validator(mode="after")
    def something_requested(self) -> "OrderForm":
        if self.motorcycle_pouches + self.bicycle_pouches + self.tshirts == 0:
            raise ValueError("an order must request at least one item")
        return self

    def to_order(self, order_id: int) -> Order:
        """Build a pending ``Order`` with id ``order_id``."""
        return Order(
            id=order_id,
            supervisor_code=self.supervisor_code,
            motorcycle_pouches=self.motorcycle_pouches,
            bicycle_pouches=self.bicycle_pouches,
            tshirts=self.tshirts,
        )


class DeductionForm(BaseModel):
    """Input for ``DeductionLedger.add_deduction``.

    ``reason`` is free text for the audit log; it is not stored on the rider.
    """

    model_config = _FORM_CONFIG

    type: DeductionType = DeductionType.ADVANCE
    amount: float
    reason: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        if isinstance(v, bool):
            raise ValueError("amount must be a number")
        if isinstance(v, (int, float)):
            number = float(v)
        else:
            text = "" if v is None else str(v).strip()
            if not text:
                raise ValueError("amount must not be empty")
            try:
                number = float(text)
            except ValueError:
                raise ValueError(f"amount is not a number: {v!r}")
        if not math.isfinite(number):
            raise ValueError(f"amount must be finite, got {v!r}")
        return number

    @field_validator("reason", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return _blank_to_empty(v)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a ``ValidationError`` into one ``field: message; ...`` line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "form"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)
