"""
Common base for every persisted EMS Tracker model.

Python attributes are snake_case; storage documents and exports use the
camelCase keys the browser app wrote (``tshirtQuantity``,
``motorcyclePouches`` …). ``alias_generator=to_camel`` maps between the two,
and ``populate_by_name=True`` lets code construct models with either form.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StorageModel(BaseModel):
    """Frozen model with camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-ready dict written to storage and exports."""
        return self.model_dump(by_alias=True, mode="json")
