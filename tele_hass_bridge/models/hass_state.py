"""Home Assistant entity state snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EntityState:
    entity_id: str
    state: str
    friendly_name: str | None = None
    unit_of_measurement: str | None = None

    @property
    def display_name(self) -> str:
        return self.friendly_name or self.entity_id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityState":
        """Build a snapshot from a `/api/states` object.

        Missing or non-dict attributes are tolerated; the raw `state` value is
        always coerced to a string so rule evaluation compares like with like.
        """
        attributes = data.get("attributes")
        if not isinstance(attributes, dict):
            attributes = {}
        raw_state = data.get("state")
        friendly = attributes.get("friendly_name")
        unit = attributes.get("unit_of_measurement")
        return cls(
            entity_id=str(data.get("entity_id") or ""),
            state="" if raw_state is None else str(raw_state),
            friendly_name=str(friendly) if friendly else None,
            unit_of_measurement=str(unit) if unit else None,
        )
