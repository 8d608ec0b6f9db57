"""Cache-related dataclasses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EntityCacheEntry:
    """Known entity ids with the time they were last synced."""

    updated_at: float | None
    items: list[str]
