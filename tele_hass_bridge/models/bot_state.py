"""Bot runtime state (known entities, background tasks)."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from .cache import EntityCacheEntry

logger = logging.getLogger(__name__)


def _normalize(items: list[str]) -> list[str]:
    """Trim, drop empty values and de-duplicate while keeping sort order."""
    return sorted({i.strip() for i in items if i and i.strip()})


@dataclass
class BotState:
    """Runtime state shared by handlers and background tasks.

    The poller's last-state map is deliberately not stored here; only the
    poller owns it.
    """

    entities: EntityCacheEntry = field(
        default_factory=lambda: EntityCacheEntry(updated_at=None, items=[])
    )
    tasks: dict[str, object] = field(default_factory=dict)

    def set_known_entities(self, items: list[str], synced: bool = True) -> list[str]:
        names = _normalize(items)
        updated_at = time.time() if synced else self.entities.updated_at
        self.entities = EntityCacheEntry(updated_at=updated_at, items=names)
        return list(names)

    def known_entities(self) -> list[str]:
        return list(self.entities.items)

    def suggest(self, query: str | None = None, limit: int = 5) -> list[str]:
        """Get entity id suggestions based on a query string."""
        items = self.known_entities()
        if not items:
            return []
        q = (query or "").strip().lower()
        if q:
            starts = [x for x in items if x.lower().startswith(q)]
            contains = [x for x in items if q in x.lower() and x not in starts]
            ranked = starts + contains
        else:
            ranked = items
        return ranked[: max(0, limit)]


BOT_STATE_KEY = "state"
