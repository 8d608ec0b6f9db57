"""User-facing operations on the hub.

Each function returns the single message shown to the user; request
failures never propagate past this layer.
"""

from __future__ import annotations

import logging

from . import entity_cache, config
from .hass import (
    ErrorKind,
    HassClient,
    classify_error,
    client_from_config,
    format_request_error,
)
from .replies import AUTH_FAILED_TEXT
from .state import BotState
from .view import format_state

logger = logging.getLogger(__name__)


def default_entity() -> str | None:
    return config.HASS_DEFAULT_ENTITIES[0] if config.HASS_DEFAULT_ENTITIES else None


async def query_entity(entity_id: str, client: HassClient | None = None) -> str:
    client = client or client_from_config()
    try:
        state = await client.get_state(entity_id)
    except Exception as exc:
        kind = classify_error(exc)
        if kind is ErrorKind.AUTH:
            return AUTH_FAILED_TEXT
        if kind is ErrorKind.NOT_FOUND:
            return f"Entity not found: {entity_id}"
        logger.warning("Query for %s failed: %s", entity_id, format_request_error(exc))
        return f"Query failed: {format_request_error(exc)}"
    return format_state(state)


async def sync_entities(state: BotState, client: HassClient | None = None) -> str:
    client = client or client_from_config()
    cache_file = entity_cache.cache_path(config.HASS_DATA_DIR)
    try:
        entities = await client.sync_entities(cache_file)
    except Exception as exc:
        if classify_error(exc) is ErrorKind.AUTH:
            return AUTH_FAILED_TEXT
        logger.warning("Entity sync failed: %s", format_request_error(exc))
        return f"Sync failed: {format_request_error(exc)}"
    state.set_known_entities(entities)
    return f"Synced {len(entities)} entities"
