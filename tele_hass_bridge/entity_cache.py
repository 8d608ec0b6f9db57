"""Flat JSON cache of known entity ids."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

CACHE_FILE = os.path.join("data", "hass_cache.json")


def cache_path(base_dir: str | Path | None = None) -> Path:
    return Path(base_dir or os.getcwd()).resolve() / CACHE_FILE


def read_cache(path: str | Path) -> list[str]:
    """Return cached entity ids, or an empty list on any failure."""
    try:
        parsed = json.loads(Path(path).read_text(encoding="utf-8"))
    except Exception as e:
        logger.debug("Entity cache unavailable at %s: %s", path, e)
        return []
    if not isinstance(parsed, list):
        return []
    return [v for v in parsed if isinstance(v, str)]


def write_cache(path: str | Path, entities: list[str]) -> None:
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(entities, indent=2), encoding="utf-8")


async def read_cache_async(path: str | Path) -> list[str]:
    return await asyncio.to_thread(read_cache, path)


async def write_cache_async(path: str | Path, entities: list[str]) -> None:
    await asyncio.to_thread(write_cache, path, entities)
