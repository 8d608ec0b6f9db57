"""Configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Set


@dataclass
class Settings:
    """Configuration settings for tele_hass_bridge."""

    BOT_TOKEN: str | None
    ALLOWED_CHAT_IDS: Set[int]
    RATE_LIMIT_S: float
    HASS_API_URL: str
    HASS_ACCESS_TOKEN: str | None
    HASS_DEFAULT_ENTITIES: List[str]
    HASS_SYNC_ON_START: bool
    HASS_REQUEST_TIMEOUT_S: float
    HASS_POLLING_ENABLED: bool
    HASS_POLLING_INTERVAL_S: float
    HASS_RULES_FILE: str
    HASS_DATA_DIR: str
