"""Central configuration for tele_hass_bridge."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Set

from .models.alerts import AlertRule, MessageReply, NotifyTarget
from .models.settings import Settings

logger = logging.getLogger(__name__)

_MIN_REQUEST_TIMEOUT_S = 1.0
_MIN_POLLING_INTERVAL_S = 10.0


def _split_ints(s: str) -> Set[int]:
    """Parse comma-separated string into a set of integers.

    Args:
        s: Comma-separated string of integers (e.g., "123,456,789")

    Returns:
        Set of parsed integers. Invalid entries are silently skipped.
        Negative ids (Telegram groups) are accepted.

    Example:
        >>> _split_ints("123,-456,invalid,789")
        {123, -456, 789}
    """
    out = set()
    for part in (s or "").split(","):
        p = part.strip()
        if p.lstrip("-").isdigit():
            out.add(int(p))
    return out


def _split_list(s: str) -> List[str]:
    """Parse comma-separated string into a list of non-empty entries.

    Example:
        >>> _split_list("sensor.temp, light.kitchen,")
        ['sensor.temp', 'light.kitchen']
    """
    return [p.strip() for p in (s or "").split(",") if p.strip()]


def _parse_bool(raw: str | None) -> bool:
    return (raw or "false").strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: float, minimum: float) -> float:
    try:
        value = float(os.environ.get(name, "") or default)
    except Exception:
        value = default
    return max(minimum, value)


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Returns:
        Settings object with all configuration values.

    Note:
        Invalid numeric values fall back to sensible defaults, and the
        request timeout and polling interval are clamped to their minimums.
        Boolean values accept: 1/true/yes/on (case-insensitive) as True.
    """
    token = os.environ.get("BOT_TOKEN") or None
    allowed = _split_ints(os.environ.get("ALLOWED_CHAT_IDS", ""))
    try:
        rate_limit = float(os.environ.get("RATE_LIMIT_S", "1.0") or "1.0")
    except Exception:
        rate_limit = 1.0

    # Home Assistant
    api_url = (os.environ.get("HASS_API_URL") or "http://homeassistant:8123").rstrip("/")
    access_token = os.environ.get("HASS_ACCESS_TOKEN") or None
    default_entities = _split_list(os.environ.get("HASS_DEFAULT_ENTITIES", ""))
    sync_on_start = _parse_bool(os.environ.get("HASS_SYNC_ON_START"))
    timeout_s = _read_float("HASS_REQUEST_TIMEOUT_S", 10.0, _MIN_REQUEST_TIMEOUT_S)
    polling_enabled = _parse_bool(os.environ.get("HASS_POLLING_ENABLED"))
    interval_s = _read_float("HASS_POLLING_INTERVAL_S", 60.0, _MIN_POLLING_INTERVAL_S)
    rules_file = os.environ.get("HASS_RULES_FILE") or os.path.join(
        "data", "hass_rules.json"
    )
    data_dir = os.environ.get("HASS_DATA_DIR") or "."

    return Settings(
        BOT_TOKEN=token,
        ALLOWED_CHAT_IDS=allowed,
        RATE_LIMIT_S=rate_limit,
        HASS_API_URL=api_url,
        HASS_ACCESS_TOKEN=access_token,
        HASS_DEFAULT_ENTITIES=default_entities,
        HASS_SYNC_ON_START=sync_on_start,
        HASS_REQUEST_TIMEOUT_S=timeout_s,
        HASS_POLLING_ENABLED=polling_enabled,
        HASS_POLLING_INTERVAL_S=interval_s,
        HASS_RULES_FILE=rules_file,
        HASS_DATA_DIR=data_dir,
    )


def _parse_items(raw: Any, parser, label: str) -> list:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("%s must be a list, ignoring", label)
        return []
    out = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("Skipping %s[%d]: expected an object", label, idx)
            continue
        out.append(parser(item))
    return out


def load_rules(
    path: str | Path,
) -> tuple[list[AlertRule], list[NotifyTarget], list[MessageReply]]:
    """Load alert rules, notify targets and reply rules from a JSON file.

    The file holds one object with `alert_rules`, `notify_channels` and
    `message_replies` lists. A missing or unreadable file yields empty lists.
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.info("Rules file %s not found; no rules configured", file_path)
        return [], [], []
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except Exception:
        logger.exception("Failed to read rules file %s", file_path)
        return [], [], []
    if not isinstance(data, dict):
        logger.warning("Rules file %s must contain a JSON object", file_path)
        return [], [], []

    alert_rules = _parse_items(data.get("alert_rules"), AlertRule.from_dict, "alert_rules")
    targets = _parse_items(
        data.get("notify_channels"), NotifyTarget.from_dict, "notify_channels"
    )
    replies = _parse_items(
        data.get("message_replies"), MessageReply.from_dict, "message_replies"
    )
    logger.info(
        "Loaded %d alert rule(s), %d notify target(s), %d reply rule(s)",
        len(alert_rules),
        len(targets),
        len(replies),
    )
    return alert_rules, targets, replies


settings = _read_settings()


def validate_settings() -> None:
    """Validate critical configuration and log warnings for issues."""
    if settings.BOT_TOKEN is None:
        logger.error("BOT_TOKEN environment variable is not set")
    if not settings.ALLOWED_CHAT_IDS:
        logger.warning(
            "ALLOWED_CHAT_IDS is empty; guarded commands will be unauthorized."
        )
    if settings.HASS_ACCESS_TOKEN is None:
        logger.warning("HASS_ACCESS_TOKEN is not set; hub requests will fail with 401.")


# Exported constants
TOKEN: str | None = settings.BOT_TOKEN
ALLOWED: set[int] = settings.ALLOWED_CHAT_IDS
RATE_LIMIT_S: float = settings.RATE_LIMIT_S
HASS_API_URL: str = settings.HASS_API_URL
HASS_ACCESS_TOKEN: str | None = settings.HASS_ACCESS_TOKEN
HASS_DEFAULT_ENTITIES: list[str] = settings.HASS_DEFAULT_ENTITIES
HASS_SYNC_ON_START: bool = settings.HASS_SYNC_ON_START
HASS_REQUEST_TIMEOUT_S: float = settings.HASS_REQUEST_TIMEOUT_S
HASS_POLLING_ENABLED: bool = settings.HASS_POLLING_ENABLED
HASS_POLLING_INTERVAL_S: float = settings.HASS_POLLING_INTERVAL_S
HASS_DATA_DIR: str = settings.HASS_DATA_DIR

ALERT_RULES, NOTIFY_TARGETS, MESSAGE_REPLIES = load_rules(settings.HASS_RULES_FILE)

validate_settings()
