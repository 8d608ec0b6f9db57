"""Trigger/reply rules: exact-match triggers answered with entity states."""

from __future__ import annotations

import asyncio
import logging

from .hass import ErrorKind, HassClient, classify_error, format_request_error
from .models.alerts import MessageReply, ReplyEntity
from .models.hass_state import EntityState
from .view import format_reply_message

logger = logging.getLogger(__name__)

AUTH_FAILED_TEXT = "Authentication failed: check the access token"
NOT_FOUND_TEXT = "Entity not found"


def find_reply_rule(rules: list[MessageReply], content: str | None) -> MessageReply | None:
    """Return the first enabled rule whose trigger equals the trimmed content."""
    text = (content or "").strip()
    if not text or not rules:
        return None
    for rule in rules:
        if not rule.enabled or not rule.trigger:
            continue
        if rule.trigger.strip() == text:
            return rule
    return None


def _valid_entries(rule: MessageReply) -> list[ReplyEntity]:
    return [e for e in rule.entities if e.key and e.entity]


async def build_reply(client: HassClient, rule: MessageReply) -> str | None:
    """Fetch the rule's entities and render its reply.

    Returns None when the rule binds no usable entities. Request failures are
    turned into a single user-facing message.
    """
    entries = _valid_entries(rule)
    if not entries:
        return None

    entity_ids = list(dict.fromkeys(e.entity for e in entries))
    try:
        fetched = await asyncio.gather(*(client.get_state(eid) for eid in entity_ids))
    except Exception as exc:
        kind = classify_error(exc)
        if kind is ErrorKind.AUTH:
            return AUTH_FAILED_TEXT
        if kind is ErrorKind.NOT_FOUND:
            return NOT_FOUND_TEXT
        logger.warning("Reply rule %r failed: %s", rule.trigger, format_request_error(exc))
        return f"Query failed: {format_request_error(exc)}"

    by_entity: dict[str, EntityState] = dict(zip(entity_ids, fetched))
    states_by_key: dict[str, EntityState] = {}
    for entry in entries:
        state = by_entity.get(entry.entity)
        if state is not None:
            states_by_key[entry.key] = state
    return format_reply_message(rule, states_by_key)
