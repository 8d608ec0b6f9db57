"""View layer: message templates and Telegram text formatting."""

from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Callable, Mapping

from .alerting import comparison_text
from .models.alerts import AlertRule, MessageReply, Operator
from .models.hass_state import EntityState

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")

_ALERT_FALLBACK = "HASS alert: {name} current state is {state}"
_CHANGED_FALLBACK = "HASS state change: {name} from {prev} to {state}"
_REPLY_FALLBACK = "{name}: {state}"


def bold(text: str) -> str:
    return f"<b>{html.escape(str(text))}</b>"


def render_placeholders(template: str, resolve: Callable[[str], str | None]) -> str:
    """Replace every `{key}` in template; unknown keys render as ''.

    Substitution is a single pass, so braces inside resolved values are kept.
    """

    def _sub(match: re.Match) -> str:
        value = resolve(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER_RE.sub(_sub, template or "")


def format_state(state: EntityState) -> str:
    unit = state.unit_of_measurement or ""
    value = f"{state.state} {unit}" if unit else state.state
    return f"{state.display_name}: {value}"


def format_rule_message(
    rule: AlertRule, state: EntityState, prev_state: str | None = None
) -> str:
    context = {
        "name": state.display_name,
        "entity": state.entity_id,
        "state": state.state,
        "prev": prev_state or "",
        "value": comparison_text(rule.value),
    }
    template = (rule.message or "").strip()
    if not template:
        if rule.operator is Operator.CHANGED:
            template = _CHANGED_FALLBACK
            context["prev"] = prev_state if prev_state is not None else "-"
        else:
            template = _ALERT_FALLBACK
    return render_placeholders(template, context.get)


def format_reply_message(
    rule: MessageReply, states: Mapping[str, EntityState]
) -> str:
    """Render a reply rule.

    `{key}` resolves to the state value of the entity bound to that key.
    `{name}`, `{entity}` and `{state}` fall back to the first bound entity
    unless a key of the same name shadows them.
    """
    primary = next(iter(states.values()), None)
    template = (rule.reply or "").strip()
    if not template:
        if primary is None:
            return ""
        fallback = {"name": primary.display_name, "state": primary.state}
        return render_placeholders(_REPLY_FALLBACK, fallback.get)

    def _resolve(key: str) -> str | None:
        bound = states.get(key)
        if bound is not None:
            return bound.state
        if primary is None:
            return None
        if key == "name":
            return primary.display_name
        if key == "entity":
            return primary.entity_id
        if key == "state":
            return primary.state
        return None

    return render_placeholders(template, _resolve)


def render_sync_status(entities: list[str], updated_at: float | None) -> str:
    if not entities:
        return "No entities cached. Run /hass_sync first."
    lines = [f"{bold('Known entities:')} {len(entities)}"]
    if updated_at:
        synced = datetime.fromtimestamp(updated_at).strftime("%Y-%m-%d %H:%M:%S")
        lines.append(f"{bold('Last sync:')} {html.escape(synced)}")
    else:
        lines.append(f"{bold('Last sync:')} loaded from cache")
    return "\n".join(lines)
