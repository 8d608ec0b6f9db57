from __future__ import annotations

import logging

from .. import config
from ..commands import COMMANDS, GROUP_ORDER
from .common import allowed, get_state, guard

logger = logging.getLogger(__name__)


def _render_help(known_entities: int = 0) -> str:
    lines: list[str] = [f"Home Assistant bridge for {config.HASS_API_URL}"]
    if known_entities:
        lines.append(f"{known_entities} entities known; /hass without arguments lists them.")
    else:
        lines.append("No entities known yet; run /hass_sync to load them.")
    lines.append("")
    for group in GROUP_ORDER:
        entries = [f"{c.usage} – {c.description}" for c in COMMANDS if c.group == group]
        if entries:
            lines.append(group)
            lines.extend(entries)
            lines.append("")
    return "\n".join(lines).strip()


async def cmd_start(update, context) -> None:
    if not await guard(update, context):
        return
    known = len(get_state(context.application).known_entities())
    await update.message.reply_text(_render_help(known))


async def cmd_help(update, context) -> None:
    await cmd_start(update, context)


async def cmd_whoami(update, context) -> None:
    """Show the ids to put in ALLOWED_CHAT_IDS and notify targets."""
    chat = update.effective_chat
    user = update.effective_user
    username = f"@{user.username}" if user and user.username else "(no username)"
    lines = [
        f"chat_id: {chat.id}",
        f"chat_type: {chat.type}",
        f"user: {username}",
        f"authorized: {'yes' if allowed(update) else 'no'}",
    ]
    thread_id = getattr(update.effective_message, "message_thread_id", None)
    if thread_id:
        lines.append(f"topic (guild_id): {thread_id}")
    await update.message.reply_text("\n".join(lines))
