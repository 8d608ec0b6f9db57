"""Entity query and sync command handlers."""

from __future__ import annotations

import logging

from telegram.constants import ParseMode

from .. import services, view
from .callbacks import build_entity_keyboard
from .common import get_state, guard, reply_usage_with_suggestions

logger = logging.getLogger(__name__)


async def cmd_hass(update, context) -> None:
    """Query one entity, falling back to the first default entity."""
    if not await guard(update, context):
        return
    state = get_state(context.application)

    args = [a.strip() for a in (context.args or []) if a.strip()]
    target = args[0] if args else services.default_entity()
    if not target:
        await reply_usage_with_suggestions(
            update,
            "/hass &lt;entity_id&gt; (or set HASS_DEFAULT_ENTITIES)",
            state.suggest(),
            reply_markup=build_entity_keyboard(state.known_entities()),
        )
        return

    text = await services.query_entity(target)
    await update.message.reply_text(text)
    if text.startswith("Entity not found"):
        names = state.suggest(target)
        keyboard = build_entity_keyboard(names)
        if keyboard is not None:
            await update.message.reply_text("Did you mean:", reply_markup=keyboard)


async def cmd_sync(update, context) -> None:
    if not await guard(update, context):
        return
    state = get_state(context.application)
    await update.message.reply_text(await services.sync_entities(state))


async def cmd_status(update, context) -> None:
    """Show how many entities are known and when they were synced."""
    if not await guard(update, context):
        return
    state = get_state(context.application)
    msg = view.render_sync_status(state.known_entities(), state.entities.updated_at)
    await update.message.reply_text(msg, parse_mode=ParseMode.HTML)
