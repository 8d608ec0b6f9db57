"""Entity selector keyboard and its callback query handler."""

from __future__ import annotations

import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from .. import services
from .common import allowed

logger = logging.getLogger(__name__)

STATE_PREFIX = "hass:state:"
ENTITY_KEYBOARD_LIMIT = 20
_BUTTONS_PER_ROW = 2
_CALLBACK_DATA_MAX_BYTES = 64


def build_entity_keyboard(
    entities: list[str], limit: int = ENTITY_KEYBOARD_LIMIT
) -> InlineKeyboardMarkup | None:
    """Build a selector with one button per known entity id.

    Ids too long for Telegram's callback payload are left out.
    """
    buttons: list[InlineKeyboardButton] = []
    for entity_id in entities:
        data = f"{STATE_PREFIX}{entity_id}"
        if len(data.encode("utf-8")) > _CALLBACK_DATA_MAX_BYTES:
            continue
        buttons.append(InlineKeyboardButton(entity_id, callback_data=data))
        if len(buttons) >= limit:
            break
    if not buttons:
        return None
    rows = [
        buttons[i : i + _BUTTONS_PER_ROW]
        for i in range(0, len(buttons), _BUTTONS_PER_ROW)
    ]
    return InlineKeyboardMarkup(rows)


async def handle_callback_query(update, context) -> None:
    query = update.callback_query
    if query is None:
        return
    if not allowed(update):
        await query.answer("⛔ Not authorized", show_alert=True)
        return

    data = query.data or ""
    if not data.startswith(STATE_PREFIX):
        await query.answer()
        return

    entity_id = data[len(STATE_PREFIX) :]
    await query.answer()
    text = await services.query_entity(entity_id)
    if query.message is not None:
        await query.message.reply_text(text)
