"""Plain-text message handler for trigger/reply rules."""

from __future__ import annotations

import logging

from .. import config, replies
from ..hass import client_from_config
from .common import allowed

logger = logging.getLogger(__name__)


async def on_message(update, context) -> None:
    message = getattr(update, "effective_message", None)
    if message is None or not message.text:
        return
    rule = replies.find_reply_rule(config.MESSAGE_REPLIES, message.text)
    if rule is None:
        return
    if not allowed(update):
        logger.debug("Ignoring trigger %r from unauthorized chat", rule.trigger)
        return

    text = await replies.build_reply(client_from_config(), rule)
    if not text:
        return
    await message.reply_text(text)
