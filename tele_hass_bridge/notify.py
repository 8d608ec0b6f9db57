"""Fan-out delivery of alert messages to chat targets."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol

from .hass import format_request_error
from .models.alerts import NotifyTarget

logger = logging.getLogger(__name__)

TELEGRAM_PLATFORM = "telegram"


class MessageSender(Protocol):
    """A live bot connection able to post text to a channel."""

    platform: str

    async def send_message(
        self, channel_id: str, text: str, guild_id: str | None = None
    ) -> None: ...


def _as_chat_id(raw: str) -> int | str:
    text = raw.strip()
    return int(text) if text.lstrip("-").isdigit() else text


class TelegramSender:
    """Adapter from a `telegram.Bot` to the MessageSender protocol.

    `channel_id` is a chat id or `@channel` username. A numeric `guild_id`
    selects a forum topic inside that chat.
    """

    platform = TELEGRAM_PLATFORM

    def __init__(self, bot) -> None:
        self.bot = bot

    async def send_message(
        self, channel_id: str, text: str, guild_id: str | None = None
    ) -> None:
        kwargs: dict[str, object] = {}
        if guild_id and guild_id.strip().isdigit():
            kwargs["message_thread_id"] = int(guild_id.strip())
        await self.bot.send_message(chat_id=_as_chat_id(channel_id), text=text, **kwargs)


async def _deliver(sender: MessageSender, target: NotifyTarget, message: str) -> None:
    try:
        await sender.send_message(target.channel_id, message, target.guild_id)
    except Exception as exc:
        logger.warning(
            "Send failed: %s:%s %s",
            target.platform,
            target.channel_id,
            format_request_error(exc),
        )


async def _deliver_target(
    senders: list[MessageSender], target: NotifyTarget, message: str
) -> None:
    matching = [s for s in senders if getattr(s, "platform", None) == target.platform]
    if not matching:
        logger.warning("No bot found for platform %s", target.platform)
        return
    await asyncio.gather(*(_deliver(s, target, message) for s in matching))


async def dispatch(
    senders: Iterable[MessageSender],
    targets: Iterable[NotifyTarget],
    message: str,
) -> None:
    """Send message to every target through every bot on its platform.

    Best-effort: failures are logged per bot and target, never raised.
    """
    deliverable = [t for t in targets if t.platform and t.channel_id]
    if not deliverable:
        return
    connections = list(senders)
    results = await asyncio.gather(
        *(_deliver_target(connections, t, message) for t in deliverable),
        return_exceptions=True,
    )
    for target, result in zip(deliverable, results):
        if isinstance(result, Exception):
            logger.error(
                "Delivery to %s:%s crashed: %s",
                target.platform,
                target.channel_id,
                result,
            )
