"""Shared test fixtures and dummy classes."""

from __future__ import annotations

from typing import Any

from tele_hass_bridge import entity_cache
from tele_hass_bridge.hass import HassRequestError
from tele_hass_bridge.models.hass_state import EntityState


class DummyChat:
    """Dummy Telegram chat for testing."""

    def __init__(self, chat_id: int) -> None:
        self.id = chat_id
        self.type = "private"
        self.sent: list[str] = []

    async def send_message(self, text: str) -> None:
        self.sent.append(text)


class DummyUser:
    """Dummy Telegram user for testing."""

    def __init__(self, user_id: int, username: str | None = None) -> None:
        self.id = user_id
        self.username = username


class DummyMessage:
    """Dummy Telegram message for testing."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.replies: list[str] = []
        self.reply_kwargs: list[dict[str, Any]] = []

    async def reply_text(self, text: str, **kwargs: Any) -> None:
        self.replies.append(text)
        self.reply_kwargs.append(kwargs)


class DummyUpdate:
    """Dummy Telegram update for testing."""

    def __init__(self, chat_id: int, user_id: int, text: str = "") -> None:
        self.effective_chat = DummyChat(chat_id)
        self.effective_user = DummyUser(user_id)
        self.message = DummyMessage(text)
        self.effective_message = self.message


class DummyApplication:
    """Dummy Telegram application for testing."""

    def __init__(self) -> None:
        self.bot_data: dict[str, object] = {}
        self.bot = DummyBot()


class DummyContext:
    """Dummy Telegram context for testing."""

    def __init__(self, args: list[str] | None = None) -> None:
        self.args = args or []
        self.application = DummyApplication()


class DummyBot:
    """Dummy telegram.Bot recording send_message calls."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send_message(self, **kwargs: Any) -> None:
        self.sent.append(kwargs)


class DummySender:
    """MessageSender that records deliveries, optionally failing."""

    def __init__(self, platform: str, fail: bool = False) -> None:
        self.platform = platform
        self.fail = fail
        self.sent: list[tuple[str, str, str | None]] = []

    async def send_message(
        self, channel_id: str, text: str, guild_id: str | None = None
    ) -> None:
        if self.fail:
            raise HassRequestError("send failed", status=403, status_text="Forbidden")
        self.sent.append((channel_id, text, guild_id))


class FakeHassClient:
    """In-memory stand-in for HassClient."""

    def __init__(
        self,
        states: list[EntityState] | None = None,
        error: Exception | None = None,
        state_errors: dict[str, Exception] | None = None,
    ) -> None:
        self.states = states or []
        self.error = error
        self.state_errors = state_errors or {}
        self.get_states_calls = 0
        self.get_state_calls: list[str] = []

    async def get_states(self) -> list[EntityState]:
        self.get_states_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.states)

    async def get_state(self, entity_id: str) -> EntityState:
        self.get_state_calls.append(entity_id)
        if entity_id in self.state_errors:
            raise self.state_errors[entity_id]
        for state in self.states:
            if state.entity_id == entity_id:
                return state
        raise HassRequestError("not found", status=404, status_text="Not Found")

    async def sync_entities(self, cache_file) -> list[str]:
        states = await self.get_states()
        entities = sorted(s.entity_id for s in states)
        entity_cache.write_cache(cache_file, entities)
        return entities


def make_state(
    entity_id: str, state: str, friendly_name: str | None = None, unit: str | None = None
) -> EntityState:
    return EntityState(
        entity_id=entity_id,
        state=state,
        friendly_name=friendly_name,
        unit_of_measurement=unit,
    )
