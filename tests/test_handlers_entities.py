import time

import pytest

from tele_hass_bridge import config, services
from tele_hass_bridge.handlers import callbacks, common, entities, meta
from tele_hass_bridge.handlers.common import get_state

from conftest import DummyContext, DummyUpdate, FakeHassClient, make_state


@pytest.mark.asyncio
async def test_unauthorized_chat_is_rejected(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {1})
    update = DummyUpdate(chat_id=2, user_id=2)

    await entities.cmd_hass(update, DummyContext(["sensor.temp"]))

    assert update.effective_chat.sent == ["⛔ Not authorized"]
    assert update.message.replies == []


@pytest.mark.asyncio
async def test_cmd_hass_queries_given_entity(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    queried: list[str] = []

    async def fake_query(entity_id: str, client=None) -> str:
        queried.append(entity_id)
        return "Kitchen: 21.5 °C"

    monkeypatch.setattr(services, "query_entity", fake_query)
    update = DummyUpdate(chat_id=123, user_id=123)

    await entities.cmd_hass(update, DummyContext(["sensor.kitchen"]))

    assert queried == ["sensor.kitchen"]
    assert update.message.replies == ["Kitchen: 21.5 °C"]


@pytest.mark.asyncio
async def test_cmd_hass_defaults_to_first_default_entity(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    monkeypatch.setattr(config, "HASS_DEFAULT_ENTITIES", ["sensor.a", "sensor.b"])
    queried: list[str] = []

    async def fake_query(entity_id: str, client=None) -> str:
        queried.append(entity_id)
        return "ok"

    monkeypatch.setattr(services, "query_entity", fake_query)

    await entities.cmd_hass(DummyUpdate(123, 123), DummyContext())

    assert queried == ["sensor.a"]


@pytest.mark.asyncio
async def test_cmd_hass_without_target_shows_usage_and_selector(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    monkeypatch.setattr(config, "HASS_DEFAULT_ENTITIES", [])
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    get_state(context.application).set_known_entities(["sensor.b", "light.a"])

    await entities.cmd_hass(update, context)

    assert "Usage:" in update.message.replies[0]
    assert "light.a" in update.message.replies[0]
    keyboard = update.message.reply_kwargs[0]["reply_markup"]
    labels = [button.text for row in keyboard.inline_keyboard for button in row]
    assert labels == ["light.a", "sensor.b"]


@pytest.mark.asyncio
async def test_cmd_hass_not_found_offers_suggestions(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext(["sensor.tem"])
    get_state(context.application).set_known_entities(["sensor.temp", "light.a"])

    async def fake_query(entity_id: str, client=None) -> str:
        return f"Entity not found: {entity_id}"

    monkeypatch.setattr(services, "query_entity", fake_query)

    await entities.cmd_hass(update, context)

    assert update.message.replies == ["Entity not found: sensor.tem", "Did you mean:"]


@pytest.mark.asyncio
async def test_query_entity_maps_errors() -> None:
    client = FakeHassClient([make_state("sensor.t", "5", unit="°C")])
    assert await services.query_entity("sensor.t", client) == "sensor.t: 5 °C"
    assert await services.query_entity("sensor.x", client) == "Entity not found: sensor.x"


@pytest.mark.asyncio
async def test_cmd_sync_updates_known_entities(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    monkeypatch.setattr(config, "HASS_DATA_DIR", str(tmp_path))
    client = FakeHassClient([make_state("sensor.b", "1"), make_state("light.a", "on")])
    monkeypatch.setattr(services, "client_from_config", lambda: client)
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    await entities.cmd_sync(update, context)

    assert update.message.replies == ["Synced 2 entities"]
    assert get_state(context.application).known_entities() == ["light.a", "sensor.b"]
    assert (tmp_path / "data" / "hass_cache.json").exists()


@pytest.mark.asyncio
async def test_cmd_status_reports_sync_state(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    await entities.cmd_status(update, context)
    get_state(context.application).set_known_entities(["a.b"])
    await entities.cmd_status(update, context)

    assert "No entities cached" in update.message.replies[0]
    assert "Known entities:" in update.message.replies[1]
    assert "Last sync:" in update.message.replies[1]


def test_entity_keyboard_skips_oversized_callback_data() -> None:
    long_id = "sensor." + "x" * 80
    keyboard = callbacks.build_entity_keyboard(["a.b", long_id, "c.d", "e.f"])
    rows = keyboard.inline_keyboard
    assert [[b.text for b in row] for row in rows] == [["a.b", "c.d"], ["e.f"]]
    assert rows[0][0].callback_data == "hass:state:a.b"
    assert callbacks.build_entity_keyboard([]) is None


@pytest.mark.asyncio
async def test_rate_limit_blocks_rapid_commands(monkeypatch) -> None:
    monkeypatch.setattr(config, "RATE_LIMIT_S", 60.0)
    monkeypatch.setattr(common, "_last_command_ts", time.monotonic())
    calls: list[str] = []

    async def handler(update, context) -> None:
        calls.append("called")

    wrapped = common.rate_limit(handler)
    update = DummyUpdate(chat_id=1, user_id=1)
    await wrapped(update, DummyContext())

    assert calls == []
    assert update.message.replies[0].startswith("⏱ Rate limit")


@pytest.mark.asyncio
async def test_help_lists_registered_commands(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    update = DummyUpdate(chat_id=123, user_id=123)

    await meta.cmd_help(update, DummyContext())

    text = update.message.replies[0]
    assert text.startswith(f"Home Assistant bridge for {config.HASS_API_URL}")
    assert "run /hass_sync" in text
    assert "/hass [entity_id]" in text
    assert "/hass_sync" in text
    assert "/hass_status" in text


@pytest.mark.asyncio
async def test_help_counts_known_entities(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    common.get_state(context.application).set_known_entities(["light.a", "light.b"])

    await meta.cmd_start(update, context)

    assert "2 entities known" in update.message.replies[0]


@pytest.mark.asyncio
async def test_whoami_reports_authorization(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})

    ok = DummyUpdate(chat_id=123, user_id=7)
    await meta.cmd_whoami(ok, DummyContext())
    assert ok.message.replies[0].splitlines() == [
        "chat_id: 123",
        "chat_type: private",
        "user: (no username)",
        "authorized: yes",
    ]

    other = DummyUpdate(chat_id=-100, user_id=7)
    await meta.cmd_whoami(other, DummyContext())
    assert "authorized: no" in other.message.replies[0]
