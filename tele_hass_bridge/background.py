"""Background jobs (started once per Application)."""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from telegram.ext import Application

from . import config, entity_cache
from .alerting import describe_rule, evaluate_rule, rule_entities
from .hass import (
    ErrorKind,
    HassClient,
    HassRequestError,
    classify_error,
    client_from_config,
    format_request_error,
)
from .models.alerts import AlertRule, NotifyTarget
from .notify import MessageSender, TelegramSender, dispatch
from .state import BOT_STATE_KEY, BotState
from .view import format_rule_message

logger = logging.getLogger(__name__)

_TASK_ENTITY_CACHE = "entity_cache"
_TASK_STARTUP_SYNC = "startup_sync"
_TASK_ALERT_POLLER = "alert_poller"


class AlertPoller:
    """Polls the hub on a fixed interval and fires alert rules.

    Owns the last-state map; nothing else reads or writes it. Ticks run
    sequentially inside `run`, so a slow hub delays the next tick instead of
    overlapping it.
    """

    def __init__(
        self,
        client: HassClient,
        senders: Iterable[MessageSender],
        rules: list[AlertRule],
        targets: list[NotifyTarget],
        interval_s: float,
    ) -> None:
        self.client = client
        self.senders = list(senders)
        self.rules = rules
        self.targets = targets
        self.interval_s = interval_s
        self._last_states: dict[str, str] = {}

    @property
    def last_states(self) -> dict[str, str]:
        return dict(self._last_states)

    async def tick(self) -> int:
        """Run one fetch/evaluate/notify pass. Returns the number of rules fired."""
        if not rule_entities(self.rules):
            return 0

        try:
            states = await self.client.get_states()
        except HassRequestError as exc:
            logger.warning("Polling failed: %s", format_request_error(exc))
            return 0
        except Exception:
            logger.exception("Polling failed")
            return 0

        snapshot = {s.entity_id: s for s in states}
        logger.info("Poll complete, received %d entities", len(states))

        # Every rule compares against the previous tick, even when several
        # rules watch the same entity.
        previous = dict(self._last_states)
        fired = 0
        for rule in self.rules:
            if not rule.enabled or not rule.entity:
                continue
            state = snapshot.get(rule.entity)
            if state is None:
                continue
            prev_state = previous.get(rule.entity)
            if evaluate_rule(rule, state, prev_state):
                fired += 1
                logger.info("Rule fired: %s", describe_rule(rule))
                await dispatch(
                    self.senders,
                    self.targets,
                    format_rule_message(rule, state, prev_state),
                )
            self._last_states[rule.entity] = state.state
        return fired

    async def run(self) -> None:
        logger.info(
            "Starting alert poller (interval=%ss, rules=%d)",
            self.interval_s,
            len(self.rules),
        )
        while True:
            start = time.monotonic()
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Alert poller error")
            elapsed = time.monotonic() - start
            await asyncio.sleep(max(0.0, self.interval_s - elapsed))


async def load_cached_entities(state: BotState, cache_file: str | Path) -> list[str]:
    cached = await entity_cache.read_cache_async(cache_file)
    # A startup sync that finished first has fresher data.
    if state.entities.updated_at is None:
        state.set_known_entities(cached, synced=False)
    logger.info("Loaded %d cached entities", len(cached))
    return cached


async def startup_sync(
    state: BotState, client: HassClient, cache_file: str | Path
) -> list[str]:
    try:
        entities = await client.sync_entities(cache_file)
    except Exception as exc:
        if classify_error(exc) is ErrorKind.AUTH:
            logger.warning("Startup sync failed: authentication failed, check HASS_ACCESS_TOKEN")
        else:
            logger.warning("Startup sync failed: %s", format_request_error(exc))
        return []
    state.set_known_entities(entities)
    if entities:
        logger.info("Startup sync succeeded: %d entities", len(entities))
    return entities


def _get_state(app: Application) -> BotState:
    return app.bot_data.setdefault(BOT_STATE_KEY, BotState())


def _start_once(
    state: BotState,
    name: str,
    factory: Callable[[], Awaitable[object]],
    restart: bool = False,
) -> None:
    task = state.tasks.get(name)
    if isinstance(task, asyncio.Task) and (not task.done() or not restart):
        return
    state.tasks[name] = asyncio.create_task(factory())


def ensure_started(app: Application) -> None:
    state = _get_state(app)
    client = client_from_config()
    cache_file = entity_cache.cache_path(config.HASS_DATA_DIR)

    _start_once(state, _TASK_ENTITY_CACHE, lambda: load_cached_entities(state, cache_file))
    if config.HASS_SYNC_ON_START:
        _start_once(
            state, _TASK_STARTUP_SYNC, lambda: startup_sync(state, client, cache_file)
        )
    if config.HASS_POLLING_ENABLED:
        poller = AlertPoller(
            client,
            [TelegramSender(app.bot)],
            config.ALERT_RULES,
            config.NOTIFY_TARGETS,
            config.HASS_POLLING_INTERVAL_S,
        )
        _start_once(state, _TASK_ALERT_POLLER, poller.run, restart=True)
