"""Command registry (single source of truth for help + wiring)."""

from __future__ import annotations

from .models.command_spec import CommandSpec, Group


_INFO_COMMANDS = (
    CommandSpec("start", "Info", "/start", "show help", "cmd_start"),
    CommandSpec("help", "Info", "/help", "this menu", "cmd_help"),
    CommandSpec("whoami", "Info", "/whoami", "show chat and user info", "cmd_whoami"),
)

_HASS_COMMANDS = (
    CommandSpec(
        "hass",
        "Home Assistant",
        "/hass [entity_id]",
        "query an entity state (defaults to the first default entity)",
        "cmd_hass",
    ),
    CommandSpec(
        "hass_sync",
        "Home Assistant",
        "/hass_sync",
        "sync the known entity list from Home Assistant",
        "cmd_hass_sync",
        aliases=("hasssync",),
    ),
    CommandSpec(
        "hass_status",
        "Home Assistant",
        "/hass_status",
        "show entity sync status",
        "cmd_hass_status",
        aliases=("hassstatus",),
    ),
)

COMMANDS: tuple[CommandSpec, ...] = _HASS_COMMANDS + _INFO_COMMANDS

GROUP_ORDER: tuple[Group, ...] = ("Home Assistant", "Info")
