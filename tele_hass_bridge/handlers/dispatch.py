"""Dispatch layer: applies rate limiting then calls the real handlers."""

from __future__ import annotations

from .common import rate_limit
from . import entities, meta


# Meta
cmd_start = rate_limit(meta.cmd_start)
cmd_help = rate_limit(meta.cmd_help)
cmd_whoami = rate_limit(meta.cmd_whoami)

# Home Assistant
cmd_hass = rate_limit(entities.cmd_hass)
cmd_hass_sync = rate_limit(entities.cmd_sync)
cmd_hass_status = rate_limit(entities.cmd_status)
