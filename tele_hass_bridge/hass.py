"""Async Home Assistant REST client and request error helpers."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from . import config, entity_cache
from .models.hass_state import EntityState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


class ErrorKind(str, Enum):
    AUTH = "auth"
    NOT_FOUND = "not_found"
    OTHER = "other"


class HassRequestError(RuntimeError):
    """A failed hub request.

    `status`/`status_text` are set for non-2xx responses, `code` for transport
    failures (timeouts, refused connections).
    """

    def __init__(
        self,
        message: str = "",
        status: int | None = None,
        status_text: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message or (f"HTTP {status}" if status else "request failed"))
        self.message = message
        self.status = status
        self.status_text = status_text
        self.code = code


def classify_error(exc: BaseException) -> ErrorKind:
    status = getattr(exc, "status", None)
    if status == 401:
        return ErrorKind.AUTH
    if status == 404:
        return ErrorKind.NOT_FOUND
    return ErrorKind.OTHER


def format_request_error(exc: BaseException) -> str:
    status = getattr(exc, "status", None)
    if status:
        status_text = getattr(exc, "status_text", None)
        return f"HTTP {status} {status_text}" if status_text else f"HTTP {status}"
    code = getattr(exc, "code", None)
    if code:
        return f"Network error: {code}"
    message = getattr(exc, "message", None) or str(exc)
    if message:
        return f"Error: {message}"
    return "Unknown error"


class HassClient:
    """Async client for the Home Assistant state API."""

    def __init__(
        self,
        api_url: str,
        access_token: str | None,
        timeout_s: float | None = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (api_url or "").rstrip("/")
        self.access_token = access_token or ""
        self.timeout = max(1.0, float(timeout_s or DEFAULT_TIMEOUT_S))
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(url, headers=self.headers)
        except httpx.HTTPError as exc:
            logger.debug("Hub request to %s failed: %s", url, exc)
            raise HassRequestError(str(exc), code=type(exc).__name__) from exc

        if not response.is_success:
            raise HassRequestError(
                f"HTTP {response.status_code} for {path}",
                status=response.status_code,
                status_text=response.reason_phrase or None,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise HassRequestError(f"Invalid JSON from {path}") from exc

    async def get_states(self) -> list[EntityState]:
        """Fetch every entity state in one request."""
        data = await self._get_json("/api/states")
        if not isinstance(data, list):
            raise HassRequestError("Unexpected /api/states payload")
        states: list[EntityState] = []
        for item in data:
            if not isinstance(item, dict) or not isinstance(item.get("entity_id"), str):
                continue
            states.append(EntityState.from_dict(item))
        return states

    async def get_state(self, entity_id: str) -> EntityState:
        data = await self._get_json(f"/api/states/{quote(entity_id, safe='')}")
        if not isinstance(data, dict):
            raise HassRequestError(f"Unexpected state payload for {entity_id}")
        return EntityState.from_dict(data)

    async def sync_entities(self, cache_file: str | Path) -> list[str]:
        """Refresh the cached list of entity ids from the hub."""
        states = await self.get_states()
        entities = sorted(s.entity_id for s in states if s.entity_id)
        await entity_cache.write_cache_async(cache_file, entities)
        return entities


def client_from_config() -> HassClient:
    return HassClient(
        config.HASS_API_URL,
        config.HASS_ACCESS_TOKEN,
        config.HASS_REQUEST_TIMEOUT_S,
    )
