"""Alert rule, notify target and reply rule dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Operator(str, Enum):
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"
    NEQ = "neq"
    CHANGED = "changed"

    @classmethod
    def parse(cls, raw: object) -> "Operator | None":
        try:
            return cls(str(raw).strip())
        except ValueError:
            return None


def _text(value: object) -> str:
    return str(value).strip() if value is not None else ""


def _flag(value: object, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass
class AlertRule:
    entity: str
    operator: Operator | None = Operator.CHANGED
    value: str | int | float | None = None
    message: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AlertRule":
        raw_operator = data.get("operator")
        operator = Operator.CHANGED if raw_operator is None else Operator.parse(raw_operator)
        value = data.get("value")
        if value is not None and not isinstance(value, (str, int, float)):
            value = str(value)
        return cls(
            entity=_text(data.get("entity")),
            operator=operator,
            value=value,
            message=str(data.get("message") or ""),
            enabled=_flag(data.get("enabled")),
        )


@dataclass(frozen=True)
class NotifyTarget:
    platform: str
    channel_id: str
    guild_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotifyTarget":
        channel = data.get("channel_id", data.get("channelId"))
        guild = data.get("guild_id", data.get("guildId"))
        return cls(
            platform=_text(data.get("platform")),
            channel_id=_text(channel),
            guild_id=_text(guild) or None,
        )


@dataclass(frozen=True)
class ReplyEntity:
    key: str
    entity: str


@dataclass
class MessageReply:
    trigger: str
    entities: list[ReplyEntity] = field(default_factory=list)
    reply: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageReply":
        entries: list[ReplyEntity] = []
        for item in data.get("entities") or []:
            if not isinstance(item, dict):
                continue
            entries.append(
                ReplyEntity(key=_text(item.get("key")), entity=_text(item.get("entity")))
            )
        return cls(
            trigger=str(data.get("trigger") or ""),
            entities=entries,
            reply=str(data.get("reply") or ""),
            enabled=_flag(data.get("enabled")),
        )
