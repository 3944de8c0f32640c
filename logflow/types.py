from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return LEVEL_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        if not isinstance(value, str):
            return cls.INFO
        upper = value.strip().upper()
        if upper in cls.__members__:
            return cls[upper]
        # Imported lazily: the parser module depends on this one.
        from .logs.parser import parse_level

        return parse_level(value)


LEVEL_RANKS: Dict[LogLevel, int] = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}


class SourceKind(str, Enum):
    PIPE = "pipe"
    DOCKER = "docker"
    PODMAN = "podman"


_FRACTION_RE = re.compile(r"(\.\d+)")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_rfc3339(value: str) -> Optional[datetime]:
    """Parse RFC3339 text, including the nanosecond form emitted by container runtimes.

    Returns None when the value is not a full date-time with an offset or ``Z``.
    """
    text = value.strip()
    if "T" not in text and "t" not in text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    if not re.search(r"[+-]\d{2}:\d{2}$", text):
        return None
    match = _FRACTION_RE.search(text)
    if match:
        digits = match.group(1)[1:7].ljust(6, "0")
        text = text[: match.start()] + "." + digits + text[match.end() :]
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_rfc3339(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    source: str
    level: LogLevel
    content: str
    raw: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.source:
            raise ValueError("log entry source must be non-empty")
        # Own a read-only copy so the caller's dict cannot change a stored entry.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "timestamp": format_rfc3339(self.timestamp),
            "source": self.source,
            "level": self.level.value,
            "content": self.content,
            "raw": self.raw,
        }
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, payload: Any) -> "LogEntry":
        if not isinstance(payload, dict):
            raise ValueError("log entry must be an object")
        source = payload.get("source")
        if not isinstance(source, str) or not source:
            raise ValueError("log entry requires a non-empty source")
        ts_value = payload.get("timestamp")
        timestamp = parse_rfc3339(ts_value) if isinstance(ts_value, str) else None
        content = payload.get("content")
        raw = payload.get("raw")
        content = content if isinstance(content, str) else (raw if isinstance(raw, str) else "")
        raw = raw if isinstance(raw, str) else content
        metadata = payload.get("metadata")
        return cls(
            timestamp=timestamp or utc_now(),
            source=source,
            level=LogLevel.parse(payload.get("level")),
            content=content,
            raw=raw,
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
        )


@dataclass(frozen=True)
class SourceInfo:
    name: str
    kind: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.kind}

    @classmethod
    def from_dict(cls, payload: Any) -> "SourceInfo":
        if not isinstance(payload, dict):
            raise ValueError("source info must be an object")
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("source info requires a non-empty name")
        kind = payload.get("type")
        return cls(name=name, kind=kind if isinstance(kind, str) else "")


@dataclass(frozen=True)
class SourceEvent:
    """Registration or exit notice travelling through the aggregator queue."""

    info: SourceInfo
    exited: bool = False
