from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..types import LogEntry, LogLevel, parse_rfc3339, utc_now


# Checked in order; the first level with any matching token wins.
LEVEL_TOKENS: List[Tuple[LogLevel, Tuple[str, ...]]] = [
    (LogLevel.ERROR, ("ERROR", "ERR")),
    (LogLevel.WARN, ("WARNING", "WARN")),
    (LogLevel.INFO, ("INFORMATION", "INFO")),
    (LogLevel.DEBUG, ("DEBUG", "DBG")),
]

TIMESTAMP_FIELDS = ("timestamp", "ts", "time", "@timestamp", "datetime")
MESSAGE_FIELDS = ("message", "msg", "text", "content")
LEVEL_FIELDS = ("level", "severity", "priority")

_NAIVE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
)

_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}")


def parse_level(text: str) -> LogLevel:
    upper = text.upper()
    for level, tokens in LEVEL_TOKENS:
        if any(token in upper for token in tokens):
            return level
    return LogLevel.INFO


def parse_timestamp(value: str) -> Optional[datetime]:
    """Try RFC3339 (plain and nanosecond) then the naive layouts, first hit wins."""
    parsed = parse_rfc3339(value)
    if parsed is not None:
        return parsed
    for fmt in _NAIVE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def _first_present(data: Dict[str, Any], fields: Tuple[str, ...]) -> Optional[str]:
    for name in fields:
        if name in data:
            return name
    return None


def normalize_json_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve timestamp/message/level aliases; everything else lands in ``metadata``."""
    result: Dict[str, Any] = {}
    consumed = set()

    ts_key = _first_present(data, TIMESTAMP_FIELDS)
    if ts_key is not None and isinstance(data[ts_key], str):
        ts = parse_timestamp(data[ts_key])
        if ts is not None:
            result["timestamp"] = ts
            consumed.add(ts_key)

    msg_key = _first_present(data, MESSAGE_FIELDS)
    if msg_key is not None and isinstance(data[msg_key], str):
        result["message"] = data[msg_key]
        consumed.add(msg_key)

    level_key = _first_present(data, LEVEL_FIELDS)
    if level_key is not None and isinstance(data[level_key], str):
        result["level"] = parse_level(data[level_key])
        consumed.add(level_key)

    result["metadata"] = {key: value for key, value in data.items() if key not in consumed}
    return result


def parse_structured(line: str) -> Dict[str, Any]:
    if line.strip().startswith("{"):
        try:
            data = json.loads(line)
        except (ValueError, RecursionError):
            data = None
        if isinstance(data, dict):
            return normalize_json_fields(data)

    result: Dict[str, Any] = {}
    match = _TIMESTAMP_RE.search(line)
    if match:
        ts = parse_timestamp(match.group(0))
        if ts is not None:
            result["timestamp"] = ts
    return result


def classify_line(line: str, source: str, now: Optional[datetime] = None) -> LogEntry:
    structured = parse_structured(line)
    level = structured.get("level") or parse_level(line)
    return LogEntry(
        timestamp=structured.get("timestamp") or now or utc_now(),
        source=source,
        level=level,
        content=structured.get("message", line),
        raw=line,
        metadata=structured.get("metadata", {}),
    )
