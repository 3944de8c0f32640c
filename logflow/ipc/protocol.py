from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..types import LogEntry, SourceInfo


MESSAGE_LOG = "log"
MESSAGE_SOURCE_INIT = "source_init"
MESSAGE_SOURCE_EXIT = "source_exit"
MESSAGE_PING = "ping"
MESSAGE_PONG = "pong"

MESSAGE_TYPES = (MESSAGE_LOG, MESSAGE_SOURCE_INIT, MESSAGE_SOURCE_EXIT, MESSAGE_PING, MESSAGE_PONG)

DEFAULT_SOCKET_NAME = "logflow.sock"


def default_socket_path() -> str:
    return os.path.join(tempfile.gettempdir(), DEFAULT_SOCKET_NAME)


class ProtocolError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class TransportError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass
class IPCMessage:
    type: str
    log_entry: Optional[LogEntry] = None
    source_info: Optional[SourceInfo] = None
    error: Optional[str] = None

    @classmethod
    def log(cls, entry: LogEntry) -> "IPCMessage":
        return cls(type=MESSAGE_LOG, log_entry=entry)

    @classmethod
    def source_init(cls, name: str, kind: str) -> "IPCMessage":
        return cls(type=MESSAGE_SOURCE_INIT, source_info=SourceInfo(name=name, kind=kind))

    @classmethod
    def source_exit(cls, name: str) -> "IPCMessage":
        return cls(type=MESSAGE_SOURCE_EXIT, source_info=SourceInfo(name=name))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.log_entry is not None:
            data["log_entry"] = self.log_entry.to_dict()
        if self.source_info is not None:
            data["source_info"] = self.source_info.to_dict()
        if self.error:
            data["error"] = self.error
        return data


def encode_message(message: IPCMessage) -> bytes:
    return (json.dumps(message.to_dict(), default=str) + "\n").encode("utf-8")


def decode_message(line: str | bytes) -> IPCMessage:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    try:
        payload = json.loads(line)
    except (ValueError, RecursionError) as exc:
        raise ProtocolError("bad_json", f"undecodable message: {exc}") from exc
    if not isinstance(payload, dict):
        raise ProtocolError("bad_json", "message must be a JSON object")

    msg_type = payload.get("type")
    if msg_type not in MESSAGE_TYPES:
        raise ProtocolError("bad_type", f"unknown message type: {msg_type!r}")

    error = payload.get("error")
    message = IPCMessage(type=msg_type, error=error if isinstance(error, str) else None)

    if msg_type == MESSAGE_LOG:
        if payload.get("log_entry") is None:
            raise ProtocolError("missing_field", "log message without log_entry")
        try:
            message.log_entry = LogEntry.from_dict(payload["log_entry"])
        except ValueError as exc:
            raise ProtocolError("bad_entry", str(exc)) from exc
    elif msg_type in (MESSAGE_SOURCE_INIT, MESSAGE_SOURCE_EXIT):
        if payload.get("source_info") is None:
            raise ProtocolError("missing_field", f"{msg_type} message without source_info")
        try:
            message.source_info = SourceInfo.from_dict(payload["source_info"])
        except ValueError as exc:
            raise ProtocolError("bad_entry", str(exc)) from exc
    return message
