from __future__ import annotations

import socket
import threading
from typing import Optional

from ..types import LogEntry
from .protocol import (
    MESSAGE_PING,
    MESSAGE_PONG,
    IPCMessage,
    ProtocolError,
    TransportError,
    decode_message,
    default_socket_path,
    encode_message,
)


class IPCClient:
    """Connection from a source process to the running dashboard."""

    def __init__(self, sock: socket.socket, socket_path: str) -> None:
        self._sock = sock
        self.socket_path = socket_path
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def connect(cls, socket_path: Optional[str] = None, timeout: Optional[float] = None) -> "IPCClient":
        path = socket_path or default_socket_path()
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        if timeout is not None:
            sock.settimeout(timeout)
        try:
            sock.connect(path)
        except OSError as exc:
            sock.close()
            raise TransportError(
                "connect_failed", f"failed to connect to logflow dashboard at {path}: {exc}"
            ) from exc
        sock.settimeout(None)
        return cls(sock, path)

    @property
    def closed(self) -> bool:
        return self._closed

    def send_message(self, message: IPCMessage) -> None:
        data = encode_message(message)
        with self._lock:
            if self._closed:
                raise TransportError("closed", "client connection is closed")
            try:
                self._sock.sendall(data)
            except OSError as exc:
                raise TransportError("broken", f"dashboard connection lost: {exc}") from exc

    def init_source(self, name: str, kind: str) -> None:
        self.send_message(IPCMessage.source_init(name, kind))

    def send_log(self, entry: LogEntry) -> None:
        self.send_message(IPCMessage.log(entry))

    def send_exit(self, name: str) -> None:
        self.send_message(IPCMessage.source_exit(name))

    def ping(self, timeout: float = 1.0) -> bool:
        self.send_message(IPCMessage(type=MESSAGE_PING))
        buffer = b""
        self._sock.settimeout(timeout)
        try:
            while b"\n" not in buffer:
                chunk = self._sock.recv(4096)
                if not chunk:
                    return False
                buffer += chunk
        except OSError:
            return False
        finally:
            self._sock.settimeout(None)
        try:
            reply = decode_message(buffer.split(b"\n", 1)[0])
        except ProtocolError:
            return False
        return reply.type == MESSAGE_PONG

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()

    def __enter__(self) -> "IPCClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
