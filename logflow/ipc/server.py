from __future__ import annotations

import errno
import os
import socket
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from ..aggregator import Aggregator
from ..utils import setup_logger
from .protocol import (
    MESSAGE_LOG,
    MESSAGE_PING,
    MESSAGE_SOURCE_EXIT,
    MESSAGE_SOURCE_INIT,
    IPCMessage,
    ProtocolError,
    TransportError,
    decode_message,
    default_socket_path,
    encode_message,
)


logger = setup_logger("logflow.ipc.server")


@dataclass
class ServerStats:
    connections: int = 0
    messages: int = 0
    malformed: int = 0


def _endpoint_is_live(path: str) -> bool:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.settimeout(0.5)
    try:
        sock.connect(path)
    except OSError:
        return False
    finally:
        sock.close()
    return True


class IPCServer:
    """Unix socket listener: one accept thread plus one reader thread per source connection."""

    def __init__(self, aggregator: Aggregator, socket_path: Optional[str] = None, backlog: int = 64) -> None:
        self.aggregator = aggregator
        self.socket_path = socket_path or default_socket_path()
        self.backlog = backlog
        self.stats = ServerStats()
        self._listener: Optional[socket.socket] = None
        self._accept_thread: Optional[threading.Thread] = None
        self._clients: Dict[int, socket.socket] = {}
        self._lock = threading.Lock()
        self._closing = threading.Event()

    @property
    def running(self) -> bool:
        return self._listener is not None and not self._closing.is_set()

    def start(self) -> None:
        if self._listener is not None:
            return
        self._prepare_endpoint()
        listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            listener.bind(self.socket_path)
            listener.listen(self.backlog)
        except OSError as exc:
            listener.close()
            if exc.errno == errno.EADDRINUSE:
                raise TransportError("address_in_use", f"{self.socket_path} is already bound") from exc
            raise TransportError("bind_failed", f"cannot listen on {self.socket_path}: {exc}") from exc
        self._listener = listener
        self._closing.clear()
        self._accept_thread = threading.Thread(
            target=self._accept_loop, name="logflow-accept", daemon=True
        )
        self._accept_thread.start()
        logger.info("Listening on %s", self.socket_path)

    def _prepare_endpoint(self) -> None:
        directory = os.path.dirname(self.socket_path)
        if directory:
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as exc:
                raise TransportError("bind_failed", f"cannot create {directory}: {exc}") from exc
        if not os.path.exists(self.socket_path):
            return
        if _endpoint_is_live(self.socket_path):
            raise TransportError(
                "address_in_use",
                f"another dashboard is already listening on {self.socket_path}",
            )
        logger.info("Removing stale socket %s", self.socket_path)
        try:
            os.remove(self.socket_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise TransportError("bind_failed", f"cannot remove stale {self.socket_path}: {exc}") from exc

    def close(self) -> None:
        if self._closing.is_set():
            return
        self._closing.set()

        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for conn in clients:
            self._force_close(conn)

        listener = self._listener
        if listener is None:
            # Never bound: the socket file, if any, belongs to someone else.
            return
        self._force_close(listener)
        if self._accept_thread is not None:
            self._accept_thread.join(timeout=1.0)
            self._accept_thread = None
        self._listener = None

        try:
            os.remove(self.socket_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove %s: %s", self.socket_path, exc)
        logger.info("Closed %s (%d connections closed)", self.socket_path, len(clients))

    def __enter__(self) -> "IPCServer":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def active_connections(self) -> int:
        with self._lock:
            return len(self._clients)

    def _force_close(self, sock: socket.socket) -> None:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()

    def _accept_loop(self) -> None:
        listener = self._listener
        while listener is not None and not self._closing.is_set():
            try:
                conn, _ = listener.accept()
            except OSError:
                if self._closing.is_set():
                    return
                continue
            with self._lock:
                if self._closing.is_set():
                    self._force_close(conn)
                    return
                self._clients[conn.fileno()] = conn
                self.stats.connections += 1
            thread = threading.Thread(
                target=self._handle_client, args=(conn,), name="logflow-conn", daemon=True
            )
            thread.start()

    def _handle_client(self, conn: socket.socket) -> None:
        key = conn.fileno()
        try:
            with conn.makefile("rb") as reader:
                for raw in reader:
                    line = raw.strip()
                    if not line:
                        continue
                    self._dispatch(conn, line)
        except (OSError, ValueError):
            # Raised when close() tears the connection down under the reader.
            pass
        finally:
            with self._lock:
                if self._clients.get(key) is conn:
                    del self._clients[key]
            conn.close()

    def _dispatch(self, conn: socket.socket, line: bytes) -> None:
        try:
            message = decode_message(line)
        except ProtocolError as exc:
            with self._lock:
                self.stats.malformed += 1
            logger.debug("Skipping malformed message (%s): %s", exc.code, exc)
            return

        with self._lock:
            self.stats.messages += 1
        if message.type == MESSAGE_LOG and message.log_entry is not None:
            self.aggregator.enqueue(message.log_entry)
        elif message.type == MESSAGE_SOURCE_INIT and message.source_info is not None:
            logger.info("Source registered: %s (%s)", message.source_info.name, message.source_info.kind)
            self.aggregator.notify_source(message.source_info)
        elif message.type == MESSAGE_SOURCE_EXIT and message.source_info is not None:
            logger.info("Source exited: %s", message.source_info.name)
            self.aggregator.notify_source(message.source_info, exited=True)
        elif message.type == MESSAGE_PING:
            conn.sendall(encode_message(IPCMessage(type="pong")))
