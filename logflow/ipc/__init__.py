from .client import IPCClient
from .protocol import (
    MESSAGE_LOG,
    MESSAGE_PING,
    MESSAGE_PONG,
    MESSAGE_SOURCE_EXIT,
    MESSAGE_SOURCE_INIT,
    IPCMessage,
    ProtocolError,
    TransportError,
    decode_message,
    default_socket_path,
    encode_message,
)
from .server import IPCServer, ServerStats

__all__ = [
    "IPCClient",
    "IPCServer",
    "ServerStats",
    "IPCMessage",
    "ProtocolError",
    "TransportError",
    "decode_message",
    "encode_message",
    "default_socket_path",
    "MESSAGE_LOG",
    "MESSAGE_PING",
    "MESSAGE_PONG",
    "MESSAGE_SOURCE_EXIT",
    "MESSAGE_SOURCE_INIT",
]
