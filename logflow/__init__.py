from .aggregator import Aggregator, AggregatorStats
from .config import DashboardConfig, load_config
from .context import SessionContext
from .dashboard import DashboardState, LayoutMode
from .ipc import IPCClient, IPCServer, ProtocolError, TransportError
from .logs import RingBuffer, classify_line
from .types import LogEntry, LogLevel, SourceInfo, SourceKind

__all__ = [
    "Aggregator",
    "AggregatorStats",
    "DashboardConfig",
    "DashboardState",
    "IPCClient",
    "IPCServer",
    "LayoutMode",
    "LogEntry",
    "LogLevel",
    "ProtocolError",
    "RingBuffer",
    "SessionContext",
    "SourceInfo",
    "SourceKind",
    "TransportError",
    "classify_line",
    "load_config",
]
