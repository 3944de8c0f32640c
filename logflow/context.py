from __future__ import annotations

from dataclasses import dataclass, field

from .aggregator import Aggregator
from .config import DashboardConfig
from .dashboard.state import DashboardState
from .ipc.server import IPCServer
from .utils import setup_logger


logger = setup_logger("logflow.context")


@dataclass
class SessionContext:
    """Everything one dashboard session owns, passed explicitly to the components that need it."""

    config: DashboardConfig
    state: DashboardState
    aggregator: Aggregator
    server: IPCServer
    closed: bool = field(default=False, init=False)

    @classmethod
    def create(cls, config: DashboardConfig) -> "SessionContext":
        aggregator = Aggregator(queue_size=config.queue_size)
        state = DashboardState(
            buffer_size=config.buffer_size,
            layout=config.layout,
            follow=config.follow,
        )
        server = IPCServer(aggregator, socket_path=config.socket_path)
        return cls(config=config, state=state, aggregator=aggregator, server=server)

    def start(self) -> None:
        """Bind the socket; connections feed the aggregator from then on."""
        self.server.start()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.server.close()
        stats = self.aggregator.stats
        logger.info(
            "Session closed: received=%d dropped=%d delivered=%d malformed=%d",
            stats.received,
            stats.dropped,
            stats.delivered,
            self.server.stats.malformed,
        )
