from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from ..logs.parser import classify_line
from ..types import LogEntry
from ..utils import setup_logger

if TYPE_CHECKING:
    from ..ipc.client import IPCClient


logger = setup_logger("logflow.sources")


@dataclass
class SourceLine:
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: Optional[datetime] = None


class LogSource:
    """A producer of raw lines for one named pane.

    Subclasses implement ``lines()``; iteration ending means the source is done.
    """

    kind = ""

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("source name must be non-empty")
        self.name = name
        self.stopped = threading.Event()
        self.sent = 0

    def lines(self) -> Iterator[SourceLine]:
        raise NotImplementedError

    def close(self) -> None:
        self.stopped.set()

    def to_entry(self, line: SourceLine) -> LogEntry:
        entry = classify_line(line.text, self.name)
        if line.timestamp is None and not line.metadata:
            return entry
        metadata = dict(entry.metadata)
        metadata.update(line.metadata)
        return replace(entry, timestamp=line.timestamp or entry.timestamp, metadata=metadata)

    def stream(self, client: "IPCClient") -> int:
        """Register, forward every non-empty line, then announce the exit.

        Transport errors propagate; the exit notice is only sent after the input
        ends or ``close()`` is called.
        """
        client.init_source(self.name, self.kind)
        logger.info("Streaming %s source %s", self.kind, self.name)
        try:
            for line in self.lines():
                if self.stopped.is_set():
                    break
                if not line.text.strip():
                    continue
                client.send_log(self.to_entry(line))
                self.sent += 1
        finally:
            self.close()
        client.send_exit(self.name)
        logger.info("Source %s finished after %d lines", self.name, self.sent)
        return self.sent

    def __enter__(self) -> "LogSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
