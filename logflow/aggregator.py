"""
Aggregator: the bounded hand-off between connection handlers and the dashboard.

Connection handlers call ``enqueue`` / ``notify_source`` from their own threads.
The terminal UI takes batches off the queue with ``drain`` on its refresh tick
and routes each item into a pane through ``route``. Nothing else buffers items
in between, so a UI that falls behind makes the queue fill up and drop.

Loss is accepted in two places:
    - a full queue drops the incoming item (the queued ones are kept);
    - entries routed while the dashboard is paused are discarded, not replayed.
"""
from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Union

from .types import LogEntry, SourceEvent, SourceInfo

if TYPE_CHECKING:
    from .dashboard.pane import PaneRegistry


DEFAULT_QUEUE_SIZE = 1000

QueueItem = Union[LogEntry, SourceEvent]


@dataclass
class AggregatorStats:
    received: int = 0
    dropped: int = 0
    delivered: int = 0


class Aggregator:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        if queue_size < 1:
            raise ValueError(f"queue size must be positive, got {queue_size}")
        self.queue_size = queue_size
        self._queue: queue.Queue[QueueItem] = queue.Queue(maxsize=queue_size)
        self._stats_lock = threading.Lock()
        self.stats = AggregatorStats()

    def enqueue(self, entry: LogEntry) -> bool:
        return self._offer(entry)

    def notify_source(self, info: SourceInfo, exited: bool = False) -> bool:
        return self._offer(SourceEvent(info=info, exited=exited))

    def _offer(self, item: QueueItem) -> bool:
        with self._stats_lock:
            self.stats.received += 1
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            with self._stats_lock:
                self.stats.dropped += 1
            return False
        return True

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, max_items: Optional[int] = None) -> List[QueueItem]:
        """Take everything immediately available, without blocking."""
        limit = max_items if max_items is not None and max_items > 0 else None
        items: List[QueueItem] = []
        while limit is None or len(items) < limit:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                break
        if items:
            with self._stats_lock:
                self.stats.delivered += len(items)
        return items


def route(
    item: QueueItem,
    registry: "PaneRegistry",
    *,
    paused: bool = False,
    buffer_size: Optional[int] = None,
) -> None:
    """Resolve one queued item to its pane, creating the pane on first sight."""
    if isinstance(item, SourceEvent):
        if item.exited:
            pane = registry.get(item.info.name)
            if pane is not None:
                pane.active = False
            return
        pane = registry.get_or_create(item.info.name, kind=item.info.kind, capacity=buffer_size)
        pane.active = True
        return

    pane = registry.get_or_create(item.source, capacity=buffer_size)
    if paused:
        return
    pane.add_entry(item)
