from __future__ import annotations

import threading
from typing import List, Optional

from ..types import LogEntry, LogLevel


DEFAULT_CAPACITY = 1000


class RingBuffer:
    """Fixed-capacity history of log entries; the oldest entry is overwritten when full.

    One writer and any number of readers may use the buffer from different
    threads. Every read returns a fresh list in insertion order.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"ring buffer capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: List[Optional[LogEntry]] = [None] * capacity
        self._cursor = 0
        self._count = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries[self._cursor] = entry
            self._cursor = (self._cursor + 1) % self._capacity
            if self._count < self._capacity:
                self._count += 1

    def get_all(self) -> List[LogEntry]:
        with self._lock:
            if self._count < self._capacity:
                return list(self._entries[: self._count])  # type: ignore[arg-type]
            # Wrapped: oldest entry sits at the cursor.
            return self._entries[self._cursor :] + self._entries[: self._cursor]  # type: ignore[operator]

    def get_recent(self, n: int) -> List[LogEntry]:
        entries = self.get_all()
        if n <= 0:
            return []
        return entries[-n:]

    def filter(self, min_level: LogLevel) -> List[LogEntry]:
        floor = LogLevel.parse(min_level).rank
        return [entry for entry in self.get_all() if entry.level.rank >= floor]

    def search(self, term: str) -> List[LogEntry]:
        needle = term.lower()
        return [
            entry
            for entry in self.get_all()
            if needle in entry.content.lower() or needle in entry.raw.lower()
        ]

    def clear(self) -> None:
        with self._lock:
            self._count = 0
            self._cursor = 0

    def count(self) -> int:
        with self._lock:
            return self._count

    def __len__(self) -> int:
        return self.count()
