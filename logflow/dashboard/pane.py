from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..logs.buffer import DEFAULT_CAPACITY, RingBuffer
from ..types import LogEntry, LogLevel
from .layout import visible_window


@dataclass
class PaneWindow:
    entries: List[LogEntry]
    offset: int
    total: int
    rows: int

    @property
    def at_bottom(self) -> bool:
        return self.offset + self.rows >= self.total


class Pane:
    def __init__(self, name: str, capacity: int = DEFAULT_CAPACITY, kind: str = "") -> None:
        self.name = name
        self.kind = kind
        self.buffer = RingBuffer(capacity)
        self.scroll_offset = 0
        self.focused = False
        self.active = True
        self.last_search_term = ""
        self.last_rows = 0

    def add_entry(self, entry: LogEntry) -> None:
        self.buffer.add(entry)

    def clear(self) -> None:
        self.buffer.clear()
        self.scroll_offset = 0

    def search(self, term: str) -> List[LogEntry]:
        self.last_search_term = term
        return self.buffer.search(term)

    def count(self) -> int:
        return self.buffer.count()

    def window(self, min_level: LogLevel, rows: int, follow: bool) -> PaneWindow:
        entries = self.buffer.filter(min_level)
        rows = max(1, rows)
        start, end, offset = visible_window(len(entries), self.scroll_offset, rows, follow)
        self.scroll_offset = offset
        self.last_rows = rows
        return PaneWindow(entries=entries[start:end], offset=offset, total=len(entries), rows=rows)

    def scroll(self, delta: int, min_level: LogLevel) -> None:
        total = len(self.buffer.filter(min_level))
        rows = max(1, self.last_rows)
        limit = max(0, total - rows)
        self.scroll_offset = min(max(0, self.scroll_offset + delta), limit)

    def scroll_to_top(self) -> None:
        self.scroll_offset = 0

    def scroll_to_entry(self, entry: LogEntry, min_level: LogLevel) -> bool:
        entries = self.buffer.filter(min_level)
        for idx, candidate in enumerate(entries):
            if candidate is entry:
                self.scroll_offset = max(0, idx - max(1, self.last_rows) // 2)
                return True
        return False


class PaneRegistry:
    """Panes keyed by source name, iterated in first-seen order."""

    def __init__(self, default_capacity: int = DEFAULT_CAPACITY) -> None:
        self.default_capacity = default_capacity
        self._panes: Dict[str, Pane] = {}

    def get(self, name: str) -> Optional[Pane]:
        return self._panes.get(name)

    def get_or_create(self, name: str, kind: str = "", capacity: Optional[int] = None) -> Pane:
        pane = self._panes.get(name)
        if pane is None:
            pane = Pane(name, capacity=capacity or self.default_capacity, kind=kind)
            self._panes[name] = pane
        elif kind and not pane.kind:
            pane.kind = kind
        return pane

    def at(self, index: int) -> Optional[Pane]:
        if 0 <= index < len(self._panes):
            return list(self._panes.values())[index]
        return None

    def index_of(self, name: str) -> int:
        for idx, key in enumerate(self._panes):
            if key == name:
                return idx
        return -1

    def names(self) -> List[str]:
        return list(self._panes.keys())

    def panes(self) -> List[Pane]:
        return list(self._panes.values())

    def __len__(self) -> int:
        return len(self._panes)

    def __iter__(self) -> Iterator[Pane]:
        return iter(list(self._panes.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._panes
