from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from ..aggregator import QueueItem, route
from ..logs.buffer import DEFAULT_CAPACITY
from ..types import LogEntry, LogLevel
from .keymap import DEFAULT_KEYMAP, KeyMap
from .layout import LayoutMode, PaneSlot, ViewMode, compute_layout, content_area
from .pane import Pane, PaneRegistry


class SearchMode(str, Enum):
    NONE = "none"
    LOCAL = "local"
    GLOBAL = "global"


class Command(str, Enum):
    """Side effects the state machine asks its host to perform."""

    QUIT = "quit"
    EXPORT = "export"


@dataclass
class SearchResult:
    pane_name: str
    entry: LogEntry
    index: int


@dataclass
class SearchState:
    mode: SearchMode = SearchMode.NONE
    query: str = ""
    scope: SearchMode = SearchMode.NONE
    committed_query: str = ""
    results: List[SearchResult] = field(default_factory=list)
    cursor: int = -1


class DashboardState:
    """All dashboard view state; mutated only from the UI event loop."""

    def __init__(
        self,
        buffer_size: int = DEFAULT_CAPACITY,
        layout: LayoutMode = LayoutMode.VERTICAL,
        follow: bool = True,
        keymap: Optional[KeyMap] = None,
    ) -> None:
        self.buffer_size = buffer_size
        self.panes = PaneRegistry(default_capacity=buffer_size)
        self.layout = layout
        self.view = ViewMode.MULTI_PANE
        self.focused_index = 0
        self.zoomed_index = 0
        self.filter_level = LogLevel.DEBUG
        self.follow = follow
        self.paused = False
        self.show_help = False
        self.search = SearchState()
        self.keymap = keymap or DEFAULT_KEYMAP

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def pane_count(self) -> int:
        return len(self.panes)

    @property
    def search_mode(self) -> SearchMode:
        return self.search.mode

    @property
    def search_query(self) -> str:
        return self.search.query

    @property
    def search_results(self) -> List[SearchResult]:
        return self.search.results

    def focused_pane(self) -> Optional[Pane]:
        return self.panes.at(self.focused_index)

    def zoomed_pane(self) -> Optional[Pane]:
        return self.panes.at(self.zoomed_index)

    def layout_slots(self, width: int, height: int) -> List[PaneSlot]:
        content_width, content_height = content_area(width, height)
        return compute_layout(
            self.layout,
            self.view,
            self.pane_count,
            self.zoomed_index,
            content_width,
            content_height,
        )

    # ------------------------------------------------------------------
    # Async input
    # ------------------------------------------------------------------

    def ingest(self, items: Iterable[QueueItem]) -> None:
        before = self.pane_count
        for item in items:
            route(item, self.panes, paused=self.paused, buffer_size=self.buffer_size)
        if self.pane_count != before:
            self._sync_focus()

    # ------------------------------------------------------------------
    # Key input
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> Optional[Command]:
        km = self.keymap
        if key == "ctrl+c":
            return Command.QUIT
        if self.search.mode != SearchMode.NONE:
            self._handle_search_key(key)
            return None

        if key in km.quit:
            return Command.QUIT
        if key in km.help:
            self.show_help = not self.show_help
        elif key in km.cycle_layout:
            self.cycle_layout()
        elif key in km.zoom:
            self.toggle_zoom()
        elif key in km.zoom_out:
            self._escape()
        elif key in km.next_pane:
            self.focus_next()
        elif key in km.prev_pane:
            self.focus_prev()
        elif key in km.direct_access:
            self.select_pane(int(key) - 1)
        elif key in km.vim_prev:
            if self.layout == LayoutMode.VERTICAL:
                self.focus_prev()
        elif key in km.vim_down:
            if self.layout == LayoutMode.HORIZONTAL:
                self.focus_next()
            else:
                self.scroll(1)
        elif key in km.vim_up:
            if self.layout == LayoutMode.HORIZONTAL:
                self.focus_prev()
            else:
                self.scroll(-1)
        elif key in km.scroll_down:
            self.scroll(1)
        elif key in km.scroll_up:
            self.scroll(-1)
        elif key in km.page_down:
            self.scroll(self._page_size())
        elif key in km.page_up:
            self.scroll(-self._page_size())
        elif key in km.scroll_top:
            self.scroll_to_top()
        elif key in km.scroll_bottom:
            self.scroll_to_bottom()
        elif key in km.search_local:
            self.begin_search(SearchMode.LOCAL)
        elif key in km.search_global:
            self.begin_search(SearchMode.GLOBAL)
        elif key in km.next_result:
            self.step_result(1)
        elif key in km.prev_result:
            self.step_result(-1)
        elif key in km.filter_error:
            self.filter_level = LogLevel.ERROR
        elif key in km.filter_warn:
            self.filter_level = LogLevel.WARN
        elif key in km.filter_info:
            self.filter_level = LogLevel.INFO
        elif key in km.filter_all:
            self.filter_level = LogLevel.DEBUG
        elif key in km.pause:
            self.paused = not self.paused
        elif key in km.follow:
            self.follow = not self.follow
        elif key in km.clear:
            self.clear_focused()
        elif key in km.export:
            if self.focused_pane() is not None:
                return Command.EXPORT
        return None

    def _handle_search_key(self, key: str) -> None:
        km = self.keymap
        if key in km.search_commit:
            self.commit_search()
        elif key in km.search_abort:
            self.abort_search()
        elif key in km.search_delete:
            self.search.query = self.search.query[:-1]
        elif len(key) == 1 and key.isprintable():
            self.search.query += key

    def _escape(self) -> None:
        if self.show_help:
            self.show_help = False
        elif self.view == ViewMode.ZOOMED:
            self.view = ViewMode.MULTI_PANE
        elif self.search.scope != SearchMode.NONE:
            self.clear_results()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def cycle_layout(self) -> None:
        self.layout = self.layout.next()

    def toggle_zoom(self) -> None:
        if self.view == ViewMode.MULTI_PANE:
            if self.pane_count == 0:
                return
            self.view = ViewMode.ZOOMED
            self.zoomed_index = self.focused_index
        else:
            self.view = ViewMode.MULTI_PANE

    def focus_next(self) -> None:
        if self.pane_count:
            self.focused_index = (self.focused_index + 1) % self.pane_count
            self._sync_focus()

    def focus_prev(self) -> None:
        if self.pane_count:
            self.focused_index = (self.focused_index - 1 + self.pane_count) % self.pane_count
            self._sync_focus()

    def select_pane(self, index: int) -> None:
        if not 0 <= index < self.pane_count:
            return
        if self.view == ViewMode.ZOOMED:
            self.zoomed_index = index
        self.focused_index = index
        self._sync_focus()

    def clear_focused(self) -> None:
        pane = self.focused_pane()
        if pane is not None:
            pane.clear()

    def scroll(self, delta: int) -> None:
        pane = self.focused_pane()
        if pane is None:
            return
        if delta < 0:
            self.follow = False
        pane.scroll(delta, self.filter_level)

    def scroll_to_top(self) -> None:
        pane = self.focused_pane()
        if pane is None:
            return
        self.follow = False
        pane.scroll_to_top()

    def scroll_to_bottom(self) -> None:
        pane = self.focused_pane()
        if pane is not None:
            pane.scroll(pane.count(), self.filter_level)
        self.follow = True

    def _page_size(self) -> int:
        pane = self.focused_pane()
        return max(1, pane.last_rows if pane is not None else 1)

    def _sync_focus(self) -> None:
        if self.pane_count == 0:
            self.focused_index = 0
            self.zoomed_index = 0
            return
        self.focused_index = min(self.focused_index, self.pane_count - 1)
        for idx, pane in enumerate(self.panes):
            pane.focused = idx == self.focused_index

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def begin_search(self, mode: SearchMode) -> None:
        self.search.mode = mode
        self.search.query = ""

    def abort_search(self) -> None:
        self.search.mode = SearchMode.NONE
        self.search.query = ""

    def commit_search(self) -> List[SearchResult]:
        scope = self.search.mode
        query = self.search.query
        self.search.mode = SearchMode.NONE
        # An empty query matches every entry in scope, same as the buffer search.
        self.search.scope = scope
        self.search.committed_query = query
        self.search.results = self.perform_search(query, scope)
        self.search.cursor = -1
        return self.search.results

    def perform_search(self, query: str, scope: SearchMode) -> List[SearchResult]:
        if scope == SearchMode.LOCAL:
            pane = self.focused_pane()
            targets = [pane] if pane is not None else []
        else:
            targets = self.panes.panes()
        results: List[SearchResult] = []
        for pane in targets:
            positions = {id(entry): idx for idx, entry in enumerate(pane.buffer.get_all())}
            for entry in pane.search(query):
                results.append(SearchResult(pane_name=pane.name, entry=entry, index=positions.get(id(entry), -1)))
        return results

    def clear_results(self) -> None:
        self.search.results = []
        self.search.committed_query = ""
        self.search.scope = SearchMode.NONE
        self.search.cursor = -1

    def step_result(self, delta: int) -> Optional[SearchResult]:
        results = self.search.results
        if not results:
            return None
        self.search.cursor = (self.search.cursor + delta) % len(results)
        result = results[self.search.cursor]
        index = self.panes.index_of(result.pane_name)
        if index < 0:
            return result
        self.select_pane(index)
        pane = self.focused_pane()
        if pane is not None and pane.scroll_to_entry(result.entry, self.filter_level):
            self.follow = False
        return result
