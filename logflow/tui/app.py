from __future__ import annotations

import time
from itertools import groupby
from typing import Any, Dict, List, Optional

try:
    from rich.console import Group, RenderableType
    from rich.panel import Panel
    from rich.table import Table
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.widgets import Static
except ImportError as exc:
    raise RuntimeError("textual and rich are required for the dashboard: pip install textual rich") from exc

from ..context import SessionContext
from ..dashboard.keymap import HELP_SECTIONS
from ..dashboard.layout import PaneSlot, ViewMode
from ..dashboard.pane import Pane
from ..dashboard.state import Command, SearchMode
from ..export import export_pane
from ..types import LogEntry, LogLevel
from ..utils import setup_logger


logger = setup_logger("logflow.tui")

LEVEL_STYLES: Dict[LogLevel, str] = {
    LogLevel.ERROR: "bold red",
    LogLevel.WARN: "yellow",
    LogLevel.INFO: "blue",
    LogLevel.DEBUG: "bright_black",
}

FOCUSED_BORDER = "bright_cyan"
UNFOCUSED_BORDER = "grey50"
VERSION = "1.0.0"

# Keys the app would otherwise claim for its own focus chain or quit handling.
_PRIORITY_KEYS = ("tab", "shift+tab", "ctrl+c")


def canonical_key(event: events.Key) -> str:
    character = event.character
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return event.key


def format_count(count: int) -> str:
    if count >= 1000:
        return f"{count / 1000:.1f}k lines"
    return f"{count} lines"


def format_entry(entry: LogEntry, highlight: str = "") -> Text:
    line = Text(no_wrap=True, overflow="ellipsis")
    line.append(entry.timestamp.astimezone().strftime("%H:%M:%S"), style="dim")
    line.append(" ")
    line.append(f"{entry.level.value:<5}", style=LEVEL_STYLES.get(entry.level, ""))
    line.append(" ")
    line.append(entry.content)
    if highlight:
        line.highlight_words([highlight], style="black on yellow", case_sensitive=False)
    return line


class LogflowDashboard(App):
    CSS = """
    Screen { layout: vertical; }
    #header { height: 1; background: $primary; color: $text; text-style: bold; }
    #panes { height: 1fr; }
    #status { height: 1; background: $panel; }
    """

    BINDINGS = [Binding(key, f"dispatch_key('{key}')", show=False, priority=True) for key in _PRIORITY_KEYS]

    def __init__(self, session: SessionContext) -> None:
        super().__init__()
        self.session = session
        self.state = session.state
        self.config = session.config
        self._version = 0
        self._render_cache: Dict[str, Any] = {}

    def compose(self) -> ComposeResult:
        yield Static("", id="header")
        yield Static("", id="panes")
        yield Static("", id="status")

    def on_mount(self) -> None:
        self.set_interval(self.config.tick_interval, self._refresh_now)
        self._refresh_now()

    async def on_unmount(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _poll_aggregator(self) -> int:
        # At most one queue's worth per tick; anything beyond that was dropped at enqueue.
        aggregator = self.session.aggregator
        items = aggregator.drain(max_items=aggregator.queue_size)
        if items:
            self.state.ingest(items)
            self._version += 1
        return len(items)

    def _refresh_now(self) -> None:
        self._poll_aggregator()
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        key = canonical_key(event)
        if key in _PRIORITY_KEYS:
            return
        event.stop()
        event.prevent_default()
        self.action_dispatch_key(key)

    def action_dispatch_key(self, key: str) -> None:
        command = self.state.handle_key(key)
        self._version += 1
        if command == Command.QUIT:
            self.session.close()
            self.exit()
            return
        if command == Command.EXPORT:
            self._export_focused()
        self.refresh_view()

    def _export_focused(self) -> None:
        pane = self.state.focused_pane()
        if pane is None:
            return
        try:
            path = export_pane(pane, self.config.export_dir, self.state.filter_level)
        except OSError as exc:
            logger.error("Export of %s failed: %s", pane.name, exc)
            self.notify(f"Export failed: {exc}", severity="error")
            return
        self.notify(f"Exported {pane.name} to {path}")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _should_render(self, key: str, signature: Any) -> bool:
        if self._render_cache.get(key) == signature:
            return False
        self._render_cache[key] = signature
        return True

    def refresh_view(self) -> None:
        width, height = self.size.width, self.size.height
        signature = (self._version, width, height, time.strftime("%H:%M:%S"))
        if not self._should_render("view", signature):
            return
        self.query_one("#header", Static).update(self._render_header())
        self.query_one("#panes", Static).update(self._render_panes(width, height))
        self.query_one("#status", Static).update(self._render_status())

    def _render_header(self) -> Text:
        state = self.state
        layout_label = state.layout.label
        if state.view == ViewMode.ZOOMED:
            zoomed = state.zoomed_pane()
            if zoomed is not None:
                layout_label = f"ZOOMED: [{state.zoomed_index + 1}] {zoomed.name}"
        parts = [
            f"logflow v{VERSION}",
            f"{state.pane_count} sources",
            layout_label,
            "[q]uit [l]ayout [z]oom [/]search [?]global [F1]help",
            time.strftime("%H:%M:%S"),
        ]
        return Text(" │ ".join(parts), no_wrap=True, overflow="ellipsis")

    def _render_status(self) -> Text:
        state = self.state
        if state.search_mode != SearchMode.NONE:
            label = "Search" if state.search_mode == SearchMode.LOCAL else "Global"
            return Text(f"{label}: /{state.search_query}█", no_wrap=True, overflow="ellipsis")

        parts: List[str] = []
        active = sum(1 for pane in state.panes if pane.active)
        parts.append(f"{active} active sources")
        parts.append(f"Filter: {state.filter_level.value}")
        search = state.search
        if search.scope != SearchMode.NONE:
            label = "Search" if search.scope == SearchMode.LOCAL else "Global"
            position = f"{search.cursor + 1}/{len(search.results)}" if search.cursor >= 0 else f"{len(search.results)} matches"
            parts.append(f"{label}: /{search.committed_query} ({position})")
        pane = state.focused_pane()
        if pane is not None:
            parts.append(f"Pane: {state.focused_index + 1} ({pane.name})")
        parts.append("FOLLOW" if state.follow else "SCROLL")
        if state.paused:
            parts.append("PAUSED")
        dropped = self.session.aggregator.stats.dropped
        if dropped:
            parts.append(f"dropped {dropped}")
        return Text(" │ ".join(parts), no_wrap=True, overflow="ellipsis")

    def _render_panes(self, width: int, height: int) -> RenderableType:
        state = self.state
        if state.show_help:
            return self._render_help()
        slots = state.layout_slots(width, height)
        if not slots:
            return Text(
                f"Waiting for sources on {self.config.socket_path}\n\n"
                f"  some-command | logflow --source NAME",
                style="grey50",
                justify="center",
            )
        rows: List[RenderableType] = []
        for _, row_slots in groupby(slots, key=lambda slot: slot.y):
            row_slots = list(row_slots)
            grid = Table.grid(padding=0)
            for slot in row_slots:
                grid.add_column(width=slot.width, no_wrap=True)
            grid.add_row(*[self._render_slot(slot) for slot in row_slots])
            rows.append(grid)
        return Group(*rows)

    def _render_slot(self, slot: PaneSlot) -> RenderableType:
        if slot.blank:
            return Text("")
        pane = self.state.panes.at(slot.pane_index)
        if pane is None:
            return Text("")
        return self._render_pane(pane, slot)

    def _render_pane(self, pane: Pane, slot: PaneSlot) -> Panel:
        state = self.state
        window = pane.window(state.filter_level, slot.rows, state.follow)
        highlight = state.search.committed_query if pane.last_search_term == state.search.committed_query else ""
        body = Text(no_wrap=True, overflow="ellipsis")
        for idx, entry in enumerate(window.entries):
            if idx:
                body.append("\n")
            body.append_text(format_entry(entry, highlight))

        index = state.panes.index_of(pane.name)
        status = "●●●" if pane.active else "○○○ exited"
        title = Text(f"[{index + 1}] {status} {pane.name} - {format_count(pane.count())}")
        subtitle: Optional[Text] = None
        if not window.at_bottom:
            subtitle = Text(f"{window.offset + window.rows}/{window.total}")
        return Panel(
            body,
            title=title,
            title_align="left",
            subtitle=subtitle,
            subtitle_align="right",
            border_style=FOCUSED_BORDER if pane.focused else UNFOCUSED_BORDER,
            height=slot.height,
            padding=(0, 1),
            style="" if pane.active else "dim",
        )

    def _render_help(self) -> Panel:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold cyan", no_wrap=True)
        table.add_column()
        for section, rows in HELP_SECTIONS:
            table.add_row(Text(section, style="bold"), "")
            for keys, description in rows:
                table.add_row(keys, description)
            table.add_row("", "")
        return Panel(table, title="Help (F1 or Esc to close)", border_style=FOCUSED_BORDER)
