from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class KeyMap:
    """Canonical key names: printable characters as themselves, other keys by name."""

    quit: List[str] = field(default_factory=lambda: ["q", "ctrl+c"])
    help: List[str] = field(default_factory=lambda: ["f1"])

    next_pane: List[str] = field(default_factory=lambda: ["tab"])
    prev_pane: List[str] = field(default_factory=lambda: ["shift+tab"])
    direct_access: List[str] = field(default_factory=lambda: [str(n) for n in range(1, 10)])

    cycle_layout: List[str] = field(default_factory=lambda: ["l"])
    zoom: List[str] = field(default_factory=lambda: ["z"])
    zoom_out: List[str] = field(default_factory=lambda: ["Z", "escape"])

    search_local: List[str] = field(default_factory=lambda: ["/"])
    search_global: List[str] = field(default_factory=lambda: ["?"])
    next_result: List[str] = field(default_factory=lambda: ["n"])
    prev_result: List[str] = field(default_factory=lambda: ["N"])

    filter_error: List[str] = field(default_factory=lambda: ["e"])
    filter_warn: List[str] = field(default_factory=lambda: ["w"])
    filter_info: List[str] = field(default_factory=lambda: ["i"])
    filter_all: List[str] = field(default_factory=lambda: ["a"])

    pause: List[str] = field(default_factory=lambda: [" "])
    follow: List[str] = field(default_factory=lambda: ["f"])
    clear: List[str] = field(default_factory=lambda: ["c"])
    export: List[str] = field(default_factory=lambda: ["x"])

    scroll_up: List[str] = field(default_factory=lambda: ["up"])
    scroll_down: List[str] = field(default_factory=lambda: ["down"])
    page_up: List[str] = field(default_factory=lambda: ["pageup"])
    page_down: List[str] = field(default_factory=lambda: ["pagedown"])
    scroll_top: List[str] = field(default_factory=lambda: ["home"])
    scroll_bottom: List[str] = field(default_factory=lambda: ["end"])

    # Layout-dependent vim keys.
    vim_prev: List[str] = field(default_factory=lambda: ["h"])
    vim_down: List[str] = field(default_factory=lambda: ["j"])
    vim_up: List[str] = field(default_factory=lambda: ["k"])

    search_commit: List[str] = field(default_factory=lambda: ["enter"])
    search_abort: List[str] = field(default_factory=lambda: ["escape"])
    search_delete: List[str] = field(default_factory=lambda: ["backspace"])


DEFAULT_KEYMAP = KeyMap()


HELP_SECTIONS: List[Tuple[str, List[Tuple[str, str]]]] = [
    (
        "Navigation",
        [
            ("1-9", "Jump to pane"),
            ("Tab / Shift+Tab", "Cycle panes"),
            ("h/j/k", "Vim navigation (layout dependent)"),
            ("Up/Down PgUp/PgDn", "Scroll focused pane"),
            ("Home / End", "Oldest / latest (End resumes follow)"),
        ],
    ),
    (
        "Layout & View",
        [
            ("l", "Cycle layouts"),
            ("z", "Zoom into pane"),
            ("Z / Esc", "Zoom out"),
        ],
    ),
    (
        "Search & Filter",
        [
            ("/", "Search current pane"),
            ("?", "Search all panes"),
            ("n / N", "Next / previous match"),
            ("e/w/i/a", "Filter: error / warn / info / all"),
        ],
    ),
    (
        "Control",
        [
            ("Space", "Pause / resume"),
            ("f", "Toggle follow mode"),
            ("c", "Clear current pane"),
            ("x", "Export current pane"),
            ("F1", "Toggle this help"),
            ("q", "Quit"),
        ],
    ),
]
