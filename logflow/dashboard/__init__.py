from .keymap import DEFAULT_KEYMAP, HELP_SECTIONS, KeyMap
from .layout import LayoutMode, PaneSlot, ViewMode, compute_layout, content_area, grid_dimensions, visible_window
from .pane import Pane, PaneRegistry, PaneWindow
from .state import Command, DashboardState, SearchMode, SearchResult

__all__ = [
    "Command",
    "DashboardState",
    "DEFAULT_KEYMAP",
    "HELP_SECTIONS",
    "KeyMap",
    "LayoutMode",
    "Pane",
    "PaneRegistry",
    "PaneSlot",
    "PaneWindow",
    "SearchMode",
    "SearchResult",
    "ViewMode",
    "compute_layout",
    "content_area",
    "grid_dimensions",
    "visible_window",
]
