"""
Pure layout math for the dashboard.

Everything here is a function of the dashboard state and the terminal size, so
the renderer can stay a thin painter and the arithmetic can be tested without a
terminal.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


HEADER_ROWS = 1
STATUS_ROWS = 1
PANE_CHROME_ROWS = 2  # top and bottom border


class LayoutMode(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    AUTO_GRID = "grid"

    def next(self) -> "LayoutMode":
        order = [LayoutMode.HORIZONTAL, LayoutMode.VERTICAL, LayoutMode.AUTO_GRID]
        return order[(order.index(self) + 1) % len(order)]

    @property
    def label(self) -> str:
        return {"horizontal": "Horizontal", "vertical": "Vertical", "grid": "Grid"}[self.value]


class ViewMode(str, Enum):
    MULTI_PANE = "multi"
    ZOOMED = "zoomed"


@dataclass(frozen=True)
class PaneSlot:
    x: int
    y: int
    width: int
    height: int
    pane_index: Optional[int]

    @property
    def blank(self) -> bool:
        return self.pane_index is None

    @property
    def rows(self) -> int:
        return max(1, self.height - PANE_CHROME_ROWS)


def split_evenly(total: int, parts: int) -> List[int]:
    """Even split where the first ``total % parts`` shares get one extra unit."""
    if parts <= 0:
        return []
    base, remainder = divmod(max(0, total), parts)
    return [base + 1 if idx < remainder else base for idx in range(parts)]


def grid_dimensions(pane_count: int) -> Tuple[int, int]:
    if pane_count <= 0:
        return (0, 0)
    columns = int(math.ceil(math.sqrt(pane_count)))
    rows = int(math.ceil(pane_count / columns))
    return (columns, rows)


def content_area(width: int, height: int) -> Tuple[int, int]:
    return (max(0, width), max(0, height - HEADER_ROWS - STATUS_ROWS))


def _offsets(sizes: List[int]) -> List[int]:
    out = []
    position = 0
    for size in sizes:
        out.append(position)
        position += size
    return out


def compute_layout(
    layout: LayoutMode,
    view: ViewMode,
    pane_count: int,
    zoomed_index: int,
    width: int,
    height: int,
) -> List[PaneSlot]:
    """Slots for the content area of ``width`` x ``height`` cells.

    Blank grid cells are returned with ``pane_index=None`` so the renderer can
    keep the grid rectangular.
    """
    if pane_count <= 0 or width <= 0 or height <= 0:
        return []

    if view == ViewMode.ZOOMED:
        index = zoomed_index if 0 <= zoomed_index < pane_count else 0
        return [PaneSlot(0, 0, width, height, index)]

    if layout == LayoutMode.HORIZONTAL:
        heights = split_evenly(height, pane_count)
        return [
            PaneSlot(0, y, width, h, idx)
            for idx, (y, h) in enumerate(zip(_offsets(heights), heights))
        ]

    if layout == LayoutMode.VERTICAL:
        widths = split_evenly(width, pane_count)
        return [
            PaneSlot(x, 0, w, height, idx)
            for idx, (x, w) in enumerate(zip(_offsets(widths), widths))
        ]

    columns, rows = grid_dimensions(pane_count)
    widths = split_evenly(width, columns)
    heights = split_evenly(height, rows)
    slots: List[PaneSlot] = []
    for row, (y, h) in enumerate(zip(_offsets(heights), heights)):
        for col, (x, w) in enumerate(zip(_offsets(widths), widths)):
            index = row * columns + col
            slots.append(PaneSlot(x, y, w, h, index if index < pane_count else None))
    return slots


def visible_window(total: int, offset: int, rows: int, follow: bool) -> Tuple[int, int, int]:
    """Return ``(start, end, offset)`` of the rows to show out of ``total`` entries."""
    rows = max(1, rows)
    limit = max(0, total - rows)
    if follow and total > rows:
        offset = total - rows
    else:
        offset = min(max(0, offset), limit)
    return (offset, min(total, offset + rows), offset)
