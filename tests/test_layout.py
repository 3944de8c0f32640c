import unittest

from logflow.dashboard.layout import (
    LayoutMode,
    ViewMode,
    compute_layout,
    content_area,
    grid_dimensions,
    split_evenly,
    visible_window,
)
from logflow.dashboard.pane import Pane
from logflow.logs.parser import classify_line
from logflow.types import LogLevel


class TestLayoutMath(unittest.TestCase):
    def test_split_evenly_gives_remainder_to_first_parts(self):
        self.assertEqual(split_evenly(10, 3), [4, 3, 3])
        self.assertEqual(split_evenly(2, 3), [1, 1, 0])
        self.assertEqual(split_evenly(5, 0), [])

    def test_grid_dimensions(self):
        self.assertEqual(grid_dimensions(1), (1, 1))
        self.assertEqual(grid_dimensions(3), (2, 2))
        self.assertEqual(grid_dimensions(5), (3, 2))
        self.assertEqual(grid_dimensions(9), (3, 3))
        self.assertEqual(grid_dimensions(0), (0, 0))

    def test_content_area_subtracts_header_and_status(self):
        self.assertEqual(content_area(120, 40), (120, 38))
        self.assertEqual(content_area(10, 1), (10, 0))

    def test_horizontal_stacks_full_width_rows(self):
        slots = compute_layout(LayoutMode.HORIZONTAL, ViewMode.MULTI_PANE, 3, 0, 100, 31)
        self.assertEqual([s.height for s in slots], [11, 10, 10])
        self.assertEqual([s.y for s in slots], [0, 11, 21])
        self.assertTrue(all(s.width == 100 and s.x == 0 for s in slots))

    def test_vertical_places_side_by_side_columns(self):
        slots = compute_layout(LayoutMode.VERTICAL, ViewMode.MULTI_PANE, 2, 0, 81, 30)
        self.assertEqual([(s.x, s.width) for s in slots], [(0, 41), (41, 40)])
        self.assertTrue(all(s.height == 30 for s in slots))

    def test_grid_with_three_panes_leaves_one_blank_cell(self):
        slots = compute_layout(LayoutMode.AUTO_GRID, ViewMode.MULTI_PANE, 3, 0, 80, 24)
        self.assertEqual(len(slots), 4)
        self.assertEqual([s.pane_index for s in slots], [0, 1, 2, None])
        self.assertTrue(slots[3].blank)
        self.assertEqual({(s.width, s.height) for s in slots}, {(40, 12)})

    def test_zoomed_covers_content_area(self):
        slots = compute_layout(LayoutMode.AUTO_GRID, ViewMode.ZOOMED, 4, 2, 80, 22)
        self.assertEqual(len(slots), 1)
        self.assertEqual((slots[0].width, slots[0].height, slots[0].pane_index), (80, 22, 2))
        self.assertEqual(slots[0].rows, 20)

    def test_no_panes_no_slots(self):
        self.assertEqual(compute_layout(LayoutMode.VERTICAL, ViewMode.MULTI_PANE, 0, 0, 80, 24), [])


class TestVisibleWindow(unittest.TestCase):
    def test_follow_pins_to_tail(self):
        self.assertEqual(visible_window(100, 0, 10, True), (90, 100, 90))

    def test_short_history_starts_at_zero(self):
        self.assertEqual(visible_window(4, 0, 10, True), (0, 4, 0))

    def test_offset_is_clamped(self):
        self.assertEqual(visible_window(100, 500, 10, False), (90, 100, 90))
        self.assertEqual(visible_window(100, -3, 10, False), (0, 10, 0))
        self.assertEqual(visible_window(100, 40, 10, False), (40, 50, 40))

    def test_pane_window_applies_filter(self):
        pane = Pane("api", capacity=100)
        for n in range(20):
            pane.add_entry(classify_line(f"ERROR {n}" if n % 2 else f"info {n}", "api"))
        window = pane.window(LogLevel.ERROR, rows=4, follow=True)
        self.assertEqual(window.total, 10)
        self.assertEqual([e.content for e in window.entries], ["ERROR 13", "ERROR 15", "ERROR 17", "ERROR 19"])
        self.assertTrue(window.at_bottom)
        self.assertEqual(pane.scroll_offset, 6)

    def test_pane_scroll_is_bounded(self):
        pane = Pane("api", capacity=100)
        for n in range(15):
            pane.add_entry(classify_line(f"line {n}", "api"))
        pane.window(LogLevel.DEBUG, rows=5, follow=False)
        pane.scroll(100, LogLevel.DEBUG)
        self.assertEqual(pane.scroll_offset, 10)
        pane.scroll(-100, LogLevel.DEBUG)
        self.assertEqual(pane.scroll_offset, 0)


if __name__ == "__main__":
    unittest.main()
