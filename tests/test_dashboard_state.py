import unittest

from logflow.dashboard.layout import LayoutMode, ViewMode
from logflow.dashboard.state import Command, DashboardState, SearchMode
from logflow.logs.parser import classify_line
from logflow.types import LogLevel, SourceEvent, SourceInfo


def make_state(*sources, lines=None):
    state = DashboardState(buffer_size=50)
    items = [SourceEvent(SourceInfo(name, "pipe")) for name in sources]
    for source, text in lines or []:
        items.append(classify_line(text, source))
    state.ingest(items)
    return state


def press(state, keys):
    result = None
    for key in keys:
        result = state.handle_key(key)
    return result


class TestDashboardDefaults(unittest.TestCase):
    def test_initial_state(self):
        state = DashboardState()
        self.assertEqual(state.layout, LayoutMode.VERTICAL)
        self.assertEqual(state.view, ViewMode.MULTI_PANE)
        self.assertEqual(state.filter_level, LogLevel.DEBUG)
        self.assertTrue(state.follow)
        self.assertFalse(state.paused)
        self.assertEqual(state.search_mode, SearchMode.NONE)
        self.assertIsNone(state.focused_pane())

    def test_keys_without_panes_are_harmless(self):
        state = DashboardState()
        for key in ["tab", "shift+tab", "z", "1", "j", "k", "c", "n", "up", "end"]:
            self.assertIsNone(state.handle_key(key))
        self.assertEqual(state.view, ViewMode.MULTI_PANE)
        self.assertIsNone(state.handle_key("x"))


class TestNavigation(unittest.TestCase):
    def test_quit(self):
        self.assertEqual(DashboardState().handle_key("q"), Command.QUIT)
        self.assertEqual(DashboardState().handle_key("ctrl+c"), Command.QUIT)

    def test_cycle_layout(self):
        state = DashboardState()
        seen = []
        for _ in range(3):
            state.handle_key("l")
            seen.append(state.layout)
        self.assertEqual(seen, [LayoutMode.AUTO_GRID, LayoutMode.HORIZONTAL, LayoutMode.VERTICAL])

    def test_tab_wraps_around(self):
        state = make_state("a", "b", "c")
        press(state, ["tab", "tab", "tab"])
        self.assertEqual(state.focused_index, 0)
        state.handle_key("shift+tab")
        self.assertEqual(state.focused_index, 2)
        self.assertTrue(state.focused_pane().focused)
        self.assertFalse(state.panes.at(0).focused)

    def test_direct_access(self):
        state = make_state("a", "b", "c")
        state.handle_key("2")
        self.assertEqual(state.focused_pane().name, "b")
        state.handle_key("9")
        self.assertEqual(state.focused_pane().name, "b")

    def test_zoom_captures_focus_and_digits_retarget(self):
        state = make_state("a", "b", "c")
        press(state, ["2", "z"])
        self.assertEqual(state.view, ViewMode.ZOOMED)
        self.assertEqual(state.zoomed_index, 1)
        state.handle_key("3")
        self.assertEqual(state.zoomed_index, 2)
        state.handle_key("Z")
        self.assertEqual(state.view, ViewMode.MULTI_PANE)

    def test_zoom_without_panes_is_noop(self):
        state = DashboardState()
        state.handle_key("z")
        self.assertEqual(state.view, ViewMode.MULTI_PANE)

    def test_escape_leaves_zoom(self):
        state = make_state("a")
        press(state, ["z", "escape"])
        self.assertEqual(state.view, ViewMode.MULTI_PANE)

    def test_vim_keys_depend_on_layout(self):
        state = make_state("a", "b", "c")
        state.handle_key("h")  # vertical: previous pane
        self.assertEqual(state.focused_index, 2)

        state.layout = LayoutMode.HORIZONTAL
        state.handle_key("j")
        self.assertEqual(state.focused_index, 0)
        state.handle_key("k")
        self.assertEqual(state.focused_index, 2)

        state.layout = LayoutMode.AUTO_GRID
        state.handle_key("h")
        self.assertEqual(state.focused_index, 2)

    def test_new_panes_do_not_steal_focus(self):
        state = make_state("a", "b")
        state.handle_key("2")
        state.ingest([classify_line("hello", "c")])
        self.assertEqual(state.focused_pane().name, "b")
        self.assertEqual(state.panes.names(), ["a", "b", "c"])


class TestControls(unittest.TestCase):
    def test_filters(self):
        state = DashboardState()
        expected = {"e": LogLevel.ERROR, "w": LogLevel.WARN, "i": LogLevel.INFO, "a": LogLevel.DEBUG}
        for key, level in expected.items():
            state.handle_key(key)
            self.assertEqual(state.filter_level, level)

    def test_pause_discards_arrivals(self):
        state = make_state("a", lines=[("a", "before")])
        state.handle_key(" ")
        self.assertTrue(state.paused)
        state.ingest([classify_line("during", "a")])
        state.handle_key(" ")
        state.ingest([classify_line("after", "a")])
        self.assertEqual([e.content for e in state.focused_pane().buffer.get_all()], ["before", "after"])

    def test_follow_toggle_and_scroll(self):
        state = make_state("a", lines=[("a", f"line {n}") for n in range(30)])
        state.focused_pane().window(LogLevel.DEBUG, rows=10, follow=True)
        state.handle_key("f")
        self.assertFalse(state.follow)
        state.handle_key("f")
        self.assertTrue(state.follow)

        state.handle_key("up")
        self.assertFalse(state.follow)
        self.assertEqual(state.focused_pane().scroll_offset, 19)
        state.handle_key("home")
        self.assertEqual(state.focused_pane().scroll_offset, 0)
        state.handle_key("pagedown")
        self.assertEqual(state.focused_pane().scroll_offset, 10)
        state.handle_key("end")
        self.assertTrue(state.follow)
        self.assertEqual(state.focused_pane().scroll_offset, 20)

    def test_clear_focused_pane(self):
        state = make_state("a", "b", lines=[("a", "x"), ("b", "y")])
        state.handle_key("c")
        self.assertEqual(state.panes.get("a").count(), 0)
        self.assertEqual(state.panes.get("b").count(), 1)

    def test_export_command(self):
        state = make_state("a")
        self.assertEqual(state.handle_key("x"), Command.EXPORT)

    def test_help_toggle(self):
        state = DashboardState()
        state.handle_key("f1")
        self.assertTrue(state.show_help)
        state.handle_key("escape")
        self.assertFalse(state.show_help)


class TestSearch(unittest.TestCase):
    def setUp(self):
        self.state = make_state(
            "api",
            "db",
            lines=[
                ("api", "user created"),
                ("db", "insert into users"),
                ("api", "health ok"),
                ("api", "USER deleted"),
            ],
        )

    def test_local_search_covers_focused_pane(self):
        press(self.state, ["/", "u", "s", "e", "r"])
        self.assertEqual(self.state.search_mode, SearchMode.LOCAL)
        self.assertEqual(self.state.search_query, "user")
        self.state.handle_key("enter")
        self.assertEqual(self.state.search_mode, SearchMode.NONE)
        results = self.state.search_results
        self.assertEqual([r.entry.content for r in results], ["user created", "USER deleted"])
        self.assertEqual([r.index for r in results], [0, 2])
        self.assertEqual(self.state.panes.get("api").last_search_term, "user")

    def test_global_search_orders_by_pane_then_time(self):
        press(self.state, ["?", "u", "s", "e", "r", "enter"])
        results = self.state.search_results
        self.assertEqual([r.pane_name for r in results], ["api", "api", "db"])

    def test_search_mode_swallows_command_keys(self):
        press(self.state, ["/", "q", "z", "backspace", "l"])
        self.assertEqual(self.state.search_query, "ql")
        self.assertEqual(self.state.view, ViewMode.MULTI_PANE)
        self.assertEqual(self.state.layout, LayoutMode.VERTICAL)
        self.assertEqual(self.state.handle_key("ctrl+c"), Command.QUIT)

    def test_escape_aborts_search(self):
        press(self.state, ["/", "u", "escape"])
        self.assertEqual(self.state.search_mode, SearchMode.NONE)
        self.assertEqual(self.state.search_query, "")
        self.assertEqual(self.state.search_results, [])

    def test_next_result_moves_focus(self):
        press(self.state, ["?", "i", "n", "s", "e", "r", "t", "enter"])
        self.assertEqual(self.state.focused_pane().name, "api")
        self.state.handle_key("n")
        self.assertEqual(self.state.focused_pane().name, "db")
        self.assertFalse(self.state.follow)

    def test_escape_clears_results(self):
        press(self.state, ["/", "u", "enter"])
        self.assertTrue(self.state.search_results)
        self.state.handle_key("escape")
        self.assertEqual(self.state.search_results, [])

    def test_empty_query_matches_every_entry_in_scope(self):
        press(self.state, ["/", "enter"])
        self.assertEqual([r.entry.content for r in self.state.search_results], ["user created", "health ok", "USER deleted"])
        press(self.state, ["?", "enter"])
        self.assertEqual(len(self.state.search_results), 4)
        self.state.handle_key("escape")
        self.assertEqual(self.state.search_results, [])


if __name__ == "__main__":
    unittest.main()
