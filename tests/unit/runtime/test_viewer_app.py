"""Key-driven behavior of ``DiffViewerApp`` without a real terminal.

Renders complete only when ``flush_completed_renders`` runs, mirroring the
draw-then-report order of the main loop.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from lazydiff.app import DiffViewerApp
from lazydiff.config import ViewConfig
from lazydiff.payload import ChangedFile, FileStatus, Row, Side
from lazydiff.screen import FOCUS_DIFF, FOCUS_TREE
from lazydiff.ui_theme import HIGHLIGHT_MODE_DIFFTASTIC, PLAIN_THEME


def _changed(path: str, row_count: int, hunk_starts=()) -> ChangedFile:
    rows = tuple(Row(left=Side(f"row {idx}"), right=Side(f"row {idx}!")) for idx in range(row_count))
    return ChangedFile(
        path=path,
        status=FileStatus.MODIFIED,
        rows=rows,
        hunk_starts=tuple(hunk_starts),
        aligned_lines=tuple((idx, idx) for idx in range(row_count)),
    )


class ViewerAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "config.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _app(self, files, **config_changes) -> DiffViewerApp:
        config = ViewConfig(highlight_mode=HIGHLIGHT_MODE_DIFFTASTIC).with_overrides(**config_changes)
        app = DiffViewerApp(
            files,
            config,
            PLAIN_THEME,
            Path(self._tmp.name),
            screen_size=lambda: (100, 24),
            config_path=self.config_path,
        )
        app.render_tree()
        app.navigator.open()
        app.flush_completed_renders()
        return app

    def _press(self, app: DiffViewerApp, *keys: str) -> None:
        for key in keys:
            app.handle_key(key)
            app.flush_completed_renders()

    def test_open_renders_first_file_and_places_cursor_at_top(self) -> None:
        app = self._app([_changed("b.txt", 10), _changed("a.txt", 10)])

        self.assertEqual(app.state.file_index, 1)
        self.assertEqual((app.state.cursor_line, app.state.cursor_column), (1, 0))
        self.assertEqual(app.state.right_lines[0].text, "row 0!")
        self.assertEqual(app.state.completed_renders, [])

    def test_multi_key_hunk_bindings(self) -> None:
        app = self._app([_changed("a.txt", 40, [4, 14, 29])])

        self._press(app, "]", "c")
        self.assertEqual(app.state.cursor_line, 5)
        self._press(app, "G")
        self.assertEqual(app.state.cursor_line, 30)
        self._press(app, "[", "c")
        self.assertEqual(app.state.cursor_line, 15)
        self._press(app, "g", "g")
        self.assertEqual(app.state.cursor_line, 5)

    def test_hunk_wrap_switches_file_after_render_completes(self) -> None:
        app = self._app([_changed("a.txt", 40, [4, 29]), _changed("b.txt", 20, [9])])
        self._press(app, "G")

        app.handle_key("]")
        app.handle_key("c")
        self.assertEqual(app.state.file_index, 1)
        self.assertEqual(app.state.cursor_line, 1)

        self.assertTrue(app.flush_completed_renders())
        self.assertEqual(app.state.cursor_line, 10)

    def test_motion_keys_move_and_clamp_cursor(self) -> None:
        app = self._app([_changed("a.txt", 5)])

        self._press(app, "j", "DOWN")
        self.assertEqual(app.state.cursor_line, 3)
        self._press(app, "k", "k", "k", "k")
        self.assertEqual(app.state.cursor_line, 1)
        self._press(app, "CTRL_D")
        self.assertEqual(app.state.cursor_line, 5)

    def test_side_and_column_keys(self) -> None:
        app = self._app([_changed("a.txt", 5)])

        self._press(app, "h")
        self.assertEqual(app.state.active_side, "left")
        self._press(app, "RIGHT", "RIGHT", "LEFT")
        self.assertEqual(app.state.cursor_column, 1)
        self._press(app, "l")
        self.assertEqual(app.state.active_side, "right")

    def test_tab_toggles_focus_and_enter_opens_tree_file(self) -> None:
        app = self._app([_changed("src/a.txt", 3), _changed("src/b.txt", 3), _changed("top.txt", 3)])

        self._press(app, "TAB")
        self.assertEqual(app.state.focus, FOCUS_TREE)
        self._press(app, "j", "ENTER")
        self.assertEqual(app.state.file_index, 1)
        self._press(app, "TAB")
        self.assertEqual(app.state.focus, FOCUS_DIFF)

    def test_enter_on_directory_collapses_it(self) -> None:
        app = self._app([_changed("src/a.txt", 3), _changed("top.txt", 3)])
        src_id = app.navigator.tree.root.children[0]

        self._press(app, "TAB", "k", "k", "ENTER")

        self.assertFalse(app.navigator.tree.node(src_id).expanded)
        self.assertEqual(len(app.state.listing.lines), 3 + 2)

    def test_collapse_all_and_expand_all_keys(self) -> None:
        app = self._app([_changed("app/a.txt", 3), _changed("lib/b.txt", 3)])
        tree = app.navigator.tree
        dir_ids = list(tree.root.children)

        self._press(app, "z", "M")
        self.assertEqual([tree.node(node_id).expanded for node_id in dir_ids], [False, False])
        self.assertEqual(len(app.state.listing.lines), 3 + 2)

        self._press(app, "z", "R")
        self.assertEqual([tree.node(node_id).expanded for node_id in dir_ids], [True, True])
        self.assertEqual(len(app.state.listing.lines), 3 + 4)

    def test_keymap_for_unknown_action_is_ignored(self) -> None:
        keymaps = dict(ViewConfig().keymaps)
        keymaps["launch_rockets"] = "x"
        app = self._app([_changed("a.txt", 3)], keymaps=keymaps)

        self.assertFalse(app.handle_key("x"))
        self.assertTrue(app.state.running)

    def test_completed_renders_without_pending_work_are_discarded(self) -> None:
        app = self._app([_changed("a.txt", 3)])
        app.state.completed_renders.append(999)

        self.assertFalse(app.flush_completed_renders())
        self.assertEqual(app.state.completed_renders, [])

    def test_toggle_hunk_wrap_persists_preference(self) -> None:
        app = self._app([_changed("a.txt", 3)])

        self._press(app, "W")

        self.assertFalse(app.navigator.state.hunk_wrap_across_files)
        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["hunk_wrap_across_files"], False)

    def test_tree_width_keys_persist_width(self) -> None:
        app = self._app([_changed("a.txt", 3)])

        self._press(app, ">")

        self.assertEqual(app.state.tree_width, 44)
        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["tree"]["width"], 44)

    def test_goto_file_without_terminal_sets_status(self) -> None:
        app = self._app([_changed("a.txt", 3)])

        self._press(app, "g")
        self.assertEqual(app.keys.pending, ("g",))
        app.handle_key("f")

        self.assertIn("Cannot open file", app.state.status_message)

    def test_escape_clears_pending_sequence(self) -> None:
        app = self._app([_changed("a.txt", 3)])

        self._press(app, "]", "ESC")

        self.assertEqual(app.keys.pending, ())

    def test_close_stops_loop(self) -> None:
        app = self._app([_changed("a.txt", 3)])

        self._press(app, "q")

        self.assertFalse(app.state.running)

    def test_custom_keymap_rebinds_action(self) -> None:
        keymaps = dict(ViewConfig().keymaps)
        keymaps["next_hunk"] = "n"
        app = self._app([_changed("a.txt", 20, [4, 9])], keymaps=keymaps)

        self._press(app, "n")

        self.assertEqual(app.state.cursor_line, 5)


if __name__ == "__main__":
    unittest.main()
