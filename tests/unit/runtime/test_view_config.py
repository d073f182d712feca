"""Tests for config persistence and coercion into ``ViewConfig``.

Malformed config data must fall back to defaults rather than break a session.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazydiff import config
from lazydiff.ui_theme import HIGHLIGHT_MODE_DIFFTASTIC, HIGHLIGHT_MODE_SYNTAX


class ViewConfigLoadTests(unittest.TestCase):
    def test_missing_file_yields_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            loaded = config.load_view_config(Path(tmp) / "missing.json")

        self.assertTrue(loaded.hunk_wrap_across_files)
        self.assertEqual(loaded.highlight_mode, HIGHLIGHT_MODE_SYNTAX)
        self.assertEqual(loaded.keymaps["next_hunk"], "]c")
        self.assertEqual(loaded.tree.width, config.DEFAULT_TREE_WIDTH)

    def test_malformed_json_yields_empty_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{broken", encoding="utf-8")

            with self.assertLogs("lazydiff.config", level="WARNING"):
                self.assertEqual(config.load_config(path), {})

    def test_non_object_json_yields_empty_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("[1, 2]", encoding="utf-8")

            self.assertEqual(config.load_config(path), {})

    def test_valid_values_are_applied_and_invalid_ones_ignored(self) -> None:
        loaded = config.view_config_from_dict(
            {
                "hunk_wrap_across_files": False,
                "highlight_mode": HIGHLIGHT_MODE_DIFFTASTIC,
                "style": "  dracula ",
                "keymaps": {"next_hunk": "]h", "close": None, "unknown": "x", "goto_file": 3},
                "tree": {"width": 30, "icons": {"dir_open": "-", "dir_closed": 5}},
                "highlights": {"added": {"bg": "#112233"}, "nonsense": {"bg": "#000000"}},
            }
        )

        self.assertFalse(loaded.hunk_wrap_across_files)
        self.assertEqual(loaded.highlight_mode, HIGHLIGHT_MODE_DIFFTASTIC)
        self.assertEqual(loaded.style, "dracula")
        self.assertEqual(loaded.keymaps["next_hunk"], "]h")
        self.assertIsNone(loaded.keymaps["close"])
        self.assertEqual(loaded.keymaps["goto_file"], "gf")
        self.assertNotIn("unknown", loaded.keymaps)
        self.assertEqual((loaded.tree.width, loaded.tree.dir_open_icon, loaded.tree.dir_closed_icon), (30, "-", "▶"))
        self.assertEqual(dict(loaded.highlights), {"added": {"bg": "#112233"}})

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        loaded = config.view_config_from_dict(
            {"hunk_wrap_across_files": "no", "highlight_mode": "rainbow", "style": "", "tree": {"width": 3}}
        )

        self.assertTrue(loaded.hunk_wrap_across_files)
        self.assertEqual(loaded.highlight_mode, HIGHLIGHT_MODE_SYNTAX)
        self.assertEqual(loaded.style, "monokai")
        self.assertEqual(loaded.tree.width, config.DEFAULT_TREE_WIDTH)

    def test_bound_keys_skip_unbound_actions_and_keep_first_binding(self) -> None:
        loaded = config.view_config_from_dict({"keymaps": {"close": ""}})

        bindings = loaded.bound_keys()

        self.assertNotIn("q", bindings)
        self.assertEqual(bindings["]c"], "next_hunk")
        self.assertEqual(bindings["TAB"], "focus_tree")

    def test_with_overrides_ignores_none(self) -> None:
        loaded = config.ViewConfig().with_overrides(style="vim", highlight_mode=None)

        self.assertEqual(loaded.style, "vim")
        self.assertEqual(loaded.highlight_mode, HIGHLIGHT_MODE_SYNTAX)


class ViewConfigSaveTests(unittest.TestCase):
    def test_save_hunk_wrap_preserves_other_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.json"
            config.save_config({"style": "vim"}, path)

            config.save_hunk_wrap_across_files(False, path)

            saved = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(saved, {"style": "vim", "hunk_wrap_across_files": False})

    def test_save_tree_width_clamps_to_minimum(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            with mock.patch("lazydiff.config.CONFIG_PATH", path):
                config.save_tree_width(2)

                self.assertEqual(config.load_config()["tree"], {"width": config.MIN_TREE_WIDTH})
                self.assertEqual(config.load_view_config().tree.width, config.MIN_TREE_WIDTH)


if __name__ == "__main__":
    unittest.main()
