"""Editor argv construction and launch error reporting."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazydiff.editor import editor_command, launch_editor


class EditorCommandTests(unittest.TestCase):
    target = Path("/repo/src/main.py")

    def test_vi_family_gets_line_and_column(self) -> None:
        self.assertEqual(
            editor_command(["nvim"], self.target, 12, 4),
            ["nvim", "+call cursor(12, 5)", "/repo/src/main.py"],
        )

    def test_editor_specific_line_column_forms(self) -> None:
        self.assertEqual(editor_command(["nano"], self.target, 3, 0), ["nano", "+3,1", "/repo/src/main.py"])
        self.assertEqual(editor_command(["emacs", "-nw"], self.target, 3, 1), ["emacs", "-nw", "+3:2", "/repo/src/main.py"])
        self.assertEqual(editor_command(["hx"], self.target, 3, 1), ["hx", "/repo/src/main.py:3:2"])
        self.assertEqual(editor_command(["code"], self.target, 3, 1), ["code", "--goto", "/repo/src/main.py:3:2"])

    def test_unknown_editor_gets_plus_line(self) -> None:
        self.assertEqual(editor_command(["/usr/bin/ed"], self.target, 7, 9), ["/usr/bin/ed", "+7", "/repo/src/main.py"])


class LaunchEditorTests(unittest.TestCase):
    def test_missing_editor_env_is_reported(self) -> None:
        with mock.patch.dict(os.environ, {"EDITOR": ""}):
            message = launch_editor(Path("/tmp"), 1, 0, lambda: None, lambda: None)

        self.assertIn("$EDITOR", message)

    def test_missing_target_is_reported(self) -> None:
        with mock.patch.dict(os.environ, {"EDITOR": "vim"}):
            message = launch_editor(Path("/nonexistent/lazydiff/file.txt"), 1, 0, lambda: None, lambda: None)

        self.assertIn("does not exist", message)

    def test_tui_mode_is_restored_around_editor_run(self) -> None:
        events: list[str] = []
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "f.txt"
            target.write_text("x\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {"EDITOR": "vim"}), mock.patch(
                "lazydiff.editor.subprocess.run"
            ) as run:
                message = launch_editor(
                    target, 2, 0, lambda: events.append("disable"), lambda: events.append("enable")
                )

        self.assertIsNone(message)
        self.assertEqual(events, ["disable", "enable"])
        run.assert_called_once_with(["vim", "+call cursor(2, 1)", str(target)], check=False)

    def test_os_error_becomes_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "f.txt"
            target.write_text("x\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {"EDITOR": "vim"}), mock.patch(
                "lazydiff.editor.subprocess.run", side_effect=OSError("boom")
            ):
                message = launch_editor(target, 1, 0, lambda: None, lambda: None)

        self.assertIn("boom", message)


if __name__ == "__main__":
    unittest.main()
