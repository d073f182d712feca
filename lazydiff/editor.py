"""Editor launch helper for jumping from a diff row to the source file.

Runs ``$EDITOR`` at a line (and column where the editor accepts one) while
temporarily leaving raw/alternate-screen TUI mode. Returns an error message
string instead of raising for UI-friendly handling.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

_VI_FAMILY = {"vi", "vim", "nvim", "gvim", "mvim"}
_PLUS_LINE_COLUMN = {"nano", "micro"}
_EMACS_FAMILY = {"emacs", "emacsclient"}
_PATH_LINE_COLUMN = {"hx", "helix", "kak"}


def editor_command(editor: list[str], target: Path, line: int, column: int) -> list[str]:
    """Return argv opening ``target`` at 1-based ``line`` and 0-based ``column``."""
    name = Path(editor[0]).name
    one_based_column = column + 1
    if name in _VI_FAMILY:
        return [*editor, f"+call cursor({line}, {one_based_column})", str(target)]
    if name in _PLUS_LINE_COLUMN:
        return [*editor, f"+{line},{one_based_column}", str(target)]
    if name in _EMACS_FAMILY:
        return [*editor, f"+{line}:{one_based_column}", str(target)]
    if name in _PATH_LINE_COLUMN:
        return [*editor, f"{target}:{line}:{one_based_column}"]
    if name in {"code", "codium", "subl"}:
        flag = ["--goto"] if name != "subl" else []
        return [*editor, *flag, f"{target}:{line}:{one_based_column}"]
    return [*editor, f"+{line}", str(target)]


def launch_editor(
    target: Path,
    line: int,
    column: int,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
) -> str | None:
    editor_env = os.environ.get("EDITOR", "").strip()
    if not editor_env:
        return "Cannot open file: $EDITOR is not set."
    editor = shlex.split(editor_env)
    if not editor:
        return "Cannot open file: $EDITOR is empty."
    if not target.exists():
        return f"Cannot open file: {target} does not exist."

    cmd = editor_command(editor, target, line, column)
    logger.debug("launching editor: %s", cmd)
    disable_tui_mode()
    try:
        subprocess.run(cmd, check=False)
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    finally:
        enable_tui_mode()
    return None
