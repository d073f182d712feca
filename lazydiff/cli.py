"""Command-line front door for lazydiff.

Parses CLI options, loads and validates the diff payload, then either renders
a static side-by-side view or dispatches into the interactive viewer.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path

from .alignment import AlignmentModel
from .ansi import fit_ansi_line
from .config import CONFIG_PATH, ViewConfig, load_view_config
from .logging_config import setup_logging
from .payload import LEFT, RIGHT, ChangedFile, InvalidDiffPayload, load_payload
from .screen import DIVIDER, gutter_text, gutter_width
from .source_pane import build_display_lines, paint_display_line, syntax_foregrounds
from .tree_model import build_diff_tree, build_tree_listing, first_file
from .ui_theme import HIGHLIGHT_MODE_SYNTAX, HIGHLIGHT_MODES, PLAIN_THEME, DiffTheme, build_theme

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_render_width() -> int:
    """Resolve default render width from current terminal size."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.columns)


def _file_index_for_path(files: list[ChangedFile], path: str) -> int:
    normalized = path[2:] if path.startswith("./") else path
    for idx, changed in enumerate(files):
        if changed.path == normalized:
            return idx
    raise SystemExit(f"File not in diff: {path}")


def render_file_view(
    changed: ChangedFile,
    max_cols: int,
    config: ViewConfig,
    theme: DiffTheme,
) -> list[str]:
    """Render one file as side-by-side rows ``max_cols`` wide."""
    left_lines, right_lines = build_display_lines(changed)
    gutter = gutter_width(changed)
    pane_width = max(2, (max_cols - 1) // 2)
    text_width = max(1, pane_width - gutter)
    use_syntax = config.highlight_mode == HIGHLIGHT_MODE_SYNTAX and bool(theme.reset)
    left_colors = syntax_foregrounds(left_lines, changed.language, changed.path, config.style) if use_syntax else None
    right_colors = syntax_foregrounds(right_lines, changed.language, changed.path, config.style) if use_syntax else None
    divider = f"{theme.divider}{DIVIDER}{theme.reset}"

    rows: list[str] = []
    for row in range(max(len(left_lines), len(right_lines))):
        cells: list[str] = []
        for side, lines, colors in ((LEFT, left_lines, left_colors), (RIGHT, right_lines, right_colors)):
            if row >= len(lines):
                cells.append(" " * pane_width)
                continue
            painted = paint_display_line(
                lines[row],
                text_width,
                theme=theme,
                highlight_mode=config.highlight_mode,
                syntax_colors=colors[row] if colors is not None and row < len(colors) else None,
            )
            cells.append(gutter_text(changed, row, side, gutter) + painted)
        rows.append(f"{cells[0]}{divider}{cells[1]}")
    return rows


def render_text(
    files: list[ChangedFile],
    max_cols: int,
    config: ViewConfig,
    theme: DiffTheme,
    file_index: int | None = None,
) -> str:
    """Render the tree listing followed by one file for ``--render``."""
    if not files:
        return "No changes found\n"
    tree = build_diff_tree(files)
    if file_index is None:
        file_index = first_file(tree)
    listing = build_tree_listing(
        tree,
        file_index,
        min(config.tree.width, max_cols),
        dir_open_icon=config.tree.dir_open_icon,
        dir_closed_icon=config.tree.dir_closed_icon,
        theme=theme,
    )
    out = [fit_ansi_line(line, max_cols).rstrip() for line in listing.lines]
    if file_index is not None:
        changed = files[file_index]
        hunks = AlignmentModel(files).hunk_positions(file_index)
        out.append("")
        out.append(f"{changed.path} [{changed.status.value}] {len(hunks)} hunk(s)")
        out.extend(render_file_view(changed, max_cols, config, theme))
    return "\n".join(out) + "\n"


def _open_tty_stdin() -> int:
    """Return a tty file descriptor for keyboard input."""
    if sys.stdin.isatty():
        return sys.stdin.fileno()
    try:
        return os.open("/dev/tty", os.O_RDONLY)
    except OSError as exc:
        raise SystemExit(f"Cannot open terminal for input: {exc}") from exc


def run_viewer(
    files: list[ChangedFile],
    config: ViewConfig,
    theme: DiffTheme,
    root: Path,
    config_path: Path,
    file_index: int | None = None,
) -> None:
    """Launch the interactive viewer on a validated payload."""
    if not files:
        sys.stdout.write("No changes found\n")
        return
    from .app import DiffViewerApp
    from .terminal import TerminalController

    terminal = TerminalController(_open_tty_stdin(), sys.stdout.fileno())
    app = DiffViewerApp(files, config, theme, root, terminal=terminal, config_path=config_path)
    app.run(initial_file=file_index)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and open the diff viewer on a JSON payload."""
    parser = argparse.ArgumentParser(description="Browse a side-by-side diff of a set of changed files.")
    parser.add_argument("payload", help="Path to the JSON diff payload, or '-' for stdin.")
    parser.add_argument("--render", action="store_true", help="Print the tree and one file, then exit.")
    parser.add_argument("--file", metavar="PATH", help="File to show first (relative path in the diff).")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--style", default=None, help="Pygments style name for syntax colors.")
    parser.add_argument("--highlight-mode", choices=HIGHLIGHT_MODES, default=None, help="Diff highlight mode.")
    parser.add_argument(
        "--no-wrap-hunks",
        action="store_true",
        help="Keep hunk navigation inside the current file.",
    )
    parser.add_argument("--root", type=Path, default=None, help="Directory paths are relative to (default: cwd).")
    parser.add_argument("--config", type=Path, default=None, help=f"Config file (default: {CONFIG_PATH}).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write log records to this file.")
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)
    config_path = args.config or CONFIG_PATH

    try:
        files = load_payload(args.payload)
    except InvalidDiffPayload as exc:
        raise SystemExit(f"Invalid diff payload: {exc}") from exc
    except OSError as exc:
        raise SystemExit(f"Cannot read payload: {exc}") from exc

    config = load_view_config(config_path)
    overrides: dict[str, object] = {}
    if args.style:
        overrides["style"] = args.style
    if args.highlight_mode:
        overrides["highlight_mode"] = args.highlight_mode
    if args.no_wrap_hunks:
        overrides["hunk_wrap_across_files"] = False
    if overrides:
        config = config.with_overrides(**overrides)
    theme = PLAIN_THEME if args.no_color else build_theme(config.highlights)

    file_index = _file_index_for_path(files, args.file) if args.file else None

    if args.render or not sys.stdout.isatty():
        max_cols = args.max_cols if args.max_cols is not None else _default_render_width()
        sys.stdout.write(render_text(files, max_cols, config, theme, file_index=file_index))
        return

    logger.debug("opening viewer on %d files", len(files))
    run_viewer(files, config, theme, args.root or Path.cwd(), config_path, file_index=file_index)


if __name__ == "__main__":
    main()
