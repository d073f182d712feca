"""Screen composition for the three-pane diff viewer.

Pure functions over ``ViewerState``: the runtime draws whatever rows these
return, which keeps layout testable without a terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .alignment import AlignmentModel
from .ansi import fit_ansi_line
from .payload import LEFT, RIGHT, ChangedFile
from .source_pane import DisplayLine, paint_display_line
from .tree_model import TREE_HEADER_LINES, TreeListing
from .ui_theme import DEFAULT_THEME, HIGHLIGHT_MODE_SYNTAX, DiffTheme

FOCUS_TREE = "tree"
FOCUS_DIFF = "diff"
MIN_PANE_WIDTH = 8
DIVIDER = "│"


@dataclass
class ViewerState:
    """Mutable UI state of the interactive session."""

    tree_width: int
    focus: str = FOCUS_DIFF
    active_side: str = RIGHT
    cursor_line: int = 1
    cursor_column: int = 0
    diff_start: int = 0
    text_x: int = 0
    tree_selected: int = TREE_HEADER_LINES
    tree_start: int = 0
    file_index: int | None = None
    left_lines: list[DisplayLine] = field(default_factory=list)
    right_lines: list[DisplayLine] = field(default_factory=list)
    left_colors: list[list[str] | None] = field(default_factory=list)
    right_colors: list[list[str] | None] = field(default_factory=list)
    listing: TreeListing | None = None
    status_message: str = ""
    completed_renders: list[int] = field(default_factory=list)
    running: bool = True

    @property
    def line_count(self) -> int:
        return max(len(self.left_lines), len(self.right_lines))


@dataclass(frozen=True)
class PaneLayout:
    tree_width: int
    pane_width: int
    content_rows: int


def compute_layout(total_width: int, total_height: int, tree_width: int) -> PaneLayout:
    """Split the screen into tree, left, and right panes plus a status row."""
    usable = max(1, total_width - 2)
    tree = max(1, min(tree_width, usable - 2 * MIN_PANE_WIDTH))
    pane = max(1, (usable - tree - 1) // 2)
    return PaneLayout(tree_width=tree, pane_width=pane, content_rows=max(1, total_height - 1))


def centered_scroll_start(target_line: int, line_count: int, visible_rows: int) -> int:
    """Return a scroll offset placing 1-based ``target_line`` a third from the top."""
    max_start = max(0, line_count - visible_rows)
    return max(0, min(max_start, target_line - 1 - visible_rows // 3))


def gutter_text(changed: ChangedFile | None, row: int, side: str, width: int) -> str:
    if changed is None or width <= 0 or row >= len(changed.aligned_lines):
        return " " * width
    source_line = changed.aligned_lines[row][0 if side == LEFT else 1]
    if source_line is None:
        return " " * width
    return f"{source_line + 1:>{width - 1}} "


def gutter_width(changed: ChangedFile | None) -> int:
    if changed is None or not changed.aligned_lines:
        return 0
    largest = max((line for pair in changed.aligned_lines for line in pair if line is not None), default=0)
    return max(4, len(str(largest + 1)) + 1)


def current_hunk_label(positions: list[int], cursor_line: int) -> str:
    """Return ``hunk k/n`` where ``k`` counts hunks starting at or above the cursor."""
    if not positions:
        return "no hunks"
    passed = sum(1 for position in positions if position <= cursor_line)
    if passed == 0:
        return f"hunk -/{len(positions)}"
    return f"hunk {passed}/{len(positions)}"


def compose_screen(
    state: ViewerState,
    alignment: AlignmentModel,
    total_width: int,
    total_height: int,
    hunk_wrap_across_files: bool,
    highlight_mode: str = HIGHLIGHT_MODE_SYNTAX,
    theme: DiffTheme | None = None,
) -> list[str]:
    """Return ``total_height`` rows of ANSI text for the whole screen."""
    active_theme = theme or DEFAULT_THEME
    layout = compute_layout(total_width, total_height, state.tree_width)
    changed = alignment.file(state.file_index) if state.file_index is not None else None
    gutter = gutter_width(changed)
    text_width = max(1, layout.pane_width - gutter)
    divider = f"{active_theme.divider}{DIVIDER}{active_theme.reset}"

    tree_lines = state.listing.lines if state.listing is not None else []
    rows: list[str] = []
    for screen_row in range(layout.content_rows):
        tree_idx = state.tree_start + screen_row
        tree_text = tree_lines[tree_idx] if tree_idx < len(tree_lines) else ""
        if state.focus == FOCUS_TREE and tree_idx == state.tree_selected:
            tree_text = f"{active_theme.reverse}{tree_text}"
        tree_cell = fit_ansi_line(tree_text, layout.tree_width)

        diff_row = state.diff_start + screen_row
        cells: list[str] = []
        for side, lines, colors in (
            (LEFT, state.left_lines, state.left_colors),
            (RIGHT, state.right_lines, state.right_colors),
        ):
            if diff_row >= len(lines):
                cells.append(" " * layout.pane_width)
                continue
            is_cursor = (
                state.focus == FOCUS_DIFF and side == state.active_side and diff_row + 1 == state.cursor_line
            )
            painted = paint_display_line(
                lines[diff_row],
                text_width,
                theme=active_theme,
                highlight_mode=highlight_mode,
                syntax_colors=colors[diff_row] if diff_row < len(colors) else None,
                text_x=state.text_x,
                is_cursor_line=is_cursor,
            )
            cells.append(gutter_text(changed, diff_row, side, gutter) + painted)
        rows.append(f"{tree_cell}{divider}{cells[0]}{divider}{cells[1]}")

    status = ""
    if changed is not None:
        label = current_hunk_label(alignment.hunk_positions(state.file_index), state.cursor_line)
        wrap = "wrap:files" if hunk_wrap_across_files else "wrap:file"
        status = f" {changed.path} [{changed.status.value}]  {label}  {wrap}"
    if state.status_message:
        status = f"{status}  {state.status_message}"
    rows.append(fit_ansi_line(f"{active_theme.reverse}{status}", total_width))
    return rows
