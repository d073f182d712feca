"""Interactive runtime for one diff session.

Wires ``DiffNavigator`` to the terminal: render requests become screen state,
completion tokens are reported after the next draw, and key sequences from
the keymap config dispatch navigation commands.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import MIN_TREE_WIDTH, ViewConfig, save_hunk_wrap_across_files, save_tree_width
from .editor import launch_editor
from .input import read_key
from .key_registry import KeySequenceBinding, KeySequenceRegistry
from .navigation import DiffNavigator, RenderRequest, ViewRequests
from .payload import LEFT, RIGHT, ChangedFile
from .screen import (
    FOCUS_DIFF,
    FOCUS_TREE,
    ViewerState,
    centered_scroll_start,
    compose_screen,
    compute_layout,
)
from .source_pane import syntax_foregrounds
from .terminal import TerminalController
from .tree_model import TREE_HEADER_LINES, build_tree_listing
from .ui_theme import HIGHLIGHT_MODE_SYNTAX, DiffTheme

logger = logging.getLogger(__name__)

TREE_WIDTH_STEP = 4


class DiffViewerApp:
    """Terminal diff viewer; one instance per open session."""

    def __init__(
        self,
        files: Sequence[ChangedFile],
        config: ViewConfig,
        theme: DiffTheme,
        root: Path,
        terminal: TerminalController | None = None,
        screen_size: Callable[[], tuple[int, int]] = TerminalController.size,
        config_path: Path | None = None,
    ) -> None:
        self.config = config
        self.theme = theme
        self.root = root
        self.terminal = terminal
        self.screen_size = screen_size
        self.config_path = config_path
        self.state = ViewerState(tree_width=config.tree.width)
        self.navigator = DiffNavigator(
            files,
            config,
            ViewRequests(
                render_file=self.render_file,
                move_cursor=self.move_cursor,
                cursor_position=self.cursor_position,
                render_tree=self.render_tree,
                open_path=self.open_path,
                set_status_message=self.set_status_message,
            ),
        )
        self.keys = self._build_key_registry()

    def _content_rows(self) -> int:
        width, height = self.screen_size()
        return compute_layout(width, height, self.state.tree_width).content_rows

    # Rendering-surface callbacks.

    def render_file(self, request: RenderRequest) -> None:
        state = self.state
        state.file_index = request.file_index
        state.left_lines = request.left_lines
        state.right_lines = request.right_lines
        if self.config.highlight_mode == HIGHLIGHT_MODE_SYNTAX and self.theme.reset:
            state.left_colors = syntax_foregrounds(request.left_lines, request.language, request.path, self.config.style)
            state.right_colors = syntax_foregrounds(
                request.right_lines, request.language, request.path, self.config.style
            )
        else:
            state.left_colors = []
            state.right_colors = []
        state.cursor_line = 1
        state.cursor_column = 0
        state.diff_start = 0
        state.text_x = 0
        # Reported to the navigator only after the next draw.
        state.completed_renders.append(request.token)

    def move_cursor(self, line: int, column: int) -> None:
        state = self.state
        state.cursor_line = max(1, min(line, max(1, state.line_count)))
        state.cursor_column = max(0, column)
        self._scroll_cursor_into_view()

    def cursor_position(self) -> tuple[int, int]:
        return self.state.cursor_line, self.state.cursor_column

    def render_tree(self) -> None:
        state = self.state
        state.listing = build_tree_listing(
            self.navigator.tree,
            self.navigator.state.current_file_index if self.navigator.files else None,
            state.tree_width,
            dir_open_icon=self.config.tree.dir_open_icon,
            dir_closed_icon=self.config.tree.dir_closed_icon,
            theme=self.theme,
        )
        node_id = self.navigator.tree.node_for_file.get(self.navigator.state.current_file_index)
        current_line = state.listing.line_for_node(node_id) if node_id is not None else None
        if state.focus != FOCUS_TREE and current_line is not None:
            state.tree_selected = current_line
        state.tree_selected = max(TREE_HEADER_LINES, min(state.tree_selected, len(state.listing.lines) - 1))
        self._scroll_tree_into_view()

    def open_path(self, path: str, line: int, column: int) -> str | None:
        if self.terminal is None:
            return "Cannot open file outside the interactive viewer."
        return launch_editor(
            self.root / path,
            line,
            column,
            self.terminal.disable_tui_mode,
            self.terminal.enable_tui_mode,
        )

    def set_status_message(self, message: str) -> None:
        self.state.status_message = message

    # Scrolling.

    def _scroll_cursor_into_view(self) -> None:
        state = self.state
        rows = self._content_rows()
        if state.diff_start < state.cursor_line <= state.diff_start + rows:
            return
        state.diff_start = centered_scroll_start(state.cursor_line, state.line_count, rows)

    def _scroll_tree_into_view(self) -> None:
        state = self.state
        rows = self._content_rows()
        if state.tree_selected < state.tree_start:
            state.tree_start = state.tree_selected
        elif state.tree_selected >= state.tree_start + rows:
            state.tree_start = state.tree_selected - rows + 1

    # Commands.

    def stop(self) -> bool:
        self.state.running = False
        return True

    def toggle_focus(self) -> bool:
        self.state.focus = FOCUS_DIFF if self.state.focus == FOCUS_TREE else FOCUS_TREE
        return True

    def focus_tree(self) -> bool:
        if self.state.focus == FOCUS_TREE and self.config.keymaps.get("focus_diff") == self.config.keymaps.get(
            "focus_tree"
        ):
            return self.toggle_focus()
        self.state.focus = FOCUS_TREE
        return True

    def focus_diff(self) -> bool:
        self.state.focus = FOCUS_DIFF
        return True

    def move_vertical(self, delta: int) -> bool:
        state = self.state
        if state.focus == FOCUS_TREE:
            if state.listing is None:
                return False
            last = len(state.listing.lines) - 1
            state.tree_selected = max(TREE_HEADER_LINES, min(last, state.tree_selected + delta))
            self._scroll_tree_into_view()
            return True
        self.move_cursor(state.cursor_line + delta, state.cursor_column)
        return True

    def page(self, direction: int) -> bool:
        return self.move_vertical(direction * max(1, self._content_rows() // 2))

    def move_column(self, delta: int) -> bool:
        state = self.state
        if state.focus != FOCUS_DIFF:
            return False
        state.cursor_column = max(0, state.cursor_column + delta)
        width, height = self.screen_size()
        pane_width = compute_layout(width, height, state.tree_width).pane_width
        if state.cursor_column < state.text_x:
            state.text_x = state.cursor_column
        elif state.cursor_column >= state.text_x + pane_width // 2:
            state.text_x = max(0, state.cursor_column - pane_width // 2 + 1)
        return True

    def set_side(self, side: str) -> bool:
        if self.state.focus != FOCUS_DIFF:
            return False
        self.state.active_side = side
        return True

    def select(self) -> bool:
        state = self.state
        if state.focus != FOCUS_TREE or state.listing is None:
            return False
        if not 0 <= state.tree_selected < len(state.listing.node_ids):
            return False
        node_id = state.listing.node_ids[state.tree_selected]
        if node_id is None:
            return False
        return self.navigator.select_tree_node(node_id)

    def goto_file(self) -> bool:
        if self.state.focus != FOCUS_DIFF:
            return False
        return self.navigator.goto_file()

    def toggle_hunk_wrap(self) -> bool:
        enabled = self.navigator.toggle_hunk_wrap()
        save_hunk_wrap_across_files(enabled, self.config_path)
        self.set_status_message("hunk wrap across files " + ("on" if enabled else "off"))
        return True

    def resize_tree(self, delta: int) -> bool:
        width, _height = self.screen_size()
        self.state.tree_width = max(MIN_TREE_WIDTH, min(width // 2, self.state.tree_width + delta))
        save_tree_width(self.state.tree_width, self.config_path)
        self.render_tree()
        return True

    def _build_key_registry(self) -> KeySequenceRegistry:
        navigator = self.navigator
        actions: dict[str, Callable[[], bool | None]] = {
            "next_file": navigator.next_file,
            "prev_file": navigator.prev_file,
            "next_hunk": navigator.advance_hunk,
            "prev_hunk": navigator.retreat_hunk,
            "first_hunk": navigator.first_hunk,
            "last_hunk": navigator.last_hunk,
            "close": self.stop,
            "focus_tree": self.focus_tree,
            "focus_diff": self.focus_diff,
            "select": self.select,
            "goto_file": self.goto_file,
            "toggle_hunk_wrap": self.toggle_hunk_wrap,
            "tree_narrower": lambda: self.resize_tree(-TREE_WIDTH_STEP),
            "tree_wider": lambda: self.resize_tree(TREE_WIDTH_STEP),
            "expand_all": navigator.expand_all,
            "collapse_all": navigator.collapse_all,
        }
        registry = KeySequenceRegistry()
        for sequence, action in self.config.bound_keys().items():
            handler = actions.get(action)
            if handler is None:
                logger.debug("ignoring keymap for unknown action %r", action)
                continue
            registry.register_binding(KeySequenceBinding.from_strings([sequence], handler))
        # Built-in motions; configured sequences registered above take precedence.
        registry.register_bindings(
            KeySequenceBinding.from_strings(["j", "DOWN"], lambda: self.move_vertical(1)),
            KeySequenceBinding.from_strings(["k", "UP"], lambda: self.move_vertical(-1)),
            KeySequenceBinding.from_strings(["CTRL_D", "PAGE_DOWN"], lambda: self.page(1)),
            KeySequenceBinding.from_strings(["CTRL_U", "PAGE_UP"], lambda: self.page(-1)),
            KeySequenceBinding.from_strings(["h"], lambda: self.set_side(LEFT)),
            KeySequenceBinding.from_strings(["l"], lambda: self.set_side(RIGHT)),
            KeySequenceBinding.from_strings(["LEFT"], lambda: self.move_column(-1)),
            KeySequenceBinding.from_strings(["RIGHT"], lambda: self.move_column(1)),
            KeySequenceBinding.from_strings(["CTRL_C"], self.stop),
        )
        return registry

    def handle_key(self, key: str) -> bool:
        if key == "ESC":
            self.keys.reset()
            self.set_status_message("")
            return True
        self.set_status_message("")
        return bool(self.keys.feed(key))

    # Main loop.

    def flush_completed_renders(self) -> bool:
        """Report drawn renders to the navigator; returns whether any ran."""
        if not self.navigator.has_pending_render:
            self.state.completed_renders.clear()
            return False
        ran = False
        while self.state.completed_renders:
            token = self.state.completed_renders.pop(0)
            ran = self.navigator.render_completed(token) or ran
        return ran

    def draw(self) -> None:
        assert self.terminal is not None
        width, height = self.screen_size()
        rows = compose_screen(
            self.state,
            self.navigator.alignment,
            width,
            height,
            self.navigator.state.hunk_wrap_across_files,
            highlight_mode=self.config.highlight_mode,
            theme=self.theme,
        )
        self.terminal.write("\x1b[H" + "\r\n".join(rows))

    def run(self, initial_file: int | None = None) -> None:
        assert self.terminal is not None
        with self.terminal.raw_mode():
            self.render_tree()
            if not self.navigator.open(initial_file):
                return
            while self.state.running:
                self.draw()
                if self.flush_completed_renders():
                    continue
                key = read_key(self.terminal.stdin_fd)
                if not key:
                    continue
                self.handle_key(key)
        self.navigator.close()
        logger.debug("diff session closed")
