"""Whole-changeset navigation for one diff session.

``DiffNavigator`` composes the tree's display order with per-file hunk
lookups. Switching files is two-phase: a render request goes out with a
token, and anything that needs the new content (cursor placement) is queued
until the surface reports ``render_completed(token)``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .alignment import AlignmentModel
from .config import ViewConfig
from .hunks import first_hunk, last_hunk, next_hunk, prev_hunk
from .payload import RIGHT, ChangedFile, FileStatus
from .source_pane.display import DisplayLine, build_display_lines
from .tree_model import (
    DiffTree,
    build_diff_tree,
    collapse_all,
    expand_all,
    first_file,
    last_file,
    next_file,
    prev_file,
    toggle_directory,
)

logger = logging.getLogger(__name__)


@dataclass
class NavigationState:
    """Session-scoped navigation state."""

    current_file_index: int = 0
    hunk_wrap_across_files: bool = True


@dataclass(frozen=True)
class RenderRequest:
    """Ask the surface to show one file; answer with ``render_completed(token)``."""

    token: int
    file_index: int
    path: str
    language: str | None
    left_lines: list[DisplayLine]
    right_lines: list[DisplayLine]


@dataclass(frozen=True)
class ViewRequests:
    """Rendering-surface callbacks used by the navigator."""

    render_file: Callable[[RenderRequest], None]
    move_cursor: Callable[[int, int], None]
    cursor_position: Callable[[], tuple[int, int]]
    render_tree: Callable[[], None]
    open_path: Callable[[str, int, int], str | None]
    set_status_message: Callable[[str], None]


class DiffNavigator:
    """Navigation coordinator for one open diff session."""

    def __init__(self, files: Sequence[ChangedFile], config: ViewConfig, views: ViewRequests) -> None:
        self.files = list(files)
        self.config = config
        self.views = views
        self.tree: DiffTree = build_diff_tree(self.files)
        self.alignment = AlignmentModel(self.files)
        self.state = NavigationState(hunk_wrap_across_files=config.hunk_wrap_across_files)
        self._next_token = 1
        self._latest_token: int | None = None
        self._pending: dict[int, Callable[[], None]] = {}

    @property
    def current_file(self) -> ChangedFile | None:
        if not self.files:
            return None
        return self.files[self.state.current_file_index]

    @property
    def has_pending_render(self) -> bool:
        return bool(self._pending)

    def open(self, file_index: int | None = None) -> bool:
        """Show ``file_index``, or the first file in display order."""
        target = first_file(self.tree) if file_index is None else file_index
        if target is None:
            self.views.set_status_message("No changes found")
            return False
        return self.show_file(target)

    def close(self) -> None:
        self._pending.clear()
        self._latest_token = None

    def show_file(self, file_index: int, then: Callable[[], None] | None = None) -> bool:
        """Make ``file_index`` active and render it.

        ``then`` runs once the surface reports the render finished; by default
        the cursor goes to the top of the file.
        """
        if not 0 <= file_index < len(self.files):
            return False
        changed = self.files[file_index]
        self.state.current_file_index = file_index

        token = self._next_token
        self._next_token += 1
        self._latest_token = token
        self._pending[token] = then or (lambda: self.views.move_cursor(1, 0))
        logger.debug("switching to file #%d %s (render token %d)", file_index, changed.path, token)

        left_lines, right_lines = build_display_lines(changed)
        self.views.render_file(
            RenderRequest(
                token=token,
                file_index=file_index,
                path=changed.path,
                language=changed.language,
                left_lines=left_lines,
                right_lines=right_lines,
            )
        )
        self.views.render_tree()
        return True

    def render_completed(self, token: int) -> bool:
        """Run the continuation queued for ``token``.

        Continuations of renders that a later file switch superseded are
        dropped.
        """
        continuation = self._pending.pop(token, None)
        for stale in [pending for pending in self._pending if pending < token]:
            del self._pending[stale]
        if continuation is None or token != self._latest_token:
            return False
        continuation()
        return True

    def _cursor_line(self) -> int:
        line, _column = self.views.cursor_position()
        return line

    def _switch_then_place(self, file_index: int, pick: Callable[[list[int]], int | None]) -> bool:
        """Switch files and, after rendering, put the cursor on ``pick(hunks)``."""

        def place_cursor() -> None:
            target = pick(self.alignment.hunk_positions(file_index))
            self.views.move_cursor(target if target is not None else 1, 0)

        if file_index == self.state.current_file_index:
            place_cursor()
            return True
        return self.show_file(file_index, then=place_cursor)

    def advance_hunk(self) -> bool:
        """Move to the next hunk, wrapping per ``hunk_wrap_across_files``."""
        current = self.state.current_file_index
        if not self.files:
            return False
        positions = self.alignment.hunk_positions(current)
        if not positions:
            return False

        target = next_hunk(positions, self._cursor_line())
        if target is not None:
            self.views.move_cursor(target, 0)
            return True

        if not self.state.hunk_wrap_across_files:
            self.views.move_cursor(positions[0], 0)
            self.views.set_status_message("wrapped to first change")
            return True

        following = next_file(self.tree, current)
        if following is None:
            following = first_file(self.tree)
            if following is None:
                return False
            logger.debug("hunk navigation wrapped to first file #%d", following)
            self.views.set_status_message("wrapped to first change")
        return self._switch_then_place(following, first_hunk)

    def retreat_hunk(self) -> bool:
        """Move to the previous hunk; mirror of ``advance_hunk``."""
        current = self.state.current_file_index
        if not self.files:
            return False
        positions = self.alignment.hunk_positions(current)
        if not positions:
            return False

        target = prev_hunk(positions, self._cursor_line())
        if target is not None:
            self.views.move_cursor(target, 0)
            return True

        if not self.state.hunk_wrap_across_files:
            self.views.move_cursor(positions[-1], 0)
            self.views.set_status_message("wrapped to last change")
            return True

        preceding = prev_file(self.tree, current)
        if preceding is None:
            preceding = last_file(self.tree)
            if preceding is None:
                return False
            logger.debug("hunk navigation wrapped to last file #%d", preceding)
            self.views.set_status_message("wrapped to last change")
        return self._switch_then_place(preceding, last_hunk)

    def first_hunk(self) -> bool:
        if not self.files:
            return False
        target = first_hunk(self.alignment.hunk_positions(self.state.current_file_index))
        if target is None:
            return False
        self.views.move_cursor(target, 0)
        return True

    def last_hunk(self) -> bool:
        if not self.files:
            return False
        target = last_hunk(self.alignment.hunk_positions(self.state.current_file_index))
        if target is None:
            return False
        self.views.move_cursor(target, 0)
        return True

    def next_file(self) -> bool:
        if not self.files:
            return False
        target = next_file(self.tree, self.state.current_file_index)
        return target is not None and self.show_file(target)

    def prev_file(self) -> bool:
        if not self.files:
            return False
        target = prev_file(self.tree, self.state.current_file_index)
        return target is not None and self.show_file(target)

    def select_tree_node(self, node_id: int) -> bool:
        """Open a file node, or toggle a directory node and re-render the tree."""
        node = self.tree.node(node_id)
        if node.file_index is not None:
            return self.show_file(node.file_index)
        if node.is_dir and toggle_directory(self.tree, node_id):
            self.views.render_tree()
            return True
        return False

    def expand_all(self) -> bool:
        expand_all(self.tree)
        self.views.render_tree()
        return True

    def collapse_all(self) -> bool:
        """Collapse every directory; the current file stays active even when hidden."""
        collapse_all(self.tree)
        self.views.render_tree()
        return True

    def toggle_hunk_wrap(self) -> bool:
        self.state.hunk_wrap_across_files = not self.state.hunk_wrap_across_files
        return self.state.hunk_wrap_across_files

    def goto_file(self) -> bool:
        """Open the current file's new version at the source line under the cursor.

        The column is clamped to the length of the resolved source line.
        """
        changed = self.current_file
        if changed is None:
            return False
        if changed.status == FileStatus.DELETED:
            self.views.set_status_message(f"{changed.path} was deleted")
            return False

        line, column = self.views.cursor_position()
        target = self.alignment.resolve_target(self.state.current_file_index, line - 1, RIGHT)
        clamped_column = max(0, min(column, len(target.content)))
        error = self.views.open_path(changed.path, target.line, clamped_column)
        if error:
            self.views.set_status_message(error)
            return False
        return True
