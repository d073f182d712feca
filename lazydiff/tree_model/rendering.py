"""Formatting helpers for the changed-file tree listing."""

from __future__ import annotations

from dataclasses import dataclass

from ..ui_theme import DEFAULT_THEME, PLAIN_THEME, DiffTheme
from .navigation import visible_rows
from .types import DiffTree, DiffTreeNode

TREE_HEADER_LINES = 3


@dataclass(frozen=True)
class TreeListing:
    """Rendered tree rows; ``node_ids[i]`` is ``None`` for header rows."""

    lines: list[str]
    node_ids: list[int | None]

    def line_for_node(self, node_id: int) -> int | None:
        """Return the zero-based listing row showing ``node_id``."""
        try:
            return self.node_ids.index(node_id)
        except ValueError:
            return None


def format_stats(additions: int, deletions: int, theme: DiffTheme | None = None) -> str:
    """Return `` +A -D`` with zero counts omitted."""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    parts: list[str] = []
    if additions > 0:
        parts.append(f"{active_theme.file_added}+{additions}{reset}")
    if deletions > 0:
        parts.append(f"{active_theme.file_deleted}-{deletions}{reset}")
    if not parts:
        return ""
    return " " + " ".join(parts)


def format_tree_header(
    total_additions: int,
    total_deletions: int,
    width: int,
    theme: DiffTheme | None = None,
) -> list[str]:
    """Return the blank/summary/blank header with the summary centred."""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    add_label = "Additions: "
    del_label = "Deletions: "
    separator = " | "
    plain = f"{add_label}{total_additions}{separator}{del_label}{total_deletions}"
    padding = " " * max(0, (width - len(plain)) // 2)
    summary = (
        f"{padding}{add_label}{active_theme.file_added}{total_additions}{reset}"
        f"{separator}{del_label}{active_theme.file_deleted}{total_deletions}{reset}"
    )
    return ["", summary, ""]


def format_tree_node(
    node: DiffTreeNode,
    depth: int,
    dir_open_icon: str = "▼",
    dir_closed_icon: str = "▶",
    is_current: bool = False,
    theme: DiffTheme | None = None,
) -> str:
    """Render one tree row as ANSI-styled display text."""
    active_theme = theme or DEFAULT_THEME
    # The current row is painted as one block, so inner colours are dropped.
    inner_theme = PLAIN_THEME if is_current else active_theme
    reset = inner_theme.reset
    indent = "  " * max(0, depth - 1)
    stats = format_stats(node.additions, node.deletions, inner_theme)
    if node.is_dir:
        icon = dir_open_icon if node.expanded else dir_closed_icon
        text = f"{indent}{inner_theme.directory}{icon} {node.name}{reset}{stats}"
    else:
        # Align file names under the directory icon column.
        text = f"{indent}  {node.name}{stats}"
    if is_current:
        return f"{active_theme.tree_current}{text}{active_theme.reset}"
    return text


def build_tree_listing(
    tree: DiffTree,
    current_file_index: int | None,
    width: int,
    dir_open_icon: str = "▼",
    dir_closed_icon: str = "▶",
    theme: DiffTheme | None = None,
) -> TreeListing:
    """Render header plus visible rows for the whole tree."""
    lines = format_tree_header(tree.total_additions, tree.total_deletions, width, theme)
    node_ids: list[int | None] = [None] * len(lines)
    for node_id, depth in visible_rows(tree):
        node = tree.nodes[node_id]
        lines.append(
            format_tree_node(
                node,
                depth,
                dir_open_icon=dir_open_icon,
                dir_closed_icon=dir_closed_icon,
                is_current=node.file_index is not None and node.file_index == current_file_index,
                theme=theme,
            )
        )
        node_ids.append(node_id)
    return TreeListing(lines=lines, node_ids=node_ids)
