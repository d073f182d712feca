"""Display-order queries over the changed-file tree.

The visible order depends on directory expansion, which can change between
calls, so nothing here is cached.
"""

from __future__ import annotations

from .types import ROOT_ID, DiffTree


def visible_rows(tree: DiffTree) -> list[tuple[int, int]]:
    """Return ``(node_id, depth)`` pairs for rows shown in the tree listing."""
    rows: list[tuple[int, int]] = []

    def walk(node_id: int, depth: int) -> None:
        for child_id in tree.nodes[node_id].children:
            child = tree.nodes[child_id]
            rows.append((child_id, depth))
            if child.is_dir and child.expanded:
                walk(child_id, depth + 1)

    walk(ROOT_ID, 1)
    return rows


def visible_file_order(tree: DiffTree) -> list[int]:
    """Return file indexes in pre-order, skipping collapsed subtrees."""
    order: list[int] = []
    for node_id, _depth in visible_rows(tree):
        file_index = tree.nodes[node_id].file_index
        if file_index is not None:
            order.append(file_index)
    return order


def next_file(tree: DiffTree, current_index: int) -> int | None:
    """Return the visible file after ``current_index``, if any."""
    order = visible_file_order(tree)
    try:
        position = order.index(current_index)
    except ValueError:
        return None
    if position + 1 < len(order):
        return order[position + 1]
    return None


def prev_file(tree: DiffTree, current_index: int) -> int | None:
    """Return the visible file before ``current_index``, if any."""
    order = visible_file_order(tree)
    try:
        position = order.index(current_index)
    except ValueError:
        return None
    if position > 0:
        return order[position - 1]
    return None


def first_file(tree: DiffTree) -> int | None:
    order = visible_file_order(tree)
    return order[0] if order else None


def last_file(tree: DiffTree) -> int | None:
    order = visible_file_order(tree)
    return order[-1] if order else None


def set_expanded(tree: DiffTree, node_id: int, expanded: bool) -> bool:
    """Set a directory's expansion flag; returns whether anything changed."""
    node = tree.nodes[node_id]
    if not node.is_dir or node_id == ROOT_ID or node.expanded == expanded:
        return False
    node.expanded = expanded
    return True


def toggle_directory(tree: DiffTree, node_id: int) -> bool:
    node = tree.nodes[node_id]
    return set_expanded(tree, node_id, not node.expanded)


def expand_all(tree: DiffTree) -> None:
    for node in tree.nodes:
        if node.is_dir:
            node.expanded = True


def collapse_all(tree: DiffTree) -> None:
    for node_id, node in enumerate(tree.nodes):
        if node.is_dir and node_id != ROOT_ID:
            node.expanded = False
