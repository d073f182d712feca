"""Changed-file tree construction.

Builds a directory trie from the flat payload, then sums stats bottom-up,
collapses single-directory chains (``a/b/c``) and sorts every level
directories-first. The arena is compacted at the end so every stored node is
reachable from the root.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..payload import ChangedFile
from .types import ROOT_ID, DiffTree, DiffTreeNode

logger = logging.getLogger(__name__)


def path_segments(path: str) -> list[str]:
    """Split a ``/``-separated path, ignoring empty segments."""
    return [part for part in path.split("/") if part]


def _insert_files(files: Sequence[ChangedFile]) -> list[DiffTreeNode]:
    """Insert every file path into a trie rooted at an empty directory node."""
    nodes: list[DiffTreeNode] = [DiffTreeNode(name="", full_path="", is_dir=True)]
    directory_children: dict[int, dict[str, int]] = {ROOT_ID: {}}

    for file_index, changed in enumerate(files):
        parts = path_segments(changed.path)
        node_id = ROOT_ID
        current_path = ""
        for depth, part in enumerate(parts):
            current_path = part if not current_path else f"{current_path}/{part}"
            if depth == len(parts) - 1:
                leaf_id = len(nodes)
                nodes.append(
                    DiffTreeNode(
                        name=part,
                        full_path=current_path,
                        is_dir=False,
                        file_index=file_index,
                        status=changed.status,
                        additions=changed.additions,
                        deletions=changed.deletions,
                        expanded=False,
                    )
                )
                nodes[node_id].children.append(leaf_id)
                continue

            child_id = directory_children[node_id].get(part)
            if child_id is None:
                child_id = len(nodes)
                nodes.append(DiffTreeNode(name=part, full_path=current_path, is_dir=True))
                directory_children[node_id][part] = child_id
                directory_children[child_id] = {}
                nodes[node_id].children.append(child_id)
            node_id = child_id
    return nodes


def _propagate_stats(nodes: list[DiffTreeNode], node_id: int) -> tuple[int, int]:
    """Set each directory's counts to the sum over its subtree."""
    node = nodes[node_id]
    if not node.is_dir:
        return node.additions, node.deletions
    additions = 0
    deletions = 0
    for child_id in node.children:
        child_additions, child_deletions = _propagate_stats(nodes, child_id)
        additions += child_additions
        deletions += child_deletions
    node.additions = additions
    node.deletions = deletions
    return additions, deletions


def _flatten_chains(nodes: list[DiffTreeNode], node_id: int) -> None:
    """Merge directories whose only child is another directory."""
    node = nodes[node_id]
    for child_id in node.children:
        if nodes[child_id].is_dir:
            _flatten_chains(nodes, child_id)

    while len(node.children) == 1 and nodes[node.children[0]].is_dir:
        child = nodes[node.children[0]]
        node.name = child.name if not node.name else f"{node.name}/{child.name}"
        node.full_path = child.full_path
        node.children = child.children


def _sort_children(nodes: list[DiffTreeNode], node_id: int) -> None:
    node = nodes[node_id]
    node.children.sort(key=lambda child_id: (not nodes[child_id].is_dir, nodes[child_id].name.lower()))
    for child_id in node.children:
        if nodes[child_id].is_dir:
            _sort_children(nodes, child_id)


def _compact(nodes: list[DiffTreeNode]) -> DiffTree:
    """Copy reachable nodes into a fresh arena in pre-order."""
    compacted: list[DiffTreeNode] = []
    tree = DiffTree(nodes=compacted)

    def visit(old_id: int) -> int:
        old = nodes[old_id]
        new_id = len(compacted)
        copy = DiffTreeNode(
            name=old.name,
            full_path=old.full_path,
            is_dir=old.is_dir,
            file_index=old.file_index,
            status=old.status,
            additions=old.additions,
            deletions=old.deletions,
            expanded=old.expanded,
        )
        compacted.append(copy)
        if old.file_index is not None:
            tree.file_paths[old.file_index] = old.full_path
            tree.node_for_file[old.file_index] = new_id
        copy.children = [visit(child_id) for child_id in old.children]
        return new_id

    visit(ROOT_ID)
    return tree


def build_diff_tree(files: Sequence[ChangedFile]) -> DiffTree:
    """Build the collapsed, sorted, stats-annotated tree for ``files``."""
    nodes = _insert_files(files)
    _propagate_stats(nodes, ROOT_ID)
    _flatten_chains(nodes, ROOT_ID)
    _sort_children(nodes, ROOT_ID)
    tree = _compact(nodes)
    logger.debug(
        "built diff tree: %d files, %d nodes, +%d -%d",
        len(files),
        len(tree.nodes),
        tree.total_additions,
        tree.total_deletions,
    )
    return tree
