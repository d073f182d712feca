"""Changed-file tree: construction, display order, and listing rows.

``build_diff_tree`` turns the flat payload into a collapsed, sorted tree.
Navigation helpers walk the expanded subset to produce the file order.
"""

from __future__ import annotations

from .build import build_diff_tree, path_segments
from .navigation import (
    collapse_all,
    expand_all,
    first_file,
    last_file,
    next_file,
    prev_file,
    set_expanded,
    toggle_directory,
    visible_file_order,
    visible_rows,
)
from .rendering import (
    TREE_HEADER_LINES,
    TreeListing,
    build_tree_listing,
    format_stats,
    format_tree_header,
    format_tree_node,
)
from .types import ROOT_ID, DiffTree, DiffTreeNode

__all__ = [
    "ROOT_ID",
    "DiffTree",
    "DiffTreeNode",
    "build_diff_tree",
    "path_segments",
    "visible_rows",
    "visible_file_order",
    "next_file",
    "prev_file",
    "first_file",
    "last_file",
    "set_expanded",
    "toggle_directory",
    "expand_all",
    "collapse_all",
    "TREE_HEADER_LINES",
    "TreeListing",
    "build_tree_listing",
    "format_stats",
    "format_tree_header",
    "format_tree_node",
]
