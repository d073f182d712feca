"""Arena-backed datatypes for the changed-file tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..payload import FileStatus

ROOT_ID = 0


@dataclass
class DiffTreeNode:
    """One directory or file node; children are ids into ``DiffTree.nodes``."""

    name: str
    full_path: str
    is_dir: bool
    children: list[int] = field(default_factory=list)
    file_index: int | None = None
    status: FileStatus | None = None
    additions: int = 0
    deletions: int = 0
    expanded: bool = True


@dataclass
class DiffTree:
    """Node arena plus file-index lookups produced by ``build_diff_tree``."""

    nodes: list[DiffTreeNode]
    file_paths: dict[int, str] = field(default_factory=dict)
    node_for_file: dict[int, int] = field(default_factory=dict)

    @property
    def root(self) -> DiffTreeNode:
        return self.nodes[ROOT_ID]

    def node(self, node_id: int) -> DiffTreeNode:
        return self.nodes[node_id]

    def children(self, node_id: int) -> list[DiffTreeNode]:
        return [self.nodes[child_id] for child_id in self.nodes[node_id].children]

    @property
    def total_additions(self) -> int:
        return self.root.additions

    @property
    def total_deletions(self) -> int:
        return self.root.deletions
