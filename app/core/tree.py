"""Assemble flat taxonomy rows into a nested tree and an ordered flat list.

Pure functions only: callers load rows from the database and pass them in,
which keeps tree assembly testable with hand-built row lists.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NodeRow:
    """One stored taxonomy node as read from the database.

    Attributes:
        extra: Kind-specific decorations carried through untouched
            (attached characteristic values, product counts, ...)
    """

    id: int
    name: str
    parent_id: int | None = None
    sort_order: int = 0
    description: str | None = None
    is_active: bool = True
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.sort_order, self.id)


@dataclass
class TreeNode:
    """Nested view of a node; ``children`` holds nodes of the same shape."""

    id: int
    name: str
    description: str | None
    parent_id: int | None
    sort_order: int
    is_active: bool
    level: int
    extra: dict[str, Any] = field(default_factory=dict)
    children: list[TreeNode] = field(default_factory=list)

    @property
    def children_count(self) -> int:
        return len(self.children)

    def as_dict(self) -> dict[str, Any]:
        data = _base_dict(self)
        data["children"] = [child.as_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class FlatNode:
    """Flat-list view of a node with its depth and ancestor path."""

    id: int
    name: str
    description: str | None
    parent_id: int | None
    sort_order: int
    is_active: bool
    level: int
    children_count: int
    path: tuple[int, ...]
    extra: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        data = _base_dict(self)
        data["path"] = list(self.path)
        return data


@dataclass
class TaxonomyTree:
    """Both shapes of one taxonomy, derived from the same row set."""

    roots: list[TreeNode]
    flat: list[FlatNode]

    def __len__(self) -> int:
        return len(self.flat)

    def find(self, node_id: int) -> FlatNode | None:
        return next((node for node in self.flat if node.id == node_id), None)


def _base_dict(node: TreeNode | FlatNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "name": node.name,
        "description": node.description,
        "parent_id": node.parent_id,
        "sort_order": node.sort_order,
        "is_active": node.is_active,
        "level": node.level,
        "children_count": node.children_count,
        **node.extra,
    }


def build_tree(rows: Iterable[NodeRow]) -> TaxonomyTree:
    """Build the nested tree and the flat list for ``rows``.

    Roots are rows without a parent, rows whose parent is not in ``rows``
    (deleted or filtered out as inactive) and self-parented rows. Siblings
    are ordered by ``(sort_order, id)`` and the flat list is a depth-first
    pre-order, so every subtree is contiguous.

    Rows caught in a stored cycle have no reachable root; they are promoted
    to roots one by one so that no row is dropped and the walk terminates.
    """
    by_id: dict[int, NodeRow] = {row.id: row for row in rows}
    children_of: dict[int, list[NodeRow]] = defaultdict(list)
    roots: list[NodeRow] = []

    for row in by_id.values():
        if row.parent_id is None or row.parent_id == row.id or row.parent_id not in by_id:
            roots.append(row)
        else:
            children_of[row.parent_id].append(row)

    roots.sort(key=lambda r: r.sort_key)
    for siblings in children_of.values():
        siblings.sort(key=lambda r: r.sort_key)

    visited: set[int] = set()
    tree_roots: list[TreeNode] = []
    preorder: list[tuple[TreeNode, tuple[int, ...]]] = []

    def walk(start: NodeRow) -> None:
        # Explicit stack; children pushed in reverse to pop in sibling order
        stack: list[tuple[NodeRow, int, tuple[int, ...], TreeNode | None]] = [
            (start, 0, (), None)
        ]
        while stack:
            row, level, path, parent = stack.pop()
            if row.id in visited:
                continue
            visited.add(row.id)

            node = TreeNode(
                id=row.id,
                name=row.name,
                description=row.description,
                parent_id=row.parent_id,
                sort_order=row.sort_order,
                is_active=row.is_active,
                level=level,
                extra=dict(row.extra),
            )
            if parent is None:
                tree_roots.append(node)
            else:
                parent.children.append(node)

            node_path = (*path, row.id)
            preorder.append((node, node_path))

            for child in reversed(children_of.get(row.id, [])):
                if child.id not in visited:
                    stack.append((child, level + 1, node_path, node))

    for root in roots:
        walk(root)

    for row in sorted(by_id.values(), key=lambda r: r.sort_key):
        if row.id not in visited:
            walk(row)

    flat = [
        FlatNode(
            id=node.id,
            name=node.name,
            description=node.description,
            parent_id=node.parent_id,
            sort_order=node.sort_order,
            is_active=node.is_active,
            level=node.level,
            children_count=node.children_count,
            path=path,
            extra=node.extra,
        )
        for node, path in preorder
    ]

    return TaxonomyTree(roots=tree_roots, flat=flat)
