"""Core module - tree assembly, cycle checks and error kinds."""

from app.core.cycle_guard import children_map, descendant_ids, would_create_cycle
from app.core.errors import (
    ConflictError,
    CycleError,
    HasChildrenError,
    HasLeafReferencesError,
    NotFoundError,
    TaxonomyError,
    TransactionError,
    ValidationError,
)
from app.core.tree import FlatNode, NodeRow, TaxonomyTree, TreeNode, build_tree

__all__ = [
    "children_map",
    "descendant_ids",
    "would_create_cycle",
    "ConflictError",
    "CycleError",
    "HasChildrenError",
    "HasLeafReferencesError",
    "NotFoundError",
    "TaxonomyError",
    "TransactionError",
    "ValidationError",
    "FlatNode",
    "NodeRow",
    "TaxonomyTree",
    "TreeNode",
    "build_tree",
]
