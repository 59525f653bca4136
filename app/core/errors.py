"""Error kinds raised by taxonomy operations.

Every error carries a stable ``code`` string that clients switch on (for
example to offer a forced delete after HAS_CHILDREN) and an HTTP status
used by the API layer.
"""

from typing import Any


class TaxonomyError(Exception):
    """Base class for all taxonomy failures."""

    code = "TAXONOMY_ERROR"
    status_code = 400

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
            "details": self.details or None,
        }


class ValidationError(TaxonomyError):
    """Missing or malformed input."""

    code = "VALIDATION_ERROR"
    status_code = 422


class NotFoundError(TaxonomyError):
    """A referenced node id does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, node_id: int, what: str = "Node") -> None:
        super().__init__(f"{what} {node_id} not found", id=node_id)
        self.node_id = node_id


class CycleError(TaxonomyError):
    """Reparenting would make a node its own ancestor."""

    code = "CYCLE_DETECTED"
    status_code = 409

    def __init__(self, node_id: int, proposed_parent_id: int) -> None:
        if node_id == proposed_parent_id:
            message = f"Node {node_id} cannot be its own parent"
        else:
            message = f"Node {proposed_parent_id} is a descendant of node {node_id}"
        super().__init__(message, id=node_id, parent_id=proposed_parent_id)
        self.node_id = node_id
        self.proposed_parent_id = proposed_parent_id


class HasChildrenError(TaxonomyError):
    """Non-forced delete blocked by child nodes."""

    code = "HAS_CHILDREN"
    status_code = 409

    def __init__(self, node_id: int, name: str, children_names: list[str]) -> None:
        super().__init__(
            f'Cannot delete "{name}": it has {len(children_names)} child node(s): '
            f"{', '.join(children_names)}",
            id=node_id,
            children_count=len(children_names),
            children_names=children_names,
        )
        self.children_count = len(children_names)
        self.children_names = children_names


class HasLeafReferencesError(TaxonomyError):
    """Non-forced delete blocked by products or characteristic assignments."""

    code = "HAS_LEAF_REFERENCES"
    status_code = 409

    def __init__(
        self,
        node_id: int,
        name: str,
        references_count: int,
        products_count: int,
        sample_products: list[str],
    ) -> None:
        super().__init__(
            f'Cannot delete "{name}": it is referenced {references_count} time(s) '
            f"by {products_count} product(s)",
            id=node_id,
            references_count=references_count,
            products_count=products_count,
            sample_products=sample_products,
        )
        self.references_count = references_count
        self.products_count = products_count
        self.sample_products = sample_products


class ConflictError(TaxonomyError):
    """Uniqueness violation (e.g. duplicate sibling name)."""

    code = "CONFLICT"
    status_code = 409


class TransactionError(TaxonomyError):
    """The store failed mid-transaction; the transaction was rolled back."""

    code = "TRANSACTION_ERROR"
    status_code = 500
