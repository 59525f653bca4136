"""Taxonomy Service - Abstract base for tree-shaped catalog taxonomies.

Implements listing, creation, reparenting and deletion once for every
self-referencing taxonomy table. Subclasses only describe their leaf data:
what references a node, how to detach it and what to show next to it.

Architecture:
    1 Taxonomy Service = 1 taxonomy table + its leaf tables
    1 call = 1 transaction (commit on success, rollback on any failure)
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
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
from app.core.tree import NodeRow, TaxonomyTree, build_tree
from app.infra.cache import CacheInvalidator, CacheKeys
from app.infra.logging import get_logger
from app.models.base import TaxonomyNodeMixin

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "description", "parent_id", "sort_order", "is_active"})


@dataclass(frozen=True)
class LeafReferences:
    """Leaf rows pointing into a set of nodes."""

    count: int = 0
    products_count: int = 0
    sample_products: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LeafCleanup:
    """What a cascade did to the leaf rows of the removed nodes."""

    detached_references: int = 0
    deleted_values: int = 0


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a successful delete."""

    id: int
    name: str
    force: bool
    deleted_ids: list[int]
    children_count: int
    detached_references: int
    deleted_values: int


@dataclass(frozen=True)
class DeletePreview:
    """What a forced delete of a node would remove, computed without writing."""

    id: int
    name: str
    descendants: list[dict[str, Any]]
    values_in_node: int
    values_in_descendants: int
    references_count: int
    products_count: int
    sample_products: list[str]
    warnings: list[str]


class TaxonomyService(ABC):
    """Shared tree logic over one taxonomy table.

    Only the session is required; the cache is an optional collaborator that
    is told to drop this taxonomy's keys after every successful mutation.
    """

    model: ClassVar[type[TaxonomyNodeMixin]]
    label: ClassVar[str]
    cache_namespace: ClassVar[str]

    def __init__(
        self,
        db_session: AsyncSession,
        cache: CacheInvalidator | None = None,
        cache_keys: CacheKeys | None = None,
    ) -> None:
        """Initialize taxonomy service.

        Args:
            db_session: Async SQLAlchemy session, owned by the caller
            cache: Cache to invalidate after mutations
            cache_keys: Key builder, defaults to the configured cache version
        """
        self.db = db_session
        self.cache = cache
        self.cache_keys = cache_keys or CacheKeys()

    # ------------------------------------------------------------------
    # Leaf hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _decorations(self, node_ids: list[int]) -> dict[int, dict[str, Any]]:
        """Kind-specific fields to show next to each listed node."""

    @abstractmethod
    async def _leaf_references(self, node_ids: list[int]) -> LeafReferences:
        """Count leaf rows that reference any of ``node_ids``."""

    @abstractmethod
    async def _owned_leaf_count(self, node_ids: list[int]) -> int:
        """Count leaf rows owned by (and removed together with) ``node_ids``."""

    @abstractmethod
    async def _purge_unreferenced(self, node_id: int) -> int:
        """Remove owned leaf rows of a node that nothing references."""

    @abstractmethod
    async def _detach_leaves(self, node_ids: list[int]) -> LeafCleanup:
        """Sever every leaf association of ``node_ids`` ahead of a cascade."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_tree(self) -> TaxonomyTree:
        """Load all active nodes and assemble them into a tree."""
        result = await self.db.execute(
            select(self.model).where(self.model.is_active.is_(True))
        )
        nodes = result.scalars().all()
        decorations = await self._decorations([node.id for node in nodes])

        rows = [
            NodeRow(
                id=node.id,
                name=node.name,
                parent_id=node.parent_id,
                sort_order=node.sort_order,
                description=node.description,
                is_active=node.is_active,
                extra=decorations.get(node.id, {}),
            )
            for node in nodes
        ]
        tree = build_tree(rows)

        logger.debug(f"{self.label} tree loaded", nodes=len(tree), roots=len(tree.roots))
        return tree

    async def get(self, node_id: int) -> TaxonomyNodeMixin:
        return await self._require(node_id)

    async def delete_preview(self, node_id: int) -> DeletePreview:
        """Describe what ``delete(node_id, force=True)`` would remove."""
        node = await self._require(node_id)
        descendants = descendant_ids(node_id, children_map(await self._parent_map()))

        names: dict[int, str] = {}
        if descendants:
            result = await self.db.execute(
                select(self.model.id, self.model.name).where(self.model.id.in_(descendants))
            )
            names = {row.id: row.name for row in result}

        values_in_node = await self._owned_leaf_count([node_id])
        values_in_descendants = await self._owned_leaf_count(descendants) if descendants else 0
        references = await self._leaf_references([node_id, *descendants])

        warnings: list[str] = []
        if descendants:
            warnings.append(f"{len(descendants)} descendant node(s) will be deleted")
        if values_in_node + values_in_descendants:
            warnings.append(
                f"{values_in_node + values_in_descendants} characteristic value(s) will be deleted"
            )
        if references.count:
            warnings.append(
                f"{references.count} reference(s) from {references.products_count} "
                f"product(s) will be detached"
            )

        return DeletePreview(
            id=node.id,
            name=node.name,
            descendants=[{"id": i, "name": names.get(i, "")} for i in descendants],
            values_in_node=values_in_node,
            values_in_descendants=values_in_descendants,
            references_count=references.count,
            products_count=references.products_count,
            sample_products=references.sample_products,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(
        self,
        name: Any,
        description: str | None = None,
        parent_id: int | None = None,
        is_active: bool = True,
        sort_order: int | None = None,
    ) -> TaxonomyNodeMixin:
        """Create a node, appending it after its siblings unless told otherwise."""
        async with self._transaction("create", parent_id=parent_id):
            name = _clean_name(name)
            if parent_id is not None:
                await self._require(parent_id, what=f"Parent {self.label.lower()}")
            await self._ensure_unique_name(name, parent_id)
            if sort_order is None:
                sort_order = await self._next_sort_order(parent_id)

            node = self.model(
                name=name,
                description=_clean_text(description),
                parent_id=parent_id,
                sort_order=sort_order,
                is_active=is_active,
            )
            self.db.add(node)
            await self.db.flush()
            await self.db.refresh(node)

        logger.info(f"{self.label} created", node_id=node.id, parent_id=parent_id)
        return node

    async def update(self, node_id: int, changes: Mapping[str, Any]) -> TaxonomyNodeMixin:
        """Apply a partial update.

        Only keys present in ``changes`` are touched; ``parent_id: None``
        moves the node to the root level.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown field(s): {', '.join(sorted(unknown))}", fields=sorted(unknown)
            )

        async with self._transaction("update", node_id=node_id):
            node = await self._require(node_id)
            values: dict[str, Any] = {}

            if "name" in changes:
                values["name"] = _clean_name(changes["name"])
            if "description" in changes:
                values["description"] = _clean_text(changes["description"])
            if "sort_order" in changes:
                sort_order = changes["sort_order"]
                if not isinstance(sort_order, int) or isinstance(sort_order, bool):
                    raise ValidationError("sort_order must be an integer", field="sort_order")
                values["sort_order"] = sort_order
            if "is_active" in changes:
                if not isinstance(changes["is_active"], bool):
                    raise ValidationError("is_active must be a boolean", field="is_active")
                values["is_active"] = changes["is_active"]
            if "parent_id" in changes:
                parent_id = changes["parent_id"]
                if parent_id is not None:
                    await self._check_reparent(node_id, parent_id)
                values["parent_id"] = parent_id

            if "name" in values or "parent_id" in values:
                await self._ensure_unique_name(
                    values.get("name", node.name),
                    values.get("parent_id", node.parent_id),
                    exclude_id=node_id,
                )

            for key, value in values.items():
                setattr(node, key, value)
            await self.db.flush()
            await self.db.refresh(node)

        logger.info(f"{self.label} updated", node_id=node_id, fields=sorted(values))
        return node

    async def delete(self, node_id: int, force: bool = False) -> DeleteResult:
        """Delete a node.

        Without ``force`` the delete is refused while the node has children
        or referenced leaf rows. With ``force`` the whole subtree goes, after
        its leaf associations are detached. Either way it is all or nothing.
        """
        async with self._transaction("delete", node_id=node_id, force=force):
            node = await self._require(node_id)
            name = node.name
            children_of = children_map(await self._parent_map())
            children_count = len(children_of.get(node_id, []))

            if not force:
                if children_count:
                    raise HasChildrenError(node_id, name, await self._children_names(node_id))

                references = await self._leaf_references([node_id])
                if references.count:
                    raise HasLeafReferencesError(
                        node_id,
                        name,
                        references_count=references.count,
                        products_count=references.products_count,
                        sample_products=references.sample_products,
                    )

                doomed = [node_id]
                cleanup = LeafCleanup(deleted_values=await self._purge_unreferenced(node_id))
            else:
                doomed = [node_id, *descendant_ids(node_id, children_of)]
                cleanup = await self._detach_leaves(doomed)

            await self.db.execute(delete(self.model).where(self.model.id.in_(doomed)))

        logger.info(
            f"{self.label} deleted",
            node_id=node_id,
            force=force,
            deleted=len(doomed),
            detached_references=cleanup.detached_references,
            deleted_values=cleanup.deleted_values,
        )
        return DeleteResult(
            id=node_id,
            name=name,
            force=force,
            deleted_ids=doomed,
            children_count=children_count,
            detached_references=cleanup.detached_references,
            deleted_values=cleanup.deleted_values,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _transaction(self, action: str, **context: Any) -> AsyncIterator[None]:
        """Run one mutation as a single transaction.

        Rolls back on any failure; store errors surface as ConflictError
        (uniqueness) or TransactionError. Cache invalidation runs only after
        a successful commit.
        """
        try:
            yield
            await self.db.commit()
        except TaxonomyError as e:
            await self.db.rollback()
            logger.info(
                f"{self.label} {action} rejected", code=e.code, error=e.message, **context
            )
            raise
        except IntegrityError as e:
            await self.db.rollback()
            if "unique" in str(e.orig).lower():
                logger.warning(f"{self.label} {action} conflict", error=str(e.orig), **context)
                raise ConflictError(
                    f"{self.label} violates a uniqueness constraint", error=str(e.orig)
                ) from e
            logger.error(f"{self.label} {action} integrity failure", error=str(e.orig), **context)
            raise TransactionError(
                f"{self.label} {action} failed and was rolled back", error=str(e.orig)
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"{self.label} {action} failed, rolled back",
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
            raise TransactionError(
                f"{self.label} {action} failed and was rolled back", error=str(e)
            ) from e

        await self._invalidate_cache()

    async def _invalidate_cache(self) -> None:
        if self.cache is None:
            return
        pattern = self.cache_keys.pattern(self.cache_namespace)
        try:
            removed = await self.cache.invalidate([pattern])
            logger.debug("Taxonomy cache invalidated", pattern=pattern, removed=removed)
        except Exception as e:
            # The store is already committed; a stale cache expires on its own TTL
            logger.warning("Cache invalidation failed", pattern=pattern, error=str(e))

    async def _require(self, node_id: int, what: str | None = None) -> TaxonomyNodeMixin:
        node = await self.db.get(self.model, node_id)
        if node is None:
            raise NotFoundError(node_id, what or self.label)
        return node

    async def _parent_map(self) -> dict[int, int | None]:
        """Parent link of every node, active or not."""
        result = await self.db.execute(select(self.model.id, self.model.parent_id))
        return {row.id: row.parent_id for row in result}

    async def _check_reparent(self, node_id: int, parent_id: int) -> None:
        if parent_id == node_id:
            raise CycleError(node_id, parent_id)
        await self._require(parent_id, what=f"Parent {self.label.lower()}")
        if would_create_cycle(node_id, parent_id, await self._parent_map()):
            raise CycleError(node_id, parent_id)

    async def _children_names(self, node_id: int) -> list[str]:
        result = await self.db.execute(
            select(self.model.name)
            .where(self.model.parent_id == node_id)
            .order_by(self.model.name, self.model.id)
        )
        return list(result.scalars().all())

    def _sibling_filter(self, parent_id: int | None) -> Any:
        if parent_id is None:
            return self.model.parent_id.is_(None)
        return self.model.parent_id == parent_id

    async def _next_sort_order(self, parent_id: int | None) -> int:
        result = await self.db.execute(
            select(func.max(self.model.sort_order)).where(self._sibling_filter(parent_id))
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def _ensure_unique_name(
        self,
        name: str,
        parent_id: int | None,
        exclude_id: int | None = None,
    ) -> None:
        query = select(self.model.id).where(
            func.lower(self.model.name) == name.lower(),
            self._sibling_filter(parent_id),
        )
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)

        result = await self.db.execute(query.limit(1))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(
                f'{self.label} "{name}" already exists at this level',
                name=name,
                parent_id=parent_id,
            )

    @staticmethod
    def _sample_size() -> int:
        return settings.delete_sample_size


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name required", field="name")
    return name.strip()


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("description must be a string", field="description")
    return value.strip() or None
