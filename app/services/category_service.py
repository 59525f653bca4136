"""Category Service - product category tree.

Leaf data are products pointing at a category. A cascading delete keeps
the products and clears their ``category_id``.
"""

from typing import Any

from sqlalchemy import func, select, update

from app.models.product import Product
from app.models.product_category import ProductCategory
from app.services.taxonomy_service import LeafCleanup, LeafReferences, TaxonomyService


class CategoryService(TaxonomyService):
    """Taxonomy service for ``product_categories``."""

    model = ProductCategory
    label = "Category"
    cache_namespace = "categories"

    async def _decorations(self, node_ids: list[int]) -> dict[int, dict[str, Any]]:
        decorations: dict[int, dict[str, Any]] = {
            node_id: {"products_count": 0, "active_products_count": 0} for node_id in node_ids
        }
        if not node_ids:
            return decorations

        result = await self.db.execute(
            select(
                Product.category_id,
                func.count(Product.id).label("products_count"),
                func.count(Product.id).filter(Product.is_active.is_(True)).label("active_count"),
            )
            .where(Product.category_id.in_(node_ids))
            .group_by(Product.category_id)
        )
        for row in result:
            decorations[row.category_id] = {
                "products_count": row.products_count,
                "active_products_count": row.active_count,
            }
        return decorations

    async def _leaf_references(self, node_ids: list[int]) -> LeafReferences:
        result = await self.db.execute(
            select(func.count(Product.id)).where(Product.category_id.in_(node_ids))
        )
        count = result.scalar_one()
        if not count:
            return LeafReferences()

        sample = await self.db.execute(
            select(Product.name)
            .where(Product.category_id.in_(node_ids))
            .order_by(Product.name, Product.id)
            .limit(self._sample_size())
        )
        return LeafReferences(
            count=count,
            products_count=count,
            sample_products=list(sample.scalars().all()),
        )

    async def _owned_leaf_count(self, node_ids: list[int]) -> int:
        # Categories own nothing; products outlive them
        return 0

    async def _purge_unreferenced(self, node_id: int) -> int:
        return 0

    async def _detach_leaves(self, node_ids: list[int]) -> LeafCleanup:
        result = await self.db.execute(
            update(Product)
            .where(Product.category_id.in_(node_ids))
            .values(category_id=None)
        )
        return LeafCleanup(detached_references=result.rowcount or 0)
