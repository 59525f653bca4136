"""Characteristic Group Service - tree of specification groups.

Leaf data are the characteristic values owned by each group and the
product assignments of those values. Values die with their group; a
cascading delete removes the assignments first.
"""

from collections import defaultdict
from typing import Any

from sqlalchemy import delete, func, select

from app.models.characteristic_group import CharacteristicGroup
from app.models.characteristic_value import CharacteristicValue
from app.models.product import Product
from app.models.product_characteristic import ProductCharacteristic
from app.services.taxonomy_service import LeafCleanup, LeafReferences, TaxonomyService


class CharacteristicGroupService(TaxonomyService):
    """Taxonomy service for ``characteristic_groups``."""

    model = CharacteristicGroup
    label = "Characteristic group"
    cache_namespace = "characteristic-groups"

    async def _decorations(self, node_ids: list[int]) -> dict[int, dict[str, Any]]:
        values: dict[int, list[dict[str, Any]]] = defaultdict(list)
        if node_ids:
            result = await self.db.execute(
                select(CharacteristicValue)
                .where(CharacteristicValue.group_id.in_(node_ids))
                .order_by(CharacteristicValue.sort_order, CharacteristicValue.id)
            )
            for value in result.scalars():
                values[value.group_id].append(
                    {"id": value.id, "value": value.value, "sort_order": value.sort_order}
                )
        return {node_id: {"values": values.get(node_id, [])} for node_id in node_ids}

    async def _value_ids(self, node_ids: list[int]) -> list[int]:
        result = await self.db.execute(
            select(CharacteristicValue.id).where(CharacteristicValue.group_id.in_(node_ids))
        )
        return list(result.scalars().all())

    async def _leaf_references(self, node_ids: list[int]) -> LeafReferences:
        result = await self.db.execute(
            select(
                func.count(ProductCharacteristic.id).label("count"),
                func.count(func.distinct(ProductCharacteristic.product_id)).label("products"),
            )
            .join(CharacteristicValue, CharacteristicValue.id == ProductCharacteristic.value_id)
            .where(CharacteristicValue.group_id.in_(node_ids))
        )
        row = result.one()
        if not row.count:
            return LeafReferences()

        sample = await self.db.execute(
            select(Product.name)
            .distinct()
            .join(ProductCharacteristic, ProductCharacteristic.product_id == Product.id)
            .join(CharacteristicValue, CharacteristicValue.id == ProductCharacteristic.value_id)
            .where(CharacteristicValue.group_id.in_(node_ids))
            .order_by(Product.name)
            .limit(self._sample_size())
        )
        return LeafReferences(
            count=row.count,
            products_count=row.products,
            sample_products=list(sample.scalars().all()),
        )

    async def _owned_leaf_count(self, node_ids: list[int]) -> int:
        result = await self.db.execute(
            select(func.count(CharacteristicValue.id)).where(
                CharacteristicValue.group_id.in_(node_ids)
            )
        )
        return result.scalar_one()

    async def _purge_unreferenced(self, node_id: int) -> int:
        result = await self.db.execute(
            delete(CharacteristicValue).where(CharacteristicValue.group_id == node_id)
        )
        return result.rowcount or 0

    async def _detach_leaves(self, node_ids: list[int]) -> LeafCleanup:
        value_ids = await self._value_ids(node_ids)
        if not value_ids:
            return LeafCleanup()

        links = await self.db.execute(
            delete(ProductCharacteristic).where(ProductCharacteristic.value_id.in_(value_ids))
        )
        values = await self.db.execute(
            delete(CharacteristicValue).where(CharacteristicValue.id.in_(value_ids))
        )
        return LeafCleanup(
            detached_references=links.rowcount or 0,
            deleted_values=values.rowcount or 0,
        )
