"""SQLAlchemy models for the catalog taxonomy service.

Two self-referencing trees (product categories, characteristic groups) and
the leaf tables that point into them.
"""

from app.models.base import Base, TaxonomyNodeMixin, TimestampMixin
from app.models.characteristic_group import CharacteristicGroup
from app.models.characteristic_value import CharacteristicValue
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.product_characteristic import ProductCharacteristic

__all__ = [
    "Base",
    "TaxonomyNodeMixin",
    "TimestampMixin",
    "CharacteristicGroup",
    "CharacteristicValue",
    "Product",
    "ProductCategory",
    "ProductCharacteristic",
]
