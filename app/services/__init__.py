"""Business logic services."""

from app.services.category_service import CategoryService
from app.services.characteristic_group_service import CharacteristicGroupService
from app.services.taxonomy_service import DeletePreview, DeleteResult, TaxonomyService

__all__ = [
    "CategoryService",
    "CharacteristicGroupService",
    "DeletePreview",
    "DeleteResult",
    "TaxonomyService",
]
