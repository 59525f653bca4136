"""ProductCategory model - catalog category tree."""

from app.models.base import Base, TaxonomyNodeMixin, sibling_name_index


class ProductCategory(Base, TaxonomyNodeMixin):
    """Product category node.

    Products point at a category through ``products.category_id``.
    """

    __tablename__ = "product_categories"

    def __repr__(self) -> str:
        return f"<ProductCategory(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"


sibling_name_index(ProductCategory)
