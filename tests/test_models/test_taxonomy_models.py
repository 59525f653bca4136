"""Tests for the taxonomy and leaf table mappings."""

from app.models.characteristic_group import CharacteristicGroup
from app.models.characteristic_value import CharacteristicValue
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.product_characteristic import ProductCharacteristic


def _foreign_keys(model) -> dict[str, tuple[str, str | None]]:
    return {
        fk.parent.name: (fk.target_fullname, fk.ondelete)
        for fk in model.__table__.foreign_keys
    }


def test_tablenames():
    assert ProductCategory.__tablename__ == "product_categories"
    assert CharacteristicGroup.__tablename__ == "characteristic_groups"
    assert CharacteristicValue.__tablename__ == "characteristic_values"
    assert Product.__tablename__ == "products"
    assert ProductCharacteristic.__tablename__ == "product_characteristics"


def test_taxonomy_tables_share_node_columns():
    expected = {
        "id",
        "name",
        "description",
        "parent_id",
        "sort_order",
        "is_active",
        "created_at",
        "updated_at",
    }
    for model in (ProductCategory, CharacteristicGroup):
        assert {c.name for c in model.__table__.columns} == expected


def test_parent_points_into_same_table_without_cascade():
    assert _foreign_keys(ProductCategory) == {"parent_id": ("product_categories.id", None)}
    assert _foreign_keys(CharacteristicGroup) == {"parent_id": ("characteristic_groups.id", None)}
    assert ProductCategory.__table__.c.parent_id.nullable is True


def test_product_category_is_optional():
    assert _foreign_keys(Product)["category_id"] == ("product_categories.id", "SET NULL")
    assert Product.__table__.c.category_id.nullable is True


def test_value_and_link_foreign_keys():
    assert _foreign_keys(CharacteristicValue) == {
        "group_id": ("characteristic_groups.id", "CASCADE")
    }
    assert _foreign_keys(ProductCharacteristic) == {
        "product_id": ("products.id", "CASCADE"),
        "value_id": ("characteristic_values.id", "CASCADE"),
    }


def test_product_value_pair_is_unique():
    constraints = {c.name for c in ProductCharacteristic.__table__.constraints}
    assert "uq_product_value" in constraints


def test_repr():
    category = ProductCategory(id=1, name="Phones", parent_id=None)
    assert "Phones" in repr(category)


def test_sibling_names_unique_per_parent():
    for model in (ProductCategory, CharacteristicGroup):
        indexes = {index.name: index for index in model.__table__.indexes}
        index = indexes[f"uq_{model.__tablename__}_sibling_name"]
        assert index.unique is True
        assert len(index.expressions) == 2
