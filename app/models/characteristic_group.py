"""CharacteristicGroup model - tree of specification groups."""

from app.models.base import Base, TaxonomyNodeMixin, sibling_name_index


class CharacteristicGroup(Base, TaxonomyNodeMixin):
    """Characteristic group node (e.g. "Dimensions" > "Length").

    Owns the characteristic values listed under it.
    """

    __tablename__ = "characteristic_groups"

    def __repr__(self) -> str:
        return f"<CharacteristicGroup(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"


sibling_name_index(CharacteristicGroup)
