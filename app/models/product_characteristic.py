"""ProductCharacteristic model - product to characteristic value link."""

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class ProductCharacteristic(Base, TimestampMixin):
    """Join row assigning a characteristic value to a product."""

    __tablename__ = "product_characteristics"
    __table_args__ = (UniqueConstraint("product_id", "value_id", name="uq_product_value"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("characteristic_values.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ProductCharacteristic(product_id={self.product_id}, value_id={self.value_id})>"
