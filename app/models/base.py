"""Base model infrastructure for SQLAlchemy models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )


class TaxonomyNodeMixin(TimestampMixin):
    """Columns shared by every self-referencing taxonomy table.

    ``parent_id`` points into the same table; NULL marks a root. The foreign
    key has no ON DELETE action, so the database refuses to orphan children.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    @declared_attr
    def parent_id(cls) -> Mapped[int | None]:
        return mapped_column(
            Integer,
            ForeignKey(f"{cls.__tablename__}.id"),
            nullable=True,
            index=True,
        )


def sibling_name_index(model: type[TaxonomyNodeMixin]) -> Index:
    """Unique index on (parent, lower(name)); roots share parent key 0."""
    return Index(
        f"uq_{model.__tablename__}_sibling_name",
        func.coalesce(model.parent_id, 0),
        func.lower(model.name),
        unique=True,
    )
