"""Stored reference equipment items."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UpdatedAtMixin


class RefItem(Base, UpdatedAtMixin):
    """A reference equipment record, kept in its original (nested) form."""

    __tablename__ = "ref_items"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Reference item identifier",
    )

    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Equipment category (e.g. 'Armes', 'Protections')",
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Display name of the item",
    )

    data: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Full reference record",
    )

    def __repr__(self) -> str:
        return f"<RefItem(id={self.id}, category={self.category}, name={self.name})>"
