"""Stored character documents."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UpdatedAtMixin


class Personnage(Base, UpdatedAtMixin):
    """
    A character sheet stored as a JSON document.

    Only the name is lifted into its own column for listing; everything the
    rules engine reads lives in ``data``.
    """

    __tablename__ = "personnages"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Character identifier",
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        default="",
        index=True,
        comment="Character name shown in lists",
    )

    data: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Full character document",
    )

    def __repr__(self) -> str:
        return f"<Personnage(id={self.id}, name={self.name})>"
