"""SQLAlchemy models for Compagnon."""

from compagnon.database.models.base import Base, UpdatedAtMixin
from compagnon.database.models.personnage import Personnage
from compagnon.database.models.ref_item import RefItem

__all__ = [
    "Base",
    "UpdatedAtMixin",
    "Personnage",
    "RefItem",
]
