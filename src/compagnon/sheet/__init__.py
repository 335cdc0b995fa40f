"""Character sheet documents."""

from .character import CharacterRecord, EquippedItem
from .loader import CharacterLoadError, load_character_file

__all__ = ["CharacterRecord", "EquippedItem", "CharacterLoadError", "load_character_file"]
