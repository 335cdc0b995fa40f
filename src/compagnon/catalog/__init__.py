"""Reference data - equipment catalog and game rules."""

from .equipment import EQUIPMENT_TYPES, Equipment, flatten_record, parse_equipment
from .game_rules import GameRules, GameRulesLoadError, load_game_rules, parse_game_rules
from .loader import (
    CatalogLoadError,
    EquipmentValidationError,
    ReferenceCatalog,
    load_equipment_file,
)
from .schemas import CATEGORY_SCHEMAS, FieldDef, schema_for

__all__ = [
    "Equipment",
    "EQUIPMENT_TYPES",
    "flatten_record",
    "parse_equipment",
    "ReferenceCatalog",
    "load_equipment_file",
    "CatalogLoadError",
    "EquipmentValidationError",
    "GameRules",
    "load_game_rules",
    "parse_game_rules",
    "GameRulesLoadError",
    "CATEGORY_SCHEMAS",
    "FieldDef",
    "schema_for",
]
