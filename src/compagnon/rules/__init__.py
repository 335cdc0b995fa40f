"""Rules engine: stat breakdowns, status effects, origins, competences and inventory."""

from .alcohol import EffectType, get_all_modifiers, get_modifiers
from .competences import (
    CharacterContext,
    Competence,
    SystemGranted,
    UserGranted,
    add_competence,
    apply_rules,
    remove_competence,
)
from .inventory import (
    CatalogueLine,
    aggregate_catalogue,
    apply_rupture_modifier,
    available_modifier_options,
    normalize_rupture,
    weight_of,
)
from .ledger import Contribution, StatDetail, resolve
from .origins import Archetype, classify_origin
from .stats import SheetStats, compute_sheet, equipment_ruptures

__all__ = [
    "Contribution",
    "StatDetail",
    "resolve",
    "EffectType",
    "get_modifiers",
    "get_all_modifiers",
    "Archetype",
    "classify_origin",
    "Competence",
    "CharacterContext",
    "UserGranted",
    "SystemGranted",
    "apply_rules",
    "add_competence",
    "remove_competence",
    "CatalogueLine",
    "weight_of",
    "normalize_rupture",
    "apply_rupture_modifier",
    "available_modifier_options",
    "aggregate_catalogue",
    "SheetStats",
    "compute_sheet",
    "equipment_ruptures",
]
