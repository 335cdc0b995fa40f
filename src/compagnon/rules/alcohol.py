"""Intoxication status effects and their attribute modifier tables.

Each effect type has a hand-authored table with one modifier vector per dose,
from dose 0 (sober, all zeros) to dose 10. Doses outside that range are
clamped so a malformed sheet still renders.
"""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

from .ledger import Contribution, coerce_int

MIN_DOSE = 0
MAX_DOSE = 10


class EffectType(StrEnum):
    """Status effect types tracked on the sheet."""

    LEGER = "leger"
    FORT = "fort"
    GUEULE_DE_BOIS = "gueule_de_bois"


EFFECT_LABELS = {
    EffectType.LEGER: "Intoxication légère",
    EffectType.FORT: "Intoxication forte",
    EffectType.GUEULE_DE_BOIS: "Gueule de bois",
}


@dataclass(frozen=True)
class AttributeModifiers:
    """Attribute deltas applied by one dose of an effect.

    ``pi`` is the weapon damage bonus (points d'impact).
    """

    courage: int = 0
    intelligence: int = 0
    charisme: int = 0
    adresse: int = 0
    force: int = 0
    perception: int = 0
    esquive: int = 0
    attaque: int = 0
    parade: int = 0
    pi: int = 0

    def get(self, attribute: str) -> int:
        """Get the delta for an attribute name (0 for unknown names)."""
        return getattr(self, attribute, 0) if attribute in MODIFIED_ATTRIBUTES else 0

    def as_dict(self) -> dict[str, int]:
        """Get all deltas keyed by attribute name."""
        return asdict(self)

    def is_zero(self) -> bool:
        """Check whether every delta is 0."""
        return not any(self.as_dict().values())


MODIFIED_ATTRIBUTES = tuple(AttributeModifiers.__dataclass_fields__)

_ZERO = AttributeModifiers()

TABLE_LEGER: tuple[AttributeModifiers, ...] = (
    _ZERO,  # 0
    _ZERO,  # 1
    _ZERO,  # 2
    _ZERO,  # 3
    _ZERO,  # 4
    AttributeModifiers(courage=1, intelligence=-1, perception=-1),
    AttributeModifiers(courage=1, intelligence=-1, adresse=-1, perception=-1, attaque=1),
    AttributeModifiers(
        courage=2, intelligence=-2, charisme=-1, adresse=-2, perception=-2, attaque=1
    ),
    AttributeModifiers(
        courage=2, intelligence=-2, charisme=-2, adresse=-2, force=1, perception=-2, attaque=1
    ),
    AttributeModifiers(
        courage=3,
        intelligence=-3,
        charisme=-3,
        adresse=-3,
        force=2,
        perception=-3,
        attaque=2,
        parade=-2,
        pi=-2,
    ),
    AttributeModifiers(
        courage=3,
        intelligence=-3,
        charisme=-4,
        adresse=-3,
        force=2,
        perception=-3,
        attaque=2,
        parade=-2,
        pi=-2,
    ),
)

# Doses 6 to 10 are kept exactly as published, including the jump in PI at
# dose 9, until the authoritative table says otherwise.
TABLE_FORT: tuple[AttributeModifiers, ...] = (
    _ZERO,  # 0
    _ZERO,  # 1
    _ZERO,  # 2
    AttributeModifiers(intelligence=-1, adresse=-1, perception=-1),
    AttributeModifiers(courage=1, intelligence=-1, charisme=-1, adresse=-2, perception=-1),
    AttributeModifiers(
        courage=1,
        intelligence=-2,
        charisme=-1,
        adresse=-2,
        force=1,
        perception=-2,
        attaque=-1,
        parade=-1,
    ),
    AttributeModifiers(
        courage=2,
        intelligence=-2,
        charisme=-2,
        adresse=-3,
        force=2,
        perception=-2,
        attaque=1,
        parade=-2,
        pi=-2,
    ),
    AttributeModifiers(
        courage=2,
        intelligence=-3,
        charisme=-2,
        adresse=-3,
        force=2,
        perception=-3,
        attaque=1,
        parade=-2,
        pi=-2,
    ),
    AttributeModifiers(
        courage=3,
        intelligence=-3,
        charisme=-3,
        adresse=-3,
        force=3,
        perception=-3,
        attaque=2,
        parade=-3,
        pi=-3,
    ),
    AttributeModifiers(
        courage=3,
        intelligence=-3,
        charisme=-4,
        adresse=-3,
        force=3,
        perception=-3,
        attaque=2,
        parade=-3,
        pi=1,
    ),
    AttributeModifiers(
        courage=3,
        intelligence=-3,
        charisme=-5,
        adresse=-3,
        force=3,
        perception=-3,
        attaque=2,
        parade=-3,
        pi=2,
    ),
)

TABLE_GUEULE_DE_BOIS: tuple[AttributeModifiers, ...] = (
    _ZERO,  # 0
    _ZERO,  # 1
    _ZERO,  # 2
    _ZERO,  # 3
    AttributeModifiers(intelligence=-1, perception=-1),
    AttributeModifiers(intelligence=-1, perception=-1),
    AttributeModifiers(intelligence=-1, charisme=-1, perception=-1),
    AttributeModifiers(intelligence=-1, charisme=-1, perception=-1),
    AttributeModifiers(
        intelligence=-2, charisme=-1, adresse=-1, perception=-2, attaque=-1, parade=-1
    ),
    AttributeModifiers(
        intelligence=-2, charisme=-2, adresse=-1, perception=-2, attaque=-1, parade=-1
    ),
    AttributeModifiers(
        intelligence=-2,
        charisme=-3,
        adresse=-2,
        perception=-2,
        esquive=-1,
        attaque=-1,
        parade=-1,
    ),
)

MODIFIER_TABLES: dict[EffectType, tuple[AttributeModifiers, ...]] = {
    EffectType.LEGER: TABLE_LEGER,
    EffectType.FORT: TABLE_FORT,
    EffectType.GUEULE_DE_BOIS: TABLE_GUEULE_DE_BOIS,
}


def clamp_dose(dose: Any) -> int:
    """
    Clamp a dose to the table range.

    Args:
        dose: Raw dose from the sheet (may be a string, None, NaN or out of range)

    Returns:
        Integer dose between 0 and 10; infinite doses saturate, NaN counts as 0
    """
    if isinstance(dose, float) and math.isinf(dose):
        return MAX_DOSE if dose > 0 else MIN_DOSE
    return min(max(coerce_int(dose), MIN_DOSE), MAX_DOSE)


def get_modifiers(effect_type: EffectType | str, dose: Any) -> AttributeModifiers:
    """
    Look up the modifier vector for an effect at a given dose.

    Args:
        effect_type: The effect type (enum member or its string value)
        dose: Dose level, clamped to 0-10

    Returns:
        AttributeModifiers for that dose (the zero vector for unknown effects)
    """
    try:
        table = MODIFIER_TABLES[EffectType(effect_type)]
    except ValueError:
        return _ZERO
    return table[clamp_dose(dose)]


def get_all_modifiers(status: Mapping[str, Any]) -> dict[EffectType, AttributeModifiers]:
    """
    Get the modifier vector of every effect type for the given doses.

    Args:
        status: Mapping of effect type value to dose, e.g. {"leger": 5}.
            Missing effect types count as dose 0.

    Returns:
        Dictionary mapping each EffectType to its modifier vector
    """
    return {
        effect_type: get_modifiers(effect_type, status.get(effect_type.value, 0))
        for effect_type in EffectType
    }


def effect_contributions(status: Mapping[str, Any], attribute: str) -> list[Contribution]:
    """
    Build ledger contributions for one attribute from all active effects.

    Args:
        status: Mapping of effect type value to dose
        attribute: Attribute name (e.g. "perception", "pi")

    Returns:
        One contribution per effect type with a non-zero delta, in EffectType order
    """
    contributions = []
    for effect_type, modifiers in get_all_modifiers(status).items():
        delta = modifiers.get(attribute)
        if delta:
            contributions.append(Contribution(label=EFFECT_LABELS[effect_type], value=delta))
    return contributions
