"""Origin classification and racial modifiers.

Character origins are free text (there are dozens of playable peoples, each
with masculine and feminine spellings). Racial modifiers only exist for a
handful of archetypes, so every origin is first classified into one of them.
"""

from dataclasses import dataclass
from enum import StrEnum

from .ledger import Contribution


class Archetype(StrEnum):
    """Canonical racial archetypes used to select modifier sets."""

    HUMAIN = "humain"
    ELFE = "elfe"
    ELFE_NOIR = "elfe_noir"
    NAIN = "nain"
    GNOME = "gnome"
    SEMI_HOMME = "semi-homme"
    BARBARE = "barbare"
    PEAU_VERTE = "peau-verte"


DEFAULT_ARCHETYPE = Archetype.HUMAIN


@dataclass(frozen=True)
class OriginRule:
    """Substring patterns that map an origin to an archetype.

    Attributes:
        archetype: Archetype returned when the rule matches
        contains: Patterns matched anywhere in the normalized origin
        exact: Patterns that must equal the whole normalized origin
    """

    archetype: Archetype
    contains: tuple[str, ...] = ()
    exact: tuple[str, ...] = ()

    def matches(self, normalized: str) -> bool:
        """Check whether a lowercased, trimmed origin matches this rule."""
        if normalized in self.exact:
            return True
        return any(pattern in normalized for pattern in self.contains)


# Order matters: "elfe noir" must be tested before the plain elf patterns, and
# the half-breed spellings tagged "(h)" before the green-skin "orque" pattern.
ORIGIN_RULES: tuple[OriginRule, ...] = (
    OriginRule(
        Archetype.BARBARE,
        contains=(
            "barbare",
            "amazone syldérienne",
            "loup-garou",
            "minotaure",
            "homme-bête (canin)",
            "femme-bête (canin)",
        ),
    ),
    OriginRule(
        Archetype.HUMAIN,
        contains=(
            "humain",
            "humaine",
            "demi-elfe (h)",
            "demie-elfe (h)",
            "demi-orque (h)",
            "demie-orque (h)",
            "vampire",
            "squelette sentient",
            "galéanthrope",
            "wukong",
            "nelfe",
        ),
    ),
    OriginRule(
        Archetype.ELFE_NOIR,
        contains=("elfe noir", "incube", "succube", "drac", "draque", "kitsune", "naga"),
    ),
    OriginRule(
        Archetype.ELFE,
        contains=(
            "elfe sylvain",
            "haut elfe",
            "haute elfe",
            "demi-elfe (e)",
            "demie-elfe (e)",
            "homme-lézard",
            "femme-lézard",
            "fée",
        ),
        exact=("elfe",),
    ),
    OriginRule(
        Archetype.PEAU_VERTE,
        contains=(
            "orque",
            "demi-orque (o)",
            "demie-orque (o)",
            "ogre",
            "ogresse",
            "gobelin",
            "gobeline",
            "murloc",
            "troll",
            "skaven",
            "changelin",
            "changeline",
            "homme-légume",
            "femme-légume",
            "demi-démon",
            "demie-démone",
            "homme-bête (caprin)",
            "femme-bête (caprin)",
            "homme-bête (bovin/porcin)",
            "femme-bête (bovin/porcin)",
        ),
    ),
    OriginRule(
        Archetype.NAIN,
        contains=("nain", "naine", "harpie", "profond", "profonde"),
    ),
    OriginRule(Archetype.GNOME, contains=("gnôme", "gnome", "kobold", "tengu")),
    OriginRule(Archetype.SEMI_HOMME, contains=("hobbit",)),
)


def classify_origin(origin: str | None) -> Archetype:
    """
    Classify a free-text origin into its archetype.

    Args:
        origin: Origin as written on the sheet (e.g. "Naine de la Mafia")

    Returns:
        The archetype of the first matching rule, or HUMAIN when nothing matches

    Examples:
        >>> classify_origin("Elfe Noir")
        <Archetype.ELFE_NOIR: 'elfe_noir'>
        >>> classify_origin("")
        <Archetype.HUMAIN: 'humain'>
    """
    if not origin:
        return DEFAULT_ARCHETYPE

    normalized = origin.lower().strip()
    for rule in ORIGIN_RULES:
        if rule.matches(normalized):
            return rule.archetype

    return DEFAULT_ARCHETYPE


@dataclass(frozen=True)
class ArchetypeModifiers:
    """Racial values applied to derived stats.

    Attributes:
        marche: Base walking movement
        course: Base running movement
        discretion: Discretion modifier
        resistance_magique: Magic resistance modifier
    """

    marche: int
    course: int
    discretion: int = 0
    resistance_magique: int = 0


ARCHETYPE_MODIFIERS: dict[Archetype, ArchetypeModifiers] = {
    Archetype.HUMAIN: ArchetypeModifiers(marche=8, course=16),
    Archetype.ELFE: ArchetypeModifiers(marche=8, course=16, discretion=2, resistance_magique=1),
    Archetype.ELFE_NOIR: ArchetypeModifiers(
        marche=8, course=16, discretion=3, resistance_magique=1
    ),
    Archetype.NAIN: ArchetypeModifiers(marche=6, course=12, discretion=-1, resistance_magique=2),
    Archetype.GNOME: ArchetypeModifiers(marche=6, course=12, discretion=3),
    Archetype.SEMI_HOMME: ArchetypeModifiers(marche=6, course=12, discretion=4),
    Archetype.BARBARE: ArchetypeModifiers(
        marche=10, course=20, discretion=-2, resistance_magique=-1
    ),
    Archetype.PEAU_VERTE: ArchetypeModifiers(
        marche=8, course=16, discretion=-1, resistance_magique=-1
    ),
}


def get_archetype_modifiers(origin: str | None) -> ArchetypeModifiers:
    """Get the racial modifier set for a free-text origin."""
    return ARCHETYPE_MODIFIERS[classify_origin(origin)]


def racial_contributions(origin: str | None, stat: str) -> list[Contribution]:
    """
    Build the racial contribution for a modifier stat.

    Args:
        origin: Free-text origin
        stat: "discretion" or "resistance_magique"

    Returns:
        A single labelled contribution, or an empty list when the modifier is 0
    """
    archetype = classify_origin(origin)
    value = getattr(ARCHETYPE_MODIFIERS[archetype], stat, 0)
    if not value:
        return []
    return [Contribution(label=f"Origine ({archetype.value})", value=value)]
