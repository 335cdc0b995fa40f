"""Display schemas for equipment categories.

Each category shows its own ordered set of columns. Keys are the field names
used in reference records (French, as in the rulebook); ``attribute_for`` maps
the few that differ to the model attribute names.
"""

from dataclasses import dataclass
from enum import StrEnum


class FieldKind(StrEnum):
    """Input kind of a schema field."""

    TEXT = "text"
    NUMBER = "number"
    TEXTAREA = "textarea"


@dataclass(frozen=True)
class FieldDef:
    """One column of a category schema."""

    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT


# Record keys whose model attribute has an English name
KEY_TO_ATTRIBUTE = {
    "prix": "price",
    "monnaie": "currency",
    "poids": "weight",
}

# Fields every catalogue line shows in its own columns
PRICE_WEIGHT_KEYS = frozenset({"prix", "monnaie", "poids"})


def attribute_for(key: str) -> str:
    """Get the model attribute name for a schema key."""
    return KEY_TO_ATTRIBUTE.get(key, key)


def _number(key: str, label: str) -> FieldDef:
    return FieldDef(key, label, FieldKind.NUMBER)


COMMON_FIELDS = (
    _number("niveau", "Niveau"),
    FieldDef("restriction", "Restriction"),
    FieldDef("origine_rarete", "Origine/Rareté"),
    FieldDef("type", "Type"),
    FieldDef("aura", "Aura"),
)

CRAFT_FIELDS = (
    FieldDef("composants", "Composants", FieldKind.TEXTAREA),
    FieldDef("outils", "Outils"),
    FieldDef("qualifications", "Qualifications"),
    _number("difficulte", "Difficulté"),
    FieldDef("temps_de_confection", "Temps"),
    FieldDef("confection", "Confection", FieldKind.TEXTAREA),
    _number("xp_confection", "XP Conf."),
    _number("xp_reparation", "XP Rép."),
)

WEAPON_CARAC_FIELDS = (
    _number("courage", "Courage"),
    _number("intelligence", "Intelligence"),
    _number("charisme", "Charisme"),
    _number("adresse", "Adresse"),
    _number("force", "Force"),
    _number("perception", "Perception"),
    _number("esquive", "Esquive"),
    _number("attaque", "Attaque"),
    _number("parade", "Parade"),
)

CARAC_FIELDS = WEAPON_CARAC_FIELDS + (
    _number("mag_psy", "Magie Psy"),
    _number("mag_phy", "Magie Phy"),
    _number("rm", "RM"),
    _number("mvt", "Mvt"),
    _number("discretion", "Discrétion"),
)

RESIST_FIELDS = (
    _number("pr_sol", "PR Sol"),
    _number("pr_spe", "PR Spé"),
    _number("pr_mag", "PR Mag"),
)

ENV_FIELDS = (
    _number("pluie", "Pluie"),
    _number("froid", "Froid"),
    _number("chaleur", "Chaleur"),
)

PRICE = (_number("prix", "Prix"), FieldDef("monnaie", "Monnaie"))
EFFECT = FieldDef("effet", "Effet", FieldKind.TEXTAREA)
RUPTURE = FieldDef("rupture", "Rupture")
WEIGHT = _number("poids", "Poids (g)")
DAMAGE = (FieldDef("degats", "Dégâts"), _number("pi", "PI"))
HANDS = FieldDef("mains", "Mains")

WEAPON_SCHEMA = (
    *COMMON_FIELDS,
    HANDS,
    *PRICE,
    *DAMAGE,
    *WEAPON_CARAC_FIELDS,
    EFFECT,
    RUPTURE,
    WEIGHT,
    *CRAFT_FIELDS,
)

DEFAULT_SCHEMA = (
    *COMMON_FIELDS,
    HANDS,
    *PRICE,
    *DAMAGE,
    *CARAC_FIELDS,
    EFFECT,
    RUPTURE,
    WEIGHT,
    *CRAFT_FIELDS,
)

CATEGORY_SCHEMAS: dict[str, tuple[FieldDef, ...]] = {
    "Accessoires": (
        *COMMON_FIELDS,
        *PRICE,
        *RESIST_FIELDS,
        _number("pi", "PI"),
        *CARAC_FIELDS,
        *ENV_FIELDS,
        EFFECT,
        RUPTURE,
        WEIGHT,
        *CRAFT_FIELDS,
    ),
    "Armes": WEAPON_SCHEMA,
    "Armes_de_jet": (
        *COMMON_FIELDS,
        FieldDef("portee", "Portée"),
        *PRICE,
        *DAMAGE,
        EFFECT,
        RUPTURE,
        WEIGHT,
        *CRAFT_FIELDS,
    ),
    "Boissons": (*PRICE, EFFECT),
    "Bouffes": (*PRICE, EFFECT, FieldDef("peremption", "Péremption"), WEIGHT, *CRAFT_FIELDS[:7]),
    "Ingredients": (*PRICE, EFFECT, WEIGHT, FieldDef("recolte", "Récolte")),
    "Mains_nues": WEAPON_SCHEMA,
    "Munitions": (*COMMON_FIELDS[:3], *PRICE, EFFECT, RUPTURE, *CRAFT_FIELDS),
    "Objets_magiques": (
        FieldDef("restriction", "Restriction"),
        _number("charge", "Charge"),
        *PRICE,
        EFFECT,
        WEIGHT,
        *CRAFT_FIELDS,
    ),
    "Objets_speciaux": (*PRICE, EFFECT, RUPTURE, WEIGHT, *CRAFT_FIELDS),
    "Outils": (*COMMON_FIELDS[:3], *PRICE, EFFECT, RUPTURE, WEIGHT, *CRAFT_FIELDS),
    "Pieges": (*COMMON_FIELDS[:3], *PRICE, EFFECT, RUPTURE, WEIGHT, *CRAFT_FIELDS),
    "Potions": (
        *COMMON_FIELDS[:4],
        FieldDef("contenant", "Contenant"),
        *PRICE,
        EFFECT,
        WEIGHT,
        *CRAFT_FIELDS,
    ),
    "Protections": (
        *COMMON_FIELDS,
        FieldDef("matiere", "Matière"),
        *PRICE,
        *RESIST_FIELDS,
        *CARAC_FIELDS,
        *ENV_FIELDS,
        FieldDef("couvre", "Couvre"),
        EFFECT,
        RUPTURE,
        WEIGHT,
        *CRAFT_FIELDS,
    ),
    "Sacoches": (*PRICE, EFFECT, _number("places", "Places"), RUPTURE, WEIGHT, *CRAFT_FIELDS),
    "Sacs": (*PRICE, EFFECT, _number("capacite", "Capacité"), RUPTURE, WEIGHT, *CRAFT_FIELDS),
}


def schema_for(category: str) -> tuple[FieldDef, ...]:
    """Get the ordered field list of a category (the default schema for unknown ones)."""
    return CATEGORY_SCHEMAS.get(category, DEFAULT_SCHEMA)


def detail_fields(category: str) -> tuple[FieldDef, ...]:
    """Get the schema fields shown as detail columns in the catalogue."""
    return tuple(f for f in schema_for(category) if f.key not in PRICE_WEIGHT_KEYS)
