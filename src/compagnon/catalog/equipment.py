"""Equipment reference records, one model per category.

Reference items come from the catalog store as nested JSON (details,
prix_info, caracteristiques, protections, degats, craft). ``flatten_record``
turns them into flat mappings and ``parse_equipment`` picks the model of the
item's category, so each category only carries the fields it actually has.
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict

from compagnon.rules.ledger import coerce_float, coerce_int

from .schemas import FieldDef, attribute_for, detail_fields


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


LooseInt = Annotated[int, BeforeValidator(coerce_int)]
LooseFloat = Annotated[float, BeforeValidator(coerce_float)]
LooseStr = Annotated[str, BeforeValidator(_coerce_str)]

# Nested sections of stored reference records
NESTED_SECTIONS = ("details", "prix_info", "caracteristiques", "protections", "degats", "craft")

# Stored keys renamed on the models
RECORD_KEY_ALIASES = {
    "nom": "name",
    "poids": "weight",
    "prix": "price",
    "monnaie": "currency",
    "origine/rarete": "origine_rarete",
}


class Equipment(BaseModel):
    """Fields shared by every reference item."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    category: str
    name: str
    weight: LooseFloat = 0.0
    price: LooseFloat = 0.0
    currency: LooseStr = ""
    rupture: LooseStr = ""
    effet: LooseStr = ""

    def stat_bonus(self, key: str) -> int:
        """
        Get a numeric bonus carried by the item.

        Args:
            key: Field name (e.g. "pr_sol", "adresse", "mvt")

        Returns:
            The bonus, or 0 when this category has no such field
        """
        value = getattr(self, key, 0)
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value

    def detail_values(self) -> list[tuple[FieldDef, Any]]:
        """Get the detail columns of the item in schema order."""
        return [
            (field_def, getattr(self, attribute_for(field_def.key), None))
            for field_def in detail_fields(self.category)
        ]


class CommonFields(BaseModel):
    niveau: LooseInt = 0
    restriction: LooseStr = ""
    origine_rarete: LooseStr = ""
    type: LooseStr = ""
    aura: LooseStr = ""


class CraftFields(BaseModel):
    composants: LooseStr = ""
    outils: LooseStr = ""
    qualifications: LooseStr = ""
    difficulte: LooseInt = 0
    temps_de_confection: LooseStr = ""
    confection: LooseStr = ""
    xp_confection: LooseInt = 0
    xp_reparation: LooseInt = 0


class WeaponCaracFields(BaseModel):
    courage: LooseInt = 0
    intelligence: LooseInt = 0
    charisme: LooseInt = 0
    adresse: LooseInt = 0
    force: LooseInt = 0
    perception: LooseInt = 0
    esquive: LooseInt = 0
    attaque: LooseInt = 0
    parade: LooseInt = 0


class CaracFields(WeaponCaracFields):
    mag_psy: LooseInt = 0
    mag_phy: LooseInt = 0
    rm: LooseInt = 0
    mvt: LooseInt = 0
    discretion: LooseInt = 0


class ResistFields(BaseModel):
    pr_sol: LooseInt = 0
    pr_spe: LooseInt = 0
    pr_mag: LooseInt = 0


class EnvFields(BaseModel):
    pluie: LooseInt = 0
    froid: LooseInt = 0
    chaleur: LooseInt = 0


class DamageFields(BaseModel):
    degats: LooseStr = ""
    pi: LooseInt = 0


class Accessoire(Equipment, CommonFields, ResistFields, CaracFields, EnvFields, CraftFields):
    category: Literal["Accessoires"] = "Accessoires"
    pi: LooseInt = 0


class Arme(Equipment, CommonFields, DamageFields, WeaponCaracFields, CraftFields):
    category: Literal["Armes", "Mains_nues"] = "Armes"
    mains: LooseStr = ""


class ArmeDeJet(Equipment, CommonFields, DamageFields, CraftFields):
    category: Literal["Armes_de_jet"] = "Armes_de_jet"
    portee: LooseStr = ""


class Boisson(Equipment):
    category: Literal["Boissons"] = "Boissons"


class Bouffe(Equipment, CraftFields):
    category: Literal["Bouffes"] = "Bouffes"
    peremption: LooseStr = ""


class Ingredient(Equipment):
    category: Literal["Ingredients"] = "Ingredients"
    recolte: LooseStr = ""


class Munition(Equipment, CommonFields, CraftFields):
    category: Literal["Munitions"] = "Munitions"


class ObjetMagique(Equipment, CraftFields):
    category: Literal["Objets_magiques"] = "Objets_magiques"
    restriction: LooseStr = ""
    charge: LooseInt = 0


class ObjetSpecial(Equipment, CraftFields):
    category: Literal["Objets_speciaux"] = "Objets_speciaux"


class Outil(Equipment, CommonFields, CraftFields):
    category: Literal["Outils", "Pieges"] = "Outils"


class Potion(Equipment, CommonFields, CraftFields):
    category: Literal["Potions"] = "Potions"
    contenant: LooseStr = ""


class Protection(Equipment, CommonFields, ResistFields, CaracFields, EnvFields, CraftFields):
    category: Literal["Protections"] = "Protections"
    matiere: LooseStr = ""
    couvre: LooseStr = ""


class Sacoche(Equipment, CraftFields):
    category: Literal["Sacoches"] = "Sacoches"
    places: LooseInt = 0


class Sac(Equipment, CraftFields):
    category: Literal["Sacs"] = "Sacs"
    capacite: LooseInt = 0


class GenericEquipment(Equipment, CommonFields, DamageFields, CaracFields, CraftFields):
    """Item of a category without a dedicated model."""

    mains: LooseStr = ""


EQUIPMENT_TYPES: dict[str, type[Equipment]] = {
    "Accessoires": Accessoire,
    "Armes": Arme,
    "Armes_de_jet": ArmeDeJet,
    "Boissons": Boisson,
    "Bouffes": Bouffe,
    "Ingredients": Ingredient,
    "Mains_nues": Arme,
    "Munitions": Munition,
    "Objets_magiques": ObjetMagique,
    "Objets_speciaux": ObjetSpecial,
    "Outils": Outil,
    "Pieges": Outil,
    "Potions": Potion,
    "Protections": Protection,
    "Sacoches": Sacoche,
    "Sacs": Sac,
}


def flatten_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """
    Flatten a stored reference record.

    Nested sections are merged into the top level and stored keys are renamed
    to model attributes ("nom" -> "name", "poids" -> "weight", ...). Records
    that are already flat pass through unchanged apart from the renames.

    Args:
        record: Stored record, nested or flat

    Returns:
        Flat dictionary ready for model validation
    """
    flat: dict[str, Any] = {}
    for key, value in record.items():
        if key in NESTED_SECTIONS and isinstance(value, Mapping):
            continue
        flat[RECORD_KEY_ALIASES.get(key, key)] = value

    for section in NESTED_SECTIONS:
        values = record.get(section)
        if isinstance(values, Mapping):
            for key, value in values.items():
                flat.setdefault(RECORD_KEY_ALIASES.get(key, key), value)

    if "id" not in flat and "ref_id" in flat:
        flat["id"] = flat["ref_id"]
    if flat.get("id") is not None:
        flat["id"] = str(flat["id"])
    return flat


def parse_equipment(record: Mapping[str, Any]) -> Equipment:
    """
    Build the equipment model matching a record's category.

    Args:
        record: Stored record, nested or flat

    Returns:
        Equipment subclass instance

    Raises:
        pydantic.ValidationError: If id, category or name is missing
    """
    flat = flatten_record(record)
    model = EQUIPMENT_TYPES.get(str(flat.get("category", "")), GenericEquipment)
    return model.model_validate(flat)
