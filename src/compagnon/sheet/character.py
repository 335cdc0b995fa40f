"""Character document consumed by the rules engine.

Character documents are edited through forms and synced between app versions,
so every numeric field is coerced at this boundary: anything that is not a
number becomes 0 and the rules never see garbage.
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal

import structlog
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, InstanceOf

from compagnon.rules.competences import CharacterContext, Competence
from compagnon.rules.inventory import CatalogueLine
from compagnon.rules.ledger import coerce_int

logger = structlog.get_logger(__name__)

LooseInt = Annotated[int, BeforeValidator(coerce_int)]
LooseStr = Annotated[str, BeforeValidator(lambda v: "" if v is None else str(v))]

CHARACTERISTIC_NAMES = (
    "courage",
    "intelligence",
    "charisme",
    "adresse",
    "force",
    "perception",
    "esquive",
    "attaque",
    "parade",
)

# Natural adresse above this grants a permanent +1 in attaque or parade
ADRESSE_BONUS_THRESHOLD = 12


def _entries(value: Any, field: str) -> list[Any]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    logger.warning("sheet_list_malformed", field=field, value_type=type(value).__name__)
    return []


def _parse_competences(value: Any) -> list[Competence]:
    competences = []
    for entry in _entries(value, "competences"):
        if isinstance(entry, Competence):
            competences.append(entry)
        elif isinstance(entry, Mapping):
            competences.append(Competence.from_record(entry))
        elif isinstance(entry, str) and entry.strip():
            # Older sheets stored bare names
            competences.append(Competence.from_record({"nom": entry.strip()}))
        else:
            logger.warning("competence_entry_skipped", entry=repr(entry))
    return competences


def _parse_catalogue(value: Any) -> list[CatalogueLine]:
    lines = []
    for entry in _entries(value, "catalogue"):
        if isinstance(entry, CatalogueLine):
            lines.append(entry)
        elif isinstance(entry, Mapping):
            lines.append(CatalogueLine.from_record(entry))
        else:
            logger.warning("catalogue_entry_skipped", entry=repr(entry))
    return lines


def _parse_equipement(value: Any) -> list[Any]:
    items = []
    for entry in _entries(value, "equipement"):
        if isinstance(entry, (EquippedItem, Mapping)):
            items.append(entry)
        elif isinstance(entry, str) and entry.strip():
            items.append({"refId": entry.strip()})
        else:
            logger.warning("equipement_entry_skipped", entry=repr(entry))
    return items


def _parse_ad_bonus(value: Any) -> str | None:
    if isinstance(value, str) and value.upper() in ("AT", "PRD"):
        return value.upper()
    return None


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Identity(_Record):
    """Who the character is."""

    nom: LooseStr = ""
    origine: LooseStr = ""
    metier: LooseStr = ""


class Characteristics(_Record):
    """Natural characteristic values."""

    courage: LooseInt = 0
    intelligence: LooseInt = 0
    charisme: LooseInt = 0
    adresse: LooseInt = 0
    force: LooseInt = 0
    perception: LooseInt = 0
    esquive: LooseInt = 0
    attaque: LooseInt = 0
    parade: LooseInt = 0


class AlcoholStatus(_Record):
    """Doses of each intoxication effect (clamped when looked up)."""

    leger: LooseInt = 0
    fort: LooseInt = 0
    gueule_de_bois: LooseInt = 0


class CharacterStatus(_Record):
    """Temporary status effects."""

    alcohol: AlcoholStatus = Field(default_factory=AlcoholStatus)


class ProtectionValue(_Record):
    """A value entered on the sheet plus its temporary ("Add.") adjustment."""

    base: LooseInt = 0
    temp: LooseInt = 0


class Defenses(_Record):
    naturelle: ProtectionValue = Field(default_factory=ProtectionValue)
    solide: ProtectionValue = Field(default_factory=ProtectionValue)
    speciale: ProtectionValue = Field(default_factory=ProtectionValue)
    magique: ProtectionValue = Field(default_factory=ProtectionValue)
    bouclier_actif: bool = False


class Movement(_Record):
    marche: ProtectionValue = Field(default_factory=ProtectionValue)
    course: ProtectionValue = Field(default_factory=ProtectionValue)


class MagicStealth(_Record):
    magie_physique: ProtectionValue = Field(default_factory=ProtectionValue)
    magie_psychique: ProtectionValue = Field(default_factory=ProtectionValue)
    resistance_magique: ProtectionValue = Field(default_factory=ProtectionValue)
    discretion: ProtectionValue = Field(default_factory=ProtectionValue)


class EquippedItem(_Record):
    """Reference to a worn or wielded catalog item."""

    ref_id: LooseStr = Field(default="", alias="refId")
    rupture_modifier: LooseInt = Field(default=0, alias="modif_rupture")


class CharacterRecord(_Record):
    """A full character sheet."""

    id: LooseStr = ""
    identity: Identity = Field(default_factory=Identity)
    caracteristiques: Characteristics = Field(default_factory=Characteristics)
    status: CharacterStatus = Field(default_factory=CharacterStatus)
    defenses: Defenses = Field(default_factory=Defenses)
    movement: Movement = Field(default_factory=Movement)
    magic: MagicStealth = Field(default_factory=MagicStealth)
    equipement: Annotated[list[EquippedItem], BeforeValidator(_parse_equipement)] = Field(
        default_factory=list
    )
    competences: Annotated[
        list[InstanceOf[Competence]], BeforeValidator(_parse_competences)
    ] = Field(default_factory=list)
    catalogue: Annotated[
        list[InstanceOf[CatalogueLine]], BeforeValidator(_parse_catalogue)
    ] = Field(default_factory=list)
    ad_bonus: Annotated[Literal["AT", "PRD"] | None, BeforeValidator(_parse_ad_bonus)] = None

    @property
    def name(self) -> str:
        """Character name."""
        return self.identity.nom

    @property
    def origin(self) -> str:
        """Origin as written on the sheet."""
        return self.identity.origine

    def alcohol_doses(self) -> dict[str, int]:
        """Get the intoxication doses keyed by effect type."""
        return self.status.alcohol.model_dump()

    def competence_context(self, game_rules: Any = None) -> CharacterContext:
        """
        Build the rule engine context for this character.

        Args:
            game_rules: Loaded GameRules; without it only names are filled in
        """
        if game_rules is None:
            return CharacterContext(origin=self.identity.origine, job=self.identity.metier)
        return CharacterContext.from_game_rules(
            self.identity.origine, self.identity.metier, game_rules
        )

    def with_competences(self, competences: list[Competence]) -> "CharacterRecord":
        """Return a copy with another competence list."""
        return self.model_copy(update={"competences": list(competences)})

    def with_catalogue(self, lines: list[CatalogueLine] | tuple[CatalogueLine, ...]) -> "CharacterRecord":
        """Return a copy with other catalogue lines."""
        return self.model_copy(update={"catalogue": list(lines)})

    def needs_adresse_bonus_choice(self) -> bool:
        """Check whether the player still has to pick the adresse bonus."""
        return self.caracteristiques.adresse > ADRESSE_BONUS_THRESHOLD and self.ad_bonus is None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "CharacterRecord":
        """Parse a stored character document."""
        return cls.model_validate(document or {})

    def to_document(self) -> dict[str, Any]:
        """Serialize to a plain document for storage."""
        document = self.model_dump(
            mode="json", by_alias=True, exclude={"competences", "catalogue"}
        )
        document["competences"] = [c.to_record() for c in self.competences]
        document["catalogue"] = [line.to_record() for line in self.catalogue]
        return document
