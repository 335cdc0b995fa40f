"""Derived stats for a character sheet.

Every value is built through the contribution ledger so the sheet can show
why it has that number: natural value, then each equipped item, each active
status effect, the origin and the temporary adjustment typed by the player.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .alcohol import effect_contributions
from .inventory import CatalogLookup, apply_rupture_modifier
from .ledger import Contribution, StatDetail, resolve
from .origins import get_archetype_modifiers, racial_contributions

if TYPE_CHECKING:
    from compagnon.catalog.equipment import Equipment
    from compagnon.sheet.character import CharacterRecord, ProtectionValue

CHARACTERISTICS = (
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

TEMPORARY_LABEL = "Temporaire"
ADRESSE_BONUS_LABEL = "Bonus d'adresse"

# Defense -> equipment field
DEFENSE_FIELDS = {
    "solide": "pr_sol",
    "speciale": "pr_spe",
    "magique": "pr_mag",
}

# Magic stat -> (equipment field, characteristics averaged, formula)
MAGIC_FORMULAS = {
    "magie_physique": ("mag_phy", ("intelligence", "adresse"), "(INT + AD) / 2"),
    "magie_psychique": ("mag_psy", ("intelligence", "charisme"), "(INT + CHA) / 2"),
    "resistance_magique": ("rm", ("courage", "intelligence", "force"), "(COU + INT + FO) / 3"),
}


@dataclass(frozen=True)
class SheetStats:
    """Every derived value of a sheet with its breakdown."""

    characteristics: dict[str, StatDetail]
    defenses: dict[str, StatDetail]
    movement: dict[str, StatDetail]
    discretion: StatDetail
    magic: dict[str, StatDetail]
    damage_bonus: StatDetail

    @property
    def total_protection(self) -> int:
        """Sum of the four protection totals."""
        return sum(detail.total for detail in self.defenses.values())

    def all_details(self) -> dict[str, StatDetail]:
        """Get every breakdown keyed by stat name, in sheet order."""
        return {
            **self.characteristics,
            "pi": self.damage_bonus,
            **self.defenses,
            **self.movement,
            "discretion": self.discretion,
            **self.magic,
        }


def equipped_items(record: "CharacterRecord", catalog: CatalogLookup) -> list["Equipment"]:
    """
    Resolve the equipped item references of a character.

    References missing from the catalog are skipped.
    """
    items = []
    for equipped in record.equipement:
        item = catalog.get(equipped.ref_id)
        if item is not None:
            items.append(item)
    return items


def equipment_contributions(items: list["Equipment"], key: str) -> list[Contribution]:
    """Build one contribution per equipped item carrying a non-zero bonus."""
    return [
        Contribution(label=item.name, value=item.stat_bonus(key))
        for item in items
        if item.stat_bonus(key)
    ]


def temporary_contributions(value: "ProtectionValue") -> list[Contribution]:
    """Build the contribution of the temporary field, if any."""
    if not value.temp:
        return []
    return [Contribution(label=TEMPORARY_LABEL, value=value.temp)]


def resolve_characteristic(
    record: "CharacterRecord", name: str, items: list["Equipment"]
) -> StatDetail:
    """
    Resolve a characteristic: natural value, equipment, status effects.

    Attaque and parade also receive the permanent adresse bonus when the
    player picked it.
    """
    contributions = equipment_contributions(items, name)
    contributions += effect_contributions(record.alcohol_doses(), name)
    if (name, record.ad_bonus) in (("attaque", "AT"), ("parade", "PRD")):
        contributions.append(Contribution(label=ADRESSE_BONUS_LABEL, value=1))

    return resolve(
        getattr(record.caracteristiques, name),
        contributions,
        formula="Naturel + Équipement + États",
    )


def resolve_damage_bonus(record: "CharacterRecord", items: list["Equipment"]) -> StatDetail:
    """Resolve the weapon damage bonus (PI) from equipment and status effects."""
    contributions = equipment_contributions(items, "pi")
    contributions += effect_contributions(record.alcohol_doses(), "pi")
    return resolve(0, contributions, formula="Équipement + États")


def resolve_defenses(
    record: "CharacterRecord", items: list["Equipment"]
) -> dict[str, StatDetail]:
    """
    Resolve the four protections.

    Natural protection is typed on the sheet; the others come from equipment.
    """
    defenses = {
        "naturelle": resolve(
            record.defenses.naturelle.base,
            temporary_contributions(record.defenses.naturelle),
            formula="Naturelle + Temporaire",
        )
    }
    for name, key in DEFENSE_FIELDS.items():
        value = getattr(record.defenses, name)
        defenses[name] = resolve(
            0,
            equipment_contributions(items, key) + temporary_contributions(value),
            formula="Équipement + Temporaire",
        )
    return defenses


def resolve_movement(
    record: "CharacterRecord", items: list["Equipment"]
) -> dict[str, StatDetail]:
    """Resolve walking and running movement from the origin, equipment and temporary field."""
    archetype = get_archetype_modifiers(record.origin)
    movement = {}
    for name in ("marche", "course"):
        movement[name] = resolve(
            getattr(archetype, name),
            equipment_contributions(items, "mvt")
            + temporary_contributions(getattr(record.movement, name)),
            formula="Origine + Équipement + Temporaire",
        )
    return movement


def resolve_discretion(record: "CharacterRecord", items: list["Equipment"]) -> StatDetail:
    """Resolve discretion."""
    value = record.magic.discretion
    return resolve(
        value.base,
        racial_contributions(record.origin, "discretion")
        + equipment_contributions(items, "discretion")
        + temporary_contributions(value),
        formula="Base + Origine + Équipement + Temporaire",
    )


def resolve_magic(
    record: "CharacterRecord",
    items: list["Equipment"],
    characteristics: dict[str, StatDetail],
) -> dict[str, StatDetail]:
    """
    Resolve the magic stats from the resolved characteristics.

    The base is the rounded-down average of the characteristic totals, so
    intoxication lowers magic through intelligence, adresse and charisme.
    """
    magic = {}
    for name, (key, sources, formula) in MAGIC_FORMULAS.items():
        base = sum(characteristics[source].total for source in sources) // len(sources)
        contributions = equipment_contributions(items, key)
        if name == "resistance_magique":
            contributions = racial_contributions(record.origin, name) + contributions
        contributions += temporary_contributions(getattr(record.magic, name))
        magic[name] = resolve(base, contributions, formula=formula)
    return magic


def compute_sheet(record: "CharacterRecord", catalog: CatalogLookup) -> SheetStats:
    """
    Compute every derived stat of a character.

    Args:
        record: Character sheet
        catalog: Reference item lookup for equipped items

    Returns:
        SheetStats with a breakdown for each value
    """
    items = equipped_items(record, catalog)
    characteristics = {
        name: resolve_characteristic(record, name, items) for name in CHARACTERISTICS
    }
    return SheetStats(
        characteristics=characteristics,
        defenses=resolve_defenses(record, items),
        movement=resolve_movement(record, items),
        discretion=resolve_discretion(record, items),
        magic=resolve_magic(record, items, characteristics),
        damage_bonus=resolve_damage_bonus(record, items),
    )


def equipment_ruptures(record: "CharacterRecord", catalog: CatalogLookup) -> dict[str, str]:
    """
    Get the final rupture of each equipped item after its rupture modifier.

    Returns:
        Dictionary mapping item id to rupture string (missing items skipped)
    """
    ruptures = {}
    for equipped in record.equipement:
        item = catalog.get(equipped.ref_id)
        if item is not None:
            ruptures[item.id] = apply_rupture_modifier(item.rupture, equipped.rupture_modifier)
    return ruptures


def needs_adresse_bonus_choice(record: "CharacterRecord") -> bool:
    """Check whether the sheet should ask for the attaque/parade adresse bonus."""
    return record.needs_adresse_bonus_choice()
