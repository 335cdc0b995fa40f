"""Inventory metrics: item weight, rupture and catalogue totals.

Rupture is the break threshold of an item, written on the sheet as "Non"
(never breaks), a single value ("1") or a range starting at 1 ("1à3"). Only
the upper bound matters for modifiers: a "1à3" item with a +1 rupture
modifier breaks on "1à4".
"""

import re
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol

from .ledger import coerce_bool, coerce_float, coerce_int

if TYPE_CHECKING:
    from compagnon.catalog.equipment import Equipment

NO_RUPTURE = "Non"
NO_RUPTURE_ALIASES = frozenset({"", "non", "aucune"})
RUPTURE_SEPARATORS = re.compile(r"à|to|-|/")
DEFAULT_RUPTURE_CAP = 6

# Weight overrides in grams: named items first, then whole categories
CATEGORY_WEIGHTS: dict[str, float] = {
    "Boissons": 250.0,
}
NAMED_ITEM_WEIGHTS: dict[tuple[str, str], float] = {
    ("Boissons", "Outre d'abondance (enchantée)"): 12.5,
}

RARITY_MULTIPLIERS = (0.5, 1.0, 1.5, 2.0)
DEFAULT_CATEGORY = "Autre"


class CatalogLookup(Protocol):
    """Anything that can find a reference item by id."""

    def get(self, ref_id: str, /) -> "Equipment | None": ...


def weight_of(item: "Equipment | None") -> float:
    """
    Get the unit weight of a reference item in grams.

    Lookup order: named-item exception, category default, stored weight, 0.

    Args:
        item: Reference item (None counts as weightless)

    Returns:
        Weight in grams
    """
    if item is None:
        return 0.0

    named = NAMED_ITEM_WEIGHTS.get((item.category, item.name))
    if named is not None:
        return named

    category_weight = CATEGORY_WEIGHTS.get(item.category)
    if category_weight is not None:
        return category_weight

    return coerce_float(item.weight)


def normalize_rupture(rupture: str | None) -> int:
    """
    Convert a rupture string to its numeric upper bound.

    Examples:
        >>> normalize_rupture("Non")
        0
        >>> normalize_rupture("1")
        1
        >>> normalize_rupture("1 à 3")
        3

    Args:
        rupture: Raw rupture text

    Returns:
        Upper bound of the range, or 0 for "Non"/empty/unparseable values
    """
    if not rupture:
        return 0
    text = str(rupture).lower().strip()
    if text in NO_RUPTURE_ALIASES:
        return 0

    last_part = RUPTURE_SEPARATORS.split(text)[-1].strip()
    match = re.match(r"\d+", last_part)
    return int(match.group()) if match else 0


def format_rupture(value: int) -> str:
    """Format a numeric rupture upper bound in its canonical form."""
    if value <= 0:
        return NO_RUPTURE
    if value == 1:
        return "1"
    return f"1à{value}"


def apply_rupture_modifier(base_rupture: str | None, modifier: Any = 0) -> str:
    """
    Apply a rupture modifier to a base rupture string.

    Args:
        base_rupture: Rupture from the reference item (e.g. "1à2")
        modifier: Modifier chosen on the sheet (e.g. 1)

    Returns:
        Final rupture string (e.g. "1à3"), "Non" when the result is 0 or less
    """
    return format_rupture(normalize_rupture(base_rupture) + coerce_int(modifier))


def available_modifier_options(
    base_rupture: str | None, cap: int = DEFAULT_RUPTURE_CAP
) -> list[int]:
    """
    List the rupture modifiers that keep the item at or below the cap.

    Args:
        base_rupture: Rupture from the reference item
        cap: Highest reachable rupture value

    Returns:
        [0, 1, ..., cap - base], or [0] when the base is already at the cap
    """
    base = normalize_rupture(base_rupture)
    if base >= cap:
        return [0]
    return list(range(cap - base + 1))


@dataclass(frozen=True)
class CatalogueLine:
    """A reference item added to the character's shopping catalogue.

    Attributes:
        uid: Local identifier of the line
        ref_id: Id of the reference item
        quantity: Number of items (at least 1)
        rarity: Price multiplier (0.5, 1, 1.5 or 2)
        included: Whether the line counts in the totals
        condensed: Whether the line is shown without its detail columns
    """

    uid: str
    ref_id: str
    quantity: int = 1
    rarity: float = 1.0
    included: bool = True
    condensed: bool = False

    def __post_init__(self) -> None:
        """Validate catalogue line parameters."""
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")
        if self.rarity not in RARITY_MULTIPLIERS:
            raise ValueError(
                f"rarity must be one of {RARITY_MULTIPLIERS}, got {self.rarity}"
            )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CatalogueLine":
        """
        Build a line from a sheet record, repairing out-of-range values.

        Accepts both the sheet keys (refId, quantite, rarete, is_included,
        is_condensed) and the attribute names.
        """
        quantity = max(coerce_int(record.get("quantite", record.get("quantity", 1))), 1)
        rarity = coerce_float(record.get("rarete", record.get("rarity", 1.0)))
        if rarity not in RARITY_MULTIPLIERS:
            rarity = 1.0
        return cls(
            uid=str(record.get("uid") or uuid.uuid4()),
            ref_id=str(record.get("refId", record.get("ref_id", ""))),
            quantity=quantity,
            rarity=rarity,
            included=coerce_bool(
                record.get("is_included", record.get("included")), default=True
            ),
            condensed=coerce_bool(record.get("is_condensed", record.get("condensed"))),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the sheet record format."""
        return {
            "uid": self.uid,
            "refId": self.ref_id,
            "quantite": self.quantity,
            "rarete": self.rarity,
            "is_included": self.included,
            "is_condensed": self.condensed,
        }


@dataclass(frozen=True)
class CatalogueTotals:
    """Totals over the included catalogue lines."""

    total_price: float
    total_weight: float


def line_price(line: CatalogueLine, item: "Equipment") -> float:
    """Get the total price of a line: unit price x rarity x quantity."""
    return coerce_float(item.price) * line.rarity * line.quantity


def line_weight(line: CatalogueLine, item: "Equipment") -> float:
    """Get the total weight of a line in grams."""
    return weight_of(item) * line.quantity


def aggregate_catalogue(
    lines: Iterable[CatalogueLine], catalog: CatalogLookup
) -> CatalogueTotals:
    """
    Sum price and weight over the included catalogue lines.

    Excluded lines and lines whose reference item cannot be found count as 0.

    Args:
        lines: Catalogue lines
        catalog: Reference item lookup

    Returns:
        CatalogueTotals with total price and total weight
    """
    total_price = 0.0
    total_weight = 0.0
    for line in lines:
        if not line.included:
            continue
        item = catalog.get(line.ref_id)
        if item is None:
            continue
        total_price += line_price(line, item)
        total_weight += line_weight(line, item)
    return CatalogueTotals(total_price=total_price, total_weight=total_weight)


def add_line(
    lines: Sequence[CatalogueLine],
    ref_id: str,
    condensed: bool = False,
    uid: str | None = None,
) -> tuple[CatalogueLine, ...]:
    """
    Append a new line for a reference item.

    Args:
        lines: Current lines
        ref_id: Reference item id
        condensed: Initial condensed flag (the global condensed view applies to new lines)
        uid: Line id (random when omitted)

    Returns:
        New tuple of lines
    """
    line = CatalogueLine(uid=uid or str(uuid.uuid4()), ref_id=ref_id, condensed=condensed)
    return (*lines, line)


def update_line(
    lines: Sequence[CatalogueLine], uid: str, **changes: Any
) -> tuple[CatalogueLine, ...]:
    """Replace the line with the given uid by a copy carrying the changes."""
    return tuple(replace(line, **changes) if line.uid == uid else line for line in lines)


def remove_line(lines: Sequence[CatalogueLine], uid: str) -> tuple[CatalogueLine, ...]:
    """Drop the line with the given uid."""
    return tuple(line for line in lines if line.uid != uid)


def set_condensed(lines: Sequence[CatalogueLine], condensed: bool) -> tuple[CatalogueLine, ...]:
    """Apply the global condensed view to every line."""
    return tuple(replace(line, condensed=condensed) for line in lines)


def group_by_category(
    lines: Iterable[CatalogueLine], catalog: CatalogLookup
) -> dict[str, list[CatalogueLine]]:
    """
    Group lines by the category of their reference item.

    Lines whose reference is missing go to the "Autre" group. Groups keep the
    order in which their first line appears.
    """
    groups: dict[str, list[CatalogueLine]] = {}
    for line in lines:
        item = catalog.get(line.ref_id)
        category = item.category if item is not None else DEFAULT_CATEGORY
        groups.setdefault(category, []).append(line)
    return groups


def format_amount(amount: float) -> str:
    """
    Format a price or weight total for display.

    Examples:
        >>> format_amount(30.0)
        '30'
        >>> format_amount(12.5)
        '12.50'
    """
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}"
