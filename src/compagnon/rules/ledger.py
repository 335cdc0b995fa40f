"""Contribution ledger for derived stat breakdowns.

Every derived value on the sheet (defenses, movement, magic, characteristics)
is a base value plus an ordered list of labelled, signed contributions. The
ledger reduces that list to a total and keeps the list around so the sheet can
explain where each point comes from.
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

_LEADING_NUMBER = re.compile(r"^\s*([+-]?\d+(?:[.,]\d+)?)")
_FALSE_WORDS = frozenset({"", "0", "false", "faux", "non", "no", "off", "none", "null"})


@dataclass(frozen=True)
class Contribution:
    """A single signed contribution to a derived stat."""

    label: str
    value: int

    def format_value(self) -> str:
        """Format the value with an explicit sign for positive numbers."""
        return f"+{self.value}" if self.value > 0 else str(self.value)


@dataclass(frozen=True)
class StatDetail:
    """Auditable breakdown of a computed value.

    Attributes:
        formula: Human-readable description of the computation (never evaluated)
        base: Starting value before contributions
        components: Contributions in source order
        total: base + sum of component values
    """

    formula: str
    base: int
    components: tuple[Contribution, ...]
    total: int

    def visible_components(self) -> tuple[Contribution, ...]:
        """Get the components worth displaying (zero-valued ones are hidden)."""
        return tuple(c for c in self.components if c.value != 0)

    def render(self) -> list[str]:
        """
        Render the breakdown as audit trail lines.

        Returns:
            Lines like ["(INT + AD) / 2", "Base : 11", "Baguette : +1", "Total : 12"]
        """
        lines = []
        if self.formula:
            lines.append(self.formula)
        lines.append(f"Base : {self.base}")
        for component in self.visible_components():
            lines.append(f"{component.label} : {component.format_value()}")
        lines.append(f"Total : {self.total}")
        return lines


def resolve(
    base: int, contributions: Iterable[Contribution], formula: str = ""
) -> StatDetail:
    """
    Combine a base value and its contributions into a StatDetail.

    Args:
        base: Starting value
        contributions: Ordered contributions (equipment, status, origin, temporary)
        formula: Descriptive formula shown above the breakdown

    Returns:
        StatDetail whose total is base plus every contribution value
    """
    components = tuple(contributions)
    total = base + sum(c.value for c in components)
    return StatDetail(formula=formula, base=base, components=components, total=total)


def coerce_int(value: Any) -> int:
    """
    Convert loosely typed sheet input into an integer.

    Character documents come from user-edited forms and older app versions, so
    numbers may arrive as strings, floats, None or garbage. Anything that does
    not start with a finite number counts as 0.

    Examples:
        >>> coerce_int("3")
        3
        >>> coerce_int("2 pts")
        2
        >>> coerce_int(None)
        0
        >>> coerce_int(float("nan"))
        0
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    return int(coerce_float(value))


def coerce_float(value: Any) -> float:
    """Convert loosely typed input into a finite float, defaulting to 0.0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return 0.0
    if isinstance(value, float):
        return value if math.isfinite(value) else 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return coerce_float(float(match.group(1).replace(",", ".")))
    return 0.0


def coerce_bool(value: Any, default: bool = False) -> bool:
    """
    Convert a loosely typed flag into a bool.

    Strings such as "false", "non" or "0" are False; None gives the default.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return coerce_float(value) != 0
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_WORDS
    return default
