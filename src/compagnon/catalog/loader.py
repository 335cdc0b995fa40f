"""
Equipment catalog loader for Compagnon.

Handles loading reference equipment from YAML files and keeping an in-memory
catalog that can be reloaded when the reference data changes.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .equipment import Equipment, parse_equipment

logger = structlog.get_logger(__name__)

# Categories that cannot be bought through the catalogue
NOT_PURCHASABLE = frozenset({"Mains_nues"})


class CatalogLoadError(Exception):
    """Raised when there's an error loading equipment data."""

    pass


class EquipmentValidationError(Exception):
    """Raised when an equipment record is invalid."""

    pass


def load_yaml_file(file_path: Path) -> list[dict[str, Any]]:
    """
    Load a YAML file containing equipment records.

    Args:
        file_path: Path to the YAML file

    Returns:
        List of equipment dictionaries

    Raises:
        CatalogLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except FileNotFoundError as e:
        raise CatalogLoadError(f"File not found: {file_path}") from e
    except OSError as e:
        raise CatalogLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise CatalogLoadError(f"Empty YAML file: {file_path}")

    if "equipements" not in data:
        raise CatalogLoadError(f"Missing 'equipements' key in {file_path}")

    records = data["equipements"]
    if not isinstance(records, list):
        raise CatalogLoadError(f"'equipements' must be a list in {file_path}")

    return records


def build_equipment(records: Iterable[dict[str, Any]], source: str = "") -> dict[str, Equipment]:
    """
    Validate equipment records and index them by id.

    Args:
        records: Raw equipment records (nested or flat)
        source: Where the records come from (for error messages)

    Returns:
        Dictionary mapping item id to Equipment

    Raises:
        EquipmentValidationError: If a record is invalid or an id is duplicated
    """
    items: dict[str, Equipment] = {}
    for record in records:
        if not isinstance(record, dict):
            raise EquipmentValidationError(f"Equipment record in {source} must be a mapping")
        try:
            item = parse_equipment(record)
        except ValidationError as e:
            item_id = record.get("id", record.get("ref_id", "unknown"))
            raise EquipmentValidationError(
                f"Equipment '{item_id}' in {source} is invalid: {e}"
            ) from e

        if item.id in items:
            raise EquipmentValidationError(f"Duplicate equipment id '{item.id}' in {source}")
        items[item.id] = item

    return items


def load_equipment_file(file_path: Path) -> dict[str, Equipment]:
    """
    Load and validate every equipment record of a YAML file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Dictionary mapping item id to Equipment
    """
    records = load_yaml_file(file_path)
    return build_equipment(records, source=str(file_path))


class ReferenceCatalog:
    """
    In-memory equipment reference catalog.

    The catalog is read-only between reloads; ``reload()`` re-reads the source
    file when the reference data has been republished.
    """

    def __init__(self, items: dict[str, Equipment] | None = None, path: Path | None = None) -> None:
        """
        Initialize the catalog.

        Args:
            items: Initial items by id
            path: YAML file used by reload()
        """
        self._items: dict[str, Equipment] = dict(items or {})
        self.path = path

    @classmethod
    def from_file(cls, path: Path) -> "ReferenceCatalog":
        """Create a catalog loaded from a YAML file."""
        catalog = cls(path=path)
        catalog.reload()
        return catalog

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "ReferenceCatalog":
        """Create a catalog from raw records (e.g. rows of the local datastore)."""
        return cls(build_equipment(records, source="records"))

    def reload(self) -> int:
        """
        Re-read the catalog from its source file.

        Returns:
            Number of items loaded

        Raises:
            CatalogLoadError: If no path is configured or loading fails
        """
        if self.path is None:
            raise CatalogLoadError("Catalog has no source file to reload from")
        self._items = load_equipment_file(self.path)
        logger.info("catalog_loaded", path=str(self.path), count=len(self._items))
        return len(self._items)

    def get(self, ref_id: str, /) -> Equipment | None:
        """Get an item by id."""
        return self._items.get(str(ref_id))

    def __contains__(self, ref_id: object) -> bool:
        return str(ref_id) in self._items

    def __iter__(self) -> Iterator[Equipment]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def by_category(self, category: str) -> list[Equipment]:
        """Get all items of a category, sorted by name."""
        return sorted(
            (item for item in self._items.values() if item.category == category),
            key=lambda item: item.name,
        )

    def purchasable(self) -> list[Equipment]:
        """Get the items that can be added to a catalogue."""
        return [item for item in self._items.values() if item.category not in NOT_PURCHASABLE]
