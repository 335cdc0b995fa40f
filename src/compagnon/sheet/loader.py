"""Character document loader."""

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from .character import CharacterRecord

logger = structlog.get_logger(__name__)


class CharacterLoadError(Exception):
    """Raised when a character document cannot be loaded."""

    pass


def load_character_file(file_path: Path) -> CharacterRecord:
    """
    Load a character document from a YAML (or JSON) file.

    Args:
        file_path: Path to the document

    Returns:
        CharacterRecord

    Raises:
        CharacterLoadError: If the file cannot be read or is not a mapping
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CharacterLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except OSError as e:
        raise CharacterLoadError(f"Error loading {file_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CharacterLoadError(f"Character document must be a mapping in {file_path}")

    try:
        record = CharacterRecord.from_document(data)
    except ValidationError as e:
        raise CharacterLoadError(f"Invalid character document {file_path}: {e}") from e

    logger.debug("character_loaded", path=str(file_path), personnage_id=record.id)
    return record
