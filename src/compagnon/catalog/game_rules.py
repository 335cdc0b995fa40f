"""Game rules reference: origins, jobs and the competence list."""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from compagnon.rules.competences import ReferenceCompetence

logger = structlog.get_logger(__name__)


class GameRulesLoadError(Exception):
    """Raised when the rules reference cannot be loaded."""

    pass


class OriginDefinition(BaseModel):
    """A playable origin with its native competences."""

    name_m: str = Field(..., description="Masculine name")
    name_f: str = Field(default="", description="Feminine name")
    competences: list[str] = Field(default_factory=list)

    def has_name(self, name: str) -> bool:
        """Check the masculine and feminine names."""
        return name in (self.name_m, self.name_f)


class JobDefinition(BaseModel):
    """A job with its mandatory competences."""

    name_m: str = Field(..., description="Masculine name")
    name_f: str = Field(default="", description="Feminine name")
    competences_obligatoires: list[str] = Field(default_factory=list)

    def has_name(self, name: str) -> bool:
        """Check the masculine and feminine names."""
        return name in (self.name_m, self.name_f)


class CompetenceDefinition(BaseModel):
    """A competence of the rules reference."""

    nom: str
    description: str = ""
    tableau: str | None = None

    def to_reference(self) -> ReferenceCompetence:
        """Convert to the rule engine's reference type."""
        return ReferenceCompetence(name=self.nom, description=self.description, table=self.tableau)


class GameRules(BaseModel):
    """Loaded rules reference."""

    origines: list[OriginDefinition] = Field(default_factory=list)
    metiers: list[JobDefinition] = Field(default_factory=list)
    competences: list[CompetenceDefinition] = Field(default_factory=list)

    def find_origin(self, name: str) -> OriginDefinition | None:
        """Find an origin by masculine or feminine name."""
        return next((o for o in self.origines if o.has_name(name)), None)

    def find_job(self, name: str) -> JobDefinition | None:
        """Find a job by masculine or feminine name."""
        return next((j for j in self.metiers if j.has_name(name)), None)

    def reference_competences(self) -> dict[str, ReferenceCompetence]:
        """Get the reference competences by name."""
        return {c.nom: c.to_reference() for c in self.competences}


def parse_game_rules(data: dict[str, Any] | None, source: str = "") -> GameRules:
    """
    Validate a rules reference mapping.

    Raises:
        GameRulesLoadError: If the mapping does not match the expected shape
    """
    try:
        return GameRules.model_validate(data or {})
    except ValidationError as e:
        raise GameRulesLoadError(f"Invalid rules reference {source}: {e}") from e


def load_game_rules(file_path: Path) -> GameRules:
    """
    Load the rules reference from YAML.

    Args:
        file_path: Path to the YAML file

    Returns:
        GameRules

    Raises:
        GameRulesLoadError: If the file cannot be read, parsed or validated
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise GameRulesLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except OSError as e:
        raise GameRulesLoadError(f"Error loading {file_path}: {e}") from e

    rules = parse_game_rules(data, source=str(file_path))
    logger.info(
        "game_rules_loaded",
        path=str(file_path),
        origines=len(rules.origines),
        metiers=len(rules.metiers),
        competences=len(rules.competences),
    )
    return rules
