"""Reactive competence rules.

Some competences grant other competences. The rule engine keeps those derived
grants in the character's competence list, tagged with the rule that created
them, so they can be upgraded, downgraded or retracted as the list changes
without ever touching what the player entered by hand.
"""

import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from compagnon.catalog.game_rules import GameRules

logger = structlog.get_logger(__name__)

SYSTEM_SOURCE_PREFIX = "system:"

# Namespace for ids of rule-granted competences
COMPETENCE_NAMESPACE = uuid.UUID("6f1d3c1e-5b7a-4f8e-9a51-0c2f7d8e4b19")


@dataclass(frozen=True)
class UserGranted:
    """Competence entered by the player (or imported with the sheet)."""

    source: str | None = None

    @property
    def tag(self) -> str | None:
        """Persisted source string."""
        return self.source


@dataclass(frozen=True)
class SystemGranted:
    """Competence maintained by a rule."""

    rule_id: str

    @property
    def tag(self) -> str:
        """Persisted source string."""
        return f"{SYSTEM_SOURCE_PREFIX}{self.rule_id}"


Provenance = UserGranted | SystemGranted

USER_GRANTED = UserGranted()


@dataclass(frozen=True)
class ReferenceCompetence:
    """Competence definition from the rules reference."""

    name: str
    description: str = ""
    table: str | None = None


@dataclass(frozen=True)
class Competence:
    """A competence on a character sheet."""

    id: str
    name: str
    description: str = ""
    table: str | None = None
    provenance: Provenance = USER_GRANTED

    @property
    def source(self) -> str | None:
        """Persisted source tag (None for plain user entries)."""
        return self.provenance.tag

    @property
    def is_system_managed(self) -> bool:
        """Check whether a rule owns this entry."""
        return isinstance(self.provenance, SystemGranted)

    def is_owned_by(self, rule_id: str) -> bool:
        """Check whether the given rule owns this entry."""
        return isinstance(self.provenance, SystemGranted) and self.provenance.rule_id == rule_id

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Competence":
        """
        Build a competence from a sheet record.

        Args:
            record: Mapping with "id", "nom" (or "name"), "description",
                "tableau" (or "table") and an optional "source"

        Returns:
            Competence with its provenance parsed from the source tag
        """
        return cls(
            id=str(record.get("id") or uuid.uuid4()),
            name=str(record.get("nom") or record.get("name") or ""),
            description=str(record.get("description") or ""),
            table=record.get("tableau", record.get("table")),
            provenance=parse_provenance(record.get("source")),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the sheet record format."""
        record: dict[str, Any] = {
            "id": self.id,
            "nom": self.name,
            "description": self.description,
        }
        if self.table is not None:
            record["tableau"] = self.table
        if self.source is not None:
            record["source"] = self.source
        return record


@dataclass(frozen=True)
class CharacterContext:
    """Parts of the character the rules need besides the competence list.

    Attributes:
        origin: Origin name as written on the sheet
        job: Job name as written on the sheet
        origin_competences: Competences granted natively by the origin
        job_competences: Mandatory competences of the job
    """

    origin: str = ""
    job: str = ""
    origin_competences: frozenset[str] = field(default_factory=frozenset)
    job_competences: frozenset[str] = field(default_factory=frozenset)

    def grants(self, name: str) -> bool:
        """Check whether the origin or the job already grants a competence."""
        return name in self.origin_competences or name in self.job_competences

    @classmethod
    def from_game_rules(
        cls, origin: str | None, job: str | None, game_rules: "GameRules"
    ) -> "CharacterContext":
        """
        Resolve origin and job competences from the rules reference.

        Args:
            origin: Origin name (masculine or feminine form)
            job: Job name (masculine or feminine form)
            game_rules: Loaded rules reference

        Returns:
            CharacterContext with the granted competence sets filled in
        """
        origin_def = game_rules.find_origin(origin) if origin else None
        job_def = game_rules.find_job(job) if job else None
        return cls(
            origin=origin or "",
            job=job or "",
            origin_competences=frozenset(origin_def.competences) if origin_def else frozenset(),
            job_competences=(
                frozenset(job_def.competences_obligatoires) if job_def else frozenset()
            ),
        )


def parse_provenance(source: Any) -> Provenance:
    """
    Parse a persisted source tag.

    "system:<rule>" tags belong to rules. Bare tags written by older versions
    ("les_yeux") are recognised for the built-in rules. Anything else is left
    to the player.
    """
    if not source:
        return USER_GRANTED
    tag = str(source)
    if tag.startswith(SYSTEM_SOURCE_PREFIX):
        return SystemGranted(tag[len(SYSTEM_SOURCE_PREFIX) :])
    if tag in LEGACY_RULE_TAGS:
        return SystemGranted(tag)
    return UserGranted(tag)


def system_competence_id(rule_id: str, name: str) -> str:
    """Get the stable id of a rule-granted competence."""
    return str(uuid.uuid5(COMPETENCE_NAMESPACE, f"{rule_id}:{name}"))


@dataclass(frozen=True)
class TierRule:
    """Grant a base tier, or the upgraded tier when the base is already held.

    Attributes:
        rule_id: Identifier used in the provenance tag
        triggers: Competence names that activate the rule
        base_tier: Competence granted when the character lacks it
        upgraded_tier: Competence granted when the base tier comes from elsewhere
    """

    rule_id: str
    triggers: tuple[str, ...]
    base_tier: str
    upgraded_tier: str

    @property
    def tiers(self) -> tuple[str, str]:
        """All tiers this rule may grant."""
        return (self.base_tier, self.upgraded_tier)

    def _held_elsewhere(
        self, name: str, skills: Sequence[Competence], context: CharacterContext
    ) -> bool:
        # Origin first, then job, then any entry this rule does not own
        if context.grants(name):
            return True
        return any(s.name == name and not s.is_owned_by(self.rule_id) for s in skills)

    def _grant(self, name: str, reference: Mapping[str, ReferenceCompetence]) -> Competence:
        ref = reference.get(name)
        return Competence(
            id=system_competence_id(self.rule_id, name),
            name=name,
            description=ref.description if ref else "",
            table=ref.table if ref else None,
            provenance=SystemGranted(self.rule_id),
        )

    def apply(
        self,
        skills: Sequence[Competence],
        context: CharacterContext,
        reference: Mapping[str, ReferenceCompetence],
    ) -> list[Competence]:
        """
        Apply the rule to a competence list.

        Args:
            skills: Current competences
            context: Origin and job grants
            reference: Reference competences by name

        Returns:
            New list where this rule's entries match its target state
        """
        if not any(s.name in self.triggers for s in skills):
            return [s for s in skills if not s.is_owned_by(self.rule_id)]

        has_base = self._held_elsewhere(self.base_tier, skills, context)
        target = self.upgraded_tier if has_base else self.base_tier
        keep_target = not self._held_elsewhere(target, skills, context)

        result: list[Competence] = []
        target_kept = False
        for skill in skills:
            if not skill.is_owned_by(self.rule_id):
                result.append(skill)
            elif skill.name == target and keep_target and not target_kept:
                result.append(skill)
                target_kept = True

        if keep_target and not target_kept:
            result.append(self._grant(target, reference))

        return result


RULES: tuple[TierRule, ...] = (
    TierRule(
        rule_id="les_yeux",
        triggers=("Les yeux révolver", "Les yeux révolvers"),
        base_tier="Terrifiant I",
        upgraded_tier="Terrifiant II",
    ),
)

LEGACY_RULE_TAGS = frozenset(rule.rule_id for rule in RULES)


def _reference_index(
    reference: Mapping[str, ReferenceCompetence] | Iterable[ReferenceCompetence],
) -> Mapping[str, ReferenceCompetence]:
    if isinstance(reference, Mapping):
        return reference
    return {ref.name: ref for ref in reference}


def apply_rules(
    skills: Sequence[Competence],
    context: CharacterContext,
    reference: Mapping[str, ReferenceCompetence] | Iterable[ReferenceCompetence] = (),
    rules: Sequence[TierRule] = RULES,
) -> list[Competence]:
    """
    Apply every competence rule until the list stops changing.

    Rules run in declaration order. A rule may read entries owned by other
    rules, so passes repeat until a fixed point (at most one pass per rule
    plus one).

    Args:
        skills: Current competences, in sheet order
        context: Origin and job grants
        reference: Reference competences (by name, or as an iterable)
        rules: Rules to apply

    Returns:
        New competence list; user entries keep their position
    """
    index = _reference_index(reference)
    current = list(skills)

    for _ in range(len(rules) + 1):
        previous = current
        for rule in rules:
            current = rule.apply(current, context, index)
        if current == previous:
            break
    else:
        logger.warning("competence_rules_not_settled", rules=[r.rule_id for r in rules])

    if current != list(skills):
        logger.debug(
            "competence_rules_applied",
            before=[s.name for s in skills if s.is_system_managed],
            after=[s.name for s in current if s.is_system_managed],
        )
    return current


def add_competence(
    skills: Sequence[Competence],
    reference_competence: ReferenceCompetence,
    context: CharacterContext,
    reference: Mapping[str, ReferenceCompetence] | Iterable[ReferenceCompetence] = (),
    rules: Sequence[TierRule] = RULES,
    competence_id: str | None = None,
) -> list[Competence]:
    """
    Add a competence chosen by the player, then re-apply the rules.

    Args:
        skills: Current competences
        reference_competence: Competence picked from the reference list
        context: Origin and job grants
        reference: Reference competences for rule-granted entries
        rules: Rules to apply
        competence_id: Id for the new entry (random when omitted)

    Returns:
        New competence list
    """
    entry = Competence(
        id=competence_id or str(uuid.uuid4()),
        name=reference_competence.name,
        description=reference_competence.description,
        table=reference_competence.table,
    )
    return apply_rules([*skills, entry], context, reference, rules)


def remove_competence(
    skills: Sequence[Competence],
    competence_id: str,
    context: CharacterContext,
    reference: Mapping[str, ReferenceCompetence] | Iterable[ReferenceCompetence] = (),
    rules: Sequence[TierRule] = RULES,
) -> list[Competence]:
    """
    Remove a player competence, then re-apply the rules.

    Rule-granted entries cannot be removed this way; the request is logged and
    the list is returned unchanged.

    Args:
        skills: Current competences
        competence_id: Id of the entry to remove
        context: Origin and job grants
        reference: Reference competences for rule-granted entries
        rules: Rules to apply

    Returns:
        New competence list
    """
    target = next((s for s in skills if s.id == competence_id), None)
    if target is None:
        return list(skills)
    if target.is_system_managed:
        logger.warning(
            "system_competence_removal_refused",
            competence=target.name,
            source=target.source,
        )
        return list(skills)
    remaining = [s for s in skills if s.id != competence_id]
    return apply_rules(remaining, context, reference, rules)
