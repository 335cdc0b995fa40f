"""Tests for the reactive competence rules."""

import pytest

from compagnon.rules.competences import (
    RULES,
    CharacterContext,
    Competence,
    ReferenceCompetence,
    SystemGranted,
    TierRule,
    UserGranted,
    add_competence,
    apply_rules,
    parse_provenance,
    remove_competence,
    system_competence_id,
)

REFERENCE = [
    ReferenceCompetence("Les yeux révolver", "Regard glaçant"),
    ReferenceCompetence("Terrifiant I", "Fait peur", "terreur"),
    ReferenceCompetence("Terrifiant II", "Fait très peur", "terreur"),
]


def user(name: str, competence_id: str | None = None, source: str | None = None) -> Competence:
    """Build a player competence."""
    return Competence(
        id=competence_id or f"u-{name}",
        name=name,
        provenance=UserGranted(source),
    )


def system(name: str, rule_id: str = "les_yeux") -> Competence:
    """Build a rule-granted competence."""
    return Competence(
        id=system_competence_id(rule_id, name),
        name=name,
        provenance=SystemGranted(rule_id),
    )


def system_names(skills: list[Competence]) -> list[str]:
    return [s.name for s in skills if s.is_owned_by("les_yeux")]


class TestProvenance:
    """Test provenance tags."""

    def test_system_tag(self):
        """Test system tags round trip."""
        provenance = parse_provenance("system:les_yeux")

        assert provenance == SystemGranted("les_yeux")
        assert provenance.tag == "system:les_yeux"

    def test_legacy_bare_tag(self):
        """Test the bare tag written by older versions."""
        assert parse_provenance("les_yeux") == SystemGranted("les_yeux")

    def test_user_tags(self):
        """Test other tags stay with the player."""
        assert parse_provenance(None) == UserGranted()
        assert parse_provenance("") == UserGranted()
        assert parse_provenance("import") == UserGranted("import")

    def test_record_round_trip(self):
        """Test sheet records keep their provenance."""
        record = {"id": "x", "nom": "Terrifiant I", "description": "d", "source": "system:les_yeux"}
        competence = Competence.from_record(record)

        assert competence.is_system_managed
        assert competence.to_record() == {
            "id": "x",
            "nom": "Terrifiant I",
            "description": "d",
            "source": "system:les_yeux",
        }

    def test_record_defaults(self):
        """Test records without id get one."""
        competence = Competence.from_record({"name": "Pister", "table": "t"})

        assert competence.id
        assert competence.name == "Pister"
        assert competence.table == "t"
        assert competence.source is None

    def test_stable_system_ids(self):
        """Test rule-granted ids are deterministic."""
        assert system_competence_id("les_yeux", "Terrifiant I") == system_competence_id(
            "les_yeux", "Terrifiant I"
        )
        assert system_competence_id("les_yeux", "Terrifiant I") != system_competence_id(
            "les_yeux", "Terrifiant II"
        )


class TestLesYeuxRule:
    """Test the built-in Terrifiant rule."""

    def test_grants_base_tier(self):
        """Test the trigger grants Terrifiant I when nothing else grants it."""
        result = apply_rules([user("Les yeux révolver")], CharacterContext(), REFERENCE)

        assert system_names(result) == ["Terrifiant I"]
        granted = result[-1]
        assert granted.source == "system:les_yeux"
        assert granted.description == "Fait peur"
        assert granted.table == "terreur"

    def test_plural_trigger(self):
        """Test the plural spelling also triggers the rule."""
        result = apply_rules([user("Les yeux révolvers")], CharacterContext(), REFERENCE)

        assert system_names(result) == ["Terrifiant I"]

    def test_upgrade_when_origin_grants_base(self):
        """Test the origin's native Terrifiant I upgrades the grant."""
        context = CharacterContext(origin="Nain", origin_competences=frozenset({"Terrifiant I"}))
        result = apply_rules([user("Les yeux révolver")], context, REFERENCE)

        assert system_names(result) == ["Terrifiant II"]

    def test_upgrade_when_job_grants_base(self):
        """Test the job's mandatory Terrifiant I upgrades the grant."""
        context = CharacterContext(job="Bourreau", job_competences=frozenset({"Terrifiant I"}))
        result = apply_rules([user("Les yeux révolver")], context, REFERENCE)

        assert system_names(result) == ["Terrifiant II"]

    def test_upgrade_when_player_holds_base(self):
        """Test a hand-entered Terrifiant I upgrades the grant."""
        skills = [user("Terrifiant I"), user("Les yeux révolver")]
        result = apply_rules(skills, CharacterContext(), REFERENCE)

        assert system_names(result) == ["Terrifiant II"]
        assert [s.name for s in result if not s.is_system_managed] == [
            "Terrifiant I",
            "Les yeux révolver",
        ]

    def test_downgrade_when_base_disappears(self):
        """Test the upgraded grant falls back once the base tier is gone."""
        skills = [user("Les yeux révolver"), system("Terrifiant II")]
        result = apply_rules(skills, CharacterContext(), REFERENCE)

        assert system_names(result) == ["Terrifiant I"]

    def test_retract_without_trigger(self):
        """Test every grant of the rule goes away with the trigger."""
        skills = [user("Pister"), system("Terrifiant I"), system("Terrifiant II")]
        result = apply_rules(skills, CharacterContext(), REFERENCE)

        assert result == [user("Pister")]

    def test_no_duplicate_of_target(self):
        """Test no system copy is added when the target tier is already held."""
        context = CharacterContext(origin_competences=frozenset({"Terrifiant I"}))
        skills = [user("Les yeux révolver"), user("Terrifiant II")]
        result = apply_rules(skills, context, REFERENCE)

        assert system_names(result) == []
        assert result == skills

    def test_duplicate_system_entries_collapse(self):
        """Test only one rule-granted target survives."""
        skills = [user("Les yeux révolver"), system("Terrifiant I"), system("Terrifiant I")]
        result = apply_rules(skills, CharacterContext(), REFERENCE)

        assert system_names(result) == ["Terrifiant I"]

    def test_other_rule_entries_untouched(self):
        """Test entries owned by another rule are left alone."""
        foreign = system("Terrifiant I", rule_id="autre_regle")
        result = apply_rules([foreign], CharacterContext(), REFERENCE)

        assert result == [foreign]

    def test_without_reference(self):
        """Test grants work without reference data."""
        result = apply_rules([user("Les yeux révolver")], CharacterContext())

        assert system_names(result) == ["Terrifiant I"]
        assert result[-1].description == ""


SCENARIOS = [
    [],
    [user("Les yeux révolver")],
    [user("Les yeux révolver"), user("Terrifiant I")],
    [user("Terrifiant I"), system("Terrifiant I"), system("Terrifiant II")],
    [user("Les yeux révolvers"), system("Terrifiant II"), user("Pister", source="import")],
    [system("Terrifiant II"), user("Les yeux révolver"), user("Terrifiant II")],
]
CONTEXTS = [
    CharacterContext(),
    CharacterContext(origin_competences=frozenset({"Terrifiant I"})),
    CharacterContext(job_competences=frozenset({"Terrifiant II"})),
]


class TestRuleProperties:
    """Test properties that hold for any competence list."""

    @pytest.mark.parametrize("skills", SCENARIOS)
    @pytest.mark.parametrize("context", CONTEXTS)
    def test_idempotent(self, skills, context):
        """Test applying the rules twice changes nothing."""
        once = apply_rules(skills, context, REFERENCE)

        assert apply_rules(once, context, REFERENCE) == once

    @pytest.mark.parametrize("skills", SCENARIOS)
    @pytest.mark.parametrize("context", CONTEXTS)
    def test_tier_exclusivity(self, skills, context):
        """Test the rule never grants both tiers at once."""
        granted = system_names(apply_rules(skills, context, REFERENCE))

        assert len(granted) <= 1

    @pytest.mark.parametrize("skills", SCENARIOS)
    @pytest.mark.parametrize("context", CONTEXTS)
    def test_user_entries_preserved(self, skills, context):
        """Test player entries are never removed, changed or reordered."""
        result = apply_rules(skills, context, REFERENCE)

        before = [s for s in skills if not s.is_system_managed]
        after = [s for s in result if not s.is_system_managed]
        assert after == before

    def test_input_not_mutated(self):
        """Test the input list is left as is."""
        skills = [user("Les yeux révolver")]
        apply_rules(skills, CharacterContext(), REFERENCE)

        assert skills == [user("Les yeux révolver")]


class TestCustomRules:
    """Test composing rules."""

    def test_chained_rules(self):
        """Test a rule triggered by another rule's grant settles in one call."""
        rules = (
            TierRule("second", ("Terrifiant I",), "Aura de peur", "Aura de terreur"),
            *RULES,
        )
        result = apply_rules([user("Les yeux révolver")], CharacterContext(), rules=rules)

        assert [s.name for s in result] == ["Les yeux révolver", "Terrifiant I", "Aura de peur"]
        assert apply_rules(result, CharacterContext(), rules=rules) == result


class TestUserActions:
    """Test adding and removing competences."""

    def test_add_trigger(self):
        """Test adding the trigger brings its grant along."""
        result = add_competence(
            [],
            ReferenceCompetence("Les yeux révolver", "Regard glaçant"),
            CharacterContext(),
            REFERENCE,
            competence_id="c1",
        )

        assert [s.name for s in result] == ["Les yeux révolver", "Terrifiant I"]
        assert result[0].id == "c1"
        assert result[0].provenance == UserGranted()

    def test_add_base_upgrades_grant(self):
        """Test adding Terrifiant I by hand upgrades the rule's grant."""
        skills = apply_rules([user("Les yeux révolver")], CharacterContext(), REFERENCE)
        result = add_competence(
            skills, ReferenceCompetence("Terrifiant I"), CharacterContext(), REFERENCE
        )

        assert system_names(result) == ["Terrifiant II"]

    def test_remove_trigger_retracts_grant(self):
        """Test removing the trigger removes its grant."""
        skills = apply_rules([user("Les yeux révolver", "c1")], CharacterContext(), REFERENCE)
        result = remove_competence(skills, "c1", CharacterContext(), REFERENCE)

        assert result == []

    def test_remove_system_entry_refused(self):
        """Test rule-granted entries cannot be removed by hand."""
        skills = apply_rules([user("Les yeux révolver")], CharacterContext(), REFERENCE)
        granted = skills[-1]
        result = remove_competence(skills, granted.id, CharacterContext(), REFERENCE)

        assert result == skills

    def test_remove_unknown_id(self):
        """Test removing an unknown id changes nothing."""
        skills = [user("Pister")]

        assert remove_competence(skills, "nope", CharacterContext()) == skills


class TestCharacterContext:
    """Test context resolution from the rules reference."""

    def test_from_game_rules(self, game_rules):
        """Test feminine names resolve origin and job."""
        context = CharacterContext.from_game_rules("Naine", "Guerrière", game_rules)

        assert context.grants("Terrifiant I")
        assert context.grants("Ambidextrie")
        assert not context.grants("Débrouillardise")

    def test_unknown_names(self, game_rules):
        """Test unknown origin and job grant nothing."""
        context = CharacterContext.from_game_rules("Dragon", None, game_rules)

        assert context.origin == "Dragon"
        assert context.job == ""
        assert context.origin_competences == frozenset()
