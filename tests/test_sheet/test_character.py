"""Tests for character documents."""

from compagnon.rules.competences import Competence, SystemGranted
from compagnon.rules.inventory import CatalogueLine
from compagnon.sheet import CharacterRecord


class TestCharacterRecord:
    """Test parsing character documents."""

    def test_empty_document(self):
        """Test an empty document gives a blank sheet."""
        record = CharacterRecord.from_document({})

        assert record.name == ""
        assert record.caracteristiques.courage == 0
        assert record.equipement == []
        assert record.competences == []
        assert record.ad_bonus is None

    def test_numbers_coerced(self, make_record):
        """Test loosely typed numbers from forms."""
        record = make_record(
            caracteristiques={"courage": "12", "force": None, "adresse": "beaucoup"},
            defenses={"naturelle": {"base": "2", "temp": "-1"}},
        )

        assert record.caracteristiques.courage == 12
        assert record.caracteristiques.force == 0
        assert record.caracteristiques.adresse == 0
        assert record.defenses.naturelle.base == 2
        assert record.defenses.naturelle.temp == -1

    def test_unknown_keys_ignored(self, make_record):
        """Test keys the rules do not read are dropped."""
        record = make_record(notes="Aime les chats", identity={"nom": "Bob", "age": 40})

        assert record.name == "Bob"

    def test_equipment_aliases(self, make_record):
        """Test equipped items use the sheet keys."""
        record = make_record(equipement=[{"refId": "epee", "modif_rupture": "2"}])

        assert record.equipement[0].ref_id == "epee"
        assert record.equipement[0].rupture_modifier == 2

    def test_competences_parsed(self, make_record):
        """Test competence records get their provenance."""
        record = make_record(
            competences=[
                {"id": "1", "nom": "Pister"},
                {"id": "2", "nom": "Terrifiant I", "source": "les_yeux"},
            ]
        )

        assert all(isinstance(c, Competence) for c in record.competences)
        assert record.competences[1].provenance == SystemGranted("les_yeux")

    def test_catalogue_parsed(self, make_record):
        """Test catalogue lines are repaired while parsing."""
        record = make_record(catalogue=[{"uid": "l1", "refId": "epee", "quantite": -3}])

        assert record.catalogue == [CatalogueLine(uid="l1", ref_id="epee")]

    def test_ad_bonus(self, make_record):
        """Test the adresse bonus choice is normalized."""
        assert make_record(ad_bonus="at").ad_bonus == "AT"
        assert make_record(ad_bonus="PRD").ad_bonus == "PRD"
        assert make_record(ad_bonus="ESQ").ad_bonus is None

    def test_alcohol_doses(self, make_record):
        """Test doses are exposed by effect type."""
        record = make_record(status={"alcohol": {"leger": 3}})

        assert record.alcohol_doses() == {"leger": 3, "fort": 0, "gueule_de_bois": 0}


class TestMalformedDocuments:
    """Test partially migrated sheets still parse."""

    def test_bare_string_competence(self, make_record):
        """Test a competence stored as a bare name becomes a user entry."""
        record = make_record(competences=["Terrifiant I", {"id": "2", "nom": "Pister"}])

        assert [c.name for c in record.competences] == ["Terrifiant I", "Pister"]
        assert not record.competences[0].is_system_managed
        assert record.competences[0].id

    def test_unreadable_entries_skipped(self, make_record):
        """Test entries of the wrong type are dropped instead of failing the sheet."""
        record = make_record(
            competences=[None, 42, "", {"id": "1", "nom": "Pister"}],
            catalogue=["epee", 3, {"uid": "l1", "refId": "epee"}],
            equipement=[None, "bouclier", {"refId": "epee"}],
        )

        assert [c.name for c in record.competences] == ["Pister"]
        assert record.catalogue == [CatalogueLine(uid="l1", ref_id="epee")]
        assert [item.ref_id for item in record.equipement] == ["bouclier", "epee"]

    def test_lists_of_wrong_shape(self, make_record):
        """Test a mapping or string where a list belongs reads as empty."""
        record = make_record(competences={"nom": "Pister"}, catalogue="epee", equipement=7)

        assert record.competences == []
        assert record.catalogue == []
        assert record.equipement == []

    def test_non_finite_numbers(self, make_record):
        """Test NaN and infinite form values read as 0."""
        record = make_record(
            caracteristiques={"courage": float("nan"), "force": float("inf")},
            status={"alcohol": {"leger": float("-inf")}},
        )

        assert record.caracteristiques.courage == 0
        assert record.caracteristiques.force == 0
        assert record.alcohol_doses()["leger"] == 0

    def test_text_catalogue_flags(self, make_record):
        """Test catalogue flags written as text."""
        record = make_record(catalogue=[{"uid": "l1", "refId": "epee", "is_included": "false"}])

        assert record.catalogue[0].included is False


class TestCharacterRecordUpdates:
    """Test copies and serialization."""

    def test_with_competences(self, make_record):
        """Test replacing the competence list returns a new record."""
        record = make_record()
        competence = Competence(id="1", name="Pister")
        updated = record.with_competences([competence])

        assert updated.competences == [competence]
        assert record.competences == []

    def test_with_catalogue(self, make_record):
        """Test replacing the catalogue returns a new record."""
        line = CatalogueLine(uid="l1", ref_id="epee")
        updated = make_record().with_catalogue((line,))

        assert updated.catalogue == [line]

    def test_document_round_trip(self, make_record):
        """Test documents survive a round trip."""
        record = make_record(
            id="p1",
            identity={"nom": "Gunhild", "origine": "Naine", "metier": "Guerrière"},
            caracteristiques={"adresse": 13},
            equipement=[{"refId": "epee", "modif_rupture": 1}],
            competences=[{"id": "c1", "nom": "Terrifiant I", "source": "system:les_yeux"}],
            catalogue=[{"uid": "l1", "refId": "epee", "quantite": 2, "rarete": 1.5}],
            ad_bonus="PRD",
        )
        document = record.to_document()

        assert document["equipement"] == [{"refId": "epee", "modif_rupture": 1}]
        assert document["competences"][0]["source"] == "system:les_yeux"
        assert document["catalogue"][0]["quantite"] == 2
        assert CharacterRecord.from_document(document) == record

    def test_competence_context(self, make_record, game_rules):
        """Test the rule context comes from origin and job."""
        record = make_record(identity={"origine": "Naine", "metier": "Guerrière"})

        assert record.competence_context().origin_competences == frozenset()
        context = record.competence_context(game_rules)
        assert context.grants("Terrifiant I")
        assert context.grants("Ambidextrie")
