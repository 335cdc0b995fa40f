"""Tests for equipment reference records."""

import pytest
from pydantic import ValidationError

from compagnon.catalog.equipment import (
    Accessoire,
    Arme,
    Boisson,
    GenericEquipment,
    Protection,
    flatten_record,
    parse_equipment,
)


class TestFlattenRecord:
    """Test flattening of stored records."""

    def test_nested_sections_merged(self):
        """Test nested sections end up at the top level."""
        flat = flatten_record(
            {
                "id": 12,
                "category": "Armes",
                "nom": "Hache",
                "prix_info": {"prix": 8, "monnaie": "PO", "poids": 2200},
                "degats": {"degats": "1D+4", "pi": 1},
                "details": {"origine/rarete": "Commun"},
            }
        )

        assert flat["id"] == "12"
        assert flat["name"] == "Hache"
        assert flat["price"] == 8
        assert flat["currency"] == "PO"
        assert flat["weight"] == 2200
        assert flat["degats"] == "1D+4"
        assert flat["pi"] == 1
        assert flat["origine_rarete"] == "Commun"
        assert "prix_info" not in flat

    def test_top_level_wins(self):
        """Test top-level values are not overwritten by nested ones."""
        flat = flatten_record({"id": "a", "rupture": "1", "details": {"rupture": "1à5"}})

        assert flat["rupture"] == "1"

    def test_flat_record_passes_through(self):
        """Test flat records only get their keys renamed."""
        flat = flatten_record({"id": "a", "category": "Boissons", "name": "Eau", "degats": "1D"})

        assert flat == {"id": "a", "category": "Boissons", "name": "Eau", "degats": "1D"}

    def test_ref_id(self):
        """Test ref_id is used when id is missing."""
        assert flatten_record({"ref_id": 5})["id"] == "5"


class TestParseEquipment:
    """Test category dispatch and coercion."""

    def test_category_models(self):
        """Test each category gets its own model."""
        assert isinstance(parse_equipment({"id": "1", "category": "Armes", "name": "A"}), Arme)
        assert isinstance(parse_equipment({"id": "2", "category": "Mains_nues", "name": "B"}), Arme)
        assert isinstance(
            parse_equipment({"id": "3", "category": "Protections", "name": "C"}), Protection
        )
        assert isinstance(
            parse_equipment({"id": "4", "category": "Accessoires", "name": "D"}), Accessoire
        )
        assert isinstance(parse_equipment({"id": "5", "category": "Boissons", "name": "E"}), Boisson)

    def test_unknown_category(self):
        """Test unknown categories fall back to the generic model."""
        item = parse_equipment({"id": "x", "category": "Reliques", "name": "Os", "rm": 2})

        assert isinstance(item, GenericEquipment)
        assert item.category == "Reliques"
        assert item.stat_bonus("rm") == 2

    def test_loose_values(self):
        """Test numbers typed as text are coerced."""
        item = parse_equipment(
            {"id": "p", "category": "Protections", "name": "Cotte", "pr_sol": "3", "prix": "12,5", "poids": None}
        )

        assert item.stat_bonus("pr_sol") == 3
        assert item.price == 12.5
        assert item.weight == 0.0

    def test_missing_required_field(self):
        """Test records without a name are rejected."""
        with pytest.raises(ValidationError):
            parse_equipment({"id": "1", "category": "Armes"})

    def test_stat_bonus_absent_field(self):
        """Test categories without a field give no bonus."""
        drink = parse_equipment({"id": "b", "category": "Boissons", "name": "Bière"})

        assert drink.stat_bonus("pr_sol") == 0
        assert drink.stat_bonus("name") == 0

    def test_frozen(self):
        """Test reference items cannot be changed."""
        item = parse_equipment({"id": "1", "category": "Armes", "name": "A"})

        with pytest.raises(ValidationError):
            item.name = "B"

    def test_detail_values(self):
        """Test detail columns follow the category schema."""
        item = parse_equipment(
            {"id": "1", "category": "Sacs", "name": "Besace", "capacite": 10, "effet": "Pratique"}
        )

        values = {field_def.key: value for field_def, value in item.detail_values()}
        assert values == {
            "effet": "Pratique",
            "capacite": 10,
            "rupture": "",
            "composants": "",
            "outils": "",
            "qualifications": "",
            "difficulte": 0,
            "temps_de_confection": "",
            "confection": "",
            "xp_confection": 0,
            "xp_reparation": 0,
        }
