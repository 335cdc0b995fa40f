"""Shared fixtures for all tests."""

import os

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from compagnon.catalog import GameRules, ReferenceCatalog, parse_game_rules
from compagnon.database.models import Base
from compagnon.sheet import CharacterRecord


# Point the settings at a temporary database before anything caches them
@pytest.fixture(scope="session", autouse=True)
def use_test_database(tmp_path_factory):
    """Force all tests to use a temporary database instead of ./data."""
    test_db_dir = tmp_path_factory.mktemp("compagnon_test")
    os.environ["COMPAGNON_DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_dir / 'test.db'}"
    os.environ["COMPAGNON_DATA_ROOT"] = str(test_db_dir)

    import compagnon.database.engine as engine_module
    from compagnon.config import get_settings

    engine_module._engine = None
    engine_module._async_session_factory = None
    get_settings.cache_clear()

    yield

    engine_module._engine = None
    engine_module._async_session_factory = None
    get_settings.cache_clear()


@pytest.fixture
async def db_session():
    """Create a test database session with in-memory SQLite."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def equipment_records():
    """Reference records in both stored shapes (nested and flat)."""
    return [
        {
            "id": "epee",
            "category": "Armes",
            "nom": "Épée",
            "details": {"rupture": "1à3", "mains": "1"},
            "prix_info": {"prix": 10, "monnaie": "PO", "poids": 1000},
            "degats": {"degats": "1D+4", "pi": 0},
            "caracteristiques": {"attaque": 1, "parade": -1},
        },
        {
            "id": "bouclier",
            "category": "Protections",
            "name": "Bouclier",
            "rupture": "1à2",
            "price": 20,
            "weight": 2000,
            "pr_sol": 2,
            "parade": 1,
        },
        {
            "id": "amulette",
            "category": "Accessoires",
            "nom": "Amulette",
            "rupture": "Non",
            "prix": 5.5,
            "poids": 30,
            "rm": 1,
            "mag_phy": 1,
            "mag_psy": 2,
            "mvt": 1,
            "discretion": 1,
            "pr_spe": 1,
            "pr_mag": 1,
        },
        {
            "id": "biere",
            "category": "Boissons",
            "nom": "Bière",
            "prix": 1,
            "poids": 900,
        },
        {
            "id": "outre",
            "category": "Boissons",
            "nom": "Outre d'abondance (enchantée)",
            "prix": 200,
        },
        {
            "id": "poings",
            "category": "Mains_nues",
            "nom": "Mains nues",
            "rupture": "Non",
            "degats": "1D",
            "pi": -2,
        },
    ]


@pytest.fixture
def catalog(equipment_records) -> ReferenceCatalog:
    """A small reference catalog."""
    return ReferenceCatalog.from_records(equipment_records)


@pytest.fixture
def game_rules() -> GameRules:
    """A small rules reference."""
    return parse_game_rules(
        {
            "origines": [
                {"name_m": "Humain", "name_f": "Humaine", "competences": ["Débrouillardise"]},
                {"name_m": "Nain", "name_f": "Naine", "competences": ["Terrifiant I"]},
            ],
            "metiers": [
                {"name_m": "Guerrier", "name_f": "Guerrière", "competences_obligatoires": ["Ambidextrie"]},
            ],
            "competences": [
                {"nom": "Les yeux révolver", "description": "Regard glaçant"},
                {"nom": "Terrifiant I", "description": "Fait peur", "tableau": "terreur"},
                {"nom": "Terrifiant II", "description": "Fait très peur", "tableau": "terreur"},
                {"nom": "Ambidextrie", "description": "Deux armes"},
            ],
        }
    )


@pytest.fixture
def make_record():
    """Factory building a character record from a partial document."""

    def _make(**document) -> CharacterRecord:
        return CharacterRecord.from_document(document)

    return _make
