"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite registry with the catalog schema, catalog
seeding helpers, API client
Dependencies: pytest, sqlalchemy, aiosqlite, fastapi
System role: Test infrastructure and fixture management
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

import cenov_admin.boundary.db.models  # noqa: F401  registers every table on Base.metadata
from cenov_admin.boundary.db.base import Base
from cenov_admin.boundary.db.connection import DatabaseRegistry
from cenov_admin.boundary.db.models import (
    AttributeModel,
    AttributeUnitModel,
    AttributeValueModel,
    CategoryAttributeModel,
    CategoryModel,
)

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def sqlite_registry():
    """
    Registry whose cenov_dev and cenov_preprod databases are in-memory SQLite.

    The produit/public schemas are translated away so the ORM models map
    onto SQLite's single schema.

    Yields:
        DatabaseRegistry: Registry with every catalog table created
    """
    registry = DatabaseRegistry(
        {"cenov_dev": SQLITE_URL, "cenov_preprod": SQLITE_URL},
        engine_options={"poolclass": StaticPool, "connect_args": {"check_same_thread": False}},
        execution_options={"schema_translate_map": {"produit": None, "public": None}},
    )
    for database in registry.databases:
        async with registry.get_engine(database).begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    yield registry

    await registry.dispose_all()


async def seed_reference_data(registry: DatabaseRegistry, database: str = "cenov_dev") -> None:
    """
    Attributes, units and categories shared by the integration tests.

    Attributes: PRESSION (units bar default, Pa), COULEUR (Rouge, Bleu),
    DEBIT (no unit). Categories: POMPES (root, requires PRESSION) with
    child POMPES_IMM (requires DEBIT, links COULEUR).
    """
    async with registry.session(database) as session:
        session.add_all(
            [
                AttributeModel(atr_id=1, atr_value="PRESSION", atr_label="Pression"),
                AttributeModel(atr_id=2, atr_value="bar", atr_label="Bar"),
                AttributeModel(atr_id=3, atr_value="Pa", atr_label="Pascal"),
                AttributeModel(atr_id=4, atr_value="COULEUR", atr_label="Couleur"),
                AttributeModel(atr_id=5, atr_value="DEBIT", atr_label="Débit"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                AttributeUnitModel(fk_attribute=1, fk_unit=2, is_default=True),
                AttributeUnitModel(fk_attribute=1, fk_unit=3, is_default=False),
                AttributeValueModel(av_atr_id=4, av_value_label="Rouge"),
                AttributeValueModel(av_atr_id=4, av_value_label="Bleu"),
                CategoryModel(cat_id=10, fk_parent=None, cat_code="POMPES", cat_label="Pompes"),
                CategoryModel(
                    cat_id=11,
                    fk_parent=10,
                    cat_code="POMPES_IMM",
                    cat_label="Pompes immergées",
                    cat_wp_name="Immergées",
                ),
            ]
        )
        await session.flush()
        session.add_all(
            [
                CategoryAttributeModel(fk_category=10, fk_attribute=1, cat_atr_required=True),
                CategoryAttributeModel(fk_category=11, fk_attribute=5, cat_atr_required=True),
                CategoryAttributeModel(fk_category=11, fk_attribute=4, cat_atr_required=False),
            ]
        )
        await session.commit()


@pytest.fixture
async def seeded_registry(sqlite_registry: DatabaseRegistry) -> DatabaseRegistry:
    await seed_reference_data(sqlite_registry)
    return sqlite_registry


@pytest.fixture
def app():
    """Application whose dependency overrides are reset after each test."""
    from cenov_admin.api.main import create_app

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
