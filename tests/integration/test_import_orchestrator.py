"""
Integration tests for the transactional catalog import.

System role: Verification of catalog writes, statistics and change tracking
"""

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from cenov_admin.application.services.import_orchestrator import ImportOrchestrator
from cenov_admin.application.services.import_repository import ImportRepository
from cenov_admin.boundary.db.models import (
    CategoryAttributeModel,
    CategoryModel,
    FamilyModel,
    KitAttributeModel,
    PricePurchaseModel,
    ProductModel,
    SupplierModel,
)
from cenov_admin.configs.imports import ImportSettings
from cenov_admin.models.imports import AttributePair, ProductAttributes


def _row(**overrides) -> dict[str, str]:
    row = {
        "pro_cenov_id": "CEN001",
        "pro_code": "P001",
        "sup_code": "SUP1",
        "sup_label": "Fournisseur 1",
        "cat_code": "POMPES",
        "cat_label": "Pompes",
        "kit_label": "Kit A",
        "pp_amount": "12.50",
        "pp_date": "2024-03-01",
    }
    row.update(overrides)
    return row


def _attributes(pro_cenov_id: str = "CEN001", **values: str) -> ProductAttributes:
    return ProductAttributes(
        pro_cenov_id=pro_cenov_id,
        attributes=[AttributePair(code=code, value=value) for code, value in values.items()],
    )


@pytest.fixture
def orchestrator(seeded_registry) -> ImportOrchestrator:
    return ImportOrchestrator(seeded_registry, ImportRepository(), ImportSettings())


async def _count(registry, model) -> int:
    async with registry.session("cenov_dev") as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestNewProducts:
    """Test suite for imports creating catalog entries."""

    @pytest.mark.asyncio
    async def test_creates_entities_and_kit_attributes(self, orchestrator, seeded_registry) -> None:
        result = await orchestrator.import_rows(
            "cenov_dev", [_row()], [_attributes(PRESSION="10 bar", COULEUR="Rouge")]
        )

        assert result.success is True
        stats = result.stats
        assert (stats.suppliers, stats.kits, stats.categories, stats.products, stats.prices) == (1, 1, 0, 1, 1)
        assert stats.category_attributes == 1
        assert stats.kit_attributes == 2

        async with seeded_registry.session("cenov_dev") as session:
            kit_attributes = (
                await session.execute(select(KitAttributeModel).order_by(KitAttributeModel.fk_attribute_characteristic))
            ).scalars().all()
            link = await session.get(CategoryAttributeModel, (10, 4))

        assert [(k.fk_attribute_characteristic, k.kat_value, k.fk_attribute_unite) for k in kit_attributes] == [
            (1, "10", 2),
            (4, "Rouge", None),
        ]
        assert link.cat_atr_required is False

    @pytest.mark.asyncio
    async def test_bare_value_gets_default_unit(self, orchestrator, seeded_registry) -> None:
        await orchestrator.import_rows("cenov_dev", [_row()], [_attributes(PRESSION="6")])

        async with seeded_registry.session("cenov_dev") as session:
            kit_attribute = (await session.execute(select(KitAttributeModel))).scalar_one()

        assert kit_attribute.kat_value == "6"
        assert kit_attribute.fk_attribute_unite == 2

    @pytest.mark.asyncio
    async def test_changes_record_created_columns(self, orchestrator) -> None:
        result = await orchestrator.import_rows("cenov_dev", [_row(fk_document="42")], [_attributes()])

        product_changes = {c.column: c.new_value for c in result.changes if c.table == "product"}
        assert product_changes["pro_cenov_id"] == "CEN001"
        assert product_changes["fk_document"] == 42
        price_change = next(c for c in result.changes if c.table == "price_purchase" and c.column == "pp_amount")
        assert price_change.old_value is None
        assert price_change.new_value == 12.5
        assert price_change.record_id == "CEN001 (2024-03-01)"
        assert price_change.schema_name == "produit"

    @pytest.mark.asyncio
    async def test_unknown_category_is_created_with_optional_links(self, orchestrator, seeded_registry) -> None:
        result = await orchestrator.import_rows(
            "cenov_dev",
            [_row(cat_code="VANNES", cat_label="Vannes")],
            [_attributes(PRESSION="3 Pa", DEBIT="")],
        )

        assert result.stats.categories == 1
        assert result.stats.category_attributes == 2
        assert result.stats.kit_attributes == 1

        async with seeded_registry.session("cenov_dev") as session:
            category = (await session.execute(select(CategoryModel).where(CategoryModel.cat_code == "VANNES"))).scalar_one()
            links = (
                await session.execute(
                    select(CategoryAttributeModel).where(CategoryAttributeModel.fk_category == category.cat_id)
                )
            ).scalars().all()
            kit_attribute = (await session.execute(select(KitAttributeModel))).scalar_one()

        assert category.fk_parent is None
        assert sorted(link.fk_attribute for link in links) == [1, 5]
        assert all(link.cat_atr_required is False for link in links)
        assert kit_attribute.fk_attribute_unite == 3

    @pytest.mark.asyncio
    async def test_family_hierarchy(self, orchestrator, seeded_registry) -> None:
        rows = [
            _row(famille="Moteurs", sous_famille="Triphasés"),
            _row(pro_cenov_id="CEN002", pro_code="P002", famille="Moteurs", sous_famille="Triphasés"),
        ]

        result = await orchestrator.import_rows("cenov_dev", rows, [])

        assert result.stats.families == 2
        async with seeded_registry.session("cenov_dev") as session:
            families = (await session.execute(select(FamilyModel).order_by(FamilyModel.fam_id))).scalars().all()
            product = (await session.execute(select(ProductModel).where(ProductModel.pro_code == "P002"))).scalar_one()

        assert families[1].fk_parent == families[0].fam_id
        assert (product.fk_family, product.fk_sfamily, product.fk_ssfamily) == (
            families[0].fam_id,
            families[1].fam_id,
            None,
        )


class TestReimport:
    """Test suite for imports updating existing entries."""

    @pytest.mark.asyncio
    async def test_second_import_updates_and_tracks_old_values(self, orchestrator, seeded_registry) -> None:
        await orchestrator.import_rows("cenov_dev", [_row()], [_attributes(PRESSION="10 bar")])

        result = await orchestrator.import_rows(
            "cenov_dev",
            [_row(sup_label="Fournisseur Un", pp_amount="15")],
            [_attributes(PRESSION="3")],
        )

        assert result.success is True
        assert result.stats.products == 0
        assert result.stats.products_updated == 1
        assert result.stats.suppliers == 0
        changes = {(c.table, c.column): (c.old_value, c.new_value) for c in result.changes}
        assert changes[("supplier", "sup_label")] == ("Fournisseur 1", "Fournisseur Un")
        assert changes[("product", "sup_label")] == ("Fournisseur 1", "Fournisseur Un")
        assert changes[("price_purchase", "pp_amount")] == (12.5, 15.0)
        assert changes[("kit_attribute", "kat_value")] == ("10", "3")
        assert ("kit_attribute", "fk_attribute_unite") not in changes

        assert await _count(seeded_registry, ProductModel) == 1
        assert await _count(seeded_registry, PricePurchaseModel) == 1
        async with seeded_registry.session("cenov_dev") as session:
            price = (await session.execute(select(PricePurchaseModel))).scalar_one()
        assert price.pp_amount == Decimal("15")

    @pytest.mark.asyncio
    async def test_new_date_adds_a_price(self, orchestrator, seeded_registry) -> None:
        await orchestrator.import_rows("cenov_dev", [_row()], [])
        await orchestrator.import_rows("cenov_dev", [_row(pp_date="2024-04-01", pp_amount="13")], [])

        assert await _count(seeded_registry, PricePurchaseModel) == 2


class TestFailures:
    """Test suite for rolled back imports."""

    @pytest.mark.asyncio
    async def test_ambiguous_category_rolls_back_everything(self, orchestrator, seeded_registry) -> None:
        async with seeded_registry.session("cenov_dev") as session:
            session.add(CategoryModel(cat_id=12, fk_parent=None, cat_code="POMPES", cat_label="Pompes bis"))
            await session.commit()

        result = await orchestrator.import_rows("cenov_dev", [_row()], [_attributes()])

        assert result.success is False
        assert result.error.startswith("Ambiguïté BDD : 2 catégories trouvées avec le code POMPES")
        assert await _count(seeded_registry, SupplierModel) == 0

    @pytest.mark.asyncio
    async def test_transaction_timeout_rolls_back(self, seeded_registry, monkeypatch) -> None:
        orchestrator = ImportOrchestrator(
            seeded_registry, ImportRepository(), ImportSettings(transaction_timeout=0.5)
        )
        import_row = orchestrator._import_row

        async def slow_import_row(*args) -> None:
            await import_row(*args)
            await asyncio.sleep(5)

        monkeypatch.setattr(orchestrator, "_import_row", slow_import_row)

        result = await orchestrator.import_rows("cenov_dev", [_row()], [_attributes()])

        assert result.success is False
        assert result.error == "Délai de transaction dépassé (0.5s)"
        assert result.stats.suppliers == 1
        assert await _count(seeded_registry, SupplierModel) == 0
        assert await _count(seeded_registry, ProductModel) == 0

    @pytest.mark.asyncio
    async def test_connection_wait_timeout(self, seeded_registry, monkeypatch) -> None:
        open_session = seeded_registry.session

        @asynccontextmanager
        async def session_with_slow_connection(database: str):
            async with open_session(database) as session:
                connection = session.connection

                async def slow_connection(*args, **kwargs):
                    await asyncio.sleep(5)
                    return await connection(*args, **kwargs)

                session.connection = slow_connection
                yield session

        monkeypatch.setattr(seeded_registry, "session", session_with_slow_connection)
        orchestrator = ImportOrchestrator(
            seeded_registry, ImportRepository(), ImportSettings(transaction_timeout=30, max_wait=0.05)
        )

        result = await orchestrator.import_rows("cenov_dev", [_row()], [_attributes()])

        assert result.success is False
        assert result.error == "Délai d'attente de connexion dépassé (0.05s)"
        monkeypatch.undo()
        assert await _count(seeded_registry, SupplierModel) == 0
