"""
Test suite for BaseCRUD generic database operations.

Tests create, the reads (by key, all, filters) and update on the in-memory
catalog, with integer and composite primary keys.

System role: Verification of generic database layer foundation
"""

import pytest

from cenov_admin.boundary.db.CRUD.base_crud import BaseCRUD
from cenov_admin.boundary.db.models import CategoryAttributeModel, CategoryModel, SupplierModel


@pytest.fixture
def supplier_crud() -> BaseCRUD:
    return BaseCRUD(SupplierModel)


class TestBaseCRUDCreate:
    """Test suite for BaseCRUD.create() method."""

    @pytest.mark.asyncio
    async def test_create_returns_generated_key(self, sqlite_registry, supplier_crud) -> None:
        async with sqlite_registry.session("cenov_dev") as session:
            supplier = await supplier_crud.create(session, sup_code="ACME", sup_label="Acme")
            await session.commit()

        assert supplier.sup_id is not None
        assert supplier.sup_label == "Acme"


class TestBaseCRUDRead:
    """Test suite for the read methods."""

    @pytest.mark.asyncio
    async def test_get_all_ordered_and_paged(self, sqlite_registry, supplier_crud) -> None:
        async with sqlite_registry.session("cenov_dev") as session:
            for code in ("C", "A", "B"):
                await supplier_crud.create(session, sup_code=code, sup_label=code.lower())

            page = await supplier_crud.get_all(session, limit=2, offset=1)

        assert [s.sup_code for s in page] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_find_one_matches_null(self, seeded_registry) -> None:
        crud = BaseCRUD(CategoryModel)

        async with seeded_registry.session("cenov_dev") as session:
            root = await crud.find_one(session, fk_parent=None)
            missing = await crud.find_one(session, cat_code="NOPE")

        assert root.cat_code == "POMPES"
        assert missing is None

    @pytest.mark.asyncio
    async def test_find_in_with_no_values_skips_query(self, sqlite_registry, supplier_crud) -> None:
        async with sqlite_registry.session("cenov_dev") as session:
            await supplier_crud.create(session, sup_code="ACME", sup_label="Acme")

            assert await supplier_crud.find_in(session, "sup_code", []) == []
            assert len(await supplier_crud.find_in(session, "sup_code", ["ACME", "X"])) == 1

    @pytest.mark.asyncio
    async def test_composite_primary_key(self, seeded_registry) -> None:
        crud = BaseCRUD(CategoryAttributeModel)

        async with seeded_registry.session("cenov_dev") as session:
            link = await crud.get_by_pk(session, (11, 5))
            absent = await crud.get_by_pk(session, (10, 5))

        assert link.cat_atr_required is True
        assert absent is None

    @pytest.mark.asyncio
    async def test_missing_key(self, sqlite_registry, supplier_crud) -> None:
        async with sqlite_registry.session("cenov_dev") as session:
            assert await supplier_crud.get_by_pk(session, 404) is None


class TestBaseCRUDUpdate:
    """Test suite for BaseCRUD.update_by_pk()."""

    @pytest.mark.asyncio
    async def test_update_and_missing_row(self, sqlite_registry, supplier_crud) -> None:
        async with sqlite_registry.session("cenov_dev") as session:
            supplier = await supplier_crud.create(session, sup_code="ACME", sup_label="Acme")

            updated = await supplier_crud.update_by_pk(session, supplier.sup_id, sup_label="Acme SA")

            assert updated.sup_label == "Acme SA"
            assert await supplier_crud.update_by_pk(session, 404, sup_label="x") is None
