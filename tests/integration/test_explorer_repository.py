"""
Integration tests for reflection based table access.

Covers MetadataInspector, TableCRUD, ExplorerRepository and ExportService
against the seeded in-memory catalog.

System role: Verification of explorer and export data access
"""

import pytest

from cenov_admin.application.services.explorer_repository import (
    ExplorerRepository,
    format_timestamp,
    validate_identifier,
)
from cenov_admin.application.services.explorer_service import ExplorerService
from cenov_admin.application.services.export_service import ExportService
from cenov_admin.boundary.db.CRUD.table_crud import TableCRUD
from cenov_admin.boundary.db.metadata import MetadataInspector
from cenov_admin.configs.export import ExportSettings
from cenov_admin.core.exceptions import (
    InvalidIdentifierError,
    RecordNotFoundError,
    TableNotFoundError,
    ValidationError,
)
from cenov_admin.models.export import ExportRequest


@pytest.fixture
def inspector(seeded_registry) -> MetadataInspector:
    return MetadataInspector(seeded_registry)


@pytest.fixture
def explorer_repository(seeded_registry, inspector) -> ExplorerRepository:
    return ExplorerRepository(inspector, TableCRUD(seeded_registry))


def test_validate_identifier() -> None:
    assert validate_identifier("product_category", "table") == "product_category"
    with pytest.raises(InvalidIdentifierError):
        validate_identifier("product; drop table x", "table")


def test_format_timestamp_keeps_milliseconds() -> None:
    from datetime import datetime, timezone

    value = datetime(2024, 5, 1, 8, 30, 15, 123456, tzinfo=timezone.utc)

    assert format_timestamp(value) == "2024-05-01 08:30:15.123"


class TestMetadataInspector:
    """Test suite for MetadataInspector on a live catalogue."""

    @pytest.mark.asyncio
    async def test_lists_tables_of_every_database(self, inspector) -> None:
        tables = await inspector.get_all_database_tables()

        names = {(t.database, t.name) for t in tables}
        assert ("cenov_dev", "category") in names
        assert ("cenov_preprod", "product") in names
        assert all(t.category == "table" for t in tables)

    @pytest.mark.asyncio
    async def test_table_metadata(self, inspector) -> None:
        metadata = await inspector.get_table_metadata("cenov_dev", "attribute")

        assert metadata.primary_key == "atr_id"
        label = metadata.get_field("atr_label")
        assert label.type == "String"
        assert label.is_required is True
        assert metadata.get_field("atr_value").is_required is False

    @pytest.mark.asyncio
    async def test_missing_table(self, inspector) -> None:
        assert await inspector.get_table_metadata("cenov_dev", "inexistante") is None

    @pytest.mark.asyncio
    async def test_row_counts_and_validation_rules(self, inspector) -> None:
        assert await inspector.count_table_rows("cenov_dev", "attribute") == 5

        rules = await inspector.get_table_validation_rules("cenov_dev", "kit")

        assert "kit_label" in rules["required_fields"]
        assert "kit_id" in rules["unique_fields"]
        assert "kit_label" in rules["unique_fields"]
        assert rules["validators"]["kit_id"]("12") is True

    @pytest.mark.asyncio
    async def test_importable_tables_carry_row_counts(self, inspector) -> None:
        tables = {(t.database, t.name): t for t in await inspector.get_importable_tables()}

        assert tables[("cenov_dev", "attribute")].row_count == 5
        assert tables[("cenov_preprod", "attribute")].row_count == 0


class TestExplorerRepository:
    """Test suite for paged reads and row writes."""

    @pytest.mark.asyncio
    async def test_table_page_ordered_by_primary_key(self, explorer_repository) -> None:
        page = await explorer_repository.get_table_data("cenov_dev", "attribute", page=2, limit=2)

        assert page["total"] == 5
        assert [row["atr_id"] for row in page["data"]] == [3, 4]
        assert page["metadata"].primary_key == "atr_id"

    @pytest.mark.asyncio
    async def test_timestamps_are_formatted(self, explorer_repository) -> None:
        page = await explorer_repository.get_table_data("cenov_dev", "category")

        created_at = page["data"][0]["created_at"]
        assert isinstance(created_at, str)
        assert len(created_at) == 23

    @pytest.mark.asyncio
    async def test_bounds_and_unknown_tables(self, explorer_repository) -> None:
        with pytest.raises(ValidationError):
            await explorer_repository.get_table_data("cenov_dev", "attribute", page=0)
        with pytest.raises(ValidationError):
            await explorer_repository.get_table_data("cenov_dev", "attribute", limit=10_001)
        with pytest.raises(TableNotFoundError):
            await explorer_repository.get_table_data("cenov_dev", "inexistante")

    @pytest.mark.asyncio
    async def test_create_update_delete_cycle(self, inspector, explorer_repository) -> None:
        service = ExplorerService(inspector, explorer_repository)

        created = await service.create_record("cenov_dev", "attribute", {"atr_value": "TEMP", "atr_label": "Température"})
        atr_id = created["atr_id"]
        assert created["atr_label"] == "Température"

        updated = await service.update_cell("cenov_dev", "attribute", str(atr_id), "atr_label", "Temp.")
        assert updated["atr_label"] == "Temp."

        summary = await service.delete_record("cenov_dev", "attribute", str(atr_id), "SUPPRIMER")
        assert summary == f"attribute #{atr_id} - Temp."

        with pytest.raises(RecordNotFoundError):
            await explorer_repository.get_record("cenov_dev", "attribute", atr_id)

    @pytest.mark.asyncio
    async def test_update_unknown_row(self, explorer_repository) -> None:
        with pytest.raises(RecordNotFoundError):
            await explorer_repository.update_record("cenov_dev", "attribute", 999, {"atr_label": "x"})


class TestExportFromDatabase:
    """Test suite for ExportService on real tables."""

    @pytest.mark.asyncio
    async def test_csv_export_of_one_table(self, seeded_registry, inspector) -> None:
        service = ExportService(inspector, TableCRUD(seeded_registry), ExportSettings())

        export_file, result = await service.build_file(
            ExportRequest(selectedSources=["cenov_dev-attribute_value"], format="csv")
        )

        content = export_file.content.decode("utf-8")
        assert export_file.file_name == "cenov_dev_attribute_value.csv"
        assert content.startswith("\ufeff# Table: attribute_value\nav_id,av_atr_id,av_value_label\n")
        assert "Rouge" in content
        assert result.exported_rows == 2

    @pytest.mark.asyncio
    async def test_page_data_counts_rows(self, seeded_registry, inspector) -> None:
        service = ExportService(inspector, TableCRUD(seeded_registry), ExportSettings())

        page = await service.get_page_data()

        attribute = next(t for t in page.tables if t.database == "cenov_dev" and t.name == "attribute")
        assert attribute.row_count == 5
        assert page.databases == ["cenov_dev", "cenov_preprod"]
        assert page.export_formats[0].value == "csv"
