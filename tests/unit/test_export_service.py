"""
Test suite for table export rendering and ExportService.

Rendering helpers are tested on in-memory ExportTableData; the service
is tested with mocked metadata inspector and table access.

System role: Verification of bulk data export
"""

import io
import json
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from openpyxl import load_workbook

from cenov_admin.application.services.export_service import (
    EXCEL_CREATOR,
    ExportService,
    format_number,
    format_timestamp_text,
    format_value_for_excel,
    format_value_for_export,
    generate_file_name,
    render_csv,
    render_excel,
    render_json,
    render_xml,
    serialize_row,
)
from cenov_admin.configs.export import ExportSettings
from cenov_admin.core.exceptions import ExportError, TableNotFoundError, UnknownDatabaseError
from cenov_admin.models.export import ExportRequest, ExportTableData
from cenov_admin.models.metadata import FieldInfo, TableInfo, TableMetadata


def _table(name: str, database: str = "cenov_dev", rows: int = 2) -> ExportTableData:
    data = [{"id": i, "label": f"Ligne {i}"} for i in range(1, rows + 1)]
    return ExportTableData(
        table_name=name,
        database=database,
        schema="public",
        data=data,
        columns=["id", "label"],
        total_rows=len(data),
    )


class TestValueFormatting:
    """Test suite for value formatting helpers."""

    def test_number_uses_narrow_no_break_space(self) -> None:
        assert format_number(1234567) == "1\u202f234\u202f567"
        assert format_number(12) == "12"

    def test_export_values(self) -> None:
        assert format_value_for_export(None) == ""
        assert format_value_for_export(True) == "true"
        assert format_value_for_export(Decimal("1.50")) == "1.50"
        assert format_value_for_export({"a": 1}) == '{"a": 1}'
        assert format_value_for_export(b"\x01\xff") == "01ff"

    def test_excel_keeps_native_types_and_drops_timezone(self) -> None:
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        assert format_value_for_excel(Decimal("2.5")) == 2.5
        assert format_value_for_excel(3) == 3
        assert format_value_for_excel(aware) == datetime(2024, 1, 1, 12, 0)
        assert format_value_for_excel("a\x01b") == "ab"

    def test_serialize_row_truncates_binary_columns(self) -> None:
        row = {"blob_data": b"\xaa" * 40, "amount": Decimal("9.90"), "at": datetime(2024, 5, 1, 8, 30)}

        result = serialize_row(row, {"blob_data"}, 50)

        assert result["blob_data"] == "aa" * 25
        assert result["amount"] == 9.9
        assert result["at"] == "2024-05-01 08:30:00"

    def test_timestamps_match_postgres_text(self) -> None:
        paris = timezone(timedelta(hours=2))
        india = timezone(timedelta(hours=5, minutes=30))

        assert format_timestamp_text(datetime(2024, 5, 1, 8, 30, 0, 120000, tzinfo=timezone.utc)) == (
            "2024-05-01 08:30:00.12+00"
        )
        assert format_timestamp_text(datetime(2024, 5, 1, 8, 30, tzinfo=paris)) == "2024-05-01 08:30:00+02"
        assert format_timestamp_text(datetime(2024, 5, 1, 8, 30, tzinfo=india)) == "2024-05-01 08:30:00+05:30"
        assert format_timestamp_text(datetime(2024, 5, 1, 8, 30, 0, 5)) == "2024-05-01 08:30:00.000005"


class TestGenerateFileName:
    """Test suite for generate_file_name()."""

    def test_single_table(self) -> None:
        assert generate_file_name([_table("product")], "xlsx", 10) == "cenov_dev_product.xlsx"

    def test_up_to_three_tables(self) -> None:
        tables = [_table("a"), _table("b"), _table("c")]
        assert generate_file_name(tables, "json", 10) == "cenov_dev_a-b-c.json"

    def test_many_tables_across_databases(self) -> None:
        tables = [_table("a", "cenov_preprod"), _table("b"), _table("c"), _table("d")]
        assert generate_file_name(tables, "xml", 10) == "cenov_dev_cenov_preprod_4tables.xml"

    def test_every_table_is_complet(self) -> None:
        assert generate_file_name([_table("a"), _table("b")], "csv", 2) == "cenov_dev_complet.csv"


class TestRenderers:
    """Test suite for the four file renderers."""

    def test_csv_sections_with_bom(self) -> None:
        content = render_csv([_table("t1", rows=1), _table("t2", rows=1)], include_headers=True).decode("utf-8")

        assert content.startswith("\ufeff# Table: t1\nid,label\n1,Ligne 1\n")
        assert "\n\n\n# Table: t2\n" in content

    def test_csv_without_headers_quotes_special_values(self) -> None:
        table = _table("t1", rows=0)
        table.data = [{"id": 1, "label": 'a,"b"'}]

        content = render_csv([table], include_headers=False).decode("utf-8")

        assert content == '\ufeff# Table: t1\n1,"a,""b"""\n'

    def test_excel_sheets_and_headers(self) -> None:
        long_name = "x" * 40
        content = render_excel([_table(long_name), _table(long_name)], include_headers=True)

        workbook = load_workbook(io.BytesIO(content))
        assert workbook.sheetnames == ["x" * 27, "x" * 27 + "(1)"]
        sheet = workbook.worksheets[0]
        assert [c.value for c in sheet[1]] == ["id", "label"]
        assert sheet["A1"].font.bold is True
        assert sheet["A2"].value == 1
        assert sheet.column_dimensions["A"].width == 15
        assert workbook.properties.creator == EXCEL_CREATOR

    def test_xml_structure(self) -> None:
        content = render_xml([_table("product")])

        assert content.startswith(b'<?xml version="1.0" encoding="UTF-8"?>')
        root = ET.fromstring(content)
        assert root.tag == "export"
        assert root.get("totalRows") == "2"
        table = root.find("tables/table")
        assert table.get("name") == "product"
        assert [c.get("name") for c in table.findall("columns/column")] == ["id", "label"]
        assert table.find("data/row/label").text == "Ligne 1"

    def test_json_structure(self) -> None:
        payload = json.loads(render_json([_table("product")], include_headers=True, row_limit=100))

        assert payload["metadata"]["totalTables"] == 1
        assert payload["metadata"]["rowLimit"] == 100
        table = payload["databases"]["cenov_dev"]["tables"]["product"]
        assert table["metadata"]["exportedRows"] == 2
        assert table["data"][0] == {"id": 1, "label": "Ligne 1"}


@pytest.fixture
def metadata() -> TableMetadata:
    return TableMetadata(
        name="product",
        schema="public",
        primary_key="id",
        fields=[
            FieldInfo(name="id", type="Int", db_type="INTEGER", is_primary_key=True),
            FieldInfo(name="label", type="String", db_type="VARCHAR"),
            FieldInfo(name="raw", type="Bytes", db_type="BYTEA"),
        ],
    )


@pytest.fixture
def inspector(metadata) -> MagicMock:
    inspector = MagicMock()
    inspector.registry.databases = ["cenov", "cenov_dev", "cenov_preprod"]
    inspector.get_table_metadata = AsyncMock(return_value=metadata)
    inspector.get_all_database_tables = AsyncMock(
        return_value=[
            TableInfo(name="product", display_name="product", schema="public", category="table", database="cenov_dev"),
            TableInfo(name="kit", display_name="kit", schema="public", category="table", database="cenov_dev"),
        ]
    )
    return inspector


@pytest.fixture
def tables() -> MagicMock:
    tables = MagicMock()
    tables.fetch_rows = AsyncMock(
        return_value=(None, [{"id": 1, "label": "Pompe", "raw": b"\x00\x01"}, {"id": 2, "label": "Vanne", "raw": None}])
    )
    return tables


@pytest.fixture
def export_service(inspector, tables) -> ExportService:
    return ExportService(inspector, tables, ExportSettings())


class TestExportService:
    """Test suite for ExportService."""

    @pytest.mark.asyncio
    async def test_resolve_source_with_database(self, export_service) -> None:
        assert await export_service.resolve_source("cenov_dev-product") == ("cenov_dev", "product")

    @pytest.mark.asyncio
    async def test_resolve_source_unknown_database(self, export_service) -> None:
        with pytest.raises(UnknownDatabaseError):
            await export_service.resolve_source("autre-product")

    @pytest.mark.asyncio
    async def test_resolve_source_by_table_name(self, export_service) -> None:
        assert await export_service.resolve_source("kit") == ("cenov_dev", "kit")

        with pytest.raises(TableNotFoundError):
            await export_service.resolve_source("inconnue")

    @pytest.mark.asyncio
    async def test_extract_table_data_hexes_binary_columns(self, export_service, tables) -> None:
        data = await export_service.extract_table_data("cenov_dev-product", limit=10)

        assert data.columns == ["id", "label", "raw"]
        assert data.data[0]["raw"] == "0001"
        assert data.total_rows == 2
        tables.fetch_rows.assert_awaited_once_with("cenov_dev", "product", "public", 10)

    @pytest.mark.asyncio
    async def test_preview_keeps_failing_sources_empty(self, export_service) -> None:
        request = ExportRequest(selectedSources=["cenov_dev-product", "autre-table"])

        response = await export_service.preview(request)

        assert len(response.preview["cenov_dev-product"]) == 2
        assert response.preview["autre-table"] == []

    @pytest.mark.asyncio
    async def test_export_carries_base64_file_and_limit_warning(self, export_service) -> None:
        request = ExportRequest(selectedSources=["cenov_dev-product"], format="json", rowLimit=2)

        result = await export_service.export(request)

        assert result.success is True
        assert result.file_name == "cenov_dev_product.json"
        assert result.exported_rows == 2
        assert result.warnings == ["Table product: limite de 2 lignes appliquée"]
        assert result.file_data.mime_type == "application/json"
        assert result.file_data.size == result.file_size

    @pytest.mark.asyncio
    async def test_export_without_any_data_fails(self, export_service) -> None:
        request = ExportRequest(selectedSources=["autre-product"])

        with pytest.raises(ExportError) as exc_info:
            await export_service.export(request)

        assert exc_info.value.message == "Aucune donnée n'a pu être extraite"
        assert len(exc_info.value.errors) == 1

    def test_request_requires_a_source(self) -> None:
        from pydantic import ValidationError

        with pytest.raises(ValidationError, match="Sélectionnez au moins une source"):
            ExportRequest(selectedSources=[])
