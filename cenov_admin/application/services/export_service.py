"""
Table export service.

Extracts rows from any table of the configured databases and renders
them as Excel, CSV, XML or JSON files.

Dependencies: openpyxl, sqlalchemy, cenov_admin.boundary.db
System role: Bulk data export
"""

import base64
import csv
import io
import json
import logging
import xml.etree.ElementTree as ET
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from cenov_admin.boundary.db.CRUD.table_crud import TableCRUD
from cenov_admin.boundary.db.metadata import MetadataInspector
from cenov_admin.configs.export import ExportSettings
from cenov_admin.core.exceptions import ExportError, TableNotFoundError, UnknownDatabaseError
from cenov_admin.models.export import (
    ExportFile,
    ExportFileData,
    ExportFormatInfo,
    ExportPageResponse,
    ExportRequest,
    ExportResult,
    ExportTableData,
    ExportTableInfo,
    PreviewResponse,
)

logger = logging.getLogger(__name__)

EXPORT_FORMATS: dict[str, ExportFormatInfo] = {
    "csv": ExportFormatInfo(
        value="csv",
        label="CSV (.csv)",
        description="Fichier texte séparé par des virgules",
        mime_type="text/csv; charset=utf-8",
        recommended=True,
    ),
    "xlsx": ExportFormatInfo(
        value="xlsx",
        label="Excel (.xlsx)",
        description="Classeur Excel avec plusieurs feuilles",
        mime_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
    "json": ExportFormatInfo(
        value="json",
        label="JSON (.json)",
        description="Structure de données avec métadonnées",
        mime_type="application/json",
    ),
    "xml": ExportFormatInfo(
        value="xml",
        label="XML (.xml)",
        description="Données structurées en XML",
        mime_type="application/xml",
    ),
}

EXCEL_CREATOR = "CENOV Export System"
SHEET_NAME_MAX = 27
FULL_BINARY_LENGTH = 32767


def format_number(value: int) -> str:
    """Group thousands the French way (narrow no-break space)."""
    return f"{value:,}".replace(",", "\u202f")


def format_value_for_export(value: Any) -> str:
    """Text rendering of a value for CSV, XML and JSON cells."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    logger.warning("Unexpected value type in export", extra={"type": type(value).__name__})
    return str(value)


def format_value_for_excel(value: Any) -> Any:
    """Excel cell value: native numbers, booleans and dates, text otherwise."""
    if value is None:
        return None
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        # Excel has no time zones
        return value.astimezone(timezone.utc).replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return ILLEGAL_CHARACTERS_RE.sub("", format_value_for_export(value))


def format_timestamp_text(value: datetime) -> str:
    """Timestamp text as PostgreSQL casts it: trailing zero microseconds dropped, offset in hours."""
    text = value.strftime("%Y-%m-%d %H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is not None:
        seconds = int(offset.total_seconds())
        sign = "-" if seconds < 0 else "+"
        hours, minutes = divmod(abs(seconds) // 60, 60)
        text += f"{sign}{hours:02d}"
        if minutes:
            text += f":{minutes:02d}"
    return text


def serialize_row(row: dict[str, Any], binary_columns: set[str], binary_limit: int) -> dict[str, Any]:
    """
    Make an extracted row JSON friendly.

    Decimals become floats, timestamps text, binary columns truncated hex.
    """
    result: dict[str, Any] = {}
    for name, value in row.items():
        if value is None:
            result[name] = None
        elif name in binary_columns or isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value) if isinstance(value, (bytes, bytearray, memoryview)) else str(value).encode()
            result[name] = raw.hex()[:binary_limit]
        elif isinstance(value, Decimal):
            result[name] = float(value)
        elif isinstance(value, datetime):
            result[name] = format_timestamp_text(value)
        elif isinstance(value, (date, time)):
            result[name] = value.isoformat()
        else:
            result[name] = value
    return result


def generate_file_name(export_list: list[ExportTableData], extension: str, total_available_tables: int) -> str:
    """
    Name an export file "{prefix}_{part}.{extension}".

    prefix: "export" without data, the database for one database, the
    sorted databases joined by "_" otherwise. part: "complet" when every
    table is exported, the table name for one table, names joined by "-"
    up to three tables, "{n}tables" beyond.
    """
    databases = sorted({d.database for d in export_list})
    if not databases:
        prefix = "export"
    elif len(databases) == 1:
        prefix = databases[0]
    else:
        prefix = "_".join(databases)

    names = [d.table_name for d in export_list]
    if len(names) == total_available_tables:
        part = "complet"
    elif len(names) == 1:
        part = names[0]
    elif len(names) <= 3:
        part = "-".join(names)
    else:
        part = f"{len(names)}tables"
    return f"{prefix}_{part}.{extension}"


def _unique_sheet_name(name: str, used: set[str]) -> str:
    base = name[:SHEET_NAME_MAX]
    candidate = base
    counter = 1
    while candidate in used:
        candidate = f"{base}({counter})"
        counter += 1
    used.add(candidate)
    return candidate


def render_excel(export_list: list[ExportTableData], include_headers: bool) -> bytes:
    """One worksheet per table, bold header row, columns at least 15 wide."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    workbook.properties.creator = EXCEL_CREATOR
    workbook.properties.created = datetime.now()
    used_names: set[str] = set()
    header_font = Font(bold=True)

    for table_data in export_list:
        ws = workbook.create_sheet(title=_unique_sheet_name(table_data.table_name, used_names))
        if include_headers:
            ws.append(table_data.columns)
            for cell in ws[1]:
                cell.font = header_font
        for row in table_data.data:
            ws.append([format_value_for_excel(row.get(col)) for col in table_data.columns])
        for index, col in enumerate(table_data.columns, start=1):
            ws.column_dimensions[get_column_letter(index)].width = max(len(col), 15)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def render_csv(export_list: list[ExportTableData], include_headers: bool) -> bytes:
    """"# Table: name" sections separated by blank lines, UTF-8 with BOM."""
    output = io.StringIO()
    for index, table_data in enumerate(export_list):
        if index > 0:
            output.write("\n\n")
        output.write(f"# Table: {table_data.table_name}\n")
        writer = csv.writer(output, lineterminator="\n")
        if include_headers:
            writer.writerow(table_data.columns)
        for row in table_data.data:
            writer.writerow([format_value_for_export(row.get(col)) for col in table_data.columns])
    return ("\ufeff" + output.getvalue()).encode("utf-8")


def render_xml(export_list: list[ExportTableData]) -> bytes:
    root = ET.Element(
        "export",
        generated=datetime.now(timezone.utc).isoformat(),
        tables=str(len(export_list)),
        totalRows=str(sum(t.total_rows for t in export_list)),
    )
    tables_el = ET.SubElement(root, "tables")
    for table_data in export_list:
        table_el = ET.SubElement(tables_el, "table", name=table_data.table_name, rows=str(table_data.total_rows))
        columns_el = ET.SubElement(table_el, "columns")
        for col in table_data.columns:
            ET.SubElement(columns_el, "column", name=col)
        data_el = ET.SubElement(table_el, "data")
        for row in table_data.data:
            row_el = ET.SubElement(data_el, "row")
            for col in table_data.columns:
                ET.SubElement(row_el, col).text = format_value_for_export(row.get(col))
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return ('<?xml version="1.0" encoding="UTF-8"?>\n' + body).encode("utf-8")


def render_json(export_list: list[ExportTableData], include_headers: bool, row_limit: int | None) -> bytes:
    databases: dict[str, dict[str, Any]] = {}
    for table_data in export_list:
        entry = databases.setdefault(table_data.database, {"name": table_data.database, "tables": {}})
        entry["tables"][table_data.table_name] = {
            "metadata": {
                "tableName": table_data.table_name,
                "columns": table_data.columns,
                "totalRows": table_data.total_rows,
                "exportedRows": len(table_data.data),
            },
            "data": table_data.data,
        }
    payload = {
        "metadata": {
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "format": "json",
            "includeHeaders": include_headers,
            "rowLimit": row_limit,
            "totalTables": len(export_list),
            "totalRows": sum(t.total_rows for t in export_list),
        },
        "databases": databases,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str).encode("utf-8")


class ExportService:
    """
    Export use cases.

    Attributes:
        inspector: Table discovery and column metadata
        tables: Reflected-table row access
        settings: Preview sizes and row limits
    """

    def __init__(self, inspector: MetadataInspector, tables: TableCRUD, settings: ExportSettings) -> None:
        self.inspector = inspector
        self.tables = tables
        self.settings = settings

    async def get_page_data(self) -> ExportPageResponse:
        """
        Importable tables with columns and row counts, plus the export formats.
        """
        tables: list[ExportTableInfo] = []
        for info in await self.inspector.get_importable_tables():
            metadata = await self.inspector.get_table_metadata(info.database, info.name, info.schema_name)
            row_count = info.row_count or 0
            tables.append(
                ExportTableInfo(
                    **info.model_dump(by_alias=True, exclude={"row_count"}),
                    row_count=row_count,
                    columns=metadata.fields if metadata else [],
                    formatted_row_count=format_number(row_count),
                )
            )
        total_rows = sum(t.row_count or 0 for t in tables)
        return ExportPageResponse(
            tables=tables,
            databases=self.inspector.registry.databases,
            total_tables=len(tables),
            total_rows=total_rows,
            formatted_total_rows=format_number(total_rows),
            export_formats=list(EXPORT_FORMATS.values()),
        )

    async def resolve_source(self, source_id: str) -> tuple[str, str]:
        """
        Split a source id "database-table".

        Ids without a dash are looked up by table name across databases.

        Raises:
            UnknownDatabaseError: If the database part is not configured
            TableNotFoundError: If a bare table name matches no table
        """
        databases = self.inspector.registry.databases
        if "-" in source_id:
            database, _, table_name = source_id.partition("-")
            if database not in databases:
                raise UnknownDatabaseError(database)
            return database, table_name
        for info in await self.inspector.get_all_database_tables():
            if info.name == source_id:
                return info.database, info.name
        raise TableNotFoundError(source_id)

    async def extract_table_data(
        self,
        source_id: str,
        limit: int | None = None,
        max_binary_length: int | None = None,
    ) -> ExportTableData:
        """
        Read rows of one source.

        Args:
            source_id: "database-table" identifier
            limit: Maximum rows (None for all)
            max_binary_length: Hex length kept for binary columns

        Raises:
            TableNotFoundError: If the table has no metadata
        """
        database, table_name = await self.resolve_source(source_id)
        metadata = await self.inspector.get_table_metadata(database, table_name)
        if metadata is None:
            raise TableNotFoundError(table_name, database)

        binary_columns = {
            f.name
            for f in metadata.fields
            if "byte" in f.type.lower() or "byte" in f.db_type.lower() or "binary" in f.name or "blob" in f.name
        }
        binary_limit = max_binary_length or (50 if limit else FULL_BINARY_LENGTH)

        _, rows = await self.tables.fetch_rows(database, table_name, metadata.schema_name, limit)
        data = [serialize_row(row, binary_columns, binary_limit) for row in rows]
        logger.info(
            "Table extracted",
            extra={"database": database, "table": table_name, "rows": len(data)},
        )
        return ExportTableData(
            table_name=table_name,
            database=database,
            schema=metadata.schema_name,
            data=data,
            columns=metadata.field_names,
            total_rows=len(data),
        )

    async def preview(self, request: ExportRequest) -> PreviewResponse:
        """First rows of every selected source; failing sources preview as empty."""
        preview: dict[str, list[dict[str, Any]]] = {}
        for source_id in request.selected_sources:
            try:
                table_data = await self.extract_table_data(
                    source_id,
                    limit=self.settings.preview_rows,
                    max_binary_length=self.settings.preview_binary_length,
                )
                preview[f"{table_data.database}-{table_data.table_name}"] = table_data.data
            except Exception as e:
                logger.error(
                    "Preview extraction failed",
                    extra={"source": source_id, "error": str(e)},
                )
                preview[source_id] = []
        return PreviewResponse(preview=preview, include_headers=request.include_headers)

    async def build_file(self, request: ExportRequest) -> tuple[ExportFile, ExportResult]:
        """
        Extract every selected source and render the export file.

        Returns:
            tuple: (file, result with warnings and per-table errors)

        Raises:
            ExportError: If no table could be extracted
        """
        export_list: list[ExportTableData] = []
        warnings: list[str] = []
        errors: list[str] = []

        for source_id in request.selected_sources:
            try:
                table_data = await self.extract_table_data(source_id, limit=request.row_limit)
            except Exception as e:
                logger.error("Export extraction failed", extra={"source": source_id, "error": str(e)})
                errors.append(f"Erreur lors de l'extraction de {source_id}: {getattr(e, 'message', str(e))}")
                continue
            export_list.append(table_data)
            if request.row_limit and table_data.total_rows >= request.row_limit:
                warnings.append(
                    f"Table {table_data.table_name}: limite de {request.row_limit} lignes appliquée"
                )

        if not export_list:
            raise ExportError("Aucune donnée n'a pu être extraite", errors)

        if request.format == "xlsx":
            content = render_excel(export_list, request.include_headers)
        elif request.format == "csv":
            content = render_csv(export_list, request.include_headers)
        elif request.format == "xml":
            content = render_xml(export_list)
        else:
            content = render_json(export_list, request.include_headers, request.row_limit)

        total_available = len(await self.inspector.get_all_database_tables())
        export_file = ExportFile(
            content=content,
            file_name=generate_file_name(export_list, request.format, total_available),
            mime_type=EXPORT_FORMATS[request.format].mime_type,
        )
        exported_rows = sum(t.total_rows for t in export_list)
        result = ExportResult(
            success=True,
            message=f"Export terminé avec succès ({exported_rows} lignes)",
            file_name=export_file.file_name,
            file_size=export_file.size,
            exported_rows=exported_rows,
            warnings=warnings,
            errors=errors,
        )
        logger.info(
            "Export generated",
            extra={"format": request.format, "file_name": export_file.file_name, "rows": exported_rows},
        )
        return export_file, result

    async def export(self, request: ExportRequest) -> ExportResult:
        """Export result carrying the file as base64 content."""
        export_file, result = await self.build_file(request)
        result.file_data = ExportFileData(
            content=base64.b64encode(export_file.content).decode("ascii"),
            file_name=export_file.file_name,
            mime_type=export_file.mime_type,
            size=export_file.size,
        )
        return result
