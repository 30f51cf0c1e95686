"""
Database explorer service.

Coordinates the explorer use cases: listing tables of every database,
loading pages, and validated create/update/delete of single rows.

Dependencies: pydantic, cenov_admin.application.services.explorer_repository,
    cenov_admin.application.services.schema_generator
System role: Explorer use case orchestration
"""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cenov_admin.application.services.explorer_repository import ExplorerRepository
from cenov_admin.application.services.schema_generator import (
    format_validation_errors,
    generate_create_model,
    generate_update_model,
)
from cenov_admin.boundary.db.metadata import MetadataInspector
from cenov_admin.core.exceptions import ValidationError
from cenov_admin.models.metadata import FieldInfo, TableInfo, TableMetadata

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "SUPPRIMER"

_DATABASE_LABELS = {
    "cenov": "CENOV",
    "cenov_dev": "CENOV_DEV",
    "cenov_preprod": "CENOV_PREPROD",
}
_DATABASE_BADGES = {
    "cenov": "bleu",
    "cenov_dev": "vert",
    "cenov_preprod": "orange",
}


class _Omitted:
    """Marker for a value that must not be written."""

    def __repr__(self) -> str:
        return "OMITTED"


OMITTED = _Omitted()


def parse_value_for_database(value: Any, field: FieldInfo) -> Any:
    """
    Convert a form value to the value written for a column.

    Empty values become None for optional columns and OMITTED for
    required ones (the column keeps its default).
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return OMITTED if field.is_required else None
    if not isinstance(value, str):
        return value

    if field.type in ("Int", "BigInt"):
        return int(value.strip(), 10)
    if field.type in ("Float", "Decimal"):
        return float(value)
    if field.type == "Boolean":
        return value.strip().lower() in ("true", "1", "yes", "oui")
    if field.type == "DateTime":
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc).isoformat()
    return value


def generate_record_summary(record: dict[str, Any], metadata: TableMetadata) -> str:
    """Short description of a row, e.g. "product #12 - Pompe A"."""
    pk_value = record.get(metadata.primary_key)
    name_field = next(
        (f for f in metadata.fields if "name" in f.name or "label" in f.name or "code" in f.name),
        None,
    )
    if name_field and record.get(name_field.name):
        return f"{metadata.name} #{pk_value} - {record[name_field.name]}"
    return f"{metadata.name} #{pk_value}"


def group_tables_by_hierarchy(tables: list[TableInfo]) -> dict[str, dict[str, dict[str, list[TableInfo]]]]:
    """Group tables as database -> schema -> {"tables": [...], "views": [...]}."""
    hierarchy: dict[str, dict[str, dict[str, list[TableInfo]]]] = {}
    for t in tables:
        bucket = hierarchy.setdefault(t.database, {}).setdefault(t.schema_name, {"tables": [], "views": []})
        bucket["tables" if t.category == "table" else "views"].append(t)
    return hierarchy


def get_database_label(database: str) -> str:
    return _DATABASE_LABELS.get(database, database.upper())


def get_database_badge_variant(database: str) -> str:
    return _DATABASE_BADGES.get(database, "default")


class ExplorerService:
    """Explorer use cases over every configured database."""

    def __init__(self, inspector: MetadataInspector, repository: ExplorerRepository) -> None:
        """
        Initialize explorer service.

        Args:
            inspector: Table discovery
            repository: Row access
        """
        self.inspector = inspector
        self.repository = repository

    async def list_tables(self) -> dict[str, Any]:
        """
        Tables of every database grouped for the sidebar.

        Returns:
            dict: tables (flat sorted list), hierarchy (database -> schema)
                and databases (name, label, badge)
        """
        tables = await self.inspector.get_all_database_tables()
        databases = list(dict.fromkeys(t.database for t in tables))
        return {
            "tables": tables,
            "hierarchy": group_tables_by_hierarchy(tables),
            "databases": [
                {"name": d, "label": get_database_label(d), "badge": get_database_badge_variant(d)}
                for d in databases
            ],
        }

    async def load_table(
        self,
        database: str,
        table_name: str,
        page: int = 1,
        limit: int = 500,
        schema: str | None = None,
    ) -> dict[str, Any]:
        return await self.repository.get_table_data(database, table_name, page, limit, schema)

    def _parse(self, metadata: TableMetadata, validated: dict[str, Any]) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name, value in validated.items():
            field = metadata.get_field(name)
            if field is None:
                continue
            parsed = parse_value_for_database(value, field)
            if parsed is not OMITTED:
                data[name] = parsed
        return data

    @staticmethod
    def _validate(model: type, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            return model.model_validate(payload).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise ValidationError("Erreur de validation", details={"errors": format_validation_errors(e)}) from e

    async def create_record(
        self,
        database: str,
        table_name: str,
        values: dict[str, Any],
        schema: str | None = None,
    ) -> dict[str, Any]:
        """
        Validate and insert a row.

        Args:
            database: Database name
            table_name: Table name
            values: Raw form values by column name (primary key ignored)
            schema: Schema name

        Returns:
            dict: Inserted row

        Raises:
            TableNotFoundError: If the table does not exist
            ValidationError: If values do not match the column types
        """
        metadata = await self.repository.get_metadata(database, table_name, schema)
        payload = {f.name: values[f.name] for f in metadata.fields if not f.is_primary_key and f.name in values}
        validated = self._validate(generate_create_model(metadata), payload)
        row = await self.repository.create_record(
            database, table_name, self._parse(metadata, validated), metadata.schema_name
        )
        logger.info(
            "Record created",
            extra={"database": database, "table": table_name, "summary": generate_record_summary(row, metadata)},
        )
        return row

    async def update_record(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        values: dict[str, Any],
        schema: str | None = None,
    ) -> dict[str, Any]:
        """Validate and apply a partial update; only provided columns are written."""
        metadata = await self.repository.get_metadata(database, table_name, schema)
        payload = {f.name: values[f.name] for f in metadata.fields if not f.is_primary_key and f.name in values}
        validated = self._validate(generate_update_model(metadata), payload)
        return await self.repository.update_record(
            database, table_name, primary_key_value, self._parse(metadata, validated), metadata.schema_name
        )

    async def update_cell(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        field_name: str,
        new_value: Any,
        schema: str | None = None,
    ) -> dict[str, Any]:
        return await self.repository.update_cell(
            database, table_name, primary_key_value, field_name, new_value, schema
        )

    async def delete_record(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        confirmation: str | None,
        schema: str | None = None,
    ) -> str:
        """
        Delete a row after explicit confirmation.

        Returns:
            str: Summary of the deleted row

        Raises:
            ValidationError: If confirmation is not "SUPPRIMER"
            RecordNotFoundError: If no row matches
        """
        if confirmation != DELETE_CONFIRMATION:
            raise ValidationError(
                f'Confirmation invalide. Veuillez taper "{DELETE_CONFIRMATION}"', field="confirmation"
            )
        metadata = await self.repository.get_metadata(database, table_name, schema)
        record = await self.repository.get_record(database, table_name, primary_key_value, metadata.schema_name)
        await self.repository.delete_record(database, table_name, primary_key_value, metadata.schema_name)
        summary = generate_record_summary(record, metadata)
        logger.info("Record deleted", extra={"database": database, "table": table_name, "summary": summary})
        return summary
