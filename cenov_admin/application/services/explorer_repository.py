"""
Database explorer repository.

Paged reads and single-row writes on any table of the configured
databases. Identifiers coming from requests are checked against a plain
SQL identifier pattern before use.

Dependencies: sqlalchemy, cenov_admin.boundary.db
System role: Data access for the database explorer
"""

import logging
import re
from datetime import date, datetime, timezone
from typing import Any

from cenov_admin.boundary.db.CRUD.table_crud import TableCRUD
from cenov_admin.boundary.db.metadata import MetadataInspector
from cenov_admin.core.exceptions import (
    InvalidIdentifierError,
    RecordNotFoundError,
    TableNotFoundError,
    ValidationError,
)
from cenov_admin.models.metadata import TableMetadata

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$", re.IGNORECASE)
MAX_PAGE = 10_000
MAX_LIMIT = 10_000


def validate_identifier(value: str | None, kind: str) -> str:
    """
    Check a schema, table or column name.

    Raises:
        InvalidIdentifierError: If value is not a plain SQL identifier
    """
    if not value or not IDENTIFIER_PATTERN.match(value):
        raise InvalidIdentifierError(str(value), kind)
    return value


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as "YYYY-MM-DD HH:MM:SS.mmm" (UTC for aware values)."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.isoformat(sep=" ", timespec="milliseconds")[:23]


def _check_bound(value: Any, name: str, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1 or value > maximum:
        raise ValidationError(f"{name} invalide: {value}", field=name.lower())
    return value


class ExplorerRepository:
    """
    Row access for the explorer screens.

    Attributes:
        inspector: Column metadata reader
        tables: Reflected-table CRUD
    """

    def __init__(self, inspector: MetadataInspector, tables: TableCRUD) -> None:
        self.inspector = inspector
        self.tables = tables

    async def get_metadata(self, database: str, table_name: str, schema: str | None = None) -> TableMetadata:
        """
        Column metadata of a table.

        Raises:
            InvalidIdentifierError: If table or schema name is not an identifier
            TableNotFoundError: If the table does not exist
        """
        validate_identifier(table_name, "table")
        if schema is not None:
            validate_identifier(schema, "schéma")
        metadata = await self.inspector.get_table_metadata(database, table_name, schema)
        if metadata is None:
            raise TableNotFoundError(table_name, database)
        return metadata

    async def get_table_data(
        self,
        database: str,
        table_name: str,
        page: int = 1,
        limit: int = 500,
        schema: str | None = None,
    ) -> dict[str, Any]:
        """
        Read one page of a table ordered by primary key.

        Args:
            database: Database name
            table_name: Table name
            page: 1-based page number (1..10000)
            limit: Rows per page (1..10000)
            schema: Schema name (None searches every schema, public first)

        Returns:
            dict: data (rows), total (row count) and metadata (TableMetadata)

        Raises:
            ValidationError: If page or limit is out of range
            InvalidIdentifierError: If table or schema name is not an identifier
            TableNotFoundError: If the table does not exist
        """
        _check_bound(page, "Page", MAX_PAGE)
        _check_bound(limit, "Limit", MAX_LIMIT)
        metadata = await self.get_metadata(database, table_name, schema)

        rows, total = await self.tables.fetch_page(
            database,
            table_name,
            metadata.schema_name,
            order_by=metadata.primary_key,
            offset=(page - 1) * limit,
            limit=limit,
        )

        timestamp_columns = [f.name for f in metadata.fields if f.type == "DateTime" or f.is_timestamp]
        for row in rows:
            for name in timestamp_columns:
                value = row.get(name)
                if isinstance(value, datetime):
                    row[name] = format_timestamp(value)
                elif isinstance(value, date):
                    row[name] = value.isoformat()

        logger.info(
            "Table page loaded",
            extra={
                "database": database,
                "table": table_name,
                "page": page,
                "rows": len(rows),
                "total": total,
            },
        )
        return {"data": rows, "total": total, "metadata": metadata}

    async def get_record(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        schema: str | None = None,
    ) -> dict[str, Any]:
        """
        Read one row by primary key.

        Raises:
            RecordNotFoundError: If no row matches
        """
        metadata = await self.get_metadata(database, table_name, schema)
        row = await self.tables.get(
            database, table_name, metadata.schema_name, metadata.primary_key, primary_key_value
        )
        if row is None:
            raise RecordNotFoundError(table_name, primary_key_value)
        return row

    async def create_record(
        self,
        database: str,
        table_name: str,
        data: dict[str, Any],
        schema: str | None = None,
    ) -> dict[str, Any]:
        metadata = await self.get_metadata(database, table_name, schema)
        for name in data:
            validate_identifier(name, "champ")
        return await self.tables.insert(database, table_name, metadata.schema_name, data)

    async def update_record(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        data: dict[str, Any],
        schema: str | None = None,
    ) -> dict[str, Any]:
        """
        Update columns of the row with a primary key value.

        Raises:
            RecordNotFoundError: If no row matches
        """
        metadata = await self.get_metadata(database, table_name, schema)
        for name in data:
            validate_identifier(name, "champ")
        row = await self.tables.update(
            database,
            table_name,
            metadata.schema_name,
            metadata.primary_key,
            primary_key_value,
            data,
        )
        if row is None:
            raise RecordNotFoundError(table_name, primary_key_value)
        return row

    async def update_cell(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        field_name: str,
        new_value: Any,
        schema: str | None = None,
    ) -> dict[str, Any]:
        """Update a single column of one row."""
        validate_identifier(field_name, "champ")
        return await self.update_record(
            database, table_name, primary_key_value, {field_name: new_value}, schema
        )

    async def delete_record(
        self,
        database: str,
        table_name: str,
        primary_key_value: Any,
        schema: str | None = None,
    ) -> None:
        """
        Delete the row with a primary key value.

        Raises:
            RecordNotFoundError: If no row matches
        """
        metadata = await self.get_metadata(database, table_name, schema)
        deleted = await self.tables.delete(
            database, table_name, metadata.schema_name, metadata.primary_key, primary_key_value
        )
        if not deleted:
            raise RecordNotFoundError(table_name, primary_key_value)
