"""
Database metadata introspection.

Reads tables, views and columns from the live database catalogue with the
SQLAlchemy Inspector and maps column types to the logical types used by
the explorer, export and import screens.

Dependencies: sqlalchemy, cenov_admin.boundary.db.connection, cenov_admin.models.metadata
System role: Table discovery and column metadata for every configured database
"""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from sqlalchemy import func, inspect, select, table
from sqlalchemy.engine import Connection
from sqlalchemy.exc import CompileError, NoSuchTableError, SQLAlchemyError

from cenov_admin.boundary.db.connection import DATABASE_NAMES, DatabaseRegistry
from cenov_admin.models.metadata import FieldInfo, TableInfo, TableMetadata

logger = logging.getLogger(__name__)

EXCLUDED_SCHEMAS = frozenset({"pg_catalog", "information_schema"})

_TYPE_MAP: dict[str, str] = {
    # Text
    "character varying": "String",
    "varchar": "String",
    "character": "String",
    "char": "String",
    "text": "String",
    "uuid": "String",
    # Integers
    "integer": "Int",
    "int": "Int",
    "int4": "Int",
    "smallint": "Int",
    "int2": "Int",
    "bigint": "BigInt",
    "int8": "BigInt",
    # Decimals
    "numeric": "Decimal",
    "decimal": "Decimal",
    "real": "Float",
    "float": "Float",
    "float4": "Float",
    "double": "Float",
    "double precision": "Float",
    "float8": "Float",
    # Booleans
    "boolean": "Boolean",
    "bool": "Boolean",
    # Dates
    "timestamp without time zone": "DateTime",
    "timestamp with time zone": "DateTime",
    "timestamp": "DateTime",
    "timestamptz": "DateTime",
    "datetime": "DateTime",
    "date": "DateTime",
    "time": "DateTime",
    "time without time zone": "DateTime",
    "time with time zone": "DateTime",
    # JSON
    "json": "Json",
    "jsonb": "Json",
    # Binary
    "bytea": "Bytes",
    "blob": "Bytes",
}

_TIMESTAMP_NAME = re.compile(r"^(created_at|updated_at|deleted_at|timestamp|date_|.*_at)$", re.IGNORECASE)
_ID_LIKE_NAME = re.compile(r"^(.*_id|id|pro_id|cat_id|atr_id|kit_id|fam_id|frs_id|par_id|kat_id)$", re.IGNORECASE)
_SIZE_SUFFIX = re.compile(r"\(.*?\)")


def map_column_type(db_type: str) -> str:
    """
    Map a database column type to its logical type.

    Args:
        db_type: Type name as reported by the database (e.g. "VARCHAR(50)")

    Returns:
        str: Logical type, String when the type is unknown
    """
    normalized = _SIZE_SUFFIX.sub("", db_type).replace("[]", "").strip().lower()
    mapped = _TYPE_MAP.get(normalized)
    if mapped:
        return mapped
    logger.warning(
        "Unknown column type, falling back to String",
        extra={"db_type": db_type},
    )
    return "String"


def is_updated_at_field(name: str, default: str | None) -> bool:
    """Column named updated_at whose default is now()/current_timestamp."""
    if name.lower() != "updated_at" or not default:
        return False
    lowered = default.lower()
    return "now()" in lowered or "current_timestamp" in lowered


def is_timestamp_field(name: str, db_type: str) -> bool:
    """Timestamp-typed column with a timestamp-like name."""
    lowered = db_type.lower()
    if "timestamp" not in lowered and "datetime" not in lowered:
        return False
    return bool(_TIMESTAMP_NAME.match(name))


def detect_primary_key(fields: list[FieldInfo]) -> str:
    """
    Pick the primary key column of a relation.

    Declared primary key first, then the first id-like column name, then
    the first column, then "id".
    """
    for f in fields:
        if f.is_primary_key:
            return f.name
    for f in fields:
        if _ID_LIKE_NAME.match(f.name):
            return f.name
    return fields[0].name if fields else "id"


def is_view_name(name: str) -> bool:
    lowered = name.lower()
    return lowered.startswith("v_") or "_v_" in lowered or "view" in lowered


def display_name(name: str, schema: str) -> str:
    """Table name without the public_ prefix used for public schema tables."""
    if schema == "public" and name.startswith("public_"):
        return name[len("public_"):]
    return name


def sort_tables(tables: list[TableInfo]) -> list[TableInfo]:
    """Sort by database, schema, tables before views, then display name."""

    def _key(t: TableInfo) -> tuple:
        db_rank = DATABASE_NAMES.index(t.database) if t.database in DATABASE_NAMES else len(DATABASE_NAMES)
        return (db_rank, t.database, t.schema_name, 0 if t.category == "table" else 1, t.display_name)

    return sorted(tables, key=_key)


def parse_table_identifier(identifier: str) -> tuple[str, str]:
    """
    Split a "database:table" identifier.

    Raises:
        ValueError: If the identifier has no database part
    """
    database, sep, table_name = identifier.partition(":")
    if not sep or not database or not table_name:
        raise ValueError(f"Identifiant de table invalide: {identifier}")
    return database, table_name


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, str):
        return bool(re.fullmatch(r"[+-]?\d+", value.strip()))
    return False


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str) and value.strip():
        try:
            Decimal(value.strip())
        except InvalidOperation:
            return False
        return True
    return False


def _is_datetime(value: Any) -> bool:
    if isinstance(value, datetime):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def create_field_validator(field: FieldInfo) -> Callable[[Any], bool]:
    """
    Build a value validator for a column.

    Empty values are valid for optional columns and invalid for required
    ones. Non-empty values are checked against the logical type.
    """

    def validate(value: Any) -> bool:
        if value is None or value == "":
            return not field.is_required
        if field.type == "String":
            return isinstance(value, str) and len(value) <= 1000
        if field.type in ("Int", "BigInt"):
            return _is_integer(value)
        if field.type in ("Float", "Decimal"):
            return _is_numeric(value)
        if field.type == "Boolean":
            return isinstance(value, bool) or value in ("true", "false", "1", "0")
        if field.type == "DateTime":
            return _is_datetime(value)
        return isinstance(value, str) and len(value) > 0

    return validate


def _compile_type(sync_conn: Connection, col_type: Any) -> str:
    try:
        return col_type.compile(dialect=sync_conn.dialect)
    except CompileError:
        return type(col_type).__name__


def _list_relations(sync_conn: Connection) -> list[tuple[str, str, str]]:
    inspector = inspect(sync_conn)
    relations: list[tuple[str, str, str]] = []
    for schema in inspector.get_schema_names():
        if schema in EXCLUDED_SCHEMAS:
            continue
        for name in inspector.get_table_names(schema=schema):
            relations.append((schema, name, "table"))
        for name in inspector.get_view_names(schema=schema):
            relations.append((schema, name, "view"))
    return relations


def _read_table(sync_conn: Connection, table_name: str, schema: str | None) -> TableMetadata | None:
    inspector = inspect(sync_conn)
    schemas = [schema] if schema else [s for s in inspector.get_schema_names() if s not in EXCLUDED_SCHEMAS]
    # public first so an unqualified name resolves like a search_path lookup
    schemas.sort(key=lambda s: s != "public")

    for candidate in schemas:
        is_view = table_name in inspector.get_view_names(schema=candidate)
        if not is_view and table_name not in inspector.get_table_names(schema=candidate):
            continue

        columns = inspector.get_columns(table_name, schema=candidate)
        pk_columns: list[str] = []
        unique_columns: set[str] = set()
        if not is_view:
            pk_columns = inspector.get_pk_constraint(table_name, schema=candidate).get("constrained_columns") or []
            for constraint in inspector.get_unique_constraints(table_name, schema=candidate):
                if len(constraint["column_names"]) == 1:
                    unique_columns.add(constraint["column_names"][0])
            for index in inspector.get_indexes(table_name, schema=candidate):
                if index.get("unique") and len(index["column_names"]) == 1:
                    unique_columns.add(index["column_names"][0])

        fields = []
        for col in columns:
            db_type = _compile_type(sync_conn, col["type"])
            default = col.get("default")
            default_text = str(default) if default is not None else None
            is_pk = col["name"] in pk_columns
            fields.append(
                FieldInfo(
                    name=col["name"],
                    type=map_column_type(db_type),
                    db_type=db_type,
                    is_required=not col.get("nullable", True) and default is None,
                    is_list=db_type.endswith("[]"),
                    is_id=is_pk,
                    is_primary_key=is_pk,
                    is_unique=col["name"] in unique_columns,
                    has_default_value=default is not None,
                    is_updated_at=is_updated_at_field(col["name"], default_text),
                    is_timestamp=is_timestamp_field(col["name"], db_type),
                )
            )

        category = "view" if is_view or is_view_name(table_name) else "table"
        return TableMetadata(
            name=table_name,
            schema=candidate,
            primary_key=detect_primary_key(fields),
            category=category,
            fields=fields,
        )
    return None


def _unique_field_sets(sync_conn: Connection, table_name: str, schema: str) -> list[list[str]]:
    inspector = inspect(sync_conn)
    sets: list[list[str]] = []
    pk = inspector.get_pk_constraint(table_name, schema=schema).get("constrained_columns") or []
    if pk:
        sets.append(list(pk))
    for constraint in inspector.get_unique_constraints(table_name, schema=schema):
        sets.append(list(constraint["column_names"]))
    for index in inspector.get_indexes(table_name, schema=schema):
        if index.get("unique"):
            sets.append([c for c in index["column_names"] if c])
    return sets


class MetadataInspector:
    """
    Catalogue reader over every database of a registry.

    Attributes:
        registry: Engines of the configured databases
    """

    def __init__(self, registry: DatabaseRegistry) -> None:
        self.registry = registry

    async def get_all_tables(self, database: str) -> list[TableInfo]:
        """
        List tables and views of one database.

        Args:
            database: Database name

        Returns:
            list[TableInfo]: Relations outside pg_catalog/information_schema
        """
        engine = self.registry.get_engine(database)
        async with engine.connect() as conn:
            relations = await conn.run_sync(_list_relations)

        return [
            TableInfo(
                name=name,
                display_name=display_name(name, schema),
                schema=schema,
                category="view" if kind == "view" or is_view_name(name) else "table",
                database=database,
            )
            for schema, name, kind in relations
        ]

    async def get_all_database_tables(self) -> list[TableInfo]:
        """Tables of every configured database, sorted for display."""
        tables: list[TableInfo] = []
        for database in self.registry.databases:
            try:
                tables.extend(await self.get_all_tables(database))
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to list tables",
                    extra={"database": database, "error": str(e)},
                )
        return sort_tables(tables)

    async def get_table_metadata(
        self,
        database: str,
        table_name: str,
        schema: str | None = None,
    ) -> TableMetadata | None:
        """
        Read the columns of a table or view.

        Args:
            database: Database name
            table_name: Table or view name
            schema: Schema to look in (all schemas when None, public first)

        Returns:
            TableMetadata | None: None when the relation does not exist
        """
        engine = self.registry.get_engine(database)
        async with engine.connect() as conn:
            metadata = await conn.run_sync(_read_table, table_name, schema)

        if metadata is None:
            logger.warning(
                "Table not found",
                extra={"database": database, "table": table_name, "schema": schema},
            )
        else:
            logger.debug(
                "Table metadata loaded",
                extra={
                    "database": database,
                    "table": table_name,
                    "schema": metadata.schema_name,
                    "primary_key": metadata.primary_key,
                    "field_count": len(metadata.fields),
                },
            )
        return metadata

    async def count_table_rows(self, database: str, table_name: str, schema: str | None = None) -> int:
        """Row count of a relation, 0 when it cannot be counted."""
        try:
            if schema is None:
                metadata = await self.get_table_metadata(database, table_name)
                if metadata is None:
                    return 0
                schema = metadata.schema_name
            stmt = select(func.count()).select_from(table(table_name, schema=schema))
            async with self.registry.session(database) as session:
                return int((await session.execute(stmt)).scalar_one())
        except SQLAlchemyError as e:
            logger.warning(
                "Row count failed",
                extra={"database": database, "table": table_name, "error": str(e)},
            )
            return 0

    async def get_table_validation_rules(self, database: str, table_name: str) -> dict[str, Any]:
        """
        Validation rules derived from column metadata.

        Returns:
            dict: required_fields (non-PK required columns), unique_fields
                (primary key, unique and unique-index columns) and
                validators (column name -> callable returning bool)

        Raises:
            NoSuchTableError: If the table does not exist
        """
        metadata = await self.get_table_metadata(database, table_name)
        if metadata is None:
            raise NoSuchTableError(table_name)

        unique_fields: list[str] = []
        if metadata.category == "table":
            engine = self.registry.get_engine(database)
            async with engine.connect() as conn:
                unique_sets = await conn.run_sync(_unique_field_sets, table_name, metadata.schema_name)
            for field_set in unique_sets:
                for name in field_set:
                    if name not in unique_fields:
                        unique_fields.append(name)

        return {
            "required_fields": [f.name for f in metadata.fields if f.is_required and not f.is_primary_key],
            "unique_fields": unique_fields,
            "validators": {f.name: create_field_validator(f) for f in metadata.fields},
        }

    async def get_importable_tables(self) -> list[TableInfo]:
        """Tables (not views) of every database with their row counts."""
        tables = [t for t in await self.get_all_database_tables() if t.category == "table"]
        for t in tables:
            t.row_count = await self.count_table_rows(t.database, t.name, t.schema_name)
        return tables
