"""
Generic CRUD over reflected tables.

The explorer and export screens work on any table of any configured
database, so tables are reflected at call time instead of being mapped
as ORM models. Values are coerced to the Python type of their column
before being bound.

Dependencies: sqlalchemy, cenov_admin.boundary.db.connection
System role: Schema-agnostic row access for explorer and export
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Column, MetaData, Table, delete, func, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.connection import DatabaseRegistry

logger = logging.getLogger(__name__)


def _python_type(col: Column) -> type | None:
    try:
        return col.type.python_type
    except NotImplementedError:
        return None


def coerce_value(col: Column, value: Any) -> Any:
    """
    Convert a request value to the Python type of a column.

    Strings are parsed for integer, numeric, boolean and date/time columns.
    Other values and columns without a known Python type are returned as is.

    Raises:
        ValueError: If a string cannot be parsed for the column type
    """
    if value is None or not isinstance(value, str):
        return value
    py_type = _python_type(col)
    text = value.strip()
    if py_type is bool:
        return text.lower() in ("true", "1", "yes", "oui")
    if py_type is int:
        return int(text, 10)
    if py_type is float:
        return float(text)
    if py_type is Decimal:
        return Decimal(text)
    if py_type is datetime:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    if py_type is date:
        return date.fromisoformat(text[:10])
    return value


def _reflect(sync_conn: Connection, table_name: str, schema: str | None) -> Table:
    return Table(table_name, MetaData(), schema=schema, autoload_with=sync_conn)


class TableCRUD:
    """
    Row operations on a table reflected from one of the registry databases.

    Every public method opens its own session; writes are committed
    before returning.

    Attributes:
        registry: Engines of the configured databases
    """

    def __init__(self, registry: DatabaseRegistry) -> None:
        self.registry = registry

    async def _table(self, session: AsyncSession, table_name: str, schema: str | None) -> Table:
        conn = await session.connection()
        return await conn.run_sync(_reflect, table_name, schema)

    @staticmethod
    def _values(table: Table, values: dict[str, Any]) -> dict[str, Any]:
        unknown = [name for name in values if name not in table.c]
        if unknown:
            raise ValueError(f"Colonnes inconnues pour {table.name}: {', '.join(unknown)}")
        return {name: coerce_value(table.c[name], value) for name, value in values.items()}

    async def reflect(self, database: str, table_name: str, schema: str | None = None) -> Table:
        """
        Reflect a table.

        Raises:
            NoSuchTableError: If the table does not exist
        """
        async with self.registry.session(database) as session:
            return await self._table(session, table_name, schema)

    async def count(self, database: str, table_name: str, schema: str | None = None) -> int:
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            result = await session.execute(select(func.count()).select_from(table))
            return int(result.scalar_one())

    async def fetch_page(
        self,
        database: str,
        table_name: str,
        schema: str | None,
        order_by: str,
        offset: int,
        limit: int,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Read one page of rows ordered by a column, with the total row count.

        Args:
            database: Database name
            table_name: Table name
            schema: Schema name
            order_by: Column used for ascending order
            offset: Rows to skip
            limit: Maximum rows returned

        Returns:
            tuple: (rows as dicts, total row count)
        """
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            stmt = select(table).offset(offset).limit(limit)
            if order_by in table.c:
                stmt = stmt.order_by(table.c[order_by].asc())
            rows = (await session.execute(stmt)).mappings().all()
            total = (await session.execute(select(func.count()).select_from(table))).scalar_one()
        return [dict(row) for row in rows], int(total)

    async def fetch_rows(
        self,
        database: str,
        table_name: str,
        schema: str | None = None,
        limit: int | None = None,
    ) -> tuple[Table, list[dict[str, Any]]]:
        """Read rows in storage order, returning the reflected table alongside."""
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            stmt = select(table)
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = (await session.execute(stmt)).mappings().all()
        return table, [dict(row) for row in rows]

    async def get(
        self,
        database: str,
        table_name: str,
        schema: str | None,
        pk_column: str,
        pk_value: Any,
    ) -> dict[str, Any] | None:
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            pk = table.c[pk_column]
            stmt = select(table).where(pk == coerce_value(pk, pk_value))
            row = (await session.execute(stmt)).mappings().first()
        return dict(row) if row is not None else None

    async def insert(
        self,
        database: str,
        table_name: str,
        schema: str | None,
        values: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Insert a row.

        Returns:
            dict: The inserted row as stored (defaults and generated keys included)
        """
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            stmt = insert(table).values(**self._values(table, values)).returning(*table.c)
            row = (await session.execute(stmt)).mappings().one()
            await session.commit()
        logger.info("Row inserted", extra={"database": database, "table": table_name})
        return dict(row)

    async def update(
        self,
        database: str,
        table_name: str,
        schema: str | None,
        pk_column: str,
        pk_value: Any,
        values: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update the row with a primary key value.

        Returns:
            dict | None: Updated row, None when no row matches
        """
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            pk = table.c[pk_column]
            stmt = (
                update(table)
                .where(pk == coerce_value(pk, pk_value))
                .values(**self._values(table, values))
                .returning(*table.c)
            )
            row = (await session.execute(stmt)).mappings().first()
            await session.commit()
        if row is not None:
            logger.info(
                "Row updated",
                extra={"database": database, "table": table_name, "primary_key": str(pk_value)},
            )
        return dict(row) if row is not None else None

    async def delete(
        self,
        database: str,
        table_name: str,
        schema: str | None,
        pk_column: str,
        pk_value: Any,
    ) -> bool:
        """Delete the row with a primary key value; False when none matched."""
        async with self.registry.session(database) as session:
            table = await self._table(session, table_name, schema)
            pk = table.c[pk_column]
            result = await session.execute(delete(table).where(pk == coerce_value(pk, pk_value)))
            await session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info(
                "Row deleted",
                extra={"database": database, "table": table_name, "primary_key": str(pk_value)},
            )
        return deleted
