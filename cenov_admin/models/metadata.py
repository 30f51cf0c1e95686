"""
Table metadata models.

Describe tables, views and their columns as read from the database
catalogue.

Dependencies: pydantic
System role: Introspection contracts shared by explorer, export and import
"""

from typing import Literal

from pydantic import BaseModel, Field

TableCategory = Literal["table", "view"]


class FieldInfo(BaseModel):
    """Column of a table or view."""

    name: str
    type: str = Field(description="Logical type (String, Int, BigInt, Decimal, Float, Boolean, DateTime, Json, Bytes)")
    db_type: str = Field(default="", description="Type as reported by the database")
    is_required: bool = False
    is_list: bool = False
    is_id: bool = False
    is_primary_key: bool = False
    is_unique: bool = False
    has_default_value: bool = False
    is_updated_at: bool = False
    is_timestamp: bool = False


class TableInfo(BaseModel):
    """Table or view of one database."""

    name: str
    display_name: str
    schema_name: str = Field(alias="schema")
    category: TableCategory
    database: str
    row_count: int | None = None

    model_config = {"populate_by_name": True}

    @property
    def identifier(self) -> str:
        """Identifier "database:table" used by the import screens."""
        return f"{self.database}:{self.name}"


class TableMetadata(BaseModel):
    """Columns and primary key of a table or view."""

    name: str
    schema_name: str = Field(alias="schema")
    primary_key: str
    category: TableCategory = "table"
    fields: list[FieldInfo] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def get_field(self, name: str) -> FieldInfo | None:
        return next((f for f in self.fields if f.name == name), None)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]
