"""
Database explorer request and response schemas.

Dependencies: pydantic
System role: Explorer API contracts
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cenov_admin.models.metadata import TableInfo, TableMetadata


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DatabaseBadge(BaseModel):
    name: str
    label: str
    badge: str


class TableListResponse(BaseModel):
    """Every table of every database, flat and grouped database -> schema."""

    tables: list[TableInfo]
    hierarchy: dict[str, dict[str, dict[str, list[TableInfo]]]]
    databases: list[DatabaseBadge]


class TableDataResponse(BaseModel):
    """One page of rows."""

    data: list[dict[str, Any]]
    total: int
    metadata: TableMetadata


class RecordRequest(_CamelModel):
    """Create or update form: raw values keyed by column name."""

    values: dict[str, Any] = Field(default_factory=dict)
    schema_name: str | None = Field(default=None, alias="schema")


class UpdateRecordRequest(RecordRequest):
    primary_key_value: Any


class DeleteRecordRequest(_CamelModel):
    """Deletion is only performed when confirmation is "SUPPRIMER"."""

    primary_key_value: Any
    confirmation: str | None = None
    schema_name: str | None = Field(default=None, alias="schema")


class UpdateCellRequest(_CamelModel):
    """
    Inline edition of one cell.

    Fields are optional so that missing ones are reported as a 400 with
    the name of the missing parameter rather than a 422.
    """

    database: str | None = None
    table_name: str | None = None
    primary_key_value: Any = None
    field_name: str | None = None
    new_value: Any = None
    schema_name: str | None = Field(default=None, alias="schema")

    def missing_parameters(self) -> list[str]:
        required = {
            "database": self.database,
            "tableName": self.table_name,
            "primaryKeyValue": self.primary_key_value,
            "fieldName": self.field_name,
        }
        return [name for name, value in required.items() if value is None or value == ""]


class RecordResponse(BaseModel):
    success: bool = True
    message: str
    record: dict[str, Any] | None = None
