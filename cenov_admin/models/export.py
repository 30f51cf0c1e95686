"""
Export request and response schemas.

Dependencies: pydantic
System role: Export API contracts
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cenov_admin.models.metadata import FieldInfo, TableInfo

ExportFormat = Literal["csv", "xlsx", "json", "xml"]


class DateRange(BaseModel):
    """Optional date bounds of an export."""

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class ExportRequest(BaseModel):
    """
    Request schema for preview and export.

    Accepts camelCase keys (selectedSources, rowLimit...) as sent by the
    export screen, and snake_case names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    selected_sources: list[str] = Field(default_factory=list, validate_default=True, description="Source ids \"database-table\"")
    format: ExportFormat = "csv"
    include_relations: bool = False
    row_limit: int | None = Field(default=None, ge=1, le=1_000_000)
    filters: dict[str, Any] = Field(default_factory=dict)
    include_headers: bool = True
    date_range: DateRange | None = None

    @field_validator("selected_sources")
    @classmethod
    def _at_least_one_source(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("Sélectionnez au moins une source")
        return value


class ExportFormatInfo(BaseModel):
    """Description of an export format."""

    value: ExportFormat
    label: str
    description: str
    mime_type: str
    recommended: bool = False


class ExportTableInfo(TableInfo):
    """Exportable table with its columns and display row count."""

    columns: list[FieldInfo] = Field(default_factory=list)
    relations: list[str] = Field(default_factory=list)
    formatted_row_count: str = "0"


class ExportPageResponse(BaseModel):
    """Data of the export screen."""

    tables: list[ExportTableInfo]
    databases: list[str]
    total_tables: int
    total_rows: int
    formatted_total_rows: str
    export_formats: list[ExportFormatInfo]


class ExportTableData(BaseModel):
    """Rows extracted from one table."""

    table_name: str
    database: str
    schema_name: str = Field(alias="schema")
    data: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)
    total_rows: int = 0

    model_config = ConfigDict(populate_by_name=True)


class ExportFile(BaseModel):
    """Generated export file."""

    content: bytes
    file_name: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


class PreviewResponse(BaseModel):
    """First rows of every selected source, keyed "database-table"."""

    success: bool = True
    preview: dict[str, list[dict[str, Any]]]
    include_headers: bool = True


class ExportFileData(BaseModel):
    """Base64 encoded export file."""

    content: str
    file_name: str
    mime_type: str
    size: int


class ExportResult(BaseModel):
    """Outcome of an export."""

    success: bool
    message: str
    file_name: str | None = None
    file_size: int | None = None
    exported_rows: int = 0
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    file_data: ExportFileData | None = None
