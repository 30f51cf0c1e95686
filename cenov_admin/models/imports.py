"""
Catalog import schemas.

Dependencies: pydantic
System role: Import API contracts and pipeline values
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ImportDatabase = Literal["cenov_dev", "cenov_preprod"]
ChangeValue = str | int | float | None


class AttributePair(BaseModel):
    """Attribute column of a CSV row: attribute code and raw value."""

    code: str
    value: str | None = None


class ProductAttributes(BaseModel):
    """Attribute values of one CSV row, keyed by its pro_cenov_id."""

    pro_cenov_id: str
    attributes: list[AttributePair] = Field(default_factory=list)

    @property
    def codes(self) -> list[str]:
        return [a.code for a in self.attributes]


class ParsedCSV(BaseModel):
    """
    Result of parsing a catalog CSV.

    rows holds the business columns of each line, attributes the
    attribute columns of the same line at the same index.
    """

    success: bool
    rows: list[dict[str, str]] = Field(default_factory=list)
    attributes: list[ProductAttributes] = Field(default_factory=list)
    error: str | None = None


class ValidationIssue(BaseModel):
    """
    Error or warning of a validation pass.

    line is the CSV line number (header is line 1); 0 marks a database
    level problem not tied to a line.
    """

    line: int
    field: str
    value: str = ""
    error: str


class ValidationReport(BaseModel):
    """Outcome of one or several validation passes."""

    success: bool
    total_rows: int
    valid_rows: int
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)


class ImportStats(BaseModel):
    """Created and updated entity counters."""

    suppliers: int = 0
    kits: int = 0
    categories: int = 0
    families: int = 0
    products: int = 0
    products_updated: int = 0
    prices: int = 0
    category_attributes: int = 0
    kit_attributes: int = 0


class ChangeDetail(BaseModel):
    """One column written by the import, with its previous value."""

    table: str
    schema_name: str = Field(alias="schema")
    column: str
    old_value: ChangeValue = None
    new_value: ChangeValue = None
    record_id: str

    model_config = ConfigDict(populate_by_name=True)


class ImportResult(BaseModel):
    """Outcome of the import transaction."""

    success: bool
    stats: ImportStats = Field(default_factory=ImportStats)
    changes: list[ChangeDetail] = Field(default_factory=list)
    error: str | None = None


class ImportCategory(BaseModel):
    """Category offered by the import screen."""

    cat_id: int
    cat_code: str | None = None
    cat_label: str
    attribute_count: int = 0


class ImportPageResponse(BaseModel):
    """Data of the import screen."""

    config: dict[str, Any]
    categories: dict[str, list[ImportCategory]]
    is_authenticated: bool
    allowed_databases: list[ImportDatabase]


class ValidateResponse(BaseModel):
    validation: ValidationReport


class ProcessResponse(BaseModel):
    success: bool = True
    result: ImportResult
