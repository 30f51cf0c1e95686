"""
Dynamic form schemas for explorer tables.

Builds pydantic models from column metadata so create/update payloads
are checked before being written. Raw form values are validated as text:
numbers, booleans and dates must parse, strings must be non-empty.

Dependencies: pydantic, cenov_admin.models.metadata
System role: Request validation for tables known only at runtime
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Callable, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from cenov_admin.models.metadata import FieldInfo, TableMetadata


class _FormModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _text_or_none(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _empty_to_none(value: Any) -> Any:
    value = _text_or_none(value)
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _fail(field: FieldInfo, message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_value", message.format(name=field.name))


def _parses_int(value: str) -> bool:
    try:
        int(value.strip(), 10)
    except ValueError:
        return False
    return True


def _parses_number(value: str) -> bool:
    try:
        Decimal(value.strip())
    except InvalidOperation:
        return False
    return value.strip() != ""


def _parses_date(value: str) -> bool:
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _checker(field: FieldInfo) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if value is None:
            return value
        if field.type == "String":
            if not isinstance(value, str):
                raise _fail(field, "{name} doit être une chaîne")
            if len(value) < 1:
                raise _fail(field, "{name} ne peut pas être vide")
            return value
        if not isinstance(value, str):
            return value
        if field.type in ("Int", "BigInt") and not _parses_int(value):
            raise _fail(field, "{name} doit être un nombre entier")
        if field.type in ("Float", "Decimal") and not _parses_number(value):
            raise _fail(field, "{name} doit être un nombre")
        if field.type == "Boolean" and value.lower() not in ("true", "false", "1", "0"):
            raise _fail(field, "{name} doit être vrai ou faux")
        if field.type == "DateTime" and not _parses_date(value):
            raise _fail(field, "{name} doit être une date valide")
        return value

    return check


def _field_type(field: FieldInfo, optional: bool) -> Any:
    before = _empty_to_none if optional else (lambda v: v if field.type == "String" else _text_or_none(v))
    base = Optional[Any] if optional else Any
    return Annotated[base, BeforeValidator(before), AfterValidator(_checker(field))]


def _required_checker(field: FieldInfo) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if value is None:
            if field.type == "String":
                raise _fail(field, "{name} doit être une chaîne")
            raise _fail(field, "{name} est obligatoire")
        return value

    return check


def generate_create_model(metadata: TableMetadata) -> type[BaseModel]:
    """
    Build the creation model of a table.

    The primary key is omitted. Required columns must be present and
    non-null; other columns are optional and nullable.
    """
    fields: dict[str, Any] = {}
    for field in metadata.fields:
        if field.is_primary_key:
            continue
        if field.is_required:
            annotated = Annotated[_field_type(field, optional=False), AfterValidator(_required_checker(field))]
            fields[field.name] = (annotated, ...)
        else:
            fields[field.name] = (_field_type(field, optional=True), None)
    return create_model(f"{metadata.name}_create", __base__=_FormModel, **fields)


def generate_update_model(metadata: TableMetadata) -> type[BaseModel]:
    """Build the update model of a table: every non-PK column optional and nullable."""
    fields: dict[str, Any] = {
        field.name: (_field_type(field, optional=True), None)
        for field in metadata.fields
        if not field.is_primary_key
    }
    return create_model(f"{metadata.name}_update", __base__=_FormModel, **fields)


def format_validation_errors(error: PydanticValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to {field, message} pairs."""
    issues = []
    for err in error.errors():
        field = str(err["loc"][0]) if err.get("loc") else ""
        message = err["msg"]
        if err.get("type") == "missing":
            message = f"{field} est obligatoire"
        issues.append({"field": field, "message": message})
    return issues
