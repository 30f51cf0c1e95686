"""
Catalog CSV parsing and validation.

The catalog CSV is ";" separated. Business columns (pro_code, sup_code,
pp_amount...) are validated against IMPORT_CONFIG; every column whose
header is a known attribute code (atr_value) is an attribute value of
the row's kit. Validation runs in three passes:

1. validate_csv_data: required fields, formats, lengths and consistency
   between lines of the file
2. validate_attributes: attribute codes, closed value lists and units
3. validate_required_attributes: attributes a category (or one of its
   ancestors) marks as mandatory

Dependencies: sqlalchemy, cenov_admin.application.services.import_repository
System role: Import pre-flight checks
"""

import logging
import re
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.application.services.import_repository import (
    AttributeRef,
    AttributeUnits,
    ImportRepository,
    RequiredAttribute,
)
from cenov_admin.core.import_config import IMPORT_CONFIG, ImportConfig
from cenov_admin.models.imports import (
    AttributePair,
    ParsedCSV,
    ProductAttributes,
    ValidationIssue,
    ValidationReport,
)

logger = logging.getLogger(__name__)

CSV_DELIMITER = ";"
VALUE_UNIT_PATTERN = re.compile(r"^(\d+(?:\.\d+)?(?:/\d+)?)\s*(.*)$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_FR_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


def _blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def convert_to_iso_date(value: str | None) -> str | None:
    """
    Normalize a CSV date to YYYY-MM-DD.

    Accepts YYYY-MM-DD and DD/MM/YYYY; anything else gives None.
    The calendar validity of the date is not checked here.
    """
    if _blank(value):
        return None
    text = value.strip()
    if _ISO_DATE.match(text):
        return text
    match = _FR_DATE.match(text)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month}-{day}"
    return None


def parse_value_and_unit(raw_value: str | None) -> tuple[str | None, str | None]:
    """
    Split "12.5 bar" into ("12.5", "bar").

    Fractions ("1/2 pouce") are kept as values. Values not starting with
    a number are returned unchanged without unit.
    """
    if not raw_value:
        return raw_value, None
    match = VALUE_UNIT_PATTERN.match(raw_value.strip())
    if not match:
        return raw_value, None
    return match.group(1), match.group(2).strip() or None


def find_unit_id(atr_id: int, unit: str, units_map: dict[int, AttributeUnits]) -> int | None:
    """Unit of an attribute matching a symbol or label, case-insensitive."""
    entry = units_map.get(atr_id)
    if entry is None:
        return None
    search = unit.lower()
    for candidate in entry.units:
        if candidate.unit_value.lower() == search or candidate.unit_label.lower() == search:
            return candidate.unit_id
    return None


def split_csv_lines(content: str) -> list[list[str]]:
    """Non-blank lines split on the delimiter (values are not unquoted)."""
    return [line.split(CSV_DELIMITER) for line in re.split(r"\r?\n", content) if line.strip() != ""]


def parse_csv_content(content: str, attribute_codes: set[str]) -> ParsedCSV:
    """
    Parse a catalog CSV.

    Args:
        content: File content
        attribute_codes: Attribute codes known by the target database

    Returns:
        ParsedCSV: rows and attributes aligned by index, or an error
    """
    lines = split_csv_lines(content.lstrip("\ufeff"))
    if len(lines) < 2:
        return ParsedCSV(success=False, error="Fichier CSV invalide (moins de 2 lignes)")

    headers = [h.strip() for h in lines[0]]
    rows: list[dict[str, str]] = []
    attributes: list[ProductAttributes] = []

    for line_index, values in enumerate(lines[1:], start=2):
        if all(v.strip() == "" for v in values):
            logger.debug("Empty CSV line skipped", extra={"line": line_index})
            continue

        row: dict[str, str] = {}
        pairs: list[AttributePair] = []
        for index, header in enumerate(headers):
            value = values[index].strip() if index < len(values) else ""
            if header in attribute_codes:
                pairs.append(AttributePair(code=header, value=value or None))
            else:
                row[header] = value

        rows.append(row)
        attributes.append(
            ProductAttributes(pro_cenov_id=row.get("pro_cenov_id") or f"ligne_{line_index}", attributes=pairs)
        )

    logger.info("CSV parsed", extra={"rows": len(rows), "columns": len(headers)})
    return ParsedCSV(success=True, rows=rows, attributes=attributes)


def _issue(line: int, field: str, value: str | None, error: str) -> ValidationIssue:
    return ValidationIssue(line=line, field=field, value=value or "", error=error)


def _check_label_consistency(
    seen: dict[str, tuple[str, int]],
    code: str | None,
    label: str | None,
    line: int,
    field: str,
    entity: str,
) -> ValidationIssue | None:
    if not code or not label:
        return None
    first = seen.get(code)
    if first is None:
        seen[code] = (label, line)
        return None
    first_label, first_line = first
    if first_label == label:
        return None
    return _issue(
        line,
        field,
        label,
        f'Incohérence : {entity} {code} a différents noms '
        f'(ligne {first_line}: "{first_label}", ligne {line}: "{label}")',
    )


def validate_csv_data(rows: list[dict[str, str]], config: ImportConfig = IMPORT_CONFIG) -> ValidationReport:
    """
    Check business columns of every row.

    Date columns are rewritten in place to YYYY-MM-DD when valid.
    Line numbers count the header as line 1.
    """
    errors: list[ValidationIssue] = []
    valid_rows = 0
    seen_products: dict[str, int] = {}
    supplier_labels: dict[str, tuple[str, int]] = {}
    category_labels: dict[str, tuple[str, int]] = {}

    for index, row in enumerate(rows):
        line = index + 2
        row_errors: list[ValidationIssue] = []

        for name in config.required_fields:
            if _blank(row.get(name)):
                row_errors.append(_issue(line, name, row.get(name), "Champ obligatoire manquant"))

        for name in config.numeric_fields:
            value = row.get(name)
            if _blank(value):
                continue
            try:
                number = float(value.strip())
            except ValueError:
                row_errors.append(_issue(line, name, value, "Format numérique invalide"))
                continue
            if name == "pp_amount" and number <= 0:
                row_errors.append(_issue(line, name, value, "Le prix doit être > 0"))
            if name == "pp_discount" and not 0 <= number <= 100:
                row_errors.append(_issue(line, name, value, "La remise doit être entre 0 et 100%"))

        for name in config.integer_fields:
            value = row.get(name)
            if not _blank(value) and not value.strip().isdigit():
                row_errors.append(_issue(line, name, value, "Format numérique invalide"))

        for name in config.date_fields:
            value = row.get(name)
            if _blank(value):
                continue
            iso = convert_to_iso_date(value)
            if iso is None:
                row_errors.append(_issue(line, name, value, "Format date invalide (YYYY-MM-DD ou DD/MM/YYYY)"))
                continue
            try:
                date.fromisoformat(iso)
            except ValueError:
                row_errors.append(_issue(line, name, value, "Date invalide"))
                continue
            row[name] = iso

        for name in config.field_mapping:
            value = row.get(name)
            if _blank(value):
                continue
            max_length = config.max_length_for(name)
            if max_length and len(value) > max_length:
                row_errors.append(_issue(line, name, value, f"Trop long ({len(value)}/{max_length})"))

        famille, sous_famille = row.get("famille"), row.get("sous_famille")
        if not _blank(row.get("sous_sous_famille")):
            message = 'Champ obligatoire si "sous_sous_famille" est renseigné'
            if _blank(famille):
                row_errors.append(_issue(line, "famille", famille, message))
            if _blank(sous_famille):
                row_errors.append(_issue(line, "sous_famille", sous_famille, message))
        elif not _blank(sous_famille) and _blank(famille):
            row_errors.append(
                _issue(line, "famille", famille, 'Champ obligatoire si "sous_famille" est renseigné')
            )

        sup_code, pro_code = row.get("sup_code"), row.get("pro_code")
        if sup_code and pro_code:
            key = f"{sup_code}:{pro_code}"
            if key in seen_products:
                row_errors.append(
                    _issue(
                        line,
                        "pro_code",
                        pro_code,
                        f"Doublon : ({sup_code}, {pro_code}) existe déjà ligne {seen_products[key]}",
                    )
                )
            else:
                seen_products[key] = line

        for issue in (
            _check_label_consistency(
                supplier_labels, sup_code, row.get("sup_label"), line, "sup_label", "fournisseur"
            ),
            _check_label_consistency(
                category_labels, row.get("cat_code"), row.get("cat_label"), line, "cat_label", "catégorie"
            ),
        ):
            if issue is not None:
                row_errors.append(issue)

        if not row_errors:
            valid_rows += 1
        errors.extend(row_errors)

    return ValidationReport(
        success=not errors,
        total_rows=len(rows),
        valid_rows=valid_rows,
        errors=errors,
    )


def validate_attributes(
    attributes: list[AttributePair],
    attribute_map: dict[str, AttributeRef],
    units_map: dict[int, AttributeUnits],
    allowed_values: dict[int, set[str]],
) -> ValidationReport:
    """
    Check the attribute values of one product.

    Closed-list attributes must use an accepted value; other values may
    carry a unit, which must be one of the attribute's units when the
    attribute has any. Line numbers are attribute positions (1-based).
    """
    errors: list[ValidationIssue] = []
    for position, pair in enumerate(attributes, start=1):
        if _blank(pair.value):
            continue
        attribute = attribute_map.get(pair.code)
        if attribute is None:
            errors.append(_issue(position, pair.code, pair.value, "Code attribut inconnu"))
            continue

        accepted = allowed_values.get(attribute.atr_id)
        if accepted:
            if pair.value not in accepted:
                errors.append(
                    _issue(
                        position,
                        pair.code,
                        pair.value,
                        f"Valeur non autorisée. Acceptées: {', '.join(sorted(accepted))}",
                    )
                )
            continue

        _, unit = parse_value_and_unit(pair.value)
        units = units_map.get(attribute.atr_id)
        if unit and units and units.units and find_unit_id(attribute.atr_id, unit, units_map) is None:
            allowed_units = ", ".join(u.unit_value for u in units.units)
            errors.append(
                _issue(position, pair.code, pair.value, f'Unité "{unit}" invalide. Acceptées: {allowed_units}')
            )

    return ValidationReport(
        success=not errors,
        total_rows=len(attributes),
        valid_rows=len(attributes) - len(errors),
        errors=errors,
    )


def _missing_label(attribute: RequiredAttribute) -> str:
    if attribute.inherited:
        return f'{attribute.atr_label} (hérité de "{attribute.from_cat_label}")'
    return attribute.atr_label


async def validate_required_attributes(
    session: AsyncSession,
    repository: ImportRepository,
    rows: list[dict[str, str]],
    attributes_by_product: list[ProductAttributes],
) -> ValidationReport:
    """
    Check that every product carries the required attributes of its category.

    Duplicated category codes in the database block the whole import
    (line 0 errors, no valid row). Unknown categories only warn: they
    are created by the import with every CSV attribute optional.
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    cat_codes = {row.get("cat_code") for row in rows if row.get("cat_code")}
    if not cat_codes:
        return ValidationReport(success=True, total_rows=len(rows), valid_rows=len(rows))

    metadata = await repository.load_categories_metadata(session, cat_codes)
    if metadata.duplicates:
        for duplicate in metadata.duplicates:
            errors.append(
                _issue(
                    0,
                    "cat_code",
                    duplicate.cat_code,
                    f"ERREUR BDD: {len(duplicate.labels)} catégories racines avec le code "
                    f"{duplicate.cat_code}. Labels: {', '.join(duplicate.labels)}. "
                    "Corrigez la base de données avant import.",
                )
            )
        return ValidationReport(success=False, total_rows=len(rows), valid_rows=0, errors=errors)

    by_product: dict[str, ProductAttributes] = {}
    for product in attributes_by_product:
        by_product.setdefault(product.pro_cenov_id, product)

    required_cache: dict[int, list[RequiredAttribute]] = {}

    for index, row in enumerate(rows):
        line = index + 2
        product = by_product.get(row.get("pro_cenov_id", ""))
        if product is None:
            continue

        cat_code = row.get("cat_code", "")
        category = metadata.categories.get(cat_code)
        if category is None:
            warnings.append(
                _issue(
                    line,
                    "cat_code",
                    cat_code,
                    f'Catégorie "{cat_code}" inconnue en BDD. Elle sera créée automatiquement lors de '
                    f"l'import avec {len(product.attributes)} attribut(s) (tous optionnels).",
                )
            )
            continue

        if category.cat_id not in required_cache:
            required_cache[category.cat_id] = await repository.get_required_attributes(session, category.cat_id)
        required = required_cache[category.cat_id]
        if not required:
            continue

        present = set(product.codes)
        missing = [attribute for attribute in required if attribute.atr_value not in present]
        if missing:
            errors.append(
                _issue(
                    line,
                    "attributs_obligatoires",
                    cat_code,
                    f'Catégorie "{category.cat_label}" ({cat_code}) requiert {len(missing)} '
                    f"attribut(s) manquant(s): {', '.join(_missing_label(m) for m in missing)}",
                )
            )

    return ValidationReport(
        success=not errors,
        total_rows=len(rows),
        valid_rows=len(rows) - len(errors),
        errors=errors,
        warnings=warnings,
    )


def merge_reports(
    row_count: int,
    csv_report: ValidationReport,
    attribute_reports: list[tuple[str, ValidationReport]],
    required_report: ValidationReport,
) -> ValidationReport:
    """
    Combine the three passes.

    Attribute issues are prefixed with the product they belong to:
    field "[pro_cenov_id] CODE".
    """
    attribute_errors: list[ValidationIssue] = []
    attribute_warnings: list[ValidationIssue] = []
    for pro_cenov_id, report in attribute_reports:
        for issue in report.errors:
            attribute_errors.append(issue.model_copy(update={"field": f"[{pro_cenov_id}] {issue.field}"}))
        for issue in report.warnings:
            attribute_warnings.append(issue.model_copy(update={"field": f"[{pro_cenov_id}] {issue.field}"}))

    valid_rows = min(csv_report.valid_rows, required_report.valid_rows, row_count - len(attribute_errors))
    return ValidationReport(
        success=csv_report.success and not attribute_errors and required_report.success,
        total_rows=row_count,
        valid_rows=max(valid_rows, 0),
        errors=[*csv_report.errors, *attribute_errors, *required_report.errors],
        warnings=[*csv_report.warnings, *attribute_warnings, *required_report.warnings],
    )
