"""
Catalog import service.

Entry point of the import screen: page data, CSV validation, import and
per-category CSV templates. Anonymous users may only target cenov_dev.

Dependencies: cenov_admin.application.services.import_*
System role: Import use case orchestration
"""

import logging

from cenov_admin.application.services.import_orchestrator import ImportOrchestrator
from cenov_admin.application.services.import_repository import ImportRepository
from cenov_admin.application.services.import_validation import (
    merge_reports,
    parse_csv_content,
    validate_attributes,
    validate_csv_data,
    validate_required_attributes,
)
from cenov_admin.boundary.db.connection import DatabaseRegistry
from cenov_admin.core.exceptions import (
    CategoryNotFoundError,
    DatabaseAccessDeniedError,
    ImportProcessError,
    ValidationError,
)
from cenov_admin.core.import_config import DEFAULT_IMPORT_DATABASE, IMPORT_CONFIG, IMPORT_DATABASES
from cenov_admin.models.imports import (
    ImportPageResponse,
    ImportResult,
    ParsedCSV,
    ValidationReport,
)
from cenov_admin.observability.log_utils import describe_csv, log_with_context

logger = logging.getLogger(__name__)

VALIDATION_FAILED = "Validation échouée. Veuillez corriger les erreurs."


def check_csv_content(content: str | None) -> str:
    """
    Raises:
        ValidationError: If the file is missing or blank
    """
    if content is None:
        raise ValidationError("Fichier CSV manquant", field="csv")
    if content.strip() == "":
        raise ValidationError("Fichier CSV vide", field="csv")
    return content


def check_database_access(database: str, is_authenticated: bool) -> None:
    """
    Raises:
        ValidationError: If the database is not an import target
        DatabaseAccessDeniedError: If an anonymous user targets another database than cenov_dev
    """
    if database not in IMPORT_DATABASES:
        raise ValidationError(f"Base de données non autorisée pour l'import: {database}", field="database")
    if not is_authenticated and database != DEFAULT_IMPORT_DATABASE:
        raise DatabaseAccessDeniedError(database)


def template_file_name(database: str, cat_label: str | None, cat_code: str) -> str:
    """template_{dev|preprod}_{label with underscores}.csv"""
    prefix = "preprod" if database == "cenov_preprod" else "dev"
    name = cat_label.replace(" ", "_") if cat_label else cat_code
    return f"template_{prefix}_{name}.csv"


class ImportService:
    """
    Import use cases.

    Attributes:
        registry: Engines of the configured databases
        repository: Reference data lookups
        orchestrator: Transactional writer
    """

    def __init__(
        self,
        registry: DatabaseRegistry,
        repository: ImportRepository,
        orchestrator: ImportOrchestrator,
    ) -> None:
        self.registry = registry
        self.repository = repository
        self.orchestrator = orchestrator

    async def get_page_data(self, is_authenticated: bool) -> ImportPageResponse:
        """Categories of the databases the user may import into."""
        allowed = list(IMPORT_DATABASES) if is_authenticated else [DEFAULT_IMPORT_DATABASE]
        categories = {}
        for database in allowed:
            async with self.registry.session(database) as session:
                categories[database] = await self.repository.load_import_categories(session)
        return ImportPageResponse(
            config=IMPORT_CONFIG.as_dict(),
            categories=categories,
            is_authenticated=is_authenticated,
            allowed_databases=allowed,
        )

    async def parse(self, database: str, content: str) -> ParsedCSV:
        """
        Parse a catalog CSV against the attribute codes of a database.

        Raises:
            ValidationError: If the file cannot be parsed
        """
        async with self.registry.session(database) as session:
            attribute_map = await self.repository.load_attribute_reference(session)
        parsed = parse_csv_content(content, set(attribute_map))
        if not parsed.success:
            raise ValidationError(parsed.error or "Erreur parsing", field="csv")
        return parsed

    async def run_validation(self, database: str, parsed: ParsedCSV) -> ValidationReport:
        """Run the three validation passes on parsed rows and merge them."""
        csv_report = validate_csv_data(parsed.rows)

        async with self.registry.session(database) as session:
            attribute_map = await self.repository.load_attribute_reference(session)
            units_map = await self.repository.load_attribute_units(session)
            atr_ids = {
                attribute_map[pair.code].atr_id
                for product in parsed.attributes
                for pair in product.attributes
                if pair.value and pair.code in attribute_map
            }
            allowed_values = await self.repository.load_allowed_values(session, atr_ids)
            required_report = await validate_required_attributes(
                session, self.repository, parsed.rows, parsed.attributes
            )

        attribute_reports = [
            (
                product.pro_cenov_id,
                validate_attributes(product.attributes, attribute_map, units_map, allowed_values),
            )
            for product in parsed.attributes
        ]
        return merge_reports(len(parsed.rows), csv_report, attribute_reports, required_report)

    async def validate(self, database: str, content: str | None, is_authenticated: bool) -> ValidationReport:
        """
        Validate a catalog CSV without writing anything.

        Raises:
            ValidationError: If the file is missing, blank or unparsable
            DatabaseAccessDeniedError: If the user may not use the database
        """
        content = check_csv_content(content)
        check_database_access(database, is_authenticated)
        parsed = await self.parse(database, content)
        report = await self.run_validation(database, parsed)
        log_with_context(
            logger,
            logging.INFO,
            "CSV validated",
            database=database,
            csv=describe_csv(content),
            valid_rows=report.valid_rows,
            errors=len(report.errors),
            warnings=len(report.warnings),
        )
        return report

    async def process(self, database: str, content: str | None, is_authenticated: bool) -> ImportResult:
        """
        Validate then import a catalog CSV.

        Raises:
            ValidationError: If validation reports any error
            ImportProcessError: If the import transaction fails
        """
        content = check_csv_content(content)
        check_database_access(database, is_authenticated)
        parsed = await self.parse(database, content)
        report = await self.run_validation(database, parsed)
        if not report.success:
            raise ValidationError(VALIDATION_FAILED, details={"errors": len(report.errors)})

        result = await self.orchestrator.import_rows(database, parsed.rows, parsed.attributes)
        if not result.success:
            raise ImportProcessError(f"Erreur d'import: {result.error}", {"database": database})
        log_with_context(logger, logging.INFO, "Catalog imported", database=database, csv=describe_csv(content))
        return result

    async def generate_template(self, database: str, cat_code: str | None) -> tuple[str, str]:
        """
        Empty CSV of a category: business headers then its attribute codes.

        Returns:
            tuple: (file name, content)

        Raises:
            ValidationError: If no category is given
            CategoryNotFoundError: If the code matches no category
        """
        if not cat_code:
            raise ValidationError("Catégorie non sélectionnée", field="cat_code")

        async with self.registry.session(database) as session:
            category = await self.repository.find_category(session, cat_code)
            if category is None:
                raise CategoryNotFoundError(cat_code)
            attribute_codes = await self.repository.get_template_attribute_codes(session, category.cat_id)

        headers = [*IMPORT_CONFIG.template_headers, *attribute_codes]
        logger.info(
            "Import template generated",
            extra={"database": database, "cat_code": cat_code, "columns": len(headers)},
        )
        return template_file_name(database, category.cat_label, cat_code), ";".join(headers) + "\n"
