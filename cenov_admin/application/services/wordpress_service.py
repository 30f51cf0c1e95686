"""
WordPress export service.

Page data of the export screen and WooCommerce CSV generation for a
selection of products (or every exportable product).

Dependencies: cenov_admin.application.services.wordpress_*
System role: WordPress export use case orchestration
"""

import logging
from datetime import date

from cenov_admin.application.services.wordpress_csv import generate_wordpress_csv
from cenov_admin.application.services.wordpress_repository import WordPressRepository
from cenov_admin.boundary.db.connection import DatabaseRegistry
from cenov_admin.core.exceptions import ExportError
from cenov_admin.models.wordpress import ActiveFilters, WordPressPageResponse
from cenov_admin.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

PAGE_DATABASE = "cenov_dev"
PAGE_LOAD_FAILED = "Erreur lors du chargement des données"
CSV_GENERATION_FAILED = "Erreur lors de la génération du CSV"


def resolve_database(database: str | None) -> str:
    """Anything other than cenov_preprod targets cenov_dev."""
    return "cenov_preprod" if database == "cenov_preprod" else "cenov_dev"


def parse_product_ids(ids: str | None) -> list[int] | None:
    """
    Parse a comma-separated id list, dropping non-numeric entries.

    Returns None when no ids parameter is given.
    """
    if not ids:
        return None
    parsed = []
    for part in ids.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit():
            parsed.append(int(part))
    return parsed


def export_file_name(
    database: str,
    product_ids: list[int] | None,
    skus: list[str],
    today: date | None = None,
) -> str:
    """
    Name of the downloaded CSV.

    One selected product: {sku}{suffix}.csv; a selection:
    wordpress_products_selection{suffix}_{date}.csv; everything:
    wordpress_products_all{suffix}_{date}.csv.
    """
    suffix = "_preprod" if database == "cenov_preprod" else "_dev"
    stamp = (today or date.today()).isoformat()
    if product_ids and len(product_ids) == 1 and len(skus) == 1:
        return f"{skus[0] or 'product'}{suffix}.csv"
    if product_ids:
        return f"wordpress_products_selection{suffix}_{stamp}.csv"
    return f"wordpress_products_all{suffix}_{stamp}.csv"


class WordPressService:
    """
    WordPress export use cases.

    Attributes:
        registry: Engines of the configured databases
        repository: Product reads for WooCommerce
    """

    def __init__(self, registry: DatabaseRegistry, repository: WordPressRepository) -> None:
        self.registry = registry
        self.repository = repository

    async def get_page_data(
        self,
        supplier_id: int | None = None,
        category_id: int | None = None,
    ) -> WordPressPageResponse:
        """
        Stats, filtered product list and filter options.

        Raises:
            ExportError: If the data cannot be loaded
        """
        try:
            async with self.registry.session(PAGE_DATABASE) as session:
                stats = await self.repository.get_stats(session)
                products = await self.repository.get_product_summaries(session, supplier_id, category_id)
                suppliers = await self.repository.get_suppliers(session)
                categories = await self.repository.get_categories(session)
        except Exception as e:
            log_exception_with_context(
                logger, "WordPress page load failed", e, supplier_id=supplier_id, category_id=category_id
            )
            raise ExportError(PAGE_LOAD_FAILED) from e

        return WordPressPageResponse(
            stats=stats,
            products=products,
            suppliers=suppliers,
            categories=categories,
            active_filters=ActiveFilters(supplier_id=supplier_id, category_id=category_id),
        )

    async def export(self, database: str | None, ids: str | None) -> tuple[str, str]:
        """
        Generate the WooCommerce CSV.

        Args:
            database: cenov_preprod, anything else falls back to cenov_dev
            ids: Comma-separated pro_id list, empty for every product

        Returns:
            tuple: (file name, CSV content)

        Raises:
            ExportError: If reading products or generating the file fails
        """
        database = resolve_database(database)
        product_ids = parse_product_ids(ids)
        log_with_context(
            logger,
            logging.INFO,
            "WordPress export started",
            database=database,
            selection=product_ids if product_ids is not None else "all",
        )
        try:
            async with self.registry.session(database) as session:
                products = await self.repository.get_products(session, product_ids)
            content = generate_wordpress_csv(products)
        except Exception as e:
            log_exception_with_context(logger, "WordPress export failed", e, database=database, ids=ids)
            raise ExportError(CSV_GENERATION_FAILED) from e

        file_name = export_file_name(database, product_ids, [p.sku for p in products])
        log_with_context(
            logger,
            logging.INFO,
            "WordPress export completed",
            database=database,
            products=len(products),
            file_name=file_name,
            characters=len(content),
        )
        return file_name, content
