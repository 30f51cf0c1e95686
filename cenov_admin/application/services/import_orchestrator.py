"""
Catalog import orchestrator.

Writes validated CSV rows in a single transaction: suppliers, kits,
categories, families, products, purchase prices and kit attribute
values are created or updated, and every written column is reported as
a ChangeDetail.

Reference data (attributes, units, closed lists, existing category and
kit attribute links) is loaded before the transaction so the write
phase only issues the queries it needs.

Dependencies: sqlalchemy, cenov_admin.boundary.db
System role: Write side of the catalog import
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.application.services.import_repository import (
    AttributeRef,
    AttributeUnits,
    ImportRepository,
)
from cenov_admin.application.services.import_validation import find_unit_id, parse_value_and_unit
from cenov_admin.boundary.db.base import PRODUIT_SCHEMA, PUBLIC_SCHEMA
from cenov_admin.boundary.db.connection import DatabaseRegistry
from cenov_admin.boundary.db.CRUD import (
    category_attribute_crud,
    category_crud,
    family_crud,
    kit_attribute_crud,
    kit_crud,
    price_purchase_crud,
    product_category_crud,
    product_crud,
    supplier_crud,
)
from cenov_admin.boundary.db.models import (
    CategoryModel,
    KitModel,
    ProductModel,
    SupplierModel,
)
from cenov_admin.configs.imports import ImportSettings
from cenov_admin.core.exceptions import CategoryAmbiguityError
from cenov_admin.models.imports import (
    AttributePair,
    ChangeDetail,
    ChangeValue,
    ImportResult,
    ImportStats,
    ProductAttributes,
)

logger = logging.getLogger(__name__)

PRODUCT_TRACKED_FIELDS = (
    "pro_code",
    "sup_code",
    "sup_label",
    "cat_code",
    "fk_supplier",
    "fk_kit",
    "fk_family",
    "fk_sfamily",
    "fk_ssfamily",
    "fk_document",
)


@dataclass
class KitAttributeState:
    kat_id: int
    kat_value: str | None
    fk_attribute_unite: int | None


@dataclass
class ImportMetadata:
    """Reference data preloaded before the import transaction."""

    attribute_map: dict[str, AttributeRef] = field(default_factory=dict)
    units_map: dict[int, AttributeUnits] = field(default_factory=dict)
    allowed_values: dict[int, set[str]] = field(default_factory=dict)
    category_attributes: set[tuple[int, int]] = field(default_factory=set)
    kit_attributes: dict[tuple[int, int], KitAttributeState] = field(default_factory=dict)


def _change_value(value: Any) -> ChangeValue:
    if value is None or isinstance(value, (str, int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _optional_int(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    return int(value.strip())


def _optional_decimal(value: str | None) -> Decimal | None:
    if value is None or value.strip() == "":
        return None
    return Decimal(value.strip())


class ChangeLog:
    """Collects the columns written by an import."""

    def __init__(self) -> None:
        self.changes: list[ChangeDetail] = []

    def add(
        self,
        table: str,
        schema: str,
        column: str,
        old_value: Any,
        new_value: Any,
        record_id: str,
    ) -> None:
        self.changes.append(
            ChangeDetail(
                table=table,
                schema=schema,
                column=column,
                old_value=_change_value(old_value),
                new_value=_change_value(new_value),
                record_id=record_id,
            )
        )


class ImportOrchestrator:
    """
    Transactional catalog import.

    Attributes:
        registry: Engines of the configured databases
        repository: Reference data lookups
        settings: Transaction timeout and connection wait
    """

    def __init__(
        self,
        registry: DatabaseRegistry,
        repository: ImportRepository,
        settings: ImportSettings,
    ) -> None:
        self.registry = registry
        self.repository = repository
        self.settings = settings

    async def preload_metadata(
        self,
        session: AsyncSession,
        rows: list[dict[str, str]],
        attributes_by_product: list[ProductAttributes],
    ) -> ImportMetadata:
        """Load attribute references and the existing links of the file's categories and kits."""
        metadata = ImportMetadata(
            attribute_map=await self.repository.load_attribute_reference(session),
            units_map=await self.repository.load_attribute_units(session),
        )

        atr_ids = {
            metadata.attribute_map[pair.code].atr_id
            for product in attributes_by_product
            for pair in product.attributes
            if pair.code in metadata.attribute_map
        }
        if atr_ids:
            metadata.allowed_values = await self.repository.load_allowed_values(session, atr_ids)

        cat_codes = {row["cat_code"] for row in rows if row.get("cat_code")}
        kit_labels = {row["kit_label"] for row in rows if row.get("kit_label")}
        categories = await category_crud.get_by_codes(session, cat_codes)
        kits = await kit_crud.get_by_labels(session, kit_labels)

        for link in await category_attribute_crud.get_for_categories(session, [c.cat_id for c in categories]):
            metadata.category_attributes.add((link.fk_category, link.fk_attribute))
        for kit_attribute in await kit_attribute_crud.get_for_kits(session, [k.kit_id for k in kits]):
            metadata.kit_attributes[(kit_attribute.fk_kit, kit_attribute.fk_attribute_characteristic)] = (
                KitAttributeState(kit_attribute.kat_id, kit_attribute.kat_value, kit_attribute.fk_attribute_unite)
            )

        logger.info(
            "Import metadata loaded",
            extra={
                "attributes": len(metadata.attribute_map),
                "category_attributes": len(metadata.category_attributes),
                "kit_attributes": len(metadata.kit_attributes),
            },
        )
        return metadata

    async def import_rows(
        self,
        database: str,
        rows: list[dict[str, str]],
        attributes_by_product: list[ProductAttributes],
    ) -> ImportResult:
        """
        Import validated rows into a database.

        All rows are written in one transaction: any failure rolls the
        whole file back and is reported in the result.

        Returns:
            ImportResult: stats and changes, or success=False with the error
        """
        stats = ImportStats()
        log = ChangeLog()
        by_product: dict[str, ProductAttributes] = {}
        for product in attributes_by_product:
            by_product.setdefault(product.pro_cenov_id, product)

        deadline = asyncio.timeout(self.settings.transaction_timeout)
        try:
            async with self.registry.session(database) as session:
                metadata = await self.preload_metadata(session, rows, attributes_by_product)

            async with deadline:
                async with self.registry.session(database) as session:
                    async with session.begin():
                        await asyncio.wait_for(session.connection(), timeout=self.settings.max_wait)
                        for row in rows:
                            await self._import_row(
                                session, row, by_product.get(row.get("pro_cenov_id", "")), metadata, stats, log
                            )
        except TimeoutError:
            if not deadline.expired():
                logger.error(
                    "Import connection wait timed out",
                    extra={"database": database, "max_wait": self.settings.max_wait},
                )
                return ImportResult(
                    success=False,
                    stats=stats,
                    changes=log.changes,
                    error=f"Délai d'attente de connexion dépassé ({self.settings.max_wait:g}s)",
                )
            logger.error(
                "Import transaction timed out",
                extra={"database": database, "timeout": self.settings.transaction_timeout},
            )
            return ImportResult(
                success=False,
                stats=stats,
                changes=log.changes,
                error=f"Délai de transaction dépassé ({self.settings.transaction_timeout:g}s)",
            )
        except Exception as e:
            logger.exception("Import failed", extra={"database": database, "rows": len(rows)})
            return ImportResult(
                success=False,
                stats=stats,
                changes=log.changes,
                error=getattr(e, "message", None) or str(e),
            )

        logger.info(
            "Import committed",
            extra={"database": database, "rows": len(rows), "changes": len(log.changes), **stats.model_dump()},
        )
        return ImportResult(success=True, stats=stats, changes=log.changes)

    async def _import_row(
        self,
        session: AsyncSession,
        row: dict[str, str],
        product_attributes: ProductAttributes | None,
        metadata: ImportMetadata,
        stats: ImportStats,
        log: ChangeLog,
    ) -> None:
        supplier, is_new = await self.find_or_create_supplier(session, row["sup_code"], row["sup_label"], log)
        stats.suppliers += is_new

        kit, is_new = await self.find_or_create_kit(session, row["kit_label"], log)
        stats.kits += is_new

        category, category_is_new = await self.find_or_create_category(
            session, row["cat_code"], row["cat_label"], log
        )
        stats.categories += category_is_new
        if category_is_new and product_attributes is not None:
            stats.category_attributes += await self.link_category_attributes(
                session, category, product_attributes.codes, metadata, log
            )

        family_ids = await self.resolve_family_hierarchy(session, row, supplier.sup_id, stats, log)

        product, is_new = await self.upsert_product(session, row, supplier, kit, family_ids, category, log)
        if is_new:
            stats.products += 1
        else:
            stats.products_updated += 1

        await self.upsert_price(session, product, row, log)
        stats.prices += 1

        if product_attributes is not None and product_attributes.attributes:
            linked, created = await self.import_attributes(
                session, category.cat_id, kit, product_attributes.attributes, metadata, log
            )
            stats.category_attributes += linked
            stats.kit_attributes += created

        await session.flush()

    async def find_or_create_supplier(
        self,
        session: AsyncSession,
        sup_code: str,
        sup_label: str,
        log: ChangeLog,
    ) -> tuple[SupplierModel, bool]:
        """Supplier by code; a different label in the file replaces the stored one."""
        supplier = await supplier_crud.get_by_code(session, sup_code)
        if supplier is None:
            supplier = await supplier_crud.create(session, sup_code=sup_code, sup_label=sup_label)
            log.add("supplier", PUBLIC_SCHEMA, "sup_code", None, sup_code, sup_code)
            log.add("supplier", PUBLIC_SCHEMA, "sup_label", None, sup_label, sup_code)
            logger.info("Supplier created", extra={"sup_code": sup_code})
            return supplier, True

        if supplier.sup_label != sup_label:
            log.add("supplier", PUBLIC_SCHEMA, "sup_label", supplier.sup_label, sup_label, sup_code)
            supplier.sup_label = sup_label
        return supplier, False

    async def find_or_create_kit(self, session: AsyncSession, kit_label: str, log: ChangeLog) -> tuple[KitModel, bool]:
        kit = await kit_crud.get_by_label(session, kit_label)
        if kit is not None:
            return kit, False
        kit = await kit_crud.create(session, kit_label=kit_label)
        log.add("kit", PUBLIC_SCHEMA, "kit_label", None, kit_label, kit_label)
        return kit, True

    async def find_or_create_category(
        self,
        session: AsyncSession,
        cat_code: str,
        cat_label: str,
        log: ChangeLog,
    ) -> tuple[CategoryModel, bool]:
        """
        Category by code anywhere in the tree; unknown codes create a root category.

        Raises:
            CategoryAmbiguityError: If several categories carry the code
        """
        categories = await category_crud.get_by_code(session, cat_code)
        if len(categories) > 1:
            raise CategoryAmbiguityError(cat_code, [c.cat_id for c in categories])

        if categories:
            category = categories[0]
            if category.cat_label != cat_label:
                log.add("category", PRODUIT_SCHEMA, "cat_label", category.cat_label, cat_label, cat_code)
                category.cat_label = cat_label
            return category, False

        category = await category_crud.create(session, fk_parent=None, cat_code=cat_code, cat_label=cat_label)
        log.add("category", PRODUIT_SCHEMA, "cat_code", None, cat_code, cat_code)
        log.add("category", PRODUIT_SCHEMA, "cat_label", None, cat_label, cat_code)
        logger.info("Root category created", extra={"cat_code": cat_code})
        return category, True

    async def link_category_attributes(
        self,
        session: AsyncSession,
        category: CategoryModel,
        codes: list[str],
        metadata: ImportMetadata,
        log: ChangeLog,
    ) -> int:
        """Link the file's attributes to a new category, all optional."""
        linked = 0
        for code in codes:
            attribute = metadata.attribute_map.get(code)
            if attribute is None:
                logger.warning("Unknown attribute skipped for category link", extra={"code": code})
                continue
            key = (category.cat_id, attribute.atr_id)
            if key in metadata.category_attributes:
                continue
            await category_attribute_crud.create(
                session, fk_category=category.cat_id, fk_attribute=attribute.atr_id, cat_atr_required=False
            )
            metadata.category_attributes.add(key)
            log.add(
                "category_attribute",
                PRODUIT_SCHEMA,
                "fk_attribute",
                None,
                attribute.atr_id,
                f"{category.cat_code} → {code} (optionnel)",
            )
            linked += 1
        if linked:
            logger.info("Attributes linked to new category", extra={"cat_code": category.cat_code, "count": linked})
        return linked

    async def find_or_create_family(
        self,
        session: AsyncSession,
        fam_label: str,
        fk_parent: int | None,
        fk_supplier: int,
        log: ChangeLog,
    ) -> tuple[int, bool]:
        family = await family_crud.find_level(session, fam_label, fk_parent, fk_supplier)
        if family is not None:
            return family.fam_id, False
        family = await family_crud.create(
            session, fam_label=fam_label, fk_parent=fk_parent, fk_supplier=fk_supplier, fk_category=None
        )
        level = "(sous-famille)" if fk_parent else "(famille)"
        log.add("family", PRODUIT_SCHEMA, "fam_label", None, fam_label, f"{fam_label} {level}")
        return family.fam_id, True

    async def resolve_family_hierarchy(
        self,
        session: AsyncSession,
        row: dict[str, str],
        fk_supplier: int,
        stats: ImportStats,
        log: ChangeLog,
    ) -> tuple[int | None, int | None, int | None]:
        """
        Family ids of the famille / sous_famille / sous_sous_famille columns.

        Each level is only read when the previous one is set.
        """
        ids: list[int | None] = [None, None, None]
        parent: int | None = None
        for level, column in enumerate(("famille", "sous_famille", "sous_sous_famille")):
            label = row.get(column)
            if not label:
                break
            parent, is_new = await self.find_or_create_family(session, label, parent, fk_supplier, log)
            stats.families += is_new
            ids[level] = parent
        return ids[0], ids[1], ids[2]

    async def upsert_product(
        self,
        session: AsyncSession,
        row: dict[str, str],
        supplier: SupplierModel,
        kit: KitModel,
        family_ids: tuple[int | None, int | None, int | None],
        category: CategoryModel,
        log: ChangeLog,
    ) -> tuple[ProductModel, bool]:
        """
        Create or update a product by (supplier, pro_code) and link it to its category.

        fk_document is only written when the row provides one.
        """
        pro_cenov_id = row["pro_cenov_id"]
        values: dict[str, Any] = {
            "pro_cenov_id": pro_cenov_id,
            "pro_code": row["pro_code"],
            "sup_code": row["sup_code"],
            "sup_label": row["sup_label"],
            "cat_code": row["cat_code"],
            "fk_supplier": supplier.sup_id,
            "fk_kit": kit.kit_id,
            "fk_family": family_ids[0],
            "fk_sfamily": family_ids[1],
            "fk_ssfamily": family_ids[2],
        }
        fk_document = _optional_int(row.get("fk_document"))
        if fk_document is not None:
            values["fk_document"] = fk_document

        product = await product_crud.get_by_supplier_code(session, supplier.sup_id, row["pro_code"])
        is_new = product is None
        if is_new:
            product = await product_crud.create(session, **values)
            for column in ("pro_cenov_id", "pro_code", "sup_code", "sup_label", "cat_code", "fk_document"):
                if values.get(column) is not None:
                    log.add("product", PRODUIT_SCHEMA, column, None, values[column], pro_cenov_id)
        else:
            for column in PRODUCT_TRACKED_FIELDS:
                if column in values and getattr(product, column) != values[column]:
                    log.add("product", PRODUIT_SCHEMA, column, getattr(product, column), values[column], pro_cenov_id)
            for column, value in values.items():
                setattr(product, column, value)
            await session.flush()

        if await product_category_crud.get_link(session, product.pro_id, category.cat_id) is None:
            await product_category_crud.create(session, fk_product=product.pro_id, fk_category=category.cat_id)
            log.add(
                "product_category",
                PRODUIT_SCHEMA,
                "fk_category",
                None,
                category.cat_id,
                f"{pro_cenov_id} → cat_id:{category.cat_id}",
            )
        return product, is_new

    async def upsert_price(
        self,
        session: AsyncSession,
        product: ProductModel,
        row: dict[str, str],
        log: ChangeLog,
    ) -> None:
        """Create or update the purchase price of a product for the row's date."""
        pp_date = date.fromisoformat(row["pp_date"])
        pp_amount = Decimal(row["pp_amount"].strip())
        pp_discount = _optional_decimal(row.get("pp_discount"))
        fk_document = _optional_int(row.get("fk_document"))
        record_id = f"{row['pro_cenov_id']} ({row['pp_date']})"

        price = await price_purchase_crud.get_by_product_date(session, product.pro_id, pp_date)
        if price is None:
            await price_purchase_crud.create(
                session,
                fk_product=product.pro_id,
                pp_date=pp_date,
                pp_amount=pp_amount,
                pp_discount=pp_discount,
                pro_cenov_id=row["pro_cenov_id"],
                fk_document=fk_document,
            )
            log.add("price_purchase", PRODUIT_SCHEMA, "pp_amount", None, pp_amount, record_id)
            if pp_discount is not None:
                log.add("price_purchase", PRODUIT_SCHEMA, "pp_discount", None, pp_discount, record_id)
            if fk_document is not None:
                log.add("price_purchase", PRODUIT_SCHEMA, "fk_document", None, fk_document, record_id)
        else:
            for column, value in (("pp_amount", pp_amount), ("pp_discount", pp_discount), ("fk_document", fk_document)):
                old = getattr(price, column)
                if old != value:
                    log.add("price_purchase", PRODUIT_SCHEMA, column, old, value, record_id)
                setattr(price, column, value)

        logger.debug(
            "Purchase price recorded",
            extra={"pro_cenov_id": row["pro_cenov_id"], "pp_date": row["pp_date"], "pp_amount": str(pp_amount)},
        )

    async def import_attributes(
        self,
        session: AsyncSession,
        cat_id: int,
        kit: KitModel,
        attributes: list[AttributePair],
        metadata: ImportMetadata,
        log: ChangeLog,
    ) -> tuple[int, int]:
        """
        Write the attribute values of a row on its kit.

        Missing category links are created (optional). Open values are
        split into value and unit; bare values get the attribute's default
        unit.

        Returns:
            tuple: (category links created, kit attributes created)
        """
        linked = created = 0
        for pair in attributes:
            if pair.value is None or pair.value.strip() == "":
                continue
            attribute = metadata.attribute_map.get(pair.code)
            if attribute is None:
                continue

            link_key = (cat_id, attribute.atr_id)
            if link_key not in metadata.category_attributes:
                await category_attribute_crud.create(
                    session, fk_category=cat_id, fk_attribute=attribute.atr_id, cat_atr_required=False
                )
                metadata.category_attributes.add(link_key)
                linked += 1
                log.add(
                    "category_attribute",
                    PRODUIT_SCHEMA,
                    "fk_attribute",
                    None,
                    attribute.atr_id,
                    f"cat_id:{cat_id} → {pair.code}",
                )

            value: str | None = pair.value
            unit_id: int | None = None
            if not metadata.allowed_values.get(attribute.atr_id):
                value, unit = parse_value_and_unit(pair.value)
                if unit:
                    unit_id = find_unit_id(attribute.atr_id, unit, metadata.units_map)
                else:
                    units = metadata.units_map.get(attribute.atr_id)
                    unit_id = units.default_unit_id if units else None

            record_id = f"{kit.kit_label} - {pair.code}"
            kit_key = (kit.kit_id, attribute.atr_id)
            state = metadata.kit_attributes.get(kit_key)
            if state is not None:
                if state.kat_value != value:
                    log.add("kit_attribute", PUBLIC_SCHEMA, "kat_value", state.kat_value, value, record_id)
                if state.fk_attribute_unite != unit_id:
                    log.add(
                        "kit_attribute", PUBLIC_SCHEMA, "fk_attribute_unite", state.fk_attribute_unite, unit_id, record_id
                    )
                await kit_attribute_crud.update_by_pk(
                    session, state.kat_id, kat_value=value, fk_attribute_unite=unit_id
                )
                state.kat_value = value
                state.fk_attribute_unite = unit_id
            else:
                kit_attribute = await kit_attribute_crud.create(
                    session,
                    fk_kit=kit.kit_id,
                    fk_attribute_characteristic=attribute.atr_id,
                    fk_attribute_unite=unit_id,
                    kat_value=value,
                )
                metadata.kit_attributes[kit_key] = KitAttributeState(kit_attribute.kat_id, value, unit_id)
                log.add("kit_attribute", PUBLIC_SCHEMA, "kat_value", None, value, record_id)
                if unit_id is not None:
                    log.add("kit_attribute", PUBLIC_SCHEMA, "fk_attribute_unite", None, unit_id, record_id)
                created += 1
        return linked, created
