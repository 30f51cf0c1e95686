"""
WordPress export repository.

Reads the products to publish on WooCommerce (every product with a
pro_cenov_id) with their latest purchase price, category paths, active
image, brand and kit attributes.

Dependencies: sqlalchemy, cenov_admin.boundary.db.models
System role: Read side of the WordPress export
"""

import logging
from typing import Iterable, Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.models import (
    AttributeModel,
    CategoryModel,
    DocumentModel,
    KitAttributeModel,
    PricePurchaseModel,
    ProductCategoryModel,
    ProductModel,
    SupplierModel,
)
from cenov_admin.models.wordpress import (
    CategoryOption,
    ProductSummary,
    SupplierOption,
    WordPressAttribute,
    WordPressProduct,
    WordPressStats,
)

logger = logging.getLogger(__name__)

MAX_CATEGORY_DEPTH = 10
CATEGORY_PATH_SEPARATOR = " > "


def build_category_paths(categories: Iterable[CategoryModel]) -> dict[int, str]:
    """
    Full path of every category reachable from a root.

    Each level is named by cat_wp_name, falling back to cat_label.
    Categories deeper than MAX_CATEGORY_DEPTH or outside a rooted tree
    (cycles) get no path.
    """
    categories = list(categories)
    children: dict[int | None, list[CategoryModel]] = {}
    for category in categories:
        children.setdefault(category.fk_parent, []).append(category)

    paths: dict[int, str] = {}
    level = [(c, c.cat_wp_name or c.cat_label) for c in children.get(None, [])]
    depth = 1
    while level and depth <= MAX_CATEGORY_DEPTH:
        next_level = []
        for category, path in level:
            paths[category.cat_id] = path
            for child in children.get(category.cat_id, []):
                next_level.append((child, f"{path}{CATEGORY_PATH_SEPARATOR}{child.cat_wp_name or child.cat_label}"))
        level = next_level
        depth += 1
    return paths


class WordPressRepository:
    """Product reads for the WooCommerce export; methods run on the caller's session."""

    @staticmethod
    def _exportable():
        return ProductModel.pro_cenov_id.is_not(None)

    async def get_products(
        self,
        session: AsyncSession,
        product_ids: Sequence[int] | None = None,
    ) -> list[WordPressProduct]:
        """
        Products formatted for WooCommerce, ordered by pro_id.

        Args:
            session: Async database session
            product_ids: Products to export (None or empty exports all)
        """
        stmt = select(ProductModel).where(self._exportable()).order_by(ProductModel.pro_id)
        if product_ids:
            stmt = stmt.where(ProductModel.pro_id.in_(list(product_ids)))
        products = (await session.execute(stmt)).scalars().all()
        if not products:
            return []

        ids = [p.pro_id for p in products]
        prices = await self._latest_prices(session, ids)
        images = await self._latest_images(session, ids)
        brands = await self._brands(session, {p.fk_supplier for p in products})
        categories = await self._category_paths(session, ids)
        attributes = await self.get_kit_attributes(session, {p.fk_kit for p in products if p.fk_kit})

        result = []
        for product in products:
            price = prices.get(product.pro_id)
            result.append(
                WordPressProduct(
                    pro_id=product.pro_id,
                    type=product.pro_type or "simple",
                    sku=product.pro_cenov_id,
                    name=product.pro_name,
                    published=bool(product.is_published),
                    featured=bool(product.is_featured),
                    visibility=product.pro_visibility or "visible",
                    short_description=product.pro_short_description,
                    description=product.pro_description,
                    in_stock=True if product.in_stock is None else product.in_stock,
                    regular_price=str(price) if price is not None else None,
                    categories=", ".join(categories.get(product.pro_id, [])) or None,
                    images=images.get(product.pro_id),
                    brand=brands.get(product.fk_supplier),
                    attributes=attributes.get(product.fk_kit, []) if product.fk_kit else [],
                )
            )
        logger.info("WordPress products loaded", extra={"count": len(result)})
        return result

    async def _latest_prices(self, session: AsyncSession, product_ids: list[int]) -> dict[int, object]:
        stmt = (
            select(PricePurchaseModel.fk_product, PricePurchaseModel.pp_amount)
            .where(PricePurchaseModel.fk_product.in_(product_ids))
            .order_by(PricePurchaseModel.fk_product, PricePurchaseModel.pp_date.desc())
        )
        latest: dict[int, object] = {}
        for fk_product, amount in (await session.execute(stmt)).all():
            latest.setdefault(fk_product, amount)
        return latest

    async def _latest_images(self, session: AsyncSession, product_ids: list[int]) -> dict[int, str | None]:
        stmt = (
            select(DocumentModel.product_id, DocumentModel.doc_link_source)
            .where(DocumentModel.product_id.in_(product_ids), DocumentModel.is_active.is_(True))
            .order_by(DocumentModel.product_id, DocumentModel.created_at.desc())
        )
        latest: dict[int, str | None] = {}
        for product_id, link in (await session.execute(stmt)).all():
            latest.setdefault(product_id, link)
        return latest

    async def _brands(self, session: AsyncSession, supplier_ids: set[int]) -> dict[int, str]:
        stmt = select(SupplierModel.sup_id, SupplierModel.sup_label).where(SupplierModel.sup_id.in_(supplier_ids))
        return {sup_id: label for sup_id, label in (await session.execute(stmt)).all()}

    async def _category_paths(self, session: AsyncSession, product_ids: list[int]) -> dict[int, list[str]]:
        """Sorted distinct category paths per product."""
        paths = build_category_paths((await session.execute(select(CategoryModel))).scalars().all())
        stmt = select(ProductCategoryModel.fk_product, ProductCategoryModel.fk_category).where(
            ProductCategoryModel.fk_product.in_(product_ids)
        )
        by_product: dict[int, set[str]] = {}
        for fk_product, fk_category in (await session.execute(stmt)).all():
            if fk_category in paths:
                by_product.setdefault(fk_product, set()).add(paths[fk_category])
        return {pro_id: sorted(values) for pro_id, values in by_product.items()}

    async def get_kit_attributes(
        self,
        session: AsyncSession,
        kit_ids: Iterable[int],
    ) -> dict[int, list[WordPressAttribute]]:
        """
        Every attribute of kits, ordered by kat_id.

        Values are exported raw, missing values as empty strings.
        """
        kit_ids = list(kit_ids)
        if not kit_ids:
            return {}
        stmt = (
            select(KitAttributeModel, AttributeModel.atr_value)
            .join(AttributeModel, AttributeModel.atr_id == KitAttributeModel.fk_attribute_characteristic)
            .where(KitAttributeModel.fk_kit.in_(kit_ids))
            .order_by(KitAttributeModel.kat_id)
        )
        result: dict[int, list[WordPressAttribute]] = {}
        for kit_attribute, atr_value in (await session.execute(stmt)).all():
            result.setdefault(kit_attribute.fk_kit, []).append(
                WordPressAttribute(
                    name=atr_value or "",
                    value=kit_attribute.kat_value or "",
                    visible=True if kit_attribute.kat_visible is None else kit_attribute.kat_visible,
                    global_=True if kit_attribute.kat_global is None else kit_attribute.kat_global,
                )
            )
        return result

    async def get_stats(self, session: AsyncSession) -> WordPressStats:
        """Total, published, in stock, unnamed and unpriced exportable products."""

        async def count(*conditions) -> int:
            stmt = select(func.count()).select_from(ProductModel).where(self._exportable(), *conditions)
            return int((await session.execute(stmt)).scalar_one())

        has_price = exists().where(PricePurchaseModel.fk_product == ProductModel.pro_id)
        return WordPressStats(
            total=await count(),
            published=await count(ProductModel.is_published.is_(True)),
            in_stock=await count(ProductModel.in_stock.is_(True)),
            missing_name=await count(ProductModel.pro_name.is_(None)),
            missing_price=await count(~has_price),
        )

    async def get_product_summaries(
        self,
        session: AsyncSession,
        supplier_id: int | None = None,
        category_id: int | None = None,
    ) -> list[ProductSummary]:
        """Exportable products for the selection list, optionally by brand and category."""
        stmt = (
            select(ProductModel.pro_id, ProductModel.pro_cenov_id, ProductModel.pro_name)
            .where(self._exportable())
            .order_by(ProductModel.pro_id)
        )
        if supplier_id is not None:
            stmt = stmt.where(ProductModel.fk_supplier == supplier_id)
        if category_id is not None:
            linked = exists().where(
                ProductCategoryModel.fk_product == ProductModel.pro_id,
                ProductCategoryModel.fk_category == category_id,
            )
            stmt = stmt.where(linked)
        rows = (await session.execute(stmt)).all()
        return [ProductSummary(pro_id=r.pro_id, pro_cenov_id=r.pro_cenov_id, pro_name=r.pro_name) for r in rows]

    async def get_suppliers(self, session: AsyncSession) -> list[SupplierOption]:
        """Brands having at least one exportable product."""
        stmt = (
            select(SupplierModel.sup_id, SupplierModel.sup_label)
            .join(ProductModel, ProductModel.fk_supplier == SupplierModel.sup_id)
            .where(self._exportable())
            .distinct()
            .order_by(SupplierModel.sup_label)
        )
        return [SupplierOption(sup_id=r.sup_id, sup_label=r.sup_label) for r in (await session.execute(stmt)).all()]

    async def get_categories(self, session: AsyncSession) -> list[CategoryOption]:
        """Categories having at least one exportable product."""
        stmt = (
            select(CategoryModel.cat_id, CategoryModel.cat_label)
            .join(ProductCategoryModel, ProductCategoryModel.fk_category == CategoryModel.cat_id)
            .join(ProductModel, ProductModel.pro_id == ProductCategoryModel.fk_product)
            .where(self._exportable())
            .distinct()
            .order_by(CategoryModel.cat_label)
        )
        return [CategoryOption(cat_id=r.cat_id, cat_label=r.cat_label) for r in (await session.execute(stmt)).all()]
