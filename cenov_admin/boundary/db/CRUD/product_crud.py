"""
Product CRUD operations.

Provides lookups for products by (supplier, code), family levels,
product/category links and dated purchase prices.

Dependencies: sqlalchemy, cenov_admin.boundary.db.models
System role: Product persistence operations
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.CRUD.base_crud import BaseCRUD
from cenov_admin.boundary.db.models import (
    FamilyModel,
    PricePurchaseModel,
    ProductCategoryModel,
    ProductModel,
)


class ProductCRUD(BaseCRUD[ProductModel]):
    """CRUD operations for ProductModel."""

    def __init__(self) -> None:
        super().__init__(ProductModel)

    async def get_by_supplier_code(
        self,
        session: AsyncSession,
        fk_supplier: int,
        pro_code: str,
    ) -> ProductModel | None:
        return await self.find_one(session, fk_supplier=fk_supplier, pro_code=pro_code)


class FamilyCRUD(BaseCRUD[FamilyModel]):
    """CRUD operations for FamilyModel."""

    def __init__(self) -> None:
        super().__init__(FamilyModel)

    async def find_level(
        self,
        session: AsyncSession,
        fam_label: str,
        fk_parent: int | None,
        fk_supplier: int,
    ) -> FamilyModel | None:
        """Family of a supplier with a label under a parent (None for top level)."""
        return await self.find_one(
            session, fam_label=fam_label, fk_parent=fk_parent, fk_supplier=fk_supplier
        )


class ProductCategoryCRUD(BaseCRUD[ProductCategoryModel]):
    """CRUD operations for ProductCategoryModel."""

    def __init__(self) -> None:
        super().__init__(ProductCategoryModel)

    async def get_link(self, session: AsyncSession, fk_product: int, fk_category: int) -> ProductCategoryModel | None:
        return await self.get_by_pk(session, (fk_product, fk_category))


class PricePurchaseCRUD(BaseCRUD[PricePurchaseModel]):
    """CRUD operations for PricePurchaseModel."""

    def __init__(self) -> None:
        super().__init__(PricePurchaseModel)

    async def get_by_product_date(
        self,
        session: AsyncSession,
        fk_product: int,
        pp_date: date,
    ) -> PricePurchaseModel | None:
        return await self.find_one(session, fk_product=fk_product, pp_date=pp_date)


product_crud = ProductCRUD()
family_crud = FamilyCRUD()
product_category_crud = ProductCategoryCRUD()
price_purchase_crud = PricePurchaseCRUD()
