"""
Category CRUD operations.

Categories form a tree through fk_parent. Attribute links are stored on
each level and inherited by descendants, so most lookups walk the tree
from a category up to its root.

Dependencies: sqlalchemy, cenov_admin.boundary.db.models
System role: Category tree and category attribute persistence
"""

from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.CRUD.base_crud import BaseCRUD
from cenov_admin.boundary.db.models import AttributeModel, CategoryAttributeModel, CategoryModel


class CategoryCRUD(BaseCRUD[CategoryModel]):
    """
    CRUD operations for CategoryModel.

    Extends BaseCRUD with code lookups across the whole hierarchy
    (roots and sub-categories alike) and ancestor resolution.
    """

    def __init__(self) -> None:
        super().__init__(CategoryModel)

    async def get_by_code(self, session: AsyncSession, cat_code: str) -> Sequence[CategoryModel]:
        """Every category carrying cat_code (more than one means duplicates)."""
        return await self.find_all(session, cat_code=cat_code)

    async def get_by_codes(self, session: AsyncSession, cat_codes: Iterable[str]) -> Sequence[CategoryModel]:
        return await self.find_in(session, "cat_code", cat_codes)

    async def get_ancestry(self, session: AsyncSession, cat_id: int) -> list[CategoryModel]:
        """
        Walk up the tree from a category.

        Args:
            session: Async database session
            cat_id: Starting category

        Returns:
            list[CategoryModel]: The category followed by its ancestors up to the root
        """
        chain: list[CategoryModel] = []
        seen: set[int] = set()
        current: int | None = cat_id
        while current is not None and current not in seen:
            category = await self.get_by_pk(session, current)
            if category is None:
                break
            seen.add(current)
            chain.append(category)
            current = category.fk_parent
        return chain


class CategoryAttributeCRUD(BaseCRUD[CategoryAttributeModel]):
    """CRUD operations for CategoryAttributeModel."""

    def __init__(self) -> None:
        super().__init__(CategoryAttributeModel)

    async def get_for_categories(
        self,
        session: AsyncSession,
        cat_ids: Iterable[int],
    ) -> Sequence[CategoryAttributeModel]:
        return await self.find_in(session, "fk_category", cat_ids)

    async def get_with_attributes(
        self,
        session: AsyncSession,
        cat_ids: Iterable[int],
        required_only: bool = False,
    ) -> list[tuple[CategoryAttributeModel, AttributeModel, CategoryModel]]:
        """
        Attribute links of several categories joined with attribute and category.

        Args:
            session: Async database session
            cat_ids: Categories to read
            required_only: Keep only links flagged cat_atr_required

        Returns:
            list: (link, attribute, category) rows ordered by attribute code
        """
        cat_ids = list(cat_ids)
        if not cat_ids:
            return []
        stmt = (
            select(CategoryAttributeModel, AttributeModel, CategoryModel)
            .join(AttributeModel, AttributeModel.atr_id == CategoryAttributeModel.fk_attribute)
            .join(CategoryModel, CategoryModel.cat_id == CategoryAttributeModel.fk_category)
            .where(CategoryAttributeModel.fk_category.in_(cat_ids))
            .order_by(AttributeModel.atr_value)
        )
        if required_only:
            stmt = stmt.where(CategoryAttributeModel.cat_atr_required.is_(True))
        result = await session.execute(stmt)
        return [tuple(row) for row in result.all()]


category_crud = CategoryCRUD()
category_attribute_crud = CategoryAttributeCRUD()
