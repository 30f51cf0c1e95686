"""
Attribute CRUD operations.

Dependencies: sqlalchemy, cenov_admin.boundary.db.models
System role: Attribute reference data access
"""

from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.CRUD.base_crud import BaseCRUD
from cenov_admin.boundary.db.models import AttributeModel, AttributeUnitModel, AttributeValueModel


class AttributeCRUD(BaseCRUD[AttributeModel]):
    """CRUD operations for AttributeModel."""

    def __init__(self) -> None:
        super().__init__(AttributeModel)

    async def get_coded(self, session: AsyncSession) -> Sequence[AttributeModel]:
        """Attributes having a code (atr_value), i.e. usable as CSV headers."""
        stmt = select(AttributeModel).where(AttributeModel.atr_value.is_not(None))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_codes(self, session: AsyncSession, codes: Iterable[str]) -> Sequence[AttributeModel]:
        return await self.find_in(session, "atr_value", codes)


class AttributeUnitCRUD(BaseCRUD[AttributeUnitModel]):
    """CRUD operations for AttributeUnitModel."""

    def __init__(self) -> None:
        super().__init__(AttributeUnitModel)

    async def get_all_ordered(self, session: AsyncSession) -> Sequence[AttributeUnitModel]:
        """Every attribute/unit link with its unit loaded, default units first per attribute."""
        stmt = select(AttributeUnitModel).order_by(
            AttributeUnitModel.fk_attribute.asc(),
            AttributeUnitModel.is_default.desc(),
        )
        result = await session.execute(stmt)
        return result.scalars().unique().all()


class AttributeValueCRUD(BaseCRUD[AttributeValueModel]):
    """CRUD operations for AttributeValueModel."""

    def __init__(self) -> None:
        super().__init__(AttributeValueModel)

    async def get_for_attributes(
        self,
        session: AsyncSession,
        atr_ids: Iterable[int],
    ) -> Sequence[AttributeValueModel]:
        return await self.find_in(session, "av_atr_id", atr_ids)


attribute_crud = AttributeCRUD()
attribute_unit_crud = AttributeUnitCRUD()
attribute_value_crud = AttributeValueCRUD()
