"""
Supplier and kit CRUD operations.

Suppliers are looked up by their unique code, kits by their unique label.

Dependencies: sqlalchemy, cenov_admin.boundary.db.models
System role: Supplier and kit persistence operations
"""

from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.CRUD.base_crud import BaseCRUD
from cenov_admin.boundary.db.models import KitAttributeModel, KitModel, SupplierModel


class SupplierCRUD(BaseCRUD[SupplierModel]):
    """CRUD operations for SupplierModel."""

    def __init__(self) -> None:
        super().__init__(SupplierModel)

    async def get_by_code(self, session: AsyncSession, sup_code: str) -> SupplierModel | None:
        return await self.find_one(session, sup_code=sup_code)


class KitCRUD(BaseCRUD[KitModel]):
    """CRUD operations for KitModel."""

    def __init__(self) -> None:
        super().__init__(KitModel)

    async def get_by_label(self, session: AsyncSession, kit_label: str) -> KitModel | None:
        return await self.find_one(session, kit_label=kit_label)

    async def get_by_labels(self, session: AsyncSession, labels: Iterable[str]) -> Sequence[KitModel]:
        return await self.find_in(session, "kit_label", labels)


class KitAttributeCRUD(BaseCRUD[KitAttributeModel]):
    """CRUD operations for KitAttributeModel."""

    def __init__(self) -> None:
        super().__init__(KitAttributeModel)

    async def get_for_kits(self, session: AsyncSession, kit_ids: Iterable[int]) -> Sequence[KitAttributeModel]:
        """Attribute values of several kits."""
        return await self.find_in(session, "fk_kit", kit_ids)


supplier_crud = SupplierCRUD()
kit_crud = KitCRUD()
kit_attribute_crud = KitAttributeCRUD()
