"""
CRUD operations for database models.

Exports base CRUD class, model-specific CRUD implementations with
pre-instantiated singletons for direct use, and TableCRUD for tables
that are only known at runtime.

Usage:
    from cenov_admin.boundary.db.CRUD import supplier_crud, product_crud

    supplier = await supplier_crud.get_by_code(session, "SUP01")
"""

from cenov_admin.boundary.db.CRUD.attribute_crud import (
    AttributeCRUD,
    AttributeUnitCRUD,
    AttributeValueCRUD,
    attribute_crud,
    attribute_unit_crud,
    attribute_value_crud,
)
from cenov_admin.boundary.db.CRUD.base_crud import BaseCRUD
from cenov_admin.boundary.db.CRUD.category_crud import (
    CategoryAttributeCRUD,
    CategoryCRUD,
    category_attribute_crud,
    category_crud,
)
from cenov_admin.boundary.db.CRUD.product_crud import (
    FamilyCRUD,
    PricePurchaseCRUD,
    ProductCategoryCRUD,
    ProductCRUD,
    family_crud,
    price_purchase_crud,
    product_category_crud,
    product_crud,
)
from cenov_admin.boundary.db.CRUD.supplier_crud import (
    KitAttributeCRUD,
    KitCRUD,
    SupplierCRUD,
    kit_attribute_crud,
    kit_crud,
    supplier_crud,
)
from cenov_admin.boundary.db.CRUD.table_crud import TableCRUD, coerce_value

__all__ = [
    "BaseCRUD",
    "TableCRUD",
    "coerce_value",
    "AttributeCRUD",
    "AttributeUnitCRUD",
    "AttributeValueCRUD",
    "CategoryCRUD",
    "CategoryAttributeCRUD",
    "FamilyCRUD",
    "KitCRUD",
    "KitAttributeCRUD",
    "PricePurchaseCRUD",
    "ProductCRUD",
    "ProductCategoryCRUD",
    "SupplierCRUD",
    "attribute_crud",
    "attribute_unit_crud",
    "attribute_value_crud",
    "category_crud",
    "category_attribute_crud",
    "family_crud",
    "kit_crud",
    "kit_attribute_crud",
    "price_purchase_crud",
    "product_crud",
    "product_category_crud",
    "supplier_crud",
]
