"""
Database models package.

Exports:
  - SupplierModel, DocumentModel: public schema entities
  - KitModel, KitAttributeModel: kits and their attribute values
  - AttributeModel, AttributeUnitModel, AttributeValueModel: attribute reference data
  - CategoryModel, CategoryAttributeModel: category tree and attribute links
  - FamilyModel: supplier family hierarchy
  - ProductModel, ProductCategoryModel, PricePurchaseModel: catalog products

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Database model definitions for domain entities
"""

from cenov_admin.boundary.db.models.attribute_model import (
    AttributeModel,
    AttributeUnitModel,
    AttributeValueModel,
)
from cenov_admin.boundary.db.models.category_model import CategoryAttributeModel, CategoryModel
from cenov_admin.boundary.db.models.document_model import DocumentModel
from cenov_admin.boundary.db.models.family_model import FamilyModel
from cenov_admin.boundary.db.models.kit_model import KitAttributeModel, KitModel
from cenov_admin.boundary.db.models.product_model import (
    PricePurchaseModel,
    ProductCategoryModel,
    ProductModel,
)
from cenov_admin.boundary.db.models.supplier_model import SupplierModel

__all__ = [
    "AttributeModel",
    "AttributeUnitModel",
    "AttributeValueModel",
    "CategoryModel",
    "CategoryAttributeModel",
    "DocumentModel",
    "FamilyModel",
    "KitModel",
    "KitAttributeModel",
    "PricePurchaseModel",
    "ProductCategoryModel",
    "ProductModel",
    "SupplierModel",
]
