"""
Database boundary layer: ORM models, CRUD operations, introspection and connections.

Exports:
  - Base, TimestampMixin: Model building blocks
  - DatabaseRegistry, get_registry(), dispose_registry(): Engines per CENOV database
  - MetadataInspector: Table and column discovery
  - TableCRUD: Row access on reflected tables

Dependencies: sqlalchemy, cenov_admin.configs
System role: Database adapter for the cenov, cenov_dev and cenov_preprod databases
"""

from cenov_admin.boundary.db.base import PRODUIT_SCHEMA, PUBLIC_SCHEMA, Base, TimestampMixin
from cenov_admin.boundary.db.connection import (
    DATABASE_NAMES,
    DatabaseName,
    DatabaseRegistry,
    dispose_registry,
    get_registry,
    is_valid_database,
)
from cenov_admin.boundary.db.CRUD import TableCRUD
from cenov_admin.boundary.db.metadata import MetadataInspector

__all__ = [
    "Base",
    "TimestampMixin",
    "PRODUIT_SCHEMA",
    "PUBLIC_SCHEMA",
    "DATABASE_NAMES",
    "DatabaseName",
    "DatabaseRegistry",
    "dispose_registry",
    "get_registry",
    "is_valid_database",
    "MetadataInspector",
    "TableCRUD",
]
