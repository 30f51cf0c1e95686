"""
Supplier ORM model.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Supplier (brand) persistence
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cenov_admin.boundary.db.base import PUBLIC_SCHEMA, Base, TimestampMixin


class SupplierModel(Base, TimestampMixin):
    """
    Supplier of catalog products.

    Attributes:
        sup_id: Integer primary key
        sup_code: Supplier code, unique, used as import key
        sup_label: Supplier display name, exported as WordPress brand
    """

    __tablename__ = "supplier"
    __table_args__ = {"schema": PUBLIC_SCHEMA}

    sup_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sup_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    sup_label: Mapped[str] = mapped_column(String(70), nullable=False)
