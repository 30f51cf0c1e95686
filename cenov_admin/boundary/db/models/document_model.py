"""
Document ORM model.

Product documents (images, datasheets) referenced by the WordPress export.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Product document persistence
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cenov_admin.boundary.db.base import PRODUIT_SCHEMA, PUBLIC_SCHEMA, Base, TimestampMixin


class DocumentModel(Base, TimestampMixin):
    """
    Document attached to a product.

    Attributes:
        doc_id: Integer primary key
        product_id: Owning product
        doc_link_source: Public URL of the file
        is_active: Inactive documents are ignored by exports
    """

    __tablename__ = "document"
    __table_args__ = {"schema": PUBLIC_SCHEMA}

    doc_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int | None] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.product.pro_id", ondelete="CASCADE"),
        nullable=True,
    )
    doc_link_source: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
