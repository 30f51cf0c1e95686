"""
Category ORM models.

Categories form a tree through fk_parent. Attributes linked to a category
apply to its whole subtree; cat_atr_required marks the mandatory ones.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Category hierarchy persistence
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cenov_admin.boundary.db.base import PRODUIT_SCHEMA, PUBLIC_SCHEMA, Base, TimestampMixin


class CategoryModel(Base, TimestampMixin):
    """
    Product category.

    Attributes:
        cat_id: Integer primary key
        fk_parent: Parent category, None for roots
        cat_code: Business code (not enforced unique, duplicates are reported)
        cat_label: Display label
        cat_wp_name: Name used in WordPress category paths when set
    """

    __tablename__ = "category"
    __table_args__ = {"schema": PRODUIT_SCHEMA}

    cat_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fk_parent: Mapped[int | None] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.category.cat_id"), nullable=True
    )
    cat_code: Mapped[str | None] = mapped_column(String(60), nullable=True, index=True)
    cat_label: Mapped[str] = mapped_column(String(100), nullable=False)
    cat_wp_name: Mapped[str | None] = mapped_column(String(255), nullable=True)


class CategoryAttributeModel(Base):
    """Link between a category and an attribute."""

    __tablename__ = "category_attribute"
    __table_args__ = {"schema": PRODUIT_SCHEMA}

    fk_category: Mapped[int] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.category.cat_id", ondelete="CASCADE"), primary_key=True
    )
    fk_attribute: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.attribute.atr_id"), primary_key=True
    )
    cat_atr_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
