"""
Product ORM models.

Products are identified by (fk_supplier, pro_code); pro_cenov_id is the
internal SKU exported to WordPress. Purchase prices are dated, one per
product and day.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Product, product category and purchase price persistence
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cenov_admin.boundary.db.base import PRODUIT_SCHEMA, PUBLIC_SCHEMA, Base, TimestampMixin


class ProductModel(Base, TimestampMixin):
    """
    Catalog product.

    Attributes:
        pro_id: Integer primary key
        pro_cenov_id: Internal SKU (WordPress UGS)
        pro_code: Supplier product code
        sup_code, sup_label, cat_code: Denormalized import values
        fk_supplier, fk_kit: Owning supplier and kit
        fk_family, fk_sfamily, fk_ssfamily: Family levels
        fk_document: Source document of the import row
        pro_type .. in_stock: WooCommerce publication fields
    """

    __tablename__ = "product"
    __table_args__ = (
        UniqueConstraint("fk_supplier", "pro_code", name="uq_product_supplier_code"),
        {"schema": PRODUIT_SCHEMA},
    )

    pro_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pro_cenov_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    pro_code: Mapped[str] = mapped_column(String(50), nullable=False)
    sup_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sup_label: Mapped[str | None] = mapped_column(String(70), nullable=True)
    cat_code: Mapped[str | None] = mapped_column(String(60), nullable=True)

    fk_supplier: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.supplier.sup_id"), nullable=False
    )
    fk_kit: Mapped[int | None] = mapped_column(ForeignKey(f"{PUBLIC_SCHEMA}.kit.kit_id"), nullable=True)
    fk_family: Mapped[int | None] = mapped_column(ForeignKey(f"{PRODUIT_SCHEMA}.family.fam_id"), nullable=True)
    fk_sfamily: Mapped[int | None] = mapped_column(ForeignKey(f"{PRODUIT_SCHEMA}.family.fam_id"), nullable=True)
    fk_ssfamily: Mapped[int | None] = mapped_column(ForeignKey(f"{PRODUIT_SCHEMA}.family.fam_id"), nullable=True)
    fk_document: Mapped[int | None] = mapped_column(Integer, nullable=True)

    pro_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pro_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_published: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_featured: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    pro_visibility: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pro_short_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    pro_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    in_stock: Mapped[bool | None] = mapped_column(Boolean, nullable=True)


class ProductCategoryModel(Base):
    """Link between a product and a category."""

    __tablename__ = "product_category"
    __table_args__ = {"schema": PRODUIT_SCHEMA}

    fk_product: Mapped[int] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.product.pro_id", ondelete="CASCADE"), primary_key=True
    )
    fk_category: Mapped[int] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.category.cat_id", ondelete="CASCADE"), primary_key=True
    )


class PricePurchaseModel(Base):
    """Dated purchase price of a product."""

    __tablename__ = "price_purchase"
    __table_args__ = (
        UniqueConstraint("fk_product", "pp_date", name="uq_price_purchase_product_date"),
        {"schema": PRODUIT_SCHEMA},
    )

    pp_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fk_product: Mapped[int] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.product.pro_id", ondelete="CASCADE"), nullable=False
    )
    pp_date: Mapped[date] = mapped_column(Date, nullable=False)
    pp_amount: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    pp_discount: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    pro_cenov_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    fk_document: Mapped[int | None] = mapped_column(Integer, nullable=True)
