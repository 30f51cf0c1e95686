"""
Family ORM model.

Supplier product families, three levels deep (famille, sous_famille,
sous_sous_famille), unique per label, parent and supplier.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Supplier family hierarchy persistence
"""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cenov_admin.boundary.db.base import PRODUIT_SCHEMA, PUBLIC_SCHEMA, Base


class FamilyModel(Base):
    """Supplier family node."""

    __tablename__ = "family"
    __table_args__ = (
        UniqueConstraint("fam_label", "fk_parent", "fk_supplier", name="uq_family_label_parent_supplier"),
        {"schema": PRODUIT_SCHEMA},
    )

    fam_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fam_label: Mapped[str] = mapped_column(String(100), nullable=False)
    fk_parent: Mapped[int | None] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.family.fam_id"), nullable=True
    )
    fk_supplier: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.supplier.sup_id"), nullable=False
    )
    fk_category: Mapped[int | None] = mapped_column(
        ForeignKey(f"{PRODUIT_SCHEMA}.category.cat_id"), nullable=True
    )
