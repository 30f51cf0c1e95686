"""
Kit ORM models.

A kit groups the attribute values shared by products; kit_attribute
stores one value (and unit) per attribute of the kit.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Kit and kit attribute persistence
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cenov_admin.boundary.db.base import PUBLIC_SCHEMA, Base, TimestampMixin


class KitModel(Base, TimestampMixin):
    """Kit identified by its unique label."""

    __tablename__ = "kit"
    __table_args__ = {"schema": PUBLIC_SCHEMA}

    kit_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kit_label: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class KitAttributeModel(Base):
    """
    Attribute value of a kit.

    Attributes:
        kat_id: Integer primary key, also the WordPress attribute order
        fk_kit: Owning kit
        fk_attribute_characteristic: Attribute described
        fk_attribute_unite: Unit attribute, if any
        kat_value: Raw value
        kat_visible: Exported as "Attribut N visible"
        kat_global: Exported as "Attribut N global"
    """

    __tablename__ = "kit_attribute"
    __table_args__ = (
        UniqueConstraint("fk_kit", "fk_attribute_characteristic", name="uq_kit_attribute"),
        {"schema": PUBLIC_SCHEMA},
    )

    kat_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fk_kit: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.kit.kit_id", ondelete="CASCADE"), nullable=False
    )
    fk_attribute_characteristic: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.attribute.atr_id"), nullable=False
    )
    fk_attribute_unite: Mapped[int | None] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.attribute.atr_id"), nullable=True
    )
    kat_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    kat_visible: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=True)
    kat_global: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=True)
