"""
Attribute ORM models.

Attributes describe product characteristics. Units are attributes too:
attribute_unit links a characteristic to the attributes usable as its unit,
attribute_value holds the closed list of accepted values when one exists.

Dependencies: sqlalchemy, cenov_admin.boundary.db.base
System role: Attribute reference data
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cenov_admin.boundary.db.base import PUBLIC_SCHEMA, Base


class AttributeModel(Base):
    """
    Product attribute.

    Attributes:
        atr_id: Integer primary key
        atr_value: Attribute code used as CSV column header (e.g. PRESSION_LIMITE)
        atr_label: Human readable label
    """

    __tablename__ = "attribute"
    __table_args__ = {"schema": PUBLIC_SCHEMA}

    atr_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    atr_value: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    atr_label: Mapped[str] = mapped_column(String(255), nullable=False)


class AttributeUnitModel(Base):
    """
    Unit allowed for an attribute.

    Attributes:
        fk_attribute: Characteristic the unit applies to
        fk_unit: Attribute acting as the unit (its atr_value is the symbol)
        is_default: Unit applied when a CSV value carries none
    """

    __tablename__ = "attribute_unit"
    __table_args__ = {"schema": PUBLIC_SCHEMA}

    fk_attribute: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.attribute.atr_id"), primary_key=True
    )
    fk_unit: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.attribute.atr_id"), primary_key=True
    )
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    unit = relationship("AttributeModel", foreign_keys=[fk_unit], lazy="joined")


class AttributeValueModel(Base):
    """Accepted value of a closed-list attribute."""

    __tablename__ = "attribute_value"
    __table_args__ = {"schema": PUBLIC_SCHEMA}

    av_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    av_atr_id: Mapped[int] = mapped_column(
        ForeignKey(f"{PUBLIC_SCHEMA}.attribute.atr_id"), nullable=False, index=True
    )
    av_value_label: Mapped[str | None] = mapped_column(String(255), nullable=True)
