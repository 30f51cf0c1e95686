"""
Catalog import repository.

Reference data read by the import validation and orchestration:
attribute codes, units, closed value lists and the category tree with
inherited attributes.

Dependencies: sqlalchemy, cenov_admin.boundary.db.CRUD
System role: Read side of the catalog import
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from cenov_admin.boundary.db.CRUD import (
    attribute_crud,
    attribute_unit_crud,
    attribute_value_crud,
    category_attribute_crud,
    category_crud,
)
from cenov_admin.boundary.db.models import CategoryModel
from cenov_admin.models.imports import ImportCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeRef:
    atr_id: int
    atr_value: str


@dataclass(frozen=True)
class UnitInfo:
    unit_id: int
    unit_value: str
    unit_label: str


@dataclass
class AttributeUnits:
    """Units accepted by an attribute; default_unit_id applies to bare values."""

    default_unit_id: int | None = None
    units: list[UnitInfo] = field(default_factory=list)


@dataclass(frozen=True)
class RequiredAttribute:
    """Required attribute of a category, possibly inherited from an ancestor."""

    atr_id: int
    atr_value: str
    atr_label: str
    inherited: bool
    from_cat_id: int
    from_cat_label: str


@dataclass(frozen=True)
class CategoryRef:
    cat_id: int
    cat_label: str


@dataclass(frozen=True)
class DuplicateCategory:
    cat_code: str
    labels: list[str]


@dataclass
class CategoriesMetadata:
    """Categories found by code; codes carried by several categories are listed apart."""

    categories: dict[str, CategoryRef] = field(default_factory=dict)
    duplicates: list[DuplicateCategory] = field(default_factory=list)


def _ancestry_ids(cat_id: int, parents: dict[int, int | None]) -> list[int]:
    chain: list[int] = []
    current: int | None = cat_id
    while current is not None and current not in chain:
        chain.append(current)
        current = parents.get(current)
    return chain


class ImportRepository:
    """Reference data lookups; every method runs on the caller's session."""

    async def load_attribute_reference(self, session: AsyncSession) -> dict[str, AttributeRef]:
        """
        Attribute codes known by the database.

        Returns:
            dict: atr_value -> AttributeRef
        """
        attributes = await attribute_crud.get_coded(session)
        return {a.atr_value: AttributeRef(a.atr_id, a.atr_value) for a in attributes}

    async def load_attribute_units(self, session: AsyncSession) -> dict[int, AttributeUnits]:
        """
        Units accepted per attribute.

        Links are read default first, so the first default link of an
        attribute gives its default unit.

        Returns:
            dict: atr_id -> AttributeUnits
        """
        result: dict[int, AttributeUnits] = {}
        for link in await attribute_unit_crud.get_all_ordered(session):
            entry = result.setdefault(link.fk_attribute, AttributeUnits())
            if link.is_default and entry.default_unit_id is None:
                entry.default_unit_id = link.fk_unit
            entry.units.append(
                UnitInfo(
                    unit_id=link.fk_unit,
                    unit_value=link.unit.atr_value or "",
                    unit_label=link.unit.atr_label,
                )
            )
        return result

    async def load_allowed_values(self, session: AsyncSession, atr_ids: Iterable[int]) -> dict[int, set[str]]:
        """Closed value lists of attributes (attributes without values are absent)."""
        allowed: dict[int, set[str]] = {}
        for value in await attribute_value_crud.get_for_attributes(session, set(atr_ids)):
            labels = allowed.setdefault(value.av_atr_id, set())
            if value.av_value_label:
                labels.add(value.av_value_label)
        return allowed

    async def get_required_attributes(self, session: AsyncSession, cat_id: int) -> list[RequiredAttribute]:
        """
        Required attributes of a category, direct and inherited.

        An attribute required at several levels is reported once, from
        the level closest to the category.
        """
        hierarchy = await category_crud.get_ancestry(session, cat_id)
        depth = {c.cat_id: index for index, c in enumerate(hierarchy)}
        rows = await category_attribute_crud.get_with_attributes(session, depth, required_only=True)
        rows.sort(key=lambda row: depth[row[0].fk_category])

        seen: set[int] = set()
        result: list[RequiredAttribute] = []
        for link, attribute, category in rows:
            if attribute.atr_id in seen:
                continue
            seen.add(attribute.atr_id)
            result.append(
                RequiredAttribute(
                    atr_id=attribute.atr_id,
                    atr_value=attribute.atr_value or "",
                    atr_label=attribute.atr_label,
                    inherited=link.fk_category != cat_id,
                    from_cat_id=link.fk_category,
                    from_cat_label=category.cat_label,
                )
            )
        return result

    async def load_categories_metadata(self, session: AsyncSession, cat_codes: Iterable[str]) -> CategoriesMetadata:
        """Categories of the whole tree matching codes, with duplicated codes set apart."""
        grouped: dict[str, list[CategoryModel]] = {}
        for category in await category_crud.get_by_codes(session, set(cat_codes)):
            grouped.setdefault(category.cat_code, []).append(category)

        metadata = CategoriesMetadata()
        for code, categories in grouped.items():
            if len(categories) > 1:
                metadata.duplicates.append(DuplicateCategory(code, [c.cat_label for c in categories]))
            else:
                metadata.categories[code] = CategoryRef(categories[0].cat_id, categories[0].cat_label)
        return metadata

    async def get_total_attribute_count(self, session: AsyncSession, cat_id: int) -> int:
        """Distinct attributes linked to a category or any of its ancestors."""
        hierarchy = await category_crud.get_ancestry(session, cat_id)
        links = await category_attribute_crud.get_for_categories(session, [c.cat_id for c in hierarchy])
        return len({link.fk_attribute for link in links})

    async def load_import_categories(self, session: AsyncSession) -> list[ImportCategory]:
        """
        Every category with its attribute count (direct and inherited).

        Two queries load the tree and the links; inheritance is resolved
        in memory. Sorted by label, case-insensitive.
        """
        categories = await category_crud.get_all(session)
        links = await category_attribute_crud.get_all(session)

        parents = {c.cat_id: c.fk_parent for c in categories}
        direct: dict[int, set[int]] = {}
        for link in links:
            direct.setdefault(link.fk_category, set()).add(link.fk_attribute)

        result = []
        for category in categories:
            attributes: set[int] = set()
            for ancestor_id in _ancestry_ids(category.cat_id, parents):
                attributes |= direct.get(ancestor_id, set())
            result.append(
                ImportCategory(
                    cat_id=category.cat_id,
                    cat_code=category.cat_code,
                    cat_label=category.cat_label,
                    attribute_count=len(attributes),
                )
            )
        result.sort(key=lambda c: (c.cat_label or "").casefold())
        return result

    async def find_category(self, session: AsyncSession, cat_code: str) -> CategoryModel | None:
        """First category carrying a code."""
        categories = await category_crud.get_by_code(session, cat_code)
        return categories[0] if categories else None

    async def get_template_attribute_codes(self, session: AsyncSession, cat_id: int) -> list[str]:
        """Sorted distinct attribute codes of a category and its ancestors."""
        hierarchy = await category_crud.get_ancestry(session, cat_id)
        rows = await category_attribute_crud.get_with_attributes(session, [c.cat_id for c in hierarchy])
        codes = {attribute.atr_value for _, attribute, _ in rows if attribute.atr_value}
        logger.debug(
            "Template attributes resolved",
            extra={"cat_id": cat_id, "levels": len(hierarchy), "attributes": len(codes)},
        )
        return sorted(codes)
