"""
Test suite for the WooCommerce CSV format and WordPress export helpers.

System role: Verification of WordPress export file generation
"""

from contextlib import asynccontextmanager
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from cenov_admin.application.services.wordpress_csv import (
    BOM,
    build_headers,
    build_row,
    escape_value,
    generate_wordpress_csv,
    quote_header,
)
from cenov_admin.application.services.wordpress_repository import build_category_paths
from cenov_admin.application.services.wordpress_service import (
    CSV_GENERATION_FAILED,
    PAGE_LOAD_FAILED,
    WordPressService,
    export_file_name,
    parse_product_ids,
    resolve_database,
)
from cenov_admin.boundary.db.models import CategoryModel
from cenov_admin.core.exceptions import ExportError
from cenov_admin.models.wordpress import WordPressAttribute, WordPressProduct, WordPressStats


def _product(**overrides) -> WordPressProduct:
    values = {"pro_id": 1, "sku": "CEN001", "name": "Pompe", "regular_price": "12.5"}
    values.update(overrides)
    return WordPressProduct(**values)


class TestHeaders:
    """Test suite for header quoting."""

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Type", "Type"),
            ("Description courte", '"Description courte"'),
            ("Mis en avant ?", '"Mis en avant ?"'),
            ("Valeur(s)", '"Valeur(s)"'),
        ],
    )
    def test_quote_header(self, header, expected) -> None:
        assert quote_header(header) == expected

    def test_attribute_headers_follow_base_headers(self) -> None:
        headers = build_headers(1)

        assert headers[:3] == ["Type", "UGS", "Nom"]
        assert len(headers) == 13 + 4
        assert headers[13] == '"Nom de l\u2019attribut 1"'
        assert headers[14] == '"Valeur(s) de l\u2019attribut 1 "'
        assert headers[15] == '"Attribut 1 visible"'


class TestRows:
    """Test suite for value escaping and rows."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ""),
            ("simple", "simple"),
            ("a,b", '"a,b"'),
            ('dit "oui"', '"dit ""oui"""'),
            ("ligne\nsuivante", '"ligne\nsuivante"'),
        ],
    )
    def test_escape_value(self, value, expected) -> None:
        assert escape_value(value) == expected

    def test_flags_are_zero_or_one(self) -> None:
        row = build_row(_product(published=True, featured=False, in_stock=True), 0).split(",")

        assert row[3:5] == ["1", "0"]
        assert row[8] == "1"

    def test_products_with_fewer_attributes_are_padded(self) -> None:
        product = _product(attributes=[WordPressAttribute(name="PRESSION", value="10", visible=False)])

        row = build_row(product, 2)

        assert row.endswith(",PRESSION,10,0,1,,,,")


class TestGenerateWordPressCsv:
    """Test suite for generate_wordpress_csv()."""

    def test_bom_header_and_one_line_per_product(self) -> None:
        content = generate_wordpress_csv([_product(), _product(pro_id=2, sku="CEN002", categories="A > B, C")])

        assert content.startswith(BOM + "Type,UGS,Nom,")
        lines = content[len(BOM):].split("\n")
        assert len(lines) == 3
        assert lines[1].startswith("simple,CEN001,Pompe,0,0,visible,,,1,12.5,,,")
        assert '"A > B, C"' in lines[2]

    def test_no_products_gives_header_only(self) -> None:
        content = generate_wordpress_csv([])

        assert "\n" not in content
        assert "attribut" not in content


class TestCategoryPaths:
    """Test suite for build_category_paths()."""

    def test_paths_use_wordpress_names(self) -> None:
        categories = [
            CategoryModel(cat_id=1, fk_parent=None, cat_code="A", cat_label="Pompes"),
            CategoryModel(cat_id=2, fk_parent=1, cat_code="B", cat_label="Pompes immergées", cat_wp_name="Immergées"),
            CategoryModel(cat_id=3, fk_parent=2, cat_code="C", cat_label="Inox"),
        ]

        assert build_category_paths(categories) == {
            1: "Pompes",
            2: "Pompes > Immergées",
            3: "Pompes > Immergées > Inox",
        }

    def test_cycles_get_no_path(self) -> None:
        categories = [
            CategoryModel(cat_id=1, fk_parent=2, cat_code="A", cat_label="A"),
            CategoryModel(cat_id=2, fk_parent=1, cat_code="B", cat_label="B"),
        ]

        assert build_category_paths(categories) == {}

    def test_depth_is_bounded(self) -> None:
        categories = [
            CategoryModel(cat_id=i, fk_parent=i - 1 if i > 1 else None, cat_code=str(i), cat_label=str(i))
            for i in range(1, 13)
        ]

        paths = build_category_paths(categories)

        assert set(paths) == set(range(1, 11))


class TestServiceHelpers:
    """Test suite for database, id and file name helpers."""

    @pytest.mark.parametrize(
        "database, expected",
        [("cenov_preprod", "cenov_preprod"), ("cenov_dev", "cenov_dev"), ("cenov", "cenov_dev"), (None, "cenov_dev")],
    )
    def test_resolve_database(self, database, expected) -> None:
        assert resolve_database(database) == expected

    def test_parse_product_ids(self) -> None:
        assert parse_product_ids(None) is None
        assert parse_product_ids("") is None
        assert parse_product_ids("1, 2,abc,,3") == [1, 2, 3]

    def test_file_names(self) -> None:
        today = date(2024, 6, 1)

        assert export_file_name("cenov_dev", [5], ["CEN005"], today) == "CEN005_dev.csv"
        assert export_file_name("cenov_preprod", [5, 6], ["A", "B"], today) == (
            "wordpress_products_selection_preprod_2024-06-01.csv"
        )
        assert export_file_name("cenov_dev", None, ["A"], today) == "wordpress_products_all_dev_2024-06-01.csv"


def _registry() -> MagicMock:
    registry = MagicMock()
    session = MagicMock()

    @asynccontextmanager
    async def open_session(database):
        yield session

    registry.session.side_effect = open_session
    return registry


class TestWordPressService:
    """Test suite for WordPressService with a mocked repository."""

    @pytest.mark.asyncio
    async def test_export_names_file_after_single_product(self) -> None:
        repository = MagicMock()
        repository.get_products = AsyncMock(return_value=[_product(pro_id=7, sku="CEN007")])
        registry = _registry()
        service = WordPressService(registry, repository)

        file_name, content = await service.export("cenov_preprod", "7")

        assert file_name == "CEN007_preprod.csv"
        assert content.startswith(BOM)
        registry.session.assert_called_once_with("cenov_preprod")
        assert repository.get_products.await_args.args[1] == [7]

    @pytest.mark.asyncio
    async def test_export_failure_is_wrapped(self) -> None:
        repository = MagicMock()
        repository.get_products = AsyncMock(side_effect=RuntimeError("connection lost"))
        service = WordPressService(_registry(), repository)

        with pytest.raises(ExportError) as exc_info:
            await service.export(None, None)

        assert exc_info.value.message == CSV_GENERATION_FAILED

    @pytest.mark.asyncio
    async def test_page_data_reads_dev_database(self) -> None:
        repository = MagicMock()
        repository.get_stats = AsyncMock(return_value=WordPressStats(total=3))
        repository.get_product_summaries = AsyncMock(return_value=[])
        repository.get_suppliers = AsyncMock(return_value=[])
        repository.get_categories = AsyncMock(return_value=[])
        registry = _registry()
        service = WordPressService(registry, repository)

        page = await service.get_page_data(supplier_id=4)

        assert page.stats.total == 3
        assert page.active_filters.supplier_id == 4
        registry.session.assert_called_once_with("cenov_dev")

    @pytest.mark.asyncio
    async def test_page_data_failure_is_wrapped(self) -> None:
        repository = MagicMock()
        repository.get_stats = AsyncMock(side_effect=RuntimeError("boom"))
        service = WordPressService(_registry(), repository)

        with pytest.raises(ExportError, match=PAGE_LOAD_FAILED):
            await service.get_page_data()
