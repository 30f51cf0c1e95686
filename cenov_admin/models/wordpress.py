"""
WordPress export schemas.

Dependencies: pydantic
System role: WordPress export API contracts
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

WordPressDatabase = Literal["cenov_dev", "cenov_preprod"]


class WordPressAttribute(BaseModel):
    """Kit attribute exported as four WooCommerce columns."""

    name: str
    value: str
    visible: bool = True
    global_: bool = Field(default=True, alias="global")

    model_config = ConfigDict(populate_by_name=True)


class WordPressProduct(BaseModel):
    """
    Product row of the WooCommerce CSV.

    categories holds category paths ("Pompes > Pompes immergées")
    joined by ", ".
    """

    pro_id: int
    type: str = "simple"
    sku: str
    name: str | None = None
    published: bool = False
    featured: bool = False
    visibility: str = "visible"
    short_description: str | None = None
    description: str | None = None
    in_stock: bool = True
    regular_price: str | None = None
    categories: str | None = None
    images: str | None = None
    brand: str | None = None
    attributes: list[WordPressAttribute] = Field(default_factory=list)


class ProductSummary(BaseModel):
    pro_id: int
    pro_cenov_id: str | None = None
    pro_name: str | None = None


class WordPressStats(BaseModel):
    """Counters of exportable products (products with a pro_cenov_id)."""

    total: int = 0
    published: int = 0
    in_stock: int = 0
    missing_name: int = 0
    missing_price: int = 0


class SupplierOption(BaseModel):
    sup_id: int
    sup_label: str


class CategoryOption(BaseModel):
    cat_id: int
    cat_label: str


class ActiveFilters(BaseModel):
    supplier_id: int | None = None
    category_id: int | None = None


class WordPressPageResponse(BaseModel):
    """Data of the WordPress export screen."""

    stats: WordPressStats
    products: list[ProductSummary]
    suppliers: list[SupplierOption]
    categories: list[CategoryOption]
    active_filters: ActiveFilters
