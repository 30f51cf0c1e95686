"""
WooCommerce product CSV generator.

Produces the French WooCommerce import format: fixed product columns
followed by four columns per attribute (name, values, visible, global).
WooCommerce matches headers literally, so headers keep their no-break
spaces and typographic apostrophes and are quoted only when they carry
special characters.

Dependencies: None
System role: WordPress export file format
"""

from cenov_admin.models.wordpress import WordPressProduct

BOM = "\ufeff"

BASE_HEADERS = (
    "Type",
    "UGS",
    "Nom",
    "Publié",
    "Mis en avant\u00a0?",
    "Visibilité dans le catalogue",
    "Description courte",
    "Description",
    "En stock\u00a0?",
    "Tarif régulier",
    "Catégories",
    "Images",
    "Brand",
)

_HEADER_SPECIAL_CHARS = (",", "?", " ", "'", "\u2019", "(", ")")


def quote_header(header: str) -> str:
    """Quote a header only when it contains special characters."""
    if any(char in header for char in _HEADER_SPECIAL_CHARS):
        return f'"{header}"'
    return header


def escape_value(value: str | None) -> str:
    """RFC 4180 escaping: quote values with quotes, commas or newlines."""
    if value is None:
        return ""
    text = str(value)
    if '"' in text or "," in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _flag(value: bool) -> str:
    return "1" if value else "0"


def attribute_headers(index: int) -> list[str]:
    """Headers of the n-th attribute (1-based); the values header ends with a space."""
    return [
        f"Nom de l\u2019attribut {index}",
        f"Valeur(s) de l\u2019attribut {index} ",
        f"Attribut {index} visible",
        f"Attribut {index} global",
    ]


def build_headers(max_attributes: int) -> list[str]:
    headers = [quote_header(h) for h in BASE_HEADERS]
    for index in range(1, max_attributes + 1):
        headers.extend(quote_header(h) for h in attribute_headers(index))
    return headers


def build_row(product: WordPressProduct, max_attributes: int) -> str:
    """One CSV line; products with fewer attributes are padded with empty columns."""
    columns = [
        escape_value(product.type),
        escape_value(product.sku),
        escape_value(product.name),
        _flag(product.published),
        _flag(product.featured),
        escape_value(product.visibility),
        escape_value(product.short_description),
        escape_value(product.description),
        _flag(product.in_stock),
        escape_value(product.regular_price),
        escape_value(product.categories),
        escape_value(product.images),
        escape_value(product.brand),
    ]
    for index in range(max_attributes):
        if index < len(product.attributes):
            attribute = product.attributes[index]
            columns.extend(
                [
                    escape_value(attribute.name),
                    escape_value(attribute.value),
                    _flag(attribute.visible),
                    _flag(attribute.global_),
                ]
            )
        else:
            columns.extend(["", "", "", ""])
    return ",".join(columns)


def generate_wordpress_csv(products: list[WordPressProduct]) -> str:
    """Complete CSV with UTF-8 BOM, header line and one line per product."""
    max_attributes = max((len(p.attributes) for p in products), default=0)
    lines = [",".join(build_headers(max_attributes))]
    lines.extend(build_row(product, max_attributes) for product in products)
    return BOM + "\n".join(lines)
