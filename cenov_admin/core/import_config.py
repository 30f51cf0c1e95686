"""
Catalog import configuration.

Column rules for the supplier catalog CSV: required columns, the table
each column lands in, length limits and typed columns.

Dependencies: None
System role: Import rules shared by validation, orchestration and templates
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FieldTarget:
    """Database table and column a CSV column is written to."""

    table: str
    field: str


@dataclass(frozen=True)
class ImportConfig:
    """Validation rules for catalog CSV files."""

    required_fields: tuple[str, ...]
    field_mapping: dict[str, FieldTarget]
    field_max_lengths: dict[str, int]
    numeric_fields: tuple[str, ...]
    date_fields: tuple[str, ...]
    template_headers: tuple[str, ...] = field(default_factory=tuple)
    integer_fields: tuple[str, ...] = ("fk_document",)

    def max_length_for(self, csv_field: str) -> int | None:
        """Length limit of the column a CSV field maps to, if any."""
        target = self.field_mapping.get(csv_field)
        if target is None:
            return None
        return self.field_max_lengths.get(f"{target.table}.{target.field}")

    def as_dict(self) -> dict:
        return {
            "requiredFields": list(self.required_fields),
            "fieldMapping": {
                name: {"table": target.table, "field": target.field}
                for name, target in self.field_mapping.items()
            },
            "fieldMaxLengths": dict(self.field_max_lengths),
            "numericFields": list(self.numeric_fields),
            "dateFields": list(self.date_fields),
        }


IMPORT_CONFIG = ImportConfig(
    required_fields=(
        "pro_cenov_id",
        "pro_code",
        "sup_code",
        "sup_label",
        "cat_code",
        "cat_label",
        "kit_label",
        "pp_amount",
        "pp_date",
    ),
    field_mapping={
        "pro_cenov_id": FieldTarget("product", "pro_cenov_id"),
        "pro_code": FieldTarget("product", "pro_code"),
        "sup_code": FieldTarget("supplier", "sup_code"),
        "sup_label": FieldTarget("supplier", "sup_label"),
        "cat_code": FieldTarget("category", "cat_code"),
        "cat_label": FieldTarget("category", "cat_label"),
        "kit_label": FieldTarget("kit", "kit_label"),
        "famille": FieldTarget("family", "fam_label"),
        "sous_famille": FieldTarget("family", "fam_label"),
        "sous_sous_famille": FieldTarget("family", "fam_label"),
        "pp_amount": FieldTarget("price_purchase", "pp_amount"),
        "pp_discount": FieldTarget("price_purchase", "pp_discount"),
        "pp_date": FieldTarget("price_purchase", "pp_date"),
    },
    field_max_lengths={
        "product.pro_cenov_id": 50,
        "product.pro_code": 50,
        "supplier.sup_code": 50,
        "supplier.sup_label": 70,
        "category.cat_code": 60,
        "category.cat_label": 100,
        "kit.kit_label": 100,
        "family.fam_label": 100,
    },
    numeric_fields=("pp_amount", "pp_discount"),
    date_fields=("pp_date",),
    template_headers=(
        "pro_cenov_id",
        "pro_code",
        "sup_code",
        "sup_label",
        "cat_code",
        "cat_label",
        "fk_document",
        "kit_label",
        "famille",
        "sous_famille",
        "sous_sous_famille",
        "pp_amount",
        "pp_date",
        "pp_discount",
    ),
)

DEFAULT_IMPORT_DATABASE = "cenov_dev"
IMPORT_DATABASES = ("cenov_dev", "cenov_preprod")
