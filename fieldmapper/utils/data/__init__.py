"""Field source loading utilities."""

from fieldmapper.utils.data.field_sources import (
    load_hints,
    load_supplier_fields,
    load_target_fields,
    load_target_schema,
    supplier_label,
    supplier_labels,
)

__all__ = [
    "load_hints",
    "load_supplier_fields",
    "load_target_fields",
    "load_target_schema",
    "supplier_label",
    "supplier_labels",
]
