"""Validation of target and supplier field lists."""

from typing import Iterable, Tuple

from fieldmapper.exceptions import SchemaError


def _check_names(fields: Iterable, kind: str) -> Tuple[str, ...]:
    if isinstance(fields, str):
        raise SchemaError(f"{kind} fields must be a sequence of names, not a single string")

    try:
        names = tuple(fields)
    except TypeError as e:
        raise SchemaError(
            f"{kind} fields must be a sequence of names, got {type(fields).__name__}"
        ) from e
    seen = set()
    for position, name in enumerate(names):
        if not isinstance(name, str) or not name.strip():
            raise SchemaError(f"{kind} field at position {position} is empty or not a string: {name!r}")
        if name in seen:
            raise SchemaError(f"Duplicate {kind.lower()} field: '{name}'")
        seen.add(name)
    return names


def validate_target_fields(target_fields: Iterable[str]) -> Tuple[str, ...]:
    """Return target fields as a tuple; raise SchemaError if empty, blank or duplicated."""
    names = _check_names(target_fields, "Target")
    if not names:
        raise SchemaError("Target field list is empty")
    return names


def validate_supplier_fields(supplier_fields: Iterable[str]) -> Tuple[str, ...]:
    """Return supplier fields as a tuple; an empty list is allowed."""
    return _check_names(supplier_fields, "Supplier")
