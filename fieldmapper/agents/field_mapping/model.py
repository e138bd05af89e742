"""Data models for the field mapping agent."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


@dataclass(frozen=True)
class MappingSuggestion:
    """One proposed rule for a target field, as returned by the oracle"""

    target_field: str
    direct: Optional[str] = None  # supplier field copied as-is
    formula: Optional[str] = None  # opaque expression, never evaluated here

    @property
    def is_unmapped(self) -> bool:
        return not self.direct and not self.formula

    def to_dict(self) -> dict:
        return {
            "targetField": self.target_field,
            "direct": self.direct or "",
            "formula": self.formula or "",
        }


@dataclass(frozen=True)
class FieldMapping:
    """Final rule for a target field; empty strings mean unmapped"""

    direct: str = ""
    formula: str = ""

    def to_dict(self) -> dict:
        return {"direct": self.direct, "formula": self.formula}


@dataclass(frozen=True)
class RequestPayload:
    """Prompt pair sent to the oracle together with the lists it was built from"""

    system_instruction: str
    user_prompt: str
    target_fields: Tuple[str, ...]
    supplier_fields: Tuple[str, ...]
    hints: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MappingTable:
    """Ordered target field -> FieldMapping table covering every target field once.

    ``entries`` is a read-only view. ``discarded_count`` counts suggestions that
    referenced a target field outside the schema; ``unresolved_direct`` lists
    target fields whose direct mapping names a column the supplier does not have
    (only filled when supplier fields were given to the normalizer).
    """

    entries: Mapping[str, FieldMapping]
    discarded_count: int = 0
    discarded_targets: Tuple[str, ...] = ()
    unresolved_direct: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.entries, MappingProxyType):
            object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, target_field: str) -> FieldMapping:
        return self.entries[target_field]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, target_field: object) -> bool:
        return target_field in self.entries

    def mapped_fields(self) -> Tuple[str, ...]:
        return tuple(
            name for name, mapping in self.entries.items()
            if mapping.direct or mapping.formula
        )

    def to_dict(self) -> Dict[str, dict]:
        """Convert to the final JSON output shape"""
        return {name: mapping.to_dict() for name, mapping in self.entries.items()}


@dataclass(frozen=True)
class SupplierContext:
    """A mapping table paired with the supplier it was generated for"""

    label: str
    supplier_fields: Tuple[str, ...]
    table: MappingTable
    hints: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary, including audit information"""
        return {
            "supplier": self.label,
            "supplier_fields": list(self.supplier_fields),
            "hints": list(self.hints),
            "mappings": self.table.to_dict(),
            "discarded_count": self.table.discarded_count,
            "discarded_targets": list(self.table.discarded_targets),
            "unresolved_direct": list(self.table.unresolved_direct),
        }
