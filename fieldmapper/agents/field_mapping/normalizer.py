"""Reshapes raw suggestions into a complete mapping table.

Policy for repeated suggestions: when several suggestions name the same target
field, the later one in input order wins. Suggestions naming a target field
outside the schema are dropped and counted, not raised.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from fieldmapper.agents.field_mapping.model import FieldMapping, MappingSuggestion, MappingTable
from fieldmapper.agents.field_mapping.validation import validate_target_fields

logger = logging.getLogger(__name__)


def normalize(
    target_fields: Sequence[str],
    suggestions: Iterable[MappingSuggestion],
    supplier_fields: Optional[Sequence[str]] = None,
) -> MappingTable:
    """
    Build a MappingTable with exactly one entry per target field, in target order.

    Args:
        target_fields: Target schema field names
        suggestions: Raw suggestions, in any order and possibly incomplete
        supplier_fields: If given, direct mappings naming an unknown supplier field
            are reported in ``unresolved_direct`` (they are still kept)

    Returns:
        MappingTable

    Raises:
        SchemaError: If target_fields is empty or invalid
    """
    targets = validate_target_fields(target_fields)
    entries: Dict[str, FieldMapping] = {name: FieldMapping() for name in targets}
    discarded: List[str] = []

    for suggestion in suggestions:
        if suggestion.target_field not in entries:
            discarded.append(suggestion.target_field)
            continue
        if suggestion.direct and suggestion.formula:
            logger.warning(
                f"Suggestion for '{suggestion.target_field}' has both a direct field "
                f"'{suggestion.direct}' and a formula; keeping both"
            )
        # Last write wins
        entries[suggestion.target_field] = FieldMapping(
            direct=suggestion.direct or "",
            formula=suggestion.formula or "",
        )

    if discarded:
        logger.warning(
            f"Discarded {len(discarded)} suggestion(s) for unknown target fields: {', '.join(discarded)}"
        )

    unresolved = []
    if supplier_fields is not None:
        known = set(supplier_fields)
        unresolved = [
            name for name, mapping in entries.items()
            if mapping.direct and mapping.direct not in known
        ]
        for name in unresolved:
            logger.warning(
                f"Direct mapping for '{name}' names unknown supplier field '{entries[name].direct}'"
            )

    return MappingTable(
        entries=entries,
        discarded_count=len(discarded),
        discarded_targets=tuple(discarded),
        unresolved_direct=tuple(unresolved),
    )
