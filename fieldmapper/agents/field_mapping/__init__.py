"""Field mapping agent."""

from fieldmapper.agents.field_mapping.agent import FieldMappingAgent
from fieldmapper.agents.field_mapping.model import (
    FieldMapping,
    MappingSuggestion,
    MappingTable,
    RequestPayload,
    SupplierContext,
)
from fieldmapper.agents.field_mapping.normalizer import normalize
from fieldmapper.agents.field_mapping.requester import MappingRequester, parse_suggestions

__all__ = [
    "FieldMappingAgent",
    "FieldMapping",
    "MappingSuggestion",
    "MappingTable",
    "RequestPayload",
    "SupplierContext",
    "MappingRequester",
    "normalize",
    "parse_suggestions",
]
