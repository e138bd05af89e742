"""Field mapping agent."""

import logging
import threading
from typing import Optional, Sequence, Union

import dspy

from fieldmapper.config import get_config
from fieldmapper.utils.infrastructure.mlflow import setup_mlflow_tracing
from fieldmapper.llms.oracle import BaseOracle, DSPyOracle, OracleOptions
from fieldmapper.agents.field_mapping.model import SupplierContext
from fieldmapper.agents.field_mapping.normalizer import normalize
from fieldmapper.agents.field_mapping.requester import MappingRequester, normalize_hints
from fieldmapper.agents.field_mapping.validation import validate_target_fields

logger = logging.getLogger(__name__)


class FieldMappingAgent:
    """Suggests mapping rules from supplier fields onto a fixed set of target fields"""

    def __init__(
        self,
        target_fields: Sequence[str],
        oracle: Optional[BaseOracle] = None,
        lm: Optional[dspy.LM] = None,
        hints: Union[str, Sequence[str], None] = None,
        options: Optional[OracleOptions] = None,
        timeout: Optional[float] = None,
        enable_tracing: bool = True,
    ):
        """
        Initialize the Field Mapping Agent

        Args:
            target_fields: Target schema, fixed for the lifetime of the agent
            oracle: Suggestion oracle (if None, a DSPyOracle over ``lm`` is used)
            lm: DSPy language model (if None, uses config for this agent)
            hints: Business-rule hints sent with every request
            options: Sampling options (defaults from config)
            timeout: Seconds to wait for each suggestion (defaults from config)
            enable_tracing: Whether to enable MLflow tracing (default: True)
        """
        if enable_tracing:
            setup_mlflow_tracing(experiment_name="field_mapping")

        config = get_config()
        if timeout is None:
            timeout = config.oracle.timeout

        if oracle is None:
            oracle = DSPyOracle(lm=lm, request_timeout=timeout)

        self.target_fields = validate_target_fields(target_fields)
        self.hints = normalize_hints(hints)
        self.requester = MappingRequester(oracle, options=options, timeout=timeout)

    def map_supplier(
        self,
        label: str,
        supplier_fields: Sequence[str],
        extra_instructions: Union[str, Sequence[str], None] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SupplierContext:
        """
        Generate the mapping table for one supplier.

        Args:
            label: Supplier or source name, kept for audit
            supplier_fields: Field names found in the supplier's data
            extra_instructions: Hints for this supplier only, sent after the agent hints
            timeout: Override of the agent timeout
            cancel_event: Set by the caller to abandon the request

        Returns:
            SupplierContext with the normalized MappingTable

        Raises:
            OracleError: If no usable suggestion could be obtained
            SchemaError: If the supplier field list is invalid
        """
        hints = self.hints + normalize_hints(extra_instructions)
        payload = self.requester.build_request(self.target_fields, supplier_fields, hints)
        suggestions = self.requester.request_suggestions(
            payload, timeout=timeout, cancel_event=cancel_event
        )
        table = normalize(self.target_fields, suggestions, supplier_fields=payload.supplier_fields)

        logger.info(
            f"Mapped {len(table.mapped_fields())}/{len(table)} target fields for supplier '{label}'"
        )
        return SupplierContext(
            label=label,
            supplier_fields=payload.supplier_fields,
            table=table,
            hints=payload.hints,
        )
