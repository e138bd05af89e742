"""Field Mapping Pipeline

Runs the field mapping agent over a batch of suppliers:
1. Build and send one mapping request per supplier
2. Normalize each suggestion into a mapping table
3. Collect tables and per-supplier failures

Each supplier is its own unit of fault isolation: a failed supplier is
recorded and the rest of the batch carries on.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from fieldmapper.agents.field_mapping import FieldMappingAgent, SupplierContext
from fieldmapper.utils.error.error_models import SupplierMappingError
from fieldmapper.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of a batch run, in supplier input order"""

    contexts: List[SupplierContext] = field(default_factory=list)
    errors: List[SupplierMappingError] = field(default_factory=list)

    def final_mappings(self) -> Dict[str, Dict[str, dict]]:
        """Supplier label -> {target field: {direct, formula}}"""
        return {context.label: context.table.to_dict() for context in self.contexts}

    def to_dict(self) -> dict:
        """Audit form with supplier fields, discards and failures"""
        return {
            "suppliers": [context.to_dict() for context in self.contexts],
            "errors": [error.to_dict() for error in self.errors],
        }


class FieldMappingPipeline:
    """Maps many suppliers onto the agent's target fields"""

    def __init__(
        self,
        agent: FieldMappingAgent,
        max_workers: int = 1,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ):
        """
        Args:
            agent: Configured field mapping agent
            max_workers: Suppliers mapped concurrently (1 = sequential)
            max_retries: Extra attempts per supplier after a recoverable failure
            retry_delay: Initial backoff in seconds between attempts
        """
        self.agent = agent
        self.max_workers = max(1, max_workers)
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay

    def process_supplier(
        self,
        label: str,
        supplier_fields: Sequence[str],
        extra_instructions: Union[str, Sequence[str], None] = None,
    ) -> SupplierContext:
        """
        Map a single supplier, retrying recoverable failures when max_retries > 0.

        Raises:
            OracleError: If every attempt failed
            SchemaError: If the supplier field list is invalid
        """
        if self.max_retries == 0:
            return self.agent.map_supplier(label, supplier_fields, extra_instructions)

        @retry_with_backoff(max_retries=self.max_retries, initial_delay=self.retry_delay)
        def _map():
            return self.agent.map_supplier(label, supplier_fields, extra_instructions)

        return _map()

    def process_suppliers(
        self,
        suppliers: Mapping[str, Sequence[str]],
        extra_instructions: Optional[Mapping[str, Union[str, Sequence[str]]]] = None,
    ) -> BatchResult:
        """
        Map every supplier in the batch.

        Args:
            suppliers: Supplier label -> supplier field names
            extra_instructions: Optional per-supplier hints keyed by label

        Returns:
            BatchResult with one context per successful supplier and one error per failure
        """
        extra_instructions = extra_instructions or {}
        labels = list(suppliers)
        outcomes: Dict[str, Union[SupplierContext, SupplierMappingError]] = {}

        logger.info(f"Mapping {len(labels)} suppliers (max_workers={self.max_workers})")

        if self.max_workers > 1 and len(labels) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                future_to_label = {
                    executor.submit(
                        self.process_supplier,
                        label,
                        suppliers[label],
                        extra_instructions.get(label),
                    ): label
                    for label in labels
                }
                for future in as_completed(future_to_label):
                    label = future_to_label[future]
                    try:
                        outcomes[label] = future.result()
                    except Exception as e:
                        outcomes[label] = self._record_failure(label, e)
        else:
            for idx, label in enumerate(labels, 1):
                logger.info(f"Processing supplier {idx}/{len(labels)}: {label}")
                try:
                    outcomes[label] = self.process_supplier(
                        label, suppliers[label], extra_instructions.get(label)
                    )
                except Exception as e:
                    outcomes[label] = self._record_failure(label, e)

        result = BatchResult()
        for label in labels:
            outcome = outcomes[label]
            if isinstance(outcome, SupplierMappingError):
                result.errors.append(outcome)
            else:
                result.contexts.append(outcome)

        if result.errors:
            logger.warning(f"{len(result.errors)}/{len(labels)} suppliers failed to map")
        return result

    def _record_failure(self, label: str, exc: Exception) -> SupplierMappingError:
        logger.error(f"Supplier {label} mapping failed: {exc}")
        return SupplierMappingError.from_exception(label, exc)


def write_results(result: BatchResult, output_path: Union[str, Path], audit: bool = False) -> Path:
    """
    Write batch results as JSON.

    Args:
        result: Batch outcome
        output_path: Destination file; parent directories are created
        audit: Write the audit form instead of the final mapping shape

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.to_dict() if audit else result.final_mappings()
    with open(output_path, 'w') as f:
        json.dump(payload, f, indent=2)
    return output_path
