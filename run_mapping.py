"""
Batch runner that suggests field mappings for one or more supplier files.

Usage:
  PYTHONPATH=. poetry run python run_mapping.py \
    --targets config/zoro_fields.yaml \
    --supplier suppliers/acme.csv --supplier suppliers/globex.csv \
    --hint "is_available is boolean based on isStocked equals YES" \
    --output results/mappings.json
"""

import argparse
import logging
import sys
from pathlib import Path

from fieldmapper.agents.field_mapping import FieldMappingAgent
from fieldmapper.config import get_config
from fieldmapper.exceptions import FieldMappingError
from fieldmapper.pipeline import FieldMappingPipeline, write_results
from fieldmapper.utils.data import load_hints, load_supplier_fields, load_target_schema, supplier_labels
from fieldmapper.utils.infrastructure.mlflow import mlflow_run

logger = logging.getLogger(__name__)


def build_parser(config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Suggest supplier -> Zoro field mappings.")
    parser.add_argument("--targets", default=str(config.target_fields_path),
                        help="YAML file with the target field list (and optional hints)")
    parser.add_argument("--supplier", action="append", required=True,
                        help="Supplier file (CSV header, YAML list or one field per line); repeatable")
    parser.add_argument("--hints", default=str(config.hints_path) if config.hints_path else None,
                        help="YAML file with business-rule hints")
    parser.add_argument("--hint", action="append", default=[], help="Extra business-rule hint; repeatable")
    parser.add_argument("--output", default=str(config.results_dir / "mappings.json"), help="Output JSON path")
    parser.add_argument("--audit", action="store_true", help="Write supplier fields, discards and errors too")
    parser.add_argument("--max-workers", type=int, default=config.max_workers, help="Suppliers mapped in parallel")
    parser.add_argument("--retries", type=int, default=0, help="Retries per supplier on recoverable failures")
    parser.add_argument("--timeout", type=float, default=config.oracle.timeout, help="Seconds per suggestion request")
    return parser


def main(argv=None) -> int:
    config = get_config()
    args = build_parser(config).parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        target_fields, hints = load_target_schema(args.targets)
        if args.hints:
            hints = hints + load_hints(args.hints)
        suppliers = {
            label: load_supplier_fields(path)
            for label, path in zip(supplier_labels(args.supplier), args.supplier)
        }
    except FieldMappingError as e:
        logger.error(f"Could not load field sources: {e}")
        return 2

    agent = FieldMappingAgent(
        target_fields=target_fields,
        hints=list(hints) + args.hint,
        timeout=args.timeout,
    )
    pipeline = FieldMappingPipeline(agent, max_workers=args.max_workers, max_retries=args.retries)

    with mlflow_run(experiment_name="field_mapping"):
        result = pipeline.process_suppliers(suppliers)

    output_path = write_results(result, Path(args.output), audit=args.audit)
    print(f"Mapped {len(result.contexts)}/{len(suppliers)} suppliers -> {output_path}")
    for error in result.errors:
        print(f"  failed: {error.supplier}: {error.error}")

    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
