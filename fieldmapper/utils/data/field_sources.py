"""Loading of target and supplier field lists."""

import logging
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

import pandas as pd
import yaml

from fieldmapper.agents.field_mapping.validation import (
    validate_supplier_fields,
    validate_target_fields,
)
from fieldmapper.exceptions import SourceError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t"}


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise SourceError(f"Field source not found: {path}")
    try:
        with open(path, 'r') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SourceError(f"Invalid YAML in {path}: {e}") from e


def _hint_list(data: Any, path: Path) -> Tuple[str, ...]:
    if not isinstance(data, list) or not all(isinstance(h, str) for h in data):
        raise SourceError(f"Hints in {path} must be a list of strings")
    return tuple(h.strip() for h in data if h.strip())


def load_target_schema(path: Union[str, Path]) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """
    Load target fields and their hints from YAML.

    The file holds either a plain list of names or a mapping with a
    ``target_fields`` list and an optional ``hints`` list.

    Returns:
        (target_fields, hints)

    Raises:
        SourceError: If the file is missing or has no field list
        SchemaError: If the list is empty or has blank/duplicate names
    """
    path = Path(path)
    data = _read_yaml(path)
    hints = ()
    if isinstance(data, dict):
        hints = _hint_list(data.get("hints") or [], path)
        data = data.get("target_fields")
    if not isinstance(data, list):
        raise SourceError(f"No target field list found in {path}")
    return validate_target_fields(data), hints


def load_target_fields(path: Union[str, Path]) -> Tuple[str, ...]:
    return load_target_schema(path)[0]


def load_hints(path: Union[str, Path]) -> Tuple[str, ...]:
    """
    Load business-rule hints from YAML: a list of strings, or a mapping with a ``hints`` list.

    A target fields file without a ``hints`` key yields no hints.
    """
    path = Path(path)
    data = _read_yaml(path)
    if isinstance(data, dict):
        data = data.get("hints") or []
    return _hint_list(data, path)


def load_supplier_fields(path: Union[str, Path]) -> Tuple[str, ...]:
    """
    Load a supplier's field names.

    CSV/TSV files contribute their header row; YAML files a list of names;
    any other file one name per non-blank line.
    """
    path = Path(path)
    if not path.exists():
        raise SourceError(f"Supplier file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in DELIMITED_SUFFIXES:
        try:
            header = pd.read_csv(path, sep=DELIMITED_SUFFIXES[suffix], nrows=0)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise SourceError(f"Could not read header of {path}: {e}") from e
        fields = [str(col).strip() for col in header.columns]
    elif suffix in YAML_SUFFIXES:
        data = _read_yaml(path)
        if isinstance(data, dict):
            data = data.get("supplier_fields")
        if not isinstance(data, list):
            raise SourceError(f"No supplier field list found in {path}")
        fields = data
    else:
        with open(path, 'r') as f:
            fields = [line.strip() for line in f if line.strip()]

    logger.debug(f"Loaded {len(fields)} supplier fields from {path}")
    return validate_supplier_fields(fields)


def supplier_label(path: Union[str, Path]) -> str:
    """Label used for a supplier file in results: the file name without extension."""
    return Path(path).stem


def supplier_labels(paths: Sequence[Union[str, Path]]) -> List[str]:
    """
    Labels for a batch of supplier files, in input order.

    Files sharing a name are qualified with their parent directory
    (``a/feed`` and ``b/feed``).

    Raises:
        SourceError: If two files still end up with the same label
    """
    stems = [supplier_label(path) for path in paths]
    labels = [
        f"{Path(path).resolve().parent.name}/{stem}" if stems.count(stem) > 1 else stem
        for path, stem in zip(paths, stems)
    ]
    duplicates = sorted({label for label in labels if labels.count(label) > 1})
    if duplicates:
        raise SourceError(f"Supplier files share a label: {', '.join(duplicates)}")
    return labels
