"""Infrastructure utilities."""

from fieldmapper.utils.infrastructure.mlflow import (
    setup_mlflow_tracing,
    mlflow_run,
    is_mlflow_enabled,
)

__all__ = [
    "setup_mlflow_tracing",
    "mlflow_run",
    "is_mlflow_enabled",
]
