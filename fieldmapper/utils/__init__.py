"""Utility functions for the field mapper."""

from fieldmapper.utils.infrastructure.mlflow import (
    setup_mlflow_tracing,
    mlflow_run,
    is_mlflow_enabled,
)
from fieldmapper.utils.retry import retry_with_backoff, is_rate_limit_error

__all__ = [
    "setup_mlflow_tracing",
    "mlflow_run",
    "is_mlflow_enabled",
    "retry_with_backoff",
    "is_rate_limit_error",
]
