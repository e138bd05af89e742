"""Central MLflow setup and configuration for DSPy tracing."""

import mlflow
from contextlib import contextmanager
from typing import Optional

from fieldmapper.config import get_config

# Track if autolog has been initialized
_autolog_initialized = False


def setup_mlflow_tracing(experiment_name: Optional[str] = None):
    """
    Set up MLflow tracing for DSPy.

    Configures MLflow to trace language model calls made through DSPy. Call it
    once before running agents that need tracing; it does nothing when
    MLFLOW_ENABLED is false. Runs are opened only by ``mlflow_run``; outside
    one, MLflow records a trace per call.

    Args:
        experiment_name: Name of the MLflow experiment. If None, uses config default.

    Example:
        >>> from fieldmapper.utils.infrastructure.mlflow import setup_mlflow_tracing
        >>> setup_mlflow_tracing(experiment_name="field_mapping")
    """
    global _autolog_initialized

    config = get_config()

    if not config.mlflow.enabled:
        return

    if config.mlflow.tracking_uri:
        mlflow.set_tracking_uri(config.mlflow.tracking_uri)

    mlflow.set_experiment(experiment_name or config.mlflow.experiment_name)

    if not _autolog_initialized:
        mlflow.dspy.autolog()
        _autolog_initialized = True


@contextmanager
def mlflow_run(experiment_name: Optional[str] = None, run_name: Optional[str] = None):
    """
    Context manager grouping several operations under a single MLflow run.

    Args:
        experiment_name: Name of the MLflow experiment. If None, uses config default.
        run_name: Name of the run. If None, uses MLFLOW_RUN_NAME or lets MLflow pick one.

    Example:
        >>> with mlflow_run(experiment_name="field_mapping", run_name="nightly"):
        ...     pipeline.process_suppliers(suppliers)
    """
    config = get_config()

    if not config.mlflow.enabled:
        yield
        return

    setup_mlflow_tracing(experiment_name=experiment_name)

    with mlflow.start_run(run_name=run_name or config.mlflow.run_name):
        yield


def is_mlflow_enabled() -> bool:
    """Check if MLflow tracing is enabled."""
    config = get_config()
    return config.mlflow.enabled
