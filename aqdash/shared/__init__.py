"""Shared utilities for the air-quality dashboard."""

from .models import METRICS, METRIC_KEYS, MetricSpec, Sample, get_metric
from .errors import DashboardError, DataShapeError, TransportError, ValidationError
from .config import load_yaml_config, get_config_path
from .logging import setup_logging

__all__ = [
    "METRICS",
    "METRIC_KEYS",
    "MetricSpec",
    "Sample",
    "get_metric",
    "DashboardError",
    "DataShapeError",
    "TransportError",
    "ValidationError",
    "load_yaml_config",
    "get_config_path",
    "setup_logging",
]
