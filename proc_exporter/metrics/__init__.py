"""
Process metrics for proc-exporter.

Holds the gauge store, the updater that fills it and the console reporter.
"""

from .reporter import MetricsReporter
from .store import NOT_FOUND, GaugeValues, MetricStore
from .updater import MetricsUpdater, UpdateReport

__all__ = [
    "NOT_FOUND",
    "GaugeValues",
    "MetricStore",
    "MetricsReporter",
    "MetricsUpdater",
    "UpdateReport",
]
