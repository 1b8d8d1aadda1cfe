"""
proc-exporter.

Samples CPU, memory and PID of named processes and serves them as
Prometheus gauges.
"""

__version__ = "0.1.0"
