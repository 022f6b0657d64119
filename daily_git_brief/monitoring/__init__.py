"""
Monitoring Package for Daily Git Brief

Prometheus metrics for API traffic and collection runs.
"""

from .prometheus_metrics import PrometheusMetrics

__all__ = ["PrometheusMetrics"]
