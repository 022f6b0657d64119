"""
Prometheus metrics for Daily Git Brief

Counters and histograms for API traffic and collection runs, exported from a
dedicated registry.
"""

import logging

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
    start_http_server,
)

from daily_git_brief import __version__
from daily_git_brief.core.config import Settings


class PrometheusMetrics:
    """Prometheus metrics for API requests and collection runs"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.logger = logging.getLogger("prometheus_metrics")

        # Custom registry so tests and multiple app instances don't collide
        self.registry = CollectorRegistry()

        # API
        self.api_requests_total = Counter(
            "api_requests_total",
            "Total number of API requests",
            ["method", "endpoint", "status"],
            registry=self.registry,
        )

        self.api_request_duration = Histogram(
            "api_request_duration_seconds",
            "API request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry,
        )

        # Collection runs
        self.collection_runs_total = Counter(
            "collection_runs_total",
            "Total number of collection runs",
            ["status"],
            registry=self.registry,
        )

        self.collection_duration = Histogram(
            "collection_duration_seconds",
            "Collection run duration in seconds",
            buckets=(10, 30, 60, 120, 300, 600, 1200, 1800, 3600),
            registry=self.registry,
        )

        self.repos_collected_total = Counter(
            "repos_collected_total",
            "Total number of trending repos persisted",
            registry=self.registry,
        )

        self.degraded_steps_total = Counter(
            "collection_degraded_steps_total",
            "Per-repo collection steps that failed and were skipped",
            ["step"],
            registry=self.registry,
        )

        self.collection_rejections_total = Counter(
            "collection_rejections_total",
            "Collection starts rejected because a run was already active",
            registry=self.registry,
        )

        self.app_info = Info(
            "daily_git_brief_info",
            "Daily Git Brief application info",
            registry=self.registry,
        )
        self.app_info.info({"version": __version__, "environment": self.settings.environment})

    def start_metrics_server(self, port: int = 8008):
        """Start the Prometheus HTTP exporter"""
        try:
            start_http_server(port, registry=self.registry)
            self.logger.info(f"Prometheus metrics server started on port {port}")
        except Exception as e:
            self.logger.error(f"Failed to start metrics server: {e}")
            raise

    def record_api_request(self, method: str, endpoint: str, status: str, duration: float):
        self.api_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        self.api_request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_collection_run(self, status: str, duration: float, repos_collected: int = 0):
        self.collection_runs_total.labels(status=status).inc()
        self.collection_duration.observe(duration)
        if repos_collected > 0:
            self.repos_collected_total.inc(repos_collected)

    def record_degraded_step(self, step: str):
        self.degraded_steps_total.labels(step=step).inc()

    def record_collection_rejected(self):
        self.collection_rejections_total.inc()

    def export_metrics(self) -> bytes:
        return generate_latest(self.registry)
