"""
Shared metrics configuration for the BFF gateway.
"""

from prometheus_client import Counter, Histogram, Info, start_http_server, CollectorRegistry
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so several app instances (one per test,
    for example) can coexist in one process.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._setup_gateway_metrics()

    def _setup_gateway_metrics(self):
        """Set up admission and dispatch metrics."""
        self._metrics["upstream_requests_total"] = Counter(
            "upstream_requests_total",
            "Proxied downstream calls by outcome",
            ["service", "outcome"],
            registry=self.registry
        )

        self._metrics["pipeline_rejections_total"] = Counter(
            "pipeline_rejections_total",
            "Requests rejected by an admission pipeline stage",
            ["stage"],
            registry=self.registry
        )

        self._metrics["entitlement_fallbacks_total"] = Counter(
            "entitlement_fallbacks_total",
            "Entitlement lookups that fell back to the empty set",
            registry=self.registry
        )

        self._metrics["usage_meter_failures_total"] = Counter(
            "usage_meter_failures_total",
            "Usage notifications that could not be delivered",
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def start_metrics_server(self, port: int = 9090):
        """Start the Prometheus metrics server."""
        start_http_server(port, registry=self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_upstream_call(self, service: str, outcome: str):
        self._metrics["upstream_requests_total"].labels(service=service, outcome=outcome).inc()

    def record_rejection(self, stage: str):
        self._metrics["pipeline_rejections_total"].labels(stage=stage).inc()

    def record_entitlement_fallback(self):
        self._metrics["entitlement_fallbacks_total"].inc()

    def record_usage_meter_failure(self):
        self._metrics["usage_meter_failures_total"].inc()

    def sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Read the current value of a sample from this collector's registry."""
        value = self.registry.get_sample_value(name, labels or {})
        return value or 0.0


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
