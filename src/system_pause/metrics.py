"""Prometheus instrumentation for broadcast and registry activity."""

from __future__ import annotations

import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest, start_http_server

logger = logging.getLogger(__name__)


class PauseMetrics:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.broadcasts = Counter(
            "system_pause_broadcasts_total",
            "Committed broadcast operations",
            labelnames=("operation",),
            registry=self.registry,
        )
        self.target_failures = Counter(
            "system_pause_target_failures_total",
            "Per-target failures contained during pause or unpause broadcasts",
            labelnames=("operation",),
            registry=self.registry,
        )
        self.registered_targets = Gauge(
            "system_pause_registered_targets",
            "Number of resources currently registered with the controller",
            registry=self.registry,
        )

    def record_broadcast(self, operation: str, failures: int = 0) -> None:
        self.broadcasts.labels(operation).inc()
        if failures:
            self.target_failures.labels(operation).inc(failures)

    def set_registered_targets(self, count: int) -> None:
        self.registered_targets.set(count)

    def value(self, name: str, **labels: str) -> float:
        sample = self.registry.get_sample_value(name, labels or None)
        return sample or 0.0

    def render(self) -> bytes:
        return generate_latest(self.registry)

    def serve(self, port: int) -> None:
        start_http_server(port, registry=self.registry)
        logger.info("Prometheus exporter listening", extra={"event": "metrics_start", "data": {"port": port}})


__all__ = ["PauseMetrics"]
