"""
Prometheus metrics for order preparation.

Disabled metrics are no-ops, so components can always call them.
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, REGISTRY, start_http_server

logger = logging.getLogger(__name__)


class Metrics:
    """
    Prometheus metrics collector.

    Tracks:
    - Orders signed (single / bulk)
    - Signature verifications by result
    - Approval transactions sent
    - Orders rejected during preparation
    - Batch preparation latency
    """

    def __init__(
        self,
        enabled: bool = True,
        port: Optional[int] = None,
        registry: Optional[CollectorRegistry] = None
    ):
        """
        Initialize metrics.

        Args:
            enabled: Enable metrics collection
            port: Start an HTTP exporter on this port (none if omitted)
            registry: Collector registry (process default if omitted)
        """
        self.enabled = enabled

        if not self.enabled:
            return

        registry = registry if registry is not None else REGISTRY

        self.orders_signed = Counter(
            'flow_orders_signed_total',
            'Orders signed',
            ['mode'],
            registry=registry
        )

        self.verifications = Counter(
            'flow_signature_verifications_total',
            'Signature verifications',
            ['mode', 'result'],
            registry=registry
        )

        self.approvals_sent = Counter(
            'flow_approvals_sent_total',
            'Approval transactions sent',
            ['side'],
            registry=registry
        )

        self.orders_rejected = Counter(
            'flow_orders_rejected_total',
            'Orders dropped during preparation',
            ['reason'],
            registry=registry
        )

        self.batch_latency = Histogram(
            'flow_batch_prepare_seconds',
            'Batch preparation latency',
            registry=registry
        )

        if port is not None:
            try:
                start_http_server(port, registry=registry)
                logger.info(f"Metrics server started on port {port}")
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")

    def track_signed(self, mode: str, count: int = 1) -> None:
        """Record signed orders (mode: single or bulk)."""
        if self.enabled:
            self.orders_signed.labels(mode=mode).inc(count)

    def track_verification(self, mode: str, valid: bool) -> None:
        if self.enabled:
            self.verifications.labels(mode=mode, result="valid" if valid else "invalid").inc()

    def track_approvals(self, side: str, count: int) -> None:
        if self.enabled and count:
            self.approvals_sent.labels(side=side).inc(count)

    def track_rejected(self, reason: str) -> None:
        """Record a dropped order (reason: exception class name)."""
        if self.enabled:
            self.orders_rejected.labels(reason=reason).inc()

    def track_batch_latency(self, duration: float) -> None:
        if self.enabled:
            self.batch_latency.observe(duration)


# Global metrics instance
_metrics: Optional[Metrics] = None


def get_metrics(enabled: bool = True, port: Optional[int] = None) -> Metrics:
    """
    Get or create the process-wide metrics instance.

    A cached disabled instance is replaced once metrics are requested
    enabled. Requesting disabled metrics while an enabled instance is
    cached returns a separate no-op instance and keeps the cache.
    """
    global _metrics
    if _metrics is None or (enabled and not _metrics.enabled):
        _metrics = Metrics(enabled=enabled, port=port)
    elif not enabled and _metrics.enabled:
        return Metrics(enabled=False)
    return _metrics
