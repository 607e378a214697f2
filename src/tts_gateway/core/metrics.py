"""
Prometheus Metrics for the Gateway.

Metrics Exposed:
    tts_gateway_requests_total              - Requests by endpoint and status code
    tts_gateway_request_duration_seconds    - Histogram of request latency by endpoint
    tts_gateway_rate_limited_total          - Rate-limit rejections by limiter
    tts_gateway_auth_rejections_total       - Credential rejections by reason
    tts_gateway_audio_bytes_total           - Audio bytes relayed from the upstream engine
    tts_gateway_upstream_failures_total     - Connector failures by connector name
    tts_gateway_tracked_identifiers         - Identifiers currently tracked per limiter

Usage:
    from tts_gateway.core.metrics import metrics

    metrics.record_request("/api/text-to-speech", 200, duration=0.41)
    metrics.record_rate_limited("tts")
    metrics.record_auth_rejection("credential_mismatch")

    content, content_type = metrics.get_metrics_response()

Prometheus Scrape Config Example:
    scrape_configs:
      - job_name: 'tts-gateway'
        static_configs:
          - targets: ['localhost:8000']
        metrics_path: '/metrics'
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class GatewayMetrics:
    """
    Gateway metric collection.

    Each instance owns its own CollectorRegistry, so tests can build a
    fresh collector without clashing with the process-wide one.

    Example:
        >>> m = GatewayMetrics()
        >>> m.record_request("/api/voices", 200, 0.02)
        >>> content, _ = m.get_metrics_response()
    """

    def __init__(self) -> None:
        self._registry = CollectorRegistry()

        self._requests_total = Counter(
            "tts_gateway_requests_total",
            "Total gateway requests",
            ["endpoint", "status"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "tts_gateway_request_duration_seconds",
            "Gateway request duration in seconds",
            ["endpoint"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self._registry,
        )
        self._rate_limited_total = Counter(
            "tts_gateway_rate_limited_total",
            "Requests rejected by a rate limiter",
            ["limiter"],
            registry=self._registry,
        )
        self._auth_rejections_total = Counter(
            "tts_gateway_auth_rejections_total",
            "Requests rejected by credential verification",
            ["reason"],
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "tts_gateway_audio_bytes_total",
            "Total audio bytes relayed",
            registry=self._registry,
        )
        self._upstream_failures_total = Counter(
            "tts_gateway_upstream_failures_total",
            "Upstream synthesis failures",
            ["connector"],
            registry=self._registry,
        )
        self._tracked_identifiers = Gauge(
            "tts_gateway_tracked_identifiers",
            "Identifiers currently tracked by a rate limiter",
            ["limiter"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_request(self, endpoint: str, status: int, duration: float) -> None:
        """
        Record a finished HTTP exchange.

        Args:
            endpoint: Route path (e.g., "/api/ssml")
            status: HTTP status code returned
            duration: Wall time in seconds
        """
        self._requests_total.labels(endpoint=endpoint, status=str(status)).inc()
        self._request_duration.labels(endpoint=endpoint).observe(duration)

    def record_rate_limited(self, limiter: str) -> None:
        self._rate_limited_total.labels(limiter=limiter).inc()

    def record_auth_rejection(self, reason: str) -> None:
        self._auth_rejections_total.labels(reason=reason).inc()

    def record_audio(self, num_bytes: int) -> None:
        if num_bytes > 0:
            self._audio_bytes_total.inc(num_bytes)

    def record_upstream_failure(self, connector: str) -> None:
        self._upstream_failures_total.labels(connector=connector).inc()

    def set_tracked_identifiers(self, limiter: str, count: int) -> None:
        """Set the number of identifiers a limiter currently holds."""
        self._tracked_identifiers.labels(limiter=limiter).set(count)

    def get_metrics_response(self) -> tuple[bytes, str]:
        """
        Get metrics in Prometheus text format.

        Returns:
            Tuple of (content_bytes, content_type)
        """
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Process-wide collector: from tts_gateway.core.metrics import metrics
metrics = GatewayMetrics()
