"""Tests for Prometheus metrics."""
from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST


def _sample(m, name, labels=None):
    return m.registry.get_sample_value(name, labels or {})


class TestGatewayMetrics:
    """Test metric recording on an isolated collector."""

    def test_record_request(self):
        from tts_gateway.core.metrics import GatewayMetrics

        m = GatewayMetrics()
        m.record_request("/api/voices", 200, 0.02)
        m.record_request("/api/voices", 200, 0.03)
        m.record_request("/api/voices", 429, 0.001)
        assert _sample(m, "tts_gateway_requests_total", {"endpoint": "/api/voices", "status": "200"}) == 2
        assert _sample(m, "tts_gateway_requests_total", {"endpoint": "/api/voices", "status": "429"}) == 1
        assert _sample(m, "tts_gateway_request_duration_seconds_count", {"endpoint": "/api/voices"}) == 3

    def test_admission_counters(self):
        from tts_gateway.core.metrics import GatewayMetrics

        m = GatewayMetrics()
        m.record_rate_limited("tts")
        m.record_auth_rejection("credential_mismatch")
        m.set_tracked_identifiers("tts", 4)
        assert _sample(m, "tts_gateway_rate_limited_total", {"limiter": "tts"}) == 1
        assert _sample(m, "tts_gateway_auth_rejections_total", {"reason": "credential_mismatch"}) == 1
        assert _sample(m, "tts_gateway_tracked_identifiers", {"limiter": "tts"}) == 4

    def test_audio_and_upstream(self):
        from tts_gateway.core.metrics import GatewayMetrics

        m = GatewayMetrics()
        m.record_audio(1000)
        m.record_audio(0)
        m.record_upstream_failure("azure")
        assert _sample(m, "tts_gateway_audio_bytes_total") == 1000
        assert _sample(m, "tts_gateway_upstream_failures_total", {"connector": "azure"}) == 1

    def test_metrics_response(self):
        from tts_gateway.core.metrics import GatewayMetrics

        m = GatewayMetrics()
        m.record_request("/api/ssml", 200, 0.5)
        content, content_type = m.get_metrics_response()
        assert content_type == CONTENT_TYPE_LATEST
        assert b"tts_gateway_requests_total" in content

    def test_global_instance(self):
        from tts_gateway.core.metrics import GatewayMetrics, metrics

        assert isinstance(metrics, GatewayMetrics)
