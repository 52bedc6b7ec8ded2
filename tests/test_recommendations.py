"""Tests for the recommendation engine."""

from datetime import datetime

from qkview_doctor.engine.recommendations import (
    RecommendationEngine,
    deduplicate_recommendations,
    priority_rank,
    sort_by_priority,
)
from qkview_doctor.model.report import Recommendation, SSLFinding, Summary, TopError

TS = datetime(2024, 10, 1, 12, 30, 0)


def _error(count: int, message: str = "pool down") -> TopError:
    return TopError(message=message, count=count, last_occurred=TS)


class TestThresholds:
    """Fixed and count-based recommendations."""

    def test_many_critical_events(self):
        recs = RecommendationEngine().generate(Summary(critical=15), [], [])

        assert len(recs) == 1
        assert recs[0].priority == "critical"
        assert recs[0].title == "High number of critical events"
        assert recs[0].description == "15 critical events detected. Immediate investigation required."

    def test_critical_threshold_is_exclusive(self):
        assert RecommendationEngine().generate(Summary(critical=10), [], []) == []

    def test_certificate_renewal(self):
        recs = RecommendationEngine().generate(Summary(certs_expiring_soon=2), [], [])

        assert recs[0].title == "Certificate renewal required"
        assert recs[0].description.startswith("2 certificate(s) expiring soon.")
        assert recs[0].impact == "Service interruption for HTTPS traffic"

    def test_recurring_error_priorities(self):
        engine = RecommendationEngine()

        assert engine.error_recommendation(_error(600)).priority == "critical"
        assert engine.error_recommendation(_error(500)).priority == "high"
        assert engine.error_recommendation(_error(101)).priority == "high"
        assert engine.error_recommendation(_error(100)).priority == "medium"
        assert engine.error_recommendation(_error(50)).priority == "medium"
        assert engine.error_recommendation(_error(10)).priority == "medium"
        assert engine.error_recommendation(_error(9)) is None

    def test_recurring_error_text(self):
        rec = RecommendationEngine().error_recommendation(_error(600, "conn refused"))

        assert rec.title == "Investigate recurring error"
        assert rec.description == "Error occurred 600 times: conn refused"
        assert rec.impact == "Last occurred: 2024-10-01 12:30:00"


class TestSSLRecommendations:
    """One recommendation per SSL finding."""

    def test_certificate(self):
        finding = SSLFinding("critical", "certificate", "Certificate expiration detected", "line", ("vs_a", "vs_b"))

        rec = RecommendationEngine().ssl_recommendation(finding)

        assert rec.priority == "critical"
        assert rec.title == "SSL Certificate Issue"
        assert rec.description == "Certificate expiration detected. line"
        assert rec.impact == "Affected: vs_a, vs_b"

    def test_cipher_without_virtual_servers(self):
        finding = SSLFinding("warning", "cipher", "TLS 1.1 protocol in use", "detail")

        rec = RecommendationEngine().ssl_recommendation(finding)

        assert rec.title == "SSL/TLS Configuration Issue"
        assert rec.priority == "warning"
        assert rec.impact == "Virtual servers affected: unknown"

    def test_configuration_uses_message_only(self):
        finding = SSLFinding("warning", "configuration", "SSL handshake failure detected", "raw line")

        rec = RecommendationEngine().ssl_recommendation(finding)

        assert rec.title == "SSL Configuration Issue"
        assert rec.description == "SSL handshake failure detected"

    def test_unknown_type(self):
        assert RecommendationEngine().ssl_recommendation(SSLFinding("warning", "other", "x")) is None


class TestOrdering:
    """Priority order, stability, deduplication and the cap."""

    def test_priority_rank(self):
        assert [priority_rank(p) for p in ("critical", "high", "medium", "low")] == [0, 1, 2, 3]
        assert priority_rank("warning") == 0

    def test_sort_is_stable(self):
        recs = [
            Recommendation("medium", "m1", "", ""),
            Recommendation("critical", "c1", "", ""),
            Recommendation("medium", "m2", "", ""),
            Recommendation("high", "h1", "", ""),
            Recommendation("critical", "c2", "", ""),
        ]

        assert [r.title for r in sort_by_priority(recs)] == ["c1", "c2", "h1", "m1", "m2"]

    def test_dedup_first_wins(self):
        recs = [
            Recommendation("critical", "Same", "first", ""),
            Recommendation("critical", "Same", "second", ""),
            Recommendation("high", "Same", "other priority", ""),
        ]

        result = deduplicate_recommendations(recs)

        assert [r.description for r in result] == ["first", "other priority"]
        assert deduplicate_recommendations(result) == result

    def test_generate_orders_and_caps(self):
        findings = [
            SSLFinding("critical", "certificate", "Certificate expiration detected", "d"),
            SSLFinding("critical", "cipher", "Weak cipher suite detected", "Cipher contains: RC4"),
        ]
        errors = [_error(50, f"e{i}") for i in range(8)] + [_error(600, "big")]

        recs = RecommendationEngine().generate(Summary(critical=15, certs_expiring_soon=1), findings, errors)

        assert len(recs) <= 10
        ranks = [priority_rank(r.priority) for r in recs]
        assert ranks == sorted(ranks)
        titles = [r.title for r in recs]
        assert titles[:2] == ["SSL Certificate Issue", "SSL/TLS Configuration Issue"]
        assert "High number of critical events" in titles
        assert "Certificate renewal required" in titles
        # Medium recurring errors share (title, priority), so only the first survives.
        assert titles.count("Investigate recurring error") == 2

    def test_generate_empty(self):
        assert RecommendationEngine().generate(Summary(), [], []) == []
