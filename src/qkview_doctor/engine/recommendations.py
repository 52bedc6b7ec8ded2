"""Recommendation Engine - Prioritized actions from the analysis facets.

This module:
1. Turns each SSL finding into a recommendation.
2. Turns frequently recurring errors (10+ occurrences) into recommendations.
3. Adds fixed recommendations for summary thresholds.
4. Orders by priority (stable), deduplicates on (title, priority) and keeps
   the first 10.
"""

from qkview_doctor.model.report import (
    DISPLAY_FORMAT,
    Recommendation,
    SSLFinding,
    Summary,
    TopError,
)

MAX_RECOMMENDATIONS = 10

# Unknown priorities (e.g. an SSL "warning") rank with critical.
PRIORITY_RANK = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
}

SSL_TITLES = {
    "certificate": "SSL Certificate Issue",
    "cipher": "SSL/TLS Configuration Issue",
    "configuration": "SSL Configuration Issue",
}

RECURRING_ERROR_MIN_COUNT = 10
CRITICAL_EVENTS_THRESHOLD = 10


def priority_rank(priority: str) -> int:
    return PRIORITY_RANK.get(priority, 0)


def sort_by_priority(recommendations: list[Recommendation]) -> list[Recommendation]:
    """Order by priority rank, keeping generation order within a rank."""
    return sorted(recommendations, key=lambda r: priority_rank(r.priority))


def deduplicate_recommendations(recommendations: list[Recommendation]) -> list[Recommendation]:
    """Drop repeats of (title, priority); the first occurrence wins."""
    seen: set[str] = set()
    result: list[Recommendation] = []
    for rec in recommendations:
        key = rec.title + rec.priority
        if key in seen:
            continue
        seen.add(key)
        result.append(rec)
    return result


class RecommendationEngine:
    """Builds the prioritized recommendation list."""

    def generate(
        self,
        summary: Summary,
        ssl_findings: list[SSLFinding],
        top_errors: list[TopError],
    ) -> list[Recommendation]:
        recommendations: list[Recommendation] = []

        for finding in ssl_findings:
            rec = self.ssl_recommendation(finding)
            if rec is not None:
                recommendations.append(rec)

        for error in top_errors:
            rec = self.error_recommendation(error)
            if rec is not None:
                recommendations.append(rec)

        if summary.critical > CRITICAL_EVENTS_THRESHOLD:
            recommendations.append(
                Recommendation(
                    priority="critical",
                    title="High number of critical events",
                    description=(
                        f"{summary.critical} critical events detected. "
                        "Immediate investigation required."
                    ),
                    impact="System stability and security may be compromised",
                )
            )

        if summary.certs_expiring_soon > 0:
            recommendations.append(
                Recommendation(
                    priority="critical",
                    title="Certificate renewal required",
                    description=(
                        f"{summary.certs_expiring_soon} certificate(s) expiring soon. "
                        "Plan renewal immediately."
                    ),
                    impact="Service interruption for HTTPS traffic",
                )
            )

        recommendations = deduplicate_recommendations(sort_by_priority(recommendations))
        return recommendations[:MAX_RECOMMENDATIONS]

    def ssl_recommendation(self, finding: SSLFinding) -> Recommendation | None:
        title = SSL_TITLES.get(finding.type)
        if title is None:
            return None

        if finding.type == "configuration":
            description = finding.message
        else:
            description = f"{finding.message}. {finding.detail}"

        return Recommendation(
            priority=finding.severity,
            title=title,
            description=description,
            impact=self._format_affected_vs(finding.affected_vs),
        )

    def error_recommendation(self, error: TopError) -> Recommendation | None:
        if error.count < RECURRING_ERROR_MIN_COUNT:
            return None

        if error.count > 500:
            priority = "critical"
        elif error.count > 100:
            priority = "high"
        else:
            priority = "medium"

        return Recommendation(
            priority=priority,
            title="Investigate recurring error",
            description=f"Error occurred {error.count} times: {error.message}",
            impact=f"Last occurred: {error.last_occurred.strftime(DISPLAY_FORMAT)}",
        )

    @staticmethod
    def _format_affected_vs(affected: tuple[str, ...]) -> str:
        if not affected:
            return "Virtual servers affected: unknown"
        return "Affected: " + ", ".join(affected)
