from typing import Any, Dict, Iterable, Mapping

SEVERITY_ORDER = ("CRITICAL", "HIGH", "MEDIUM", "LOW")

# LOW issues are reported but do not cost points
SEVERITY_WEIGHTS = {"CRITICAL": 15, "HIGH": 10, "MEDIUM": 5, "LOW": 0}


def severity_breakdown(issues: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """Count issues per severity, always returning all four keys in order."""
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    for issue in issues:
        severity = str(issue.get("severity", "")).upper()
        if severity in counts:
            counts[severity] += 1
    return counts


def accessibility_score(issues: Iterable[Mapping[str, Any]]) -> int:
    """100 minus a weighted penalty per issue, floored at 0."""
    counts = severity_breakdown(issues)
    penalty = sum(SEVERITY_WEIGHTS[severity] * count for severity, count in counts.items())
    return max(0, 100 - penalty)


def score_band(score: int) -> str:
    if score > 80:
        return "good"
    if score > 50:
        return "fair"
    return "poor"


def risk_band(risk_score: int) -> str:
    return "high" if risk_score > 50 else "low"


def displayed_accessibility_score(result: Mapping[str, Any], status: str) -> int:
    """Score to show for an accessibility report.

    Live results are scored locally from their issues; a fallback keeps its own
    ``score`` (0) since its placeholder issue says nothing about the page.
    """
    if status != "ok":
        return int(result.get("score", 0))
    return accessibility_score(result.get("issues", []))
