"""Tests for the weighted-subtraction accessibility score."""

from reason3.client import fallback_response
from reason3.scoring import (
    accessibility_score,
    displayed_accessibility_score,
    risk_band,
    score_band,
    severity_breakdown,
)


def issues(*severities):
    return [{"id": f"A{i}", "severity": s} for i, s in enumerate(severities)]


class TestAccessibilityScore:

    def test_no_issues_is_perfect(self):
        assert accessibility_score([]) == 100

    def test_weights_per_severity(self):
        assert accessibility_score(issues("CRITICAL")) == 85
        assert accessibility_score(issues("HIGH")) == 90
        assert accessibility_score(issues("MEDIUM")) == 95

    def test_low_issues_cost_nothing(self):
        assert accessibility_score(issues("LOW", "LOW", "LOW")) == 100

    def test_mixed_penalties_add_up(self):
        # 2*15 + 1*10 + 3*5 = 55
        assert accessibility_score(issues("CRITICAL", "CRITICAL", "HIGH", "MEDIUM", "MEDIUM", "MEDIUM", "LOW")) == 45

    def test_floor_at_zero(self):
        assert accessibility_score(issues(*["CRITICAL"] * 10)) == 0

    def test_unknown_severity_ignored(self):
        assert accessibility_score(issues("BLOCKER")) == 100


class TestBreakdown:

    def test_all_keys_present_in_order(self):
        counts = severity_breakdown(issues("HIGH", "high", "LOW"))

        assert list(counts) == ["CRITICAL", "HIGH", "MEDIUM", "LOW"]
        assert counts == {"CRITICAL": 0, "HIGH": 2, "MEDIUM": 0, "LOW": 1}


class TestBands:

    def test_score_bands(self):
        assert score_band(100) == "good"
        assert score_band(81) == "good"
        assert score_band(80) == "fair"
        assert score_band(51) == "fair"
        assert score_band(50) == "poor"

    def test_risk_bands(self):
        assert risk_band(51) == "high"
        assert risk_band(50) == "low"


class TestDisplayedScore:

    def test_fallback_shows_its_own_zero_score(self):
        fallback = fallback_response("accessibility")

        for status in ("demo", "transport_error", "shape_error"):
            assert displayed_accessibility_score(fallback, status) == 0
        assert score_band(displayed_accessibility_score(fallback, "demo")) == "poor"

    def test_live_result_is_scored_from_issues(self):
        report = {"score": 99, "issues": issues("CRITICAL", "MEDIUM")}

        assert displayed_accessibility_score(report, "ok") == 80
