"""Shared fixtures: a fake model transport and canned model replies.

The fake stands in for the hosted model so every test runs offline and
deterministically.
"""

import json
import os
import tempfile
from typing import Any, Dict, List, Optional

import pytest

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("REASON3_LOG_DIR", tempfile.mkdtemp(prefix="reason3-logs-"))


class FakeTransport:
    """Records every call and answers with a canned reply or raises."""

    name = "fake"

    def __init__(self, reply: str = "", error: Optional[BaseException] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, *, temperature, json_mode):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "temperature": temperature,
            "json_mode": json_mode,
        })
        if self.error is not None:
            raise self.error
        return self.reply


def make_claim_report(count: int = 3) -> Dict[str, Any]:
    verdicts = ["Well-Supported", "Partially Supported", "Misleading", "Insufficient Information"]
    return {
        "analysis_target": "Coffee and longevity article",
        "claims": [
            {
                "claim_id": f"C{i + 1}",
                "claim_text": f"Claim number {i + 1}",
                "claim_type": "statistical",
                "verdict": verdicts[i % len(verdicts)],
                "confidence_score": 70 + i,
                "logical_issues": ["correlation vs causation"],
                "statistical_issues": [],
                "explanation": "Observational data only.",
                "what_would_make_this_true": "A randomized trial.",
                "evidence_present": True,
            }
            for i in range(count)
        ],
        "overall_risk_score": 62,
        "summary_insight": "The article overstates causal links.",
    }


def make_accessibility_report() -> Dict[str, Any]:
    return {
        "analysis_target": "https://example.com",
        "issues": [
            {
                "id": "A1",
                "title": "Image missing alt text",
                "description": "The hero image has no alt attribute.",
                "severity": "CRITICAL",
                "persona": "VISUAL",
                "element": "img.hero",
                "location": {"x": 50, "y": 10},
                "code_snippet": "<img src=\"hero.png\">",
                "suggested_fix": "<img src=\"hero.png\" alt=\"Team photo\">",
                "explanation": "Screen readers announce only the file name.",
            },
            {
                "id": "A2",
                "title": "Low contrast link",
                "description": "Footer links fail 4.5:1.",
                "severity": "MEDIUM",
                "persona": "COLOR",
            },
        ],
        "score": 75,
        "summary": "One critical screen-reader barrier and a contrast problem.",
    }


@pytest.fixture
def claim_report() -> Dict[str, Any]:
    return make_claim_report(3)


@pytest.fixture
def accessibility_report() -> Dict[str, Any]:
    return make_accessibility_report()


@pytest.fixture
def claim_reply(claim_report) -> str:
    return json.dumps(claim_report)
