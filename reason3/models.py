from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

Verdict = Literal["Well-Supported", "Partially Supported", "Misleading", "Insufficient Information"]
ClaimType = Literal["factual", "statistical", "causal", "predictive"]
Severity = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW"]
Persona = Literal["VISUAL", "MOTOR", "COLOR"]
AnalysisStatus = Literal["ok", "demo", "transport_error", "shape_error"]


class MediaType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class AnalysisRequest(BaseModel):
    """What the UI hands to the client for one analysis."""

    content: str = ""
    media_type: MediaType = MediaType.TEXT
    image_data: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return self.media_type == MediaType.IMAGE and bool(self.image_data)


# ---------------------------------------------------------------------------
# Claim-verification flavour
# ---------------------------------------------------------------------------

class ClaimFinding(BaseModel):
    claim_id: str
    claim_text: str
    claim_type: ClaimType = "factual"
    verdict: Verdict
    confidence_score: int = Field(ge=0, le=100)
    logical_issues: List[str] = Field(default_factory=list)
    statistical_issues: List[str] = Field(default_factory=list)
    explanation: str
    what_would_make_this_true: str = ""
    evidence_present: bool = False


class ClaimReport(BaseModel):
    analysis_target: str
    claims: List[ClaimFinding]
    overall_risk_score: int = Field(ge=0, le=100)
    summary_insight: str

    @model_validator(mode="after")
    def _unique_claim_ids(self) -> "ClaimReport":
        ids = [claim.claim_id for claim in self.claims]
        if len(ids) != len(set(ids)):
            raise ValueError("claim ids must be unique")
        return self


# ---------------------------------------------------------------------------
# Accessibility-audit flavour
# ---------------------------------------------------------------------------

class IssueLocation(BaseModel):
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)


class AccessibilityIssue(BaseModel):
    id: str
    title: str
    description: str
    severity: Severity
    persona: Persona
    element: Optional[str] = None
    location: Optional[IssueLocation] = None
    code_snippet: Optional[str] = None
    suggested_fix: Optional[str] = None
    explanation: Optional[str] = None


class AccessibilityReport(BaseModel):
    analysis_target: str
    issues: List[AccessibilityIssue]
    score: int = Field(ge=0, le=100)
    summary: str

    @model_validator(mode="after")
    def _unique_issue_ids(self) -> "AccessibilityReport":
        ids = [issue.id for issue in self.issues]
        if len(ids) != len(set(ids)):
            raise ValueError("issue ids must be unique")
        return self


REPORT_MODELS = {
    "claims": ClaimReport,
    "accessibility": AccessibilityReport,
}


class AnalysisOutcome(BaseModel):
    """Response payload plus how it was produced.

    ``response`` is exactly what ``analyze`` returns; ``status`` tells a live
    result apart from a fallback substitution.
    """

    response: Dict[str, Any]
    status: AnalysisStatus

    @property
    def is_fallback(self) -> bool:
        return self.status != "ok"
