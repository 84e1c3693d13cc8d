import copy
import json
import re
import time
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from reason3.llm import PROVIDER_GROQ, PROVIDERS, Message, ModelTransport, build_transport
from reason3.logger import get_logger
from reason3.models import REPORT_MODELS, AnalysisOutcome, AnalysisRequest, MediaType
from reason3.prompts import PROMPT_BUILDERS, PROMPT_VERSION

logger = get_logger(__name__)

FLAVOR_CLAIMS = "claims"
FLAVOR_ACCESSIBILITY = "accessibility"
FLAVORS = (FLAVOR_CLAIMS, FLAVOR_ACCESSIBILITY)

# Low temperature for strict reasoning
ANALYSIS_TEMPERATURE = 0.1
IMAGE_PLACEHOLDER = "Analyze this image"

# A markdown fence wrapping the whole reply; fences inside JSON strings are left alone
_OUTER_FENCE_RE = re.compile(r"\s*```(?:json)?\s*(.*?)\s*```\s*", re.DOTALL)

_FALLBACKS: Dict[str, Dict[str, Any]] = {
    FLAVOR_CLAIMS: {
        "analysis_target": "Analysis Failed (Fallback Mode)",
        "claims": [
            {
                "claim_id": "ERR-1",
                "claim_text": "The system could not complete the live analysis.",
                "claim_type": "factual",
                "verdict": "Insufficient Information",
                "confidence_score": 0,
                "logical_issues": ["API Error"],
                "statistical_issues": [],
                "explanation": "An error occurred while connecting to the engine. "
                               "High traffic or network issues may be the cause.",
                "what_would_make_this_true": "Check your network connection and API key limits.",
                "evidence_present": False,
            }
        ],
        "overall_risk_score": 0,
        "summary_insight": "Analysis Temporarily Unavailable",
    },
    FLAVOR_ACCESSIBILITY: {
        "analysis_target": "Analysis Failed (Fallback Mode)",
        "issues": [
            {
                "id": "ERR-1",
                "title": "Live audit unavailable",
                "description": "The system could not complete the live analysis.",
                "severity": "LOW",
                "persona": "VISUAL",
                "element": None,
                "location": None,
                "code_snippet": None,
                "suggested_fix": "Check your network connection and API key limits.",
                "explanation": "An error occurred while connecting to the engine. "
                               "High traffic or network issues may be the cause.",
            }
        ],
        "score": 0,
        "summary": "Analysis Temporarily Unavailable",
    },
}


def fallback_response(flavor: str = FLAVOR_CLAIMS) -> Dict[str, Any]:
    """Fresh copy of the fixed payload returned whenever a live result is unavailable."""
    return copy.deepcopy(_FALLBACKS[flavor])


def build_messages(flavor: str, request: AnalysisRequest) -> List[Message]:
    """Single user turn: the instruction text, plus the inline image when there is one."""
    prompt = PROMPT_BUILDERS[flavor](request.content)
    if request.has_image:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": request.image_data}},
                ],
            }
        ]
    return [{"role": "user", "content": prompt}]


def parse_report(flavor: str, raw: str) -> Optional[Dict[str, Any]]:
    """Return the reply as a dict if it matches the flavour's schema, else None.

    The returned dict is the decoded JSON itself, not the validated model, so
    the caller sees exactly what the model sent.
    """
    clean = (raw or "").strip()
    fenced = _OUTER_FENCE_RE.fullmatch(clean)
    if fenced:
        clean = fenced.group(1)
    try:
        data = json.loads(clean)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        REPORT_MODELS[flavor].model_validate(data)
    except (ValueError, ValidationError) as exc:
        # json.JSONDecodeError is a ValueError
        logger.error("Analysis parse failure | flavor=%s error=%s", flavor, exc)
        logger.error("Raw model response was: %s", raw)
        return None
    return data


class ContentAnalysisClient:
    """Sends user content to the hosted model and always hands back a usable report.

    ``analyze`` never raises: a missing key, a transport error and an
    unparseable reply all resolve to ``fallback_response(flavor)``. Use
    ``analyze_with_status`` to learn which of those happened.
    """

    def __init__(
        self,
        api_key: Optional[str],
        flavor: str = FLAVOR_CLAIMS,
        provider: str = PROVIDER_GROQ,
        config: Optional[Dict[str, Any]] = None,
        transport: Optional[ModelTransport] = None,
    ):
        if flavor not in FLAVORS:
            raise ValueError(f"Unknown analysis flavor: {flavor}")
        if transport is None and provider not in PROVIDERS:
            raise ValueError(f"Invalid provider: {provider}")
        self.api_key = api_key or ""
        self.flavor = flavor
        self.provider = provider
        self.config = dict(config or {})
        self._transport = transport

    @property
    def demo_mode(self) -> bool:
        return not self.api_key

    def _get_transport(self) -> ModelTransport:
        if self._transport is None:
            self._transport = build_transport(self.provider, self.api_key, self.config)
        return self._transport

    def build_request(
        self,
        content: Optional[str],
        media_type: Union[MediaType, str] = MediaType.TEXT,
        image_data: Optional[str] = None,
    ) -> AnalysisRequest:
        try:
            media = MediaType(media_type)
        except ValueError:
            logger.warning("Unknown media type %r, sending as text", media_type)
            media = MediaType.TEXT

        wants_image = media == MediaType.IMAGE
        if wants_image and not image_data:
            logger.warning("Image analysis requested without image data, sending as text")
            media = MediaType.TEXT
        if media == MediaType.TEXT:
            image_data = None

        text = content or ""
        if not text.strip() and wants_image:
            text = IMAGE_PLACEHOLDER
        return AnalysisRequest(content=text, media_type=media, image_data=image_data)

    async def analyze_with_status(
        self,
        content: Optional[str],
        media_type: Union[MediaType, str] = MediaType.TEXT,
        image_data: Optional[str] = None,
    ) -> AnalysisOutcome:
        if self.demo_mode:
            logger.warning("No API key configured. Defaulting to demo mode | flavor=%s", self.flavor)
            return AnalysisOutcome(response=fallback_response(self.flavor), status="demo")

        start = time.perf_counter()
        try:
            request = self.build_request(content, media_type, image_data)
            messages = build_messages(self.flavor, request)
            logger.info(
                "Analysis start | flavor=%s provider=%s media=%s content_len=%d prompt=%s",
                self.flavor, self.provider, request.media_type.value, len(request.content), PROMPT_VERSION,
            )
            raw = await self._get_transport().complete(
                messages, temperature=ANALYSIS_TEMPERATURE, json_mode=True,
            )
        except Exception as exc:
            logger.error(
                "Analysis FAILED | flavor=%s provider=%s elapsed=%.2fs error=%s",
                self.flavor, self.provider, time.perf_counter() - start, exc, exc_info=True,
            )
            return AnalysisOutcome(response=fallback_response(self.flavor), status="transport_error")

        logger.debug("Raw model response: %s", raw)
        report = parse_report(self.flavor, raw)
        if report is None:
            return AnalysisOutcome(response=fallback_response(self.flavor), status="shape_error")

        findings_key = "claims" if self.flavor == FLAVOR_CLAIMS else "issues"
        logger.info(
            "Analysis done  | flavor=%s findings=%d elapsed=%.2fs",
            self.flavor, len(report[findings_key]), time.perf_counter() - start,
        )
        return AnalysisOutcome(response=report, status="ok")

    async def analyze(
        self,
        content: Optional[str],
        media_type: Union[MediaType, str] = MediaType.TEXT,
        image_data: Optional[str] = None,
    ) -> Dict[str, Any]:
        outcome = await self.analyze_with_status(content, media_type, image_data)
        return outcome.response
