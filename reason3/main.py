import sys
import os
import asyncio
import time
from typing import Any, Dict, List

import streamlit as st

# Add the project root to sys.path so `streamlit run reason3/main.py` can import the package
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from reason3.chat import AnalysisChat
from reason3.client import FLAVOR_ACCESSIBILITY, FLAVOR_CLAIMS, ContentAnalysisClient
from reason3.config import load_config, missing_settings
from reason3.images import image_to_data_url
from reason3.llm import PROVIDERS, build_transport
from reason3.logger import get_logger
from reason3.models import MediaType
from reason3.scoring import displayed_accessibility_score, risk_band, score_band, severity_breakdown

logger = get_logger(__name__)

# ==========================================
# STREAMLIT FRONTEND
# ==========================================
st.set_page_config(page_title="Reason3", layout="wide", page_icon="🔎")

st.markdown("""
<style>
    .block-container {
        padding-top: 1.5rem !important;
    }
    h1 {
        font-weight: 700;
        font-size: 2.2rem;
        margin-bottom: 0.5rem;
    }
</style>
""", unsafe_allow_html=True)

if "analysis_result" not in st.session_state:
    st.session_state.analysis_result = None
if "analysis_status" not in st.session_state:
    st.session_state.analysis_status = None
if "chat_log" not in st.session_state:
    st.session_state.chat_log = []

FLAVOR_LABELS = {
    "Claim Verification": FLAVOR_CLAIMS,
    "Accessibility Audit": FLAVOR_ACCESSIBILITY,
}
VERDICT_ICONS = {
    "Well-Supported": "✅",
    "Partially Supported": "⚠️",
    "Misleading": "❌",
    "Insufficient Information": "❓",
}
BAND_COLORS = {"good": "#22c55e", "fair": "#eab308", "poor": "#ef4444"}

# SIDEBAR CONFIGURATION
with st.sidebar:
    st.header("Configuration")
    provider = st.radio("Select AI Provider", list(PROVIDERS), index=0)
    flavor_label = st.radio("Analysis Type", list(FLAVOR_LABELS), index=0)
    flavor = FLAVOR_LABELS[flavor_label]

    api_key, config = load_config(provider)
    missing = missing_settings(provider, config)
    if missing:
        st.warning(f"Missing config: {', '.join(missing)}. Running in demo mode.")
    else:
        st.success("Configuration Loaded")

if "chat" not in st.session_state or st.session_state.get("chat_provider") != provider:
    st.session_state.chat = AnalysisChat(build_transport(provider, api_key, config) if api_key else None)
    st.session_state.chat_provider = provider
    st.session_state.chat_log = []

st.title("Reason3")
if flavor == FLAVOR_CLAIMS:
    st.caption("Paste a claim, article or chart and get verdicts with explanations.")
else:
    st.caption("Paste HTML or a URL and/or upload a screenshot to audit accessibility for three personas.")

content_input = st.text_area(
    "Paste text or HTML to analyze:" if flavor == FLAVOR_ACCESSIBILITY else "Paste claim or text to analyze:",
    height=180,
    key="content_input",
)
url_input = ""
if flavor == FLAVOR_ACCESSIBILITY:
    url_input = st.text_input("Page URL (optional)", placeholder="https://example.com", key="url_input")
upload = st.file_uploader("Image / screenshot (optional)", type=["png", "jpg", "jpeg", "webp", "gif"])


def run_analysis(content: str, image_data: str | None) -> None:
    client = ContentAnalysisClient(api_key, flavor=flavor, provider=provider, config=config)
    media_type = MediaType.IMAGE if image_data else MediaType.TEXT
    start = time.perf_counter()
    outcome = asyncio.run(client.analyze_with_status(content, media_type, image_data))
    logger.info("UI analysis finished | status=%s elapsed=%.2fs", outcome.status, time.perf_counter() - start)
    st.session_state.analysis_result = outcome.response
    st.session_state.analysis_status = outcome.status


if st.button("Run Analysis", type="primary"):
    image_data = image_to_data_url(upload.getvalue(), upload.name) if upload is not None else None
    content = content_input
    if url_input.strip():
        content = f"URL: {url_input.strip()}\n\n{content_input}".strip()
    if not content.strip() and not image_data:
        st.warning("Please provide text, HTML, a URL or an image to analyze.")
    else:
        with st.spinner("Analyzing..."):
            run_analysis(content, image_data)


def render_claims(result: Dict[str, Any]) -> None:
    risk = result.get("overall_risk_score", 0)
    col_target, col_risk = st.columns([3, 1])
    with col_target:
        st.markdown(f"### {result.get('analysis_target', '')}")
        st.markdown(f"*{result.get('summary_insight', '')}*")
    with col_risk:
        st.metric("Risk Score", f"{risk}/100", delta="high" if risk_band(risk) == "high" else "low",
                  delta_color="inverse")

    for claim in result.get("claims", []):
        icon = VERDICT_ICONS.get(claim.get("verdict"), "❓")
        with st.expander(f"{icon} {claim.get('claim_text', '')}"):
            st.markdown(
                f"**{claim.get('verdict')}** | {claim.get('confidence_score', 0)}% Confidence "
                f"| type: {claim.get('claim_type', 'factual')}"
            )
            st.write(claim.get("explanation", ""))
            issues: List[str] = list(claim.get("logical_issues", [])) + list(claim.get("statistical_issues", []))
            if issues:
                st.markdown("**Issues detected:** " + ", ".join(issues))
            if claim.get("what_would_make_this_true"):
                st.info(f"**What would make this true?** {claim['what_would_make_this_true']}")


def render_accessibility(result: Dict[str, Any], status: str) -> None:
    issues = result.get("issues", [])
    score = displayed_accessibility_score(result, status)
    band = score_band(score)
    counts = severity_breakdown(issues)

    col_score, col_breakdown = st.columns([1, 3])
    with col_score:
        st.markdown(
            f"""<div style="font-size: 2.5rem; font-weight: bold; color: {BAND_COLORS[band]};">
            {score}<span style="font-size: 1rem; color: #64748b;">/100</span></div>""",
            unsafe_allow_html=True,
        )
    with col_breakdown:
        st.bar_chart({severity.title(): [count] for severity, count in counts.items()})

    st.markdown(f"### {result.get('analysis_target', '')}")
    st.markdown(f"*{result.get('summary', '')}*")
    for issue in issues:
        with st.expander(f"[{issue.get('severity')}] {issue.get('title', '')} ({issue.get('persona')})"):
            st.write(issue.get("description", ""))
            if issue.get("explanation"):
                st.caption(issue["explanation"])
            if issue.get("code_snippet"):
                st.code(issue["code_snippet"], language="html")
            if issue.get("suggested_fix"):
                st.markdown("**Suggested fix:**")
                st.code(issue["suggested_fix"], language="html")


result = st.session_state.analysis_result
if result is not None:
    st.divider()
    col_header, col_clear = st.columns([8, 2])
    with col_header:
        st.markdown("## Analysis Results")
    with col_clear:
        if st.button("Clear Results", type="secondary"):
            st.session_state.analysis_result = None
            st.session_state.analysis_status = None
            st.rerun()

    status = st.session_state.analysis_status
    if status == "demo":
        st.info("Demo mode: no API key configured, showing placeholder results.")
    elif status in ("transport_error", "shape_error"):
        st.warning("The live analysis could not be completed. Showing fallback results.")

    if "claims" in result:
        render_claims(result)
    else:
        render_accessibility(result, status)

    chat: AnalysisChat = st.session_state.chat
    chat.set_context(result)

# --- CHAT ASSISTANT ---
with st.sidebar:
    st.divider()
    st.subheader("Assistant")
    for role, text in st.session_state.chat_log:
        with st.chat_message(role):
            st.write(text)
    question = st.chat_input("Ask about the results...")
    if question:
        st.session_state.chat_log.append(("user", question))
        reply = asyncio.run(st.session_state.chat.send(question))
        st.session_state.chat_log.append(("assistant", reply))
        st.rerun()
