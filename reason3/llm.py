import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlparse

from openai import AsyncAzureOpenAI, AsyncOpenAI
from reason3.images import parse_data_url
from reason3.logger import get_logger

logger = get_logger(__name__)

# Per-LLM-call timeout in seconds (prevents indefinite hangs)
LLM_TIMEOUT_SECONDS = 30

PROVIDER_GROQ = "Groq"
PROVIDER_AZURE = "Microsoft Azure"
PROVIDER_GEMINI = "Google Gemini"
PROVIDERS = (PROVIDER_GROQ, PROVIDER_AZURE, PROVIDER_GEMINI)

DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

Message = Dict[str, Any]


class ModelTransport(Protocol):
    """One round-trip to a hosted model: chat messages in, reply text out.

    Implementations raise on any transport failure; callers decide what a
    failure means.
    """

    name: str

    async def complete(self, messages: List[Message], *, temperature: float, json_mode: bool) -> str:
        ...


# ---------------------------------------------------------------------------
# Async SDK clients – created once per config and event loop, then reused
# ---------------------------------------------------------------------------
_clients: Dict[str, Tuple[Optional[int], Any]] = {}


def _current_loop_id() -> Optional[int]:
    try:
        return id(asyncio.get_running_loop())
    except RuntimeError:
        return None


def _cached_client(cache_key: str, factory: Callable[[], Any]) -> Any:
    """Return a reusable SDK client, rebuilding it when the event loop changes.

    Each ``asyncio.run()`` call gets a fresh loop; an httpx pool bound to an
    old loop would fail with "Event loop is closed".
    """
    loop_id = _current_loop_id()
    cached = _clients.get(cache_key)
    if cached is not None and cached[0] == loop_id:
        return cached[1]
    client = factory()
    _clients[cache_key] = (loop_id, client)
    logger.info("Created new %s client (loop=%s)", type(client).__name__, loop_id)
    return client


def _normalize_azure_endpoint(endpoint: str) -> str:
    """Normalize Azure endpoint to resource root (scheme + host + '/')."""
    raw_endpoint = (endpoint or "").strip()
    if not raw_endpoint:
        return ""
    parsed = urlparse(raw_endpoint)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}/"
    return raw_endpoint.rstrip("/") + "/"


async def _chat_completion(client: Any, model: str, label: str, messages: List[Message],
                           temperature: float, json_mode: bool) -> str:
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "stream": False,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    start = time.perf_counter()
    logger.info("LLM call start | provider=%s model=%s messages=%d json=%s",
                label, model, len(messages), json_mode)
    try:
        result = await asyncio.wait_for(
            client.chat.completions.create(**kwargs),
            timeout=LLM_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning("LLM TIMEOUT | provider=%s elapsed=%.2fs", label, time.perf_counter() - start)
        raise
    text = result.choices[0].message.content or ""
    logger.info("LLM call done  | provider=%s elapsed=%.2fs resp_len=%d",
                label, time.perf_counter() - start, len(text))
    return text


class OpenAICompatibleTransport:
    """Chat Completions against any OpenAI-compatible endpoint (Groq by default)."""

    name = PROVIDER_GROQ

    def __init__(self, api_key: str, model: str = DEFAULT_GROQ_MODEL, base_url: str = DEFAULT_GROQ_BASE_URL):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url

    def _client(self) -> AsyncOpenAI:
        return _cached_client(
            f"openai|{self.base_url}|{self.api_key}",
            lambda: AsyncOpenAI(api_key=self.api_key, base_url=self.base_url),
        )

    async def complete(self, messages: List[Message], *, temperature: float, json_mode: bool) -> str:
        return await _chat_completion(self._client(), self.model, self.name, messages, temperature, json_mode)


class AzureOpenAITransport:
    """Azure OpenAI Chat Completions; the deployment name doubles as the model."""

    name = PROVIDER_AZURE

    def __init__(self, api_key: str, endpoint: str, deployment: str, api_version: str):
        self.api_key = api_key
        self.endpoint = _normalize_azure_endpoint(endpoint)
        self.deployment = deployment
        self.api_version = api_version

    def _client(self) -> AsyncAzureOpenAI:
        return _cached_client(
            f"azure|{self.endpoint}|{self.api_key}|{self.api_version}",
            lambda: AsyncAzureOpenAI(
                azure_endpoint=self.endpoint,
                api_key=self.api_key,
                api_version=self.api_version,
            ),
        )

    async def complete(self, messages: List[Message], *, temperature: float, json_mode: bool) -> str:
        return await _chat_completion(self._client(), self.deployment, self.name, messages, temperature, json_mode)


class GeminiTransport:
    """google-genai path. The SDK call is sync, so it runs in a worker thread."""

    name = PROVIDER_GEMINI

    def __init__(self, api_key: str, model: str = DEFAULT_GEMINI_MODEL):
        self.api_key = api_key
        self.model = model

    @staticmethod
    def _to_contents(messages: List[Message]) -> Tuple[Optional[str], list]:
        from google.genai import types

        system_parts: List[str] = []
        contents = []
        for message in messages:
            role = message.get("role", "user")
            content = message.get("content", "")
            if role == "system":
                system_parts.append(content)
                continue
            if isinstance(content, str):
                parts = [types.Part.from_text(text=content)]
            else:
                parts = []
                for part in content:
                    if part.get("type") == "image_url":
                        mime_type, data = parse_data_url(part["image_url"]["url"])
                        parts.append(types.Part.from_bytes(data=data, mime_type=mime_type))
                    else:
                        parts.append(types.Part.from_text(text=part.get("text", "")))
            contents.append(types.Content(role="model" if role == "assistant" else "user", parts=parts))
        system_instruction = "\n\n".join(system_parts) or None
        return system_instruction, contents

    async def complete(self, messages: List[Message], *, temperature: float, json_mode: bool) -> str:
        from google import genai
        from google.genai import types

        client = genai.Client(api_key=self.api_key)
        system_instruction, contents = self._to_contents(messages)
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            response_mime_type="application/json" if json_mode else None,
        )

        start = time.perf_counter()
        logger.info("LLM call start | provider=Gemini model=%s messages=%d json=%s",
                    self.model, len(messages), json_mode)
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    client.models.generate_content,
                    model=self.model,
                    contents=contents,
                    config=config,
                ),
                timeout=LLM_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning("LLM TIMEOUT | provider=Gemini elapsed=%.2fs", time.perf_counter() - start)
            raise
        text = response.text or ""
        logger.info("LLM call done  | provider=Gemini elapsed=%.2fs resp_len=%d",
                    time.perf_counter() - start, len(text))
        return text


def build_transport(provider: str, api_key: str, config: Optional[Dict[str, Any]] = None) -> ModelTransport:
    """Pick the transport for ``provider`` using the settings in ``config``."""
    config = config or {}
    if provider == PROVIDER_GROQ:
        return OpenAICompatibleTransport(
            api_key,
            model=config.get("groq_model") or DEFAULT_GROQ_MODEL,
            base_url=config.get("groq_base_url") or DEFAULT_GROQ_BASE_URL,
        )
    if provider == PROVIDER_AZURE:
        return AzureOpenAITransport(
            api_key,
            endpoint=config.get("azure_endpoint") or "",
            deployment=config.get("azure_deployment") or "",
            api_version=config.get("azure_version") or "",
        )
    if provider == PROVIDER_GEMINI:
        return GeminiTransport(api_key, model=config.get("gemini_model") or DEFAULT_GEMINI_MODEL)
    raise ValueError(f"Invalid provider: {provider}")
