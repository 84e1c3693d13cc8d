import os
from typing import Any, Dict, List, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from reason3.llm import PROVIDER_AZURE, PROVIDER_GEMINI, PROVIDER_GROQ

_REQUIRED = {
    PROVIDER_GROQ: ["groq_key"],
    PROVIDER_AZURE: ["azure_endpoint", "azure_key", "azure_deployment", "azure_version"],
    PROVIDER_GEMINI: ["gemini_key"],
}

_KEY_FIELD = {
    PROVIDER_GROQ: "groq_key",
    PROVIDER_AZURE: "azure_key",
    PROVIDER_GEMINI: "gemini_key",
}


def load_config(provider: str) -> Tuple[Optional[str], Dict[str, Any]]:
    """Read provider settings from the environment (and .env).

    Returns (api_key, config). A missing key is not an error: the client
    falls back to demo mode.
    """
    load_dotenv(find_dotenv(usecwd=True))
    config: Dict[str, Any] = {}
    if provider == PROVIDER_GROQ:
        config["groq_key"] = os.getenv("GROQ_API_KEY")
        config["groq_model"] = os.getenv("GROQ_MODEL")
        config["groq_base_url"] = os.getenv("GROQ_BASE_URL")
    elif provider == PROVIDER_AZURE:
        config["azure_endpoint"] = os.getenv("AZURE_OPENAI_ENDPOINT")
        config["azure_key"] = os.getenv("AZURE_OPENAI_API_KEY")
        config["azure_deployment"] = os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME")
        config["azure_version"] = os.getenv("AZURE_OPENAI_API_VERSION")
    elif provider == PROVIDER_GEMINI:
        config["gemini_key"] = os.getenv("GEMINI_API_KEY")
        config["gemini_model"] = os.getenv("GEMINI_MODEL")
    else:
        raise ValueError(f"Invalid provider: {provider}")
    return config.get(_KEY_FIELD[provider]), config


def missing_settings(provider: str, config: Dict[str, Any]) -> List[str]:
    return [key for key in _REQUIRED.get(provider, []) if not config.get(key)]
