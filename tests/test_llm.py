"""Tests for transport selection and message conversion (no network)."""

import base64

import pytest

from reason3 import llm
from reason3.llm import (
    DEFAULT_GROQ_BASE_URL,
    DEFAULT_GROQ_MODEL,
    AzureOpenAITransport,
    GeminiTransport,
    OpenAICompatibleTransport,
    _normalize_azure_endpoint,
    build_transport,
)


class TestBuildTransport:

    def test_groq_defaults(self):
        transport = build_transport("Groq", "gsk-test", {})

        assert isinstance(transport, OpenAICompatibleTransport)
        assert transport.model == DEFAULT_GROQ_MODEL
        assert transport.base_url == DEFAULT_GROQ_BASE_URL

    def test_groq_overrides(self):
        transport = build_transport("Groq", "k", {"groq_model": "llama-3.1-8b-instant",
                                                  "groq_base_url": "http://localhost:8000/v1"})

        assert transport.model == "llama-3.1-8b-instant"
        assert transport.base_url == "http://localhost:8000/v1"

    def test_azure(self):
        transport = build_transport("Microsoft Azure", "az", {
            "azure_endpoint": "https://res.openai.azure.com/openai/deployments/x",
            "azure_deployment": "gpt-4o",
            "azure_version": "2024-10-21",
        })

        assert isinstance(transport, AzureOpenAITransport)
        assert transport.endpoint == "https://res.openai.azure.com/"
        assert transport.deployment == "gpt-4o"

    def test_gemini(self):
        assert isinstance(build_transport("Google Gemini", "g", None), GeminiTransport)

    def test_invalid_provider(self):
        with pytest.raises(ValueError):
            build_transport("Carrier Pigeon", "k", {})


class TestNormalizeAzureEndpoint:

    @pytest.mark.parametrize("raw,expected", [
        ("https://res.openai.azure.com", "https://res.openai.azure.com/"),
        ("https://res.openai.azure.com/openai/v1/", "https://res.openai.azure.com/"),
        ("  res.openai.azure.com/ ", "res.openai.azure.com/"),
        ("", ""),
    ])
    def test_normalize(self, raw, expected):
        assert _normalize_azure_endpoint(raw) == expected


class TestClientCache:

    def test_reused_for_same_key_and_loop(self, monkeypatch):
        monkeypatch.setattr(llm, "_clients", {})
        built = []

        def factory():
            built.append(object())
            return built[-1]

        first = llm._cached_client("k", factory)
        second = llm._cached_client("k", factory)

        assert first is second
        assert len(built) == 1

    def test_rebuilt_when_loop_changes(self, monkeypatch):
        monkeypatch.setattr(llm, "_clients", {})
        loop_ids = iter([1, 2])
        monkeypatch.setattr(llm, "_current_loop_id", lambda: next(loop_ids))

        first = llm._cached_client("k", object)
        second = llm._cached_client("k", object)

        assert first is not second


class TestGeminiContents:

    def test_system_and_image_parts(self):
        data_url = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
        messages = [
            {"role": "system", "content": "Be terse."},
            {"role": "user", "content": [
                {"type": "text", "text": "Audit this"},
                {"type": "image_url", "image_url": {"url": data_url}},
            ]},
            {"role": "assistant", "content": "Done."},
        ]

        system_instruction, contents = GeminiTransport._to_contents(messages)

        assert system_instruction == "Be terse."
        assert [c.role for c in contents] == ["user", "model"]
        text_part, image_part = contents[0].parts
        assert text_part.text == "Audit this"
        assert image_part.inline_data.mime_type == "image/png"
        assert image_part.inline_data.data == b"\x89PNG"
