import pytest

from reason3.config import load_config, missing_settings
from reason3.llm import PROVIDER_AZURE, PROVIDER_GEMINI, PROVIDER_GROQ

_ALL_VARS = [
    "GROQ_API_KEY", "GROQ_MODEL", "GROQ_BASE_URL",
    "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_DEPLOYMENT_NAME", "AZURE_OPENAI_API_VERSION",
    "GEMINI_API_KEY", "GEMINI_MODEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # load_dotenv searches from the working directory; keep it away from any real .env
    monkeypatch.chdir(tmp_path)
    for var in _ALL_VARS:
        # setenv first so teardown also removes anything load_dotenv adds
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


class TestLoadConfig:

    def test_groq_key_read_from_env(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

        api_key, config = load_config(PROVIDER_GROQ)

        assert api_key == "gsk-test"
        assert missing_settings(PROVIDER_GROQ, config) == []

    def test_missing_key_is_not_an_error(self):
        api_key, config = load_config(PROVIDER_GROQ)

        assert api_key is None
        assert missing_settings(PROVIDER_GROQ, config) == ["groq_key"]

    def test_azure_reports_each_missing_setting(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "az-key")
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://res.openai.azure.com")

        api_key, config = load_config(PROVIDER_AZURE)

        assert api_key == "az-key"
        assert missing_settings(PROVIDER_AZURE, config) == ["azure_deployment", "azure_version"]

    def test_gemini_model_override(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")

        api_key, config = load_config(PROVIDER_GEMINI)

        assert api_key == "g-key"
        assert config["gemini_model"] == "gemini-2.5-pro"

    def test_dotenv_file_is_loaded(self, tmp_path):
        (tmp_path / ".env").write_text("GROQ_API_KEY=from-dotenv\n")

        api_key, _ = load_config(PROVIDER_GROQ)

        assert api_key == "from-dotenv"

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError):
            load_config("Carrier Pigeon")
