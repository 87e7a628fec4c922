import pytest

from pubqa.utils.errors import ConfigurationError
from pubqa.utils.settings import Settings, settings, str_to_bool, str_to_list


def test_defaults():
    fresh = Settings.load()

    assert fresh.retrieval.primary_limit == 7
    assert fresh.retrieval.fallback_top_n == 3
    assert fresh.relevance.cutoff == 5
    assert fresh.generation.max_attempts == 3


def test_require_raises_for_missing_key(monkeypatch):
    monkeypatch.setattr(settings.gemini, "api_key", None)

    with pytest.raises(ConfigurationError) as exc_info:
        settings.require("GEMINI_API_KEY")

    assert "GEMINI_API_KEY" in exc_info.value.message
    assert exc_info.value.code == "CONFIGURATION_ERROR"


def test_require_only_checks_named_credentials(monkeypatch):
    monkeypatch.setattr(settings.gemini, "api_key", None)
    monkeypatch.setattr(settings.supabase, "url", "https://db.example.co")
    monkeypatch.setattr(settings.supabase, "service_role_key", "secret")

    settings.require("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")
    assert settings.missing_credentials() == ["GEMINI_API_KEY"]


def test_helpers():
    assert str_to_bool("Yes")
    assert not str_to_bool("off")
    assert str_to_list("http://a, http://b,") == ["http://a", "http://b"]
