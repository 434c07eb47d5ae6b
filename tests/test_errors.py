"""Tests for custom exception hierarchy."""

from codeanalyzer.errors import (
    AnalysisCancelledError,
    CodeAnalyzerError,
    ConfigError,
    CriteriaNotFoundError,
    CriteriaValidationError,
    ProviderAuthError,
    ProviderError,
    ProviderModelError,
    ProviderQuotaError,
    ProviderUnavailableError,
)


class TestCodeAnalyzerErrorBase:
    def test_message(self):
        assert str(CodeAnalyzerError("test error")) == "test error"

    def test_empty_context_by_default(self):
        assert CodeAnalyzerError("test error").context == {}

    def test_context_passed_through(self):
        e = CodeAnalyzerError("test error", context={"criteria": "c1"})
        assert e.context == {"criteria": "c1"}

    def test_exit_code_default(self):
        assert CodeAnalyzerError("test error").exit_code == 1


class TestCriteriaErrors:
    def test_not_found(self):
        e = CriteriaNotFoundError("missing")
        assert str(e) == "Criteria template 'missing' not found"
        assert e.context["criteria"] == "missing"
        assert isinstance(e, CodeAnalyzerError)

    def test_not_found_with_store_dir(self):
        e = CriteriaNotFoundError("missing", store_dir="/data/criteria")
        assert "/data/criteria" in str(e)

    def test_validation_error_keeps_list(self):
        e = CriteriaValidationError(["Criterion name is required", "Add at least one rule"], "x")
        assert e.errors == ["Criterion name is required", "Add at least one rule"]
        assert str(e) == "Validation failed: Criterion name is required; Add at least one rule"
        assert e.context["criteria"] == "x"


class TestAnalysisCancelled:
    def test_message_and_exit_code(self):
        e = AnalysisCancelledError("/repo")
        assert str(e) == "Analysis cancelled"
        assert e.exit_code == 130
        assert e.context["root"] == "/repo"


class TestProviderErrors:
    def test_hierarchy(self):
        for cls in (ProviderAuthError, ProviderQuotaError, ProviderModelError, ProviderUnavailableError):
            assert issubclass(cls, ProviderError)
        assert issubclass(ProviderError, CodeAnalyzerError)

    def test_provider_error_context(self):
        e = ProviderAuthError("bad key", provider="anthropic", model="claude-sonnet-4-5")
        assert e.context == {"provider": "anthropic", "model": "claude-sonnet-4-5"}

    def test_provider_error_extra_context(self):
        e = ProviderError("err", provider="ollama", context={"endpoint": "http://x"})
        assert e.context["provider"] == "ollama"
        assert e.context["endpoint"] == "http://x"


def test_config_error():
    e = ConfigError("bad config")
    assert "bad config" in str(e)
    assert isinstance(e, CodeAnalyzerError)
