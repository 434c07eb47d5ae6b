"""Custom exception hierarchy for codeanalyzer.

All codeanalyzer-specific exceptions derive from CodeAnalyzerError. Each
exception carries an optional ``context`` dict with structured metadata
(criteria ID, provider name, etc.) that the CLI error handler can render.

The analysis core never raises these across its boundary: a missing root
directory is reported through ``ProjectStructure.error`` and per-file problems
degrade classification. These exceptions belong to the outer layers
(criteria store, providers, configuration, CLI).

Exception hierarchy::

    CodeAnalyzerError
    ├── CriteriaNotFoundError
    ├── CriteriaValidationError
    ├── AnalysisCancelledError
    ├── ProviderError
    │   ├── ProviderAuthError
    │   ├── ProviderQuotaError
    │   ├── ProviderModelError
    │   └── ProviderUnavailableError
    └── ConfigError
"""
from __future__ import annotations

from typing import Optional


class CodeAnalyzerError(Exception):
    """Base class for all codeanalyzer exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── Criteria ───────────────────────────────────────────────────────

class CriteriaNotFoundError(CodeAnalyzerError):
    """Raised when a stored criteria template does not exist."""

    def __init__(self, criteria_id: str, store_dir: str = ""):
        msg = f"Criteria template '{criteria_id}' not found"
        if store_dir:
            msg += f" in {store_dir}"
        super().__init__(msg, context={"criteria": criteria_id})


class CriteriaValidationError(CodeAnalyzerError):
    """Raised when a criteria template fails validation."""

    def __init__(self, errors: list[str], criteria_name: str = ""):
        self.errors = list(errors)
        super().__init__(
            "Validation failed: " + "; ".join(self.errors),
            context={"criteria": criteria_name},
        )


class AnalysisCancelledError(CodeAnalyzerError):
    """Raised inside the walker when the caller cancels a scan."""

    exit_code = 130

    def __init__(self, root: str = ""):
        super().__init__("Analysis cancelled", context={"root": root})


# ── Provider Errors ────────────────────────────────────────────────

class ProviderError(CodeAnalyzerError):
    """Base class for LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        model: str = "",
        context: Optional[dict] = None,
    ):
        ctx = {"provider": provider, "model": model}
        if context:
            ctx.update(context)
        super().__init__(message, context=ctx)


class ProviderAuthError(ProviderError):
    """Raised when API key is missing or invalid."""
    pass


class ProviderQuotaError(ProviderError):
    """Raised when provider quota/rate limit is exceeded."""
    pass


class ProviderModelError(ProviderError):
    """Raised when the requested model is not found."""
    pass


class ProviderUnavailableError(ProviderError):
    """Raised when the provider cannot be reached or is not configured."""
    pass


class ConfigError(CodeAnalyzerError):
    """Raised when configuration is invalid or missing."""
    pass
