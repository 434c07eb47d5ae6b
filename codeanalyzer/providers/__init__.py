"""AI provider registry and dispatch.

Providers are discovered via setuptools entry points (group
``codeanalyzer.providers``). The built-in providers (ollama, anthropic) are
registered in pyproject.toml; other packages can add providers by declaring
their own entry points.
"""
from __future__ import annotations

import logging
from typing import Optional

# Ensure .env is loaded before reading any env vars
import codeanalyzer.config  # noqa: F401

logger = logging.getLogger("codeanalyzer.providers")

# Registry of available providers (lazy-loaded via entry points)
PROVIDERS: dict[str, type] = {}

_active_provider = None


def _register_defaults():
    """Discover and register providers via entry points.

    Built-in providers are registered directly when the package is run from a
    source checkout without installed entry points.
    """
    if PROVIDERS:
        return

    from codeanalyzer.plugins import discover_providers
    discovered = discover_providers()

    if discovered:
        PROVIDERS.update(discovered)
        logger.debug("Discovered %d providers via entry points: %s",
                     len(discovered), list(discovered.keys()))
    else:
        logger.debug("No entry points found, registering built-in providers")
        from .anthropic_provider import AnthropicProvider
        from .ollama_provider import OllamaProvider
        PROVIDERS["anthropic"] = AnthropicProvider
        PROVIDERS["ollama"] = OllamaProvider


def get_provider(name: Optional[str] = None):
    """Get the active AI provider instance.

    Args:
        name: Provider name to use. If None, reads from config.

    Raises:
        ProviderUnavailableError: If provider name is unknown.
    """
    global _active_provider
    _register_defaults()

    if name:
        if name not in PROVIDERS:
            from codeanalyzer.errors import ProviderUnavailableError
            available = ", ".join(sorted(PROVIDERS.keys()))
            raise ProviderUnavailableError(
                f"Unknown provider '{name}'. Available: {available}",
                provider=name,
            )
        _active_provider = PROVIDERS[name]()
        return _active_provider

    if _active_provider:
        return _active_provider

    from codeanalyzer.core.config_service import get_config_service
    provider_name = get_config_service().get_provider_name()
    return get_provider(provider_name)


def get_provider_names() -> list[str]:
    """Get sorted list of all registered provider names."""
    _register_defaults()
    return sorted(PROVIDERS.keys())


def reset_provider():
    """Reset the cached provider (useful when env vars change)."""
    global _active_provider
    _active_provider = None
