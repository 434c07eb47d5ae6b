"""Anthropic (Claude) AI provider."""

from __future__ import annotations

import logging

from codeanalyzer.errors import (
    ProviderAuthError,
    ProviderError,
    ProviderModelError,
    ProviderQuotaError,
)

logger = logging.getLogger("codeanalyzer.providers.anthropic")


class AnthropicProvider:
    name = "anthropic"

    def __init__(self):
        from codeanalyzer.config import get_api_key
        from codeanalyzer.core.config_service import get_config_service

        self.api_key = get_api_key("anthropic")
        self.model = get_config_service().get_provider_model("anthropic")

    def is_available(self) -> bool:
        return self.api_key is not None

    def chat(self, system: str, user: str, max_tokens: int = 4000) -> str:
        """Send a chat message and return the response text."""
        if not self.api_key:
            raise ProviderAuthError(
                "ANTHROPIC_API_KEY is not set.\n"
                "  export ANTHROPIC_API_KEY=your-key-here",
                provider=self.name,
                model=self.model,
            )

        # Optional extra: pip install code-analyzer[anthropic]
        import anthropic

        client = anthropic.Anthropic(api_key=self.api_key)

        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": user}],
        }
        if system:
            kwargs["system"] = system

        logger.debug("Anthropic request: model=%s, max_tokens=%d", self.model, max_tokens)
        try:
            message = client.messages.create(**kwargs)
            return message.content[0].text
        except anthropic.AuthenticationError as e:
            raise ProviderAuthError(
                "Anthropic API key is invalid or expired. Check ANTHROPIC_API_KEY.",
                provider=self.name,
                model=self.model,
            ) from e
        except anthropic.RateLimitError as e:
            raise ProviderQuotaError(
                "Anthropic rate limit exceeded. Wait and retry.",
                provider=self.name,
                model=self.model,
            ) from e
        except anthropic.NotFoundError as e:
            raise ProviderModelError(
                f"Model '{self.model}' not found on Anthropic.",
                provider=self.name,
                model=self.model,
            ) from e
        except anthropic.APIError as e:
            raise ProviderError(
                f"Anthropic API error: {e}",
                provider=self.name,
                model=self.model,
            ) from e
