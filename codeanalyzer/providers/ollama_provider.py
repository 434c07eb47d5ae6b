"""Ollama local AI provider, calling the Ollama REST API with httpx."""
from __future__ import annotations

import logging

import httpx

from codeanalyzer.errors import (
    ProviderError,
    ProviderModelError,
    ProviderUnavailableError,
)

logger = logging.getLogger("codeanalyzer.providers.ollama")


class OllamaProvider:
    """Local AI provider using Ollama (llama3.2, mistral, deepseek, etc.)."""

    name = "ollama"

    def __init__(self):
        from codeanalyzer.core.config_service import get_config_service

        config = get_config_service()
        self.model = config.get_provider_model("ollama")
        self.endpoint = config.get(
            "providers.ollama.endpoint", "http://localhost:11434"
        ).rstrip("/")

    def is_available(self) -> bool:
        """Check if the Ollama server is reachable."""
        try:
            response = httpx.get(f"{self.endpoint}/api/tags", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def chat(self, system: str, user: str, max_tokens: int = 4000) -> str:
        """Send a chat request to the Ollama server."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user})

        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {"num_predict": max_tokens},
        }

        try:
            response = httpx.post(
                f"{self.endpoint}/api/chat",
                json=payload,
                timeout=300.0,  # Local models on CPU can be slow
            )
            response.raise_for_status()
            data = response.json()
            return data["message"]["content"]
        except httpx.ConnectError as e:
            raise ProviderUnavailableError(
                f"Cannot connect to Ollama at {self.endpoint}. "
                "Make sure Ollama is running: ollama serve",
                provider=self.name,
                model=self.model,
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderUnavailableError(
                f"Ollama request timed out. The model '{self.model}' may be "
                "too large for your hardware, or the server is overloaded.",
                provider=self.name,
                model=self.model,
            ) from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise ProviderModelError(
                    f"Model '{self.model}' not found on Ollama. "
                    f"Pull it first: ollama pull {self.model}",
                    provider=self.name,
                    model=self.model,
                ) from e
            raise ProviderError(
                f"Ollama API error (HTTP {e.response.status_code}): "
                f"{e.response.text}",
                provider=self.name,
                model=self.model,
            ) from e
        except (KeyError, TypeError, ValueError, httpx.HTTPError) as e:
            raise ProviderError(
                f"Ollama error: {e}",
                provider=self.name,
                model=self.model,
            ) from e
