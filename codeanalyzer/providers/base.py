"""AI provider protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AIProvider(Protocol):
    """Protocol that all AI providers must satisfy."""

    name: str
    model: str

    def is_available(self) -> bool: ...
    def chat(self, system: str, user: str, max_tokens: int = 4000) -> str: ...
