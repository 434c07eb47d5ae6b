"""Plugin discovery via setuptools entry points.

Third-party packages can register LLM providers by declaring entry points in
their ``pyproject.toml``::

    [project.entry-points."codeanalyzer.providers"]
    openai = "codeanalyzer_openai:OpenAIProvider"
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Any

logger = logging.getLogger("codeanalyzer.plugins")

PROVIDER_GROUP = "codeanalyzer.providers"


def discover_plugins(group: str) -> dict[str, Any]:
    """Load every entry point in ``group``; broken plugins are logged and skipped."""
    plugins = {}
    for ep in entry_points(group=group):
        try:
            plugins[ep.name] = ep.load()
            logger.debug("Loaded plugin %s from %s", ep.name, ep.value)
        except Exception as e:
            logger.warning("Failed to load plugin %s: %s", ep.name, e)
    return plugins


def discover_providers() -> dict[str, type]:
    """Discover all registered AI providers via entry points."""
    return discover_plugins(PROVIDER_GROUP)
