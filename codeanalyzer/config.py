"""Environment handling for codeanalyzer.

Loads a ``.env`` file (current directory first, then the package checkout) so
provider settings such as ``ANTHROPIC_API_KEY`` or ``OLLAMA_ENDPOINT`` can live
next to the project. Resolution of individual settings is delegated to
codeanalyzer.core.config_service.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_ENV_CANDIDATES = [Path.cwd() / ".env", Path(__file__).parent.parent / ".env"]

for _env_file in _ENV_CANDIDATES:
    if _env_file.is_file():
        load_dotenv(_env_file)
        break


# Provider name -> env var holding its API key (None: no key needed)
PROVIDER_KEY_MAP = {
    "anthropic": "ANTHROPIC_API_KEY",
    "ollama": None,
}


def get_api_key(provider: str) -> Optional[str]:
    """Return the API key for a provider from the environment, if any."""
    env_var = PROVIDER_KEY_MAP.get(provider, f"{provider.upper()}_API_KEY")
    if env_var is None:
        return None
    return os.environ.get(env_var) or None
