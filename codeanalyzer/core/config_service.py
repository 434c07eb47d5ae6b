"""Layered configuration service for codeanalyzer.

Priority (highest to lowest):
1. CLI flags (--provider, --model), applied through the environment
2. Environment variables (CODEANALYZER_*, OLLAMA_*, ANTHROPIC_*)
3. Project config (.codeanalyzer.toml in current directory)
4. Global config (~/.config/codeanalyzer/config.toml)
5. Built-in defaults
"""
from __future__ import annotations

import copy
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli_w

from codeanalyzer.analyzers.walker import DEFAULT_EXTENSIONS, MAX_CONTENT_BYTES
from codeanalyzer.analyzers.walker import DEFAULT_SKIP_DIRS as WALKER_SKIP_DIRS
from codeanalyzer.errors import ConfigError

logger = logging.getLogger("codeanalyzer.config")

DEFAULT_SKIP_DIRS = sorted(WALKER_SKIP_DIRS)

# Default configuration values
DEFAULTS: dict[str, Any] = {
    "analysis": {
        "extensions": list(DEFAULT_EXTENSIONS),
        "max_content_bytes": MAX_CONTENT_BYTES,
        "mode": "Structural",
        "skip_dirs": list(DEFAULT_SKIP_DIRS),
    },
    "criteria": {
        "store_dir": "",
    },
    "providers": {
        "default": "ollama",
        "ollama": {
            "model": "llama3.2",
            "endpoint": "http://localhost:11434",
        },
        "anthropic": {
            "model": "claude-sonnet-4-5",
        },
    },
}

# Mapping of env vars to config paths
ENV_VAR_MAP = {
    "CODEANALYZER_PROVIDER": "providers.default",
    "CODEANALYZER_MODE": "analysis.mode",
    "CODEANALYZER_MAX_CONTENT_BYTES": "analysis.max_content_bytes",
    "ANTHROPIC_MODEL": "providers.anthropic.model",
    "OLLAMA_MODEL": "providers.ollama.model",
    "OLLAMA_ENDPOINT": "providers.ollama.endpoint",
}

# Keys whose string values (env vars, `config set`) are coerced to int
INT_KEYS = {"analysis.max_content_bytes"}
LIST_KEYS = {"analysis.extensions", "analysis.skip_dirs"}


def _global_config_dir() -> Path:
    """Return the global config directory: ~/.config/codeanalyzer/."""
    return Path.home() / ".config" / "codeanalyzer"


def _global_config_path() -> Path:
    return _global_config_dir() / "config.toml"


def _project_config_path() -> Path:
    """Return the project config file path (.codeanalyzer.toml in cwd)."""
    return Path.cwd() / ".codeanalyzer.toml"


def _read_toml(path: Path) -> dict:
    """Read a TOML file, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}


def _write_toml(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base (override wins)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _get_nested(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using dotted key notation."""
    current = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using dotted key notation."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def coerce_value(dotted_key: str, raw: Any) -> Any:
    """Convert a string setting into the type its key expects.

    Raises:
        ConfigError: If an integer key gets a non-integer value.
    """
    if not isinstance(raw, str):
        return raw
    if dotted_key in INT_KEYS:
        try:
            return int(raw.replace("_", ""))
        except ValueError:
            raise ConfigError(f"{dotted_key} must be an integer, got '{raw}'")
    if dotted_key in LIST_KEYS:
        return [part.strip() for part in raw.split(",") if part.strip()]
    if raw.lower() in ("true", "yes"):
        return True
    if raw.lower() in ("false", "no"):
        return False
    return raw


@dataclass
class ResolvedConfig:
    """Fully resolved configuration after merging all layers."""
    data: dict = field(default_factory=dict)
    global_config_path: Optional[Path] = None
    project_config_path: Optional[Path] = None

    def get(self, dotted_key: str, default: Any = None) -> Any:
        return _get_nested(self.data, dotted_key, default)


class ConfigService:
    """Layered configuration service.

    Resolves config from multiple sources with clear precedence:
    1. Environment variables (CODEANALYZER_*, OLLAMA_*, ANTHROPIC_MODEL)
    2. Project config (.codeanalyzer.toml)
    3. Global config (~/.config/codeanalyzer/config.toml)
    4. Built-in defaults
    """

    def __init__(self):
        self._resolved: Optional[ResolvedConfig] = None

    def resolve(self, force: bool = False) -> ResolvedConfig:
        """Resolve the full config from all layers."""
        if self._resolved is not None and not force:
            return self._resolved

        merged = copy.deepcopy(DEFAULTS)

        global_path = _global_config_path()
        global_data = _read_toml(global_path)
        if global_data:
            merged = _deep_merge(merged, global_data)
            logger.debug("Loaded global config from %s", global_path)

        project_path = _project_config_path()
        project_data = _read_toml(project_path)
        if project_data:
            merged = _deep_merge(merged, project_data)
            logger.debug("Loaded project config from %s", project_path)

        for env_var, config_path in ENV_VAR_MAP.items():
            env_value = os.environ.get(env_var)
            if env_value is None:
                continue
            try:
                _set_nested(merged, config_path, coerce_value(config_path, env_value))
            except ConfigError as e:
                logger.warning("Ignoring %s: %s", env_var, e)

        self._resolved = ResolvedConfig(
            data=merged,
            global_config_path=global_path if global_path.is_file() else None,
            project_config_path=project_path if project_path.is_file() else None,
        )
        return self._resolved

    def get(self, dotted_key: str, default: Any = None) -> Any:
        return self.resolve().get(dotted_key, default)

    def get_provider_name(self) -> str:
        return self.get("providers.default", "ollama")

    def get_provider_model(self, provider: Optional[str] = None) -> str:
        provider = provider or self.get_provider_name()
        return self.get(f"providers.{provider}.model", "")

    def get_extensions(self) -> list[str]:
        return list(self.get("analysis.extensions", DEFAULT_EXTENSIONS))

    def get_max_content_bytes(self) -> int:
        return int(self.get("analysis.max_content_bytes", MAX_CONTENT_BYTES))

    def get_mode(self) -> str:
        return str(self.get("analysis.mode", "Structural"))

    def get_data_dir(self) -> Path:
        """Get the data directory, respecting CODEANALYZER_HOME."""
        env_home = os.environ.get("CODEANALYZER_HOME")
        if env_home:
            return Path(env_home).expanduser()
        return Path.home() / ".codeanalyzer"

    def get_criteria_dir(self) -> Path:
        """Directory of stored criteria templates."""
        configured = self.get("criteria.store_dir", "")
        if configured:
            return Path(configured).expanduser()
        return self.get_data_dir() / "criteria"

    def set_global(self, dotted_key: str, value: Any) -> None:
        """Set a value in the global config file."""
        path = _global_config_path()
        data = _read_toml(path)
        _set_nested(data, dotted_key, coerce_value(dotted_key, value))
        _write_toml(data, path)
        self._resolved = None
        logger.info("Set %s = %s in %s", dotted_key, value, path)

    def init_project_config(self) -> Path:
        """Create a .codeanalyzer.toml in the current directory with defaults."""
        path = _project_config_path()
        if path.exists():
            raise FileExistsError(f"Project config already exists: {path}")

        data = {
            "analysis": {
                "extensions": list(DEFAULT_EXTENSIONS),
                "mode": "Structural",
            },
            "providers": {
                "default": "ollama",
            },
        }
        _write_toml(data, path)
        logger.info("Created project config: %s", path)
        return path

    def show(self) -> dict:
        """Return the resolved config and the files it came from."""
        resolved = self.resolve(force=True)
        return {
            "resolved": resolved.data,
            "sources": {
                "global_config": str(resolved.global_config_path) if resolved.global_config_path else None,
                "project_config": str(resolved.project_config_path) if resolved.project_config_path else None,
            },
        }

    def config_paths(self) -> dict[str, str]:
        """Return all config file locations and their existence status."""
        global_path = _global_config_path()
        project_path = _project_config_path()
        criteria_dir = self.get_criteria_dir()
        return {
            "global_config": f"{global_path} ({'exists' if global_path.is_file() else 'not found'})",
            "project_config": f"{project_path} ({'exists' if project_path.is_file() else 'not found'})",
            "criteria_dir": f"{criteria_dir} ({'exists' if criteria_dir.exists() else 'not found'})",
        }


# Module-level singleton
_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create the global ConfigService instance."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def reset_config_service() -> None:
    """Reset the global config service (useful for testing)."""
    global _config_service
    _config_service = None
