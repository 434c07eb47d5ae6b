"""Key-value storage for criteria templates.

CriteriaService talks to a CriteriaStore rather than the filesystem, so tests
and embedders can swap in the in-memory store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

import yaml

from codeanalyzer.criteria.models import CriteriaTemplate

logger = logging.getLogger("codeanalyzer.core.criteria_store")


@runtime_checkable
class CriteriaStore(Protocol):
    """Protocol for template storage backends."""

    def get(self, key: str) -> Optional[CriteriaTemplate]: ...
    def put(self, template: CriteriaTemplate) -> None: ...
    def delete(self, key: str) -> bool: ...
    def keys(self) -> list[str]: ...


class InMemoryCriteriaStore:
    """Dict-backed store; contents live as long as the instance."""

    def __init__(self):
        self._templates: dict[str, CriteriaTemplate] = {}

    def get(self, key: str) -> Optional[CriteriaTemplate]:
        return self._templates.get(key)

    def put(self, template: CriteriaTemplate) -> None:
        self._templates[template.id] = template

    def delete(self, key: str) -> bool:
        return self._templates.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._templates)


class YamlCriteriaStore:
    """One ``<id>.yaml`` file per template under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid criteria id: {key!r}")
        return self.directory / f"{key}.yaml"

    def get(self, key: str) -> Optional[CriteriaTemplate]:
        """Load a template; a missing file is None, a corrupt one raises."""
        path = self._path(key)
        if not path.is_file():
            return None
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} does not contain a mapping")
        template = CriteriaTemplate.from_dict(data)
        template.id = key
        return template

    def put(self, template: CriteriaTemplate) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(template.id)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(template.to_dict(), f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        logger.debug("Saved criteria template %s", path)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.yaml"))
