"""Criteria template management: CRUD, duplication, categories and defaults."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from codeanalyzer.core import TemplateCategory
from codeanalyzer.core.criteria_store import CriteriaStore, YamlCriteriaStore
from codeanalyzer.criteria.models import AnalysisCriteria, CriteriaRule, CriteriaTemplate, new_id, utc_now
from codeanalyzer.errors import CriteriaNotFoundError, CriteriaValidationError

logger = logging.getLogger("codeanalyzer.core.criteria")

# Installed by `codeanalyzer criteria init`
DEFAULT_TEMPLATES: list[dict[str, Any]] = [
    {
        "id": "controllers-present",
        "name": "Controllers present",
        "description": "The project has at least one controller besides base controllers",
        "category": "Architecture",
        "priority": 1,
        "rules": [
            {"property": "controllers_count", "operator": "greater_than_or_equal", "value": "1",
             "error_message": "Add at least one controller"},
        ],
    },
    {
        "id": "data-access",
        "name": "Data access layer",
        "description": "A DbContext exists and a database connection is configured",
        "category": "Data",
        "priority": 1,
        "rules": [
            {"property": "dbcontext_count", "operator": "exists", "value": "true"},
            {"property": "has_database_connection", "operator": "equals", "value": "1",
             "error_message": "No connection string found in Program.cs or configuration files"},
        ],
    },
    {
        "id": "migrations-present",
        "name": "Migrations",
        "description": "The database schema is managed with migrations",
        "category": "Data",
        "priority": 2,
        "rules": [
            {"property": "migrations_count", "operator": "greater_than_or_equal", "value": "1"},
        ],
    },
    {
        "id": "pages-present",
        "name": "Routed pages",
        "description": "The project exposes at least two routed pages",
        "category": "UI",
        "priority": 2,
        "type": "FullContent",
        "rules": [
            {"property": "pages_count", "operator": "greater_than_or_equal", "value": "2"},
        ],
    },
    {
        "id": "service-layer",
        "name": "Service layer",
        "description": "Business logic lives in services",
        "category": "Architecture",
        "priority": 3,
        "rules": [
            {"property": "services_count", "operator": "exists"},
        ],
    },
]


def validate_template_data(data: dict[str, Any]) -> list[str]:
    """Return a list of validation errors (empty when valid)."""
    errors = []
    if not str(data.get("name") or "").strip():
        errors.append("Criterion name is required")
    if not str(data.get("description") or "").strip():
        errors.append("Criterion description is required")
    rules = data.get("rules") or []
    if not rules:
        errors.append("Add at least one rule")
    for i, rule in enumerate(rules, 1):
        if not isinstance(rule, dict):
            errors.append(f"Rule {i} must be a mapping")
            continue
        if not str(rule.get("property") or "").strip():
            errors.append(f"Rule {i}: property is required")
        if not str(rule.get("operator") or "").strip():
            errors.append(f"Rule {i}: operator is required")
    return errors


class CriteriaService:
    """Manages stored criteria templates."""

    def __init__(self, store: Optional[CriteriaStore] = None):
        if store is None:
            from codeanalyzer.core.config_service import get_config_service
            store = YamlCriteriaStore(get_config_service().get_criteria_dir())
        self.store = store

    def list_templates(self, include_inactive: bool = True) -> list[CriteriaTemplate]:
        """All templates sorted by priority then name; unreadable entries are skipped."""
        templates = []
        for key in self.store.keys():
            try:
                template = self.store.get(key)
            except Exception as e:
                logger.warning("Failed to load criteria template %s: %s", key, e)
                continue
            if template is None:
                continue
            if include_inactive or template.is_active:
                templates.append(template)
        return sorted(templates, key=lambda t: (t.priority, t.name))

    def get_template(self, criteria_id: str) -> CriteriaTemplate:
        """Load one template.

        Raises:
            CriteriaNotFoundError: If no template has this id.
        """
        try:
            template = self.store.get(criteria_id)
        except ValueError:
            template = None
        if template is None:
            raise CriteriaNotFoundError(criteria_id, self._store_location())
        return template

    def create_template(self, data: dict[str, Any], created_by: str = "system") -> CriteriaTemplate:
        """Validate and store a new template with a fresh id and timestamps.

        Raises:
            CriteriaValidationError: If the data is incomplete.
        """
        errors = validate_template_data(data)
        if errors:
            raise CriteriaValidationError(errors, str(data.get("name") or ""))

        template = CriteriaTemplate.from_dict({**data, "id": None, "created_by": created_by})
        template.id = new_id()
        template.created_at = template.updated_at = utc_now()
        self.store.put(template)
        logger.info("Created criteria template '%s' (%s)", template.name, template.id)
        return template

    def update_template(self, criteria_id: str, data: dict[str, Any]) -> CriteriaTemplate:
        """Replace a template's content, keeping its id, author and creation time.

        Raises:
            CriteriaNotFoundError: If no template has this id.
            CriteriaValidationError: If the data is incomplete.
        """
        existing = self.get_template(criteria_id)
        merged = {**existing.to_dict(), **data}
        errors = validate_template_data(merged)
        if errors:
            raise CriteriaValidationError(errors, str(merged.get("name") or ""))

        template = CriteriaTemplate.from_dict(merged)
        template.id = existing.id
        template.created_at = existing.created_at
        template.created_by = existing.created_by
        template.touch()
        self.store.put(template)
        logger.info("Updated criteria template %s", criteria_id)
        return template

    def delete_template(self, criteria_id: str) -> None:
        """Raises CriteriaNotFoundError if the template does not exist."""
        try:
            deleted = self.store.delete(criteria_id)
        except ValueError:
            deleted = False
        if not deleted:
            raise CriteriaNotFoundError(criteria_id, self._store_location())
        logger.info("Deleted criteria template %s", criteria_id)

    def duplicate_template(self, criteria_id: str) -> CriteriaTemplate:
        """Copy a template under a new id, named ``"<name> (Copy)"``."""
        original = self.get_template(criteria_id)
        copy = CriteriaTemplate(
            name=f"{original.name} (Copy)",
            description=original.description,
            type=original.type,
            rules=[CriteriaRule(**vars(r)) for r in original.rules],
            category=original.category,
            priority=original.priority,
            is_active=original.is_active,
        )
        self.store.put(copy)
        logger.info("Duplicated criteria template %s -> %s", criteria_id, copy.id)
        return copy

    def categories(self) -> list[TemplateCategory]:
        """Templates grouped by category, categories sorted by name."""
        grouped: dict[str, TemplateCategory] = {}
        for template in self.list_templates():
            grouped.setdefault(template.category, TemplateCategory(template.category)).templates.append(template)
        return [grouped[name] for name in sorted(grouped)]

    def user_criteria(self, user_id: str) -> list[CriteriaTemplate]:
        """Templates created by one user."""
        return [t for t in self.list_templates() if t.created_by == user_id]

    def add_user_criteria(self, user_id: str, data: dict[str, Any]) -> CriteriaTemplate:
        return self.create_template(data, created_by=user_id)

    def update_user_criteria(self, user_id: str, criteria_id: str, data: dict[str, Any]) -> CriteriaTemplate:
        self._require_owner(user_id, criteria_id)
        return self.update_template(criteria_id, data)

    def delete_user_criteria(self, user_id: str, criteria_id: str) -> None:
        self._require_owner(user_id, criteria_id)
        self.delete_template(criteria_id)

    def to_analysis_criteria(self, ids: Optional[Iterable[str]] = None) -> list[AnalysisCriteria]:
        """Convert templates to evaluable criteria.

        With ``ids`` the given templates are returned in that order; without,
        every active template is.
        """
        if ids is None:
            return [t.to_criteria() for t in self.list_templates(include_inactive=False)]
        return [self.get_template(i).to_criteria() for i in ids]

    def install_defaults(self, overwrite: bool = False) -> list[CriteriaTemplate]:
        """Store the built-in templates; existing ids are kept unless ``overwrite``."""
        installed = []
        existing = set(self.store.keys())
        for data in DEFAULT_TEMPLATES:
            if data["id"] in existing and not overwrite:
                continue
            template = CriteriaTemplate.from_dict(data)
            self.store.put(template)
            installed.append(template)
        logger.info("Installed %d default criteria templates", len(installed))
        return installed

    def _require_owner(self, user_id: str, criteria_id: str) -> None:
        template = self.get_template(criteria_id)
        if template.created_by != user_id:
            raise CriteriaNotFoundError(criteria_id)

    def _store_location(self) -> str:
        directory = getattr(self.store, "directory", None)
        return str(directory) if directory is not None else ""
