"""Criteria data models: rules, criteria, check results and stored templates."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class CriteriaType(str, Enum):
    """Which analysis mode a criterion needs."""
    STRUCTURAL = "Structural"
    FULL_CONTENT = "FullContent"

    @classmethod
    def parse(cls, value: str | CriteriaType | None) -> CriteriaType:
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("_", "").replace("-", "")
        if key in ("fullcontent", "full", "content"):
            return cls.FULL_CONTENT
        return cls.STRUCTURAL


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CriteriaRule:
    """One property comparison. Values are kept as strings and parsed at evaluation."""
    property: str
    operator: str = "exists"
    value: str = ""
    error_message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CriteriaRule:
        value = data.get("value", "")
        if isinstance(value, bool):
            value = "true" if value else "false"
        return cls(
            property=str(data.get("property", "")),
            operator=str(data.get("operator") or "exists"),
            value="" if value is None else str(value),
            error_message=str(data.get("error_message") or data.get("errorMessage") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "property": self.property,
            "operator": self.operator,
            "value": self.value,
        }
        if self.error_message:
            d["error_message"] = self.error_message
        return d


@dataclass
class AnalysisCriteria:
    """A named set of rules joined by AND."""
    name: str
    description: str = ""
    type: CriteriaType = CriteriaType.STRUCTURAL
    rules: list[CriteriaRule] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisCriteria:
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            type=CriteriaType.parse(data.get("type")),
            rules=[CriteriaRule.from_dict(r) for r in data.get("rules") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "rules": [r.to_dict() for r in self.rules],
        }


@dataclass
class CriteriaCheckResult:
    """Outcome of evaluating one criterion."""
    criteria_id: str
    criteria_name: str
    passed: bool
    message: str
    evidence: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "criteria_id": self.criteria_id,
            "criteria_name": self.criteria_name,
            "passed": self.passed,
            "message": self.message,
            "evidence": list(self.evidence),
        }


@dataclass
class CriteriaTemplate:
    """A stored criterion plus catalogue metadata."""
    name: str
    description: str = ""
    type: CriteriaType = CriteriaType.STRUCTURAL
    rules: list[CriteriaRule] = field(default_factory=list)
    category: str = "General"
    priority: int = 1
    is_active: bool = True
    created_by: str = "system"
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CriteriaTemplate:
        """Build from a YAML/JSON mapping; missing metadata gets defaults."""
        template = cls(
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            type=CriteriaType.parse(data.get("type")),
            rules=[CriteriaRule.from_dict(r) for r in data.get("rules") or []],
            category=str(data.get("category") or "General"),
            priority=int(data.get("priority", 1)),
            is_active=bool(data.get("is_active", True)),
            created_by=str(data.get("created_by") or "system"),
        )
        if data.get("id"):
            template.id = str(data["id"])
        if data.get("created_at"):
            template.created_at = str(data["created_at"])
        if data.get("updated_at"):
            template.updated_at = str(data["updated_at"])
        return template

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "category": self.category,
            "priority": self.priority,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "rules": [r.to_dict() for r in self.rules],
        }

    def to_criteria(self) -> AnalysisCriteria:
        return AnalysisCriteria(
            id=self.id,
            name=self.name,
            description=self.description,
            type=self.type,
            rules=[CriteriaRule(**vars(r)) for r in self.rules],
        )

    def touch(self) -> None:
        self.updated_at = utc_now()
