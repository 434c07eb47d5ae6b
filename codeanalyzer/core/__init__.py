"""Service layer for codeanalyzer.

All services return typed dataclasses. Services never import from
codeanalyzer.ui, codeanalyzer.cli, or typer. The CLI handles presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from codeanalyzer.analyzers.models import AnalysisMode, ProjectStructure
from codeanalyzer.criteria.models import AnalysisCriteria, CriteriaCheckResult, CriteriaTemplate


@dataclass
class AnalysisRequest:
    """One analysis request: where to look, what to read and what to check."""

    folder_path: str
    extensions: list[str] | None = None
    mode: AnalysisMode = AnalysisMode.STRUCTURAL
    criteria: list[AnalysisCriteria] = field(default_factory=list)
    use_ai: bool = False
    custom_prompt: str = ""


@dataclass
class CriteriaSummary:
    """Pass/fail counts over one request's criteria results."""

    total: int
    passed: int
    failed: int
    message: str

    @classmethod
    def from_results(cls, results: list[CriteriaCheckResult]) -> CriteriaSummary:
        passed = sum(1 for r in results if r.passed)
        return cls(
            total=len(results),
            passed=passed,
            failed=len(results) - passed,
            message=f"Criteria checked: {len(results)}, passed: {passed}",
        )


@dataclass
class AnalysisResponse:
    """Everything an analysis request produced."""

    success: bool
    structure: ProjectStructure | None = None
    results: list[CriteriaCheckResult] = field(default_factory=list)
    error: str = ""
    analysis_time: float = 0.0
    ai_analysis: str = ""
    summary: CriteriaSummary | None = None


@dataclass
class TemplateCategory:
    """Stored criteria templates grouped under one category."""

    name: str
    templates: list[CriteriaTemplate] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.templates)
