"""Analysis request service.

Validates a request, runs the structure analysis and the criteria evaluation,
optionally asks an AI provider for a narrative, and serializes the result.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from codeanalyzer.analyzers.ai_analyzer import generate_ai_analysis
from codeanalyzer.analyzers.models import AnalysisMode, ProjectFile, ProjectStructure
from codeanalyzer.analyzers.project_analyzer import ProjectAnalyzer
from codeanalyzer.analyzers.walker import CancellationToken
from codeanalyzer.core import AnalysisRequest, AnalysisResponse, CriteriaSummary
from codeanalyzer.criteria.evaluator import evaluate_criteria
from codeanalyzer.providers.base import AIProvider

logger = logging.getLogger("codeanalyzer.core.analysis")

FOLDER_REQUIRED = "Folder path is required"


def file_to_dict(file: ProjectFile, include_content: bool = False) -> dict[str, Any]:
    d: dict[str, Any] = {
        "path": file.path,
        "name": file.name,
        "extension": file.extension,
        "size": file.size,
        "directory": file.directory,
        "role": file.role.value,
        "roles": [r.value for r in file.roles],
        "confidence": file.confidence,
        "found_patterns": list(file.found_patterns),
    }
    if include_content:
        d["content"] = file.content
    return d


def structure_to_dict(structure: ProjectStructure, include_content: bool = False) -> dict[str, Any]:
    """Field-for-field JSON-ready view of a ProjectStructure.

    Role collections are emitted as lists of file paths since they reference
    entries of ``files``.
    """
    def paths(files: list[ProjectFile]) -> list[str]:
        return [f.path for f in files]

    return {
        "root_path": structure.root_path,
        "error": structure.error,
        "total_files": structure.total_files,
        "total_controllers": structure.total_controllers,
        "total_pages": structure.total_pages,
        "has_db_context": structure.has_db_context,
        "has_migrations": structure.has_migrations,
        "has_database_connection": structure.has_database_connection,
        "files": [file_to_dict(f, include_content) for f in structure.files],
        "controllers": paths(structure.controllers),
        "base_controllers": paths(structure.base_controllers),
        "pages": paths(structure.pages),
        "models": paths(structure.models),
        "db_contexts": paths(structure.db_contexts),
        "migrations": paths(structure.migrations),
        "config_files": paths(structure.config_files),
        "services": paths(structure.services),
        "program_files": paths(structure.program_files),
        "entities": paths(structure.entities),
        "database_connection_strings": list(structure.database_connection_strings),
        "migration_commands": list(structure.migration_commands),
        "outcomes": [
            {"path": o.path, "status": o.status.value, "reason": o.reason}
            for o in structure.outcomes
        ],
    }


def response_to_dict(response: AnalysisResponse, include_content: bool = False) -> dict[str, Any]:
    summary = response.summary
    return {
        "success": response.success,
        "error": response.error,
        "analysis_time": round(response.analysis_time, 3),
        "structure": (
            structure_to_dict(response.structure, include_content)
            if response.structure is not None else None
        ),
        "results": [r.to_dict() for r in response.results],
        "ai_analysis": response.ai_analysis,
        "summary": (
            {
                "total": summary.total,
                "passed": summary.passed,
                "failed": summary.failed,
                "message": summary.message,
            }
            if summary is not None else None
        ),
    }


class AnalysisService:
    """Runs analysis requests end to end."""

    def __init__(
        self,
        analyzer: Optional[ProjectAnalyzer] = None,
        provider: Optional[AIProvider] = None,
    ):
        self.analyzer = analyzer or ProjectAnalyzer.from_config()
        self._provider = provider

    def _get_provider(self) -> AIProvider:
        if self._provider is None:
            from codeanalyzer.providers import get_provider
            self._provider = get_provider()
        return self._provider

    def analyze_structure(
        self,
        folder_path: str,
        extensions: Optional[list[str]] = None,
        mode: AnalysisMode = AnalysisMode.STRUCTURAL,
        cancel: Optional[CancellationToken] = None,
    ) -> ProjectStructure:
        """Structure-only analysis (no criteria, no AI)."""
        return self.analyzer.analyze(folder_path, extensions, mode=mode, cancel=cancel)

    def analyze(
        self,
        request: AnalysisRequest,
        cancel: Optional[CancellationToken] = None,
    ) -> AnalysisResponse:
        """Run one request. Never raises for analysis problems."""
        if not request.folder_path or not request.folder_path.strip():
            return AnalysisResponse(success=False, error=FOLDER_REQUIRED)

        logger.info(
            "Analysis request: path=%s, criteria=%d, use_ai=%s, custom_prompt=%s",
            request.folder_path, len(request.criteria), request.use_ai,
            bool(request.custom_prompt),
        )

        started = time.perf_counter()
        mode = AnalysisMode.parse(request.mode)
        structure = self.analyze_structure(
            request.folder_path.strip(), request.extensions, mode=mode, cancel=cancel,
        )

        if structure.error:
            return AnalysisResponse(
                success=False,
                structure=structure,
                error=structure.error,
                analysis_time=time.perf_counter() - started,
            )

        results = evaluate_criteria(structure, request.criteria, mode)
        elapsed = time.perf_counter() - started

        ai_analysis = ""
        if request.use_ai:
            try:
                provider = self._get_provider()
            except Exception as e:
                logger.warning("No AI provider available: %s", e)
                ai_analysis = f"AI analysis error: {e}"
            else:
                ai_analysis = generate_ai_analysis(
                    structure, request.criteria, results, provider, request.custom_prompt,
                )

        return AnalysisResponse(
            success=True,
            structure=structure,
            results=results,
            analysis_time=elapsed,
            ai_analysis=ai_analysis,
            summary=CriteriaSummary.from_results(results),
        )
