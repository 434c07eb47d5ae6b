"""Project analyzer orchestrator.

Walks the project tree, classifies each file in two passes (name/path, then
content where available), and aggregates the results into a ProjectStructure.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from codeanalyzer.errors import AnalysisCancelledError

from .aggregator import StructureAggregator
from .content_classifier import classify_by_content
from .models import AnalysisMode, FileOutcome, FileStatus, ProjectFile, ProjectStructure
from .name_classifier import classify_by_name, requires_content
from .roles import RoleAccumulator
from .walker import MAX_CONTENT_BYTES, CancellationToken, FileWalker, read_file_text

logger = logging.getLogger(__name__)


class ProjectAnalyzer:
    """Classifies a project's files into architectural roles."""

    def __init__(
        self,
        max_content_bytes: int = MAX_CONTENT_BYTES,
        skip_dirs: Iterable[str] | None = None,
    ):
        self.max_content_bytes = max_content_bytes
        self.skip_dirs = skip_dirs

    @classmethod
    def from_config(cls) -> ProjectAnalyzer:
        """Build an analyzer with limits taken from the resolved configuration."""
        from codeanalyzer.core.config_service import get_config_service

        config = get_config_service()
        return cls(
            max_content_bytes=config.get_max_content_bytes(),
            skip_dirs=config.get("analysis.skip_dirs"),
        )

    def analyze(
        self,
        project_path: Path | str,
        extensions: Iterable[str] | None = None,
        mode: AnalysisMode = AnalysisMode.STRUCTURAL,
        cancel: CancellationToken | None = None,
    ) -> ProjectStructure:
        """Analyze a project directory and return a ProjectStructure.

        Never raises for problems inside the tree. A missing root or a
        cancelled scan is reported through ``structure.error`` with every
        collection left empty.

        Args:
            project_path: Root directory of the project to analyze.
            extensions: Extension allow-list; defaults to the C# project set.
            mode: FullContent reads every file; Structural only page templates.
            cancel: Optional token to abort the walk.
        """
        root = Path(project_path).expanduser().resolve()
        structure = ProjectStructure(root_path=str(root))
        mode = AnalysisMode.parse(mode)

        logger.info("Analyzing project structure: %s (%s)", root, mode.value)

        if not root.is_dir():
            structure.fail(f"Directory {root} does not exist")
            logger.warning(structure.error)
            return structure

        aggregator = StructureAggregator(structure, load_content=lambda f: self._load(root, f).content)
        walker = FileWalker(root, extensions, skip_dirs=self.skip_dirs, cancel=cancel)

        try:
            for project_file in walker.walk():
                outcome = self._classify_file(root, project_file, mode)
                structure.outcomes.append(outcome)
                aggregator.add(project_file)
        except FileNotFoundError as e:
            structure.fail(str(e))
            logger.warning(structure.error)
            return structure
        except AnalysisCancelledError as e:
            structure.fail(str(e))
            logger.info("Analysis of %s cancelled", root)
            return structure

        aggregator.scan_evidence()

        logger.info(
            "Structure analysis complete: %d files, %d controllers, %d pages, %d degraded",
            structure.total_files,
            structure.total_controllers,
            structure.total_pages,
            len(structure.degraded_files),
        )
        return structure

    def _load(self, root: Path, file: ProjectFile):
        return read_file_text(root / file.path, self.max_content_bytes)

    def _classify_file(self, root: Path, file: ProjectFile, mode: AnalysisMode) -> FileOutcome:
        """Run both passes for one file; content problems degrade, never raise."""
        outcome = FileOutcome(path=file.path)
        wants_content = mode is AnalysisMode.FULL_CONTENT or requires_content(file.extension)

        if wants_content:
            read = self._load(root, file)
            file.content = read.content
            if not read.ok:
                outcome.status = FileStatus.DEGRADED
                outcome.reason = read.reason

        acc = classify_by_name(file, RoleAccumulator(), content_expected=file.content is not None)

        if file.content is not None:
            before = acc.snapshot()
            try:
                classify_by_content(file, file.content, acc)
            except Exception as e:
                logger.warning("Content classification failed for %s: %s", file.path, e)
                acc = before
                outcome.status = FileStatus.DEGRADED
                outcome.reason = f"content classification failed: {e}"

        acc.finalize().apply(file)
        return outcome
