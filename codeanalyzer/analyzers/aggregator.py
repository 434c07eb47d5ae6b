"""Structure aggregator.

Sorts classified files into role collections and scans the entry point and
configuration files for database connection strings and migration calls.
The evidence scan is best-effort: failures are logged and skipped.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Optional

from .models import ProjectFile, ProjectStructure, Role

logger = logging.getLogger(__name__)

# Ordered; a capture group, when present, is the connection string itself
CONNECTION_STRING_PATTERNS: list[re.Pattern] = [
    re.compile(r'\.Use(?:SqlServer|Npgsql|MySql|Sqlite|Oracle)\s*\(\s*@?"([^"]+)"'),
    re.compile(r'GetConnectionString\s*\(\s*"([^"]+)"\s*\)'),
    re.compile(
        r'"[\w.]*Connection[\w.]*"\s*:\s*"([^"]*(?:Server|Data Source|Host|Database|Filename)\s*=[^"]*)"',
        re.IGNORECASE,
    ),
    re.compile(r'"ConnectionString"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'\bconnectionString\s*=\s*"([^"]+)"', re.IGNORECASE),
]

MIGRATION_COMMAND_PATTERNS: list[re.Pattern] = [
    re.compile(r"\.Database\.Migrate\s*\(\s*\)"),
    re.compile(r"\.Database\.MigrateAsync\s*\("),
    re.compile(r"\.Database\.EnsureCreated(?:Async)?\s*\("),
    re.compile(r"GetRequiredService\s*<\s*\w*DbContext\s*>\s*\(\s*\)[^;\n]*\.Migrate(?:Async)?\s*\("),
]

ContentLoader = Callable[[ProjectFile], Optional[str]]


class StructureAggregator:
    """Accumulates classified files into a ProjectStructure."""

    def __init__(self, structure: ProjectStructure, load_content: ContentLoader | None = None):
        self.structure = structure
        self._load_content = load_content

    def add(self, file: ProjectFile) -> None:
        """Append a file to the full list and to every collection its roles imply."""
        self.structure.files.append(file)
        targets: list[Role] = []
        for role in file.roles:
            targets.append(role)
            if role is Role.BASE_CONTROLLER:
                targets.append(Role.CONTROLLER)
        for role in targets:
            bucket = self.structure.collection(role)
            if not any(existing is file for existing in bucket):
                bucket.append(file)

    def scan_evidence(self) -> None:
        """Extract connection strings and migration commands from entry point and config files."""
        candidates: list[ProjectFile] = []
        for file in self.structure.program_files + self.structure.config_files:
            if not any(c is file for c in candidates):
                candidates.append(file)

        for file in candidates:
            try:
                content = file.content
                if content is None and self._load_content is not None:
                    content = self._load_content(file)
                if not content:
                    continue
                self._extract_connection_strings(file, content)
                self._extract_migration_commands(file, content)
            except Exception as e:
                logger.warning("Evidence scan failed for %s: %s", file.path, e)

    def _extract_connection_strings(self, file: ProjectFile, content: str) -> None:
        for pattern in CONNECTION_STRING_PATTERNS:
            for match in pattern.finditer(content):
                value = match.group(1) if pattern.groups else match.group(0)
                value = value.strip()
                if value and self.structure.add_connection_string(value):
                    logger.debug("Connection string in %s: %s", file.path, value)

    def _extract_migration_commands(self, file: ProjectFile, content: str) -> None:
        lines = content.splitlines()
        for pattern in MIGRATION_COMMAND_PATTERNS:
            for line in lines:
                if pattern.search(line):
                    self.structure.add_migration_command(line.strip())
