"""Data models for project structure analysis results."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    """Architectural role assigned to a project file."""
    UNKNOWN = "Unknown"
    CONTROLLER = "Controller"
    BASE_CONTROLLER = "BaseController"
    PAGE = "Page"
    MODEL = "Model"
    DB_CONTEXT = "DbContext"
    MIGRATION = "Migration"
    CONFIG = "Config"
    SERVICE = "Service"
    PROGRAM = "Program"
    ENTITY = "Entity"


class AnalysisMode(str, Enum):
    """Whether a run reads content for every file or only where required."""
    STRUCTURAL = "Structural"
    FULL_CONTENT = "FullContent"

    @classmethod
    def parse(cls, value: str | AnalysisMode) -> AnalysisMode:
        """Accept enum members, values, or loose spellings like 'full' / 'full_content'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "").replace("-", "")
        if key in ("full", "fullcontent", "content"):
            return cls.FULL_CONTENT
        if key in ("structural", "structure", ""):
            return cls.STRUCTURAL
        raise ValueError(f"Unknown analysis mode: {value}")


class FileStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"


@dataclass
class FileOutcome:
    """Per-file result of the walk/classify boundary.

    A DEGRADED outcome means content could not be used (unreadable, too large,
    or the content pass failed) and the file was classified from its name and
    path only.
    """
    path: str
    status: FileStatus = FileStatus.OK
    reason: str = ""

    @property
    def degraded(self) -> bool:
        return self.status is FileStatus.DEGRADED


@dataclass
class ProjectFile:
    """One discovered file and its classification."""
    path: str  # root-relative, POSIX separators
    name: str
    extension: str  # lowercase, dot-prefixed
    size: int
    directory: str  # root-relative, "" for the root itself
    role: Role = Role.UNKNOWN
    roles: list[Role] = field(default_factory=list)
    content: str | None = None
    found_patterns: list[str] = field(default_factory=list)
    confidence: float = 0.0

    @property
    def stem(self) -> str:
        if self.extension and self.name.lower().endswith(self.extension):
            return self.name[: -len(self.extension)]
        return self.name


# Role -> ProjectStructure attribute holding that role's collection
ROLE_COLLECTIONS: dict[Role, str] = {
    Role.CONTROLLER: "controllers",
    Role.BASE_CONTROLLER: "base_controllers",
    Role.PAGE: "pages",
    Role.MODEL: "models",
    Role.DB_CONTEXT: "db_contexts",
    Role.MIGRATION: "migrations",
    Role.CONFIG: "config_files",
    Role.SERVICE: "services",
    Role.PROGRAM: "program_files",
    Role.ENTITY: "entities",
}


@dataclass
class ProjectStructure:
    """Aggregate snapshot of one analysis run."""
    root_path: str
    files: list[ProjectFile] = field(default_factory=list)
    controllers: list[ProjectFile] = field(default_factory=list)
    base_controllers: list[ProjectFile] = field(default_factory=list)
    pages: list[ProjectFile] = field(default_factory=list)
    models: list[ProjectFile] = field(default_factory=list)
    db_contexts: list[ProjectFile] = field(default_factory=list)
    migrations: list[ProjectFile] = field(default_factory=list)
    config_files: list[ProjectFile] = field(default_factory=list)
    services: list[ProjectFile] = field(default_factory=list)
    program_files: list[ProjectFile] = field(default_factory=list)
    entities: list[ProjectFile] = field(default_factory=list)
    database_connection_strings: list[str] = field(default_factory=list)
    migration_commands: list[str] = field(default_factory=list)
    outcomes: list[FileOutcome] = field(default_factory=list)
    error: str = ""

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_controllers(self) -> int:
        return len(self.controllers)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def has_db_context(self) -> bool:
        return bool(self.db_contexts)

    @property
    def has_migrations(self) -> bool:
        return bool(self.migrations)

    @property
    def has_database_connection(self) -> bool:
        return bool(self.database_connection_strings)

    @property
    def degraded_files(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.degraded]

    def collection(self, role: Role) -> list[ProjectFile]:
        """Return the collection for a role (an empty list for Unknown)."""
        attr = ROLE_COLLECTIONS.get(role)
        return getattr(self, attr) if attr else []

    def add_connection_string(self, value: str) -> bool:
        if value in self.database_connection_strings:
            return False
        self.database_connection_strings.append(value)
        return True

    def add_migration_command(self, value: str) -> bool:
        if value in self.migration_commands:
            return False
        self.migration_commands.append(value)
        return True

    def fail(self, message: str) -> None:
        """Mark the whole run as failed and drop any partial output."""
        self.error = message
        self.files.clear()
        for attr in ROLE_COLLECTIONS.values():
            getattr(self, attr).clear()
        self.database_connection_strings.clear()
        self.migration_commands.clear()
        self.outcomes.clear()
