"""Structure properties that criteria rules can reference.

Every name a rule may use maps to a StructureProperty member through an
explicit alias table; anything not in the table resolves to 0.
"""
from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from codeanalyzer.analyzers.models import ProjectFile, ProjectStructure, Role


class StructureProperty(str, Enum):
    CONTROLLERS_COUNT = "controllers_count"
    CONTROLLERS_EXCLUDING_BASE = "controllers_count_excluding_base"
    CONTROLLERS_EXCLUDING_BASE_ABSTRACT = "controllers_count_excluding_base_abstract"
    CONTROLLERS_EXCLUDING_SPECIFIC = "controllers_count_excluding_specific"
    BASE_CONTROLLERS_COUNT = "base_controllers_count"
    PAGES_COUNT = "pages_count"
    DBCONTEXT_COUNT = "dbcontext_count"
    MIGRATIONS_COUNT = "migrations_count"
    SERVICES_COUNT = "services_count"
    FILES_COUNT = "files_count"
    CONFIG_FILES_COUNT = "config_files_count"
    MODELS_COUNT = "models_count"
    ENTITIES_COUNT = "entities_count"
    PROGRAM_FILES_COUNT = "program_files_count"
    HAS_DATABASE_CONNECTION = "has_database_connection"
    DATABASE_CONNECTIONS_COUNT = "database_connections_count"
    MIGRATION_COMMANDS_COUNT = "migration_commands_count"


# Extra spellings accepted for a property, on top of each member's own value
PROPERTY_ALIASES: dict[str, StructureProperty] = {
    "controllers": StructureProperty.CONTROLLERS_COUNT,
    "controllers_without_base": StructureProperty.CONTROLLERS_COUNT,
    "base_controllers": StructureProperty.BASE_CONTROLLERS_COUNT,
    "pages": StructureProperty.PAGES_COUNT,
    "dbcontext": StructureProperty.DBCONTEXT_COUNT,
    "dbcontexts": StructureProperty.DBCONTEXT_COUNT,
    "migrations": StructureProperty.MIGRATIONS_COUNT,
    "services": StructureProperty.SERVICES_COUNT,
    "files": StructureProperty.FILES_COUNT,
    "config": StructureProperty.CONFIG_FILES_COUNT,
    "config_files": StructureProperty.CONFIG_FILES_COUNT,
    "models": StructureProperty.MODELS_COUNT,
    "entities": StructureProperty.ENTITIES_COUNT,
    "program_files": StructureProperty.PROGRAM_FILES_COUNT,
}


def _count_controllers_excluding(*keywords: str) -> Callable[[ProjectStructure], int]:
    def count(structure: ProjectStructure) -> int:
        return sum(
            1 for f in structure.controllers
            if not any(k in f.name.lower() for k in keywords)
        )
    return count


def _is_base_controller(file: ProjectFile) -> bool:
    return "base" in file.name.lower() or file.role is Role.BASE_CONTROLLER


def _controllers_without_base(structure: ProjectStructure) -> int:
    return sum(1 for f in structure.controllers if not _is_base_controller(f))


def _controllers_excluding_specific(structure: ProjectStructure) -> int:
    return sum(1 for f in structure.controllers if f.stem.lower() != "basecontroller")


PROPERTY_RESOLVERS: dict[StructureProperty, Callable[[ProjectStructure], int]] = {
    StructureProperty.CONTROLLERS_COUNT: _controllers_without_base,
    StructureProperty.CONTROLLERS_EXCLUDING_BASE: _count_controllers_excluding("base"),
    StructureProperty.CONTROLLERS_EXCLUDING_BASE_ABSTRACT: _count_controllers_excluding(
        "base", "abstract", "generic"
    ),
    StructureProperty.CONTROLLERS_EXCLUDING_SPECIFIC: _controllers_excluding_specific,
    StructureProperty.BASE_CONTROLLERS_COUNT: lambda s: len(s.base_controllers),
    StructureProperty.PAGES_COUNT: lambda s: s.total_pages,
    StructureProperty.DBCONTEXT_COUNT: lambda s: len(s.db_contexts),
    StructureProperty.MIGRATIONS_COUNT: lambda s: len(s.migrations),
    StructureProperty.SERVICES_COUNT: lambda s: len(s.services),
    StructureProperty.FILES_COUNT: lambda s: s.total_files,
    StructureProperty.CONFIG_FILES_COUNT: lambda s: len(s.config_files),
    StructureProperty.MODELS_COUNT: lambda s: len(s.models),
    StructureProperty.ENTITIES_COUNT: lambda s: len(s.entities),
    StructureProperty.PROGRAM_FILES_COUNT: lambda s: len(s.program_files),
    StructureProperty.HAS_DATABASE_CONNECTION: lambda s: 1 if s.has_database_connection else 0,
    StructureProperty.DATABASE_CONNECTIONS_COUNT: lambda s: len(s.database_connection_strings),
    StructureProperty.MIGRATION_COMMANDS_COUNT: lambda s: len(s.migration_commands),
}


def lookup_property(name: str) -> StructureProperty | None:
    """Map a rule's property name (case-insensitive) to a StructureProperty."""
    key = (name or "").strip().lower()
    try:
        return StructureProperty(key)
    except ValueError:
        return PROPERTY_ALIASES.get(key)


def resolve_property(name: str, structure: ProjectStructure) -> int:
    """Return the integer value of a property; unknown names resolve to 0."""
    prop = lookup_property(name)
    if prop is None:
        return 0
    return PROPERTY_RESOLVERS[prop](structure)


def property_names() -> list[str]:
    """All accepted property names, canonical names first."""
    return [p.value for p in StructureProperty] + sorted(PROPERTY_ALIASES)
