"""Name/path classifier (pass 1).

Assigns candidate roles from a file's name, extension and directory alone.
Rules fire in a fixed order; the first role assigned becomes the primary role
unless the content pass later promotes another one.
"""
from __future__ import annotations

import logging

from .models import ProjectFile, Role
from .roles import RoleAccumulator

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".cs"
ENTRY_POINT_NAME = "program.cs"
PAGE_EXTENSIONS: set[str] = {".razor", ".cshtml"}
CONFIG_EXTENSIONS: set[str] = {".json", ".config"}
CONFIG_NAME_MARKERS: tuple[str, ...] = ("appsettings",)


def requires_content(extension: str) -> bool:
    """Return True if files with this extension cannot be classified without content."""
    return extension.lower() in PAGE_EXTENSIONS


def classify_by_name(
    file: ProjectFile,
    acc: RoleAccumulator,
    content_expected: bool = False,
) -> RoleAccumulator:
    """Run every name/path rule against ``file`` and record hits in ``acc``.

    Args:
        file: The file to classify (content is not consulted).
        acc: Accumulator to record roles into.
        content_expected: Whether the content pass will run for this file.
            Decides how much weight a page-template extension carries on its own.

    Returns:
        The same accumulator, for chaining.
    """
    stem = file.stem
    stem_lower = stem.lower()
    name_lower = file.name.lower()
    directory_lower = file.directory.lower()
    is_source = file.extension == SOURCE_EXTENSION

    # 1-2. Controllers; a base controller name never counts as a plain controller
    if is_source and "basecontroller" in stem_lower:
        acc.add(Role.BASE_CONTROLLER, 0.3, "base controller name match")
    elif is_source and (
        stem_lower.endswith("controller")
        or ("Controller" in stem and "base" not in stem_lower)
    ):
        acc.add(Role.CONTROLLER, 0.9, "controller name match")

    # 3. Data contexts
    if is_source and "context" in stem_lower:
        if stem_lower.endswith("context"):
            acc.add(Role.DB_CONTEXT, 0.95, "name ends with Context")
        else:
            acc.add(Role.DB_CONTEXT, 0.7, "name contains Context")

    # 4. Migrations
    if is_source and ("migration" in directory_lower or "migration" in stem_lower):
        where = "directory" if "migration" in directory_lower else "name"
        acc.add(Role.MIGRATION, 0.9, f"migration {where} match")

    # 5. Entry point
    if name_lower == ENTRY_POINT_NAME:
        acc.add(Role.PROGRAM, 1.0, "entry point file")

    # 6. Page templates: tentative until the content pass confirms a route
    if file.extension in PAGE_EXTENSIONS:
        if content_expected:
            acc.add(Role.PAGE, 0.3, "page template extension")
        else:
            acc.add(Role.PAGE, 0.95, "page template extension (content unavailable)")

    # 7. Configuration
    if any(marker in name_lower for marker in CONFIG_NAME_MARKERS):
        acc.add(Role.CONFIG, 0.9, "configuration file name")
    elif file.extension in CONFIG_EXTENSIONS:
        acc.add(Role.CONFIG, 0.9, f"configuration extension {file.extension}")

    # 8. Services
    if is_source and (stem_lower.endswith("service") or "service" in directory_lower):
        acc.add(Role.SERVICE, 0.8, "service name or directory match")

    # 9. Domain types by folder convention
    if is_source and "models" in _dir_parts(directory_lower):
        acc.add(Role.MODEL, 0.6, "models directory")
    if is_source and "entities" in _dir_parts(directory_lower):
        acc.add(Role.ENTITY, 0.6, "entities directory")

    if acc.scores:
        logger.debug("Name rules for %s: %s", file.path, [r.value for r in acc.scores])
    return acc


def _dir_parts(directory: str) -> set[str]:
    return {part for part in directory.replace("\\", "/").split("/") if part}
