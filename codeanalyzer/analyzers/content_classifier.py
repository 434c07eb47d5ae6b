"""Content classifier (pass 2).

Inspects file text for structural markers: inheritance, attributes and page
directives. Textual markers are less ambiguous than naming conventions, so these
rules raise confidences above anything the name rules can assign and may change
which role is primary.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .models import ProjectFile, Role
from .name_classifier import PAGE_EXTENSIONS
from .roles import RoleAccumulator

logger = logging.getLogger(__name__)

# Name, optional type parameters, optional primary-constructor parameters, then
# the base list up to the opening brace (or ';' for a bodiless declaration)
CLASS_HEADER_RE = re.compile(
    r"\bclass\s+(?P<name>\w+)\s*(?:<[^>{;]*>)?\s*(?:\([^){;]*\))?\s*:(?P<bases>[^{;]*)"
)
GENERIC_ARGS_RE = re.compile(r"<[^<>]*>")
CALL_ARGS_RE = re.compile(r"\([^()]*\)")
WHERE_CLAUSE_RE = re.compile(r"\bwhere\b")
INTERFACE_NAME_RE = re.compile(r"^I[A-Z]")
CONTROLLER_BASES = ("Controller", "ControllerBase")
DB_CONTEXT_BASES = ("DbContext",)
API_CONTROLLER_RE = re.compile(r"\[\s*ApiController\s*\]")
MIGRATION_MARKERS: list[re.Pattern] = [
    re.compile(r"\[\s*Migration\s*\(\s*\""),
    re.compile(r"\busing\s+Microsoft\.EntityFrameworkCore\.Migrations\s*;"),
]
PARTIAL_CLASS_RE = re.compile(r"\bpartial\s+class\b")
ENTITY_MARKERS: list[re.Pattern] = [
    re.compile(r"\[\s*Table\s*\("),
    re.compile(r"\[\s*Key\s*\]"),
]
PAGE_DIRECTIVE_RE = re.compile(r'^@page\b(?:[ \t]+"([^"\n]*)")?', re.MULTILINE | re.IGNORECASE)


@dataclass
class ClassHeader:
    name: str
    modifiers: list[str]
    bases: list[str]

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    def derives_from(self, suffixes: tuple[str, ...]) -> bool:
        """True if a base type (not an interface) ends with one of ``suffixes``."""
        return any(
            base.endswith(suffixes) and not INTERFACE_NAME_RE.match(base)
            for base in self.bases
        )


def _base_types(base_list: str) -> list[str]:
    """Simple names of the top-level entries of a base list.

    Type arguments and base-constructor arguments are removed first, so only
    the types actually derived from or implemented remain.
    """
    text, previous = base_list, None
    while text != previous:
        previous = text
        text = CALL_ARGS_RE.sub("", GENERIC_ARGS_RE.sub("", text))
    text = WHERE_CLAUSE_RE.split(text, 1)[0]
    names = []
    for part in text.split(","):
        part = part.strip()
        if part:
            names.append(re.split(r"[.:]", part)[-1].strip())
    return names


def class_headers(content: str) -> list[ClassHeader]:
    """Every class declaration in ``content`` that has a base list."""
    headers = []
    for match in CLASS_HEADER_RE.finditer(content):
        line_start = content.rfind("\n", 0, match.start()) + 1
        headers.append(ClassHeader(
            name=match.group("name"),
            modifiers=content[line_start:match.start()].split(),
            bases=_base_types(match.group("bases")),
        ))
    return headers


def classify_by_content(file: ProjectFile, content: str, acc: RoleAccumulator) -> RoleAccumulator:
    """Refine ``acc`` using the text of ``file``.

    Callers are expected to contain exceptions at the file level; this
    function itself only does regex searches over ``content``.
    """
    if file.extension in PAGE_EXTENSIONS:
        _classify_page(content, acc)
        return acc

    headers = class_headers(content)
    controllers = [h for h in headers if h.derives_from(CONTROLLER_BASES)]

    if any(h.is_abstract for h in controllers):
        acc.add(Role.BASE_CONTROLLER, 0.9, "abstract controller base type")
        acc.supersede(Role.CONTROLLER, Role.BASE_CONTROLLER)
    elif API_CONTROLLER_RE.search(content):
        acc.add(Role.CONTROLLER, 0.95, "[ApiController] attribute")
    elif controllers:
        acc.add(Role.CONTROLLER, 0.95, "derives from a controller base type")

    if any(h.derives_from(DB_CONTEXT_BASES) for h in headers):
        acc.add(Role.DB_CONTEXT, 0.99, "derives from DbContext")
        acc.promote(Role.DB_CONTEXT)

    if any("Migration" in h.bases for h in headers) or any(
        p.search(content) for p in MIGRATION_MARKERS
    ):
        acc.add(Role.MIGRATION, 0.98, "migration framework marker")
    elif PARTIAL_CLASS_RE.search(content) and "Migration" in content:
        acc.add(Role.MIGRATION, 0.98, "partial class referencing Migration")

    if any(p.search(content) for p in ENTITY_MARKERS):
        acc.add(Role.ENTITY, 0.85, "entity mapping attribute")

    return acc


def _classify_page(content: str, acc: RoleAccumulator) -> None:
    match = PAGE_DIRECTIVE_RE.search(content)
    if match:
        acc.add(Role.PAGE, 0.95, "confirmed page directive")
        if match.group(1) is not None:
            acc.add(Role.PAGE, 0.95, f"route {match.group(1)}")
    else:
        acc.withdraw(Role.PAGE, "template file, not a routed page")
