"""AI-powered narrative analysis.

Turns a ProjectStructure and its criteria results into a prompt for an AI
provider. Everything here runs after the structure and criteria results are
final, and a provider failure only ever produces an error string.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from codeanalyzer.criteria.models import AnalysisCriteria, CriteriaCheckResult
from codeanalyzer.criteria.properties import StructureProperty, resolve_property
from codeanalyzer.providers.base import AIProvider

from .models import ProjectStructure

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = """\
You are a senior software architect reviewing a project against a checklist.
You are given the detected project structure and the ACTUAL results of an
automated criteria check. Never change or contradict those results; base every
statement on the data provided."""

DEFAULT_TASK = """\
TASK: Give a short summary of the criteria check based on the ACTUAL RESULTS above.
Do not invent results of your own; use only those listed under CHECK RESULTS.

The answer must match the real results:
✅ Passed: X criteria (if any passed)
❌ Failed: Y criteria (if any failed)
Main problems: [list the real problems from the check results]

IMPORTANT: Do not change the actual check results!"""

CUSTOM_TASK = """\
TASK: Analyze the project according to the criteria and the additional user instruction.
Pay attention to the actual criteria check results above."""

PROBE_WORD = "Watermelon"
PROBE_PROMPT = (
    f"Reply with exactly one word: {PROBE_WORD}. "
    f"Do not answer anything else, just write {PROBE_WORD}."
)


@dataclass
class ConnectionCheck:
    """Result of probing a provider with a one-word echo request."""
    connected: bool
    response: str
    message: str
    provider: str = ""
    model: str = ""


def build_analysis_prompt(
    structure: ProjectStructure,
    criteria: Sequence[AnalysisCriteria],
    results: Sequence[CriteriaCheckResult],
    custom_prompt: str = "",
) -> str:
    """Build the narrative-analysis prompt from read-only analysis data."""
    controller_names = ", ".join(f.name for f in structure.controllers) or "(none)"
    passed = sum(1 for r in results if r.passed)

    lines = [
        "PROJECT STRUCTURE:",
        f"- Files: {structure.total_files}",
        f"- Controllers (excluding base controllers): "
        f"{resolve_property(StructureProperty.CONTROLLERS_COUNT.value, structure)}",
        f"- Controller files in total: {structure.total_controllers}",
        f"- Controller names: {controller_names}",
        f"- Pages: {structure.total_pages}",
        f"- DbContext: {len(structure.db_contexts)}",
        f"- Migrations: {len(structure.migrations)}",
        f"- Services: {len(structure.services)}",
        f"- Database connection detected: {'yes' if structure.has_database_connection else 'no'}",
        "",
        "CRITERIA:",
        *(f"- {c.name}: {c.description}" for c in criteria),
        "",
        "CHECK RESULTS:",
        *(f"- {r.criteria_name}: {'✅ PASSED' if r.passed else '❌ FAILED'}" for r in results),
        "",
        "CHECK DETAILS:",
        *(f"- {r.criteria_name}: {e}" for r in results for e in r.evidence),
        "",
        "OVERALL:",
        f"- Total criteria: {len(results)}",
        f"- Passed: {passed}",
        f"- Failed: {len(results) - passed}",
        "",
    ]

    if custom_prompt and custom_prompt.strip():
        lines += ["ADDITIONAL USER INSTRUCTION:", custom_prompt.strip(), "", CUSTOM_TASK]
    else:
        lines.append(DEFAULT_TASK)

    return "\n".join(lines)


def generate_ai_analysis(
    structure: ProjectStructure,
    criteria: Sequence[AnalysisCriteria],
    results: Sequence[CriteriaCheckResult],
    provider: AIProvider,
    custom_prompt: str = "",
) -> str:
    """Ask the provider for a narrative analysis; failures come back as text."""
    prompt = build_analysis_prompt(structure, criteria, results, custom_prompt)
    logger.info("Sending analysis prompt to %s (%d chars)", provider.name, len(prompt))
    try:
        text = provider.chat(
            system=ANALYSIS_SYSTEM_PROMPT,
            user=prompt,
            max_tokens=1500,
        ).strip()
    except Exception as e:
        logger.warning("AI analysis failed: %s", e)
        return f"AI analysis error: {e}"
    return text or "Could not get an analysis from the model"


def check_connection(provider: AIProvider) -> ConnectionCheck:
    """Send a one-word probe and report whether the model echoed it back."""
    name = getattr(provider, "name", "")
    model = getattr(provider, "model", "")
    try:
        reply = provider.chat(system="", user=PROBE_PROMPT, max_tokens=20).strip()
    except Exception as e:
        logger.warning("Connection check against %s failed: %s", name, e)
        return ConnectionCheck(False, "", f"Connection error: {e}", name, model)

    connected = reply.strip(" .!\"'").lower() == PROBE_WORD.lower()
    logger.info("Connection check result: %r, connected=%s", reply, connected)
    message = (
        f"Connection to {name} is working"
        if connected else f"Unexpected response from {name}"
    )
    return ConnectionCheck(connected, reply, message, name, model)
