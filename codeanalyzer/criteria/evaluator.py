"""Criteria rule evaluator.

Pure functions over a ProjectStructure snapshot. Nothing here raises for bad
rules: invalid values, unknown operators and unexpected errors all become
failed results with evidence.
"""
from __future__ import annotations

import logging
import operator as op
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from codeanalyzer.analyzers.models import AnalysisMode, ProjectStructure

from .models import AnalysisCriteria, CriteriaCheckResult, CriteriaRule, CriteriaType
from .properties import resolve_property

logger = logging.getLogger(__name__)

PASSED_MESSAGE = "Criterion passed"
FAILED_MESSAGE = "Criterion failed"
REQUIRES_CONTENT_MESSAGE = "Requires full content analysis"
REQUIRES_CONTENT_EVIDENCE = "This criterion requires full content analysis"

EXISTS = "exists"

# operator name -> (symbol, comparison)
COMPARISONS: dict[str, tuple[str, Callable[[int, int], bool]]] = {
    "equals": ("==", op.eq),
    "greater_than": (">", op.gt),
    "greater_than_or_equal": (">=", op.ge),
    "less_than": ("<", op.lt),
    "less_than_or_equal": ("<=", op.le),
}

OPERATORS: list[str] = [*COMPARISONS, EXISTS]

_TRUE_VALUES = {"true", "yes"}
_FALSE_VALUES = {"false", "no"}


@dataclass
class RuleResult:
    passed: bool
    evidence: str


def _parse_value(raw: str, operator_name: str) -> int | None:
    """Parse a rule's expected value, or return None if it is malformed."""
    text = (raw or "").strip()
    if not text:
        return 0
    if operator_name == EXISTS:
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return 1
        if lowered in _FALSE_VALUES:
            return 0
    try:
        return int(text)
    except ValueError:
        return None


def evaluate_rule(rule: CriteriaRule, structure: ProjectStructure) -> RuleResult:
    """Evaluate a single rule against the structure."""
    actual = resolve_property(rule.property, structure)
    operator_name = (rule.operator or EXISTS).strip().lower()

    expected = _parse_value(rule.value, operator_name)
    if expected is None:
        return RuleResult(False, f"invalid value: {rule.value}")

    if operator_name == EXISTS:
        return RuleResult(actual > 0, f"{rule.property}: {actual} (must exist)")

    comparison = COMPARISONS.get(operator_name)
    if comparison is None:
        return RuleResult(False, f"unknown operator: {rule.operator}")

    symbol, compare = comparison
    return RuleResult(
        compare(actual, expected),
        f"{rule.property}: {actual} {symbol} {expected}",
    )


def evaluate_criterion(
    criterion: AnalysisCriteria,
    structure: ProjectStructure,
    mode: AnalysisMode = AnalysisMode.STRUCTURAL,
) -> CriteriaCheckResult:
    """Evaluate one criterion; its rules are ANDed."""
    result = CriteriaCheckResult(
        criteria_id=criterion.id,
        criteria_name=criterion.name,
        passed=True,
        message=PASSED_MESSAGE,
    )

    if mode is AnalysisMode.STRUCTURAL and criterion.type is CriteriaType.FULL_CONTENT:
        result.passed = False
        result.message = REQUIRES_CONTENT_MESSAGE
        result.evidence.append(REQUIRES_CONTENT_EVIDENCE)
        return result

    try:
        for rule in criterion.rules:
            rule_result = evaluate_rule(rule, structure)
            result.evidence.append(rule_result.evidence)
            if not rule_result.passed:
                result.passed = False
                result.message = FAILED_MESSAGE
                if rule.error_message:
                    result.evidence.append(rule.error_message)
    except Exception as e:
        logger.warning("Criterion '%s' raised during evaluation: %s", criterion.name, e)
        result.passed = False
        result.message = FAILED_MESSAGE
        result.evidence.append(f"exception: {e}")

    return result


def evaluate_criteria(
    structure: ProjectStructure,
    criteria: Iterable[AnalysisCriteria] | None,
    mode: AnalysisMode = AnalysisMode.STRUCTURAL,
) -> list[CriteriaCheckResult]:
    """Evaluate every criterion in order and return one result per criterion."""
    mode = AnalysisMode.parse(mode)
    results = [evaluate_criterion(c, structure, mode) for c in criteria or []]
    logger.debug(
        "Evaluated %d criteria: %d passed",
        len(results), sum(1 for r in results if r.passed),
    )
    return results
