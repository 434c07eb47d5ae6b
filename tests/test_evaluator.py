"""Tests for criteria evaluation."""
import pytest

from codeanalyzer.analyzers.models import AnalysisMode, ProjectFile, ProjectStructure, Role
from codeanalyzer.criteria import evaluator
from codeanalyzer.criteria.evaluator import (
    FAILED_MESSAGE,
    PASSED_MESSAGE,
    REQUIRES_CONTENT_EVIDENCE,
    REQUIRES_CONTENT_MESSAGE,
    evaluate_criteria,
    evaluate_criterion,
    evaluate_rule,
)
from codeanalyzer.criteria.models import AnalysisCriteria, CriteriaRule, CriteriaType


@pytest.fixture
def structure():
    s = ProjectStructure(root_path="/p")
    for name in ("HomeController.cs", "OrdersController.cs"):
        f = ProjectFile(
            path=f"Controllers/{name}", name=name, extension=".cs", size=1,
            directory="Controllers", role=Role.CONTROLLER, roles=[Role.CONTROLLER],
        )
        s.files.append(f)
        s.controllers.append(f)
    return s


def _criterion(*rules, type=CriteriaType.STRUCTURAL):
    return AnalysisCriteria(id="c1", name="Check", type=type, rules=list(rules))


# ── Rules ──


class TestEvaluateRule:
    @pytest.mark.parametrize("operator,value,passed,evidence", [
        ("equals", "2", True, "controllers_count: 2 == 2"),
        ("greater_than", "2", False, "controllers_count: 2 > 2"),
        ("greater_than_or_equal", "1", True, "controllers_count: 2 >= 1"),
        ("less_than", "3", True, "controllers_count: 2 < 3"),
        ("less_than_or_equal", "1", False, "controllers_count: 2 <= 1"),
    ])
    def test_comparisons(self, structure, operator, value, passed, evidence):
        result = evaluate_rule(CriteriaRule("controllers_count", operator, value), structure)
        assert result.passed is passed
        assert result.evidence == evidence

    def test_exists_ignores_value(self, structure):
        result = evaluate_rule(CriteriaRule("dbcontext_count", "exists", "true"), structure)
        assert result.passed is False
        assert result.evidence == "dbcontext_count: 0 (must exist)"
        assert "0" in result.evidence

    def test_exists_passes_on_positive(self, structure):
        assert evaluate_rule(CriteriaRule("controllers", "exists", ""), structure).passed

    def test_operator_is_case_insensitive(self, structure):
        assert evaluate_rule(CriteriaRule("controllers", "EQUALS", "2"), structure).passed

    def test_empty_value_is_zero(self, structure):
        result = evaluate_rule(CriteriaRule("migrations_count", "equals", ""), structure)
        assert result.passed
        assert result.evidence == "migrations_count: 0 == 0"

    def test_invalid_value(self, structure):
        result = evaluate_rule(CriteriaRule("controllers_count", "equals", "many"), structure)
        assert result.passed is False
        assert result.evidence == "invalid value: many"

    def test_invalid_value_checked_before_operator(self, structure):
        result = evaluate_rule(CriteriaRule("controllers_count", "between", "x"), structure)
        assert result.evidence == "invalid value: x"

    def test_unknown_operator(self, structure):
        result = evaluate_rule(CriteriaRule("controllers_count", "between", "1"), structure)
        assert result.passed is False
        assert result.evidence == "unknown operator: between"

    def test_unknown_property_resolves_to_zero(self, structure):
        result = evaluate_rule(CriteriaRule("widgets", "greater_than", "0"), structure)
        assert result.passed is False
        assert result.evidence == "widgets: 0 > 0"


# ── Criteria ──


class TestEvaluateCriterion:
    def test_all_rules_pass(self, structure):
        result = evaluate_criterion(
            _criterion(
                CriteriaRule("controllers_count", "greater_than_or_equal", "1"),
                CriteriaRule("files", "equals", "2"),
            ),
            structure,
        )
        assert result.passed
        assert result.message == PASSED_MESSAGE
        assert result.evidence == ["controllers_count: 2 >= 1", "files: 2 == 2"]
        assert result.criteria_id == "c1"

    def test_failure_records_every_rule_and_error_message(self, structure):
        result = evaluate_criterion(
            _criterion(
                CriteriaRule("migrations_count", "greater_than_or_equal", "1", "Add a migration"),
                CriteriaRule("controllers_count", "equals", "2"),
            ),
            structure,
        )
        assert not result.passed
        assert result.message == FAILED_MESSAGE
        assert result.evidence == [
            "migrations_count: 0 >= 1",
            "Add a migration",
            "controllers_count: 2 == 2",
        ]

    def test_no_rules_passes(self, structure):
        assert evaluate_criterion(_criterion(), structure).passed

    def test_full_content_criterion_in_structural_mode(self, structure):
        criterion = _criterion(
            CriteriaRule("controllers_count", "exists"), type=CriteriaType.FULL_CONTENT,
        )
        result = evaluate_criterion(criterion, structure, AnalysisMode.STRUCTURAL)
        assert not result.passed
        assert result.message == REQUIRES_CONTENT_MESSAGE
        assert result.evidence == [REQUIRES_CONTENT_EVIDENCE]

    def test_full_content_criterion_in_full_content_mode(self, structure):
        criterion = _criterion(
            CriteriaRule("controllers_count", "exists"), type=CriteriaType.FULL_CONTENT,
        )
        assert evaluate_criterion(criterion, structure, AnalysisMode.FULL_CONTENT).passed

    def test_exception_becomes_failed_result(self, structure, monkeypatch):
        def boom(rule, structure):
            raise RuntimeError("resolver broke")

        monkeypatch.setattr(evaluator, "evaluate_rule", boom)
        result = evaluate_criterion(_criterion(CriteriaRule("files", "exists")), structure)
        assert not result.passed
        assert result.evidence == ["exception: resolver broke"]


class TestEvaluateCriteria:
    def test_one_result_per_criterion_in_order(self, structure):
        criteria = [
            AnalysisCriteria(id="a", name="A", rules=[CriteriaRule("controllers", "exists")]),
            AnalysisCriteria(id="b", name="B", rules=[CriteriaRule("pages", "exists")]),
        ]
        results = evaluate_criteria(structure, criteria, "Structural")
        assert [r.criteria_id for r in results] == ["a", "b"]
        assert [r.passed for r in results] == [True, False]

    def test_none_gives_empty_list(self, structure):
        assert evaluate_criteria(structure, None) == []

    def test_does_not_mutate_structure(self, structure):
        before = list(structure.controllers)
        evaluate_criteria(structure, [_criterion(CriteriaRule("controllers", "exists"))])
        assert structure.controllers == before
