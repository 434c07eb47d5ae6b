"""Tests for AI prompt building and the connection probe."""
import pytest

from codeanalyzer.analyzers.ai_analyzer import (
    ANALYSIS_SYSTEM_PROMPT,
    CUSTOM_TASK,
    DEFAULT_TASK,
    PROBE_WORD,
    build_analysis_prompt,
    check_connection,
    generate_ai_analysis,
)
from codeanalyzer.analyzers.project_analyzer import ProjectAnalyzer
from codeanalyzer.criteria.evaluator import evaluate_criteria
from codeanalyzer.criteria.models import AnalysisCriteria, CriteriaRule
from codeanalyzer.errors import ProviderError


@pytest.fixture
def analysis(make_project, webapp_files):
    structure = ProjectAnalyzer().analyze(make_project(webapp_files))
    criteria = [
        AnalysisCriteria(id="a", name="Controllers", description="Has controllers",
                         rules=[CriteriaRule("controllers_count", "greater_than_or_equal", "1")]),
        AnalysisCriteria(id="b", name="Entities", description="Has entities",
                         rules=[CriteriaRule("entities_count", "exists")]),
    ]
    return structure, criteria, evaluate_criteria(structure, criteria)


class TestBuildPrompt:
    def test_sections(self, analysis):
        prompt = build_analysis_prompt(*analysis)
        assert "PROJECT STRUCTURE:" in prompt
        assert "- Files: 11" in prompt
        assert "- Controllers (excluding base controllers): 2" in prompt
        assert "BaseController.cs" in prompt
        assert "- Controllers: Has controllers" in prompt
        assert "- Controllers: ✅ PASSED" in prompt
        assert "- Entities: ❌ FAILED" in prompt
        assert "- Entities: entities_count: 0 (must exist)" in prompt
        assert "- Total criteria: 2" in prompt
        assert "- Database connection detected: yes" in prompt
        assert prompt.endswith(DEFAULT_TASK)

    def test_custom_instruction(self, analysis):
        prompt = build_analysis_prompt(*analysis, custom_prompt="  Focus on data access  ")
        assert "ADDITIONAL USER INSTRUCTION:\nFocus on data access" in prompt
        assert prompt.endswith(CUSTOM_TASK)
        assert DEFAULT_TASK not in prompt

    def test_blank_instruction_uses_default_task(self, analysis):
        assert build_analysis_prompt(*analysis, custom_prompt="   ").endswith(DEFAULT_TASK)


class TestGenerateAnalysis:
    def test_returns_stripped_reply(self, analysis, mock_provider):
        mock_provider.chat.return_value = "  Looks fine.  \n"
        assert generate_ai_analysis(*analysis, provider=mock_provider) == "Looks fine."
        kwargs = mock_provider.chat.call_args.kwargs
        assert kwargs["system"] == ANALYSIS_SYSTEM_PROMPT
        assert kwargs["max_tokens"] == 1500

    def test_empty_reply(self, analysis, mock_provider):
        mock_provider.chat.return_value = ""
        assert generate_ai_analysis(*analysis, provider=mock_provider) == "Could not get an analysis from the model"

    def test_provider_failure(self, analysis, mock_provider):
        mock_provider.chat.side_effect = ProviderError("rate limited")
        assert generate_ai_analysis(*analysis, provider=mock_provider) == "AI analysis error: rate limited"

    def test_results_untouched(self, analysis, mock_provider):
        structure, criteria, results = analysis
        before = [(r.passed, list(r.evidence)) for r in results]
        generate_ai_analysis(structure, criteria, results, mock_provider)
        assert [(r.passed, list(r.evidence)) for r in results] == before


class TestCheckConnection:
    @pytest.mark.parametrize("reply", [PROBE_WORD, "watermelon.", ' "WATERMELON"! '])
    def test_connected(self, mock_provider, reply):
        mock_provider.chat.return_value = reply
        result = check_connection(mock_provider)
        assert result.connected
        assert result.message == "Connection to mock is working"
        assert result.provider == "mock"
        assert result.model == "mock-model-1"

    def test_unexpected_reply(self, mock_provider):
        mock_provider.chat.return_value = "Hello there"
        result = check_connection(mock_provider)
        assert not result.connected
        assert result.response == "Hello there"
        assert result.message == "Unexpected response from mock"

    def test_error(self, mock_provider):
        mock_provider.chat.side_effect = ProviderError("refused")
        result = check_connection(mock_provider)
        assert not result.connected
        assert result.response == ""
        assert result.message == "Connection error: refused"
