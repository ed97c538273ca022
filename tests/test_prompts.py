"""
Unit Tests for Workflow Prompts
"""
import pytest

from md_mcp_server.prompts import WORKFLOW_PROMPTS, build_prompt_registry


@pytest.fixture
def prompts():
    return build_prompt_registry()


class TestPromptRegistry:
    """Tests for prompt listing and rendering."""

    def test_lists_five_prompts_with_one_required_argument(self, prompts):
        listed = prompts.list_prompts()

        assert [prompt.name for prompt in listed] == [
            "medication_reconciliation_workflow",
            "tdm_analysis_workflow",
            "soap_documentation_workflow",
            "drug_interaction_workflow",
            "clinical_decision_support_workflow",
        ]
        for prompt in listed:
            assert len(prompt.arguments) == 1
            assert prompt.arguments[0].required is True

    def test_render_substitutes_argument(self, prompts):
        result = prompts.get_prompt("tdm_analysis_workflow", {"drug_name": "vancomycin"})
        text = result.messages[0].content.text

        assert result.description == "TDM analysis workflow initiated for vancomycin"
        assert result.messages[0].role == "assistant"
        assert "**Drug:** vancomycin" in text
        assert text.endswith("Use the `assess_tdm_candidate` tool for vancomycin")
        assert result.meta == {"drug_name": "vancomycin", "workflow": "tdm_analysis"}

    @pytest.mark.parametrize("arguments", [None, {}, {"patient_id": "   "}])
    def test_missing_argument_rejected(self, prompts, arguments):
        with pytest.raises(ValueError):
            prompts.get_prompt("medication_reconciliation_workflow", arguments)

    def test_unknown_prompt(self, prompts):
        with pytest.raises(KeyError):
            prompts.get_prompt("triage_workflow", {"patient_id": "P-1"})

    def test_duplicate_prompt_rejected(self, prompts):
        with pytest.raises(ValueError):
            prompts.add_prompt(WORKFLOW_PROMPTS[0])

    def test_every_template_names_its_first_tool(self, prompts):
        for prompt in WORKFLOW_PROMPTS:
            rendered = prompts.get_prompt(prompt.name, {prompt.argument: "X-1"})
            assert "Ready to start? Use the `" in rendered.messages[0].content.text
