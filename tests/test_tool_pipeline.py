"""
Unit Tests for the Tool Registry and Handler Pipeline

Tests for registration, success and error envelopes, and error classification.
"""
import pytest

from md_mcp_server.errors import (
    ProcessingError,
    ProcessingTimeoutError,
    UnknownError,
    ValidationError,
    classify_error,
)
from md_mcp_server.main import TOOL_GROUPS, call_tool_result
from md_mcp_server.reference.integration import PROTOCOL_TOOLS
from md_mcp_server.responses import format_error, is_error_envelope
from md_mcp_server.tools import ToolRegistry


class TestToolRegistry:
    """Tests for tool registration."""

    def test_every_protocol_tool_is_registered(self, registries):
        expected = {name for tools in PROTOCOL_TOOLS.values() for name in tools}
        expected |= {"clinical_decision_support", "audit_trail"}

        assert set(registries.tools.names()) == expected
        assert len(registries.tools) == 25

    def test_specs_carry_json_schemas(self, registries):
        for tool in registries.tools.list_tools():
            assert tool.inputSchema["type"] == "object"
            assert tool.description

    def test_duplicate_registration_rejected(self, reference):
        registry = ToolRegistry()
        TOOL_GROUPS[0].register_tools(registry, reference)
        with pytest.raises(ValueError):
            TOOL_GROUPS[0].register_tools(registry, reference)

    def test_unknown_tool(self, registries):
        with pytest.raises(KeyError):
            registries.tools.get_handler("prescribe_anything")


class TestToolHandlers:
    """Tests for the validate, evaluate and format pipeline."""

    async def test_success_envelope(self, registries):
        handler = registries.tools.get_handler("calculate_steady_state")
        payload = await handler(
            {
                "drug_name": "digoxin",
                "drug_half_life": 36,
                "dosing_start_datetime": "2024-06-01T08:00:00Z",
                "patient_factors": {"age_years": 60},
            }
        )

        assert payload["result"]["time_to_steady_state_hours"] == 162.0
        assert payload["metadata"]["data_source"] == "local_processing"
        assert payload["metadata"]["server_version"] == "1.0.0"
        assert is_error_envelope(payload) is False

    async def test_malformed_input_is_validation_error(self, registries):
        handler = registries.tools.get_handler("screen_interactions")
        payload = await handler({"patient_id": "P-1", "medications": []})
        error = payload["error"]

        assert error["kind"] == "ValidationError"
        assert error["code"] == "INVALID_INPUT"
        assert error["message"].startswith("Invalid input for tool 'screen_interactions': ")
        assert error["recovery_info"] == {"is_recoverable": False, "strategy": "abort", "retry_delay_ms": 0}
        assert error["details"]["tool_name"] == "screen_interactions"
        assert payload["recovery_actions"][0] == "Check the required parameters for this tool"

    async def test_missing_arguments(self, registries):
        payload = await registries.tools.get_handler("gather_bpmh")(None)
        assert payload["error"]["kind"] == "ValidationError"

    async def test_evaluator_fault_is_enveloped(self, registries):
        handler = registries.tools.get_handler("interpret_tdm_result")
        payload = await handler(
            {
                "patient_id": "P-1",
                "drug_name": "vancomycin",
                "measured_concentration": 5,
                "sample_datetime": "2024-06-01T07:30:00Z",
                "sample_type": "trough",
                "actual_dose_time": "2024-06-01T08:00:00Z",
                "actual_collection_time": "2024-06-01T07:30:00Z",
                "current_dosing_regimen": {"dose": "as directed", "frequency": "q12h", "route": "IV"},
                "therapeutic_range": {"lower_limit": 10, "upper_limit": 20, "units": "mg/L"},
                "clinical_response": {"therapeutic_effect": "none"},
            }
        )
        assert payload["error"]["kind"] == "ValidationError"
        assert payload["error"]["details"]["field"] == "current_dosing_regimen.dose"

    def test_call_tool_result_flags_errors(self):
        error_payload = format_error(UnknownError("boom"))
        result = call_tool_result(error_payload)

        assert result.isError is True
        assert result.structuredContent == error_payload
        assert result.content[0].type == "text"


class TestClassifyError:
    """Tests for mapping exceptions onto the error taxonomy."""

    def test_classified_errors_pass_through(self):
        error = ValidationError("bad")
        assert classify_error(error) is error

    def test_timeout(self):
        error = classify_error(TimeoutError("slow"))
        assert isinstance(error, ProcessingTimeoutError)
        assert error.recoverable is True

    def test_processing_message(self):
        assert isinstance(classify_error(RuntimeError("processing failed")), ProcessingError)

    def test_unknown(self):
        error = classify_error(ZeroDivisionError("division by zero"), "ctx")

        assert isinstance(error, UnknownError)
        assert error.message == "Unexpected error: division by zero"
        assert error.details == {"original_error": "division by zero", "context": "ctx"}

    def test_high_severity_notifies_provider(self):
        payload = format_error(ProcessingError("x", severity="critical"))
        assert payload["error"]["clinical_safety"]["provider_notification"] is True
        assert payload["error"]["recovery_info"]["strategy"] == "retry"
