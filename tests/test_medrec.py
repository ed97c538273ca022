"""
Unit Tests for Medication Reconciliation

Tests for BPMH collection, order comparison and discrepancy resolution.
"""
import pytest

from md_mcp_server.clinical import medrec
from md_mcp_server.models.medrec import (
    CompareMedicationsInput,
    GatherBpmhInput,
    ResolveDiscrepancyInput,
)


def _bpmh_input(**sources) -> GatherBpmhInput:
    return GatherBpmhInput.model_validate(
        {
            "patient_id": "P-100",
            "data_sources": {
                "patient_interview": {"conducted": True, "interviewer_id": "RN-7"},
                **sources,
            },
            "systematic_categories": {
                "prescription_medications": [
                    {
                        "drug_name": "Lisinopril",
                        "dose": "10 mg",
                        "frequency": "daily",
                        "route": "oral",
                        "indication": "hypertension",
                        "prescriber": "Dr. Reyes",
                    }
                ],
                "herbal_products": [
                    {
                        "drug_name": "St John's Wort",
                        "dose": "300 mg",
                        "frequency": "daily",
                        "route": "oral",
                        "indication": "mood",
                    }
                ],
            },
        }
    )


def _order(name: str, dose: str = "10 mg", frequency: str = "daily", route: str = "oral") -> dict:
    return {
        "drug_name": name,
        "dose": dose,
        "frequency": frequency,
        "route": route,
        "indication": "test",
        "prescriber": "Dr. Reyes",
        "order_datetime": "2024-06-01T08:00:00Z",
    }


class TestGatherBpmh:
    """Tests for BPMH grading and category layout."""

    def test_three_sources_is_complete(self, reference, now):
        data = _bpmh_input(medication_bottles=True, pharmacy_records=True)
        result = medrec.gather_bpmh(data, reference, now)

        assert result["verification_status"] == "complete"
        assert result["sources_used"] == ["patient_interview", "medication_bottles", "pharmacy_records"]
        assert result["next_steps"][0] == "Proceed with medication reconciliation"
        assert result["bpmh_id"].startswith(f"bpmh_{int(now.timestamp() * 1000)}_")
        assert result["created_by"] == "RN-7"

    def test_two_sources_is_partial(self, reference, now):
        result = medrec.gather_bpmh(_bpmh_input(medication_bottles=True), reference, now)
        assert result["verification_status"] == "partial"

    def test_interview_only_is_unverified(self, reference, now):
        result = medrec.gather_bpmh(_bpmh_input(), reference, now)
        assert result["verification_status"] == "unverified"
        assert result["patient_signature"] is True

    def test_categories_keep_fixed_order_and_sources(self, reference, now):
        result = medrec.gather_bpmh(_bpmh_input(), reference, now)
        categories = [group["category"] for group in result["medications_list"]]
        assert categories == ["Prescription Medications", "Herbal Products"]

        prescribed = result["medications_list"][0]["medications"][0]
        herbal = result["medications_list"][1]["medications"][0]
        assert prescribed["prescriber_source"] == {"kind": "prescribed", "prescriber": "Dr. Reyes"}
        assert herbal["prescriber_source"] == {"kind": "practitioner", "practitioner": "herbalist"}

    def test_missing_interviewer_is_unknown(self, reference, now):
        data = GatherBpmhInput.model_validate(
            {"patient_id": "P-1", "data_sources": {"patient_interview": {"conducted": False}}}
        )
        result = medrec.gather_bpmh(data, reference, now)
        assert result["created_by"] == "unknown"
        assert result["sources_used"] == []
        assert result["medications_list"] == []


class TestCompareMedications:
    """Tests for discrepancy detection."""

    def test_duplicate_orders_are_major(self, reference, now):
        data = CompareMedicationsInput.model_validate(
            {
                "bpmh_id": "bpmh_1",
                "comparison_type": "proactive",
                "new_orders": [_order("Metoprolol"), _order("metoprolol ")],
            }
        )
        result = medrec.compare_medications(data, reference, now)

        duplicates = [d for d in result["discrepancies"] if d["type"] == "duplication"]
        assert len(duplicates) == 2
        assert all(d["severity"] == "major" for d in duplicates)
        assert result["summary"]["major_count"] == 2
        assert result["summary"]["pending_count"] == 2

    def test_high_mg_dose_is_critical(self, reference, now):
        data = CompareMedicationsInput.model_validate(
            {"bpmh_id": "bpmh_1", "comparison_type": "retroactive", "new_orders": [_order("Metformin", "1500 mg")]}
        )
        result = medrec.compare_medications(data, reference, now)

        assert result["summary"]["critical_count"] == 1
        assert result["discrepancies"][0]["type"] == "dose_change"

    def test_home_list_finds_omission_change_and_new(self, reference, now):
        data = CompareMedicationsInput.model_validate(
            {
                "bpmh_id": "bpmh_1",
                "comparison_type": "proactive",
                "new_orders": [_order("Lisinopril", "20 mg"), _order("Heparin", "5000 units")],
                "bpmh_medications": [
                    {"drug_name": "Lisinopril", "dose": "10 mg", "frequency": "daily", "route": "oral"},
                    {"drug_name": "Atorvastatin", "dose": "40 mg", "frequency": "daily", "route": "oral"},
                ],
            }
        )
        result = medrec.compare_medications(data, reference, now)
        by_type = {d["type"]: d for d in result["discrepancies"]}

        assert by_type["omission"]["bpmh_medication"]["drug_name"] == "Atorvastatin"
        assert by_type["dose_change"]["changed_fields"] == ["dose"]
        assert by_type["dose_change"]["severity"] == "major"
        assert by_type["new_medication"]["severity"] == "minor"
        assert result["matched_medications"][0]["match_confidence"] == "medium"

    def test_no_orders_no_discrepancies(self, reference, now):
        data = CompareMedicationsInput.model_validate(
            {"bpmh_id": "bpmh_1", "comparison_type": "proactive", "new_orders": []}
        )
        result = medrec.compare_medications(data, reference, now)
        assert result["summary"]["total_discrepancies"] == 0
        assert result["comparison_id"].startswith("comp_")


class TestResolveDiscrepancy:
    """Tests for resolution status and harm judgment."""

    @staticmethod
    def _input(action: str, contacted: bool, response=None, final_action: str = "continue"):
        return ResolveDiscrepancyInput.model_validate(
            {
                "comparison_id": "comp_1",
                "discrepancy_id": "disc_1",
                "resolution_action": action,
                "resolved_by": "PharmD-2",
                "resolution_datetime": "2024-06-01T10:00:00Z",
                "prescriber_contacted": contacted,
                "prescriber_response": response,
                "final_order": {"action": final_action, "medication_details": {"drug_name": "Lisinopril"}},
                "documentation_note": "Reviewed with team",
            }
        )

    @pytest.mark.parametrize(
        "action,contacted,response,status",
        [
            ("prescriber_error", True, "Agreed", "resolved"),
            ("prescriber_error", False, None, "pending_prescriber"),
            ("intentional_change", False, None, "escalated"),
            ("continue_home_med", False, None, "resolved"),
            ("prescriber_error", True, None, "resolved"),
            ("intentional_change", True, None, "resolved"),
        ],
    )
    def test_status_rules(self, reference, now, action, contacted, response, status):
        result = medrec.resolve_discrepancy(self._input(action, contacted, response), reference, now)
        assert result["status"] == status
        assert result["follow_up_required"] is (status != "resolved")

    @pytest.mark.parametrize(
        "action,contacted,harm",
        [
            ("modify_order", False, "moderate"),
            ("modify_order", True, "moderate"),
            ("discontinue", False, "minor"),
            ("continue_home_med", True, "minor"),
        ],
    )
    def test_harm_severity(self, reference, now, action, contacted, harm):
        result = medrec.resolve_discrepancy(self._input(action, contacted, final_action="modify"), reference, now)
        assert result["harm_severity_avoided"] == harm

    def test_discontinue_with_prescriber_avoids_severe_harm(self, reference, now):
        result = medrec.resolve_discrepancy(
            self._input("discontinue", True, "Stop it", final_action="discontinue"), reference, now
        )
        assert result["harm_severity_avoided"] == "severe"
        assert result["final_medication_list"][0]["status"] == "discontinued"
        assert len(result["audit_trail"]) == 2
        assert result["audit_trail"][1]["performed_by"] == "system"

    def test_prescriber_error_prevents_no_harm(self, reference, now):
        result = medrec.resolve_discrepancy(self._input("prescriber_error", False), reference, now)
        assert result["patient_harm_prevented"] is False
        assert result["harm_severity_avoided"] == "minor"
