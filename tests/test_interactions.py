"""
Unit Tests for Drug Interactions

Tests for screening, significance scoring, management and documentation.
"""
import pytest

from md_mcp_server.clinical import interactions
from md_mcp_server.models.interactions import (
    AssessInteractionSignificanceInput,
    DocumentInteractionDecisionInput,
    RecommendInteractionManagementInput,
    ScreenInteractionsInput,
)


def _med(name: str) -> dict:
    return {"drug_name": name, "dose": "5 mg", "frequency": "daily", "route": "oral", "start_date": "2024-01-01T00:00:00Z"}


def _screen(medications, **extra) -> ScreenInteractionsInput:
    payload = {
        "patient_id": "P-300",
        "medications": [_med(name) for name in medications],
        "patient_characteristics": {"age": 64},
    }
    payload.update(extra)
    return ScreenInteractionsInput.model_validate(payload)


def _significance(age=50, renal="normal", hepatic="normal", comorbidities=(), meds=(), reactions=(), **context):
    return AssessInteractionSignificanceInput.model_validate(
        {
            "interaction_id": "ddi_1",
            "patient_specific_factors": {
                "age": age,
                "comorbidities": list(comorbidities),
                "organ_function": {"renal_function": renal, "hepatic_function": hepatic},
                "concurrent_medications": list(meds),
                "previous_adverse_reactions": list(reactions),
            },
            "clinical_context": {
                "treatment_duration": context.get("duration", "chronic"),
                "alternative_options_available": context.get("alternatives", False),
            },
        }
    )


class TestScreenInteractions:
    """Tests for the four screening passes."""

    def test_warfarin_aspirin_is_serious(self, reference, now):
        result = interactions.screen_interactions(_screen(["Warfarin", "Aspirin"]), reference, now)
        found = result["interactions_found"]

        assert len(found) == 1
        assert found[0]["type"] == "drug_drug"
        assert found[0]["severity"] == "serious"
        assert found[0]["management_level"] == "monitor_closely"
        assert result["summary"]["serious_count"] == 1
        assert result["summary"]["requires_immediate_action"] is False

    def test_pair_order_does_not_matter(self, reference, now):
        result = interactions.screen_interactions(_screen(["Furosemide", "Digoxin"]), reference, now)
        assert result["interactions_found"][0]["management_level"] == "adjust_dose"

    def test_metformin_in_renal_failure_is_contraindicated(self, reference, now):
        data = _screen(
            ["Metformin"],
            patient_conditions=[{"condition": "Renal failure", "status": "active", "severity": "severe"}],
            patient_characteristics={"age": 70, "renal_function": "impaired"},
        )
        result = interactions.screen_interactions(data, reference, now)
        types = sorted(item["type"] for item in result["interactions_found"])

        assert types == ["contraindication", "drug_condition"]
        assert result["summary"]["contraindicated_count"] == 2
        assert result["summary"]["requires_immediate_action"] is True

    def test_food_matching_folds_spaces(self, reference, now):
        result = interactions.screen_interactions(
            _screen(["Warfarin"], dietary_supplements=["Vitamin K"]), reference, now
        )
        found = result["interactions_found"]
        assert found[0]["type"] == "drug_food"
        assert found[0]["interacting_entities"]["entity_2"] == {"type": "food", "name": "Vitamin K"}

    def test_clean_list(self, reference, now):
        result = interactions.screen_interactions(_screen(["Amlodipine", "Metformin"]), reference, now)
        assert result["summary"]["total_interactions"] == 0
        assert result["screening_id"].startswith("int_")


class TestAssessInteractionSignificance:
    """Tests for significance scoring."""

    def test_healthy_adult_is_low_risk(self, reference, now):
        result = interactions.assess_interaction_significance(
            _significance(duration="acute", alternatives=True), reference, now
        )

        assert result["patient_specific_risk"] == "low"
        assert result["probability_of_occurrence"] == "unlikely"
        assert result["potential_harm"]["severity"] == "minor"
        assert result["clinical_significance_score"] == 1
        assert result["requires_intervention"] is False
        assert result["urgency"] == "routine"

    def test_frail_elderly_needs_intervention(self, reference, now):
        data = _significance(
            age=82,
            renal="moderate_impairment",
            comorbidities=["heart disease", "diabetes", "COPD", "CKD"],
            meds=["a", "b", "c", "d", "e", "f"],
            reactions=["rash"],
        )
        result = interactions.assess_interaction_significance(data, reference, now)

        assert result["patient_specific_risk"] == "very_high"
        assert result["probability_of_occurrence"] == "highly_probable"
        assert result["potential_harm"]["severity"] == "life_threatening"
        assert result["clinical_significance_score"] == 9
        assert result["urgency"] == "immediate"
        assert "Monitor renal function closely" in result["monitoring_recommendations"]

    @pytest.mark.parametrize(
        "risk,probability,harm,score",
        [("low", "unlikely", "minor", 1), ("moderate", "possible", "moderate", 3), ("very_high", "highly_probable", "life_threatening", 9)],
    )
    def test_score_scale(self, risk, probability, harm, score):
        assert interactions.significance_score(risk, probability, harm) == score


class TestRecommendInteractionManagement:
    """Tests for management strategies."""

    @staticmethod
    def _input(alternatives=(), urgency="routine", cost=False, formulary=()):
        return RecommendInteractionManagementInput.model_validate(
            {
                "assessment_id": "assess_1",
                "available_alternatives": [
                    {"drug_name": name, "same_class": True, "interaction_profile": "minimal"} for name in alternatives
                ],
                "clinical_constraints": {
                    "treatment_urgency": urgency,
                    "cost_considerations": cost,
                    "formulary_restrictions": list(formulary),
                },
            }
        )

    def test_alternative_leads(self, reference):
        result = interactions.recommend_interaction_management(self._input(["Apixaban"]), reference)
        strategies = [item["strategy"] for item in result["recommendations"]]

        assert strategies == ["use_alternative", "separate_administration", "monitor_closely"]
        assert result["assessment_id"] == "assess_1"
        assert result["consultation_recommended"]["required"] is False

    def test_no_alternatives_adjusts_and_consults(self, reference):
        result = interactions.recommend_interaction_management(self._input(urgency="emergency"), reference)
        strategies = [item["strategy"] for item in result["recommendations"]]

        assert strategies == ["adjust_doses", "separate_administration", "monitor_closely"]
        assert result["consultation_recommended"] == {
            "required": True,
            "specialist_type": "clinical_pharmacist",
            "urgency": "immediate",
        }


class TestDocumentInteractionDecision:
    """Tests for decision documentation."""

    @staticmethod
    def _input(action: str, outcome=None, monitoring=True):
        return DocumentInteractionDecisionInput.model_validate(
            {
                "interaction_id": "ddi_1",
                "assessment_id": "assess_1",
                "decision_maker": "MD-9",
                "decision_datetime": "2024-06-01T09:00:00Z",
                "decision": {
                    "action_taken": action,
                    "rationale": "Bleeding risk outweighs benefit",
                    "patient_informed": True,
                    "patient_consent": True,
                    "monitoring_plan_implemented": monitoring,
                },
                "outcome_if_known": outcome,
            }
        )

    def test_discontinued_after_occurrence_keeps_ten_years(self, reference, now):
        outcome = {"interaction_occurred": True, "severity_observed": "moderate", "management_effective": True}
        result = interactions.document_interaction_decision(self._input("discontinued_drug", outcome), reference, now)

        assert result["regulatory_compliance"]["retention_period"] == "10 years"
        assert result["follow_up_required"]["follow_up_date"] == "2024-06-04T12:00:00+00:00"
        assert result["documentation_id"].startswith("doc_")
        assert len(result["audit_trail"]["outcome_updates"]) == 1

    def test_continue_as_is_without_monitoring(self, reference, now):
        result = interactions.document_interaction_decision(
            self._input("continue_as_is", monitoring=False), reference, now
        )

        assert result["follow_up_required"] == {"required": False, "follow_up_actions": []}
        assert result["quality_metrics"]["appropriate_management"] is False
        assert result["regulatory_compliance"]["retention_period"] == "7 years"
        assert result["regulatory_compliance"]["audit_ready"] is False
