"""
Unit Tests for SOAP Documentation

Tests for the four section tools and note compilation.
"""
from md_mcp_server.clinical import soap
from md_mcp_server.models.soap import (
    CompileSoapNoteInput,
    DocumentAssessmentInput,
    DocumentObjectiveInput,
    DocumentPlanInput,
    DocumentSubjectiveInput,
)

ENCOUNTER = "ENC-42"


def _subjective(severity=4, ros=None, compliance=None, functional="Independent with ADLs"):
    return DocumentSubjectiveInput.model_validate(
        {
            "patient_id": "P-400",
            "encounter_id": ENCOUNTER,
            "encounter_datetime": "2024-06-01T09:00:00Z",
            "chief_complaint": "My chest feels tight",
            "history_present_illness": {
                "opqrst": {
                    "onset": "two days ago",
                    "palliating_provoking": "worse with exertion",
                    "quality": "pressure-like",
                    "region": "substernal",
                    "severity": severity,
                    "time_course": "intermittent",
                },
                "associated_symptoms": ["diaphoresis"],
            },
            "review_of_systems": ros or {},
            "medications_compliance": compliance or {"taking_as_prescribed": True},
            "functional_status": functional,
        }
    )


def _objective(heart_rate=88, spo2=97, labs=(), previous=None):
    return DocumentObjectiveInput.model_validate(
        {
            "encounter_id": ENCOUNTER,
            "vital_signs": {
                "datetime": "2024-06-01T09:10:00Z",
                "temperature": 37.1,
                "heart_rate": heart_rate,
                "blood_pressure": "132/84",
                "respiratory_rate": 16,
                "oxygen_saturation": spo2,
            },
            "previous_vital_signs": previous,
            "physical_examination": {
                "general_appearance": "Alert, mild distress",
                "systems_examined": {
                    "cardiovascular": {"heart_sounds": "S1 S2 normal", "peripheral_pulses": "2+ bilaterally"},
                    "respiratory": {"inspection": "normal", "auscultation": "clear", "percussion": "resonant"},
                },
            },
            "laboratory_results": list(labs),
        }
    )


def _assessment(stability="stable", confidence="high", differentials=None, problems=()):
    return DocumentAssessmentInput.model_validate(
        {
            "encounter_id": ENCOUNTER,
            "subjective_section_id": "subj_1",
            "objective_section_id": "obj_1",
            "patient_demographics": {"age": 58, "sex": "M"},
            "working_diagnosis": {
                "primary": "Stable angina (I20.9)",
                "confidence": confidence,
                "clinical_stability": stability,
            },
            "differential_diagnoses": differentials
            or [{"diagnosis": "GERD", "probability": "low"}],
            "problem_list": list(problems),
        }
    )


class TestDocumentSubjective:
    """Tests for the subjective section."""

    def test_narrative_and_full_score(self, reference, now):
        ros = {system: ["none"] for system in ("constitutional", "cardiovascular", "respiratory", "gastrointestinal",
                                                "genitourinary", "musculoskeletal")}
        section = soap.document_subjective(_subjective(ros=ros), reference, now)["subjective_section"]

        assert section["narrative"].startswith('Chief Complaint: "My chest feels tight"')
        assert "Severity is rated as 4 on a 0-10 scale." in section["narrative"]
        assert section["completeness_score"] == 100
        assert section["missing_elements"] == []
        assert section["section_id"].startswith("subj_")

    def test_sparse_review_of_systems_costs_points(self, reference, now):
        section = soap.document_subjective(_subjective(), reference, now)["subjective_section"]

        assert section["completeness_score"] == 90
        assert section["missing_elements"] == ["Comprehensive review of systems"]

    def test_red_flags(self, reference, now):
        data = _subjective(
            severity=9,
            ros={"cardiovascular": ["Chest pain on exertion"]},
            compliance={"taking_as_prescribed": False, "missed_doses": "critical anticoagulant doses"},
            functional="Unable to climb stairs",
        )
        flags = soap.document_subjective(data, reference, now)["subjective_section"]["red_flags_identified"]

        assert flags == [
            "High severity symptoms (8-10/10)",
            "Concerning symptom reported: Chest pain on exertion",
            "Non-compliance with critical medications",
            "Functional decline reported",
        ]


class TestDocumentObjective:
    """Tests for the objective section."""

    def test_normal_exam_has_no_findings(self, reference, now):
        section = soap.document_objective(_objective(), reference, now)["objective_section"]

        assert section["abnormal_findings"] == []
        assert section["critical_values"] == []
        assert section["trends_from_previous"] == []
        assert "Heart Rate: 88 bpm" in section["narrative"]

    def test_hypoxia_and_critical_lab(self, reference, now):
        lab = {
            "test_name": "Potassium",
            "result": "6.8 mEq/L",
            "reference_range": "3.5-5.0",
            "flag": "critical",
            "datetime": "2024-06-01T08:00:00Z",
        }
        section = soap.document_objective(_objective(heart_rate=125, spo2=88, labs=[lab]), reference, now)[
            "objective_section"
        ]
        severities = {item["finding"]: item["severity"] for item in section["abnormal_findings"]}

        assert severities["Tachycardia: HR 125 bpm"] == "moderate"
        assert severities["Low oxygen saturation: 88%"] == "severe"
        assert [value["test_name"] for value in section["critical_values"]] == ["Potassium", "Oxygen Saturation"]

    def test_trends_against_previous_vitals(self, reference, now):
        section = soap.document_objective(
            _objective(heart_rate=105, spo2=96, previous={"heart_rate": 120, "oxygen_saturation": 96}), reference, now
        )["objective_section"]
        trends = {item["parameter"]: item["trend"] for item in section["trends_from_previous"]}

        assert trends == {"Heart Rate": "improving", "Oxygen Saturation": "stable"}


class TestDocumentAssessment:
    """Tests for risk stratification and prognosis."""

    def test_stable_high_confidence_is_low_risk(self, reference, now):
        section = soap.document_assessment(_assessment(), reference, now)["assessment_section"]

        assert section["clinical_summary"] == "58-year-old male with Stable angina (I20.9), currently stable."
        assert section["risk_stratification"] == {"overall_risk": "low", "specific_risks": [], "risk_score": 1}
        assert section["prognosis"] == "Good prognosis with appropriate treatment and monitoring."

    def test_critical_with_rule_out_is_critical(self, reference, now):
        data = _assessment(
            stability="critical",
            confidence="low",
            differentials=[{"diagnosis": "Aortic dissection", "probability": "high", "requires_rule_out": True}],
            problems=[{"problem": "Chest pain", "status": "active", "priority": 1}],
        )
        section = soap.document_assessment(data, reference, now)["assessment_section"]

        assert section["risk_stratification"]["overall_risk"] == "critical"
        assert section["risk_stratification"]["risk_score"] == 9
        assert section["prognosis"].endswith("Close monitoring required due to high-risk differential diagnoses.")
        assert "   * Requires ruling out" in section["narrative"]


class TestDocumentPlan:
    """Tests for plan orders and follow-up."""

    def test_orders_and_follow_up(self, reference, now):
        data = DocumentPlanInput.model_validate(
            {
                "encounter_id": ENCOUNTER,
                "assessment_section_id": "assess_1",
                "treatment_plan": {
                    "medications": [
                        {
                            "action": "start",
                            "drug_name": "Aspirin",
                            "dose": "81 mg",
                            "frequency": "daily",
                            "route": "oral",
                            "duration": "indefinite",
                            "indication": "secondary prevention",
                        },
                        {
                            "action": "continue",
                            "drug_name": "Lisinopril",
                            "dose": "10 mg",
                            "frequency": "daily",
                            "route": "oral",
                            "duration": "indefinite",
                            "indication": "hypertension",
                        },
                    ]
                },
                "diagnostic_plan": {
                    "laboratory_tests": ["Troponin"],
                    "consultations": [{"specialty": "Cardiology", "urgency": "urgent", "reason": "Angina"}],
                },
                "patient_education": {"patient_understanding": "good"},
                "disposition": {
                    "location": "home",
                    "follow_up": {"provider": "Dr. Chen", "timeframe": "2 weeks"},
                },
            }
        )
        section = soap.document_plan(data, reference, now)["plan_section"]

        assert [order["type"] for order in section["orders_to_place"]] == ["medication", "laboratory", "consultation"]
        assert [rx["drug_name"] for rx in section["prescriptions_to_write"]] == ["Aspirin"]
        assert section["referrals_to_generate"][0]["specialty"] == "Cardiology"
        assert section["follow_up_schedule"] == [
            {"date": "2024-06-15", "provider": "Dr. Chen", "purpose": "Routine follow-up"}
        ]

    def test_unreadable_timeframe_means_one_week(self, now):
        assert soap.follow_up_date("as needed", now).date().isoformat() == "2024-06-08"
        assert soap.follow_up_date("3 months", now).date().isoformat() == "2024-08-30"


class TestCompileSoapNote:
    """Tests for note assembly and coding."""

    @staticmethod
    def _input(texts=None, time_spent=35, complexity="moderate", encounter_type="telehealth"):
        return CompileSoapNoteInput.model_validate(
            {
                "encounter_id": ENCOUNTER,
                "subjective_section_id": "subj_1",
                "objective_section_id": "obj_1",
                "assessment_section_id": "assess_1",
                "plan_section_id": "plan_1",
                "section_texts": texts or {},
                "provider_info": {
                    "provider_id": "MD-9",
                    "provider_name": "Dana Chen",
                    "credentials": "MD",
                    "signature": True,
                },
                "note_metadata": {
                    "encounter_type": encounter_type,
                    "note_type": "progress",
                    "time_spent": time_spent,
                    "complexity_level": complexity,
                },
            }
        )

    def test_placeholders_for_missing_sections(self, reference, now):
        note = soap.compile_soap_note(self._input({"subjective": "S text"}), reference, now)["complete_note"]

        assert note["sections"]["subjective"] == "S text"
        assert note["sections"]["plan"] == "[Plan content from section plan_1]"
        assert note["quality_checks"]["all_sections_complete"] is False
        assert note["full_text"].startswith("SOAP NOTE\n" + "=" * 50)

    def test_coding_suggestions(self, reference, now):
        note = soap.compile_soap_note(self._input(), reference, now)["complete_note"]
        coding = note["quality_checks"]["coding_suggested"]

        assert coding["icd10_codes"] == ["Z03.89"]
        assert coding["cpt_codes"] == ["99214", "99285", "99444"]
        assert note["encounter_datetime"] == now.isoformat()
