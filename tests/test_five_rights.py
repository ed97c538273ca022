"""
Unit Tests for Five-Rights Administration Checks

Tests for right patient, medication, dose, route, time and documentation.
"""
import pytest

from md_mcp_server.clinical import five_rights
from md_mcp_server.models.five_rights import (
    VerifyRightDocumentationInput,
    VerifyRightDoseInput,
    VerifyRightMedicationInput,
    VerifyRightPatientInput,
    VerifyRightRouteInput,
    VerifyRightTimeInput,
)

EXPECTED = {"name": "Maria Lopez", "mrn": "MRN-5521", "date_of_birth": "1961-03-14"}


def _patient(first, second) -> VerifyRightPatientInput:
    return VerifyRightPatientInput.model_validate(
        {
            "patient_identifiers": {"identifier_1": first, "identifier_2": second},
            "expected_patient": EXPECTED,
            "verification_datetime": "2024-06-01T09:00:00Z",
            "verifier_id": "RN-7",
        }
    )


def _medication(label="Heparin Sodium", high_alert=False, double_checked=False, expires="2025-01-01T00:00:00Z",
                lot="L123"):
    return VerifyRightMedicationInput.model_validate(
        {
            "order_details": {"ordered_medication": "heparin", "order_id": "ORD-1"},
            "medication_in_hand": {
                "label_name": label,
                "ndc_code": "63323-540-11",
                "lot_number": lot,
                "expiration_date": expires,
            },
            "verification_datetime": "2024-06-01T09:00:00Z",
            "high_alert_medication": high_alert,
            "double_check_completed": double_checked,
        }
    )


def _dose(ordered="50 mg", amount=50.0, units="mg", age=45, second=None, **factors):
    return VerifyRightDoseInput.model_validate(
        {
            "order_details": {"ordered_dose": ordered},
            "prepared_dose": {"amount": amount, "units": units},
            "patient_factors": {"age": age, **factors},
            "verification_datetime": "2024-06-01T09:00:00Z",
            "second_verifier_id": second,
        }
    )


def _route(route="oral", swallow="normal", conscious="alert", iv=None, formulation="tablet", routes=("oral",)):
    return VerifyRightRouteInput.model_validate(
        {
            "order_details": {"ordered_route": route},
            "patient_assessment": {
                "conscious_level": conscious,
                "swallow_ability": swallow,
                "iv_access": iv or {"available": False},
            },
            "medication_formulation": {"available_routes": list(routes), "formulation_type": formulation},
        }
    )


def _time(current, frequency="q6h", last=None, critical=False, **factors):
    return VerifyRightTimeInput.model_validate(
        {
            "order_details": {
                "ordered_frequency": frequency,
                "scheduled_time": "2024-06-01T12:00:00Z",
                "time_critical": critical,
                "administration_window": {"earliest": "2024-06-01T11:30:00Z", "latest": "2024-06-01T12:30:00Z"},
            },
            "current_datetime": current,
            "last_dose": {"datetime": last, "dose_given": "50 mg"} if last else None,
            "patient_factors": factors,
        }
    )


class TestVerifyRightPatient:
    """Tests for two-identifier patient verification."""

    def test_exact_match_can_proceed(self, reference):
        data = _patient(
            {"type": "name", "value": " maria lopez ", "verification_method": "verbal"},
            {"type": "mrn", "value": "MRN-5521", "verification_method": "wristband"},
        )
        result = five_rights.verify_right_patient(data, reference)["verification_result"]

        assert result["match_confidence"] == "exact"
        assert result["identifiers_matched"] == ["name", "mrn"]
        assert result["can_proceed"] is True

    def test_same_identifier_type_is_rejected(self, reference):
        data = _patient(
            {"type": "mrn", "value": "MRN-5521", "verification_method": "verbal"},
            {"type": "mrn", "value": "MRN-5521", "verification_method": "wristband"},
        )
        result = five_rights.verify_right_patient(data, reference)["verification_result"]

        assert result["match_confidence"] == "no_match"
        assert result["discrepancies"] == ["Two different identifiers required"]
        assert result["can_proceed"] is False

    def test_mismatch_is_probable(self, reference):
        data = _patient(
            {"type": "name", "value": "Maria Lopez", "verification_method": "verbal"},
            {"type": "date_of_birth", "value": "1961-04-14", "verification_method": "wristband"},
        )
        result = five_rights.verify_right_patient(data, reference)["verification_result"]

        assert result["match_confidence"] == "probable"
        assert result["discrepancies"] == [
            "Identifier 2 (date_of_birth) mismatch: Expected: 1961-03-14, Got: 1961-04-14"
        ]
        assert result["action_if_discrepancy"] == "Stop and resolve discrepancies before proceeding"

    def test_visual_only_is_not_appropriate(self, reference):
        data = _patient(
            {"type": "name", "value": "Maria Lopez", "verification_method": "visual"},
            {"type": "photo", "value": "photo-1", "verification_method": "visual"},
        )
        result = five_rights.verify_right_patient(data, reference)["verification_result"]

        assert result["patient_confirmed"] is True
        assert result["verification_method_appropriate"] is False
        assert result["can_proceed"] is False


class TestVerifyRightMedication:
    """Tests for medication identity checks."""

    def test_label_containing_generic_matches(self, reference):
        result = five_rights.verify_right_medication(_medication(), reference)["verification_result"]

        assert result["generic_name_match"] is True
        assert result["can_proceed"] is True
        assert result["alerts"] == []

    def test_high_alert_needs_double_check(self, reference):
        blocked = five_rights.verify_right_medication(_medication(high_alert=True), reference)
        cleared = five_rights.verify_right_medication(_medication(high_alert=True, double_checked=True), reference)

        assert blocked["verification_result"]["can_proceed"] is False
        assert cleared["verification_result"]["can_proceed"] is True
        assert "ALERT: High-alert medication - independent double-check required" in (
            cleared["verification_result"]["alerts"]
        )

    def test_expired_wrong_drug(self, reference):
        data = _medication(label="Insulin glargine", expires="2024-05-01T00:00:00Z", lot="")
        result = five_rights.verify_right_medication(data, reference)["verification_result"]

        assert result["can_proceed"] is False
        assert result["alerts"] == [
            "CRITICAL: Medication name does not match order",
            "CRITICAL: Medication has expired",
            "WARNING: Lot number not available",
        ]


class TestVerifyRightDose:
    """Tests for dose verification."""

    def test_matching_dose_proceeds(self, reference):
        result = five_rights.verify_right_dose(_dose(), reference)["verification_result"]

        assert result["calculation_correct"] is True
        assert result["dose_range_check"] == {
            "min_dose": "0.1 mg",
            "max_dose": "1000 mg",
            "ordered_dose_appropriate": True,
        }
        assert result["adjustment_for_organ_function"] == {"required": False, "applied": False, "new_dose": ""}
        assert result["can_proceed"] is True

    def test_unit_mismatch_is_incorrect(self, reference):
        result = five_rights.verify_right_dose(_dose(units="mcg"), reference)["verification_result"]

        assert result["calculation_correct"] is False
        assert result["warnings"][0] == "CRITICAL: Dose calculation incorrect"

    def test_pediatric_ceiling(self, reference):
        result = five_rights.verify_right_dose(_dose("150 mg", 150, age=10), reference)["verification_result"]

        assert result["within_normal_range"] is False
        assert "ALERT: Pediatric patient - verify age-appropriate dosing" in result["warnings"]

    def test_high_dose_requires_second_verifier(self, reference):
        unchecked = five_rights.verify_right_dose(_dose("200 mg", 200), reference)["verification_result"]
        checked = five_rights.verify_right_dose(_dose("200 mg", 200, second="RN-8"), reference)["verification_result"]

        assert unchecked["high_alert_independent_calculation"]["required"] is True
        assert unchecked["can_proceed"] is False
        assert checked["can_proceed"] is True

    def test_renal_and_hepatic_adjustment(self, reference):
        data = _dose("100 mg", 100, renal_function="impaired", hepatic_function="impaired")
        result = five_rights.verify_right_dose(data, reference)["verification_result"]

        assert result["adjustment_for_organ_function"]["new_dose"] == "37.5 mg"

    def test_unparseable_order(self):
        assert five_rights.parse_ordered_dose("see protocol") == (0.0, "unknown")


class TestVerifyRightRoute:
    """Tests for route verification."""

    def test_oral_tablet_for_alert_patient(self, reference):
        result = five_rights.verify_right_route(_route(), reference)["verification_result"]

        assert result["route_confirmed"] is True
        assert result["alternative_route_needed"] == {
            "required": False,
            "suggested_route": None,
            "requires_order_change": False,
        }

    def test_impaired_swallow_suggests_im(self, reference):
        result = five_rights.verify_right_route(_route(swallow="impaired"), reference)["verification_result"]

        assert result["contraindications"] == ["Impaired swallow - oral route contraindicated"]
        assert result["alternative_route_needed"]["suggested_route"] == "IM"
        assert result["can_proceed"] is False

    def test_iv_without_access(self, reference):
        data = _route(route="IV", formulation="injection", routes=("IV", "IM"))
        result = five_rights.verify_right_route(data, reference)["verification_result"]

        assert result["access_available"] is False
        assert result["contraindications"] == ["No IV access available"]
        assert result["alternative_route_needed"]["suggested_route"] == "IM"

    def test_npo_without_known_alternative(self, reference):
        result = five_rights.verify_right_route(_route(swallow="npo"), reference)["verification_result"]
        assert result["alternative_route_needed"] == {
            "required": True,
            "suggested_route": None,
            "requires_order_change": False,
        }

    def test_formulation_must_offer_route(self, reference):
        data = _route(route="topical", formulation="tablet", routes=("topical",))
        result = five_rights.verify_right_route(data, reference)["verification_result"]
        assert result["route_appropriate_for_formulation"] is False


class TestVerifyRightTime:
    """Tests for administration timing."""

    def test_on_time_dose(self, reference):
        data = _time("2024-06-01T12:10:00Z", last="2024-06-01T06:00:00Z")
        result = five_rights.verify_right_time(data, reference)["verification_result"]

        assert result["minimum_interval_minutes"] == 360
        assert result["recommended_action"] == "give_now"
        assert result["delay_until"] == "2024-06-01T12:10:00+00:00"

    def test_early_routine_dose_waits_for_schedule(self, reference):
        data = _time("2024-06-01T11:00:00Z")
        result = five_rights.verify_right_time(data, reference)["verification_result"]

        assert result["within_window"] is False
        assert result["recommended_action"] == "delay_until"
        assert result["delay_until"] == "2024-06-01T12:00:00+00:00"

    def test_late_time_critical_dose_escalates(self, reference):
        data = _time("2024-06-01T13:00:00Z", critical=True)
        result = five_rights.verify_right_time(data, reference)["verification_result"]

        assert result["time_critical_status"]["deviation_minutes"] == 60.0
        assert result["time_critical_status"]["deviation_acceptable"] is False
        assert result["recommended_action"] == "contact_prescriber"
        assert result["delay_until"] is None

    def test_interval_not_met(self, reference):
        data = _time("2024-06-01T12:00:00Z", last="2024-06-01T09:00:00Z")
        result = five_rights.verify_right_time(data, reference)["verification_result"]
        assert result["minimum_interval_met"] is False

    @pytest.mark.parametrize(
        "frequency,minutes",
        [("twice daily", 720), ("Daily", 1440), ("q8h", 480), ("PRN", 240)],
    )
    def test_interval_table(self, reference, frequency, minutes):
        assert five_rights.minimum_interval_minutes(frequency, reference) == minutes

    def test_meal_timing(self, reference):
        data = _time("2024-06-01T12:00:00Z", meal_timing="with", fasting_status=True)
        assert five_rights.verify_right_time(data, reference)["verification_result"]["meal_requirements_met"] is False


class TestVerifyRightDocumentation:
    """Tests for MAR documentation."""

    @staticmethod
    def _input(**response):
        return VerifyRightDocumentationInput.model_validate(
            {
                "administration_details": {
                    "patient_id": "P-500",
                    "medication": "Heparin",
                    "dose": "5000 units",
                    "route": "SC",
                    "site": "abdomen",
                    "administration_datetime": "2024-06-01T12:05:00Z",
                    "administrator_id": "RN-7",
                    "administrator_signature": "RN-7/sig",
                },
                "verification_results": {
                    "patient_verified": True,
                    "medication_verified": True,
                    "dose_verified": True,
                    "route_verified": True,
                    "time_verified": True,
                },
                "patient_response": response,
                "witness_id": "RN-8",
            }
        )

    def test_complete_record(self, reference, now):
        record = five_rights.verify_right_documentation(self._input(), reference, now)["documentation_record"]

        assert record["complete"] is True
        assert record["all_five_rights_verified"] is True
        assert record["mar_entry"]["witnessed_by"] == "RN-8"
        assert record["mar_entry"]["time_given"] == "2024-06-01T12:05:00+00:00"
        assert record["record_id"].startswith(f"DOC-{int(now.timestamp() * 1000)}-")

    def test_reaction_without_effects_is_incomplete(self, reference, now):
        record = five_rights.verify_right_documentation(
            self._input(immediate_reaction="moderate"), reference, now
        )["documentation_record"]

        assert record["missing_elements"] == ["Adverse effects documentation"]
        assert record["adverse_reaction"] is True
        assert record["adverse_reaction_documented"] is False
        assert record["follow_up_required"] is True

    def test_refusal_needs_reason(self, reference, now):
        record = five_rights.verify_right_documentation(
            self._input(patient_refused=True), reference, now
        )["documentation_record"]
        assert record["missing_elements"] == ["Refusal reason documentation"]
