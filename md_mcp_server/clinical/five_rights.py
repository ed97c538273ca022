"""
Five-rights medication administration checks: right patient, medication,
dose, route and time, plus right documentation.

Every check is a pure function of its input. Time-based checks compare
against datetimes carried in the input, never the wall clock.
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..models.five_rights import (
    ExpectedPatient,
    PatientIdentifier,
    VerifyRightDocumentationInput,
    VerifyRightDoseInput,
    VerifyRightMedicationInput,
    VerifyRightPatientInput,
    VerifyRightRouteInput,
    VerifyRightTimeInput,
)
from ..reference import ReferenceData
from ..reference.five_rights import (
    DEFAULT_DOSING_INTERVAL,
    DOSE_TOLERANCE,
    HEPATIC_DOSE_FACTOR,
    HIGH_ALERT_AGE,
    HIGH_ALERT_AMOUNT,
    MAX_DOSE,
    MIN_DOSE,
    MIN_MEASURABLE_AMOUNT,
    MIN_MEASURABLE_VOLUME_ML,
    PEDIATRIC_AGE,
    PEDIATRIC_MAX_DOSE,
    RENAL_DOSE_FACTOR,
    ROUTINE_TOLERANCE_MINUTES,
    TIME_CRITICAL_TOLERANCE_MINUTES,
)
from .common import format_number, iso, utc_now

_DOSE = re.compile(r"(\d+(?:\.\d+)?)\s*(\w+)")


# Right patient


def _identifier_match(identifier: PatientIdentifier, expected: ExpectedPatient) -> Tuple[bool, str]:
    if identifier.type == "name":
        matched = identifier.value.strip().lower() == expected.name.strip().lower()
        wanted = expected.name
    elif identifier.type == "mrn":
        matched = identifier.value == expected.mrn
        wanted = expected.mrn
    elif identifier.type == "date_of_birth":
        matched = identifier.value == expected.date_of_birth
        wanted = expected.date_of_birth
    else:
        # photo and biometric comparison happen outside this system
        return True, ""
    return matched, "" if matched else f"Expected: {wanted}, Got: {identifier.value}"


def verification_method_appropriate(data: VerifyRightPatientInput) -> bool:
    """At least one verbal check, not purely visual, two different identifier types."""
    first = data.patient_identifiers.identifier_1
    second = data.patient_identifiers.identifier_2
    methods = (first.verification_method, second.verification_method)
    return "verbal" in methods and any(method != "visual" for method in methods) and first.type != second.type


def verify_right_patient(
    data: VerifyRightPatientInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    identifiers = (data.patient_identifiers.identifier_1, data.patient_identifiers.identifier_2)
    if identifiers[0].type == identifiers[1].type:
        return {
            "verification_result": {
                "patient_confirmed": False,
                "match_confidence": "no_match",
                "identifiers_matched": [],
                "discrepancies": ["Two different identifiers required"],
                "verification_method_appropriate": False,
                "can_proceed": False,
                "action_if_discrepancy": "Obtain two different identifiers and re-verify patient identity",
            }
        }

    matched: List[str] = []
    discrepancies: List[str] = []
    for number, identifier in enumerate(identifiers, start=1):
        ok, discrepancy = _identifier_match(identifier, data.expected_patient)
        if ok:
            matched.append(identifier.type)
        else:
            discrepancies.append(f"Identifier {number} ({identifier.type}) mismatch: {discrepancy}")

    confidence = {2: "exact", 1: "probable"}.get(len(matched), "no_match")
    confirmed = confidence == "exact"
    appropriate = verification_method_appropriate(data)
    can_proceed = confirmed and appropriate
    return {
        "verification_result": {
            "patient_confirmed": confirmed,
            "match_confidence": confidence,
            "identifiers_matched": matched,
            "discrepancies": discrepancies,
            "verification_method_appropriate": appropriate,
            "can_proceed": can_proceed,
            "action_if_discrepancy": "Proceed with medication administration"
            if can_proceed
            else "Stop and resolve discrepancies before proceeding",
        }
    }


# Right medication


def generic_name_match(data: VerifyRightMedicationInput) -> bool:
    ordered = data.order_details.ordered_medication.strip().lower()
    label = data.medication_in_hand.label_name.strip().lower()
    if ordered == label or ordered in label:
        return True
    return any(brand.strip().lower() in label for brand in data.order_details.brand_names if brand.strip())


def verify_right_medication(
    data: VerifyRightMedicationInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    in_hand = data.medication_in_hand
    name_match = generic_name_match(data)
    ndc_match = bool(in_hand.ndc_code.strip())
    expiration_valid = in_hand.expiration_date > data.verification_datetime
    # No storage telemetry is available; the check always passes.
    storage_ok = True
    double_check_required = data.high_alert_medication

    alerts: List[str] = []
    if not name_match:
        alerts.append("CRITICAL: Medication name does not match order")
    if not ndc_match:
        alerts.append("WARNING: NDC code verification failed")
    if not expiration_valid:
        alerts.append("CRITICAL: Medication has expired")
    if data.high_alert_medication:
        alerts.append("ALERT: High-alert medication - independent double-check required")
    if data.look_alike_sound_alike:
        alerts.append("WARNING: Look-alike/Sound-alike medication - extra caution required")
    if not in_hand.lot_number.strip():
        alerts.append("WARNING: Lot number not available")

    can_proceed = (
        name_match
        and expiration_valid
        and storage_ok
        and (not double_check_required or data.double_check_completed)
    )
    return {
        "verification_result": {
            "medication_confirmed": name_match,
            "generic_name_match": name_match,
            "ndc_match": ndc_match,
            "expiration_valid": expiration_valid,
            "storage_conditions_met": storage_ok,
            "high_alert_double_check_required": double_check_required,
            "double_check_completed": data.double_check_completed,
            "lasa_warning": data.look_alike_sound_alike,
            "can_proceed": can_proceed,
            "alerts": alerts,
        }
    }


# Right dose


def parse_ordered_dose(text: str) -> Tuple[float, str]:
    match = _DOSE.search(text or "")
    if not match:
        return 0.0, "unknown"
    return float(match.group(1)), match.group(2)


def dose_within_range(amount: float, age: float) -> bool:
    if amount <= 0 or amount > MAX_DOSE:
        return False
    return not (age < PEDIATRIC_AGE and amount > PEDIATRIC_MAX_DOSE)


def organ_function_adjustment(data: VerifyRightDoseInput) -> Dict[str, Any]:
    factors = data.patient_factors
    renal = factors.renal_function == "impaired"
    hepatic = factors.hepatic_function == "impaired"
    if not (factors.dose_adjustment_required or renal or hepatic):
        return {"required": False, "applied": False, "new_dose": ""}

    multiplier = 1.0
    if renal:
        multiplier *= RENAL_DOSE_FACTOR
    if hepatic:
        multiplier *= HEPATIC_DOSE_FACTOR
    prepared = data.prepared_dose
    return {
        "required": True,
        "applied": True,
        "new_dose": f"{format_number(prepared.amount * multiplier)} {prepared.units}",
    }


def verify_right_dose(
    data: VerifyRightDoseInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    prepared = data.prepared_dose
    factors = data.patient_factors
    ordered_amount, ordered_units = parse_ordered_dose(data.order_details.ordered_dose)

    calculation_correct = (
        abs(prepared.amount - ordered_amount) <= DOSE_TOLERANCE and prepared.units.lower() == ordered_units.lower()
    )
    within_range = dose_within_range(ordered_amount, factors.age)
    measurable = prepared.amount >= MIN_MEASURABLE_AMOUNT and (
        prepared.volume is None or prepared.volume >= MIN_MEASURABLE_VOLUME_ML
    )

    high_alert = prepared.amount > HIGH_ALERT_AMOUNT or factors.age > HIGH_ALERT_AGE
    independently_checked = bool(data.second_verifier_id)

    warnings: List[str] = []
    if not calculation_correct:
        warnings.append("CRITICAL: Dose calculation incorrect")
    if not within_range:
        warnings.append("WARNING: Dose outside normal range")
    if not measurable:
        warnings.append("WARNING: Measurement may not be accurate")
    if factors.age < PEDIATRIC_AGE:
        warnings.append("ALERT: Pediatric patient - verify age-appropriate dosing")
    if factors.renal_function == "impaired":
        warnings.append("ALERT: Renal impairment - dose adjustment may be required")
    if factors.hepatic_function == "impaired":
        warnings.append("ALERT: Hepatic impairment - dose adjustment may be required")
    if prepared.amount > HIGH_ALERT_AMOUNT:
        warnings.append("ALERT: High dose - independent verification recommended")

    return {
        "verification_result": {
            "dose_confirmed": calculation_correct,
            "calculation_correct": calculation_correct,
            "within_normal_range": within_range,
            "measurement_appropriate": measurable,
            "adjustment_for_organ_function": organ_function_adjustment(data),
            "high_alert_independent_calculation": {
                "required": high_alert,
                "completed": independently_checked,
                "second_verifier_id": data.second_verifier_id,
            },
            "dose_range_check": {
                "min_dose": f"{format_number(MIN_DOSE)} {ordered_units}",
                "max_dose": f"{format_number(MAX_DOSE)} {ordered_units}",
                "ordered_dose_appropriate": MIN_DOSE <= ordered_amount <= MAX_DOSE,
            },
            "can_proceed": calculation_correct
            and within_range
            and measurable
            and (not high_alert or independently_checked),
            "warnings": warnings,
        }
    }


# Right route


def route_appropriate_for_patient(data: VerifyRightRouteInput) -> bool:
    route = data.order_details.ordered_route
    patient = data.patient_assessment
    if route == "oral":
        return patient.conscious_level != "unconscious" and patient.swallow_ability == "normal"
    if route == "IV":
        return patient.iv_access.available and patient.iv_access.patent
    return True


def route_appropriate_for_formulation(data: VerifyRightRouteInput, reference: ReferenceData) -> bool:
    route = data.order_details.ordered_route
    formulation = data.medication_formulation
    if route not in formulation.available_routes:
        return False
    allowed = reference.formulation_routes.get(formulation.formulation_type)
    return allowed is None or route in allowed


def route_access_available(data: VerifyRightRouteInput) -> bool:
    route = data.order_details.ordered_route
    patient = data.patient_assessment
    if route == "IV":
        return patient.iv_access.available and patient.iv_access.patent
    if route in ("IM", "SC"):
        return patient.conscious_level != "unconscious"
    if route == "inhaled":
        return patient.conscious_level == "alert"
    return True


def route_contraindications(data: VerifyRightRouteInput) -> List[str]:
    route = data.order_details.ordered_route
    patient = data.patient_assessment
    found: List[str] = []
    if route == "oral":
        if patient.conscious_level == "unconscious":
            found.append("Patient unconscious - cannot receive oral medications")
        if patient.swallow_ability == "impaired":
            found.append("Impaired swallow - oral route contraindicated")
        if patient.swallow_ability == "npo":
            found.append("Patient NPO - oral route contraindicated")
    if route == "IV":
        if not patient.iv_access.available:
            found.append("No IV access available")
        elif not patient.iv_access.patent:
            found.append("IV access not patent")
    found += [item for item in patient.contraindications_for_route if route.lower() in item.lower()]
    return found


def alternative_route(data: VerifyRightRouteInput, needed: bool) -> Dict[str, Any]:
    if not needed:
        return {"required": False, "suggested_route": None, "requires_order_change": False}

    route = data.order_details.ordered_route
    patient = data.patient_assessment
    formulation = data.medication_formulation.formulation_type
    suggested: Optional[str] = None
    if route == "oral" and patient.swallow_ability == "impaired":
        suggested = "IV" if formulation == "liquid" else "IM"
    if route == "IV" and not patient.iv_access.available:
        suggested = "oral" if formulation in ("tablet", "capsule") else "IM"
    if route == "IM" and patient.conscious_level == "unconscious":
        suggested = "IV"
    return {"required": True, "suggested_route": suggested, "requires_order_change": suggested is not None}


def verify_right_route(
    data: VerifyRightRouteInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    for_patient = route_appropriate_for_patient(data)
    for_formulation = route_appropriate_for_formulation(data, reference)
    access = route_access_available(data)
    contraindications = route_contraindications(data)
    can_proceed = for_patient and for_formulation and access and not contraindications
    return {
        "verification_result": {
            "route_confirmed": can_proceed,
            "route_appropriate_for_patient": for_patient,
            "route_appropriate_for_formulation": for_formulation,
            "access_available": access,
            "contraindications": contraindications,
            "alternative_route_needed": alternative_route(data, not (for_patient and for_formulation and access)),
            "can_proceed": can_proceed,
        }
    }


# Right time


def minimum_interval_minutes(frequency: str, reference: ReferenceData) -> int:
    text = frequency.lower()
    for fragments, minutes in reference.dosing_intervals:
        if any(fragment in text for fragment in fragments):
            return minutes
    return DEFAULT_DOSING_INTERVAL


def meal_requirements_met(data: VerifyRightTimeInput) -> bool:
    factors = data.patient_factors
    if factors.fasting_required and not factors.fasting_status:
        return False
    if factors.meal_timing == "before" and not factors.fasting_status:
        return False
    if factors.meal_timing in ("with", "after") and factors.fasting_status:
        return False
    return True


def recommended_action(timing_appropriate: bool, time_critical: bool, deviation_acceptable: bool) -> str:
    if timing_appropriate:
        return "give_now"
    if time_critical and not deviation_acceptable:
        return "contact_prescriber"
    if not time_critical:
        return "delay_until"
    return "contact_prescriber"


def verify_right_time(
    data: VerifyRightTimeInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    order = data.order_details
    current = data.current_datetime
    interval = minimum_interval_minutes(order.ordered_frequency, reference)

    within_window = order.administration_window.earliest <= current <= order.administration_window.latest
    if data.last_dose is None:
        interval_met = True
    else:
        interval_met = (current - data.last_dose.datetime).total_seconds() / 60 >= interval
    meals_ok = meal_requirements_met(data)

    deviation = abs((current - order.scheduled_time).total_seconds()) / 60
    tolerance = TIME_CRITICAL_TOLERANCE_MINUTES if order.time_critical else ROUTINE_TOLERANCE_MINUTES
    deviation_ok = deviation <= tolerance

    appropriate = within_window and interval_met and meals_ok
    action = recommended_action(appropriate, order.time_critical, deviation_ok)

    delay_until: Optional[datetime] = None
    if action == "give_now":
        delay_until = current
    elif action == "delay_until":
        delay_until = order.scheduled_time if current < order.scheduled_time else current + timedelta(minutes=interval)

    return {
        "verification_result": {
            "timing_appropriate": appropriate,
            "within_window": within_window,
            "minimum_interval_met": interval_met,
            "minimum_interval_minutes": interval,
            "meal_requirements_met": meals_ok,
            "time_critical_status": {
                "is_time_critical": order.time_critical,
                "deviation_minutes": round(deviation, 2),
                "deviation_acceptable": deviation_ok,
            },
            "can_proceed": appropriate,
            "recommended_action": action,
            "delay_until": iso(delay_until) if delay_until is not None else None,
        }
    }


# Right documentation


def missing_documentation(data: VerifyRightDocumentationInput) -> List[str]:
    details = data.administration_details
    checks = data.verification_results
    response = data.patient_response
    missing = [
        label
        for label, value in (
            ("Patient ID", details.patient_id),
            ("Medication name", details.medication),
            ("Dose", details.dose),
            ("Route", details.route),
            ("Administration datetime", details.administration_datetime),
            ("Administrator ID", details.administrator_id),
            ("Administrator signature", details.administrator_signature),
            ("Patient verification", checks.patient_verified),
            ("Medication verification", checks.medication_verified),
            ("Dose verification", checks.dose_verified),
            ("Route verification", checks.route_verified),
            ("Time verification", checks.time_verified),
        )
        if not value
    ]
    if response.immediate_reaction in ("moderate", "severe") and not response.adverse_effects:
        missing.append("Adverse effects documentation")
    if response.patient_refused and not response.refusal_reason.strip():
        missing.append("Refusal reason documentation")
    return missing


def record_id(now: datetime) -> str:
    return f"DOC-{int(now.timestamp() * 1000)}-{secrets.token_hex(3)}"


def verify_right_documentation(
    data: VerifyRightDocumentationInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    details = data.administration_details
    checks = data.verification_results
    response = data.patient_response

    adverse = response.immediate_reaction != "none" or bool(response.adverse_effects)
    missing = missing_documentation(data)
    complete = not missing
    return {
        "documentation_record": {
            "record_id": record_id(now),
            "complete": complete,
            "timestamp": iso(now),
            "mar_entry": {
                "medication": details.medication,
                "dose": details.dose,
                "route": details.route,
                "time_given": iso(details.administration_datetime) if details.administration_datetime else None,
                "site": details.site,
                "given_by": details.administrator_id,
                "witnessed_by": data.witness_id,
            },
            "all_five_rights_verified": all(
                (
                    checks.patient_verified,
                    checks.medication_verified,
                    checks.dose_verified,
                    checks.route_verified,
                    checks.time_verified,
                )
            ),
            "patient_education_provided": data.patient_education_provided,
            "adverse_reaction": adverse,
            "adverse_reaction_documented": adverse and bool(response.adverse_effects),
            "follow_up_required": adverse or response.immediate_reaction in ("moderate", "severe"),
            "documentation_complete": complete,
            "missing_elements": missing,
        }
    }
