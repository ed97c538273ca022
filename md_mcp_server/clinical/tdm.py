"""
Therapeutic drug monitoring evaluators.

Every function here is pure: it reads a validated input model plus the
reference bundle and returns a plain dict ready for the success envelope.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from ..errors import ValidationError
from ..models.tdm import (
    AssessTdmCandidateInput,
    CalculateSteadyStateInput,
    InterpretTdmResultInput,
    MonitorTdmTrendsInput,
    PlanSampleCollectionInput,
    TdmPatientFactors,
)
from ..reference import ReferenceData
from .common import format_number, iso, new_id, parse_amount, parse_leading_number, utc_now

LEVEL_STATUSES = ("subtherapeutic", "therapeutic", "supratherapeutic", "toxic")

TOXIC_FACTOR = 1.5
INCREASE_FACTOR = 1.25
DECREASE_FACTOR = 0.8
TOXIC_DECREASE_FACTOR = 0.5


def steady_state_delay(time_to_steady_state: str) -> timedelta:
    """
    Turn a profile span such as "5-7 days" into the delay until sampling.

    The leading number of the span is always read as days, whatever unit
    word follows it, so "24-48 hours" waits 24 days. Text with no leading
    number waits one day.
    """
    return timedelta(hours=(parse_leading_number(time_to_steady_state) or 1) * 24)


def patient_risk_factors(factors: TdmPatientFactors) -> Set[str]:
    risks: Set[str] = set()
    egfr = factors.organ_function.renal_function.egfr
    if egfr is not None and egfr < 60:
        risks.add("renal impairment")
    child_pugh = factors.organ_function.hepatic_function.child_pugh_score
    if child_pugh is not None and child_pugh != "A":
        risks.add("hepatic impairment")
    if factors.age > 65:
        risks.add("elderly")
    if len(factors.concurrent_medications) > 5:
        risks.add("polypharmacy")
    return risks


def assess_tdm_candidate(
    data: AssessTdmCandidateInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    profile = reference.tdm_profiles.get(data.medication.drug_name.strip().lower())

    if profile is None:
        return {
            "tdm_indicated": False,
            "indication_reasons": ["Medication not typically requiring TDM"],
            "drug_characteristics": {
                "therapeutic_range": "Not applicable",
                "toxic_level": "Not applicable",
                "half_life": "Not applicable",
                "time_to_steady_state": "Not applicable",
            },
            "recommended_monitoring_frequency": "Not applicable",
            "initial_sample_timing": iso(now + timedelta(hours=24)),
            "sample_type": "random",
            "clinical_considerations": ["Consider alternative monitoring methods"],
            "risk_factors": [],
        }

    patient_risks = patient_risk_factors(data.patient_factors)
    initial_sample = data.medication.start_date + steady_state_delay(profile.time_to_steady_state)

    return {
        "tdm_indicated": True,
        "indication_reasons": [
            "Narrow therapeutic index",
            "High pharmacokinetic variability",
            "Serious consequences from toxicity",
            "Difficult to monitor clinical response",
        ],
        "drug_characteristics": {
            "therapeutic_range": profile.therapeutic_range,
            "toxic_level": profile.toxic_level,
            "half_life": profile.half_life,
            "time_to_steady_state": profile.time_to_steady_state,
        },
        "recommended_monitoring_frequency": profile.monitoring_frequency,
        "initial_sample_timing": iso(initial_sample),
        "sample_type": profile.sample_type,
        "clinical_considerations": [
            "Monitor for signs of toxicity",
            "Consider drug interactions",
            "Adjust dosing based on organ function",
        ],
        "risk_factors": [factor for factor in profile.risk_factors if factor in patient_risks],
    }


def calculate_steady_state(data: CalculateSteadyStateInput, reference: ReferenceData) -> Dict[str, Any]:
    factors = data.patient_factors
    hours = data.drug_half_life * 4.5
    confidence = "high"
    adjustments: List[Dict[str, str]] = [
        {
            "factor": "Standard pharmacokinetics",
            "impact": "no_effect",
            "description": f"Base calculation using {format_number(data.drug_half_life)} hour half-life",
        }
    ]

    if data.loading_dose_given:
        hours *= 0.7
        adjustments.append(
            {
                "factor": "Loading dose administered",
                "impact": "decreases",
                "description": "Loading dose reduces time to steady state by approximately 30%",
            }
        )

    for organ, level, table, effect in (
        ("Renal", factors.renal_impairment, reference.renal_steady_state_multipliers, "elimination"),
        ("Hepatic", factors.hepatic_impairment, reference.hepatic_steady_state_multipliers, "metabolism"),
    ):
        if level == "none":
            continue
        multiplier = table.get(level, 1.0)
        hours *= multiplier
        confidence = "medium"
        direction = "increasing" if multiplier > 1 else "decreasing"
        adjustments.append(
            {
                "factor": f"{organ} impairment ({level})",
                "impact": "increases" if multiplier > 1 else "decreases",
                "description": f"{organ} impairment affects drug {effect}, {direction} time to steady state",
            }
        )

    if factors.concurrent_enzyme_inducers:
        hours *= 0.8
        adjustments.append(
            {
                "factor": "Concurrent enzyme inducers",
                "impact": "decreases",
                "description": "Enzyme inducers increase drug metabolism, reducing time to steady state",
            }
        )
    if factors.concurrent_enzyme_inhibitors:
        hours *= 1.2
        adjustments.append(
            {
                "factor": "Concurrent enzyme inhibitors",
                "impact": "increases",
                "description": "Enzyme inhibitors decrease drug metabolism, increasing time to steady state",
            }
        )
    if factors.age_years > 75:
        hours *= 1.1
        adjustments.append(
            {
                "factor": "Advanced age (>75 years)",
                "impact": "increases",
                "description": "Advanced age may slow drug metabolism and elimination",
            }
        )

    start = data.dosing_start_datetime
    early = (
        factors.renal_impairment == "severe"
        or factors.hepatic_impairment == "severe"
        or factors.age_years > 80
        or hours > 72
    )

    considerations: List[str] = []
    if factors.renal_impairment != "none":
        considerations.append("Monitor renal function during therapy")
    if factors.hepatic_impairment != "none":
        considerations.append("Monitor hepatic function during therapy")
    if factors.concurrent_enzyme_inducers:
        considerations.append("Monitor for decreased drug levels due to enzyme induction")
    if factors.concurrent_enzyme_inhibitors:
        considerations.append("Monitor for increased drug levels due to enzyme inhibition")
    if hours > 48:
        considerations.append("Consider loading dose if not already given")

    return {
        "drug_name": data.drug_name,
        "time_to_steady_state_hours": round(hours, 2),
        "steady_state_datetime": iso(start + timedelta(hours=hours)),
        "earliest_sample_datetime": iso(start + timedelta(hours=hours * 0.8)),
        "confidence_level": confidence,
        "adjustment_factors": adjustments,
        "special_considerations": considerations,
        "recommend_early_monitoring": early,
        "early_monitoring_reason": (
            "Patient has risk factors that may affect drug kinetics" if early else "No early monitoring required"
        ),
    }


def _window(sample_type: str, anchor: datetime, offsets: Tuple[int, int, int], rationale: str) -> Dict[str, Any]:
    earliest, optimal, latest = (anchor + timedelta(minutes=offset) for offset in offsets)
    return {
        "sample_type": sample_type,
        "earliest_time": iso(earliest),
        "optimal_time": iso(optimal),
        "latest_time": iso(latest),
        "timing_rationale": rationale,
    }


def plan_sample_collection(
    data: PlanSampleCollectionInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    regimen = data.dosing_regimen
    windows: List[Dict[str, Any]] = []

    if data.sample_type_required in ("trough", "both"):
        windows.append(
            _window(
                "trough",
                regimen.next_dose_datetime,
                (-60, -30, -5),
                "Trough levels should be drawn 0-60 minutes before next dose to measure minimum concentration",
            )
        )

    if data.sample_type_required in ("peak", "both"):
        if regimen.route == "iv_infusion":
            infusion_end = regimen.last_dose_datetime + timedelta(minutes=regimen.infusion_duration or 0)
            windows.append(
                _window(
                    "peak",
                    infusion_end,
                    (15, 30, 60),
                    "IV infusion: peak levels 30 minutes after infusion completion",
                )
            )
        else:
            rationale = (
                "Oral medications: peak levels typically occur 1-2 hours post-dose"
                if regimen.route == "oral"
                else "IV bolus: allow distribution phase to complete (≥1 hour post-dose)"
            )
            windows.append(_window("peak", regimen.last_dose_datetime, (60, 90, 120), rationale))

    drug = data.drug_name.lower()
    specimen = next(
        (req for req in reference.specimen_requirements if any(name in drug for name in req.drugs)),
        reference.default_specimen,
    )

    notes: List[str] = []
    if now < data.steady_state_datetime:
        notes.append(f"WARNING: Steady state not yet reached. Expected at {iso(data.steady_state_datetime)}")
        notes.append("Consider delaying sample collection until steady state is achieved")
    if regimen.route == "iv_infusion":
        notes.append("Ensure infusion is completely finished before drawing peak sample")
        notes.append("Document exact time of infusion completion")
    if regimen.route == "oral":
        notes.append("Ensure patient has not missed any recent doses")
        notes.append("Document if patient took dose with food (may affect absorption)")
    notes.extend(
        [
            "Document exact time of last dose administration",
            "Document exact time of sample collection",
            "Ensure patient is not receiving concurrent medications that may interfere",
        ]
    )

    return {
        "collection_plan_id": new_id("scp", now),
        "sample_collection_windows": windows,
        "specimen_requirements": {
            "type": specimen.specimen_type,
            "volume_ml": specimen.volume_ml,
            "collection_tube": specimen.collection_tube,
            "special_handling": list(specimen.special_handling),
        },
        "critical_timing_notes": notes,
        "documentation_required": {
            "dose_time": True,
            "collection_time": True,
            "infusion_duration": regimen.route.startswith("iv"),
            "concurrent_medications": True,
        },
    }


def classify_level(concentration: float, lower_limit: float, upper_limit: float) -> str:
    """Place a concentration in exactly one band. Both range limits count as therapeutic."""
    if concentration < lower_limit:
        return "subtherapeutic"
    if concentration <= upper_limit:
        return "therapeutic"
    if concentration <= upper_limit * TOXIC_FACTOR:
        return "supratherapeutic"
    return "toxic"


def check_sample_timing(
    sample_type: str,
    route: str,
    dose_time: datetime,
    collection_time: datetime,
) -> Tuple[bool, str]:
    """Advisory check of dose-to-collection spacing. Never blocks interpretation."""
    minutes = (collection_time - dose_time).total_seconds() / 60

    if sample_type == "trough":
        if -60 <= minutes <= 0:
            return True, ""
        return False, "Trough sample timing inappropriate - may not represent true trough level"

    if sample_type == "peak":
        if 60 <= minutes <= 180:
            return True, ""
        route_lower = route.lower()
        if route_lower == "oral":
            qualifier = " for oral medication"
        elif "iv" in route_lower:
            qualifier = " for IV medication"
        else:
            qualifier = ""
        return False, f"Peak sample timing inappropriate{qualifier} - may not represent true peak"

    return True, ""


def _clinical_significance(level: str, data: InterpretTdmResultInput) -> str:
    response = data.clinical_response
    parts: List[str] = []
    if level == "subtherapeutic":
        parts.append("Drug level below therapeutic range")
        if response.therapeutic_effect in ("none", "partial"):
            parts.append("Inadequate therapeutic response correlates with subtherapeutic level")
    elif level == "therapeutic":
        parts.append("Drug level within therapeutic range")
        if response.therapeutic_effect == "adequate":
            parts.append("Therapeutic level correlates with adequate clinical response")
    elif level == "supratherapeutic":
        parts.append("Drug level above therapeutic range")
        if response.adverse_effects:
            parts.append("Elevated level may be contributing to adverse effects")
    else:
        parts.append("Drug level in toxic range")
        if response.signs_of_toxicity:
            parts.append("Toxic level correlates with signs of toxicity")
    return ". ".join(parts)


def _changed_dose(data: InterpretTdmResultInput, multiplier: float, action: str, rationale: str) -> Dict[str, Any]:
    parsed = parse_amount(data.current_dosing_regimen.dose)
    if parsed is None:
        raise ValidationError(
            f"Current dose '{data.current_dosing_regimen.dose}' has no numeric amount to adjust",
            details={"field": "current_dosing_regimen.dose"},
        )
    amount, unit = parsed
    return {
        "action": action,
        "new_dose": f"{format_number(round(amount * multiplier, 2))} {unit}",
        "rationale": rationale,
        # Linear proportionality only; not a pharmacokinetic prediction.
        "expected_new_level": round(data.measured_concentration * multiplier, 2),
    }


def recommend_dose(level: str, data: InterpretTdmResultInput) -> Dict[str, Any]:
    response = data.clinical_response

    if level == "subtherapeutic":
        if response.therapeutic_effect in ("none", "partial"):
            return _changed_dose(
                data,
                INCREASE_FACTOR,
                "increase",
                "Subtherapeutic level with inadequate response - increase dose by 25%",
            )
        return {
            "action": "maintain",
            "rationale": "Subtherapeutic level but adequate clinical response - maintain current dose",
        }

    if level == "therapeutic":
        return {
            "action": "maintain",
            "rationale": "Therapeutic level with appropriate clinical response - maintain current dose",
        }

    if level == "supratherapeutic":
        if response.adverse_effects:
            return _changed_dose(
                data,
                DECREASE_FACTOR,
                "decrease",
                "Supratherapeutic level with adverse effects - decrease dose by 20%",
            )
        return {
            "action": "maintain",
            "rationale": "Supratherapeutic level but no adverse effects - monitor closely and maintain dose",
        }

    if response.signs_of_toxicity:
        return {
            "action": "discontinue",
            "rationale": "Toxic level with signs of toxicity - discontinue medication immediately",
        }
    return _changed_dose(
        data,
        TOXIC_DECREASE_FACTOR,
        "decrease",
        "Toxic level - decrease dose by 50% and monitor closely",
    )


def interpret_tdm_result(
    data: InterpretTdmResultInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    limits = data.therapeutic_range
    level = classify_level(data.measured_concentration, limits.lower_limit, limits.upper_limit)
    timing_ok, timing_impact = check_sample_timing(
        data.sample_type,
        data.current_dosing_regimen.route,
        data.actual_dose_time,
        data.actual_collection_time,
    )

    follow_up: Dict[str, Any] = {"repeat_tdm": level != "therapeutic"}
    if level != "therapeutic":
        follow_up["repeat_timing"] = iso(now + timedelta(days=2))
    clinical: List[str] = []
    laboratory: List[str] = []
    drug = data.drug_name.lower()
    for name, monitoring in reference.drug_monitoring.items():
        if name in drug:
            clinical.extend(monitoring.clinical)
            laboratory.extend(monitoring.laboratory)
    if level == "toxic":
        clinical.extend(reference.toxic_level_monitoring.clinical)
        laboratory.extend(reference.toxic_level_monitoring.laboratory)
    follow_up["clinical_monitoring"] = clinical
    follow_up["laboratory_monitoring"] = laboratory

    alerts: List[str] = []
    if level == "toxic":
        alerts.append("URGENT: Toxic drug level detected - immediate intervention required")
        alerts.append("Consider holding next dose and reassessing")
    if level == "supratherapeutic" and data.clinical_response.adverse_effects:
        alerts.append("Elevated drug level with adverse effects - consider dose reduction")
    if level == "subtherapeutic" and data.clinical_response.therapeutic_effect == "none":
        alerts.append("Subtherapeutic level with no therapeutic effect - consider dose increase")

    return {
        "interpretation": {
            "level_status": level,
            "clinical_significance": _clinical_significance(level, data),
            "timing_appropriate": timing_ok,
            "timing_impact_on_interpretation": timing_impact,
        },
        "dose_recommendation": recommend_dose(level, data),
        "follow_up_plan": follow_up,
        "alerts": alerts,
    }


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _percent_change(before: float, after: float) -> float:
    if before == 0:
        return 0.0 if after == 0 else math.copysign(math.inf, after)
    return (after - before) / before * 100


def analyze_trend(concentrations: Sequence[float]) -> Dict[str, Any]:
    count = len(concentrations)
    first_avg = _mean(concentrations[: math.ceil(count / 2)])
    second_avg = _mean(concentrations[count // 2:])
    change = _percent_change(first_avg, second_avg)

    if abs(change) < 10:
        direction = "stable"
    elif change > 20:
        direction = "increasing"
    elif change < -20:
        direction = "decreasing"
    else:
        direction = "erratic"

    mean = _mean(concentrations)
    if mean == 0:
        cv = 0.0
    else:
        variance = sum((value - mean) ** 2 for value in concentrations) / count
        cv = math.sqrt(variance) / mean * 100

    if cv < 15:
        variability = "low"
    elif cv < 30:
        variability = "moderate"
    else:
        variability = "high"

    concerns: List[str] = []
    if direction == "increasing" and second_avg > first_avg * 1.5:
        concerns.append("Rapidly increasing drug levels - risk of toxicity")
    if direction == "decreasing" and second_avg < first_avg * 0.5:
        concerns.append("Rapidly decreasing drug levels - risk of therapeutic failure")
    if variability == "high":
        concerns.append("High variability in drug levels - inconsistent dosing or absorption")
    if direction == "erratic":
        concerns.append("Erratic drug level pattern - possible non-compliance or drug interactions")

    return {
        "direction": direction,
        "variability": variability,
        "therapeutic_stability": direction == "stable" and variability == "low",
        "pattern_concerns": concerns,
    }


def dose_response_slope(doses: Sequence[float], concentrations: Sequence[float]) -> Optional[float]:
    """Least-squares slope of concentration on dose; None when all doses are equal."""
    n = len(doses)
    sum_x = sum(doses)
    sum_y = sum(concentrations)
    sum_xy = sum(x * y for x, y in zip(doses, concentrations))
    sum_xx = sum(x * x for x in doses)
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return None
    return (n * sum_xy - sum_x * sum_y) / denominator


def monitor_tdm_trends(data: MonitorTdmTrendsInput, reference: ReferenceData) -> Dict[str, Any]:
    results = sorted(data.tdm_results, key=lambda point: point.datetime)
    concentrations = [point.concentration for point in results]
    trend = analyze_trend(concentrations)

    doses = [parse_leading_number(point.dose_at_time) or 0.0 for point in results]
    slope = dose_response_slope(doses, concentrations)
    linear = slope is not None and abs(slope) > 0.1

    changes = [abs(_percent_change(prev, curr)) for prev, curr in zip(concentrations, concentrations[1:])]
    predictable = _mean(changes) < 25

    factors: List[str] = []
    if not linear:
        factors.append("Non-linear dose-response relationship")
    if not predictable:
        factors.append("Unpredictable drug level changes")
    if not all(point.clinical_response.strip().lower() in ("adequate", "good") for point in results):
        factors.append("Poor correlation between drug levels and clinical response")

    frequency = "Weekly"
    strategy = "Maintain current dosing"
    investigations: List[str] = []
    if trend["therapeutic_stability"]:
        frequency = "Every 2 weeks"
        strategy = "Continue current regimen"
    elif trend["direction"] == "increasing":
        frequency = "Every 3-5 days"
        strategy = "Consider dose reduction"
        investigations += ["Check for drug interactions", "Assess organ function"]
    elif trend["direction"] == "decreasing":
        frequency = "Every 3-5 days"
        strategy = "Consider dose increase"
        investigations += ["Assess patient compliance", "Check for drug interactions"]
    elif trend["variability"] == "high":
        frequency = "Every 2-3 days"
        strategy = "Investigate cause of variability"
        investigations += [
            "Assess patient compliance",
            "Review drug interactions",
            "Consider therapeutic drug monitoring consultation",
        ]
    if not linear:
        investigations.append("Consider non-linear pharmacokinetics")
    if not predictable and "Consider therapeutic drug monitoring consultation" not in investigations:
        investigations.append("Consider therapeutic drug monitoring consultation")

    profile = reference.tdm_profiles.get(data.drug_name.strip().lower())
    lower, upper = (profile.range_lower, profile.range_upper) if profile else reference.default_chart_range

    return {
        "trend_analysis": trend,
        "dose_response_relationship": {
            "linear": linear,
            "predictable": predictable,
            "factors_affecting": factors,
        },
        "recommendations": {
            "monitoring_frequency": frequency,
            "dose_adjustment_strategy": strategy,
            "additional_investigations": investigations,
        },
        "trend_chart_data": [
            {
                "datetime": iso(point.datetime),
                "concentration": point.concentration,
                "dose": point.dose_at_time,
                "therapeutic_range": {"lower": lower, "upper": upper},
            }
            for point in results
        ],
    }
