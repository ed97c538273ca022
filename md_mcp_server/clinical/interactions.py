"""
Drug interaction screening, significance assessment, management
recommendations and decision documentation.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..models.interactions import (
    AssessInteractionSignificanceInput,
    DocumentInteractionDecisionInput,
    RecommendInteractionManagementInput,
    ScreenInteractionsInput,
    ScreenedMedication,
)
from ..reference import ReferenceData
from ..reference.interactions import EVIDENCE_GUIDELINES, EVIDENCE_STUDIES, EXPERT_OPINION, StrategyTemplate
from .common import iso, new_id, normalize_key, utc_now

SEVERITY_ORDER = ("contraindicated", "serious", "moderate", "minor")


def _interaction(
    prefix: str,
    kind: str,
    severity: str,
    management_level: str,
    drug_name: str,
    other_type: str,
    other_name: str,
    mechanism: str,
    effects: Tuple[str, ...],
    onset: str,
    now: datetime,
) -> Dict[str, Any]:
    return {
        "interaction_id": new_id(prefix, now),
        "type": kind,
        "severity": severity,
        "management_level": management_level,
        "interacting_entities": {
            "entity_1": {"type": "drug", "name": drug_name},
            "entity_2": {"type": other_type, "name": other_name},
        },
        "mechanism": mechanism,
        "clinical_effects": list(effects),
        "onset": onset,
        "documentation_level": "established",
        "evidence_quality": "high",
    }


def screen_drug_drug(
    medications: List[ScreenedMedication],
    reference: ReferenceData,
    now: datetime,
) -> List[Dict[str, Any]]:
    found = []
    for i, first in enumerate(medications):
        for second in medications[i + 1 :]:
            pair = {normalize_key(first.drug_name), normalize_key(second.drug_name)}
            for rule in reference.drug_drug_rules:
                if pair == {rule.first, rule.second}:
                    found.append(
                        _interaction(
                            "ddi",
                            "drug_drug",
                            rule.severity,
                            "monitor_closely" if rule.severity == "serious" else "adjust_dose",
                            first.drug_name,
                            "drug",
                            second.drug_name,
                            rule.mechanism,
                            rule.effects,
                            "variable",
                            now,
                        )
                    )
                    break
    return found


def screen_drug_condition(data: ScreenInteractionsInput, reference: ReferenceData, now: datetime) -> List[Dict[str, Any]]:
    found = []
    for medication in data.medications:
        drug = normalize_key(medication.drug_name)
        for condition in data.patient_conditions:
            condition_key = normalize_key(condition.condition)
            for rule in reference.drug_condition_rules:
                if drug in rule.drugs and rule.other in condition_key:
                    found.append(
                        _interaction(
                            "dci",
                            "drug_condition",
                            rule.severity,
                            "use_alternative" if rule.severity == "contraindicated" else "monitor_closely",
                            medication.drug_name,
                            "condition",
                            condition.condition,
                            rule.mechanism,
                            rule.effects,
                            "delayed",
                            now,
                        )
                    )
                    break
    return found


def screen_drug_food(data: ScreenInteractionsInput, reference: ReferenceData, now: datetime) -> List[Dict[str, Any]]:
    found = []
    for medication in data.medications:
        drug = normalize_key(medication.drug_name)
        for supplement in data.dietary_supplements:
            supplement_key = normalize_key(supplement)
            for rule in reference.drug_food_rules:
                if any(fragment in drug for fragment in rule.drugs) and rule.other in supplement_key:
                    found.append(
                        _interaction(
                            "dfi",
                            "drug_food",
                            rule.severity,
                            "adjust_dose",
                            medication.drug_name,
                            "food",
                            supplement,
                            rule.mechanism,
                            rule.effects,
                            "delayed",
                            now,
                        )
                    )
                    break
    return found


def _active_contraindication_triggers(data: ScreenInteractionsInput) -> List[str]:
    characteristics = data.patient_characteristics
    triggers = []
    if characteristics.pregnancy_status:
        triggers.append("pregnancy")
    if characteristics.renal_function == "impaired":
        triggers.append("renal_impairment")
    return triggers


def screen_contraindications(data: ScreenInteractionsInput, reference: ReferenceData, now: datetime) -> List[Dict[str, Any]]:
    triggers = _active_contraindication_triggers(data)
    found = []
    for medication in data.medications:
        drug = normalize_key(medication.drug_name)
        for rule in reference.contraindication_rules:
            if rule.trigger in triggers and any(fragment in drug for fragment in rule.drugs):
                found.append(
                    _interaction(
                        "contra",
                        "contraindication",
                        "contraindicated",
                        "use_alternative",
                        medication.drug_name,
                        "condition",
                        rule.entity_name,
                        rule.mechanism,
                        rule.effects,
                        "delayed",
                        now,
                    )
                )
    return found


def interaction_summary(interactions: List[Dict[str, Any]]) -> Dict[str, Any]:
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    for item in interactions:
        counts[item["severity"]] = counts.get(item["severity"], 0) + 1
    return {
        "total_interactions": len(interactions),
        "contraindicated_count": counts["contraindicated"],
        "serious_count": counts["serious"],
        "moderate_count": counts["moderate"],
        "minor_count": counts["minor"],
        "requires_immediate_action": any(
            item["severity"] == "contraindicated"
            or (item["severity"] == "serious" and item["management_level"] == "use_alternative")
            for item in interactions
        ),
    }


def screen_interactions(
    data: ScreenInteractionsInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    interactions = [
        *screen_drug_drug(data.medications, reference, now),
        *screen_drug_condition(data, reference, now),
        *screen_drug_food(data, reference, now),
        *screen_contraindications(data, reference, now),
    ]
    return {
        "screening_id": new_id("int", now),
        "screening_datetime": iso(now),
        "patient_id": data.patient_id,
        "interactions_found": interactions,
        "summary": interaction_summary(interactions),
    }


# Significance assessment

ADVANCED_AGE = "Advanced age (>75 years)"
POLYPHARMACY = "Polypharmacy"
MULTIPLE_COMORBIDITIES = "Multiple comorbidities"
CARDIOVASCULAR = "Cardiovascular comorbidities"
ADR_HISTORY = "History of adverse drug reactions"

_CARDIOVASCULAR_WORDS = ("diabetes", "hypertension", "heart disease")

_RISK_POINTS = {"low": 1, "moderate": 3, "high": 6, "very_high": 8}
_PROBABILITY_POINTS = {"unlikely": 1, "possible": 3, "probable": 6, "highly_probable": 8}
_HARM_POINTS = {"minor": 1, "moderate": 3, "major": 6, "life_threatening": 10}


def patient_risk_factors(data: AssessInteractionSignificanceInput) -> List[str]:
    factors = data.patient_specific_factors
    organs = factors.organ_function
    risks: List[str] = []

    if factors.age > 75:
        risks.append(ADVANCED_AGE)
    elif factors.age < 18:
        risks.append("Pediatric patient")

    if organs.renal_function != "normal":
        risks.append(f"Renal impairment ({organs.renal_function})")
    if organs.hepatic_function != "normal":
        risks.append(f"Hepatic impairment ({organs.hepatic_function})")
    if organs.cardiac_function and organs.cardiac_function != "normal":
        risks.append(f"Cardiac impairment ({organs.cardiac_function})")

    if len(factors.comorbidities) > 3:
        risks.append(MULTIPLE_COMORBIDITIES)
    if any(word in c.lower() for c in factors.comorbidities for word in _CARDIOVASCULAR_WORDS):
        risks.append(CARDIOVASCULAR)

    if len(factors.concurrent_medications) > 5:
        risks.append(POLYPHARMACY)
    if factors.previous_adverse_reactions:
        risks.append(ADR_HISTORY)
    return risks


def protective_factors(data: AssessInteractionSignificanceInput) -> List[str]:
    factors = data.patient_specific_factors
    context = data.clinical_context
    protective: List[str] = []
    if 18 <= factors.age <= 65:
        protective.append("Optimal age range (18-65 years)")
    if factors.organ_function.renal_function == "normal":
        protective.append("Normal renal function")
    if factors.organ_function.hepatic_function == "normal":
        protective.append("Normal hepatic function")
    if context.alternative_options_available:
        protective.append("Alternative treatment options available")
    if context.treatment_duration == "acute":
        protective.append("Short-term treatment reduces cumulative risk")
    return protective


def patient_specific_risk(risks: List[str], protective: List[str]) -> str:
    score = len(risks) - len(protective)
    if score <= 0:
        return "low"
    if score <= 2:
        return "moderate"
    if score <= 4:
        return "high"
    return "very_high"


def probability_of_occurrence(data: AssessInteractionSignificanceInput, risks: List[str]) -> str:
    organs = data.patient_specific_factors.organ_function
    score = 2
    score += 2 if ADVANCED_AGE in risks else 0
    score += 2 if POLYPHARMACY in risks else 0
    score += 1 if MULTIPLE_COMORBIDITIES in risks else 0
    score += 2 if ADR_HISTORY in risks else 0
    score += 1 if organs.renal_function != "normal" else 0
    score += 1 if organs.hepatic_function != "normal" else 0

    if score <= 2:
        return "unlikely"
    if score <= 4:
        return "possible"
    if score <= 6:
        return "probable"
    return "highly_probable"


def potential_harm(risks: List[str]) -> Dict[str, str]:
    score = 2
    score += 1 if ADVANCED_AGE in risks else 0
    score += 1 if MULTIPLE_COMORBIDITIES in risks else 0
    score += 2 if CARDIOVASCULAR in risks else 0
    score += 1 if ADR_HISTORY in risks else 0

    if score <= 2:
        return {"severity": "minor", "reversibility": "reversible", "time_to_onset": "Within hours to days"}
    if score <= 4:
        return {"severity": "moderate", "reversibility": "reversible", "time_to_onset": "Within days to weeks"}
    if score <= 6:
        return {"severity": "major", "reversibility": "partially_reversible", "time_to_onset": "Within days to weeks"}
    return {"severity": "life_threatening", "reversibility": "irreversible", "time_to_onset": "Within hours to days"}


def significance_score(risk: str, probability: str, harm_severity: str) -> int:
    """Sum the three component scores and scale to 0-10, rounding halves up."""
    total = _RISK_POINTS[risk] + _PROBABILITY_POINTS[probability] + _HARM_POINTS[harm_severity]
    return min(10, math.floor(total / 3 + 0.5))


def requires_intervention(risk: str, probability: str, harm_severity: str) -> bool:
    return (
        risk in ("high", "very_high")
        or probability in ("probable", "highly_probable")
        or harm_severity in ("major", "life_threatening")
    )


def intervention_urgency(intervene: bool, harm_severity: str, treatment_duration: str) -> str:
    if not intervene:
        return "routine"
    if harm_severity == "life_threatening":
        return "immediate"
    if harm_severity == "major" or treatment_duration == "acute":
        return "within_24h"
    return "routine"


def _has_factor(risks: List[str], prefix: str) -> bool:
    return any(risk.startswith(prefix) for risk in risks)


def monitoring_recommendations(risks: List[str], harm: Dict[str, str]) -> List[str]:
    recommendations = [
        "Monitor for signs and symptoms of interaction",
        "Assess patient response to therapy",
    ]
    if harm["severity"] in ("life_threatening", "major"):
        recommendations += ["Frequent vital signs monitoring", "Consider hospitalization for close monitoring"]
    if ADVANCED_AGE in risks:
        recommendations += ["Enhanced monitoring for elderly patients", "Assess for cognitive changes"]
    # Organ factors carry their grade in parentheses, e.g. "Renal impairment (mild_impairment)".
    if _has_factor(risks, "Renal impairment"):
        recommendations += ["Monitor renal function closely", "Assess for signs of drug accumulation"]
    if _has_factor(risks, "Hepatic impairment"):
        recommendations += ["Monitor liver function tests", "Assess for signs of hepatotoxicity"]
    if CARDIOVASCULAR in risks:
        recommendations += ["Monitor cardiovascular parameters", "Assess for cardiac adverse effects"]

    if "hours" in harm["time_to_onset"]:
        recommendations += ["Immediate monitoring required", "Daily assessment for first week"]
    elif "days" in harm["time_to_onset"]:
        recommendations.append("Weekly monitoring for first month")
    return recommendations


def assess_interaction_significance(
    data: AssessInteractionSignificanceInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    risks = patient_risk_factors(data)
    protective = protective_factors(data)
    risk = patient_specific_risk(risks, protective)
    probability = probability_of_occurrence(data, risks)
    harm = potential_harm(risks)
    intervene = requires_intervention(risk, probability, harm["severity"])

    return {
        "assessment_id": new_id("assess", now),
        "interaction_id": data.interaction_id,
        "patient_specific_risk": risk,
        "probability_of_occurrence": probability,
        "potential_harm": harm,
        "clinical_significance_score": significance_score(risk, probability, harm["severity"]),
        "requires_intervention": intervene,
        "urgency": intervention_urgency(intervene, harm["severity"], data.clinical_context.treatment_duration),
        "risk_factors": risks,
        "protective_factors": protective,
        "monitoring_recommendations": monitoring_recommendations(risks, harm),
    }


# Management recommendations


def _strategy(template: StrategyTemplate, alternative: Optional[str] = None) -> Dict[str, Any]:
    return {
        "strategy": template.strategy,
        "priority": template.priority,
        "specific_actions": [
            {
                "action_type": action.action_type,
                "medication_affected": action.medication_affected,
                "details": action.details.format(alternative=alternative),
                "implementation_timeline": action.implementation_timeline,
            }
            for action in template.actions
        ],
        "monitoring_plan": {
            "parameters_to_monitor": list(template.parameters_to_monitor),
            "monitoring_frequency": template.monitoring_frequency,
            "monitoring_duration": template.monitoring_duration,
            "warning_signs": list(template.warning_signs),
        },
        "patient_education": {
            "key_points": list(template.key_points),
            "warning_symptoms": list(template.warning_symptoms),
            "when_to_contact_provider": list(template.when_to_contact_provider),
        },
    }


def management_rationale(data: RecommendInteractionManagementInput) -> str:
    constraints = data.clinical_constraints
    parts = [
        "Management recommendations are based on interaction severity, patient-specific factors, "
        "and available alternatives."
    ]
    if data.available_alternatives:
        parts.append("Alternative medications are available and should be considered as first-line management.")
    else:
        parts.append("No suitable alternatives available - dose adjustment and monitoring recommended.")
    if constraints.cost_considerations:
        parts.append("Cost considerations may limit alternative options.")
    if constraints.treatment_urgency in ("emergency", "urgent"):
        parts.append("Urgent treatment needs may require immediate intervention.")
    return " ".join(parts)


def recommend_interaction_management(
    data: RecommendInteractionManagementInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    strategies = reference.management_strategies
    constraints = data.clinical_constraints
    recommendations = []

    if data.available_alternatives:
        # Alternatives arrive ranked by the caller; the first one is used.
        best = data.available_alternatives[0]
        recommendations.append(_strategy(strategies["use_alternative"], alternative=best.drug_name))
    if not data.available_alternatives or constraints.cost_considerations:
        recommendations.append(_strategy(strategies["adjust_doses"]))
    recommendations.append(_strategy(strategies["separate_administration"]))
    recommendations.append(_strategy(strategies["monitor_closely"]))

    consultation = (
        not data.available_alternatives
        or constraints.treatment_urgency == "emergency"
        or bool(constraints.formulary_restrictions)
    )
    return {
        "assessment_id": data.assessment_id,
        "recommendations": recommendations,
        "rationale": management_rationale(data),
        "evidence_base": {
            "guidelines": list(EVIDENCE_GUIDELINES),
            "studies": list(EVIDENCE_STUDIES),
            "expert_opinion": EXPERT_OPINION,
        },
        "consultation_recommended": {
            "required": consultation,
            "specialist_type": "clinical_pharmacist",
            "urgency": "immediate" if constraints.treatment_urgency == "emergency" else "within_24h",
        },
    }


# Decision documentation


def _flag(value: bool) -> str:
    return "true" if value else "false"


def follow_up_requirements(data: DocumentInteractionDecisionInput, now: datetime) -> Dict[str, Any]:
    decision = data.decision
    actions: List[str] = []
    follow_up_date: Optional[datetime] = None

    if decision.action_taken in ("modified_therapy", "alternative_prescribed"):
        follow_up_date = now + timedelta(days=7)
        actions += ["Assess therapeutic response to modified therapy", "Monitor for adverse effects"]
    if decision.monitoring_plan_implemented:
        follow_up_date = follow_up_date or now + timedelta(days=14)
        actions += ["Review monitoring results", "Assess patient compliance with monitoring plan"]
    if decision.action_taken == "discontinued_drug":
        follow_up_date = now + timedelta(days=3)
        actions += ["Assess impact of drug discontinuation", "Monitor for withdrawal effects"]

    result: Dict[str, Any] = {"required": follow_up_date is not None, "follow_up_actions": actions}
    if follow_up_date is not None:
        result["follow_up_date"] = iso(follow_up_date)
    return result


def decision_notes(data: DocumentInteractionDecisionInput) -> List[str]:
    decision = data.decision
    notes = [f"Drug interaction decision: {decision.action_taken}", f"Rationale: {decision.rationale}"]
    if decision.patient_informed:
        notes.append("Patient informed of interaction and management decision")
    if decision.patient_consent:
        notes.append("Patient consented to management approach")
    if decision.monitoring_plan_implemented:
        notes.append("Enhanced monitoring plan implemented for interaction management")

    outcome = data.outcome_if_known
    if outcome is not None:
        notes.append(f"Outcome: Interaction occurred: {_flag(outcome.interaction_occurred)}")
        if outcome.severity_observed:
            notes.append(f"Observed severity: {outcome.severity_observed}")
        notes.append(f"Management effectiveness: {'Effective' if outcome.management_effective else 'Ineffective'}")
    return notes


def document_interaction_decision(
    data: DocumentInteractionDecisionInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    decision = data.decision
    outcome = data.outcome_if_known

    outcome_updates = []
    if outcome is not None:
        outcome_updates.append(
            {
                "update_datetime": iso(now),
                "outcome_description": (
                    f"Interaction occurred: {_flag(outcome.interaction_occurred)}, "
                    f"Severity: {outcome.severity_observed or 'not recorded'}, "
                    f"Management effective: {_flag(outcome.management_effective)}"
                ),
                "updated_by": data.decision_maker,
            }
        )

    documentation_complete = bool(decision.rationale) and decision.patient_informed and decision.monitoring_plan_implemented
    hipaa_compliant = bool(data.decision_maker) and bool(decision.rationale)
    occurred = outcome is not None and outcome.interaction_occurred

    return {
        "documentation_id": new_id("doc", now),
        "interaction_id": data.interaction_id,
        "assessment_id": data.assessment_id,
        "audit_trail": {
            "decision_recorded": iso(data.decision_datetime),
            "decision_by": data.decision_maker,
            "modified_by": [],
            "outcome_updates": outcome_updates,
        },
        "quality_metrics": {
            "intervention_prevented_harm": (
                decision.action_taken != "continue_as_is" and outcome is not None and not outcome.interaction_occurred
            ),
            "appropriate_management": decision.action_taken != "continue_as_is"
            or (decision.monitoring_plan_implemented and decision.patient_informed),
            "documentation_complete": documentation_complete,
        },
        "follow_up_required": follow_up_requirements(data, now),
        "clinical_notes": decision_notes(data),
        "regulatory_compliance": {
            "hipaa_compliant": hipaa_compliant,
            "audit_ready": hipaa_compliant and decision.patient_informed and decision.monitoring_plan_implemented,
            "retention_period": "10 years"
            if decision.action_taken == "discontinued_drug" and occurred
            else "7 years",
        },
    }
