"""
Cross-protocol decision support and audit reporting.

``clinical_decision_support`` decides which protocols a scenario needs, runs a
light screen for each and merges the results into one prioritized plan.
``audit_trail`` reports on events the caller has recorded; nothing is stored
here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..models.integration import AuditEvent, AuditTrailInput, ClinicalDecisionSupportInput, CurrentMedication
from ..reference import ReferenceData
from ..reference.integration import (
    ACTIVATION_ORDER,
    DEFAULT_TOOL_ACTION,
    HIGH_ALERT_DRUGS,
    INTERVENTION_WORDS,
    MEDREC_HIGH_RISK_DRUGS,
    MONITORING_PLAN_LINES,
    RECONCILIATION_SCENARIOS,
    TDM_DRUGS,
    TOOL_ACTIONS,
)
from .common import iso, new_id, utc_now

COMPLEX_REGIMEN_SIZE = 5


def _matching(medications: Iterable[CurrentMedication], fragments: Iterable[str]) -> List[Dict[str, Any]]:
    fragments = tuple(fragments)
    return [
        medication.model_dump(mode="json")
        for medication in medications
        if any(fragment in medication.drug_name.lower() for fragment in fragments)
    ]


def protocols_to_activate(data: ClinicalDecisionSupportInput, reference: ReferenceData) -> List[str]:
    """Protocols for the scenario, plus TDM when a monitored drug is on board.

    A non-empty ``active_protocols`` restricts the result to those protocols.
    """
    wanted = set(reference.scenario_protocols.get(data.clinical_scenario, ()))
    if _matching(data.patient_data.current_medications, TDM_DRUGS):
        wanted.add("tdm")
    if data.active_protocols:
        wanted &= set(data.active_protocols)
    return [protocol for protocol in ACTIVATION_ORDER if protocol in wanted]


def has_known_interaction(first: str, second: str, reference: ReferenceData) -> bool:
    first, second = first.lower(), second.lower()
    return any(
        (a in first and b in second) or (b in first and a in second) for a, b in reference.known_interaction_pairs
    )


def medrec_findings(data: ClinicalDecisionSupportInput, reference: ReferenceData) -> Dict[str, Any]:
    medications = data.patient_data.current_medications
    return {
        "protocol": "medrec",
        "status": "active",
        "findings": {
            "medication_count": len(medications),
            "high_risk_medications": _matching(medications, MEDREC_HIGH_RISK_DRUGS),
            "adherence_concerns": [],
            "reconciliation_required": data.clinical_scenario in RECONCILIATION_SCENARIOS,
        },
        "recommendations": [
            "Complete medication reconciliation",
            "Verify patient understanding of medications",
            "Check for drug interactions",
        ],
    }


def interaction_findings(data: ClinicalDecisionSupportInput, reference: ReferenceData) -> Dict[str, Any]:
    medications = data.patient_data.current_medications
    found = [
        {
            "drug1": first.drug_name,
            "drug2": second.drug_name,
            "severity": "moderate",
            "description": "Potential drug interaction detected",
        }
        for i, first in enumerate(medications)
        for second in medications[i + 1 :]
        if has_known_interaction(first.drug_name, second.drug_name, reference)
    ]
    if found:
        recommendations = [
            "Review drug interactions with prescriber",
            "Consider alternative medications",
            "Monitor for adverse effects",
        ]
    else:
        recommendations = ["No significant interactions detected"]
    return {
        "protocol": "interactions",
        "status": "active",
        "findings": {
            "total_interactions": len(found),
            "serious_interactions": [item for item in found if item["severity"] == "serious"],
            "moderate_interactions": [item for item in found if item["severity"] == "moderate"],
            "minor_interactions": [item for item in found if item["severity"] == "minor"],
        },
        "recommendations": recommendations,
    }


def tdm_findings(data: ClinicalDecisionSupportInput, reference: ReferenceData) -> Dict[str, Any]:
    candidates = _matching(data.patient_data.current_medications, TDM_DRUGS)
    if candidates:
        recommendations = ["Schedule therapeutic drug monitoring", "Check recent levels", "Adjust dosing if needed"]
    else:
        recommendations = ["No TDM required"]
    return {
        "protocol": "tdm",
        "status": "active" if candidates else "inactive",
        "findings": {
            "tdm_candidates": candidates,
            "monitoring_required": bool(candidates),
            # levels are reported by the TDM tools, not here
            "last_levels": [],
            "trends": [],
        },
        "recommendations": recommendations,
    }


def clinical_summary(data: ClinicalDecisionSupportInput) -> str:
    patient = data.patient_data
    sex = {"M": "male", "F": "female"}.get(patient.demographics.sex, "patient")
    return (
        f"{patient.demographics.age:g}-year-old {sex} with {len(patient.active_conditions)} active conditions "
        f"and {len(patient.current_medications)} current medications."
    )


def soap_findings(data: ClinicalDecisionSupportInput, reference: ReferenceData) -> Dict[str, Any]:
    return {
        "protocol": "soap",
        "status": "active",
        "findings": {
            "documentation_required": True,
            "sections_needed": ["subjective", "objective", "assessment", "plan"],
            "clinical_summary": clinical_summary(data),
            "problem_list": [condition.model_dump() for condition in data.patient_data.active_conditions],
        },
        "recommendations": ["Complete SOAP documentation", "Update problem list", "Document clinical reasoning"],
    }


def five_rights_findings(data: ClinicalDecisionSupportInput, reference: ReferenceData) -> Dict[str, Any]:
    return {
        "protocol": "five_rights",
        "status": "active",
        "findings": {
            "administration_safety": "high",
            "verification_required": True,
            "high_alert_medications": _matching(data.patient_data.current_medications, HIGH_ALERT_DRUGS),
        },
        "recommendations": [
            "Verify patient identity",
            "Check medication details",
            "Confirm dose and route",
            "Document administration",
        ],
    }


_PROTOCOL_FINDINGS = {
    "medrec": medrec_findings,
    "interactions": interaction_findings,
    "tdm": tdm_findings,
    "soap": soap_findings,
    "five_rights": five_rights_findings,
}


def cross_protocol_alerts(findings: Dict[str, Any]) -> List[Dict[str, Any]]:
    alerts: List[Dict[str, Any]] = []
    if "medrec" in findings and "interactions" in findings:
        medication_count = findings["medrec"]["findings"]["medication_count"]
        interaction_count = findings["interactions"]["findings"]["total_interactions"]
        if medication_count > COMPLEX_REGIMEN_SIZE and interaction_count > 0:
            alerts.append(
                {
                    "alert_type": "medication_complexity",
                    "severity": "moderate",
                    "description": "High medication complexity with potential interactions",
                    "affected_protocols": ["medrec", "interactions"],
                    "recommended_action": "Consider medication review and simplification",
                }
            )
    if findings.get("tdm", {}).get("status") == "active":
        alerts.append(
            {
                "alert_type": "tdm_required",
                "severity": "high",
                "description": "Therapeutic drug monitoring required",
                "affected_protocols": ["tdm"],
                "recommended_action": "Schedule TDM levels and adjust dosing",
            }
        )
    return alerts


def _action(priority: int, urgency: str, action: str, source: str, rationale: str) -> Dict[str, Any]:
    return {
        "priority": priority,
        "urgency": urgency,
        "action": action,
        "protocol_source": source,
        "rationale": rationale,
    }


def prioritized_actions(findings: Dict[str, Any], alerts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    actions: List[Dict[str, Any]] = []
    if any(alert["severity"] == "high" for alert in alerts):
        actions.append(
            _action(
                1,
                "immediate",
                "Address high-severity alerts",
                "integration",
                "High-severity alerts require immediate attention",
            )
        )
    if findings.get("medrec", {}).get("findings", {}).get("reconciliation_required"):
        actions.append(
            _action(2, "urgent", "Complete medication reconciliation", "medrec", "Essential for patient safety")
        )
    if findings.get("interactions", {}).get("findings", {}).get("total_interactions", 0) > 0:
        actions.append(
            _action(3, "urgent", "Review and manage drug interactions", "interactions", "Prevent adverse drug events")
        )
    if findings.get("tdm", {}).get("status") == "active":
        actions.append(_action(4, "routine", "Schedule therapeutic drug monitoring", "tdm", "Optimize drug therapy"))
    if "soap" in findings:
        actions.append(_action(5, "routine", "Complete SOAP documentation", "soap", "Maintain clinical records"))
    return actions


def comprehensive_plan(actions: List[Dict[str, Any]]) -> str:
    lines = ["Comprehensive Clinical Care Plan:", ""]
    for urgency in ("immediate", "urgent", "routine"):
        selected = [action["action"] for action in actions if action["urgency"] == urgency]
        if selected:
            lines.append(f"{urgency.upper()} ACTIONS:")
            lines.extend(f"- {text}" for text in selected)
            lines.append("")
    lines.append("MONITORING PLAN:")
    lines.extend(f"- {text}" for text in MONITORING_PLAN_LINES)
    return "\n".join(lines)


def clinical_decision_support(
    data: ClinicalDecisionSupportInput,
    reference: ReferenceData,
) -> Dict[str, Any]:
    protocols = protocols_to_activate(data, reference)
    findings = {protocol: _PROTOCOL_FINDINGS[protocol](data, reference) for protocol in protocols}
    alerts = cross_protocol_alerts(findings)
    actions = prioritized_actions(findings, alerts)
    return {
        "integrated_assessment": {
            "patient_id": data.patient_id,
            "clinical_scenario": data.clinical_scenario,
            "protocols_activated": protocols,
            "findings_by_protocol": findings,
            "cross_protocol_alerts": alerts,
            "prioritized_actions": actions,
            "comprehensive_plan": comprehensive_plan(actions),
        }
    }


# Audit trail


def event_action(event: AuditEvent) -> str:
    return event.action or TOOL_ACTIONS.get(event.tool, DEFAULT_TOOL_ACTION)


def is_intervention(action: str) -> bool:
    action = action.lower()
    return any(word in action for word in INTERVENTION_WORDS)


def select_events(data: AuditTrailInput) -> List[AuditEvent]:
    protocols = set(data.protocol_filter)
    selected = [
        event
        for event in data.events
        if event.patient_id == data.patient_id
        and data.time_range.start <= event.datetime <= data.time_range.end
        and (not protocols or event.protocol in protocols)
    ]
    return sorted(selected, key=lambda event: event.datetime)


def quality_metrics(events: List[AuditEvent], reference: ReferenceData) -> Dict[str, Any]:
    """Adherence is the share of events whose tool belongs to the protocol they were filed under."""
    if events:
        on_protocol = sum(1 for event in events if event.tool in reference.protocol_tools.get(event.protocol, ()))
        adherence = round(100 * on_protocol / len(events), 1)
    else:
        adherence = 0.0
    interventions = [event for event in events if is_intervention(event_action(event))]
    return {
        "protocol_adherence": adherence,
        "interventions_made": len(interventions),
        "patient_safety_events_prevented": sum(1 for event in interventions if event.safety_event_prevented),
    }


def audit_trail(
    data: AuditTrailInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    events = select_events(data)
    return {
        "audit_trail": {
            "report_id": new_id("audit", now),
            "generated_at": iso(now),
            "patient_id": data.patient_id,
            "time_range": {"start": iso(data.time_range.start), "end": iso(data.time_range.end)},
            "protocols_included": list(data.protocol_filter) or list(ACTIVATION_ORDER),
            "total_events": len(events),
            "events": [
                {
                    **event.model_dump(mode="json", exclude={"safety_event_prevented"}),
                    "action": event_action(event),
                }
                for event in events
            ],
            "quality_metrics": quality_metrics(events, reference),
        }
    }
