"""Protocol catalog used by cross-protocol decision support and audit reporting."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

PROTOCOLS: Tuple[str, ...] = ("medrec", "tdm", "interactions", "soap", "five_rights")

PROTOCOL_TOOLS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "medrec": ("gather_bpmh", "compare_medications", "resolve_discrepancy"),
        "tdm": (
            "assess_tdm_candidate",
            "calculate_steady_state",
            "plan_sample_collection",
            "interpret_tdm_result",
            "monitor_tdm_trends",
        ),
        "interactions": (
            "screen_interactions",
            "assess_interaction_significance",
            "recommend_interaction_management",
            "document_interaction_decision",
        ),
        "soap": (
            "document_subjective",
            "document_objective",
            "document_assessment",
            "document_plan",
            "compile_soap_note",
        ),
        "five_rights": (
            "verify_right_patient",
            "verify_right_medication",
            "verify_right_dose",
            "verify_right_route",
            "verify_right_time",
            "verify_right_documentation",
        ),
    }
)

TOOL_ACTIONS: Mapping[str, str] = MappingProxyType(
    {
        "gather_bpmh": "Collected medication history",
        "compare_medications": "Compared medications for discrepancies",
        "resolve_discrepancy": "Resolved medication discrepancy",
        "assess_tdm_candidate": "Assessed TDM requirement",
        "calculate_steady_state": "Calculated steady state timing",
        "plan_sample_collection": "Planned sample collection",
        "interpret_tdm_result": "Interpreted TDM result",
        "monitor_tdm_trends": "Monitored TDM trends",
        "screen_interactions": "Screened for drug interactions",
        "assess_interaction_significance": "Assessed interaction significance",
        "recommend_interaction_management": "Recommended interaction management",
        "document_interaction_decision": "Documented interaction decision",
        "document_subjective": "Documented subjective findings",
        "document_objective": "Documented objective findings",
        "document_assessment": "Documented clinical assessment",
        "document_plan": "Documented treatment plan",
        "compile_soap_note": "Compiled SOAP note",
        "verify_right_patient": "Verified patient identity",
        "verify_right_medication": "Verified medication",
        "verify_right_dose": "Verified dose",
        "verify_right_route": "Verified route",
        "verify_right_time": "Verified timing",
        "verify_right_documentation": "Completed documentation",
    }
)

DEFAULT_TOOL_ACTION = "Performed tool action"

# Action words that count an audit event as an intervention.
INTERVENTION_WORDS: Tuple[str, ...] = ("resolved", "recommended", "adjusted")

# Scenario -> protocols it always activates.
SCENARIO_PROTOCOLS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "new_prescription": ("medrec", "interactions", "five_rights"),
        "medication_review": ("medrec", "interactions"),
        "admission": ("medrec", "interactions", "soap"),
        "discharge": ("medrec", "soap"),
        "adverse_event": ("soap", "five_rights"),
    }
)

ACTIVATION_ORDER: Tuple[str, ...] = ("medrec", "interactions", "tdm", "soap", "five_rights")

RECONCILIATION_SCENARIOS: Tuple[str, ...] = ("admission", "discharge")

# Drug-name fragments, matched by substring.
TDM_DRUGS: Tuple[str, ...] = ("vancomycin", "digoxin", "lithium", "phenytoin")
MEDREC_HIGH_RISK_DRUGS: Tuple[str, ...] = ("warfarin", "digoxin", "lithium")
HIGH_ALERT_DRUGS: Tuple[str, ...] = ("insulin", "heparin", "morphine")

KNOWN_INTERACTION_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("warfarin", "aspirin"),
    ("digoxin", "furosemide"),
    ("lithium", "furosemide"),
    ("phenytoin", "warfarin"),
)

MONITORING_PLAN_LINES: Tuple[str, ...] = (
    "Monitor for adverse drug reactions",
    "Check medication adherence",
    "Review laboratory results",
    "Assess clinical response",
)
