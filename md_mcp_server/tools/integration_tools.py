from __future__ import annotations

from functools import partial

from ..clinical import integration
from ..models.integration import AuditTrailInput, ClinicalDecisionSupportInput
from ..reference import ReferenceData
from . import ToolRegistry
from .pipeline import tool_handler, tool_spec


def register_tools(registry: ToolRegistry, reference: ReferenceData) -> None:
    registry.add_tool(
        tool_spec(
            "clinical_decision_support",
            "Clinical Decision Support",
            "Integrates the clinical protocols for one patient. Activates medication reconciliation, "
            "interaction screening, TDM, SOAP documentation and five-rights checks as the scenario "
            "requires, then returns per-protocol findings, cross-protocol alerts, prioritized actions "
            "and a care plan.",
            ClinicalDecisionSupportInput,
        ),
        tool_handler(
            "clinical_decision_support",
            ClinicalDecisionSupportInput,
            partial(integration.clinical_decision_support, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "audit_trail",
            "Audit Trail",
            "Reports on recorded protocol events for a patient. Filters the supplied events by time "
            "range and protocol, orders them chronologically and derives protocol adherence, "
            "interventions made and safety events prevented.",
            AuditTrailInput,
        ),
        tool_handler("audit_trail", AuditTrailInput, partial(integration.audit_trail, reference=reference)),
    )
