"""
Medication reconciliation: BPMH collection, order comparison and
discrepancy resolution.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..models.medrec import (
    BpmhMedication,
    CompareMedicationsInput,
    GatherBpmhInput,
    HomeMedication,
    MedicationOrder,
    ResolveDiscrepancyInput,
)
from ..reference import ReferenceData
from ..reference.medrec import (
    BPMH_COMPLETE_SOURCES,
    BPMH_PARTIAL_SOURCES,
    BPMH_SOURCE_FLAGS,
    HIGH_DOSE_MG,
    BpmhCategory,
)
from .common import iso, new_id, parse_leading_number, utc_now

NEXT_STEPS = {
    "unverified": [
        "Obtain additional medication sources for verification",
        "Conduct patient interview if not already done",
        "Review medication bottles and pharmacy records",
    ],
    "partial": [
        "Verify remaining medications with additional sources",
        "Cross-reference with pharmacy records",
    ],
    "complete": [
        "Proceed with medication reconciliation",
        "Compare BPMH with admission orders",
    ],
}


def prescriber_source(entry: BpmhMedication, category: BpmhCategory) -> Dict[str, str]:
    """Tag who is behind a BPMH entry. A named prescriber always wins over the category default."""
    if entry.prescriber:
        return {"kind": "prescribed", "prescriber": entry.prescriber}
    if category.default_source == "practitioner":
        return {"kind": "practitioner", "practitioner": category.practitioner or "alternative_practitioner"}
    return {"kind": category.default_source}


def _bpmh_entry(entry: BpmhMedication, category: BpmhCategory) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "drug_name": entry.drug_name,
        "dose": entry.dose,
        "frequency": entry.frequency,
        "route": entry.route,
        "indication": entry.indication,
        "prescriber_source": prescriber_source(entry, category),
    }
    if entry.last_taken is not None:
        item["last_taken"] = iso(entry.last_taken)
    if entry.start_date is not None:
        item["start_date"] = iso(entry.start_date)
    if entry.adherence_notes:
        item["adherence_notes"] = entry.adherence_notes
    return item


def verification_status(source_count: int) -> str:
    if source_count >= BPMH_COMPLETE_SOURCES:
        return "complete"
    if source_count >= BPMH_PARTIAL_SOURCES:
        return "partial"
    return "unverified"


def gather_bpmh(
    data: GatherBpmhInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    sources = data.data_sources

    sources_used: List[str] = []
    if sources.patient_interview.conducted:
        sources_used.append("patient_interview")
    sources_used.extend(flag for flag in BPMH_SOURCE_FLAGS if getattr(sources, flag))

    medications_list = []
    for category in reference.bpmh_categories:
        entries = getattr(data.systematic_categories, category.field)
        if entries:
            medications_list.append(
                {
                    "category": category.label,
                    "medications": [_bpmh_entry(entry, category) for entry in entries],
                }
            )

    status = verification_status(len(sources_used))
    return {
        "bpmh_id": new_id("bpmh", now),
        "patient_id": data.patient_id,
        "creation_datetime": iso(now),
        "created_by": sources.patient_interview.interviewer_id or "unknown",
        "medications_list": medications_list,
        "sources_used": sources_used,
        "verification_status": status,
        "patient_signature": sources.patient_interview.conducted,
        "next_steps": list(NEXT_STEPS[status]),
    }


def _name_key(name: str) -> str:
    return name.strip().lower()


def _is_high_dose(dose: str) -> bool:
    amount = parse_leading_number(dose)
    return "mg" in dose.lower() and amount is not None and amount > HIGH_DOSE_MG


def _discrepancy(
    discrepancy_type: str,
    severity: str,
    significance: str,
    action: str,
    order: Optional[MedicationOrder] = None,
    home: Optional[HomeMedication] = None,
    now: Optional[datetime] = None,
    **extra: Any,
) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "discrepancy_id": new_id("disc", now),
        "type": discrepancy_type,
        "severity": severity,
        "clinical_significance": significance,
        "requires_action": True,
        "suggested_action": action,
    }
    if home is not None:
        item["bpmh_medication"] = home.model_dump(mode="json")
    if order is not None:
        item["new_order_medication"] = order.model_dump(mode="json")
    item.update(extra)
    return item


def _compare_with_home(
    orders: List[MedicationOrder],
    home_meds: List[HomeMedication],
    now: datetime,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    discrepancies: List[Dict[str, Any]] = []
    matched: List[Dict[str, Any]] = []
    orders_by_name: Dict[str, MedicationOrder] = {}
    for order in orders:
        orders_by_name.setdefault(_name_key(order.drug_name), order)
    home_names = {_name_key(home.drug_name) for home in home_meds}

    for home in home_meds:
        order = orders_by_name.get(_name_key(home.drug_name))
        if order is None:
            discrepancies.append(
                _discrepancy(
                    "omission",
                    "major",
                    "Home medication not continued in new orders",
                    "Confirm with prescriber whether omission is intentional",
                    home=home,
                    now=now,
                )
            )
            continue

        changed = [
            field
            for field in ("dose", "frequency", "route")
            if getattr(home, field).strip().lower() != getattr(order, field).strip().lower()
        ]
        if changed:
            discrepancies.append(
                _discrepancy(
                    "dose_change",
                    "major" if "dose" in changed else "minor",
                    f"Order differs from home regimen in {', '.join(changed)}",
                    "Verify the change is intentional and document the reason",
                    order=order,
                    home=home,
                    now=now,
                    changed_fields=changed,
                )
            )
        matched.append(
            {
                "bpmh_medication": home.model_dump(mode="json"),
                "new_order_medication": order.model_dump(mode="json"),
                "match_confidence": "medium" if changed else "high",
            }
        )

    for order in orders:
        if _name_key(order.drug_name) not in home_names:
            discrepancies.append(
                _discrepancy(
                    "new_medication",
                    "minor",
                    "Medication not part of the home regimen",
                    "Confirm indication for the new medication",
                    order=order,
                    now=now,
                )
            )
    return discrepancies, matched


def compare_medications(
    data: CompareMedicationsInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    discrepancies: List[Dict[str, Any]] = []
    matched: List[Dict[str, Any]] = []

    name_counts: Dict[str, int] = {}
    for order in data.new_orders:
        key = _name_key(order.drug_name)
        name_counts[key] = name_counts.get(key, 0) + 1

    for order in data.new_orders:
        if name_counts[_name_key(order.drug_name)] > 1:
            discrepancies.append(
                _discrepancy(
                    "duplication",
                    "major",
                    "Risk of overdose or drug interactions",
                    "Review for duplicate orders and consolidate if appropriate",
                    order=order,
                    now=now,
                )
            )
        if _is_high_dose(order.dose):
            discrepancies.append(
                _discrepancy(
                    "dose_change",
                    "critical",
                    "High dose medication requires careful monitoring",
                    "Verify dose calculation and patient weight",
                    order=order,
                    now=now,
                )
            )

    if data.bpmh_medications is not None:
        home_discrepancies, matched = _compare_with_home(data.new_orders, data.bpmh_medications, now)
        discrepancies.extend(home_discrepancies)

    counts = {severity: 0 for severity in ("critical", "major", "minor")}
    for item in discrepancies:
        counts[item["severity"]] += 1

    return {
        "comparison_id": new_id("comp", now),
        "bpmh_id": data.bpmh_id,
        "comparison_type": data.comparison_type,
        "discrepancies": discrepancies,
        "matched_medications": matched,
        "summary": {
            "total_discrepancies": len(discrepancies),
            "critical_count": counts["critical"],
            "major_count": counts["major"],
            "minor_count": counts["minor"],
            "resolved_count": 0,
            "pending_count": len(discrepancies),
        },
    }


def resolution_status(resolution_action: str, prescriber_contacted: bool, prescriber_response: Optional[str]) -> str:
    """First matching row wins."""
    if prescriber_contacted and prescriber_response:
        return "resolved"
    if resolution_action == "prescriber_error" and not prescriber_contacted:
        return "pending_prescriber"
    if resolution_action == "intentional_change" and not prescriber_contacted:
        return "escalated"
    return "resolved"


def harm_severity_avoided(resolution_action: str, prescriber_contacted: bool) -> str:
    if resolution_action == "discontinue" and prescriber_contacted:
        return "severe"
    if resolution_action == "modify_order":
        return "moderate"
    return "minor"


_FINAL_STATUS = {"continue": "active", "discontinue": "discontinued", "modify": "modified"}


def resolve_discrepancy(
    data: ResolveDiscrepancyInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    status = resolution_status(data.resolution_action, data.prescriber_contacted, data.prescriber_response)
    details = data.final_order.medication_details

    final_list = [
        {
            "drug_name": details.get("drug_name"),
            "dose": details.get("dose"),
            "frequency": details.get("frequency"),
            "route": details.get("route"),
            "indication": details.get("indication"),
            "status": _FINAL_STATUS[data.final_order.action],
            "resolution_notes": data.documentation_note,
        }
    ]

    audit_trail = [
        {
            "timestamp": iso(data.resolution_datetime),
            "action": f"Resolved discrepancy with action: {data.resolution_action}",
            "performed_by": data.resolved_by,
            "details": data.documentation_note,
        },
        {
            "timestamp": iso(now),
            "action": "Resolution documented",
            "performed_by": "system",
            "details": f"Discrepancy {data.discrepancy_id} resolved with status: {data.final_order.action}",
        },
    ]

    return {
        "resolution_id": new_id("res", now),
        "comparison_id": data.comparison_id,
        "discrepancy_id": data.discrepancy_id,
        "status": status,
        "final_medication_list": final_list,
        "audit_trail": audit_trail,
        "follow_up_required": status != "resolved",
        "patient_harm_prevented": data.resolution_action != "prescriber_error",
        "harm_severity_avoided": harm_severity_avoided(data.resolution_action, data.prescriber_contacted),
    }
