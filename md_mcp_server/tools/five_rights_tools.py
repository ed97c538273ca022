from __future__ import annotations

from functools import partial

from ..clinical import five_rights
from ..models.five_rights import (
    VerifyRightDocumentationInput,
    VerifyRightDoseInput,
    VerifyRightMedicationInput,
    VerifyRightPatientInput,
    VerifyRightRouteInput,
    VerifyRightTimeInput,
)
from ..reference import ReferenceData
from . import ToolRegistry
from .pipeline import tool_handler, tool_spec

_FIVE_RIGHTS_TOOLS = (
    (
        "verify_right_patient",
        "Verify Right Patient",
        "Verifies patient identity from two different identifiers (never a room number) against the "
        "expected patient. Reports match confidence, discrepancies and whether administration can proceed.",
        VerifyRightPatientInput,
        five_rights.verify_right_patient,
    ),
    (
        "verify_right_medication",
        "Verify Right Medication",
        "Checks the medication in hand against the order: name match (generic or brand), NDC, "
        "expiration, high-alert double-check and look-alike/sound-alike warnings.",
        VerifyRightMedicationInput,
        five_rights.verify_right_medication,
    ),
    (
        "verify_right_dose",
        "Verify Right Dose",
        "Checks the prepared dose against the ordered dose, the normal range and measurability. "
        "Flags organ-function adjustments and doses that need an independent second check.",
        VerifyRightDoseInput,
        five_rights.verify_right_dose,
    ),
    (
        "verify_right_route",
        "Verify Right Route",
        "Checks that the ordered route suits the patient's condition, the formulation and the "
        "available access. Suggests an alternative route when it does not.",
        VerifyRightRouteInput,
        five_rights.verify_right_route,
    ),
    (
        "verify_right_time",
        "Verify Right Time",
        "Checks administration timing: the administration window, the minimum interval since the "
        "last dose, meal requirements and time-critical deviation. Recommends give now, delay or "
        "contact the prescriber.",
        VerifyRightTimeInput,
        five_rights.verify_right_time,
    ),
    (
        "verify_right_documentation",
        "Verify Right Documentation",
        "Builds the medication administration record entry and lists any missing documentation "
        "elements, adverse reactions and follow-up needs.",
        VerifyRightDocumentationInput,
        five_rights.verify_right_documentation,
    ),
)


def register_tools(registry: ToolRegistry, reference: ReferenceData) -> None:
    for name, title, description, schema, evaluate in _FIVE_RIGHTS_TOOLS:
        registry.add_tool(
            tool_spec(name, title, description, schema),
            tool_handler(name, schema, partial(evaluate, reference=reference)),
        )
