from __future__ import annotations

from functools import partial

from ..clinical import medrec
from ..models.medrec import CompareMedicationsInput, GatherBpmhInput, ResolveDiscrepancyInput
from ..reference import ReferenceData
from . import ToolRegistry
from .pipeline import tool_handler, tool_spec


def register_tools(registry: ToolRegistry, reference: ReferenceData) -> None:
    registry.add_tool(
        tool_spec(
            "gather_bpmh",
            "Gather Best Possible Medication History",
            "Collects a Best Possible Medication History (BPMH) from multiple sources following the "
            "WHO High 5s reconciliation process. Medications are grouped into fixed categories, each "
            "entry is tagged with its prescriber source, and the history is graded complete, partial "
            "or unverified by the number of sources consulted.",
            GatherBpmhInput,
        ),
        tool_handler("gather_bpmh", GatherBpmhInput, partial(medrec.gather_bpmh, reference=reference)),
    )

    registry.add_tool(
        tool_spec(
            "compare_medications",
            "Compare Medications",
            "Compares new admission or transfer orders against the BPMH to find discrepancies: "
            "duplicate orders, high doses and, when the home medication list is supplied, omissions, "
            "new medications and dose/frequency/route changes.",
            CompareMedicationsInput,
        ),
        tool_handler(
            "compare_medications",
            CompareMedicationsInput,
            partial(medrec.compare_medications, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "resolve_discrepancy",
            "Resolve Medication Discrepancy",
            "Documents how a medication discrepancy was resolved. Derives the resolution status from "
            "the action taken and prescriber involvement, and returns the final medication entry, an "
            "audit trail and a patient-safety judgment.",
            ResolveDiscrepancyInput,
        ),
        tool_handler(
            "resolve_discrepancy",
            ResolveDiscrepancyInput,
            partial(medrec.resolve_discrepancy, reference=reference),
        ),
    )
