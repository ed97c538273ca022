from __future__ import annotations

from functools import partial

from ..clinical import interactions
from ..models.interactions import (
    AssessInteractionSignificanceInput,
    DocumentInteractionDecisionInput,
    RecommendInteractionManagementInput,
    ScreenInteractionsInput,
)
from ..reference import ReferenceData
from . import ToolRegistry
from .pipeline import tool_handler, tool_spec


def register_tools(registry: ToolRegistry, reference: ReferenceData) -> None:
    registry.add_tool(
        tool_spec(
            "screen_interactions",
            "Screen Drug Interactions",
            "Screens a medication list for drug-drug, drug-condition and drug-food interactions and "
            "for pregnancy or renal contraindications. Returns every interaction found with its "
            "mechanism and effects, plus a severity summary.",
            ScreenInteractionsInput,
        ),
        tool_handler(
            "screen_interactions",
            ScreenInteractionsInput,
            partial(interactions.screen_interactions, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "assess_interaction_significance",
            "Assess Interaction Significance",
            "Weighs a screened interaction against patient-specific risk and protective factors. "
            "Returns probability of occurrence, potential harm, a 0-10 significance score, whether "
            "intervention is required and how urgently, and monitoring recommendations.",
            AssessInteractionSignificanceInput,
        ),
        tool_handler(
            "assess_interaction_significance",
            AssessInteractionSignificanceInput,
            partial(interactions.assess_interaction_significance, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "recommend_interaction_management",
            "Recommend Interaction Management",
            "Recommends management strategies for an assessed interaction in priority order "
            "(use alternative, adjust doses, separate administration, monitor closely) with "
            "monitoring plans, patient education, rationale and consultation needs.",
            RecommendInteractionManagementInput,
        ),
        tool_handler(
            "recommend_interaction_management",
            RecommendInteractionManagementInput,
            partial(interactions.recommend_interaction_management, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "document_interaction_decision",
            "Document Interaction Decision",
            "Documents the clinical decision taken for a drug interaction: audit trail, quality "
            "metrics, follow-up scheduling, clinical notes and record-retention flags.",
            DocumentInteractionDecisionInput,
        ),
        tool_handler(
            "document_interaction_decision",
            DocumentInteractionDecisionInput,
            partial(interactions.document_interaction_decision, reference=reference),
        ),
    )
