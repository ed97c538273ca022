from __future__ import annotations

from functools import partial

from ..clinical import tdm
from ..models.tdm import (
    AssessTdmCandidateInput,
    CalculateSteadyStateInput,
    InterpretTdmResultInput,
    MonitorTdmTrendsInput,
    PlanSampleCollectionInput,
)
from ..reference import ReferenceData
from . import ToolRegistry
from .pipeline import tool_handler, tool_spec


def register_tools(registry: ToolRegistry, reference: ReferenceData) -> None:
    registry.add_tool(
        tool_spec(
            "assess_tdm_candidate",
            "Assess TDM Candidate",
            "Determines whether a medication requires therapeutic drug monitoring. Looks the drug up in "
            "the TDM profile table, reports its pharmacokinetic characteristics, the initial sample "
            "timing after steady state, and the drug risk factors this patient actually has.",
            AssessTdmCandidateInput,
        ),
        tool_handler(
            "assess_tdm_candidate",
            AssessTdmCandidateInput,
            partial(tdm.assess_tdm_candidate, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "calculate_steady_state",
            "Calculate Steady State",
            "Calculates when a drug reaches steady state (4.5 half-lives) adjusted for loading dose, "
            "organ impairment, enzyme inducers or inhibitors and age. Returns the earliest sensible "
            "sample time and every adjustment factor applied.",
            CalculateSteadyStateInput,
        ),
        tool_handler(
            "calculate_steady_state",
            CalculateSteadyStateInput,
            partial(tdm.calculate_steady_state, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "plan_sample_collection",
            "Plan Sample Collection",
            "Plans trough and/or peak sample collection windows for a TDM drug, with specimen "
            "requirements, critical timing notes and documentation requirements.",
            PlanSampleCollectionInput,
        ),
        tool_handler(
            "plan_sample_collection",
            PlanSampleCollectionInput,
            partial(tdm.plan_sample_collection, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "interpret_tdm_result",
            "Interpret TDM Result",
            "Interprets a measured drug level against its therapeutic range: classifies the level, "
            "checks sample timing, recommends a dose change and builds a follow-up plan with alerts. "
            "expected_new_level is a linear approximation, not a pharmacokinetic prediction.",
            InterpretTdmResultInput,
        ),
        tool_handler(
            "interpret_tdm_result",
            InterpretTdmResultInput,
            partial(tdm.interpret_tdm_result, reference=reference),
        ),
    )

    registry.add_tool(
        tool_spec(
            "monitor_tdm_trends",
            "Monitor TDM Trends",
            "Tracks TDM results over time: trend direction, variability, dose-response behaviour, "
            "monitoring recommendations and chart data.",
            MonitorTdmTrendsInput,
        ),
        tool_handler(
            "monitor_tdm_trends",
            MonitorTdmTrendsInput,
            partial(tdm.monitor_tdm_trends, reference=reference),
        ),
    )
