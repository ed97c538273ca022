"""
Workflow prompts.

Each prompt takes a single argument and returns one assistant message that
walks the agent through the matching tools in order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from mcp import types


@dataclass(frozen=True)
class WorkflowPrompt:
    name: str
    title: str
    description: str
    argument: str
    argument_description: str
    workflow: str
    summary: str
    template: str

    def spec(self) -> types.Prompt:
        return types.Prompt(
            name=self.name,
            title=self.title,
            description=self.description,
            arguments=[
                types.PromptArgument(name=self.argument, description=self.argument_description, required=True)
            ],
        )

    def render(self, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        value = (arguments or {}).get(self.argument, "").strip()
        if not value:
            raise ValueError(f"Prompt '{self.name}' requires argument '{self.argument}'")
        return types.GetPromptResult(
            description=self.summary.format(value=value),
            messages=[
                types.PromptMessage(
                    role="assistant",
                    content=types.TextContent(type="text", text=self.template.format(value=value)),
                )
            ],
            _meta={self.argument: value, "workflow": self.workflow},
        )


MEDICATION_RECONCILIATION = WorkflowPrompt(
    name="medication_reconciliation_workflow",
    title="Medication Reconciliation Workflow",
    description="Guides a WHO High 5s medication reconciliation: collect the BPMH, find discrepancies against "
    "new orders, then resolve each one. Suited to admissions, transfers and discharge planning.",
    argument="patient_id",
    argument_description="Patient ID to start medication reconciliation for",
    workflow="medication_reconciliation",
    summary="Medication reconciliation workflow initiated for patient {value}",
    template="""**Medication Reconciliation Workflow Started**

**Patient ID:** {value}

**Step 1: Collect Medication History**
Use the `gather_bpmh` tool to build the Best Possible Medication History from several sources:
- Patient interview
- Medication bottles
- Pharmacy records
- Previous prescriptions
- Family or caregiver input

**Step 2: Identify Discrepancies**
Use the `compare_medications` tool to compare the BPMH with the new admission or transfer orders:
- Omissions (in the BPMH but not ordered)
- Duplicate orders
- Dose, frequency or route changes
- New medications

**Step 3: Resolve Issues**
Use the `resolve_discrepancy` tool for each discrepancy found:
- Contact the prescriber when needed
- Document the clinical reasoning
- Update the medication orders

**Safety Reminders:**
- Verify with two or more sources when possible
- Record what the patient actually takes, not only what was prescribed
- Resolve critical discrepancies first

Ready to start? Use the `gather_bpmh` tool with patient ID: {value}""",
)

TDM_ANALYSIS = WorkflowPrompt(
    name="tdm_analysis_workflow",
    title="Therapeutic Drug Monitoring (TDM) Analysis",
    description="Guides therapeutic drug monitoring for one drug: candidacy, steady-state timing, sample "
    "collection, result interpretation and trend monitoring.",
    argument="drug_name",
    argument_description='Drug to monitor, e.g. "vancomycin", "digoxin" or "phenytoin"',
    workflow="tdm_analysis",
    summary="TDM analysis workflow initiated for {value}",
    template="""**TDM Analysis Workflow Started**

**Drug:** {value}

**Step 1: Assess TDM Need**
Use the `assess_tdm_candidate` tool to check whether the drug needs monitoring:
- Narrow therapeutic index
- Pharmacokinetic variability
- Patient factors such as age and organ function

**Step 2: Calculate Timing**
Use the `calculate_steady_state` tool to find when steady state is reached (4-5 half-lives, longer with
organ impairment, shorter after a loading dose).

**Step 3: Plan Collection**
Use the `plan_sample_collection` tool for collection instructions:
- Trough: within 60 minutes before the next dose
- Peak: 1-2 hours after the dose, depending on the drug

**Step 4: Interpret Results**
Use the `interpret_tdm_result` tool when the level is back:
- Compare with the therapeutic range
- Correlate with clinical response
- Consider a dose adjustment

**Step 5: Monitor Trends**
Use the `monitor_tdm_trends` tool to follow levels over time and judge the dose-response relationship.

Ready to start? Use the `assess_tdm_candidate` tool for {value}""",
)

SOAP_DOCUMENTATION = WorkflowPrompt(
    name="soap_documentation_workflow",
    title="SOAP Documentation Workflow",
    description="Guides structured SOAP documentation for an encounter, section by section, ending with a "
    "compiled and coded note.",
    argument="encounter_id",
    argument_description="Encounter ID to document",
    workflow="soap_documentation",
    summary="SOAP documentation workflow initiated for encounter {value}",
    template="""**SOAP Documentation Workflow Started**

**Encounter ID:** {value}

**Step 1: Subjective (S)**
Use the `document_subjective` tool for the chief complaint in the patient's words, the OPQRST history,
review of systems, medication compliance and functional status.

**Step 2: Objective (O)**
Use the `document_objective` tool for vital signs, the physical examination, laboratory and imaging
results. Supply earlier vitals to get trends.

**Step 3: Assessment (A)**
Use the `document_assessment` tool for the working diagnosis, differential diagnoses, a prioritized
problem list and risk stratification.

**Step 4: Plan (P)**
Use the `document_plan` tool for medications, diagnostics, monitoring, patient education, disposition
and follow-up.

**Step 5: Compile the Note**
Use the `compile_soap_note` tool with the four section narratives to produce the final note with
quality checks and ICD-10/CPT suggestions.

**Documentation Tips:**
- Be specific with measurements and findings
- Give each plan item a clear timeline
- Complete every section before signing

Ready to start? Use the `document_subjective` tool with encounter ID: {value}""",
)

DRUG_INTERACTION = WorkflowPrompt(
    name="drug_interaction_workflow",
    title="Drug Interaction Screening Workflow",
    description="Guides drug interaction screening for a medication list: screening, significance, "
    "management and documentation of the decision.",
    argument="medication_list",
    argument_description='Comma-separated medications, e.g. "warfarin, aspirin, metformin"',
    workflow="drug_interaction_screening",
    summary="Drug interaction screening workflow initiated for medications: {value}",
    template="""**Drug Interaction Screening Workflow Started**

**Medications to Screen:** {value}

**Step 1: Screen**
Use the `screen_interactions` tool to find drug-drug, drug-condition and drug-food interactions
and contraindications.

**Step 2: Assess Significance**
Use the `assess_interaction_significance` tool for each interaction to weigh patient risk factors,
probability and potential harm.

**Step 3: Manage**
Use the `recommend_interaction_management` tool for management strategies, alternatives, monitoring
and whether a specialist should be consulted.

**Step 4: Document**
Use the `document_interaction_decision` tool to record the decision, its rationale, patient consent
and follow-up.

**Severity Levels:**
- **Contraindicated:** avoid the combination
- **Serious:** monitor closely and consider alternatives
- **Moderate:** adjust doses and monitor
- **Minor:** monitor and educate the patient

Ready to start? Use the `screen_interactions` tool with medications: {value}""",
)

CLINICAL_DECISION_SUPPORT = WorkflowPrompt(
    name="clinical_decision_support_workflow",
    title="Clinical Decision Support Workflow",
    description="Guides integrated decision support across all protocols for one patient, followed by an "
    "audit of the recorded protocol events.",
    argument="patient_id",
    argument_description="Patient ID to assess",
    workflow="clinical_decision_support",
    summary="Clinical decision support workflow initiated for patient {value}",
    template="""**Clinical Decision Support Workflow Started**

**Patient ID:** {value}

**Step 1: Integrated Assessment**
Use the `clinical_decision_support` tool. Depending on the scenario it activates medication
reconciliation, TDM, interaction screening, SOAP documentation and five-rights checks, and reports
cross-protocol alerts.

**Step 2: Prioritized Actions**
Work through the returned actions in order:
- **Immediate:** critical safety issues
- **Urgent:** issues to close within 24 hours
- **Routine:** standard follow-up and monitoring

**Step 3: Protocol Workflows**
Follow the protocol-specific tools for each activated protocol.

**Step 4: Audit and Quality**
Use the `audit_trail` tool with the recorded events to review protocol adherence and interventions.

Ready to start? Use the `clinical_decision_support` tool with patient ID: {value}""",
)

WORKFLOW_PROMPTS = (
    MEDICATION_RECONCILIATION,
    TDM_ANALYSIS,
    SOAP_DOCUMENTATION,
    DRUG_INTERACTION,
    CLINICAL_DECISION_SUPPORT,
)


class PromptRegistry:
    """
    In-memory registry mapping prompt names to workflow prompts.
    """

    def __init__(self) -> None:
        self._prompts: Dict[str, WorkflowPrompt] = {}

    def add_prompt(self, prompt: WorkflowPrompt) -> None:
        if prompt.name in self._prompts:
            raise ValueError(f"Prompt '{prompt.name}' already registered")
        self._prompts[prompt.name] = prompt

    def list_prompts(self) -> List[types.Prompt]:
        return [prompt.spec() for prompt in self._prompts.values()]

    def get_prompt(self, name: str, arguments: Optional[Dict[str, str]] = None) -> types.GetPromptResult:
        if name not in self._prompts:
            raise KeyError(f"Unknown prompt '{name}'")
        return self._prompts[name].render(arguments)

    def __contains__(self, name: object) -> bool:
        return name in self._prompts

    def __len__(self) -> int:
        return len(self._prompts)


def build_prompt_registry() -> PromptRegistry:
    registry = PromptRegistry()
    for prompt in WORKFLOW_PROMPTS:
        registry.add_prompt(prompt)
    return registry
