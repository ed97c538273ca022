from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import UtcDatetime

OrganImpairment = Literal["normal", "mild_impairment", "moderate_impairment", "severe_impairment"]


class ScreenedMedication(BaseModel):
    drug_name: str = Field(..., min_length=1, description="Generic drug name.")
    dose: str = Field(..., description="Dose with units.")
    frequency: str = Field(..., description="Dosing frequency.")
    route: str = Field(..., description="Route of administration.")
    start_date: UtcDatetime = Field(..., description="ISO8601 date when the medication started.")


class PatientCondition(BaseModel):
    condition: str = Field(..., description="ICD-10 code or description.")
    status: Literal["active", "controlled", "history"]
    severity: Literal["mild", "moderate", "severe"]


class PatientCharacteristics(BaseModel):
    age: float = Field(..., ge=0, description="Patient age in years.")
    pregnancy_status: bool = False
    breastfeeding: bool = False
    renal_function: Literal["normal", "impaired"] = "normal"
    hepatic_function: Literal["normal", "impaired"] = "normal"


class ScreenInteractionsInput(BaseModel):
    patient_id: str = Field(..., min_length=1, description="Unique patient identifier.")
    medications: List[ScreenedMedication] = Field(..., min_length=1, description="Medications to screen.")
    patient_conditions: List[PatientCondition] = Field(default_factory=list)
    patient_characteristics: PatientCharacteristics
    dietary_supplements: List[str] = Field(default_factory=list, description="Dietary supplements and foods.")
    known_allergies: List[str] = Field(default_factory=list)


class InteractionOrganFunction(BaseModel):
    renal_function: OrganImpairment
    hepatic_function: OrganImpairment
    cardiac_function: Optional[OrganImpairment] = None


class PatientSpecificFactors(BaseModel):
    age: float = Field(..., ge=0)
    comorbidities: List[str] = Field(default_factory=list)
    organ_function: InteractionOrganFunction
    concurrent_medications: List[str] = Field(default_factory=list)
    previous_adverse_reactions: List[str] = Field(default_factory=list)


class InteractionClinicalContext(BaseModel):
    indication_for_medications: List[str] = Field(default_factory=list)
    treatment_duration: Literal["acute", "chronic"]
    treatment_goals: List[str] = Field(default_factory=list)
    alternative_options_available: bool


class AssessInteractionSignificanceInput(BaseModel):
    interaction_id: str = Field(..., min_length=1, description="Interaction ID from screen_interactions.")
    patient_specific_factors: PatientSpecificFactors
    clinical_context: InteractionClinicalContext


class AlternativeMedication(BaseModel):
    drug_name: str = Field(..., min_length=1, description="Alternative drug name.")
    same_class: bool = Field(..., description="Whether the alternative is in the same drug class.")
    interaction_profile: str = Field(..., description="Interaction profile of the alternative.")


class ClinicalConstraints(BaseModel):
    formulary_restrictions: List[str] = Field(default_factory=list)
    cost_considerations: bool = False
    patient_preferences: str = ""
    treatment_urgency: Literal["emergency", "urgent", "routine"]


class RecommendInteractionManagementInput(BaseModel):
    assessment_id: str = Field(..., min_length=1, description="Assessment ID from assess_interaction_significance.")
    available_alternatives: List[AlternativeMedication] = Field(default_factory=list)
    clinical_constraints: ClinicalConstraints


class InteractionDecision(BaseModel):
    action_taken: Literal["continue_as_is", "modified_therapy", "discontinued_drug", "alternative_prescribed"]
    rationale: str = Field(..., description="Clinical rationale for the decision.")
    patient_informed: bool
    patient_consent: bool
    monitoring_plan_implemented: bool


class InteractionOutcome(BaseModel):
    interaction_occurred: bool
    severity_observed: Optional[str] = None
    management_effective: bool


class DocumentInteractionDecisionInput(BaseModel):
    interaction_id: str = Field(..., min_length=1)
    assessment_id: str = Field(..., min_length=1)
    decision_maker: str = Field(..., min_length=1, description="Provider ID who made the decision.")
    decision_datetime: UtcDatetime
    decision: InteractionDecision
    outcome_if_known: Optional[InteractionOutcome] = None
