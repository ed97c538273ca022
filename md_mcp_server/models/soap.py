from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .common import UtcDatetime

Sex = Literal["M", "F", "Other"]


class Opqrst(BaseModel):
    onset: str = Field(..., description="When the symptom started.")
    palliating_provoking: str = Field(..., description="What makes it better or worse.")
    quality: str = Field(..., description="Description of the symptom.")
    region: str = Field(..., description="Location and radiation.")
    severity: Union[float, str] = Field(..., description="Severity on a 0-10 scale, or descriptive.")
    time_course: str = Field(..., description="Pattern and duration.")


class HistoryPresentIllness(BaseModel):
    opqrst: Opqrst
    associated_symptoms: List[str] = Field(default_factory=list)
    previous_episodes: bool = False
    previous_treatments: List[str] = Field(default_factory=list)


class ReviewOfSystems(BaseModel):
    constitutional: List[str] = Field(default_factory=list)
    cardiovascular: List[str] = Field(default_factory=list)
    respiratory: List[str] = Field(default_factory=list)
    gastrointestinal: List[str] = Field(default_factory=list)
    genitourinary: List[str] = Field(default_factory=list)
    musculoskeletal: List[str] = Field(default_factory=list)
    neurological: List[str] = Field(default_factory=list)
    psychiatric: List[str] = Field(default_factory=list)
    endocrine: List[str] = Field(default_factory=list)
    skin: List[str] = Field(default_factory=list)
    other: List[str] = Field(default_factory=list)


class MedicationsCompliance(BaseModel):
    taking_as_prescribed: bool
    missed_doses: str = Field(default="", description="Description of missed doses.")
    side_effects_reported: List[str] = Field(default_factory=list)


class DocumentSubjectiveInput(BaseModel):
    patient_id: str = Field(..., min_length=1, description="Unique patient identifier.")
    encounter_id: str = Field(..., min_length=1, description="Unique encounter identifier.")
    encounter_datetime: UtcDatetime
    chief_complaint: str = Field(..., min_length=1, description="Chief complaint in the patient's own words.")
    history_present_illness: HistoryPresentIllness
    review_of_systems: ReviewOfSystems = Field(default_factory=ReviewOfSystems)
    medications_compliance: MedicationsCompliance
    social_history_updates: str = ""
    functional_status: str = ""


class VitalSigns(BaseModel):
    datetime: UtcDatetime
    temperature: float = Field(..., description="Temperature in °C.")
    heart_rate: float = Field(..., description="Heart rate in bpm.")
    blood_pressure: str = Field(..., description="Blood pressure as systolic/diastolic.")
    respiratory_rate: float = Field(..., description="Respiratory rate in breaths/min.")
    oxygen_saturation: float = Field(..., description="Oxygen saturation as a percentage.")
    oxygen_delivery: Literal["room_air", "nasal_cannula", "mask", "ventilator", "other"] = "room_air"
    pain_score: Optional[float] = Field(default=None, ge=0, le=10)
    weight: Optional[float] = Field(default=None, description="Weight in kg.")
    bmi: Optional[float] = None


class PreviousVitalSigns(BaseModel):
    """An earlier set of vitals to trend against; any subset may be given."""

    datetime: Optional[UtcDatetime] = None
    heart_rate: Optional[float] = None
    respiratory_rate: Optional[float] = None
    oxygen_saturation: Optional[float] = None


class CardiovascularExam(BaseModel):
    heart_sounds: str
    murmurs: str = ""
    peripheral_pulses: str
    edema: str = ""


class RespiratoryExam(BaseModel):
    inspection: str
    auscultation: str
    percussion: str


class SystemsExamined(BaseModel):
    cardiovascular: CardiovascularExam
    respiratory: RespiratoryExam
    other_systems: Dict[str, str] = Field(default_factory=dict)


class PhysicalExamination(BaseModel):
    general_appearance: str
    systems_examined: SystemsExamined


class LabResult(BaseModel):
    test_name: str
    result: str = Field(..., description="Test result with units.")
    reference_range: str
    flag: Literal["high", "low", "critical", "normal"]
    datetime: UtcDatetime


class ImagingResult(BaseModel):
    study_type: str
    findings: str
    impression: str
    datetime: UtcDatetime


class DiagnosticResult(BaseModel):
    test_name: str
    result: str
    datetime: UtcDatetime


class DocumentObjectiveInput(BaseModel):
    encounter_id: str = Field(..., min_length=1)
    vital_signs: VitalSigns
    previous_vital_signs: Optional[PreviousVitalSigns] = Field(
        default=None, description="Earlier vital signs; trends are only reported when given."
    )
    physical_examination: PhysicalExamination
    laboratory_results: List[LabResult] = Field(default_factory=list)
    imaging_results: List[ImagingResult] = Field(default_factory=list)
    other_diagnostic_results: List[DiagnosticResult] = Field(default_factory=list)


class PatientDemographics(BaseModel):
    age: float = Field(..., ge=0)
    sex: Sex
    relevant_history: List[str] = Field(default_factory=list)


class WorkingDiagnosis(BaseModel):
    primary: str = Field(..., description="Primary diagnosis with ICD-10 code.")
    confidence: Literal["high", "moderate", "low"]
    clinical_stability: Literal["stable", "unstable", "critical"]


class DifferentialDiagnosis(BaseModel):
    diagnosis: str
    probability: Literal["high", "moderate", "low"]
    supporting_features: List[str] = Field(default_factory=list)
    against_features: List[str] = Field(default_factory=list)
    requires_rule_out: bool = False


class Problem(BaseModel):
    problem: str
    status: Literal["active", "stable", "resolved"]
    priority: int = Field(..., ge=1, le=5, description="Priority level, 1 is highest.")


class DocumentAssessmentInput(BaseModel):
    encounter_id: str = Field(..., min_length=1)
    subjective_section_id: str = Field(..., min_length=1)
    objective_section_id: str = Field(..., min_length=1)
    patient_demographics: PatientDemographics
    working_diagnosis: WorkingDiagnosis
    differential_diagnoses: List[DifferentialDiagnosis] = Field(..., min_length=1)
    problem_list: List[Problem] = Field(default_factory=list)


class PlannedMedication(BaseModel):
    action: Literal["continue", "start", "modify", "discontinue"]
    drug_name: str
    dose: str
    frequency: str
    route: str
    duration: str
    indication: str
    monitoring_required: List[str] = Field(default_factory=list)


class PlannedProcedure(BaseModel):
    procedure: str
    timing: Literal["immediate", "urgent", "routine"]
    indication: str


class TreatmentPlan(BaseModel):
    medications: List[PlannedMedication] = Field(default_factory=list)
    procedures: List[PlannedProcedure] = Field(default_factory=list)
    non_pharmacologic: List[str] = Field(default_factory=list)
    lifestyle_modifications: List[str] = Field(default_factory=list)


class Consultation(BaseModel):
    specialty: str
    urgency: Literal["stat", "urgent", "routine"]
    reason: str


class DiagnosticPlan(BaseModel):
    laboratory_tests: List[str] = Field(default_factory=list)
    imaging_studies: List[str] = Field(default_factory=list)
    consultations: List[Consultation] = Field(default_factory=list)


class MonitoringPlan(BaseModel):
    parameters: List[str] = Field(default_factory=list)
    frequency: str = ""
    duration: str = ""
    action_triggers: List[str] = Field(default_factory=list)


class PatientEducation(BaseModel):
    topics_covered: List[str] = Field(default_factory=list)
    materials_provided: List[str] = Field(default_factory=list)
    patient_understanding: Literal["good", "fair", "poor"]


class FollowUp(BaseModel):
    provider: str
    timeframe: str = Field(..., description='Follow-up timeframe such as "2 weeks" or "3 months".')
    specific_issues: List[str] = Field(default_factory=list)


class Disposition(BaseModel):
    location: Literal["home", "admission", "ICU", "transfer", "observation"]
    follow_up: FollowUp


class DocumentPlanInput(BaseModel):
    encounter_id: str = Field(..., min_length=1)
    assessment_section_id: str = Field(..., min_length=1)
    treatment_plan: TreatmentPlan = Field(default_factory=TreatmentPlan)
    diagnostic_plan: DiagnosticPlan = Field(default_factory=DiagnosticPlan)
    monitoring_plan: MonitoringPlan = Field(default_factory=MonitoringPlan)
    patient_education: PatientEducation
    disposition: Disposition


class ProviderInfo(BaseModel):
    provider_id: str
    provider_name: str
    credentials: str
    signature: bool


class NoteMetadata(BaseModel):
    encounter_type: Literal["office", "hospital", "telehealth", "emergency"]
    note_type: Literal["progress", "admission", "discharge", "consultation"]
    time_spent: float = Field(..., ge=0, description="Time spent in minutes.")
    complexity_level: Literal["low", "moderate", "high"]


class SectionTexts(BaseModel):
    """Narratives returned by the section tools. Missing ones render as placeholders."""

    subjective: Optional[str] = None
    objective: Optional[str] = None
    assessment: Optional[str] = None
    plan: Optional[str] = None


class CompileSoapNoteInput(BaseModel):
    encounter_id: str = Field(..., min_length=1)
    patient_id: Optional[str] = None
    encounter_datetime: Optional[UtcDatetime] = None
    subjective_section_id: str = Field(..., min_length=1)
    objective_section_id: str = Field(..., min_length=1)
    assessment_section_id: str = Field(..., min_length=1)
    plan_section_id: str = Field(..., min_length=1)
    section_texts: SectionTexts = Field(default_factory=SectionTexts)
    provider_info: ProviderInfo
    note_metadata: NoteMetadata
