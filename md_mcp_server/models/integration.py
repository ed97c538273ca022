from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import UtcDatetime
from .interactions import PatientCondition
from .soap import LabResult, Sex

Protocol = Literal["medrec", "tdm", "interactions", "soap", "five_rights"]
ClinicalScenario = Literal["new_prescription", "medication_review", "admission", "discharge", "adverse_event"]


class Demographics(BaseModel):
    age: float = Field(..., ge=0, description="Patient age in years.")
    sex: Sex
    weight_kg: float = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)


class CurrentMedication(BaseModel):
    drug_name: str = Field(..., min_length=1)
    dose: str
    frequency: str
    route: str
    indication: str = ""
    start_date: Optional[UtcDatetime] = None


class CurrentVitalSigns(BaseModel):
    temperature: float = Field(..., description="Temperature in °C.")
    heart_rate: float
    blood_pressure: str
    respiratory_rate: float
    oxygen_saturation: float


class PatientData(BaseModel):
    demographics: Demographics
    current_medications: List[CurrentMedication] = Field(default_factory=list)
    active_conditions: List[PatientCondition] = Field(default_factory=list)
    recent_labs: List[LabResult] = Field(default_factory=list)
    vital_signs: Optional[CurrentVitalSigns] = None


class ClinicalDecisionSupportInput(BaseModel):
    patient_id: str = Field(..., min_length=1, description="Unique patient identifier.")
    clinical_scenario: ClinicalScenario
    active_protocols: List[Protocol] = Field(
        default_factory=list,
        description="Protocols the caller allows. Empty allows every protocol the scenario activates.",
    )
    patient_data: PatientData


class TimeRange(BaseModel):
    start: UtcDatetime
    end: UtcDatetime


class AuditEvent(BaseModel):
    """One recorded tool invocation, as kept by the caller."""

    event_id: str = Field(..., min_length=1)
    patient_id: str = Field(..., min_length=1)
    protocol: Protocol
    tool: str = Field(..., min_length=1, description="Name of the tool that was called.")
    action: str = Field(default="", description="What was done. Derived from the tool name when empty.")
    datetime: UtcDatetime
    user_id: str = ""
    inputs: Dict[str, Any] = Field(default_factory=dict)
    outputs: Dict[str, Any] = Field(default_factory=dict)
    decision_made: str = ""
    patient_outcome: str = ""
    safety_event_prevented: bool = Field(
        default=False, description="Whether this event stopped a medication error from reaching the patient."
    )


class AuditTrailInput(BaseModel):
    patient_id: str = Field(..., min_length=1)
    time_range: TimeRange
    protocol_filter: List[Protocol] = Field(default_factory=list, description="Empty includes every protocol.")
    events: List[AuditEvent] = Field(default_factory=list, description="Recorded events to report on.")
