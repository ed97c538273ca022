from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .common import UtcDatetime


class TdmMedication(BaseModel):
    drug_name: str = Field(..., min_length=1, description="Name of the medication.")
    current_dose: str = Field(..., description="Current dose with units.")
    frequency: str = Field(..., description="Dosing frequency.")
    route: str = Field(..., description="Route of administration.")
    indication: str = Field(..., description="Clinical indication.")
    start_date: UtcDatetime = Field(..., description="ISO8601 date when the medication started.")


class RenalFunction(BaseModel):
    creatinine: Optional[float] = Field(default=None, description="Serum creatinine in mg/dL.")
    egfr: Optional[float] = Field(default=None, description="eGFR in mL/min/1.73m².")
    clearance: Optional[float] = Field(default=None, description="Creatinine clearance in mL/min.")


class HepaticFunction(BaseModel):
    ast: Optional[float] = None
    alt: Optional[float] = None
    bilirubin: Optional[float] = None
    child_pugh_score: Optional[Literal["A", "B", "C"]] = Field(default=None, description="Child-Pugh class.")


class OrganFunction(BaseModel):
    renal_function: RenalFunction = Field(default_factory=RenalFunction)
    hepatic_function: HepaticFunction = Field(default_factory=HepaticFunction)


class TdmPatientFactors(BaseModel):
    age: float = Field(..., ge=0, description="Patient age in years.")
    weight_kg: float = Field(..., gt=0, description="Patient weight in kilograms.")
    organ_function: OrganFunction = Field(default_factory=OrganFunction)
    pregnancy_status: bool = False
    concurrent_medications: List[str] = Field(default_factory=list)


class AssessTdmCandidateInput(BaseModel):
    patient_id: str = Field(..., min_length=1, description="Unique patient identifier.")
    medication: TdmMedication
    patient_factors: TdmPatientFactors


class SteadyStatePatientFactors(BaseModel):
    renal_impairment: Literal["none", "mild", "moderate", "severe", "esrd"] = "none"
    hepatic_impairment: Literal["none", "mild", "moderate", "severe"] = "none"
    age_years: float = Field(..., ge=0)
    concurrent_enzyme_inducers: List[str] = Field(default_factory=list)
    concurrent_enzyme_inhibitors: List[str] = Field(default_factory=list)


class CalculateSteadyStateInput(BaseModel):
    drug_name: str = Field(..., min_length=1)
    drug_half_life: float = Field(..., gt=0, description="Drug half-life in hours.")
    dosing_start_datetime: UtcDatetime
    loading_dose_given: bool = False
    patient_factors: SteadyStatePatientFactors


class SamplingRegimen(BaseModel):
    dose: str
    frequency: str
    route: Literal["oral", "iv_bolus", "iv_infusion"]
    infusion_duration: Optional[float] = Field(default=None, ge=0, description="Infusion duration in minutes.")
    last_dose_datetime: UtcDatetime
    next_dose_datetime: UtcDatetime


class PlanSampleCollectionInput(BaseModel):
    patient_id: str = Field(..., min_length=1)
    drug_name: str = Field(..., min_length=1)
    dosing_regimen: SamplingRegimen
    sample_type_required: Literal["trough", "peak", "both", "random"]
    steady_state_datetime: UtcDatetime


class DosingRegimen(BaseModel):
    dose: str = Field(..., description="Current dose with units, e.g. '1000 mg'.")
    frequency: str
    route: str


class TherapeuticRange(BaseModel):
    lower_limit: float
    upper_limit: float
    units: str

    @model_validator(mode="after")
    def _ordered(self) -> "TherapeuticRange":
        if self.lower_limit > self.upper_limit:
            raise ValueError("lower_limit must not exceed upper_limit")
        return self


class ClinicalResponse(BaseModel):
    therapeutic_effect: Literal["none", "partial", "adequate", "excessive"]
    adverse_effects: List[str] = Field(default_factory=list)
    signs_of_toxicity: List[str] = Field(default_factory=list)


class InterpretTdmResultInput(BaseModel):
    patient_id: str = Field(..., min_length=1)
    drug_name: str = Field(..., min_length=1)
    measured_concentration: float = Field(..., ge=0)
    sample_datetime: UtcDatetime
    sample_type: Literal["trough", "peak", "random"]
    collection_plan_id: Optional[str] = None
    actual_dose_time: UtcDatetime
    actual_collection_time: UtcDatetime
    current_dosing_regimen: DosingRegimen
    therapeutic_range: TherapeuticRange
    clinical_response: ClinicalResponse


class TdmResultPoint(BaseModel):
    datetime: UtcDatetime
    concentration: float = Field(..., ge=0)
    dose_at_time: str
    clinical_response: str


class MonitorTdmTrendsInput(BaseModel):
    patient_id: str = Field(..., min_length=1)
    drug_name: str = Field(..., min_length=1)
    tdm_results: List[TdmResultPoint] = Field(..., min_length=2)
    minimum_results: int = Field(default=2, ge=2)

    @model_validator(mode="after")
    def _enough_results(self) -> "MonitorTdmTrendsInput":
        if len(self.tdm_results) < self.minimum_results:
            raise ValueError(
                f"At least {self.minimum_results} TDM results are required, got {len(self.tdm_results)}"
            )
        return self
