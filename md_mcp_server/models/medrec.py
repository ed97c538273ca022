from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import UtcDatetime


class PatientInterview(BaseModel):
    conducted: bool = Field(..., description="Whether the patient interview was conducted.")
    interviewer_id: Optional[str] = Field(default=None, description="ID of the interviewer.")
    date_time: Optional[UtcDatetime] = Field(default=None, description="ISO8601 datetime of the interview.")


class BpmhDataSources(BaseModel):
    patient_interview: PatientInterview
    medication_bottles: bool = False
    previous_prescriptions: bool = False
    pharmacy_records: bool = False
    family_caregiver_input: bool = False
    previous_discharge_summaries: bool = False


class BpmhMedication(BaseModel):
    drug_name: str = Field(..., min_length=1, description="Generic and/or brand name.")
    dose: str = Field(..., description="Dose with units.")
    frequency: str = Field(..., description="Frequency actually taken, not as prescribed.")
    route: str = Field(..., description="Route of administration.")
    indication: str = Field(..., description="Reason for taking the medication.")
    last_taken: Optional[UtcDatetime] = None
    prescriber: Optional[str] = Field(default=None, description="Prescriber name, if known.")
    start_date: Optional[UtcDatetime] = None
    adherence_notes: Optional[str] = Field(default=None, description="How the patient actually takes it.")


class SystematicCategories(BaseModel):
    prescription_medications: List[BpmhMedication] = Field(default_factory=list)
    otc_medications: List[BpmhMedication] = Field(default_factory=list)
    complementary_alternative: List[BpmhMedication] = Field(default_factory=list)
    vitamins_supplements: List[BpmhMedication] = Field(default_factory=list)
    herbal_products: List[BpmhMedication] = Field(default_factory=list)
    topical_medications: List[BpmhMedication] = Field(default_factory=list)
    eye_ear_nose_drops: List[BpmhMedication] = Field(default_factory=list)
    intermittent_medications: List[BpmhMedication] = Field(default_factory=list)


class GatherBpmhInput(BaseModel):
    patient_id: str = Field(..., min_length=1, description="Unique patient identifier.")
    data_sources: BpmhDataSources
    systematic_categories: SystematicCategories = Field(default_factory=SystematicCategories)


class MedicationOrder(BaseModel):
    drug_name: str = Field(..., min_length=1)
    dose: str = Field(..., description="Dose with units.")
    frequency: str
    route: str
    indication: str
    prescriber: str
    order_datetime: UtcDatetime


class HomeMedication(BaseModel):
    drug_name: str = Field(..., min_length=1)
    dose: str
    frequency: str
    route: str
    indication: Optional[str] = None


class CompareMedicationsInput(BaseModel):
    bpmh_id: str = Field(..., min_length=1, description="BPMH ID returned by gather_bpmh.")
    new_orders: List[MedicationOrder]
    comparison_type: Literal["proactive", "retroactive"]
    bpmh_medications: Optional[List[HomeMedication]] = Field(
        default=None,
        description="Home medications from the BPMH. When given, omissions, new medications and "
        "dose/frequency/route changes are detected too.",
    )


class FinalOrder(BaseModel):
    action: Literal["continue", "discontinue", "modify"]
    medication_details: Dict[str, Any] = Field(default_factory=dict, description="Final medication order details.")


class ResolveDiscrepancyInput(BaseModel):
    comparison_id: str = Field(..., min_length=1, description="Comparison ID from compare_medications.")
    discrepancy_id: str = Field(..., min_length=1)
    resolution_action: Literal[
        "intentional_change",
        "prescriber_error",
        "continue_home_med",
        "discontinue",
        "modify_order",
    ]
    resolved_by: str = Field(..., min_length=1, description="Provider ID who resolved the discrepancy.")
    resolution_datetime: UtcDatetime
    prescriber_contacted: bool
    prescriber_response: Optional[str] = None
    final_order: FinalOrder
    documentation_note: str = Field(..., description="Clinical documentation of the resolution.")
