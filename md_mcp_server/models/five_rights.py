from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import UtcDatetime

IdentifierType = Literal["name", "mrn", "date_of_birth", "photo", "biometric"]
Route = Literal["oral", "IV", "IM", "SC", "topical", "inhaled", "rectal", "ophthalmic", "otic", "nasal", "transdermal"]


class PatientIdentifier(BaseModel):
    type: IdentifierType
    value: str
    verification_method: Literal["wristband", "verbal", "electronic", "visual"]


class PatientIdentifiers(BaseModel):
    identifier_1: PatientIdentifier
    identifier_2: PatientIdentifier


class ExpectedPatient(BaseModel):
    name: str
    mrn: str
    date_of_birth: str = Field(..., description="Expected date of birth, compared verbatim.")


class VerifyRightPatientInput(BaseModel):
    patient_identifiers: PatientIdentifiers = Field(..., description="Two different identifiers. Never a room number.")
    expected_patient: ExpectedPatient
    verification_datetime: UtcDatetime
    verifier_id: str = Field(..., min_length=1)


class MedicationOrderDetails(BaseModel):
    ordered_medication: str = Field(..., min_length=1, description="Ordered medication (generic name).")
    brand_names: List[str] = Field(default_factory=list)
    order_id: str


class MedicationInHand(BaseModel):
    label_name: str
    ndc_code: str = Field(default="", description="National Drug Code.")
    lot_number: str = ""
    expiration_date: UtcDatetime
    appearance: str = ""


class VerifyRightMedicationInput(BaseModel):
    order_details: MedicationOrderDetails
    medication_in_hand: MedicationInHand
    verification_datetime: UtcDatetime
    high_alert_medication: bool = False
    look_alike_sound_alike: bool = False
    double_check_completed: bool = Field(
        default=False,
        description="Whether an independent double-check was done. Required to proceed with high-alert medications.",
    )


class DoseOrderDetails(BaseModel):
    ordered_dose: str = Field(..., description="Ordered dose with units.")
    patient_weight_kg: Optional[float] = Field(default=None, gt=0)
    bsa_m2: Optional[float] = Field(default=None, gt=0)
    dose_calculation_formula: Optional[str] = None


class PreparedDose(BaseModel):
    amount: float
    units: str
    volume: Optional[float] = Field(default=None, description="Volume in mL, if liquid.")
    concentration: Optional[str] = None
    number_of_units: Optional[float] = None


class DosePatientFactors(BaseModel):
    age: float = Field(..., ge=0)
    renal_function: Literal["normal", "impaired"] = "normal"
    hepatic_function: Literal["normal", "impaired"] = "normal"
    dose_adjustment_required: bool = False


class VerifyRightDoseInput(BaseModel):
    order_details: DoseOrderDetails
    prepared_dose: PreparedDose
    patient_factors: DosePatientFactors
    verification_datetime: UtcDatetime
    second_verifier_id: Optional[str] = Field(
        default=None, description="ID of the second person who independently checked the calculation."
    )


class RouteOrderDetails(BaseModel):
    ordered_route: Route
    specific_site: Optional[str] = None


class IvAccess(BaseModel):
    available: bool
    type: Optional[Literal["peripheral", "central", "picc"]] = None
    site: Optional[str] = None
    patent: bool = False


class RoutePatientAssessment(BaseModel):
    conscious_level: Literal["alert", "drowsy", "unconscious"]
    swallow_ability: Literal["normal", "impaired", "npo"]
    iv_access: IvAccess
    contraindications_for_route: List[str] = Field(default_factory=list)


class MedicationFormulation(BaseModel):
    available_routes: List[str] = Field(default_factory=list)
    formulation_type: Literal["tablet", "capsule", "liquid", "injection", "cream", "patch"]


class VerifyRightRouteInput(BaseModel):
    order_details: RouteOrderDetails
    patient_assessment: RoutePatientAssessment
    medication_formulation: MedicationFormulation


class AdministrationWindow(BaseModel):
    earliest: UtcDatetime
    latest: UtcDatetime


class TimeOrderDetails(BaseModel):
    ordered_frequency: str = Field(..., description='Dosing frequency such as "q6h" or "twice daily".')
    scheduled_time: UtcDatetime
    time_critical: bool = False
    administration_window: AdministrationWindow


class LastDose(BaseModel):
    datetime: UtcDatetime
    dose_given: str


class TimePatientFactors(BaseModel):
    fasting_required: bool = False
    fasting_status: bool = False
    meal_timing: Optional[Literal["before", "with", "after"]] = None
    drug_interactions_timing: List[str] = Field(default_factory=list)


class VerifyRightTimeInput(BaseModel):
    order_details: TimeOrderDetails
    current_datetime: UtcDatetime
    last_dose: Optional[LastDose] = Field(default=None, description="Omit for a first dose.")
    patient_factors: TimePatientFactors = Field(default_factory=TimePatientFactors)


class AdministrationDetails(BaseModel):
    patient_id: str = ""
    medication: str = ""
    dose: str = ""
    route: str = ""
    site: str = ""
    administration_datetime: Optional[UtcDatetime] = None
    administrator_id: str = ""
    administrator_signature: str = ""


class VerificationResults(BaseModel):
    patient_verified: bool
    medication_verified: bool
    dose_verified: bool
    route_verified: bool
    time_verified: bool


class PatientResponse(BaseModel):
    immediate_reaction: Literal["none", "mild", "moderate", "severe"] = "none"
    adverse_effects: List[str] = Field(default_factory=list)
    patient_refused: bool = False
    refusal_reason: str = ""


class VerifyRightDocumentationInput(BaseModel):
    administration_details: AdministrationDetails
    verification_results: VerificationResults
    patient_response: PatientResponse = Field(default_factory=PatientResponse)
    witness_id: Optional[str] = Field(default=None, description="ID of the witness, if one was present.")
    patient_education_provided: bool = False
