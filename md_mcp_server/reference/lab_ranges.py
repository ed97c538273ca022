from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class LabReferenceRange:
    test_name: str
    category: str
    age_group: str
    gender: str
    normal_range: str
    units: str
    critical_low: Optional[str] = None
    critical_high: Optional[str] = None
    notes: Optional[str] = None


LAB_REFERENCE_RANGES: Tuple[LabReferenceRange, ...] = (
    # Complete blood count
    LabReferenceRange("Hemoglobin", "CBC", "Adult", "Male", "13.8-17.2", "g/dL", "<7.0", ">20.0",
                      "Lower in elderly, higher in athletes"),
    LabReferenceRange("Hemoglobin", "CBC", "Adult", "Female", "12.1-15.1", "g/dL", "<7.0", ">20.0",
                      "Lower during menstruation, pregnancy"),
    LabReferenceRange("Hemoglobin", "CBC", "Pediatric", "Both", "10.0-13.0", "g/dL", "<7.0", ">18.0",
                      "Age 0-1 years"),
    LabReferenceRange("White Blood Cell Count", "CBC", "Adult", "Both", "4.5-11.0", "K/μL", "<2.0", ">30.0",
                      "Higher in pregnancy, lower in elderly"),
    LabReferenceRange("Platelet Count", "CBC", "Adult", "Both", "150-450", "K/μL", "<50", ">1000",
                      "Higher in women, lower in elderly"),
    # Basic metabolic panel
    LabReferenceRange("Sodium", "Chemistry", "Adult", "Both", "136-145", "mEq/L", "<120", ">160",
                      "Stable across age groups"),
    LabReferenceRange("Potassium", "Chemistry", "Adult", "Both", "3.5-5.0", "mEq/L", "<2.5", ">6.5",
                      "Higher in elderly, affected by medications"),
    LabReferenceRange("Creatinine", "Chemistry", "Adult", "Male", "0.7-1.3", "mg/dL", "<0.5", ">4.0",
                      "Higher in males, increases with age"),
    LabReferenceRange("Creatinine", "Chemistry", "Adult", "Female", "0.6-1.1", "mg/dL", "<0.5", ">4.0",
                      "Lower in females due to muscle mass"),
    LabReferenceRange("BUN (Blood Urea Nitrogen)", "Chemistry", "Adult", "Both", "7-20", "mg/dL", "<5", ">100",
                      "Higher in elderly, affected by hydration"),
    LabReferenceRange("Glucose (Fasting)", "Chemistry", "Adult", "Both", "70-100", "mg/dL", "<40", ">400",
                      "Higher in elderly, affected by diabetes"),
    # Liver function
    LabReferenceRange("ALT (Alanine Aminotransferase)", "Liver Function", "Adult", "Male", "7-56", "U/L",
                      "<5", ">500", "Higher in males, increases with BMI"),
    LabReferenceRange("ALT (Alanine Aminotransferase)", "Liver Function", "Adult", "Female", "7-40", "U/L",
                      "<5", ">500", "Lower in females, increases with BMI"),
    LabReferenceRange("AST (Aspartate Aminotransferase)", "Liver Function", "Adult", "Both", "10-40", "U/L",
                      "<5", ">500", "Higher in elderly, affected by alcohol"),
    LabReferenceRange("Total Bilirubin", "Liver Function", "Adult", "Both", "0.3-1.2", "mg/dL", "<0.1", ">10.0",
                      "Higher in males, increases with age"),
    # Lipid panel
    LabReferenceRange("Total Cholesterol", "Lipid Panel", "Adult", "Both", "<200", "mg/dL", "<100", ">300",
                      "Higher in elderly, affected by diet"),
    LabReferenceRange("LDL Cholesterol", "Lipid Panel", "Adult", "Both", "<100", "mg/dL", "<50", ">190",
                      "Optimal <70 for high-risk patients"),
    LabReferenceRange("HDL Cholesterol", "Lipid Panel", "Adult", "Male", ">40", "mg/dL", "<20", ">100",
                      "Higher is better, increases with exercise"),
    LabReferenceRange("HDL Cholesterol", "Lipid Panel", "Adult", "Female", ">50", "mg/dL", "<20", ">100",
                      "Higher in females, decreases with menopause"),
    # Thyroid function
    LabReferenceRange("TSH (Thyroid Stimulating Hormone)", "Thyroid Function", "Adult", "Both", "0.4-4.0",
                      "mIU/L", "<0.01", ">20.0", "Higher in elderly, affected by medications"),
    LabReferenceRange("Free T4", "Thyroid Function", "Adult", "Both", "0.8-1.8", "ng/dL", "<0.3", ">4.0",
                      "Stable across age groups"),
    # Coagulation
    LabReferenceRange("PT (Prothrombin Time)", "Coagulation", "Adult", "Both", "11-13", "seconds", "<8", ">20",
                      "Higher in elderly, affected by warfarin"),
    LabReferenceRange("INR (International Normalized Ratio)", "Coagulation", "Adult", "Both", "0.8-1.1", "ratio",
                      "<0.5", ">5.0", "Target 2.0-3.0 for warfarin therapy"),
)
