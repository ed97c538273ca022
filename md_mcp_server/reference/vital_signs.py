from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class VitalSignRange:
    vital_sign: str
    age_group: str
    gender: str
    normal_range: str
    units: str
    critical_low: Optional[str] = None
    critical_high: Optional[str] = None
    clinical_context: Optional[str] = None
    notes: Optional[str] = None


_RESTING = "Resting, awake"

VITAL_SIGN_RANGES: Tuple[VitalSignRange, ...] = (
    # Heart rate
    VitalSignRange("Heart Rate", "Newborn", "Both", "100-160", "bpm", "<80", ">200", _RESTING,
                   "Higher during crying, feeding, or activity"),
    VitalSignRange("Heart Rate", "Infant", "Both", "80-140", "bpm", "<70", ">180", _RESTING,
                   "Decreases with age, higher during sleep"),
    VitalSignRange("Heart Rate", "Child", "Both", "70-120", "bpm", "<60", ">160", _RESTING,
                   "Athletes may have lower resting rates"),
    VitalSignRange("Heart Rate", "Adult", "Both", "60-100", "bpm", "<40", ">150", _RESTING,
                   "Athletes: 40-60 bpm, higher in elderly"),
    VitalSignRange("Heart Rate", "Elderly", "Both", "60-100", "bpm", "<40", ">120", _RESTING,
                   "May be higher due to medications, lower fitness"),
    # Blood pressure
    VitalSignRange("Systolic Blood Pressure", "Newborn", "Both", "70-90", "mmHg", "<50", ">120", _RESTING,
                   "Increases with gestational age"),
    VitalSignRange("Systolic Blood Pressure", "Infant", "Both", "80-110", "mmHg", "<60", ">130", _RESTING,
                   "Increases with age and weight"),
    VitalSignRange("Systolic Blood Pressure", "Child", "Both", "90-120", "mmHg", "<70", ">140", _RESTING,
                   "Use age-appropriate cuff size"),
    VitalSignRange("Systolic Blood Pressure", "Adult", "Both", "90-120", "mmHg", "<70", ">180", _RESTING,
                   "Normal: <120, Elevated: 120-129, Stage 1: 130-139, Stage 2: ≥140"),
    VitalSignRange("Diastolic Blood Pressure", "Adult", "Both", "60-80", "mmHg", "<40", ">110", _RESTING,
                   "Normal: <80, Elevated: <80, Stage 1: 80-89, Stage 2: ≥90"),
    # Respiratory rate
    VitalSignRange("Respiratory Rate", "Newborn", "Both", "30-60", "breaths/min", "<20", ">80", _RESTING,
                   "Count for full minute, irregular in newborns"),
    VitalSignRange("Respiratory Rate", "Infant", "Both", "25-40", "breaths/min", "<20", ">60", _RESTING,
                   "Higher during crying, feeding"),
    VitalSignRange("Respiratory Rate", "Child", "Both", "20-30", "breaths/min", "<15", ">40", _RESTING,
                   "Count for full minute, may be irregular"),
    VitalSignRange("Respiratory Rate", "Adult", "Both", "12-20", "breaths/min", "<8", ">30", _RESTING,
                   "Higher in elderly, athletes, anxiety"),
    VitalSignRange("Respiratory Rate", "Elderly", "Both", "12-20", "breaths/min", "<8", ">25", _RESTING,
                   "May be higher due to chronic conditions"),
    # Temperature
    VitalSignRange("Temperature", "All", "Both", "97.8-99.1", "°F", "<95.0", ">104.0", "Oral, resting",
                   "Rectal: +0.5-1.0°F, Axillary: -0.5-1.0°F"),
    VitalSignRange("Temperature", "All", "Both", "36.5-37.3", "°C", "<35.0", ">40.0", "Oral, resting",
                   "Rectal: +0.3-0.6°C, Axillary: -0.3-0.6°C"),
    # Oxygen saturation
    VitalSignRange("Oxygen Saturation", "All", "Both", "95-100", "%", "<90", ">100", "Room air, resting",
                   "Lower in COPD patients, higher altitudes"),
    VitalSignRange("Oxygen Saturation", "Elderly", "Both", "92-100", "%", "<88", ">100", "Room air, resting",
                   "May be lower due to chronic lung disease"),
    # Pain
    VitalSignRange("Pain Scale", "Adult", "Both", "0-3", "0-10 scale", "0", ">7", "Self-reported",
                   "0=No pain, 1-3=Mild, 4-6=Moderate, 7-10=Severe"),
    VitalSignRange("Pain Scale", "Pediatric", "Both", "0-3", "0-10 scale", "0", ">7", "Age-appropriate scale",
                   "Use FLACC scale for infants, Wong-Baker for children"),
    # Body mass index
    VitalSignRange("BMI (Body Mass Index)", "Adult", "Both", "18.5-24.9", "kg/m²", "<16.0", ">40.0", "Calculated",
                   "Underweight: <18.5, Normal: 18.5-24.9, Overweight: 25-29.9, Obese: ≥30"),
    VitalSignRange("BMI (Body Mass Index)", "Elderly", "Both", "22-27", "kg/m²", "<18.5", ">35.0", "Calculated",
                   "Slightly higher range acceptable in elderly"),
)
