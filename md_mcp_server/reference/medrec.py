"""BPMH category layout and source bookkeeping for medication reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BpmhCategory:
    """One BPMH category: input field, display label and fallback prescriber source."""

    field: str
    label: str
    default_source: str
    practitioner: Optional[str] = None


# Output order is fixed by this tuple.
BPMH_CATEGORIES: Tuple[BpmhCategory, ...] = (
    BpmhCategory("prescription_medications", "Prescription Medications", "unspecified"),
    BpmhCategory("otc_medications", "OTC Medications", "self_administered"),
    BpmhCategory(
        "complementary_alternative",
        "Complementary/Alternative",
        "practitioner",
        practitioner="alternative_practitioner",
    ),
    BpmhCategory("vitamins_supplements", "Vitamins/Supplements", "self_administered"),
    BpmhCategory("herbal_products", "Herbal Products", "practitioner", practitioner="herbalist"),
    BpmhCategory("topical_medications", "Topical Medications", "self_administered"),
    BpmhCategory("eye_ear_nose_drops", "Eye/Ear/Nose Drops", "unspecified"),
    BpmhCategory("intermittent_medications", "Intermittent Medications", "unspecified"),
)

# Non-interview data-source flags, in reporting order after the interview.
BPMH_SOURCE_FLAGS: Tuple[str, ...] = (
    "medication_bottles",
    "previous_prescriptions",
    "pharmacy_records",
    "family_caregiver_input",
    "previous_discharge_summaries",
)

BPMH_COMPLETE_SOURCES = 3
BPMH_PARTIAL_SOURCES = 2

HIGH_DOSE_MG = 1000
