"""
Therapeutic drug monitoring reference data.

Profiles are keyed by lower-cased generic name. A drug that is absent from
`TDM_PROFILES` is not a TDM drug.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class TdmProfile:
    therapeutic_range: str
    toxic_level: str
    half_life: str
    time_to_steady_state: str
    monitoring_frequency: str
    sample_type: str
    risk_factors: Tuple[str, ...]
    range_lower: float
    range_upper: float
    units: str


@dataclass(frozen=True)
class SpecimenRequirement:
    drugs: Tuple[str, ...]
    specimen_type: str
    volume_ml: float
    collection_tube: str
    special_handling: Tuple[str, ...]


@dataclass(frozen=True)
class DrugMonitoring:
    """Extra clinical and laboratory monitoring lines for a drug after a TDM result."""

    clinical: Tuple[str, ...]
    laboratory: Tuple[str, ...]


TDM_PROFILES: Mapping[str, TdmProfile] = MappingProxyType(
    {
        "vancomycin": TdmProfile(
            therapeutic_range="10-20 mg/L (trough)",
            toxic_level=">20 mg/L",
            half_life="4-8 hours",
            time_to_steady_state="24-48 hours",
            monitoring_frequency="Every 2-3 days until stable",
            sample_type="trough",
            risk_factors=("renal impairment", "obesity", "critical illness"),
            range_lower=10,
            range_upper=20,
            units="mg/L",
        ),
        "digoxin": TdmProfile(
            therapeutic_range="0.8-2.0 ng/mL",
            toxic_level=">2.0 ng/mL",
            half_life="36 hours",
            time_to_steady_state="5-7 days",
            monitoring_frequency="Weekly until stable",
            sample_type="trough",
            risk_factors=("renal impairment", "elderly", "hypokalemia"),
            range_lower=0.8,
            range_upper=2.0,
            units="ng/mL",
        ),
        "phenytoin": TdmProfile(
            therapeutic_range="10-20 mg/L",
            toxic_level=">20 mg/L",
            half_life="22 hours",
            time_to_steady_state="5-7 days",
            monitoring_frequency="Weekly until stable",
            sample_type="trough",
            risk_factors=("hepatic impairment", "drug interactions", "elderly"),
            range_lower=10,
            range_upper=20,
            units="mg/L",
        ),
        "lithium": TdmProfile(
            therapeutic_range="0.6-1.2 mEq/L",
            toxic_level=">1.5 mEq/L",
            half_life="24 hours",
            time_to_steady_state="5-7 days",
            monitoring_frequency="Weekly until stable",
            sample_type="trough",
            risk_factors=("renal impairment", "dehydration", "drug interactions"),
            range_lower=0.6,
            range_upper=1.2,
            units="mEq/L",
        ),
    }
)

# Chart band used when a drug has no profile.
DEFAULT_CHART_RANGE = (0.0, 100.0)

RENAL_STEADY_STATE_MULTIPLIERS: Mapping[str, float] = MappingProxyType(
    {"none": 1.0, "mild": 1.1, "moderate": 1.3, "severe": 1.6, "esrd": 2.0}
)

HEPATIC_STEADY_STATE_MULTIPLIERS: Mapping[str, float] = MappingProxyType(
    {"none": 1.0, "mild": 1.2, "moderate": 1.5, "severe": 2.0}
)

# First match on drug-name substring wins.
SPECIMEN_REQUIREMENTS: Tuple[SpecimenRequirement, ...] = (
    SpecimenRequirement(
        drugs=("vancomycin", "gentamicin", "tobramycin"),
        specimen_type="serum",
        volume_ml=2,
        collection_tube="Red top (serum separator tube)",
        special_handling=("Centrifuge within 2 hours", "Store at 2-8°C if not processed immediately"),
    ),
    SpecimenRequirement(
        drugs=("digoxin", "phenytoin", "lithium"),
        specimen_type="serum",
        volume_ml=3,
        collection_tube="Red top (serum separator tube)",
        special_handling=("Allow to clot for 30 minutes", "Centrifuge within 4 hours"),
    ),
)

DEFAULT_SPECIMEN = SpecimenRequirement(
    drugs=(),
    specimen_type="serum",
    volume_ml=2,
    collection_tube="Red top (serum separator tube)",
    special_handling=("Standard serum processing",),
)

# Matched by drug-name substring; every match applies.
DRUG_MONITORING: Mapping[str, DrugMonitoring] = MappingProxyType(
    {
        "vancomycin": DrugMonitoring(
            clinical=("Monitor for signs of nephrotoxicity", "Monitor for signs of ototoxicity"),
            laboratory=("Serum creatinine daily", "BUN daily"),
        ),
        "digoxin": DrugMonitoring(
            clinical=("Monitor heart rate and rhythm", "Monitor for signs of digoxin toxicity"),
            laboratory=("Serum potassium", "Serum magnesium"),
        ),
    }
)

TOXIC_LEVEL_MONITORING = DrugMonitoring(
    clinical=("Monitor vital signs closely", "Assess for signs of organ toxicity"),
    laboratory=("Comprehensive metabolic panel", "Liver function tests"),
)
