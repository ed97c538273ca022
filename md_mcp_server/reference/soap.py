"""Static tables for SOAP documentation: red-flag symptoms and coding suggestions."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

CONCERNING_SYMPTOMS: Tuple[str, ...] = (
    "chest pain",
    "shortness of breath",
    "severe headache",
    "loss of consciousness",
    "severe abdominal pain",
    "rectal bleeding",
    "severe weakness",
    "confusion",
)

REVIEW_OF_SYSTEMS: Tuple[str, ...] = (
    "constitutional",
    "cardiovascular",
    "respiratory",
    "gastrointestinal",
    "genitourinary",
    "musculoskeletal",
    "neurological",
    "psychiatric",
    "endocrine",
    "skin",
    "other",
)

FUNCTIONAL_DECLINE_WORDS: Tuple[str, ...] = ("decline", "worse", "unable")

ICD10_BY_ENCOUNTER: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "office": ("Z00.00", "Z00.01"),
        "hospital": ("Z51.11", "Z51.12"),
        "emergency": ("Z00.00",),
        "telehealth": ("Z03.89",),
    }
)

# (minimum minutes, code), checked top to bottom.
CPT_BY_TIME: Tuple[Tuple[int, str], ...] = (
    (60, "99215"),
    (30, "99214"),
    (15, "99213"),
    (0, "99212"),
)

CPT_BY_COMPLEXITY: Mapping[str, str] = MappingProxyType({"high": "99291", "moderate": "99285"})

CPT_BY_ENCOUNTER: Mapping[str, str] = MappingProxyType({"telehealth": "99444", "emergency": "99281"})

# Normal bands used when trending vitals against a previous set.
VITAL_TREND_BANDS: Mapping[str, Tuple[float, float]] = MappingProxyType(
    {
        "heart_rate": (60, 100),
        "respiratory_rate": (12, 20),
        "oxygen_saturation": (95, 100),
    }
)
