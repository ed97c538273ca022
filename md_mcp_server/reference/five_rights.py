"""Tables backing the five-rights administration checks."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# (frequency fragments, minimum minutes between doses). First match wins, so
# "twice daily" must sit above "daily".
DOSING_INTERVALS: Tuple[Tuple[Tuple[str, ...], int], ...] = (
    (("every 4 hours", "q4h"), 240),
    (("every 6 hours", "q6h"), 360),
    (("every 8 hours", "q8h"), 480),
    (("every 12 hours", "q12h"), 720),
    (("twice daily", "bid"), 720),
    (("daily", "qd"), 1440),
)

DEFAULT_DOSING_INTERVAL = 240

TIME_CRITICAL_TOLERANCE_MINUTES = 30
ROUTINE_TOLERANCE_MINUTES = 60

# None means any ordered route is acceptable for the formulation.
FORMULATION_ROUTES: Mapping[str, Optional[Tuple[str, ...]]] = MappingProxyType(
    {
        "tablet": ("oral",),
        "capsule": ("oral",),
        "liquid": ("oral", "IV", "IM", "SC"),
        "injection": ("IV", "IM", "SC"),
        "cream": ("topical",),
        "patch": ("transdermal",),
    }
)

DOSE_TOLERANCE = 0.01
MIN_DOSE = 0.1
MAX_DOSE = 1000
PEDIATRIC_AGE = 18
PEDIATRIC_MAX_DOSE = 100
HIGH_ALERT_AMOUNT = 100
HIGH_ALERT_AGE = 75
MIN_MEASURABLE_AMOUNT = 0.001
MIN_MEASURABLE_VOLUME_ML = 0.1

RENAL_DOSE_FACTOR = 0.5
HEPATIC_DOSE_FACTOR = 0.75
