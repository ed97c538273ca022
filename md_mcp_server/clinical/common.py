from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")
_AMOUNT_AND_UNIT = re.compile(r"(\d+(?:\.\d+)?)\s*([^\d\s]\S*)?")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str, now: Optional[datetime] = None) -> str:
    """Build an identifier like `bpmh_1718000000000_3f2a9c1de`."""
    millis = int((now or utc_now()).timestamp() * 1000)
    return f"{prefix}_{millis}_{uuid.uuid4().hex[:9]}"


def iso(value: datetime) -> str:
    return value.isoformat()


def format_number(value: float) -> str:
    """Render a number with at most two decimals and no trailing zeros."""
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def parse_leading_number(text: str) -> Optional[float]:
    match = _LEADING_NUMBER.match(text or "")
    return float(match.group(1)) if match else None


def parse_amount(text: str, default_unit: str = "mg") -> Optional[Tuple[float, str]]:
    """
    Split a dose string such as "1000 mg" or "2.5mL" into amount and unit.

    Returns None when the string carries no number.
    """
    match = _AMOUNT_AND_UNIT.search(text or "")
    if not match:
        return None
    return float(match.group(1)), match.group(2) or default_unit


def normalize_key(text: str) -> str:
    return "_".join((text or "").lower().split())
