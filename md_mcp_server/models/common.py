from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ISO-8601 timestamp; naive values are read as UTC so comparisons never mix
# aware and naive datetimes.
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
