from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC; convert aware input before it reaches the ORM"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(naive_utc)]
