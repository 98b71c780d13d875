"""Conversion of request instants into the access log's local calendar fields."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


DEFAULT_TIMEZONE = "Europe/Paris"


@dataclass(frozen=True)
class LocalTimestamp:
    year: int
    month: int
    day: int
    time: str


def to_local_fields(instant: datetime, tz_name: str = DEFAULT_TIMEZONE) -> LocalTimestamp:
    """Express ``instant`` in ``tz_name`` as year, month, day and ``H:MM``.

    Naive datetimes are taken to be UTC.  Daylight saving transitions
    come from the zoneinfo database.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(ZoneInfo(tz_name))
    return LocalTimestamp(
        year=local.year,
        month=local.month,
        day=local.day,
        time=f"{local.hour}:{local.minute:02d}",
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
