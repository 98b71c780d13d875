"""
Pydantic schema for one access-log row.

A ``LogEntry`` is built once per lookup and appended to the log sheet.
Column order in the sheet follows the field order below; ``to_row``
is the single place that order is defined.
"""

from typing import List, Union

from pydantic import BaseModel


SUCCESS_LABEL = "Succès"
FAILURE_LABEL = "Échec"


class LogEntry(BaseModel):
    """Schema for an appended access-log row."""

    year: int
    month: int
    day: int
    local_time: str
    user: str
    machine: str
    copy_index: int
    client_ip: str
    country: str
    city: str
    serial: str
    result: str
    status: str

    model_config = {"frozen": True}

    def to_row(self) -> List[Union[int, str]]:
        return [getattr(self, column) for column in type(self).model_fields]
