"""
Pydantic schemas for the serial lookup endpoint.

``serial`` is declared optional so that a missing field reaches the
handler and is answered with the service's own 400 body instead of
FastAPI's default 422 validation payload.  Spreadsheet serials are often
purely numeric, and clients then send them as JSON numbers; those are
accepted and looked up by their decimal text.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class GetDateRequest(BaseModel):
    """Body of ``POST /api/getDate``."""

    serial: Optional[str] = Field(None, description="Serial number to look up")
    uuid: Optional[str] = Field(
        None,
        description="Client identifier, e.g. ``User-Alice-Machine-PC7-Copy-3``",
    )

    @field_validator("serial", mode="before")
    @classmethod
    def stringify_numeric_serial(cls, v: Any) -> Any:
        # bool is an int subclass but ``true`` is not a serial.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class DateFound(BaseModel):
    status: str = "Success"
    date: str


class StatusMessage(BaseModel):
    """Error, not-found and liveness bodies."""

    status: str
    message: str


class Banner(BaseModel):
    message: str
