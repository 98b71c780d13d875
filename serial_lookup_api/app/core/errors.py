"""
Error taxonomy for the lookup pipeline.

Only ``MissingSerialError``, ``SerialNotFoundError`` and
``UpstreamFetchError`` ever reach the HTTP caller; the exception
handlers in ``main`` turn them into ``{status, message}`` bodies.
``GeoLookupError`` and ``LogWriteError`` are raised by the telemetry
adapters and caught inside the access-log step, where they are only
logged.
"""

from typing import Optional


MISSING_SERIAL_MESSAGE = "Numéro de série manquant"
NOT_FOUND_MESSAGE = "Aucune date trouvée pour ce numéro de série"
SERVER_ERROR_MESSAGE = "Erreur serveur"


class LookupServiceError(Exception):
    """Base class for all errors raised by this service."""

    status_code: int = 500
    status_label: str = "Error"
    public_message: str = SERVER_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.public_message)

    def to_payload(self) -> dict:
        return {"status": self.status_label, "message": self.public_message}


class MissingSerialError(LookupServiceError):
    status_code = 400
    public_message = MISSING_SERIAL_MESSAGE


class SerialNotFoundError(LookupServiceError):
    status_code = 404
    status_label = "None"
    public_message = NOT_FOUND_MESSAGE

    def __init__(self, serial: str) -> None:
        super().__init__(f"No date found for serial {serial!r}")
        self.serial = serial


class UpstreamFetchError(LookupServiceError):
    """The data source could not be fetched or parsed."""


class GeoLookupError(LookupServiceError):
    """The geolocation service failed; never surfaced to the caller."""


class LogWriteError(LookupServiceError):
    """Appending to the access log failed; never surfaced to the caller."""
