"""
Lookup orchestration.

``LookupService`` holds the adapters the endpoint needs and exposes the
two halves of a request:

* :meth:`LookupService.find_date` runs on the response path.  It
  validates the serial and asks the data source for its date, raising
  ``MissingSerialError``, ``SerialNotFoundError`` or
  ``UpstreamFetchError``.
* :meth:`LookupService.record_access` runs as a background task after
  the response has been built.  It decodes the client identifier,
  localises the request time, resolves the client's location and
  appends a ``LogEntry``.  It never raises.

Adapters are passed in explicitly so that tests can substitute fakes
for the data source, geolocation service and log sheet.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from serial_lookup_api.app.core.errors import MissingSerialError, SerialNotFoundError, UpstreamFetchError
from serial_lookup_api.app.schemas.access_log import FAILURE_LABEL, SUCCESS_LABEL, LogEntry
from serial_lookup_api.app.services.clock_service import DEFAULT_TIMEZONE, to_local_fields
from serial_lookup_api.app.services.data_source_service import DataSource
from serial_lookup_api.app.services.geo_service import GeoResolver
from serial_lookup_api.app.services.identifier_service import IdentifierDecoder
from serial_lookup_api.app.services.access_log_service import LogWriter


logger = logging.getLogger(__name__)


class LookupService:
    """Serial lookup plus best-effort access logging."""

    def __init__(
        self,
        *,
        data_source: DataSource,
        decoder: IdentifierDecoder,
        geo_resolver: GeoResolver,
        log_writer: Optional[LogWriter] = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.data_source = data_source
        self.decoder = decoder
        self.geo_resolver = geo_resolver
        self.log_writer = log_writer
        self.tz_name = tz_name

    @property
    def access_log_enabled(self) -> bool:
        return self.log_writer is not None

    def find_date(self, serial: Optional[str]) -> str:
        """Return the date stored for ``serial``.

        The serial is trimmed before lookup; keys are otherwise compared
        exactly.  Any data source fault surfaces as ``UpstreamFetchError``.
        """
        serial = (serial or "").strip()
        if not serial:
            raise MissingSerialError()
        try:
            date = self.data_source.find_date(serial)
        except UpstreamFetchError:
            raise
        except Exception as exc:
            logger.exception("Data source failed while looking up %r", serial)
            raise UpstreamFetchError(f"Data source failed: {exc}") from exc
        if date is None:
            raise SerialNotFoundError(serial)
        return date

    def build_entry(
        self,
        *,
        serial: str,
        date: Optional[str],
        identifier: Optional[str],
        client_ip: Optional[str],
        requested_at: datetime,
    ) -> LogEntry:
        decoded = self.decoder.decode(identifier)
        local = to_local_fields(requested_at, self.tz_name)
        location = self.geo_resolver.resolve(client_ip)
        found = date is not None
        return LogEntry(
            year=local.year,
            month=local.month,
            day=local.day,
            local_time=local.time,
            user=decoded.user,
            machine=decoded.machine,
            copy_index=decoded.copy_index,
            client_ip=client_ip or "",
            country=location.country,
            city=location.city,
            serial=serial,
            result=date if found else FAILURE_LABEL,
            status=SUCCESS_LABEL if found else FAILURE_LABEL,
        )

    def record_access(
        self,
        *,
        serial: str,
        date: Optional[str],
        identifier: Optional[str],
        client_ip: Optional[str],
        requested_at: datetime,
    ) -> Optional[LogEntry]:
        """Append an access-log row; failures are logged and swallowed.

        Returns the appended entry, or ``None`` when logging is disabled
        or failed.
        """
        if self.log_writer is None:
            return None
        try:
            entry = self.build_entry(
                serial=serial,
                date=date,
                identifier=identifier,
                client_ip=client_ip,
                requested_at=requested_at,
            )
            self.log_writer.append(entry)
        except Exception:
            logger.exception("Access log for serial %r was not recorded", serial)
            return None
        return entry
