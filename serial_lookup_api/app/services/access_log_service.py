"""
Access log writer.

``SheetsLogWriter.append`` adds one ``LogEntry`` as a row of the log
spreadsheet.  It is only ever called from the background access-log
step, which catches the ``LogWriteError`` it raises; a failing log
sheet therefore never changes a lookup response.
"""

from __future__ import annotations

import logging
from typing import Protocol

from serial_lookup_api.app.core.errors import LogWriteError
from serial_lookup_api.app.schemas.access_log import LogEntry
from serial_lookup_api.sheets_client import SheetsApiError, SheetsClient


logger = logging.getLogger(__name__)


class LogWriter(Protocol):
    def append(self, entry: LogEntry) -> None:
        ...


class SheetsLogWriter:
    """Append access-log rows to a spreadsheet range."""

    def __init__(self, *, client: SheetsClient, spreadsheet_id: str, cell_range: str = "A:M") -> None:
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self.cell_range = cell_range

    def append(self, entry: LogEntry) -> None:
        try:
            self.client.append_values(self.spreadsheet_id, self.cell_range, [entry.to_row()])
        except SheetsApiError as exc:
            raise LogWriteError(f"Could not append access log row for {entry.serial!r}: {exc}") from exc
        logger.debug("Appended access log row for serial %s", entry.serial)
