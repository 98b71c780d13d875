"""
Serial -> date data sources.

Two backends share the ``find_date(serial)`` interface and are chosen
with the ``DATA_SOURCE`` setting:

``CsvDataSource``
    Downloads the spreadsheet's published CSV export and builds a
    ``{serial: date}`` mapping from columns 0 and 1.

``SheetsDataSource``
    Reads a fixed range through the Sheets values API and scans the rows
    for an exact match.

Both re-read the source on every call; nothing is cached between
requests.  Cells are trimmed, and rows whose serial or date is blank
are ignored.  Any failure to fetch or parse the source is raised as
``UpstreamFetchError``.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import requests

from serial_lookup_api.app.core.errors import UpstreamFetchError
from serial_lookup_api.sheets_client import SheetsApiError, SheetsClient


logger = logging.getLogger(__name__)


class DataSource(Protocol):
    def find_date(self, serial: str) -> Optional[str]:
        ...


def _clean_rows(rows: Iterable[Sequence[str]]) -> Iterable[Tuple[str, str]]:
    """Yield trimmed ``(serial, date)`` pairs, skipping short or blank rows."""
    for row in rows:
        if len(row) < 2:
            continue
        serial = str(row[0]).strip()
        date = str(row[1]).strip()
        if not serial or not date:
            continue
        yield serial, date


def parse_csv_mapping(text: str) -> Dict[str, str]:
    """Build the serial -> date mapping from a CSV export.

    Later rows override earlier rows with the same serial.
    """
    text = text.lstrip("\ufeff")
    try:
        rows: List[List[str]] = list(csv.reader(io.StringIO(text)))
    except csv.Error as exc:
        raise UpstreamFetchError(f"Unreadable CSV export: {exc}") from exc
    return dict(_clean_rows(rows))


class CsvDataSource:
    """Data source backed by a published CSV export."""

    def __init__(
        self,
        *,
        url: str,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_mapping(self) -> Dict[str, str]:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Failed to download CSV export %s: %s", self.url, exc)
            raise UpstreamFetchError(f"CSV export unavailable: {exc}") from exc
        # The export is UTF-8 but served as bare ``text/csv``, which
        # requests would otherwise decode as ISO-8859-1.  utf-8-sig also
        # drops a leading byte order mark.
        response.encoding = "utf-8-sig"
        return parse_csv_mapping(response.text)

    def find_date(self, serial: str) -> Optional[str]:
        return self.fetch_mapping().get(serial)


class SheetsDataSource:
    """Data source backed by a range of a spreadsheet read through the API."""

    def __init__(self, *, client: SheetsClient, spreadsheet_id: str, cell_range: str = "A:B") -> None:
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self.cell_range = cell_range

    def fetch_rows(self) -> List[List[str]]:
        try:
            return self.client.get_values(self.spreadsheet_id, self.cell_range)
        except SheetsApiError as exc:
            logger.error("Failed to read %s of spreadsheet %s: %s", self.cell_range, self.spreadsheet_id, exc)
            raise UpstreamFetchError(f"Spreadsheet unavailable: {exc}") from exc

    def find_date(self, serial: str) -> Optional[str]:
        for row_serial, date in _clean_rows(self.fetch_rows()):
            if row_serial == serial:
                return date
        return None
