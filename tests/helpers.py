"""Test doubles shared across modules."""

import json
from typing import Dict, List, Optional

import requests

from serial_lookup_api.app.core.errors import LogWriteError
from serial_lookup_api.app.schemas.access_log import LogEntry
from serial_lookup_api.app.services.geo_service import GeoLocation


def make_response(status_code: int = 200, *, json_body=None, text: str = "", url: str = "http://test") -> requests.Response:
    """Build a real ``requests.Response`` carrying the given body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = text.encode("utf-8")
    return response


class StubSession:
    """Stand-in for ``requests.Session`` returning canned responses in order."""

    def __init__(self, responses: Optional[List[requests.Response]] = None, error: Optional[Exception] = None) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[tuple] = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def close(self) -> None:
        self.closed = True


class FakeDataSource:
    def __init__(self, mapping: Optional[Dict[str, str]] = None, error: Optional[Exception] = None) -> None:
        self.mapping = dict(mapping or {})
        self.error = error
        self.calls: List[str] = []

    def find_date(self, serial: str) -> Optional[str]:
        self.calls.append(serial)
        if self.error is not None:
            raise self.error
        return self.mapping.get(serial)


class FakeGeoResolver:
    def __init__(self, location: GeoLocation = GeoLocation(country="France", city="Lyon")) -> None:
        self.location = location
        self.calls: List[Optional[str]] = []

    def resolve(self, ip: Optional[str]) -> GeoLocation:
        self.calls.append(ip)
        return self.location


class RecordingLogWriter:
    """In-memory log table; ``rows`` is what a re-read of the sheet would return."""

    def __init__(self) -> None:
        self.entries: List[LogEntry] = []
        self.rows: List[list] = []

    def append(self, entry: LogEntry) -> None:
        self.entries.append(entry)
        self.rows.append(entry.to_row())


class FailingLogWriter:
    def __init__(self) -> None:
        self.attempts = 0

    def append(self, entry: LogEntry) -> None:
        self.attempts += 1
        raise LogWriteError("log sheet unavailable")
