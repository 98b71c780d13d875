"""Google Sheets values API client.

This module wraps the two operations the service needs from the
Sheets v4 REST API:

* :meth:`SheetsClient.get_values` – read a range as a list of rows.
* :meth:`SheetsClient.append_values` – append rows after the last row
  of a range.

Authentication uses a service account.  The credentials and the
authorised ``requests`` session are built afresh for every call, so no
token or connection outlives a single request.  Tests (or alternative
deployments) can pass their own ``session_factory`` returning any
``requests.Session`` compatible object.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account


logger = logging.getLogger(__name__)

SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)
SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"

SessionFactory = Callable[[], requests.Session]


class SheetsApiError(RuntimeError):
    """Raised when the Sheets API cannot be reached or rejects a call."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def load_credentials(
    service_account_json: str = "",
    service_account_file: str = "",
) -> service_account.Credentials:
    """Build service-account credentials from inline JSON or a key file.

    The inline JSON wins when both are given.  Raises
    :class:`SheetsApiError` when neither is configured or the key cannot
    be parsed.
    """
    try:
        if service_account_json:
            info = json.loads(service_account_json)
            return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
        if service_account_file:
            return service_account.Credentials.from_service_account_file(
                service_account_file, scopes=SHEETS_SCOPES
            )
    except (ValueError, OSError) as exc:
        raise SheetsApiError(f"Invalid service account credentials: {exc}") from exc
    raise SheetsApiError("No service account credentials configured")


def authorized_session_factory(service_account_json: str = "", service_account_file: str = "") -> SessionFactory:
    """Return a factory producing a freshly authenticated session per call."""

    def factory() -> requests.Session:
        credentials = load_credentials(service_account_json, service_account_file)
        return AuthorizedSession(credentials)

    return factory


class SheetsClient:
    """Minimal client for the Sheets values endpoints."""

    def __init__(
        self,
        *,
        session_factory: SessionFactory,
        timeout: float = 10,
        base_url: str = SHEETS_API_BASE,
    ) -> None:
        self.session_factory = session_factory
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def _values_url(self, spreadsheet_id: str, cell_range: str, suffix: str = "") -> str:
        return f"{self.base_url}/{spreadsheet_id}/values/{quote(cell_range, safe='!:')}{suffix}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Dict[str, Any]:
        session = self.session_factory()
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = session.request(method, url, params=params, json=json_body, timeout=self.timeout)
            response.raise_for_status()
            return response.json() if response.content else {}
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = (err_json.get("error") or {}).get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            raise SheetsApiError(message or str(exc), status_code=status) from exc
        except requests.RequestException as exc:
            raise SheetsApiError(str(exc)) from exc
        except ValueError as exc:
            raise SheetsApiError(f"Malformed response from Sheets API: {exc}") from exc
        finally:
            session.close()

    def get_values(self, spreadsheet_id: str, cell_range: str) -> List[List[str]]:
        """Return the rows of ``cell_range``; trailing empty cells are omitted by the API."""
        data = self._request("GET", self._values_url(spreadsheet_id, cell_range))
        return data.get("values") or []

    def append_values(self, spreadsheet_id: str, cell_range: str, rows: List[List[Any]]) -> Dict[str, Any]:
        """Append ``rows`` below the table found in ``cell_range``."""
        return self._request(
            "POST",
            self._values_url(spreadsheet_id, cell_range, ":append"),
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json_body={"values": rows},
        )
