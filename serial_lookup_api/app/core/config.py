"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts in a local shell; in a deployment you override them via
the platform's environment (spreadsheet identifiers, credentials,
listening port).
"""

import os
from dataclasses import dataclass


DATA_SOURCES = {"csv", "sheets"}
IDENTIFIER_POLICIES = {"anchor", "position"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Serial Lookup API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    # Which backend serves the serial -> date mapping: ``csv`` reads the
    # published CSV export at ``sheet_csv_url``, ``sheets`` reads
    # ``data_range`` of ``data_spreadsheet_id`` through the values API.
    data_source: str = os.getenv("DATA_SOURCE", "csv").lower()
    sheet_csv_url: str = os.getenv("SHEET_CSV_URL", "")
    data_spreadsheet_id: str = os.getenv("DATA_SPREADSHEET_ID", "")
    data_range: str = os.getenv("DATA_RANGE", "A:B")

    # Access log sheet.  Leave ``log_spreadsheet_id`` empty to disable
    # access logging entirely.
    log_spreadsheet_id: str = os.getenv("LOG_SPREADSHEET_ID", "")
    log_range: str = os.getenv("LOG_RANGE", "A:M")
    log_timezone: str = os.getenv("LOG_TIMEZONE", "Europe/Paris")

    # Service account credentials, either the JSON document itself or a
    # path to it.  The inline form wins when both are set.
    google_service_account_json: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "")
    google_service_account_file: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", "")

    geo_lookup_url: str = os.getenv("GEO_LOOKUP_URL", "http://ip-api.com/json/{ip}")
    identifier_policy: str = os.getenv("IDENTIFIER_POLICY", "anchor").lower()

    # Upper bound, in seconds, for every outbound HTTP call.
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "10"))

    def validate(self) -> None:
        """Raise ``ValueError`` if an enumerated setting has an unknown value."""
        if self.data_source not in DATA_SOURCES:
            raise ValueError(
                f"DATA_SOURCE must be one of {sorted(DATA_SOURCES)}, got {self.data_source!r}"
            )
        if self.identifier_policy not in IDENTIFIER_POLICIES:
            raise ValueError(
                f"IDENTIFIER_POLICY must be one of {sorted(IDENTIFIER_POLICIES)}, "
                f"got {self.identifier_policy!r}"
            )

    @property
    def access_log_enabled(self) -> bool:
        return bool(self.log_spreadsheet_id)


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
