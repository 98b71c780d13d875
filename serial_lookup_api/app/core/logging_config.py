"""
Logging configuration for the lookup service.

``setup_logging`` attaches a console handler (and a file handler when
``LOG_FILE`` is set) to the root logger, aligns the uvicorn loggers with
``LOG_LEVEL`` and quiets the HTTP client libraries, whose per-request
chatter would otherwise drown the service's own messages at INFO.
Access-log rows go to the log spreadsheet, not here; this is the
operator channel where upstream faults and swallowed background
failures are reported.
"""

import logging
from pathlib import Path

from .config import Settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# Outbound calls to the CSV export, ip-api and the Sheets API.
CLIENT_LOGGERS = ("urllib3", "requests", "google.auth", "google.auth.transport")

logger = logging.getLogger(__name__)


def _attach_handlers(root: logging.Logger, level: int, logfile: str) -> None:
    root.setLevel(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def setup_logging(settings: Settings) -> None:
    """Configure logging from ``settings``.

    Handlers are only attached when the root logger has none yet, so a
    server or test harness that installed its own keeps them.  Logger
    levels are applied on every call.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        _attach_handlers(root, level, settings.log_file)

    for name in SERVER_LOGGERS:
        logging.getLogger(name).setLevel(level)
    client_level = level if level <= logging.DEBUG else logging.WARNING
    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)

    logger.info(
        "Logging at %s; data source=%s, identifier policy=%s, access log %s",
        logging.getLevelName(level),
        settings.data_source,
        settings.identifier_policy,
        "enabled" if settings.access_log_enabled else "disabled (LOG_SPREADSHEET_ID not set)",
    )
