"""
Main entrypoint for the Serial Lookup API.

This module assembles the FastAPI application: it sets up logging,
builds the lookup adapters from ``Settings``, registers the exception
handlers that render the ``{status, message}`` error bodies, allows
cross-origin calls and includes the router.  ``create_app`` accepts
prebuilt adapters so tests can run the full HTTP surface against fakes.
The module-level ``app`` is what uvicorn serves::

    uvicorn serial_lookup_api.app.main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from .api.router import router
from .core.config import Settings, settings as default_settings
from .core.errors import LookupServiceError, MissingSerialError
from .core.logging_config import setup_logging
from .services.access_log_service import LogWriter, SheetsLogWriter
from .services.data_source_service import CsvDataSource, DataSource, SheetsDataSource
from .services.geo_service import GeoResolver
from .services.identifier_service import build_decoder
from .services.lookup_service import LookupService
from ..sheets_client import SheetsClient, authorized_session_factory


logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def build_lookup_service(
    settings: Settings,
    *,
    data_source: Optional[DataSource] = None,
    geo_resolver: Optional[GeoResolver] = None,
    log_writer: Optional[LogWriter] = None,
) -> LookupService:
    """Build the ``LookupService`` described by ``settings``.

    Any adapter passed explicitly replaces the one the settings would
    produce.  The Sheets client is only constructed when a backend needs
    it; credentials are resolved lazily, on each call.
    """
    settings.validate()
    sheets_client: Optional[SheetsClient] = None

    def get_sheets_client() -> SheetsClient:
        nonlocal sheets_client
        if sheets_client is None:
            sheets_client = SheetsClient(
                session_factory=authorized_session_factory(
                    settings.google_service_account_json,
                    settings.google_service_account_file,
                ),
                timeout=settings.http_timeout,
            )
        return sheets_client

    if data_source is None:
        if settings.data_source == "sheets":
            if not settings.data_spreadsheet_id:
                logger.warning("DATA_SOURCE=sheets but DATA_SPREADSHEET_ID is empty; lookups will fail")
            data_source = SheetsDataSource(
                client=get_sheets_client(),
                spreadsheet_id=settings.data_spreadsheet_id,
                cell_range=settings.data_range,
            )
        else:
            if not settings.sheet_csv_url:
                logger.warning("DATA_SOURCE=csv but SHEET_CSV_URL is empty; lookups will fail")
            data_source = CsvDataSource(url=settings.sheet_csv_url, timeout=settings.http_timeout)

    if geo_resolver is None:
        geo_resolver = GeoResolver(url_template=settings.geo_lookup_url, timeout=settings.http_timeout)

    if log_writer is None and settings.access_log_enabled:
        log_writer = SheetsLogWriter(
            client=get_sheets_client(),
            spreadsheet_id=settings.log_spreadsheet_id,
            cell_range=settings.log_range,
        )

    return LookupService(
        data_source=data_source,
        decoder=build_decoder(settings.identifier_policy),
        geo_resolver=geo_resolver,
        log_writer=log_writer,
        tz_name=settings.log_timezone,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"status": ..., "message": ...}``."""

    @app.exception_handler(LookupServiceError)
    async def lookup_error_handler(request: Request, exc: LookupServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Lookup failed: %s", exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected malformed request body: %s", exc.errors())
        error = MissingSerialError()
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_payload())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = LookupServiceError()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.to_payload(),
            headers=CORS_HEADERS,
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    data_source: Optional[DataSource] = None,
    geo_resolver: Optional[GeoResolver] = None,
    log_writer: Optional[LogWriter] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use; defaults to the environment-derived
        ``settings`` singleton.
    data_source, geo_resolver, log_writer
        Optional adapters overriding those built from ``settings``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before building adapters so their warnings
    # are formatted consistently.
    setup_logging(settings)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.settings = settings
    app.state.lookup_service = build_lookup_service(
        settings,
        data_source=data_source,
        geo_resolver=geo_resolver,
        log_writer=log_writer,
    )

    @app.middleware("http")
    async def allow_any_origin(request: Request, call_next):
        # Preflight requests are answered here, before routing.
        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_204_NO_CONTENT)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    register_exception_handlers(app)
    app.include_router(router)
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
