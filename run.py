"""Entry point for the Serial Lookup API.

Starts the FastAPI application under Uvicorn.  It is intended to be
executed from the project root, for example in a container or on a
hosting platform where you only specify a single Python file to run.

Configuration such as SHEET_CSV_URL, LOG_SPREADSHEET_ID, service
account credentials and the listening port is read from environment
variables; see ``serial_lookup_api/app/core/config.py`` for the full
list.

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from serial_lookup_api.app.core.config import settings
from serial_lookup_api.app.main import app


async def main() -> None:
    """Serve the API on ``settings.host``/``settings.port``."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    # Uvicorn reports the bound address itself once the socket is open.
    await Server(config).serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
