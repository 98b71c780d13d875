"""
Serial lookup endpoint.

``POST /api/getDate`` answers with the date stored for a serial:

* 200 ``{"status": "Success", "date": ...}`` when the serial is known;
* 404 ``{"status": "None", "message": ...}`` when it is not;
* 400 / 500 ``{"status": "Error", "message": ...}`` for a missing serial
  or an unavailable data source (raised here, rendered by the handlers
  registered in ``main``).

Found and not-found lookups both schedule an access-log row as a
background task.  The task runs after the response is sent and cannot
alter it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from serial_lookup_api.app.core.errors import SerialNotFoundError
from serial_lookup_api.app.schemas.lookup import DateFound, GetDateRequest, StatusMessage
from serial_lookup_api.app.services.clock_service import utc_now
from serial_lookup_api.app.services.lookup_service import LookupService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_lookup_service(request: Request) -> LookupService:
    """Return the service instance assembled by ``create_app``."""
    return request.app.state.lookup_service


def client_ip(request: Request) -> str:
    """Best guess at the caller's address.

    Behind a proxy or serverless front end the socket peer is the proxy,
    so the first ``X-Forwarded-For`` hop takes precedence.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else ""


@router.post(
    "/getDate",
    response_model=DateFound,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": StatusMessage},
        status.HTTP_404_NOT_FOUND: {"model": StatusMessage},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": StatusMessage},
    },
)
def get_date(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: Optional[GetDateRequest] = Body(None),
    service: LookupService = Depends(get_lookup_service),
):
    """Look up the date associated with ``payload.serial``."""
    requested_at = utc_now()
    payload = payload or GetDateRequest()
    date: Optional[str]
    # MissingSerialError and UpstreamFetchError escape here, before any
    # access-log task is scheduled.
    try:
        date = service.find_date(payload.serial)
    except SerialNotFoundError as exc:
        logger.info("%s", exc)
        date = None
        response = JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    else:
        response = JSONResponse(content=DateFound(date=date).model_dump())

    if service.access_log_enabled:
        background_tasks.add_task(
            service.record_access,
            serial=payload.serial.strip(),
            date=date,
            identifier=payload.uuid,
            client_ip=client_ip(request),
            requested_at=requested_at,
        )
    response.background = background_tasks
    return response
