"""
Liveness endpoints.

Both ``/`` and ``/api`` return a fixed banner so that deployments and
uptime checks can tell the service is answering.
"""

from fastapi import APIRouter

from serial_lookup_api.app.schemas.lookup import Banner

router = APIRouter()

BANNER = "L'API fonctionne correctement"


@router.get("/", response_model=Banner)
@router.get("/api", response_model=Banner)
async def banner() -> Banner:
    return Banner(message=BANNER)
