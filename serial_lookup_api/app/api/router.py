"""
Top-level router.

Aggregates the liveness routes (``/`` and ``/api``) and the lookup
route, which lives under ``/api``.
"""

from fastapi import APIRouter

from .endpoints import info, lookup

router = APIRouter()

router.include_router(info.router, tags=["info"])
router.include_router(lookup.router, prefix="/api", tags=["lookup"])
