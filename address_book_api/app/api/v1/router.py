"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified prefix.
When new endpoints are added, update this file to include their
routers.
"""

from fastapi import APIRouter

from .endpoints import addresses, audit

router = APIRouter()

router.include_router(addresses.router, prefix="/address", tags=["Address Book"])
router.include_router(audit.router, prefix="/audit", tags=["audit"])
