"""
Top‑level router for version 1 of the API.

Aggregates the domain routers under a unified prefix.  When new domains
are introduced, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import auth, meets

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(meets.router, prefix="/meets", tags=["meets"])
