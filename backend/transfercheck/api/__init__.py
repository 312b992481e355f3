# backend/transfercheck/api/__init__.py
from __future__ import annotations

"""
API router aggregation.

This module exposes a single `api_router` that the FastAPI app
can include with a prefix such as `/api`.
"""

from fastapi import APIRouter

from . import health_check, waitlist

api_router = APIRouter()
api_router.include_router(health_check.router)
api_router.include_router(waitlist.router)
