from __future__ import annotations

from fastapi import APIRouter

from .health import router as health_router
from .overlay import router as overlay_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(overlay_router)
