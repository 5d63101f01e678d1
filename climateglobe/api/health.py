from __future__ import annotations

from fastapi import APIRouter

from climateglobe.core.settings import settings

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"ok": True, "algo_version": settings.algo_version}
