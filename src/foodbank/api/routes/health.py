"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...services.locking import default_lock_path

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/workbook", status_code=status.HTTP_200_OK)
def health_workbook() -> dict:
    """Report whether the shared workbook is reachable and whether a run holds the lock."""
    return {
        "workbook": str(settings.workbook_file),
        "exists": settings.workbook_file.exists(),
        "locked": default_lock_path().exists(),
    }
