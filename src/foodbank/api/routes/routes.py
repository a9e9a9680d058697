"""Allocation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import AllocationRequest, AllocationResponse
from ...services.locking import LockUnavailableError
from ...services.routing.service import allocate_payload, run_allocation

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/allocate", response_model=AllocationResponse, status_code=status.HTTP_200_OK)
def allocate(payload: AllocationRequest) -> AllocationResponse:
    """Allocate the posted driver and delivery rows without touching the workbook."""
    try:
        return allocate_payload(payload.drivers, payload.deliveries)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/run", response_model=AllocationResponse, status_code=status.HTTP_200_OK)
def run() -> AllocationResponse:
    """Allocate from the shared workbook and replace its routes sheet."""
    try:
        return run_allocation()
    except LockUnavailableError:
        raise
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error running allocation: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to run allocation: {str(exc)}"
        ) from exc
