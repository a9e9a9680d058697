"""Allocation request/response schemas."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class AllocationRequest(BaseModel):
    drivers: List[Dict[str, Any]] = Field(default_factory=list, description="Driver rows keyed by column header.")
    deliveries: List[Dict[str, Any]] = Field(default_factory=list, description="Delivery rows keyed by column header.")


class AllocationSummaryModel(BaseModel):
    drivers: int
    deliveries: int
    routes: int
    assigned_deliveries: int
    unassigned_deliveries: int
    unassigned_drivers: int
    assigned_boxes: int
    unassigned_boxes: int


class AllocationResponse(BaseModel):
    summary: AllocationSummaryModel
    routes: List[Dict[str, Any]]
    metadata: dict = Field(default_factory=dict)
