"""Serializers for allocation outputs."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from ...persistence.workbook import records_to_csv
from ..routing.models import UNASSIGNED_DRIVER, AllocationResult, Route

ROUTE_COLUMNS = (
    ("Route", "route"),
    ("Driver", "driver_name"),
    ("Email", "driver_email"),
    ("Capacity", "capacity"),
    ("Remaining", "remaining_capacity"),
    ("Client", "client_name"),
    ("Address", "address"),
    ("Phone", "phone"),
    ("Boxes", "quantity"),
    ("Order", "order"),
    ("Notes", "notes"),
)

UNASSIGNED_DELIVERY_FIELDS = {"route", "client_name", "address", "quantity", "notes"}
UNASSIGNED_DRIVER_FIELDS = {"route", "driver_name", "driver_email", "capacity", "remaining_capacity"}


def route_to_record(route: Route) -> dict[str, Any]:
    """Flatten a route row into a sheet record keyed by column header."""
    if route.is_assigned:
        fields = None
    elif route.route == UNASSIGNED_DRIVER:
        fields = UNASSIGNED_DRIVER_FIELDS
    else:
        fields = UNASSIGNED_DELIVERY_FIELDS

    record: dict[str, Any] = {}
    for column, attribute in ROUTE_COLUMNS:
        if fields is not None and attribute not in fields:
            continue
        record[column] = getattr(route, attribute)
    return record


def allocation_result_to_records(result: AllocationResult) -> list[dict[str, Any]]:
    return [route_to_record(route) for route in result.routes]


def allocation_result_to_json(result: AllocationResult) -> dict:
    return {
        "summary": asdict(result.summary),
        "routes": allocation_result_to_records(result),
    }


def allocation_result_to_csv(result: AllocationResult) -> str:
    return records_to_csv(allocation_result_to_records(result))
