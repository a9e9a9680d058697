"""Allocation orchestration service."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Mapping, Sequence

from ...config import settings
from ...data.records_repository import load_deliveries, load_drivers, read_sheet_records
from ...persistence.filesystem import FileStorage
from ...persistence.workbook import write_sheet_records
from ...schemas.routing import AllocationResponse, AllocationSummaryModel
from ..locking import LockUnavailableError, RunLock
from ..outputs.routing_formatter import (
    allocation_result_to_csv,
    allocation_result_to_json,
    allocation_result_to_records,
)
from .allocator import allocate
from .models import AllocationResult

logger = logging.getLogger(__name__)


def _to_response(result: AllocationResult, metadata: dict | None = None) -> AllocationResponse:
    return AllocationResponse(
        summary=AllocationSummaryModel(**asdict(result.summary)),
        routes=allocation_result_to_records(result),
        metadata=metadata or {},
    )


def allocate_records(
    driver_records: Sequence[Mapping[str, Any]],
    delivery_records: Sequence[Mapping[str, Any]],
) -> AllocationResult:
    """Convert raw rows and allocate them. No lock and no I/O."""
    drivers = load_drivers(driver_records)
    deliveries = load_deliveries(delivery_records)
    return allocate(drivers, deliveries, max_deliveries=settings.max_deliveries_per_route)


def allocate_payload(driver_records: Sequence[Mapping[str, Any]], delivery_records: Sequence[Mapping[str, Any]]) -> AllocationResponse:
    return _to_response(allocate_records(driver_records, delivery_records))


def _persist_run(storage: FileStorage, result: AllocationResult) -> Path:
    run_dir = storage.make_run_directory(prefix="allocation")
    storage.write_json(run_dir / "summary.json", allocation_result_to_json(result))
    storage.write_csv(run_dir / "routes.csv", allocation_result_to_csv(result))
    return run_dir


def run_allocation(
    workbook: Path | None = None,
    *,
    lock: RunLock | None = None,
    storage: FileStorage | None = None,
    persist: bool | None = None,
) -> AllocationResponse:
    """Read drivers and deliveries from the workbook, allocate, and write the routes sheet.

    The run lock is held from the first read until the routes sheet is written.
    If it cannot be acquired the run is abandoned with ``LockUnavailableError``
    and nothing is read or written. Only .xlsx workbooks are accepted.
    """
    workbook_path = workbook or settings.workbook_file
    if workbook_path.suffix.lower() != ".xlsx":
        # Drivers, deliveries and routes live on separate sheets; a flat file cannot hold them.
        raise ValueError(f"Allocation runs need an .xlsx workbook with separate sheets, got '{workbook_path.name}'.")
    run_lock = lock or RunLock()
    if not run_lock.try_acquire():
        raise LockUnavailableError("Another allocation run is in progress. Try again once it finishes.")

    try:
        logger.info(f"Starting allocation run against {workbook_path}")
        driver_records = read_sheet_records(workbook_path, settings.drivers_sheet)
        delivery_records = read_sheet_records(workbook_path, settings.deliveries_sheet)
        result = allocate_records(driver_records, delivery_records)

        records = allocation_result_to_records(result)
        write_sheet_records(workbook_path, settings.routes_sheet, records)

        summary = result.summary
        logger.info(
            f"Allocation finished: {summary.routes} routes, {summary.assigned_deliveries} assigned, "
            f"{summary.unassigned_deliveries} unassigned deliveries, {summary.unassigned_drivers} idle drivers"
        )

        metadata: dict[str, Any] = {"workbook": str(workbook_path), "routes_sheet": settings.routes_sheet}
        should_persist = settings.persist_outputs if persist is None else persist
        if should_persist:
            run_dir = _persist_run(storage or FileStorage(), result)
            metadata["run_directory"] = str(run_dir)
    finally:
        run_lock.release()

    return _to_response(result, metadata)
