"""Data access helpers for loading driver and delivery rows from the shared workbook."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from openpyxl import load_workbook

from ..models.domain import Delivery, Driver

DRIVER_NAME_COLUMNS = ("Name", "Driver")
DRIVER_EMAIL_COLUMNS = ("Email",)
DRIVER_CAPACITY_COLUMNS = ("Capacity", "Boxes", "Box Capacity")

DELIVERY_CLIENT_COLUMNS = ("Client", "Client Name", "Name")
DELIVERY_ADDRESS_COLUMNS = ("Address",)
DELIVERY_PHONE_COLUMNS = ("Phone",)
DELIVERY_QUANTITY_COLUMNS = ("Quantity", "Boxes", "Qty")
DELIVERY_ORDER_COLUMNS = ("Order",)
DELIVERY_NOTES_COLUMNS = ("Notes",)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _rows_to_records(header: Iterable[Any], rows: Iterable[Iterable[Any]]) -> list[dict[str, Any]]:
    columns = [(idx, str(name).strip()) for idx, name in enumerate(header) if not _is_blank(name)]
    records: list[dict[str, Any]] = []
    for row in rows:
        values = list(row)
        if all(_is_blank(value) for value in values):
            continue  # ignore fully blank rows
        record: dict[str, Any] = {}
        for idx, name in columns:
            record[name] = _clean(values[idx]) if idx < len(values) else None
        records.append(record)
    return records


def _read_csv_records(path: Path) -> list[dict[str, Any]]:
    with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle)
        header = next(reader, None)
        if header is None:
            raise ValueError(f"File '{path}' is missing a header row.")
        return _rows_to_records(header, reader)


def _read_workbook_records(path: Path, sheet: str) -> list[dict[str, Any]]:
    wb = load_workbook(path, data_only=True, read_only=True)
    try:
        if sheet not in wb.sheetnames:
            raise ValueError(f"Workbook '{path}' has no sheet named '{sheet}'.")
        rows = wb[sheet].iter_rows(min_row=1, values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        return _rows_to_records(header, rows)
    finally:
        wb.close()


def read_sheet_records(path: Path, sheet: str) -> list[dict[str, Any]]:
    """Read one sheet (or a CSV file) into a list of column-name -> value records."""
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    if path.suffix.lower() == ".csv":
        return _read_csv_records(path)
    return _read_workbook_records(path, sheet)


def _lookup(record: Mapping[str, Any], candidates: tuple[str, ...]) -> Any:
    normalized = {str(key).strip().lower(): value for key, value in record.items()}
    for name in candidates:
        value = normalized.get(name.lower())
        if not _is_blank(value):
            return value
    return None


def _text(record: Mapping[str, Any], candidates: tuple[str, ...]) -> str:
    value = _lookup(record, candidates)
    return "" if value is None else str(value).strip()


def _parse_count(value: Any, column: str) -> int | float:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).replace(",", "").strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Unable to parse {column} from value '{value}'") from exc


def _coerce_count(value: Any, column: str) -> int:
    if _is_blank(value):
        return 0
    number = _parse_count(value, column)
    if number < 0 or (isinstance(number, float) and not number.is_integer()):
        raise ValueError(f"{column} must be a non-negative whole number, got '{value}'")
    return int(number)


def driver_from_record(record: Mapping[str, Any]) -> Optional[Driver]:
    name = _text(record, DRIVER_NAME_COLUMNS)
    if not name:
        return None
    return Driver(
        name=name,
        email=_text(record, DRIVER_EMAIL_COLUMNS),
        capacity=_coerce_count(_lookup(record, DRIVER_CAPACITY_COLUMNS), "Capacity"),
        raw=dict(record),
    )


def delivery_from_record(record: Mapping[str, Any]) -> Optional[Delivery]:
    address = _text(record, DELIVERY_ADDRESS_COLUMNS)
    if not address:
        return None
    return Delivery(
        client_name=_text(record, DELIVERY_CLIENT_COLUMNS),
        address=address,
        phone=_text(record, DELIVERY_PHONE_COLUMNS),
        quantity=_coerce_count(_lookup(record, DELIVERY_QUANTITY_COLUMNS), "Quantity"),
        order=_lookup(record, DELIVERY_ORDER_COLUMNS),
        notes=_text(record, DELIVERY_NOTES_COLUMNS),
        raw=dict(record),
    )


def load_drivers(records: Iterable[Mapping[str, Any]]) -> list[Driver]:
    """Convert driver records, skipping rows without a name."""
    drivers: list[Driver] = []
    for record in records:
        driver = driver_from_record(record)
        if driver is not None:
            drivers.append(driver)
    return drivers


def load_deliveries(records: Iterable[Mapping[str, Any]]) -> list[Delivery]:
    """Convert delivery records, skipping rows without an address."""
    deliveries: list[Delivery] = []
    for record in records:
        delivery = delivery_from_record(record)
        if delivery is not None:
            deliveries.append(delivery)
    return deliveries
