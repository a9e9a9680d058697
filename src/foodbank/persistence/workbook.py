"""Write record sequences back to the shared workbook (or a CSV file)."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from openpyxl import Workbook, load_workbook


def collect_headers(records: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of record keys in first-seen order."""
    headers: dict[str, None] = {}
    for record in records:
        for key in record:
            headers.setdefault(key, None)
    return list(headers)


def _row_values(record: Mapping[str, Any], headers: Sequence[str], blank: Any = "") -> list[Any]:
    values = []
    for name in headers:
        value = record.get(name)
        values.append(blank if value is None else value)
    return values


def records_to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    buffer = io.StringIO()
    headers = collect_headers(records)
    writer = csv.writer(buffer)
    if headers:
        writer.writerow(headers)
    for record in records:
        writer.writerow(_row_values(record, headers))
    return buffer.getvalue()


def write_sheet_records(path: Path, sheet: str, records: Sequence[Mapping[str, Any]]) -> None:
    """Replace ``sheet`` in the workbook at ``path`` with ``records``.

    Other sheets are left untouched. A missing workbook is created. CSV
    destinations are rewritten wholesale and ``sheet`` is ignored.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(records_to_csv(records))
        return

    if path.exists():
        wb = load_workbook(path)
    else:
        wb = Workbook()
        wb.remove(wb.active)

    index = None
    if sheet in wb.sheetnames:
        index = wb.sheetnames.index(sheet)
        wb.remove(wb[sheet])
    worksheet = wb.create_sheet(title=sheet, index=index)

    headers = collect_headers(records)
    if headers:
        worksheet.append(headers)
    for record in records:
        worksheet.append(_row_values(record, headers, blank=None))
    wb.save(path)
