"""CSV export of the employee table."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from pydantic import BaseModel

from hris.models.employee import EmployeeRecord
from hris.services.formatting import format_date_for_file

CSV_HEADERS = [
    "Employee ID",
    "Full Name",
    "Email",
    "Phone",
    "NIK",
    "Gender",
    "Birth Date",
    "Department",
    "Position",
    "Shift",
    "Join Date",
    "Status",
]


class ExportFile(BaseModel):
    filename: str
    content: str
    row_count: int
    media_type: str = "text/csv; charset=utf-8"


def _row(record: EmployeeRecord) -> list[str]:
    return [
        record.employee_id or "",
        record.full_name or "",
        record.email or "",
        record.phone or "",
        record.nik or "",
        record.gender or "",
        record.birth_date or "",
        record.department.name if record.department else "",
        record.position.name if record.position else "",
        record.shift.name if record.shift else "",
        record.join_date or "",
        record.employment_status or "",
    ]


def build_csv(records: Iterable[EmployeeRecord]) -> str:
    """Header row as-is, then every field quoted with embedded quotes doubled."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(_row(record) for record in records)
    return buffer.getvalue()


def export_filename(moment: datetime | None = None) -> str:
    return f"employees_{format_date_for_file(moment or datetime.now(timezone.utc))}.csv"


def export_employees(records: Sequence[EmployeeRecord], moment: datetime | None = None) -> ExportFile:
    return ExportFile(
        filename=export_filename(moment),
        content=build_csv(records),
        row_count=len(records),
    )
