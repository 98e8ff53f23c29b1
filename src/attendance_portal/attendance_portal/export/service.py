from __future__ import annotations

import io
from datetime import date
from typing import Optional, Sequence

import pandas as pd

from ..common.datetime_utils import format_local
from ..core.exceptions import ValidationError
from ..requests.model import AttendanceRequest

CSV_HEADERS = ["Student Name", "Subject", "Absence Date", "Reason", "Status", "Submitted At", "Updated At"]

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIMETYPE = "text/csv"


def _quote(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _require_rows(requests: Sequence[AttendanceRequest]) -> None:
    if not requests:
        raise ValidationError("No data to export")


def export_filename(name: str, extension: str, *, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{name}_{today.isoformat()}.{extension}"


def requests_to_csv(requests: Sequence[AttendanceRequest]) -> str:
    """Comma-joined rows; free-text fields are always quoted."""
    _require_rows(requests)
    lines = [",".join(CSV_HEADERS)]
    for r in requests:
        lines.append(
            ",".join(
                [
                    _quote(r.student_name),
                    _quote(r.subject),
                    r.date,
                    _quote(r.reason),
                    r.status.value,
                    format_local(r.submitted_at),
                    format_local(r.updated_at),
                ]
            )
        )
    return "\n".join(lines)


def requests_to_frame(requests: Sequence[AttendanceRequest]) -> pd.DataFrame:
    rows = [
        {
            "Student Name": r.student_name,
            "Subject": r.subject,
            "Absence Date": r.date,
            "Reason": r.reason,
            "Status": r.status.value.upper(),
            "Urgent": "Yes" if r.urgent else "No",
            "Rejection Reason": r.rejection_reason or "",
            "Submitted": format_local(r.submitted_at),
            "Updated": format_local(r.updated_at),
        }
        for r in requests
    ]
    return pd.DataFrame(rows)


def requests_to_report(requests: Sequence[AttendanceRequest], *, title: str = "Attendance Report") -> bytes:
    """Tabular report workbook (.xlsx), one row per request."""
    _require_rows(requests)
    df = requests_to_frame(requests)

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=title[:31])
    return out.getvalue()
