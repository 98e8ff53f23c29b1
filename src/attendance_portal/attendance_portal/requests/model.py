from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_datetime, to_iso
from ..core.enums import RecipientTarget, RequestStatus


@dataclass(frozen=True)
class AttendanceRequest:
    request_id: str
    student_name: str
    subject: str
    date: str
    reason: str
    status: RequestStatus
    sent_to: RecipientTarget
    submitted_at: datetime
    updated_at: Optional[datetime] = None
    urgent: bool = False
    rejection_reason: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def to_record(self) -> dict:
        """Persisted/JSON shape (camelCase keys)."""
        return {
            "id": self.request_id,
            "studentName": self.student_name,
            "subject": self.subject,
            "date": self.date,
            "reason": self.reason,
            "status": self.status.value,
            "sentTo": self.sent_to.value,
            "submittedAt": to_iso(self.submitted_at),
            "updatedAt": to_iso(self.updated_at),
            "urgent": bool(self.urgent),
            "rejectionReason": self.rejection_reason,
        }

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "AttendanceRequest":
        submitted_at = parse_iso_datetime(r.get("submittedAt"))
        if submitted_at is None:
            raise ValueError(f"Request {r.get('id')!r} has no submittedAt")
        return cls(
            request_id=str(r["id"]),
            student_name=str(r.get("studentName") or ""),
            subject=str(r.get("subject") or ""),
            date=str(r.get("date") or ""),
            reason=str(r.get("reason") or ""),
            status=RequestStatus(r.get("status", RequestStatus.PENDING.value)),
            sent_to=RecipientTarget(r.get("sentTo", RecipientTarget.HOD.value)),
            submitted_at=submitted_at,
            updated_at=parse_iso_datetime(r.get("updatedAt")),
            urgent=bool(r.get("urgent", False)),
            rejection_reason=r.get("rejectionReason"),
        )


@dataclass(frozen=True)
class NewRequestInput:
    subject: str
    date: str
    reason: str
    sent_to: RecipientTarget | str = RecipientTarget.HOD
    urgent: bool = False


@dataclass(frozen=True)
class RequestFilter:
    """Search/filter panel state. "all" disables the status/subject predicates."""

    search: str = ""
    status: str = "all"
    subject: str = "all"
    date_from: str = ""
    date_to: str = ""
    student_name: Optional[str] = None

    @classmethod
    def from_args(cls, args, *, student_name: Optional[str] = None) -> "RequestFilter":
        return cls(
            search=args.get("search", "") or "",
            status=args.get("status", "all") or "all",
            subject=args.get("subject", "all") or "all",
            date_from=args.get("dateFrom", "") or "",
            date_to=args.get("dateTo", "") or "",
            student_name=student_name,
        )

    def matches(self, r: AttendanceRequest) -> bool:
        if self.student_name is not None and r.student_name != self.student_name:
            return False
        if self.search and not matches_keyword(r, self.search):
            return False
        if self.status != "all" and r.status.value != self.status:
            return False
        if self.subject != "all" and r.subject != self.subject:
            return False
        # Fixed-width ISO dates compare correctly as strings.
        if self.date_from and r.date < self.date_from:
            return False
        if self.date_to and r.date > self.date_to:
            return False
        return True


def matches_keyword(r: AttendanceRequest, keyword: str) -> bool:
    needle = keyword.strip().lower()
    return (
        needle in r.student_name.lower()
        or needle in r.subject.lower()
        or needle in r.reason.lower()
    )
