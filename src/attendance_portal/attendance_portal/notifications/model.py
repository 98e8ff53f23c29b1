from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_datetime, to_iso
from ..core.enums import NotificationKind


@dataclass(frozen=True)
class Notification:
    notification_id: str
    message: str
    kind: NotificationKind
    created_at: datetime
    related_request_id: Optional[str] = None
    read: bool = False

    def to_record(self) -> dict:
        return {
            "id": self.notification_id,
            "message": self.message,
            "type": self.kind.value,
            "relatedRequestId": self.related_request_id,
            "timestamp": to_iso(self.created_at),
            "read": bool(self.read),
        }

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "Notification":
        created_at = parse_iso_datetime(r.get("timestamp"))
        if created_at is None:
            raise ValueError(f"Notification {r.get('id')!r} has no timestamp")
        return cls(
            notification_id=str(r["id"]),
            message=str(r.get("message") or ""),
            kind=NotificationKind(r.get("type", NotificationKind.INFO.value)),
            created_at=created_at,
            related_request_id=r.get("relatedRequestId"),
            read=bool(r.get("read", False)),
        )
