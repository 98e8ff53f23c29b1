from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.enums import NotificationKind
from ..core.exceptions import NotFoundError, ValidationError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """What the request store needs: a fire-and-forget append."""

    def notify(
        self,
        message: str,
        kind: NotificationKind | str = NotificationKind.INFO,
        *,
        related_request_id: Optional[str] = None,
    ) -> Notification:
        raise NotImplementedError


class NotificationService:
    """Append-only notification feed with read tracking."""

    def __init__(self, notifications: NotificationRepository, *, clock: Callable[[], datetime] = now_utc):
        self._notifications = notifications
        self._clock = clock

    def notify(
        self,
        message: str,
        kind: NotificationKind | str = NotificationKind.INFO,
        *,
        related_request_id: Optional[str] = None,
    ) -> Notification:
        message = require_non_empty(message, "Message")
        try:
            kind = NotificationKind(kind)
        except ValueError:
            raise ValidationError("Notification kind must be one of: info, success, warning, error")

        item = Notification(
            notification_id=uuid.uuid4().hex,
            message=message,
            kind=kind,
            created_at=self._clock(),
            related_request_id=related_request_id,
        )
        items = self._notifications.load()
        items.append(item)
        self._notifications.save(items)
        logger.debug("Notification %s: %s", kind.value, message)
        return item

    def list_all(self) -> list[Notification]:
        """Newest first."""
        return list(reversed(self._notifications.load()))

    def unread_count(self) -> int:
        return sum(1 for n in self._notifications.load() if not n.read)

    def mark_read(self, notification_id: str) -> None:
        items = self._notifications.load()
        for i, n in enumerate(items):
            if n.notification_id == notification_id:
                items[i] = replace(n, read=True)
                self._notifications.save(items)
                return
        raise NotFoundError(f"Notification {notification_id} not found")

    def mark_all_read(self) -> None:
        items = self._notifications.load()
        self._notifications.save([replace(n, read=True) for n in items])

    def clear(self) -> None:
        self._notifications.save([])
