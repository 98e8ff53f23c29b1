from __future__ import annotations

import json
import logging
from typing import Protocol, Sequence

from ..core.constants import NOTIFICATIONS_KEY
from ..storage.kv_store import KeyValueStore
from .model import Notification

logger = logging.getLogger(__name__)


class NotificationRepository(Protocol):
    def load(self) -> list[Notification]:
        raise NotImplementedError

    def save(self, notifications: Sequence[Notification]) -> None:
        raise NotImplementedError


class KeyValueNotificationRepository(NotificationRepository):
    def __init__(self, store: KeyValueStore, *, key: str = NOTIFICATIONS_KEY):
        self._store = store
        self._key = key

    def load(self) -> list[Notification]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            return [Notification.from_record(r) for r in json.loads(raw)]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Notifications blob unreadable, treating as empty: %s", e)
            return []

    def save(self, notifications: Sequence[Notification]) -> None:
        self._store.set(self._key, json.dumps([n.to_record() for n in notifications], ensure_ascii=False))
