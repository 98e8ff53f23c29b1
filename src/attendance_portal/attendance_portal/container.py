from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .calendar_view.service import CalendarService, HolidayService
from .notifications.repository import KeyValueNotificationRepository
from .notifications.service import NotificationService
from .requests.kv_request_repository import KeyValueRequestRepository
from .requests.service import RequestStore
from .statistics.service import StatisticsService
from .storage.connection import DatabaseConnection, DBConfig
from .storage.kv_store import InMemoryKeyValueStore, KeyValueStore
from .storage.mysql_kv_store import MySQLKeyValueStore
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    store: KeyValueStore

    requests_repo: KeyValueRequestRepository
    notifications_repo: KeyValueNotificationRepository

    auth_service: AuthService
    notification_service: NotificationService
    request_store: RequestStore
    statistics_service: StatisticsService
    holiday_service: HolidayService
    calendar_service: CalendarService


def build_store(*, storage_backend: str, db_config: Optional[dict] = None) -> KeyValueStore:
    backend = (storage_backend or "memory").lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql storage backend")
        return MySQLKeyValueStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    raise ValueError(f"Unknown STORAGE_BACKEND: {storage_backend!r}")


def build_container(
    *,
    storage_backend: str = "memory",
    db_config: Optional[dict] = None,
    store: Optional[KeyValueStore] = None,
) -> Container:
    store = store if store is not None else build_store(storage_backend=storage_backend, db_config=db_config)

    requests_repo = KeyValueRequestRepository(store)
    notifications_repo = KeyValueNotificationRepository(store)

    notification_service = NotificationService(notifications_repo)
    request_store = RequestStore(requests_repo, notification_service)
    holiday_service = HolidayService(store)

    return Container(
        store=store,
        requests_repo=requests_repo,
        notifications_repo=notifications_repo,
        auth_service=AuthService(),
        notification_service=notification_service,
        request_store=request_store,
        statistics_service=StatisticsService(),
        holiday_service=holiday_service,
        calendar_service=CalendarService(holiday_service),
    )
