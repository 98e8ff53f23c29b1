"""Seed demo requests through the request store (runs the real routing rules)."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_portal.attendance_portal.container import build_container
from src.attendance_portal.attendance_portal.core.enums import Partition, RecipientTarget, RequestStatus
from src.attendance_portal.attendance_portal.requests.model import NewRequestInput


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(storage_backend="mysql", db_config=dict(settings.DB_CONFIG))
    store = container.request_store

    store.submit(
        NewRequestInput(subject="Math", date="2024-03-10", reason="Fever", sent_to=RecipientTarget.HOD),
        student_name="student1",
    )
    store.submit(
        NewRequestInput(
            subject="Physics",
            date="2024-03-12",
            reason="Family emergency",
            sent_to=RecipientTarget.BOTH,
            urgent=True,
        ),
        student_name="student1",
    )
    faculty_only = store.submit(
        NewRequestInput(subject="Chemistry", date="2024-03-15", reason="Sports meet", sent_to=RecipientTarget.FACULTY),
        student_name="student1",
    )
    store.review(faculty_only[0].request_id, RequestStatus.APPROVED)
    container.holiday_service.ensure_defaults(2024)

    print(f"OK: Seeded {len(store.list_partition(Partition.STUDENT_REQUESTS))} requests")


if __name__ == "__main__":
    main()
