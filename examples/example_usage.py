"""Example: drive the request store directly (no Flask).

Controllers are a thin layer; the routing and mirroring rules live in RequestStore.
"""

from src.attendance_portal.attendance_portal.container import build_container
from src.attendance_portal.attendance_portal.core.enums import Partition, RecipientTarget, RequestStatus
from src.attendance_portal.attendance_portal.requests.model import NewRequestInput


def main():
    container = build_container(storage_backend="memory")
    store = container.request_store

    created = store.submit(
        NewRequestInput(subject="Math", date="2024-03-10", reason="sick", sent_to=RecipientTarget.BOTH),
        student_name="student1",
    )
    store.review(created[0].request_id, RequestStatus.APPROVED)

    for r in store.list_partition(Partition.STUDENT_REQUESTS):
        print(r.request_id, r.status.value)
    print(container.statistics_service.summarize(store.list_partition(Partition.STUDENT_REQUESTS)).to_dict())


if __name__ == "__main__":
    main()
