from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import require_iso_date, require_non_empty
from ..core.constants import HISTORY_FOR_ROLE, QUEUE_FOR_TARGET, QUEUE_PARTITIONS, REJECTION_REASONS
from ..core.enums import NotificationKind, Partition, RecipientTarget, RequestStatus, Role
from ..core.exceptions import DomainError, InvalidStateError, NotFoundError, ValidationError
from ..notifications.service import NotificationSink
from .model import AttendanceRequest, NewRequestInput, RequestFilter, matches_keyword
from .repository import RequestRepository

logger = logging.getLogger(__name__)

_TARGET_LABELS = {
    RecipientTarget.HOD: "HOD",
    RecipientTarget.FACULTY: "Faculty",
    RecipientTarget.BOTH: "HOD and Faculty",
}

_REVIEWER_LABELS = {
    Partition.HOD_QUEUE: "HOD",
    Partition.FACULTY_QUEUE: "Faculty",
}


def sort_requests(items: Iterable[AttendanceRequest]) -> list[AttendanceRequest]:
    """Urgent first, then newest submission first.

    `sorted` is stable, so equal keys keep their stored (insertion) order.
    """
    return sorted(items, key=lambda r: (not r.urgent, -r.submitted_at.timestamp()))


class RequestStore:
    """Owns the request partitions and every state transition across them.

    Each operation is one read-modify-write: the touched partitions are loaded,
    changed in memory, and rewritten together through `save_all`, so the
    queue record and its `studentRequests` mirror never diverge.
    """

    def __init__(
        self,
        requests: RequestRepository,
        notifications: Optional[NotificationSink] = None,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._requests = requests
        self._notifications = notifications
        self._clock = clock

    # -------- Parsing --------
    @staticmethod
    def _parse_target(value) -> RecipientTarget:
        try:
            return RecipientTarget(value)
        except ValueError:
            raise ValidationError("Recipient must be one of: hod, faculty, both")

    @staticmethod
    def _parse_decision(value) -> RequestStatus:
        try:
            status = RequestStatus(value)
        except ValueError:
            status = None
        if status not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationError("Decision must be 'approved' or 'rejected'")
        return status

    @staticmethod
    def _parse_rejection_reason(status: RequestStatus, value: Optional[str]) -> Optional[str]:
        if status != RequestStatus.REJECTED:
            return None
        if value is not None and not isinstance(value, str):
            raise ValidationError("Rejection reason must be text")
        reason = (value or "").strip()
        if not reason:
            return None
        if reason not in REJECTION_REASONS:
            raise ValidationError(f"Rejection reason must be one of: {', '.join(REJECTION_REASONS)}")
        return reason

    @staticmethod
    def _check_queue(queue: Partition) -> Partition:
        try:
            queue = Partition(queue)
        except ValueError:
            raise ValidationError(f"Unknown partition: {queue}")
        if queue not in QUEUE_PARTITIONS:
            raise ValidationError(f"{queue.value} is not a review queue")
        return queue

    # -------- Submission --------
    @staticmethod
    def _new_base_id(now: datetime, existing: Sequence[AttendanceRequest]) -> str:
        taken = {r.request_id for r in existing}
        base = int(now.timestamp() * 1000)
        while {str(base), f"{base}-hod", f"{base}-faculty"} & taken:
            base += 1
        return str(base)

    @staticmethod
    def _fan_out(base_id: str, target: RecipientTarget) -> list[tuple[str, Partition]]:
        """Expand a routing target into (record id, queue) pairs."""
        if target == RecipientTarget.BOTH:
            return [
                (f"{base_id}-hod", Partition.HOD_QUEUE),
                (f"{base_id}-faculty", Partition.FACULTY_QUEUE),
            ]
        return [(base_id, QUEUE_FOR_TARGET[target])]

    def submit(self, data: NewRequestInput, *, student_name: str) -> list[AttendanceRequest]:
        student_name = require_non_empty(student_name, "Student name")
        subject = require_non_empty(data.subject, "Subject")
        absence_date = require_iso_date(require_non_empty(data.date, "Date"), "Date")
        reason = require_non_empty(data.reason, "Reason")
        target = self._parse_target(data.sent_to)
        urgent = bool(data.urgent)

        now = self._clock()
        history = self._requests.load(Partition.STUDENT_REQUESTS)
        queues = {q: self._requests.load(q) for q in QUEUE_PARTITIONS}
        # Ids stay unique across the history and both queues.
        base_id = self._new_base_id(now, history + [r for items in queues.values() for r in items])

        created: list[AttendanceRequest] = []
        changes: dict[Partition, list[AttendanceRequest]] = {Partition.STUDENT_REQUESTS: history}
        for request_id, queue in self._fan_out(base_id, target):
            req = AttendanceRequest(
                request_id=request_id,
                student_name=student_name,
                subject=subject,
                date=absence_date,
                reason=reason,
                status=RequestStatus.PENDING,
                sent_to=target,
                submitted_at=now,
                urgent=urgent,
            )
            created.append(req)
            history.append(req)
            if queue not in changes:
                changes[queue] = queues[queue]
            changes[queue].append(req)

        self._requests.save_all(changes)
        logger.info("Submitted %s for %s (sent to %s)", [r.request_id for r in created], student_name, target.value)

        prefix = "URGENT: " if urgent else ""
        self._emit(
            f"{prefix}New request from {student_name} for {subject} on {absence_date} "
            f"(sent to {_TARGET_LABELS[target]})",
            NotificationKind.WARNING if urgent else NotificationKind.INFO,
            related_request_id=created[0].request_id,
        )
        return created

    # -------- Review --------
    def _locate(self, request_id: str, queues: Sequence[Partition]):
        for queue in queues:
            items = self._requests.load(queue)
            for index, r in enumerate(items):
                if r.request_id == request_id:
                    return queue, items, index
        raise NotFoundError(f"Request {request_id} not found")

    def _transition(
        self,
        request_id: str,
        status: RequestStatus,
        rejection_reason: Optional[str],
        queues: Sequence[Partition],
    ) -> tuple[Partition, AttendanceRequest]:
        owner, items, index = self._locate(str(request_id), queues)
        current = items[index]
        if not current.is_pending:
            raise InvalidStateError(f"Request {current.request_id} was already {current.status.value}")

        now = self._clock()
        updated = replace(current, status=status, updated_at=now, rejection_reason=rejection_reason)
        items[index] = updated

        history = self._requests.load(Partition.STUDENT_REQUESTS)
        mirrored = False
        for i, r in enumerate(history):
            if r.request_id == updated.request_id:
                history[i] = replace(r, status=status, updated_at=now, rejection_reason=rejection_reason)
                mirrored = True
        if not mirrored:
            logger.warning("Request %s missing from %s, restoring mirror", updated.request_id, Partition.STUDENT_REQUESTS.value)
            history.append(updated)

        changes: dict[Partition, list[AttendanceRequest]] = {owner: items, Partition.STUDENT_REQUESTS: history}
        # Only HOD approvals feed approvedRequests; faculty approvals do not.
        if status == RequestStatus.APPROVED and owner == Partition.HOD_QUEUE:
            approved = self._requests.load(Partition.APPROVED_REQUESTS)
            approved.append(updated)
            changes[Partition.APPROVED_REQUESTS] = approved

        self._requests.save_all(changes)
        logger.info("Request %s %s in %s", updated.request_id, status.value, owner.value)
        return owner, updated

    def review(
        self,
        request_id: str,
        decision: RequestStatus | str,
        rejection_reason: Optional[str] = None,
        *,
        queue: Optional[Partition] = None,
    ) -> AttendanceRequest:
        status = self._parse_decision(decision)
        reason = self._parse_rejection_reason(status, rejection_reason)
        queues = (self._check_queue(queue),) if queue is not None else QUEUE_PARTITIONS

        owner, updated = self._transition(request_id, status, reason, queues)

        reviewer = _REVIEWER_LABELS[owner]
        if status == RequestStatus.APPROVED:
            self._emit(
                f"{reviewer} approved {updated.student_name}'s request for {updated.subject} on {updated.date}",
                NotificationKind.SUCCESS,
                related_request_id=updated.request_id,
            )
        else:
            suffix = f": {reason}" if reason else ""
            self._emit(
                f"{reviewer} rejected {updated.student_name}'s request for {updated.subject} on {updated.date}{suffix}",
                NotificationKind.ERROR,
                related_request_id=updated.request_id,
            )
        return updated

    def bulk_review(
        self,
        request_ids: Iterable[str],
        decision: RequestStatus | str,
        *,
        queue: Optional[Partition] = None,
        rejection_reason: Optional[str] = None,
    ) -> int:
        """Review each id independently; returns the number of successful transitions."""
        status = self._parse_decision(decision)
        reason = self._parse_rejection_reason(status, rejection_reason)
        queues = (self._check_queue(queue),) if queue is not None else QUEUE_PARTITIONS

        count = 0
        for request_id in dict.fromkeys(str(i) for i in request_ids):
            try:
                self._transition(request_id, status, reason, queues)
            except DomainError as e:
                logger.warning("Skipping %s in bulk review: %s", request_id, e)
                continue
            count += 1

        if count:
            noun = "request" if count == 1 else "requests"
            self._emit(
                f"{count} {noun} {status.value}",
                NotificationKind.SUCCESS if status == RequestStatus.APPROVED else NotificationKind.ERROR,
            )
        return count

    def keyword_review(self, queue: Partition, keyword: str, decision: RequestStatus | str) -> int:
        if keyword is not None and not isinstance(keyword, str):
            raise ValidationError("Keyword must be text")
        if not keyword or not keyword.strip():
            return 0
        queue = self._check_queue(queue)
        status = self._parse_decision(decision)

        matched = [
            r.request_id
            for r in self._requests.load(queue)
            if r.is_pending and matches_keyword(r, keyword)
        ]
        return self.bulk_review(matched, status, queue=queue)

    # -------- Reads --------
    def list_partition(self, partition: Partition) -> list[AttendanceRequest]:
        return sort_requests(self._requests.load(Partition(partition)))

    def query(self, partition: Partition, request_filter: Optional[RequestFilter] = None) -> list[AttendanceRequest]:
        request_filter = request_filter or RequestFilter()
        return [r for r in self.list_partition(partition) if request_filter.matches(r)]

    def history_for(self, role: Role, username: str, request_filter: Optional[RequestFilter] = None) -> list[AttendanceRequest]:
        """The partition a role works from; students only see their own requests."""
        request_filter = request_filter or RequestFilter()
        if role == Role.STUDENT:
            request_filter = replace(request_filter, student_name=username)
        return self.query(HISTORY_FOR_ROLE[Role(role)], request_filter)

    def subjects(self, partition: Partition) -> list[str]:
        return sorted({r.subject for r in self._requests.load(Partition(partition))})

    def get(self, request_id: str) -> AttendanceRequest:
        for r in self._requests.load(Partition.STUDENT_REQUESTS):
            if r.request_id == request_id:
                return r
        raise NotFoundError(f"Request {request_id} not found")

    # -------- Notifications --------
    def _emit(self, message: str, kind: NotificationKind, *, related_request_id: Optional[str] = None) -> None:
        if self._notifications is None:
            return
        try:
            self._notifications.notify(message, kind, related_request_id=related_request_id)
        except Exception:
            # Sink failures never affect the store.
            logger.exception("Notification sink failed for %s", related_request_id)
