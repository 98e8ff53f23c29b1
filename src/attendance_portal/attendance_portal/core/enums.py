from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for gating dashboards and queues."""

    STUDENT = "student"
    FACULTY = "faculty"
    HOD = "hod"


class RequestStatus(str, Enum):
    """Review state of an attendance-exception request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RecipientTarget(str, Enum):
    """Reviewer(s) a request is routed to at submission."""

    HOD = "hod"
    FACULTY = "faculty"
    BOTH = "both"


class Partition(str, Enum):
    """Named collections of requests kept in the blob store."""

    STUDENT_REQUESTS = "studentRequests"
    HOD_QUEUE = "pendingRequests"
    FACULTY_QUEUE = "facultyPendingRequests"
    APPROVED_REQUESTS = "approvedRequests"


class NotificationKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
