"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import Partition, RecipientTarget, Role

STALE_PENDING_DAYS = 5

QUEUE_PARTITIONS = (Partition.HOD_QUEUE, Partition.FACULTY_QUEUE)

QUEUE_FOR_TARGET = {
    RecipientTarget.HOD: Partition.HOD_QUEUE,
    RecipientTarget.FACULTY: Partition.FACULTY_QUEUE,
}

QUEUE_FOR_ROLE = {
    Role.HOD: Partition.HOD_QUEUE,
    Role.FACULTY: Partition.FACULTY_QUEUE,
}

# Partition each role sees as its "own" view (statistics, export).
HISTORY_FOR_ROLE = {
    Role.STUDENT: Partition.STUDENT_REQUESTS,
    Role.HOD: Partition.HOD_QUEUE,
    Role.FACULTY: Partition.FACULTY_QUEUE,
}

REJECTION_REASONS = (
    "Invalid date",
    "Insufficient reason",
    "Duplicate request",
    "Missing documentation",
    "Other",
)

NOTIFICATIONS_KEY = "notifications"
HOLIDAYS_KEY = "holidays"

# (MM-DD, label) seeded once for every calendar year that has no holidays yet.
DEFAULT_HOLIDAYS = (
    ("01-01", "New Year's Day"),
    ("01-26", "Republic Day"),
    ("08-15", "Independence Day"),
    ("10-02", "Gandhi Jayanti"),
    ("12-25", "Christmas"),
)
