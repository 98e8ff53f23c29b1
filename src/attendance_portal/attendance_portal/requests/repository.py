from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from ..core.enums import Partition
from .model import AttendanceRequest


class RequestRepository(Protocol):
    def load(self, partition: Partition) -> list[AttendanceRequest]:
        """Return the partition in stored (insertion) order; absent key -> []."""

        raise NotImplementedError

    def save_all(self, partitions: Mapping[Partition, Sequence[AttendanceRequest]]) -> None:
        """Rewrite every given partition in full as one step."""

        raise NotImplementedError
