from __future__ import annotations

import json
import logging
from typing import Mapping, Sequence

from ..core.enums import Partition
from ..core.exceptions import StorageError
from ..storage.kv_store import KeyValueStore
from .model import AttendanceRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)


def decode_partition(raw: str) -> list[AttendanceRequest]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Stored blob is not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise StorageError("Stored blob is not a JSON array")
    try:
        return [AttendanceRequest.from_record(r) for r in payload]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StorageError(f"Stored request record is malformed: {e}") from e


def encode_partition(requests: Sequence[AttendanceRequest]) -> str:
    return json.dumps([r.to_record() for r in requests], ensure_ascii=False)


class KeyValueRequestRepository(RequestRepository):
    """Partitions stored as JSON arrays, one key per partition."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self, partition: Partition) -> list[AttendanceRequest]:
        raw = self._store.get(partition.value)
        if not raw:
            return []
        try:
            return decode_partition(raw)
        except StorageError as e:
            logger.warning("Partition %s unreadable, treating as empty: %s", partition.value, e)
            return []

    def save_all(self, partitions: Mapping[Partition, Sequence[AttendanceRequest]]) -> None:
        self._store.set_many({p.value: encode_partition(items) for p, items in partitions.items()})
