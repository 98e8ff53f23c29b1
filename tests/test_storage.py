from __future__ import annotations

import json

import pytest

from src.attendance_portal.attendance_portal.core.enums import Partition
from src.attendance_portal.attendance_portal.core.exceptions import StorageError
from src.attendance_portal.attendance_portal.container import build_store
from src.attendance_portal.attendance_portal.requests.kv_request_repository import (
    KeyValueRequestRepository,
    decode_partition,
)
from src.attendance_portal.attendance_portal.storage.kv_store import InMemoryKeyValueStore
from src.attendance_portal.attendance_portal.storage.mysql_kv_store import MySQLKeyValueStore


class FakeCursor:
    def __init__(self, db: "FakeConnectionFactory"):
        self._db = db
        self._row = None

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        self._db.executed.append((sql, params))
        if self._db.fail_on and self._db.fail_on in params:
            raise RuntimeError("write failed")
        if sql.startswith("SELECT"):
            value = self._db.pending.get(params[0], self._db.rows.get(params[0]))
            self._row = {"storage_value": value} if value is not None else None
        elif sql.startswith("INSERT"):
            self._db.pending[params[0]] = params[1]
        elif sql.startswith("DELETE"):
            self._db.pending[params[0]] = None

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, db: "FakeConnectionFactory"):
        self._db = db

    def cursor(self, dictionary=False):
        return FakeCursor(self._db)

    def commit(self):
        for key, value in self._db.pending.items():
            if value is None:
                self._db.rows.pop(key, None)
            else:
                self._db.rows[key] = value
        self._db.pending.clear()
        self._db.commits += 1

    def rollback(self):
        self._db.pending.clear()
        self._db.rollbacks += 1

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self):
        self.rows: dict[str, str] = {}
        self.pending: dict[str, str | None] = {}
        self.executed: list = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_on = None

    def connect(self, *, with_database=True):
        return FakeConnection(self)


def test_in_memory_store_basic_operations():
    kv = InMemoryKeyValueStore({"a": "1"})
    kv.set_many({"b": "2", "c": "3"})
    kv.delete("a")
    kv.delete("missing")

    assert kv.get("a") is None
    assert kv.keys() == ["b", "c"]


def test_decode_partition_rejects_garbage():
    with pytest.raises(StorageError):
        decode_partition("not json")
    with pytest.raises(StorageError):
        decode_partition(json.dumps({"id": "1"}))
    with pytest.raises(StorageError):
        decode_partition(json.dumps([{"id": "1", "status": "pending"}]))


def test_repository_tolerates_unreadable_partition():
    kv = InMemoryKeyValueStore({Partition.HOD_QUEUE.value: "][", Partition.FACULTY_QUEUE.value: ""})
    repo = KeyValueRequestRepository(kv)

    assert repo.load(Partition.HOD_QUEUE) == []
    assert repo.load(Partition.FACULTY_QUEUE) == []
    assert repo.load(Partition.APPROVED_REQUESTS) == []


def test_mysql_store_round_trips_through_portal_storage():
    db = FakeConnectionFactory()
    kv = MySQLKeyValueStore(db)

    assert kv.get("holidays") is None
    kv.set("holidays", "{}")
    assert kv.get("holidays") == "{}"

    kv.delete("holidays")
    assert kv.get("holidays") is None
    assert all("portal_storage" in sql for sql, _ in db.executed)


def test_mysql_set_many_commits_once():
    db = FakeConnectionFactory()
    kv = MySQLKeyValueStore(db)

    kv.set_many({"studentRequests": "[]", "pendingRequests": "[]"})

    assert db.commits == 1
    assert db.rows == {"studentRequests": "[]", "pendingRequests": "[]"}


def test_mysql_set_many_rolls_back_on_failure():
    db = FakeConnectionFactory()
    db.rows["studentRequests"] = "old"
    kv = MySQLKeyValueStore(db)
    db.fail_on = "pendingRequests"

    with pytest.raises(RuntimeError):
        kv.set_many({"studentRequests": "new", "pendingRequests": "[]"})

    assert db.rollbacks == 1
    assert db.rows == {"studentRequests": "old"}


def test_build_store_selects_backend():
    assert isinstance(build_store(storage_backend="memory"), InMemoryKeyValueStore)
    with pytest.raises(ValueError):
        build_store(storage_backend="mysql")
    with pytest.raises(ValueError):
        build_store(storage_backend="redis")
