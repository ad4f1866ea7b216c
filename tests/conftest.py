"""
Shared fixtures and in-memory fakes for the backend protocols.
"""

import itertools
from typing import Any, Callable, Dict, List, Optional

import pytest

from chittoor_tracker.backend import AuthUser
from chittoor_tracker.config import TrackerConfig
from chittoor_tracker.logging_config import TrackerLogger


SAMPLE_BLOB = (
    "Village, Mandal\n"
    "Kothapalli,Puthalapattu\n"
    "Puthalapattu,Puthalapattu\n"
    "Gudipala,Gudipala\n"
    "Kothapalli East,Gudipala\n"
    "Chittoor Rural,Chittoor\n"
)


class InMemoryTableClient:
    """TableClient keeping rows in dictionaries."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = {name: [dict(row) for row in rows] for name, rows in (tables or {}).items()}
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    def _rows(self, table):
        return self.tables.setdefault(table, [])

    def _check(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def select(self, table, filters=None, order_by=None, descending=False):
        self._check('select', table, filters)
        rows = [dict(row) for row in self._rows(table)
                if all(row.get(key) == value for key, value in (filters or {}).items())]
        if order_by:
            rows.sort(key=lambda row: row.get(order_by) or '', reverse=descending)
        return rows

    def insert(self, table, row):
        self._check('insert', table, dict(row))
        stored = dict(row)
        stored.setdefault('id', f"p-{next(self._ids)}")
        stored.setdefault('created_at', f"2024-01-01T00:00:{next(self._clock):02d}Z")
        self._rows(table).append(stored)
        return dict(stored)

    def update(self, table, record_id, changes):
        self._check('update', table, record_id, dict(changes))
        for row in self._rows(table):
            if row.get('id') == record_id:
                row.update(changes)
                return dict(row)
        raise LookupError(f"No row {record_id} in {table}")

    def delete(self, table, record_id):
        self._check('delete', table, record_id)
        self.tables[table] = [row for row in self._rows(table) if row.get('id') != record_id]


class FakeStorage:
    """StorageClient recording uploads."""

    def __init__(self, error: Optional[Exception] = None):
        self.objects: Dict[tuple, bytes] = {}
        self.error = error

    def upload(self, bucket, path, data, upsert=False):
        if self.error is not None:
            raise self.error
        self.objects[(bucket, path)] = data

    def public_url(self, bucket, path):
        return f"https://storage.test/{bucket}/{path}"


class FakeRemoteSource:
    """
    RemoteTableSource returning fixed rows or raising.

    ``gate_factory`` builds an asyncio.Event inside the running loop; the
    fetch waits on it so tests can act while the fetch is pending.
    """

    def __init__(self, rows: Any = None, error: Optional[Exception] = None,
                 gate_factory: Optional[Callable] = None):
        self.rows = [] if rows is None else rows
        self.error = error
        self.gate_factory = gate_factory
        self.gate = None
        self.calls: List[tuple] = []

    async def select(self, table, columns):
        self.calls.append((table, tuple(columns)))
        if self.gate_factory is not None:
            self.gate = self.gate_factory()
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.rows


class FakeAuthProvider:
    """AuthProvider with a single known account."""

    def __init__(self, user: Optional[AuthUser] = None, password: str = "secret"):
        self.session_user = user
        self.password = password
        self.callbacks: List[Callable] = []
        self.unsubscribed = 0

    def get_session_user(self):
        return self.session_user

    def sign_in(self, email, password):
        if password != self.password:
            raise PermissionError("Invalid login credentials")
        self.session_user = AuthUser(id="u-1", email=email)
        return self.session_user

    def sign_out(self):
        self.session_user = None

    def on_auth_state_change(self, callback):
        self.callbacks.append(callback)

        def unsubscribe():
            self.unsubscribed += 1
            self.callbacks.remove(callback)

        return unsubscribe

    def emit(self, user):
        for callback in list(self.callbacks):
            callback(user)


@pytest.fixture
def sample_blob():
    return SAMPLE_BLOB


@pytest.fixture
def config(tmp_path):
    return TrackerConfig(output_directory=str(tmp_path / "output"), log_level="DEBUG")


@pytest.fixture
def logger():
    tracker_logger = TrackerLogger(name="chittoor_tracker.tests", level="DEBUG")
    yield tracker_logger
    tracker_logger.close()


@pytest.fixture
def table_client():
    return InMemoryTableClient()


@pytest.fixture
def storage():
    return FakeStorage()
