import copy

import pytest

from barangay_portal.core.config import settings
from barangay_portal.services.archive_service import ArchiveService
from barangay_portal.services.reference_number_service import ReferenceNumberService


class FakeRealtimeDB:
    """
    In-memory stand-in for DatabaseService.

    Holds the tree as nested dicts and returns the same (success, ..., error)
    tuples. Set `fail_multi_path` to make every multi-path write fail without
    applying anything.
    """

    def __init__(self, data=None):
        self.data = copy.deepcopy(data or {})
        self.fail_multi_path = False
        self.fail_reads = set()
        self.multi_path_calls = []
        self._push_counter = 0

    @staticmethod
    def _parts(path):
        return [part for part in (path or "").strip("/").split("/") if part]

    def read(self, path):
        node = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def write(self, path, value):
        parts = self._parts(path)
        if not parts:
            self.data = copy.deepcopy(value) if value is not None else {}
            return
        node = self.data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        if value is None:
            node.pop(parts[-1], None)
        else:
            node[parts[-1]] = copy.deepcopy(value)

    async def get(self, path):
        if path in self.fail_reads:
            return False, None, "simulated read failure"
        return True, self.read(path), None

    async def count(self, path):
        children = self.read(path)
        return True, len(children) if isinstance(children, dict) else 0, None

    async def set(self, path, value):
        self.write(path, value)
        return True, None

    async def push(self, path, value):
        self._push_counter += 1
        key = f"-Nfake{self._push_counter:06d}"
        self.write(f"{path}/{key}", value)
        return True, key, None

    async def update(self, path, values):
        for key, value in values.items():
            self.write(f"{path}/{key}", value)
        return True, None

    async def delete(self, path):
        self.write(path, None)
        return True, None

    async def query_by_child(self, path, child, value):
        children = self.read(path) or {}
        return True, {
            key: item for key, item in children.items()
            if isinstance(item, dict) and item.get(child) == value
        }, None

    async def multi_path_update(self, updates):
        self.multi_path_calls.append(dict(updates))
        if self.fail_multi_path:
            return False, "simulated write failure"
        for path, value in updates.items():
            self.write(path, value)
        return True, None

    async def transaction(self, path, fn):
        value = fn(self.read(path))
        self.write(path, value)
        return True, value, None


class RecordingPort:
    """Records every awaited call. Methods named in `failing` raise instead."""

    def __init__(self, failing=()):
        self.calls = []
        self.failing = set(failing)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        async def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            if name in self.failing:
                raise RuntimeError(f"{name} unavailable")
            return {"success": True}

        return method

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


class FakeStorage(RecordingPort):
    async def upload(self, content, folder, content_type="image/png", tags=None):
        self.calls.append(("upload", (content, folder), {"content_type": content_type, "tags": tags}))
        public_id = f"barangay-portal/{folder}/fake.png"
        return {"url": f"https://storage.example/{public_id}", "public_id": public_id}


@pytest.fixture(autouse=True)
def default_lifecycle_settings(monkeypatch):
    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", True)
    monkeypatch.setattr(settings, "ENFORCE_FUTURE_RESCHEDULE", False)
    monkeypatch.setattr(settings, "REFERENCE_NUMBER_STRATEGY", "count")


@pytest.fixture
def db():
    return FakeRealtimeDB()


@pytest.fixture
def notifier():
    return RecordingPort()


@pytest.fixture
def mailer():
    return RecordingPort()


@pytest.fixture
def auth_port():
    return RecordingPort()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def archive(db, auth_port, storage):
    return ArchiveService(db=db, auth=auth_port, storage=storage)


@pytest.fixture
def reference_numbers(db):
    return ReferenceNumberService(db=db, strategy="count")
