import base64
import copy
import io
import re
from datetime import datetime

import pytest
import pytz
from fastapi.testclient import TestClient
from PIL import Image

from morningproof.config.database import get_async_supabase_client
from morningproof.main import app
from morningproof.routers.dependencies import get_clock
from morningproof.services.app_locking_service import AppLockingService
from morningproof.services.preferences_store import PreferencesStore
from morningproof.services.storage_service import StorageService
from morningproof.services.vision_service import get_vision_service
from morningproof.utils.timezone_utils import normalize_timezone


class FakeResponse:
    def __init__(self, data):
        self.data = data


def _like_to_regex(pattern: str):
    parts = []
    escaped = False
    for ch in pattern:
        if escaped:
            parts.append(re.escape(ch))
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + "$", re.DOTALL)


class FakeQuery:
    """Just enough of the supabase query builder for the app's queries"""

    def __init__(self, rows: list):
        self.rows = rows
        self.action = "select"
        self.payload = None
        self.on_conflict = None
        self.columns = None
        self.filters = []

    def select(self, columns="*"):
        self.action = "select"
        if columns != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.action = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def like(self, column, pattern):
        regex = _like_to_regex(pattern)
        self.filters.append(lambda row: isinstance(row.get(column), str) and regex.match(row[column]) is not None)
        return self

    def _matches(self, row) -> bool:
        return all(check(row) for check in self.filters)

    def _project(self, row):
        if self.columns is None:
            return row
        return {column: row.get(column) for column in self.columns}

    def _payload_rows(self):
        return self.payload if isinstance(self.payload, list) else [self.payload]

    async def execute(self):
        data = []
        if self.action == "select":
            data = [self._project(row) for row in self.rows if self._matches(row)]
        elif self.action == "insert":
            for row in self._payload_rows():
                self.rows.append(copy.deepcopy(row))
                data.append(row)
        elif self.action == "upsert":
            keys = self.on_conflict.split(",") if self.on_conflict else ["id"]
            for row in self._payload_rows():
                existing = next(
                    (r for r in self.rows if all(r.get(k) == row.get(k) for k in keys)),
                    None
                )
                if existing is None:
                    self.rows.append(copy.deepcopy(row))
                else:
                    existing.update(copy.deepcopy(row))
                data.append(row)
        elif self.action == "update":
            for row in self.rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    data.append(row)
        elif self.action == "delete":
            data = [row for row in self.rows if self._matches(row)]
            self.rows[:] = [row for row in self.rows if not self._matches(row)]
        return FakeResponse(copy.deepcopy(data))


class FakeSupabase:
    def __init__(self):
        self.tables = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables.setdefault(name, []))


class FixedClock:
    """Stands in for get_user_now: the same local wall time in any timezone"""

    def __init__(self, naive: datetime):
        self.naive = naive

    def set(self, naive: datetime):
        self.naive = naive

    def __call__(self, timezone: str) -> datetime:
        return pytz.timezone(normalize_timezone(timezone)).localize(self.naive)


class FakeVisionService:
    def __init__(self):
        self.payload = {"is_made": True, "feedback": "Looks great!"}
        self.error = None
        self.calls = []

    async def analyze(self, images, prompt, max_tokens=512, label_frames=False):
        self.calls.append({
            "images": images,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "label_frames": label_frames,
        })
        if self.error is not None:
            raise self.error
        return self.payload


def make_jpeg(size=(64, 48), color=(200, 180, 160)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def clock():
    # Monday 10 March 2025, 07:30 local
    return FixedClock(datetime(2025, 3, 10, 7, 30))


@pytest.fixture
def vision():
    return FakeVisionService()


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()


@pytest.fixture
def jpeg_base64(jpeg_bytes):
    return base64.b64encode(jpeg_bytes).decode("ascii")


@pytest.fixture
def client(fake_supabase, clock, vision):
    async def override_supabase():
        return fake_supabase

    app.dependency_overrides[get_async_supabase_client] = override_supabase
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_vision_service] = lambda: vision
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    response = client.post("/api/auth/anonymous", json={"name": "Sam", "timezone": "America/New_York"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def store(fake_supabase):
    return PreferencesStore(fake_supabase, "user-1")


@pytest.fixture
def storage(store):
    return StorageService(store)


@pytest.fixture
def app_locking(store):
    return AppLockingService(store)
