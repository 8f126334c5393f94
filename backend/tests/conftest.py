"""
Delade fixtures: utbytbara fakes för verifier, storage, track store och
uppströms-HTTP, injicerade via app.dependency_overrides.
"""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from superhitz.config import Settings
from superhitz.core.auth import Identity
from superhitz.errors import MetadataWriteError, StorageWriteError, Unauthenticated

SERVER_TIME = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

USERS = {
    "token-ada": Identity(uid="uid-ada", name="Ada Lovelace", email="ada@example.com"),
    "token-mail": Identity(uid="uid-mail", email="mail@example.com"),
    "token-anon": Identity(uid="uid-anon"),
}


def auth(token: str = "token-ada") -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeVerifier:
    def __init__(self):
        self.calls = []

    async def verify(self, token: str) -> Identity:
        self.calls.append(token)
        if token not in USERS:
            raise Unauthenticated("Invalid token")
        return USERS[token]


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.fail_on = None     # prefix som ska fallera, t.ex. "covers/"
        self.crash_with = None  # oklassificerat fel

    async def store(self, data: bytes, path: str, content_type: str) -> str:
        if self.crash_with is not None:
            raise self.crash_with
        if self.fail_on and path.startswith(self.fail_on):
            raise StorageWriteError(f"Storage write failed for {path}: quota exceeded")
        self.objects[path] = (data, content_type)
        return f"https://cdn.test/media/{path}"


class FakeTrackStore:
    def __init__(self):
        self.records = []
        self.fail = False

    async def append(self, record):
        if self.fail:
            raise MetadataWriteError("Metadata write failed: connection refused")
        track = SimpleNamespace(
            id=uuid.uuid4(),
            created_at=SERVER_TIME,
            **record.model_dump(),
        )
        self.records.append(track)
        return track


class FakeUpstream:
    """MockTransport-handler som sparar alla uppströms-anrop."""

    def __init__(self):
        self.requests = []
        self.respond = lambda request: httpx.Response(500, text="no handler")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        APP_ENV="test",
        OPENAI_API_KEY="",
        HUGGINGFACE_API_KEY="",
        MINIO_ENDPOINT="minio:9000",
        MINIO_SECURE=False,
        MINIO_BUCKET_MEDIA="superhitz-media",
        MINIO_PUBLIC_URL="",
    )


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def track_store():
    return FakeTrackStore()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
async def make_client(settings, verifier, storage, track_store, upstream):
    """Bygger en AsyncClient mot appen med alla externa beroenden utbytta."""
    from superhitz.main import app
    from superhitz.dependencies import (
        get_http_client,
        get_settings,
        get_storage,
        get_track_store,
        get_verifier,
    )

    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_verifier] = lambda: verifier
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_track_store] = lambda: track_store
    app.dependency_overrides[get_http_client] = lambda: http

    clients = []

    def _make(raise_app_exceptions: bool = True) -> AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        ac = AsyncClient(transport=transport, base_url="http://test")
        clients.append(ac)
        return ac

    yield _make

    for ac in clients:
        await ac.aclose()
    await http.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
async def client(make_client):
    return make_client()
