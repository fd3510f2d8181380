"""Fixtures partagées : base SQLite en mémoire, plateforme factice, executor sans attente réelle."""

import hashlib
import hmac
import json
import os
from typing import Dict, List, Union

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")

from videosync.api.v1 import dependencies
from videosync.core.config import RetryPolicy, SignatureSettings, jwt_settings
from videosync.db.models.profiles import Profile
from videosync.db.models.videos import ProcessingStatus, Video
from videosync.db.repositories.notifications import NotificationRepository
from videosync.db.repositories.profiles import ProfileRepository
from videosync.db.repositories.videos import VideoRepository
from videosync.db.repositories.webhook_logs import WebhookLogRepository
from videosync.db.session import get_session, init_db
from videosync.features.processing.notifier import Notifier
from videosync.features.processing.retry import RetryingExecutor
from videosync.features.processing.services import ReconciliationService
from videosync.features.webhooks.audit import AuditLogger
from videosync.features.webhooks.services import WebhookService
from videosync.features.webhooks.signatures import SignatureVerifier
from videosync.main import app
from videosync.security.tokens import create_access_token
from videosync.utils.stream import RemoteAssetStatus, state_to_status

WEBHOOK_SECRET = "whsec-test"


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def encode(payload: dict) -> bytes:
    return json.dumps(payload).encode("utf-8")


def remote_status(uid: str, state: str, **fields) -> RemoteAssetStatus:
    return RemoteAssetStatus(uid=uid, state=state, status=state_to_status(state), **fields)


class FakeStream:
    """Plateforme factice : statut par UID, ou exception à lever."""

    def __init__(self):
        self.statuses: Dict[str, Union[RemoteAssetStatus, Exception]] = {}
        self.status_calls: List[str] = []
        self.retried: List[str] = []

    async def get_status(self, uid: str) -> RemoteAssetStatus:
        self.status_calls.append(uid)
        value = self.statuses[uid]
        if isinstance(value, Exception):
            raise value
        return value

    async def retry_processing(self, uid: str) -> None:
        self.retried.append(uid)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# -----------------------------
# DB
# -----------------------------
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def video_repo(session) -> VideoRepository:
    return VideoRepository(session)


@pytest.fixture
def make_video(session):
    def _make(**fields) -> Video:
        fields.setdefault("title", "Training video")
        fields.setdefault("processing_status", ProcessingStatus.PROCESSING.value)
        video = Video(**fields)
        session.add(video)
        session.commit()
        session.refresh(video)
        return video
    return _make


@pytest.fixture
def admins(session) -> List[Profile]:
    profiles = [
        Profile(email="root@example.com", admin_role="super_admin"),
        Profile(email="content@example.com", admin_role="content_admin"),
        Profile(email="support@example.com", admin_role="support_admin"),
        Profile(email="viewer@example.com"),
    ]
    session.add_all(profiles)
    session.commit()
    return profiles[:2]


# -----------------------------
# Services
# -----------------------------
@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def executor(sleep) -> RetryingExecutor:
    return RetryingExecutor(RetryPolicy(), sleep=sleep)


@pytest.fixture
def stream() -> FakeStream:
    return FakeStream()


@pytest.fixture
def notifier(session) -> Notifier:
    return Notifier(profile_repo=ProfileRepository(session), notification_repo=NotificationRepository(session))


@pytest.fixture
def webhook_service(session, video_repo, notifier, executor) -> WebhookService:
    return WebhookService(
        verifier=SignatureVerifier(SignatureSettings(secret=WEBHOOK_SECRET)),
        video_repo=video_repo,
        notifier=notifier,
        audit=AuditLogger(WebhookLogRepository(session)),
        executor=executor,
    )


@pytest.fixture
def reconciliation_service(video_repo, notifier, executor, stream) -> ReconciliationService:
    return ReconciliationService(video_repo=video_repo, stream=stream, notifier=notifier, executor=executor)


# -----------------------------
# API
# -----------------------------
@pytest.fixture
def admin_headers():
    token = create_access_token(subject="1", role="content_admin", settings=jwt_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session, executor, stream):
    def _session_override():
        yield session

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[dependencies.get_retrying_executor] = lambda: executor
    app.dependency_overrides[dependencies.get_signature_verifier] = (
        lambda: SignatureVerifier(SignatureSettings(secret=WEBHOOK_SECRET))
    )
    app.dependency_overrides[dependencies.get_stream_client] = lambda: stream

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
