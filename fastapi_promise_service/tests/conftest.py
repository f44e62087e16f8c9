from __future__ import annotations

import os
import tempfile
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest

# app.db.session 이 import 시점에 엔진을 만들므로 MySQL 드라이버 대신 SQLite 파일 URL을 지정한다.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{Path(tempfile.gettempdir()) / 'promise_service_unused.db'}",
)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.crypto import encrypt_token  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base  # noqa: E402
from app.models.domain import Meeting, MeetingParticipant, User, UserConsent, UserIdentity  # noqa: E402
from app.services import kakao_notify_service  # noqa: E402
from app.services.kakao_memo_client import KakaoMemoClient  # noqa: E402
from app.services.kakao_memo_dispatcher import DispatchResult, KakaoMemoDispatcher  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _factory(
        name: str = "사용자",
        *,
        talk_consent: bool = True,
        friends_consent: bool = True,
        token: str | None = None,
        token_expires_at: datetime | None = None,
        status: str = "ACTIVE",
    ) -> User:
        user = User(name=name, status=status)
        db_session.add(user)
        db_session.flush()
        db_session.add(
            UserConsent(
                user_id=user.id,
                talk_message_consent=talk_consent,
                friends_consent=friends_consent,
                marketing_consent=False,
            )
        )
        if token is not None:
            db_session.add(
                UserIdentity(
                    user_id=user.id,
                    provider="KAKAO",
                    access_token_enc=encrypt_token(token),
                    token_expires_at=token_expires_at,
                )
            )
        db_session.commit()
        return user

    return _factory


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(str(user.id))
        return {"Authorization": f"Bearer {token.token}"}

    return _headers


@pytest.fixture
def future_time() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=3)


class RecordingDispatcher:
    """실제 전송 없이 전달된 토큰과 템플릿만 기록한다."""

    def __init__(self) -> None:
        self.calls: list[tuple[dict[int, str], object]] = []

    def send_to_memo(self, participant_tokens, content):
        self.calls.append((dict(participant_tokens), content))
        future: Future = Future()
        future.set_result(
            DispatchResult(
                success=bool(participant_tokens),
                sent_count=len(participant_tokens),
                total_count=len(participant_tokens),
                message="recorded",
            )
        )
        return future


@pytest.fixture
def recording_dispatcher(monkeypatch):
    dispatcher = RecordingDispatcher()
    monkeypatch.setattr(kakao_notify_service, "get_dispatcher", lambda: dispatcher)
    return dispatcher


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def make_meeting(db_session):
    def _factory(
        host: User,
        invitees: tuple[User, ...] | list[User] = (),
        *,
        title: str = "주말 브런치",
        location_name: str | None = "강남역",
        meeting_time: datetime | None = None,
        max_participants: int = 10,
    ) -> Meeting:
        meeting = Meeting(
            host_id=host.id,
            title=title,
            meeting_time=meeting_time or datetime(2030, 8, 20, 5, 0),
            max_participants=max_participants,
            status="INVITING",
            location_name=location_name,
        )
        meeting.participants.append(MeetingParticipant(user_id=host.id, role="HOST", response="ACCEPTED"))
        for invitee in invitees:
            meeting.participants.append(
                MeetingParticipant(user_id=invitee.id, role="PARTICIPANT", response="INVITED")
            )
        db_session.add(meeting)
        db_session.commit()
        return meeting

    return _factory


@pytest.fixture
def kakao_api():
    """토큰별로 응답 상태를 정할 수 있는 가짜 카카오 메모 API."""

    class _FakeKakaoApi:
        def __init__(self) -> None:
            self.failing_tokens: set[str] = set()
            self.requests: list[httpx.Request] = []

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            token = request.headers["Authorization"].removeprefix("Bearer ")
            if token in self.failing_tokens:
                return httpx.Response(401, json={"code": -401, "msg": "this access token does not exist"})
            return httpx.Response(200, json={"result_code": 0})

    return _FakeKakaoApi()


@pytest.fixture
def memo_dispatcher(kakao_api, executor):
    client = KakaoMemoClient(
        memo_url="https://kapi.test/v2/api/talk/memo/default/send",
        client=httpx.Client(transport=httpx.MockTransport(kakao_api)),
    )
    yield KakaoMemoDispatcher(client, executor=executor)
    client.close()
