import sys
import time
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from passlib.context import CryptContext
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db import session as session_module
from app.main import create_app
from app.routers.auth import create_access_token

# Import models so that they are registered in Base.metadata before create_all.
from app.models.user import User, UserRole  # noqa: F401
from app.models.quiz import Quiz, Question  # noqa: F401
from app.models.attempt import QuizAttempt  # noqa: F401
from app.models.follow import InstructorFollow  # noqa: F401
from app.models.security_audit import SecurityAuditEvent  # noqa: F401


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}

    def ping(self):
        return True

    def _now(self) -> float:
        return time.time()

    def _get_entry(self, key: str):
        v = self._data.get(key)
        if not v:
            return None
        value, exp = v
        if exp is not None and exp <= self._now():
            self._data.pop(key, None)
            return None
        return value, exp

    def get(self, key: str):
        entry = self._get_entry(key)
        return entry[0] if entry else None

    def incr(self, key: str):
        cur = self.get(key)
        n = int(cur or 0) + 1
        _, exp = self._data.get(key, ("", None))
        self._data[key] = (str(n), exp)
        return n

    def expire(self, key: str, seconds: int):
        entry = self._get_entry(key)
        if not entry:
            return False
        value, _ = entry
        self._data[key] = (value, self._now() + int(seconds))
        return True

    def ttl(self, key: str):
        entry = self._get_entry(key)
        if not entry:
            return -2
        _, exp = entry
        if exp is None:
            return -1
        return max(0, int(exp - self._now()))

    def flushall(self):
        self._data.clear()


# SQLite in-memory database shared by every connection, patched in at import
# time so anything importing app.db.session.SessionLocal gets it.
_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(bind=_engine)
session_module.engine = _engine
session_module.SessionLocal = session_module.sessionmaker(autocommit=False, autoflush=False, bind=_engine)


_mem_redis = _MemoryRedis()
import app.core.redis_client as redis_client_module

redis_client_module.get_redis = lambda: _mem_redis

import app.core.rate_limit as rate_limit_module
rate_limit_module.get_redis = lambda: _mem_redis

import app.routers.health as health_router_module
health_router_module.get_redis = lambda: _mem_redis


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
_PASSWORD_HASH = pwd_context.hash("testpass123")


@pytest.fixture(scope="session")
def client():
    app = create_app()

    def _get_db_override():
        db = session_module.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[session_module.get_db] = _get_db_override
    return TestClient(app)


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    _mem_redis.flushall()
    yield


@pytest.fixture()
def db():
    with session_module.SessionLocal() as session:
        yield session


@pytest.fixture()
def make_user():
    """Create a user straight in the DB; returns (user_id, auth headers)."""

    def _make(role: UserRole = UserRole.learner, name: str | None = None) -> tuple[uuid.UUID, dict[str, str]]:
        with session_module.SessionLocal() as db:
            user = User(
                name=name or f"{role.value}_{uuid.uuid4().hex[:8]}",
                role=role,
                password_hash=_PASSWORD_HASH,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            token = create_access_token(user_id=str(user.id), role=user.role.value)
            return user.id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def instructor(make_user):
    return make_user(UserRole.instructor)


@pytest.fixture()
def learner(make_user):
    return make_user(UserRole.learner)


@pytest.fixture()
def create_quiz(client):
    def _create(headers: dict[str, str], **overrides) -> dict:
        body = {
            "title": "Fractions",
            "description": "Basic fractions",
            "isActive": True,
            "questions": [
                {"prompt": "1/2 + 1/2 = ?", "correctAnswer": "1"},
                {"prompt": "1/4 * 2 = ?", "correctAnswer": "1/2", "explanation": "halves"},
            ],
        }
        body.update(overrides)
        r = client.post("/api/quizzes", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()

    return _create
