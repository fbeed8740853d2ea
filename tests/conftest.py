
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from auth_service.api.dependencies import get_code_store, get_email_service
from auth_service.core.auth import create_token_pair, get_password_hash
from auth_service.core.code_store import VerificationOutcome
from auth_service.core.database import Base, get_db
from auth_service.main import app
from auth_service.models.user import User
from auth_service.schemas.user import UserRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class InMemoryCodeStore:
    """Expiring store double with the same contract as RedisCodeStore"""

    def __init__(self):
        self.now = 0.0
        self.entries = {}

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _live(self, key):
        entry = self.entries.get(key)
        if entry is None:
            return None
        if entry["expires_at"] <= self.now:
            del self.entries[key]
            return None
        return entry

    def set(self, key, code, ttl_seconds):
        self.entries[key] = {"code": code, "attempts": 0,
                             "expires_at": self.now + ttl_seconds}

    def get(self, key):
        entry = self._live(key)
        if entry is None:
            return None
        return {"code": entry["code"], "attempts": entry["attempts"]}

    def ttl(self, key):
        entry = self._live(key)
        return 0 if entry is None else int(entry["expires_at"] - self.now)

    def delete(self, key):
        self.entries.pop(key, None)

    def consume(self, key, code, max_attempts):
        entry = self._live(key)
        if entry is None:
            return VerificationOutcome.missing
        if entry["code"] == code:
            del self.entries[key]
            return VerificationOutcome.consumed
        entry["attempts"] += 1
        if entry["attempts"] >= max_attempts:
            del self.entries[key]
            return VerificationOutcome.locked
        return VerificationOutcome.mismatch


class RecordingEmailService:
    """Keeps sent codes in an outbox; set fail=True to simulate a dead mail service"""

    def __init__(self):
        self.outbox = []
        self.fail = False

    async def send_verification_code(self, email, code, purpose, ttl_seconds=180):
        if self.fail:
            return {"success": False, "message": "mail service down"}
        self.outbox.append({"email": email, "code": code, "purpose": purpose})
        return {"success": True, "message": "sent"}

    def last_code(self, email):
        for message in reversed(self.outbox):
            if message["email"] == email:
                return message["code"]
        return None


@pytest.fixture
def code_store():
    return InMemoryCodeStore()


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session, code_store, email_service):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_code_store] = lambda: code_store
    app.dependency_overrides[get_email_service] = lambda: email_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(email="user@example.com", password="Passw0rd!",
                   role=UserRole.user, is_confirmed=True):
        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_confirmed=is_confirmed,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


def auth_headers(user) -> dict:
    tokens = create_token_pair(str(user.id), str(user.email), user.role.value)
    return {"Authorization": f"Bearer {tokens['access_token']}"}
