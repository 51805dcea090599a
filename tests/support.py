"""Shared builders for tests: fake clock, in-memory database, users and a wired app."""

import unittest
from collections.abc import Generator
from datetime import UTC, datetime, timedelta

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import get_db
from app.core.roles import Role
from app.main import create_app
from app.models import Base, User
from app.services.revocation import RevocationRegistry
from app.services.tokens import TokenService
from app.services.users import SqlUserStore

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"
TEST_PASSWORD = "correct-horse-battery"
API = "/api/v1"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with all tables, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_user(
    db: Session,
    username: str,
    role: Role = Role.PASSENGER,
    password: str = TEST_PASSWORD,
    is_active: bool = True,
) -> User:
    user = SqlUserStore(db).create(
        username, f"{username}@example.com", password, role, rounds=4
    )
    if not is_active:
        user.is_active = False
        db.commit()
    return user


def make_test_app(
    clock: FakeClock | None = None,
    **settings_overrides: object,
) -> tuple[FastAPI, sessionmaker]:
    """Full application against a private SQLite database."""
    settings = Settings(JWT_SECRET=TEST_SECRET, BCRYPT_ROUNDS=4, **settings_overrides)
    clock = clock or FakeClock(datetime.now(UTC))
    app = create_app(
        settings=settings,
        token_service=TokenService(TEST_SECRET, clock=clock),
        revocations=RevocationRegistry(clock=clock),
    )
    session_factory = make_session_factory()

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app, session_factory


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    """Test case with a wired app, a TestClient and login helpers."""

    def setUp(self) -> None:
        self.clock = FakeClock(datetime.now(UTC))
        self.app, self.session_factory = make_test_app(clock=self.clock)
        self.client = TestClient(self.app)

    def add_user(self, username: str, role: Role = Role.PASSENGER, is_active: bool = True) -> User:
        db = self.session_factory()
        try:
            user = make_user(db, username, role, is_active=is_active)
            db.refresh(user)
            db.expunge(user)
            return user
        finally:
            db.close()

    def login(self, username: str, password: str = TEST_PASSWORD) -> dict:
        r = self.client.post(f"{API}/auth/login", json={"username": username, "password": password})
        self.assertEqual(r.status_code, 200, r.text)
        return r.json()

    def auth_headers(self, username: str) -> dict[str, str]:
        return bearer(self.login(username)["access_token"])
