"""
Pytest configuration and shared fixtures.

Repository and flow tests run against in-memory SQLite; outbound email is
captured by a recording notifier.
"""

import os
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from app.application.services.auth_service import AuthService  # noqa: E402
from app.application.services.token_service import TokenService  # noqa: E402
from app.config import Settings, get_settings  # noqa: E402
from app.core.security import PasswordHasher  # noqa: E402
from app.domain.models.user import User  # noqa: E402
from app.infrastructure.database import Base, get_db  # noqa: E402
from app.infrastructure.mailer import NotificationError  # noqa: E402
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository  # noqa: E402

CODE_PATTERN = re.compile(r"code=([A-Za-z0-9]+)")


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")


class RecordingNotifier:
    """Captures outbound mail; set `fail = True` to simulate an SMTP outage."""

    def __init__(self):
        self.sent: List[dict] = []
        self.fail = False

    def send(self, to_address, to_name, subject, html_body, text_body=None) -> None:
        if self.fail:
            raise NotificationError("smtp unavailable")
        self.sent.append(
            {
                "to": to_address,
                "name": to_name,
                "subject": subject,
                "html": html_body,
                "text": text_body,
            }
        )

    def last_code(self) -> Optional[str]:
        for message in reversed(self.sent):
            match = CODE_PATTERN.search(message["text"] or message["html"])
            if match:
                return match.group(1)
        return None


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        SECRET_KEY="test-secret",
        BCRYPT_ROUNDS=4,
        BASE_URL="https://portal.example.com",
        APP_NAME="Test Portal",
        ENVIRONMENT="test",
    )


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def user_repo(db_session) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db_session, User)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_service(user_repo, hasher, token_service, notifier, settings, clock) -> AuthService:
    return AuthService(user_repo, hasher, token_service, notifier, settings, clock=clock)


@pytest.fixture
def client(db_session, settings, notifier, hasher):
    from app.interfaces.deps import get_notifier, get_password_hasher
    from app.main import app

    def override_db():
        yield db_session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
