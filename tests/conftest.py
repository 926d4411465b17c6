import os

# Must be set before anything reads core.config.settings
os.environ["ENV"] = "testing"
os.environ["JWT_SECRET"] = "test-secret-key-for-automated-tests-only-0123456789"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ACCESS_TOKEN_EXPIRE_SECONDS"] = "30"
os.environ["REFRESH_TOKEN_EXPIRE_DAYS"] = "1"
os.environ["REFRESH_REQUIRES_EXPIRED_ACCESS_TOKEN"] = "false"
os.environ["ADMIN_ROLE"] = "Admin"
os.environ["LOG_DIR"] = os.path.join("logs", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.config import settings, JwtConfig
from core.database import Base
from models.users import User
from models.roles import Role
from services.token_service import TokenIssuer, TokenVerifier
from utils.deps import get_db
from utils.hashing import get_password_hash

TEST_PASSWORD = "TestPassword123"

# SYNC SQLite for testing (matches sync service layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client bound to the app, with get_db pointed at the test session.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def jwt_config() -> JwtConfig:
    return JwtConfig.from_settings(settings)


@pytest.fixture
def issuer(jwt_config) -> TokenIssuer:
    return TokenIssuer(jwt_config)


@pytest.fixture
def verifier(jwt_config, issuer) -> TokenVerifier:
    return TokenVerifier(jwt_config, issuer)


def create_user(session: Session, email: str, username: str = "tester", password: str = TEST_PASSWORD) -> User:
    user = User(
        email=email,
        username=username,
        hashed_password=get_password_hash(password)
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def registered_user(session) -> User:
    return create_user(session, "registered@example.com", "registered")


@pytest.fixture
def other_user(session) -> User:
    return create_user(session, "other@example.com", "other")


@pytest.fixture
def admin_user(session) -> User:
    user = create_user(session, "admin@example.com", "admin")
    role = Role(name=settings.ADMIN_ROLE)
    session.add(role)
    user.roles.append(role)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def make_user(session):
    """Factory fixture: make_user(email, username=..., password=...) -> User."""
    def _make(email: str, username: str = "tester", password: str = TEST_PASSWORD) -> User:
        return create_user(session, email, username, password)
    return _make


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def user_headers(registered_user, issuer, session) -> dict:
    return bearer(issuer.issue(registered_user, session).access_token)


@pytest.fixture
def admin_headers(admin_user, issuer, session) -> dict:
    return bearer(issuer.issue(admin_user, session).access_token)
