"""Pytest fixtures and configuration for coallytasks tests."""

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from coallytasks.config import Settings
from coallytasks.database.database import Base, set_sqlite_pragmas
from coallytasks.database import models  # noqa: F401
from coallytasks.database.repository import TaskRepository
from coallytasks.database.user_repository import UserRepository
from coallytasks.models.user import User


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def settings():
    """Test settings: in-memory DB, cheap bcrypt cost."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        jwt_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads through a single connection."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    event.listen(engine, "connect", set_sqlite_pragmas)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create a database session for testing."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_repository(db_session: Session):
    return UserRepository(db_session)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


def _make_user(user_repository: UserRepository, email: str) -> User:
    return user_repository.create(
        User(name=email.split("@")[0], email=email, password_hash="not-a-real-hash")
    )


@pytest.fixture
def test_user(user_repository):
    """User that owns the tasks created in repository and service tests."""
    return _make_user(user_repository, "owner@mail.com")


@pytest.fixture
def other_user(user_repository):
    """A second user, for ownership checks."""
    return _make_user(user_repository, "intruder@mail.com")


@pytest.fixture
def test_client(settings, engine):
    """Create a FastAPI test client bound to the in-memory database."""
    from coallytasks.api.app import create_app

    app = create_app(settings, engine=engine)
    with TestClient(app) as client:
        yield client


def register_and_login(client: TestClient, email: str, password: str = "abcde", name: str = "A") -> dict:
    """Register a user and return Authorization headers for it."""
    response = client.post("/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(test_client):
    """Authorization headers for a freshly registered user."""
    return register_and_login(test_client, "a@x.com")


@pytest.fixture
def login_as(test_client):
    """Callable that registers a user by email and returns its Authorization headers."""

    def _login(email: str, password: str = "abcde") -> dict:
        return register_and_login(test_client, email, password=password)

    return _login
