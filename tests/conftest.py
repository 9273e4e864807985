import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from app.database import get_db
from app.models.base import Base
from app.config import settings
from app.domain.registry import build_registry
# Import FastAPI app AFTER settings are in place; it imports every model
from app.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def registry():
    return build_registry()


def create_test_token(user_id: int, expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": str(user_id), "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def register_user(client, username: str, company_name: str = "Acme Ltd") -> dict:
    response = client.post(
        "/api/users",
        json={"username": username, "password": "s3cret-pass", "company_name": company_name},
    )
    assert response.status_code == 201, response.text
    return response.json()


def headers_for(user: dict) -> dict:
    return {"Authorization": f"Bearer {create_test_token(user['id'])}"}


@pytest.fixture
def user_a(client):
    return register_user(client, "alice", "Alice Bakery")


@pytest.fixture
def user_b(client):
    return register_user(client, "bob", "Bob Hardware")


@pytest.fixture
def auth_headers(user_a):
    """Authorization headers for user A"""
    return headers_for(user_a)


@pytest.fixture
def user_a_headers(user_a):
    return headers_for(user_a)


@pytest.fixture
def user_b_headers(user_b):
    """Authorization headers for user B"""
    return headers_for(user_b)


@pytest.fixture
def make(client):
    """Create a record over HTTP and return its JSON body"""

    def _make(route: str, headers: dict, **fields) -> dict:
        response = client.post(f"/api/{route}", headers=headers, json=fields)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
