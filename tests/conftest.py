import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventreg.main import app
from eventreg.core.cache import get_otp_store
from eventreg.core.database import Base, get_db
from eventreg.core.mailer import Mailer, get_mailer
from eventreg.core.security import create_access_token, get_password_hash
from eventreg.models.user import User
from eventreg.models.registration import EventRegistration, EventTeam  # noqa: F401
from tests.fakes import InMemoryOTPStore

# In-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Fresh database session for each test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def otp_store():
    return InMemoryOTPStore()


@pytest.fixture
def mailer():
    return MagicMock(spec=Mailer)


@pytest.fixture(scope="function")
def client(db_session, otp_store, mailer):
    """Test client with the database, OTP store and mailer overridden"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_mailer] = lambda: mailer

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def signup_data():
    return {
        "name": "Alice Smith",
        "email": "a@x.com",
        "password": "password123",
        "mobile": "9876543210",
        "university": "NIT Jamshedpur",
        "rollno": "2021UGCS001",
    }


@pytest.fixture
def create_test_user(db_session):
    """Factory fixture creating users directly in the database"""

    def _create_user(
        email="testuser@example.com",
        name="Test User",
        password="TestPassword123",
        confirmed=True,
        role="student",
    ):
        user = User(
            name=name,
            email=email,
            passwordhash=get_password_hash(password),
            mobile="9876543210",
            university="NIT Jamshedpur",
            rollno="2021UGCS001",
            role=role,
            is_email_confirmed=confirmed,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def login_as(client):
    """Put a session cookie for ``user`` on the test client"""

    def _login(user):
        client.cookies.set("jwt", create_access_token(user.email))
        return client

    return _login


@pytest.fixture
def authenticated_client(client, create_test_user, login_as):
    user = create_test_user()
    return login_as(user), user


@pytest.fixture
def admin_client(client, create_test_user, login_as):
    admin = create_test_user(email="admin@example.com", name="Admin", role="admin")
    return login_as(admin), admin
