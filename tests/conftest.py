"""
Shared test fixtures for the Employee Records API tests.
"""
import copy
import os
from datetime import timedelta
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "true"
os.environ["ENABLE_RATE_LIMITING"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"

from app.main import app  # noqa: E402
from app.core.database import Base, get_db  # noqa: E402
from app.core.datetime_utils import utcnow  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.auth.models import Admin  # noqa: E402
from app.auth.service import AuthService  # noqa: E402

ADMIN_PASSWORD = "Admin@12345"

BASE_EMPLOYEE_PAYLOAD = {
    "personalInfo": {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane.doe@example.com",
        "phone": "+14155550123",
        "dateOfBirth": "1990-05-15",
        "address": {
            "street": "1 Market St",
            "city": "San Francisco",
            "state": "CA",
            "zipCode": "94105",
            "country": "USA"
        }
    },
    "employment": {
        "department": "Engineering",
        "position": "Software Engineer",
        "level": "Mid",
        "startDate": "2024-01-01",
        "employmentType": "Full-time",
        "status": "Active"
    },
    "compensation": {
        "salary": 85000,
        "currency": "USD",
        "payFrequency": "Monthly",
        "benefits": {"healthInsurance": True, "paidTimeOff": 20}
    }
}


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=None):
        self.now = now or utcnow().replace(microsecond=0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def build_employee_payload(
    personal: Optional[Dict[str, Any]] = None,
    employment: Optional[Dict[str, Any]] = None,
    compensation: Optional[Dict[str, Any]] = None,
    **extra
) -> Dict[str, Any]:
    payload = copy.deepcopy(BASE_EMPLOYEE_PAYLOAD)
    payload["personalInfo"].update(personal or {})
    payload["employment"].update(employment or {})
    payload["compensation"].update(compensation or {})
    payload.update(extra)
    return payload


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admin(db_session):
    admin = Admin(
        username="admin",
        email="admin@example.com",
        password_hash=get_password_hash(ADMIN_PASSWORD),
        role="admin"
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def auth_headers(db_session, admin):
    token = AuthService(db_session).create_token(admin)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def employee_payload():
    """Factory for valid employee payloads with per-section overrides."""
    return build_employee_payload

