"""Shared test fixtures for all test modules."""

import contextlib
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import paytrack.models  # noqa: F401  registers every table on Base.metadata
from paytrack.core import database as db_module
from paytrack.core.connections import EventType, get_connection_registry
from paytrack.core.database import Base, get_db
from paytrack.core.security import create_access_token, hash_password
from paytrack.main import app
from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.user import User

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

STAFF_PASSWORD = "s3cret-pass"


class FakeRegistry:
    """Stands in for ConnectionRegistry and records every broadcast."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    async def broadcast(self, event_type: EventType | str, data: dict[str, Any]) -> int:
        self.events.append((EventType(event_type).value, data))
        return 1

    def of_type(self, event_type: EventType) -> list[dict[str, Any]]:
        return [data for type_, data in self.events if type_ == event_type.value]


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository and service testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def client(registry):
    """Test client whose publishers broadcast into the fake registry."""
    app.dependency_overrides[get_connection_registry] = lambda: registry
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_connection_registry, None)


@pytest.fixture
def staff_user(db_session: Session) -> User:
    user = User(
        name="Dana Staff",
        email="dana@acme.io",
        password_hash=hash_password(STAFF_PASSWORD),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(staff_user: User) -> dict[str, str]:
    token = create_access_token(str(staff_user.id), staff_user.email, staff_user.role)
    return {"Authorization": f"Bearer {token}"}


def make_customer(db: Session, **overrides: Any) -> Customer:
    """Insert a customer row directly, bypassing the service layer."""
    values: dict[str, Any] = {
        "name": "Ada Lovelace",
        "email": "ada@acme.io",
        "phone": "5551234567",
        "outstanding_amount": Decimal("100.00"),
        "payment_due_date": datetime.now(UTC) + timedelta(days=30),
        "payment_status": PaymentStatus.PENDING.value,
    }
    values.update(overrides)
    customer = Customer(**values)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer
