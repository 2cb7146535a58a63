import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./ledger_dashboard_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-ledger-dashboard")

import pytest
from datetime import date, datetime, timedelta, UTC
import httpx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from ledger_dashboard.config import settings
from ledger_dashboard.core.security import create_access_token, hash_password
from ledger_dashboard.database import get_db
from ledger_dashboard.models import Base, Business, BusinessUser, Contact, Invoice, User
from ledger_dashboard.services.auth_service import login_throttle
from ledger_dashboard.client.http_data_service import HttpDataService
# Import FastAPI app AFTER model imports
from ledger_dashboard.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_EMAIL = "owner@example.com"
OWNER_PASSWORD = "correct-horse-battery"
BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)


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

    login_throttle.reset()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    login_throttle.reset()


@pytest.fixture
def data_service(client):
    """HttpDataService wired to the app in-process (shares the test database)"""
    return HttpDataService(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=app),
    )


def create_test_token(user_id: str, expired: bool = False) -> str:
    """
    Generate JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def make_user(db_session, email: str, password: str = OWNER_PASSWORD) -> User:
    user = User(email=email, password_hash=hash_password(password))
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def test_user(db_session) -> User:
    return make_user(db_session, OWNER_EMAIL)


@pytest.fixture
def other_user(db_session) -> User:
    return make_user(db_session, "stranger@example.com")


@pytest.fixture
def auth_headers(test_user):
    token, _ = create_access_token(test_user.id, test_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(other_user):
    token, _ = create_access_token(other_user.id, other_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def businesses(db_session, test_user) -> dict[str, Business]:
    """
    Three businesses for test_user:
    - acme: OWNER (first membership)
    - globex: ACCOUNTANT
    - initech: deactivated membership
    """
    acme = Business(name="Acme", legal_name="Acme Trading LLC", industry="retail", currency="USD")
    globex = Business(name="Globex", legal_name="Globex Corporation", industry="manufacturing", currency="EUR")
    initech = Business(name="Initech", currency="USD")
    db_session.add_all([acme, globex, initech])
    db_session.commit()

    db_session.add_all(
        [
            BusinessUser(business_id=acme.id, user_id=test_user.id, role="owner",
                         created_at=BASE_TIME, updated_at=BASE_TIME),
            BusinessUser(business_id=globex.id, user_id=test_user.id, role="accountant",
                         created_at=BASE_TIME + timedelta(days=1), updated_at=BASE_TIME),
            BusinessUser(business_id=initech.id, user_id=test_user.id, role="viewer", is_active=False,
                         created_at=BASE_TIME + timedelta(days=2), updated_at=BASE_TIME),
        ]
    )
    db_session.commit()
    return {"acme": acme, "globex": globex, "initech": initech}


@pytest.fixture
def acme_invoices(db_session, businesses) -> list[Invoice]:
    """
    Twelve invoices for acme, created one minute apart (INV-0001 oldest).

    INV-0012 (newest): sent, 100.00 / 40.00 due, due yesterday -> overdue
    INV-0011: paid, 50.00 / 0 due, due yesterday -> not overdue
    INV-0010: labelled "overdue" but due in 30 days -> not overdue
    INV-0001..0009: paid, 10.00 each
    """
    acme = businesses["acme"]
    today = datetime.now(UTC).date()
    company = Contact(business_id=acme.id, company_name="Wayne Enterprises")
    person = Contact(business_id=acme.id, first_name="Jo", last_name="Lee")
    db_session.add_all([company, person])
    db_session.commit()

    invoices = [
        Invoice(
            business_id=acme.id,
            contact_id=company.id,
            invoice_number=f"INV-{n:04d}",
            total_amount=10,
            balance_due=0,
            status="paid",
            invoice_date=date(2026, 1, 1),
            due_date=date(2026, 1, 31),
            created_at=BASE_TIME + timedelta(minutes=n),
            updated_at=BASE_TIME,
        )
        for n in range(1, 10)
    ]
    invoices += [
        Invoice(
            business_id=acme.id, contact_id=person.id, invoice_number="INV-0010",
            total_amount=75, balance_due=75, status="overdue",
            invoice_date=today, due_date=today + timedelta(days=30),
            created_at=BASE_TIME + timedelta(minutes=10), updated_at=BASE_TIME,
        ),
        Invoice(
            business_id=acme.id, contact_id=None, invoice_number="INV-0011",
            total_amount=50, balance_due=0, status="paid",
            invoice_date=today - timedelta(days=30), due_date=today - timedelta(days=1),
            created_at=BASE_TIME + timedelta(minutes=11), updated_at=BASE_TIME,
        ),
        Invoice(
            business_id=acme.id, contact_id=company.id, invoice_number="INV-0012",
            total_amount=100, balance_due=40, status="sent",
            invoice_date=today - timedelta(days=30), due_date=today - timedelta(days=1),
            created_at=BASE_TIME + timedelta(minutes=12), updated_at=BASE_TIME,
        ),
    ]
    db_session.add_all(invoices)
    db_session.commit()
    return invoices
