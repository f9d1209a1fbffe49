"""
Fixtures shared by the service and API tests.

Each test runs against a fresh SQLite file database: the schema is
created before the test and dropped after it.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from admin_ledger.main import app
from admin_ledger.models.base import Base, get_db, engine_options
from admin_ledger.models.enums import UserRole
from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.balance_service import BalanceMutationService
from admin_ledger.services.user_directory import UserDirectory


# A file database rather than :memory: so that the concurrency
# tests can open one connection per thread on the same data.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    **engine_options(TEST_DATABASE_URL),
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

ADMIN_ID = "admin-1"


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """For tests that need one session per thread."""
    return TestSessionLocal


@pytest.fixture
def db_session():
    """Session for calling the services directly."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def admin(db_session):
    """An active admin profile acting in the tests."""
    user = UserDirectory(db_session).create_user(
        email="admin@ledger.test",
        display_name="Admin One",
        role=UserRole.ADMIN,
        user_id=ADMIN_ID,
    )
    db_session.commit()
    return user


@pytest.fixture
def make_account(db_session, admin):
    """
    Factory: provision a user and account, optionally funded.

    Funding goes through the balance mutation service so that the
    opening balance is part of the audited history.
    """
    def _make(user_id, balance="0.00", frozen=False, currency="USD"):
        UserDirectory(db_session).create_user(
            email=f"{user_id}@ledger.test",
            display_name=user_id.title(),
            user_id=user_id,
        )
        AccountStore(db_session).open(user_id, currency)
        db_session.commit()

        service = BalanceMutationService(db_session)
        if Decimal(balance) != 0:
            service.set_balance(admin.id, user_id, Decimal(balance))
        if frozen:
            service.set_frozen(admin.id, user_id, True)
        return AccountStore(db_session).get(user_id)

    return _make


@pytest.fixture
def client(db_session):
    """
    HTTP client bound to the test session.

    Requests and the assertions made through db_session see the
    same data, since get_db is swapped for that session.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
