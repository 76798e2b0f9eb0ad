"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before and dropped
after every test, so no test data persists.
"""

import os

# Must be set before ledger_core is imported: the module-level
# engine in ledger_core.models.base reads it at import time.
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from ledger_core.api.deps import get_ledger
from ledger_core.main import app
from ledger_core.models import Base
from ledger_core.models.base import create_store_engine, get_db
from ledger_core.services.ledger_engine import LedgerEngine


# Use SQLite for tests, no external database needed.
# A file (not :memory:) so that several threads can open
# their own connections to the same database.
engine = create_store_engine(TEST_DATABASE_URL, lock_timeout_ms=5000)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """
    Provide a database session for direct repository testing.

    On SQLite every transaction takes the database write lock,
    so don't combine this fixture with the ledger fixture in
    one test while the session has uncommitted work.
    """
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def ledger():
    """A LedgerEngine bound to the test database."""
    return LedgerEngine(TestSessionLocal)


@pytest.fixture
def audited_ledger():
    """A LedgerEngine that keeps FAILED rows for rejected attempts."""
    return LedgerEngine(TestSessionLocal, record_failed_attempts=True)


@pytest.fixture
def client(ledger):
    """
    Provide a test client with the test database.

    We override the dependencies so the FastAPI app uses
    our test engine and sessions instead of the real database.
    """
    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger] = lambda: ledger
    yield TestClient(app)
    app.dependency_overrides.clear()
