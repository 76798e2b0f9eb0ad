"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. The ledger engine opens its
own sessions from SessionLocal; plain request handlers get
one from get_db().
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from ledger_core.config import get_settings

settings = get_settings()


def create_store_engine(url: str, lock_timeout_ms: int = 5000) -> Engine:
    """
    Build the SQLAlchemy engine for the ledger store.

    pool_pre_ping=True tests connections before using them,
    which handles cases where the database restarted or a
    connection went stale.

    SQLite needs extra wiring to behave like a transactional
    store: foreign keys are off by default, and pysqlite's
    implicit BEGIN is deferred, which lets two writers both
    read a balance before either takes the write lock. We
    take over transaction control and start every transaction
    with BEGIN IMMEDIATE, so writers queue on the database
    lock for at most lock_timeout_ms.
    """
    is_sqlite = url.startswith("sqlite")
    connect_args = {}
    if is_sqlite:
        connect_args = {
            "check_same_thread": False,
            "timeout": lock_timeout_ms / 1000,
        }

    engine = create_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


# --- Engine ---
engine = create_store_engine(settings.DATABASE_URL, settings.LOCK_TIMEOUT_MS)

# --- Session Factory ---
# autocommit=False means we explicitly control when changes
# are saved, which is what all-or-nothing postings need.
# expire_on_commit=False keeps returned records readable
# after the engine has committed and closed its session.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
