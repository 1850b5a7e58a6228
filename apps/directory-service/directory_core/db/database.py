"""
Database engine management for the relational directory backend.

Builds the SQLAlchemy engine from environment configuration with a test
fallback (SQLite in-memory) and enables foreign-key enforcement on SQLite so
parent deletes cascade the same way they do on PostgreSQL.
"""
import os
import sys
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

IN_MEMORY_SQLITE_URL = "sqlite+pysqlite:///:memory:"

_engine: Optional[Engine] = None


def _get_database_url() -> Optional[str]:
    # If DATABASE_URL is explicitly set, use it
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    # Otherwise, generate from individual components (all must be set)
    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")

    if not all([db_user, db_password, db_host, db_port, db_name]):
        return None

    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _missing_database_vars() -> list[str]:
    missing = []
    for var in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_DB"):
        if not os.getenv(var):
            missing.append(var)
    return missing


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while an individual test is running,
    so also look for the pytest package in ``sys.modules``. ``PYTEST_RUNNING=1``
    forces the check on.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    if "pytest" in sys.modules:
        return True
    return False


def resolve_database_url() -> str:
    """Return the URL the shared engine should bind to.

    Override order:
    1. ``DIRECTORY_TEST_DB`` if set.
    2. ``TEST_DATABASE_URL`` (set by fixtures that provide a real database).
    3. In-memory SQLite while running under pytest.
    4. ``DATABASE_URL`` or the POSTGRES_* components.
    """
    explicit_test_db = os.getenv("DIRECTORY_TEST_DB")
    if explicit_test_db:
        return explicit_test_db
    explicit_e2e_db = os.getenv("TEST_DATABASE_URL")
    if explicit_e2e_db:
        return explicit_e2e_db
    if _is_pytest_runtime():
        return IN_MEMORY_SQLITE_URL
    url = _get_database_url()
    if url is None:
        raise ValueError(
            f"Missing required database environment variables: {', '.join(_missing_database_vars())}"
        )
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # pragma: no cover - driver hook
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_directory_engine(url: str) -> Engine:
    """Create an engine for ``url``; SQLite gets FK enforcement and a shared in-memory pool."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            # StaticPool so the schema persists across connections
            kwargs["poolclass"] = StaticPool
        eng = create_engine(url, **kwargs)
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
        return eng
    return create_engine(url, pool_pre_ping=True)


def init_schema(bind: Engine) -> None:
    """Create all directory tables that do not exist yet."""
    from directory_core.db import models  # local import to avoid circular import at module load
    models.Base.metadata.create_all(bind=bind)


def get_engine() -> Engine:
    """Return the shared engine, creating it on first use.

    In-memory SQLite databases get their schema eagerly; nothing else would
    ever create it.
    """
    global _engine
    if _engine is None:
        url = resolve_database_url()
        _engine = create_directory_engine(url)
        if url.startswith("sqlite") and ":memory:" in url:
            init_schema(_engine)
    return _engine


def reset_engine_for_tests() -> None:
    """Dispose of the shared engine so the next call rebuilds it."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
