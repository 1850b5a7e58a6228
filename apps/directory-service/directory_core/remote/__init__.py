"""Remote data-store backends with environment-driven selection."""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional

from .base import Join, RemoteStore, RemoteStoreError, Row
from .postgrest_store import PostgrestRemoteStore
from .sql_store import SqlRemoteStore

logger = logging.getLogger(__name__)

BACKEND_SQL = "sql"
BACKEND_POSTGREST = "postgrest"
_DEFAULT_TIMEOUT_SECONDS = 8.0


@dataclass
class RemoteStoreConfig:
    backend: str
    url: Optional[str] = None
    api_key: Optional[str] = None
    schema: str = "public"
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "RemoteStoreConfig":
        backend = (os.getenv("DIRECTORY_BACKEND") or BACKEND_SQL).strip().lower()
        timeout_raw = os.getenv("DIRECTORY_REMOTE_TIMEOUT")
        try:
            timeout_seconds = max(1.0, float(timeout_raw)) if timeout_raw else _DEFAULT_TIMEOUT_SECONDS
        except ValueError:
            logger.warning("Invalid DIRECTORY_REMOTE_TIMEOUT '%s'; using %.1fs", timeout_raw, _DEFAULT_TIMEOUT_SECONDS)
            timeout_seconds = _DEFAULT_TIMEOUT_SECONDS

        if backend in {"postgrest", "supabase"}:
            return cls(
                backend=BACKEND_POSTGREST,
                url=(os.getenv("SUPABASE_URL") or "").strip() or None,
                api_key=(os.getenv("SUPABASE_KEY") or "").strip() or None,
                schema=(os.getenv("SUPABASE_SCHEMA") or "public").strip() or "public",
                timeout_seconds=timeout_seconds,
            )
        if backend not in {BACKEND_SQL, "sqlalchemy", "database", ""}:
            logger.warning("Unknown DIRECTORY_BACKEND '%s'; using the SQL backend.", backend)
        return cls(backend=BACKEND_SQL, timeout_seconds=timeout_seconds)

    @property
    def configured(self) -> bool:
        if self.backend == BACKEND_POSTGREST:
            return bool(self.url and self.api_key)
        return True


def build_remote_store(config: RemoteStoreConfig) -> RemoteStore:
    if config.backend == BACKEND_POSTGREST:
        if not config.configured:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set for the postgrest backend")
        return PostgrestRemoteStore(
            config.url,
            config.api_key,
            schema=config.schema,
            timeout=(3, config.timeout_seconds),
        )
    from directory_core.db.database import get_engine

    return SqlRemoteStore(get_engine())


_remote_store: Optional[RemoteStore] = None
_remote_lock = threading.Lock()


def get_remote_store() -> RemoteStore:
    """Return the process-wide remote store, building it from the environment once."""
    global _remote_store
    if _remote_store is None:
        with _remote_lock:
            if _remote_store is None:
                _remote_store = build_remote_store(RemoteStoreConfig.from_env())
    return _remote_store


def reset_remote_store_for_tests() -> None:
    global _remote_store
    with _remote_lock:
        _remote_store = None


__all__ = [
    "BACKEND_SQL",
    "BACKEND_POSTGREST",
    "Join",
    "RemoteStore",
    "RemoteStoreError",
    "Row",
    "RemoteStoreConfig",
    "PostgrestRemoteStore",
    "SqlRemoteStore",
    "build_remote_store",
    "get_remote_store",
    "reset_remote_store_for_tests",
]
