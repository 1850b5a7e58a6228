import os

import pytest

# Database selection is driven by these variables; make sure a developer's
# shell environment cannot point the tests at a real database.
_DB_VARS = [
    'DATABASE_URL', 'TEST_DATABASE_URL', 'DIRECTORY_TEST_DB',
    'POSTGRES_USER', 'POSTGRES_PASSWORD', 'POSTGRES_HOST', 'POSTGRES_PORT', 'POSTGRES_DB',
]
_STORE_VARS = [
    'DIRECTORY_BACKEND', 'DIRECTORY_UPDATE_POLICY', 'DIRECTORY_CASCADE_REFRESH',
    'DIRECTORY_REMOTE_TIMEOUT', 'SUPABASE_URL', 'SUPABASE_KEY', 'SUPABASE_SCHEMA',
]

os.environ.setdefault('PYTEST_RUNNING', '1')


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for var in _DB_VARS + _STORE_VARS:
        monkeypatch.delenv(var, raising=False)

    from directory_core.db.database import reset_engine_for_tests
    from directory_core.remote import reset_remote_store_for_tests
    from directory_core.store import reset_directory_store_for_tests
    from directory_core.utils.settings import refresh_store_settings_cache

    reset_engine_for_tests()
    reset_remote_store_for_tests()
    reset_directory_store_for_tests()
    refresh_store_settings_cache()
    yield
    reset_directory_store_for_tests()
    reset_remote_store_for_tests()
    reset_engine_for_tests()
    refresh_store_settings_cache()
