import pytest

from directory_core.db.database import IN_MEMORY_SQLITE_URL, create_directory_engine, init_schema
from directory_core.remote import SqlRemoteStore
from directory_core.store import DirectoryStore
from directory_core.utils.settings import StoreSettings


@pytest.fixture
def engine():
    eng = create_directory_engine(IN_MEMORY_SQLITE_URL)
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def sql_remote(engine):
    return SqlRemoteStore(engine)


@pytest.fixture
def sql_store(sql_remote):
    return DirectoryStore(sql_remote, StoreSettings())
