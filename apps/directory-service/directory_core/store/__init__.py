"""Directory store package with public store helpers."""

from .directory_store import (
    DirectoryStore,
    get_directory_store,
    reset_directory_store_for_tests,
)
from .entities import BAND, COMMISSION, DEPENDENTS, DISTRICT, ENTITIES, GROUP, MEMBER, dependents_of
from .state import DirectorySnapshot, EntityStatus

__all__ = [
    "DirectoryStore",
    "get_directory_store",
    "reset_directory_store_for_tests",
    "DirectorySnapshot",
    "EntityStatus",
    "COMMISSION",
    "DISTRICT",
    "GROUP",
    "BAND",
    "MEMBER",
    "ENTITIES",
    "DEPENDENTS",
    "dependents_of",
]
