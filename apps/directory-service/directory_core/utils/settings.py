"""Store behaviour settings sourced from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

logger = logging.getLogger(__name__)


class UpdatePolicy(str, Enum):
    """How ``update`` turns a payload into column values.

    The default is EXPLICIT, so ``{"name": ""}`` is sent and clears the column.
    Callers that expect falsy values to be left out of the update (an empty
    ``name`` keeping the stored name) must select DROP_FALSY through
    ``DIRECTORY_UPDATE_POLICY=drop_falsy``.
    """

    # send exactly the fields the caller set, empty strings included
    EXPLICIT = "explicit"
    # legacy console behaviour: falsy values never reach the update payload
    DROP_FALSY = "drop_falsy"


class CascadeRefresh(str, Enum):
    DIRECT = "direct"
    TRANSITIVE = "transitive"


@dataclass(frozen=True)
class StoreSettings:
    update_policy: UpdatePolicy = UpdatePolicy.EXPLICIT
    cascade_refresh: CascadeRefresh = CascadeRefresh.DIRECT

    @classmethod
    def from_env(cls) -> "StoreSettings":
        return cls(
            update_policy=_parse_enum(UpdatePolicy, "DIRECTORY_UPDATE_POLICY", UpdatePolicy.EXPLICIT),
            cascade_refresh=_parse_enum(CascadeRefresh, "DIRECTORY_CASCADE_REFRESH", CascadeRefresh.DIRECT),
        )


def _parse_enum(enum_cls, env_var: str, default):
    raw = os.getenv(env_var)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower().replace("-", "_")
    try:
        return enum_cls(normalized)
    except ValueError:
        logger.warning("Unknown %s '%s'; using '%s'.", env_var, raw, default.value)
        return default


@lru_cache(maxsize=None)
def get_store_settings() -> StoreSettings:
    """Return the cached store settings sourced from the environment."""
    return StoreSettings.from_env()


def refresh_store_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_store_settings.cache_clear()
