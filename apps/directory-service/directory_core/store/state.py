from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from directory_core.db import schemas


@dataclass(slots=True)
class EntityStatus:
    """Loading/error slot owned by a single entity collection."""

    loading: bool = False
    error: Optional[str] = None
    # ordering stamp of the last error write, used to pick the latest error across slots
    error_seq: int = 0


@dataclass(frozen=True, slots=True)
class DirectorySnapshot:
    commissions: tuple[schemas.Commission, ...] = ()
    districts: tuple[schemas.District, ...] = ()
    groups: tuple[schemas.Group, ...] = ()
    bands: tuple[schemas.Band, ...] = ()
    members: tuple[schemas.Member, ...] = ()
    statuses: Mapping[str, EntityStatus] = field(default_factory=dict)
    is_loading: bool = False
    error: Optional[str] = None
