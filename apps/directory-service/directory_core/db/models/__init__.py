"""
SQLAlchemy models for the directory tables.

Exposes `Base`, `now_utc`, `new_id` and the ORM classes for the six tables
the directory store reads and writes.
"""

from .base import Base, now_utc, new_id  # re-export

from .directory import Commission, District, Group, Band, Member, BandMember

__all__ = [
    # base
    "Base",
    "now_utc",
    "new_id",
    # hierarchy
    "Commission",
    "District",
    "Group",
    "Band",
    # members
    "Member",
    "BandMember",
]
