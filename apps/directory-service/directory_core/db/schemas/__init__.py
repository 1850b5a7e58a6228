"""
Pydantic schemas for directory records.

Read models carry the denormalized parent fields; ``*Create`` models are
insert payloads and ``*Update`` models describe partial updates through the
fields the caller explicitly sets.
"""

from .directory import (
    Commission,
    CommissionCreate,
    CommissionUpdate,
    District,
    DistrictCreate,
    DistrictUpdate,
    Group,
    GroupCreate,
    GroupUpdate,
    Band,
    BandCreate,
    BandUpdate,
    Member,
    MemberCreate,
    MemberUpdate,
)

__all__ = [
    "Commission",
    "CommissionCreate",
    "CommissionUpdate",
    "District",
    "DistrictCreate",
    "DistrictUpdate",
    "Group",
    "GroupCreate",
    "GroupUpdate",
    "Band",
    "BandCreate",
    "BandUpdate",
    "Member",
    "MemberCreate",
    "MemberUpdate",
]
