"""
Read-side helpers over store collections: search, cascading selects, filters
and dashboard totals. All functions are pure and work on any iterable of
records, so they can be applied to a live store or to a snapshot.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence, TypeVar

from directory_core.db import schemas
from directory_core.store.entities import BAND, COMMISSION, DISTRICT, GROUP, MEMBER
from directory_core.store.state import DirectorySnapshot

T = TypeVar("T")

SEARCH_KEYS: dict[str, tuple[str, ...]] = {
    COMMISSION: ("name_ar", "name_en", "code"),
    DISTRICT: ("name", "code", "commission_name"),
    GROUP: ("name", "id", "town_name", "district_name", "commission_name"),
    BAND: ("name", "code", "group_name", "district_name", "commission_name"),
    MEMBER: ("name", "code", "civil_id", "phone_number"),
}


def search(records: Iterable[T], text: Optional[str], keys: Sequence[str]) -> list[T]:
    """Case-insensitive substring match of ``text`` against any of ``keys``."""
    items = list(records)
    needle = (text or "").strip().lower()
    if not needle:
        return items
    matched = []
    for record in items:
        for key in keys:
            value = getattr(record, key, None)
            if value is not None and needle in str(value).lower():
                matched.append(record)
                break
    return matched


def search_entity(entity: str, records: Iterable[T], text: Optional[str]) -> list[T]:
    return search(records, text, SEARCH_KEYS[entity])


def districts_for_commission(
    districts: Iterable[schemas.District], commission_id: Optional[str]
) -> list[schemas.District]:
    if not commission_id:
        return list(districts)
    return [d for d in districts if d.commission_id == commission_id]


def groups_for_district(groups: Iterable[schemas.Group], district_id: Optional[str]) -> list[schemas.Group]:
    if not district_id:
        return list(groups)
    return [g for g in groups if g.district_id == district_id]


def filter_groups(
    groups: Iterable[schemas.Group],
    districts: Iterable[schemas.District],
    *,
    commission_id: Optional[str] = None,
    district_id: Optional[str] = None,
) -> list[schemas.Group]:
    """Filter groups the way the groups page does.

    The commission filter goes through the group's district, so a group whose
    own commission column is stale still lands under its district's commission.
    """
    filtered = list(groups)
    if commission_id:
        district_commission = {d.id: d.commission_id for d in districts}
        filtered = [g for g in filtered if district_commission.get(g.district_id) == commission_id]
    if district_id:
        filtered = [g for g in filtered if g.district_id == district_id]
    return filtered


def filter_bands(
    bands: Iterable[schemas.Band],
    *,
    commission_id: Optional[str] = None,
    district_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> list[schemas.Band]:
    filtered = list(bands)
    if commission_id:
        filtered = [b for b in filtered if b.commission_id == commission_id]
    if district_id:
        filtered = [b for b in filtered if b.district_id == district_id]
    if group_id:
        filtered = [b for b in filtered if b.group_id == group_id]
    return filtered


def members_of_band(members: Iterable[schemas.Member], band_id: str) -> list[schemas.Member]:
    return [m for m in members if band_id in m.band_ids]


def bands_of_member(bands: Iterable[schemas.Band], member: schemas.Member) -> list[schemas.Band]:
    """Bands the member belongs to; ids without a loaded band are skipped."""
    return [b for b in bands if b.id in member.band_ids]


def directory_counts(snapshot: DirectorySnapshot) -> dict[str, int]:
    """Dashboard totals per entity."""
    return {
        COMMISSION: len(snapshot.commissions),
        DISTRICT: len(snapshot.districts),
        GROUP: len(snapshot.groups),
        BAND: len(snapshot.bands),
        MEMBER: len(snapshot.members),
    }
