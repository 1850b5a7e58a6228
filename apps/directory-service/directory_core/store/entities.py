"""
Per-entity mapping between remote rows and directory records.

Each entity is described once: which table it lives in, which parent rows are
joined in for the denormalized name fields, how a row becomes a record and
which columns callers may write. The dependency graph lists, per entity, the
collections whose contents can change when a row of that entity is deleted.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from directory_core.db import schemas
from directory_core.remote.base import Join, Row

COMMISSION = "commission"
DISTRICT = "district"
GROUP = "group"
BAND = "band"
MEMBER = "member"

ENTITIES = (COMMISSION, DISTRICT, GROUP, BAND, MEMBER)

BAND_MEMBER_TABLE = "band_member"


@dataclass(frozen=True)
class EntitySpec:
    name: str
    table: str
    collection: str
    joins: tuple[Join, ...]
    fields: tuple[str, ...]
    to_record: Callable[[Row], BaseModel]
    order_by: Optional[str] = "created_at"


def _parent(row: Row, table: str) -> Mapping[str, Any]:
    parent = row.get(table)
    return parent if isinstance(parent, Mapping) else {}


def _parent_id(row: Row, table: str) -> Optional[str]:
    # a dangling foreign key keeps its id even though the parent row is gone
    return _parent(row, table).get("id") or row.get(f"{table}_id")


def commission_from_row(row: Row) -> schemas.Commission:
    return schemas.Commission(
        id=row["id"],
        name_ar=row.get("name_ar"),
        name_en=row.get("name_en"),
        code=row.get("code"),
        created_at=row.get("created_at"),
    )


def district_from_row(row: Row) -> schemas.District:
    return schemas.District(
        id=row["id"],
        name=row.get("name"),
        code=row.get("code"),
        commission_id=_parent_id(row, COMMISSION),
        commission_name=_parent(row, COMMISSION).get("name_ar"),
        created_at=row.get("created_at"),
    )


def group_from_row(row: Row) -> schemas.Group:
    return schemas.Group(
        id=row["id"],
        name=row.get("name"),
        code=row.get("code"),
        town_name=row.get("town_name"),
        district_id=_parent_id(row, DISTRICT),
        district_name=_parent(row, DISTRICT).get("name"),
        commission_id=_parent_id(row, COMMISSION),
        commission_name=_parent(row, COMMISSION).get("name_ar"),
        created_at=row.get("created_at"),
    )


def band_from_row(row: Row) -> schemas.Band:
    group = _parent(row, GROUP)
    return schemas.Band(
        id=row["id"],
        name=row.get("name"),
        code=row.get("code"),
        town_name=row.get("town_name"),
        group_id=_parent_id(row, GROUP),
        # bands show their group by its town name
        group_name=group.get("town_name") or group.get("name"),
        district_id=_parent_id(row, DISTRICT),
        district_name=_parent(row, DISTRICT).get("name"),
        commission_id=_parent_id(row, COMMISSION),
        commission_name=_parent(row, COMMISSION).get("name_ar"),
        created_at=row.get("created_at"),
    )


def member_from_row(row: Row) -> schemas.Member:
    return schemas.Member(
        id=row["id"],
        name=row.get("name"),
        code=row.get("code"),
        civil_id=row.get("civil_id"),
        phone_number=row.get("phone_number"),
        band_ids=frozenset(row.get("band_ids") or ()),
        created_at=row.get("created_at"),
    )


_COMMISSION_JOIN = Join(COMMISSION, ("id", "name_ar"))
_DISTRICT_JOIN = Join(DISTRICT, ("id", "name"))
_GROUP_JOIN = Join(GROUP, ("id", "name", "town_name"))

ENTITY_SPECS: dict[str, EntitySpec] = {
    COMMISSION: EntitySpec(
        name=COMMISSION,
        table="commission",
        collection="commissions",
        joins=(),
        fields=("name_ar", "name_en", "code"),
        to_record=commission_from_row,
    ),
    DISTRICT: EntitySpec(
        name=DISTRICT,
        table="district",
        collection="districts",
        joins=(_COMMISSION_JOIN,),
        fields=("name", "code", "commission_id"),
        to_record=district_from_row,
    ),
    GROUP: EntitySpec(
        name=GROUP,
        table="group",
        collection="groups",
        joins=(_COMMISSION_JOIN, _DISTRICT_JOIN),
        fields=("name", "code", "town_name", "district_id", "commission_id"),
        to_record=group_from_row,
    ),
    BAND: EntitySpec(
        name=BAND,
        table="band",
        collection="bands",
        joins=(_DISTRICT_JOIN, _COMMISSION_JOIN, _GROUP_JOIN),
        fields=("name", "code", "town_name", "group_id", "district_id", "commission_id"),
        to_record=band_from_row,
    ),
    MEMBER: EntitySpec(
        name=MEMBER,
        table="member",
        collection="members",
        joins=(),
        fields=("name", "code", "civil_id", "phone_number"),
        to_record=member_from_row,
    ),
}

# entity -> collections whose rows reference it directly
DEPENDENTS: dict[str, tuple[str, ...]] = {
    COMMISSION: (DISTRICT,),
    DISTRICT: (GROUP,),
    GROUP: (BAND,),
    BAND: (MEMBER,),
    MEMBER: (),
}


def get_spec(entity: str) -> EntitySpec:
    try:
        return ENTITY_SPECS[entity]
    except KeyError:
        raise KeyError(f"Unknown directory entity: {entity!r}") from None


def dependents_of(entity: str, *, transitive: bool = False) -> list[str]:
    """Return the entities to refresh after ``entity`` changes structurally.

    Direct mode returns the declared dependents only; transitive mode walks the
    graph breadth-first and returns every reachable entity once.
    """
    get_spec(entity)
    if not transitive:
        return list(DEPENDENTS.get(entity, ()))
    ordered: list[str] = []
    seen = {entity}
    queue = deque(DEPENDENTS.get(entity, ()))
    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        ordered.append(current)
        queue.extend(DEPENDENTS.get(current, ()))
    return ordered


def insert_row(entity: str, payload: BaseModel) -> dict[str, Any]:
    """Build the insert row for a ``*Create`` payload; unset optional fields are left out."""
    spec = get_spec(entity)
    data = payload.model_dump(exclude_none=True)
    return {key: value for key, value in data.items() if key in spec.fields}
