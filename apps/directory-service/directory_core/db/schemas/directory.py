from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class Commission(BaseModel):
    id: str
    name_ar: str | None = None
    name_en: str | None = None
    code: str | None = None
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True, frozen=True)


# create payloads carry whatever the caller supplied; NOT NULL and FK rules are the database's
class CommissionCreate(BaseModel):
    name_ar: str | None = None
    name_en: str | None = None
    code: str | None = None


class CommissionUpdate(BaseModel):
    name_ar: str | None = None
    name_en: str | None = None
    code: str | None = None


class District(BaseModel):
    id: str
    name: str | None = None
    code: str | None = None
    commission_id: str | None = None
    commission_name: str | None = None
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True, frozen=True)


class DistrictCreate(BaseModel):
    name: str | None = None
    code: str | None = None
    commission_id: str | None = None


class DistrictUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    commission_id: str | None = None


class Group(BaseModel):
    id: str
    name: str | None = None
    code: str | None = None
    town_name: str | None = None
    district_id: str | None = None
    district_name: str | None = None
    commission_id: str | None = None
    commission_name: str | None = None
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True, frozen=True)


class GroupCreate(BaseModel):
    name: str | None = None
    code: str | None = None
    town_name: str | None = None
    district_id: str | None = None
    commission_id: str | None = None


class GroupUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    town_name: str | None = None
    district_id: str | None = None
    commission_id: str | None = None


class Band(BaseModel):
    id: str
    name: str | None = None
    code: str | None = None
    town_name: str | None = None
    group_id: str | None = None
    group_name: str | None = None
    district_id: str | None = None
    district_name: str | None = None
    commission_id: str | None = None
    commission_name: str | None = None
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True, frozen=True)


class BandCreate(BaseModel):
    name: str | None = None
    code: str | None = None
    town_name: str | None = None
    group_id: str | None = None
    district_id: str | None = None
    commission_id: str | None = None


class BandUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    town_name: str | None = None
    group_id: str | None = None
    district_id: str | None = None
    commission_id: str | None = None


class Member(BaseModel):
    id: str
    name: str | None = None
    code: str | None = None
    civil_id: str | None = None
    phone_number: str | None = None
    band_ids: frozenset[str] = Field(default_factory=frozenset)
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True, frozen=True)


class MemberCreate(BaseModel):
    name: str | None = None
    code: str | None = None
    civil_id: str | None = None
    phone_number: str | None = None
    band_ids: list[str] = Field(default_factory=list)


class MemberUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    civil_id: str | None = None
    phone_number: str | None = None
    # None/unset leaves memberships alone; an explicit [] removes them all
    band_ids: list[str] | None = None
