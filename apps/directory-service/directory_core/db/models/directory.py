from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Text
from .base import Base, now_utc, new_id


class Commission(Base):
    __tablename__ = 'commission'
    id = Column(String(36), primary_key=True, default=new_id)
    name_ar = Column(Text, nullable=False)
    name_en = Column(Text, nullable=True)
    code = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)


class District(Base):
    __tablename__ = 'district'
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    code = Column(String, nullable=True)
    commission_id = Column(String(36), ForeignKey('commission.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('ix_district_commission_id', 'commission_id'),
    )


class Group(Base):
    """A town-level group; ``commission_id`` mirrors the district's commission."""
    __tablename__ = 'group'
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=True)
    code = Column(String, nullable=True)
    town_name = Column(Text, nullable=True)
    district_id = Column(String(36), ForeignKey('district.id', ondelete='CASCADE'), nullable=False)
    commission_id = Column(String(36), ForeignKey('commission.id', ondelete='CASCADE'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('ix_group_district_id', 'district_id'),
    )


class Band(Base):
    __tablename__ = 'band'
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    code = Column(String, nullable=True)
    town_name = Column(Text, nullable=True)
    group_id = Column(String(36), ForeignKey('group.id', ondelete='CASCADE'), nullable=True)
    district_id = Column(String(36), ForeignKey('district.id', ondelete='CASCADE'), nullable=True)
    commission_id = Column(String(36), ForeignKey('commission.id', ondelete='CASCADE'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('ix_band_group_id', 'group_id'),
    )


class Member(Base):
    __tablename__ = 'member'
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    code = Column(String, nullable=True)
    civil_id = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)


class BandMember(Base):
    __tablename__ = 'band_member'
    member_id = Column(String(36), ForeignKey('member.id', ondelete='CASCADE'), primary_key=True)
    band_id = Column(String(36), ForeignKey('band.id', ondelete='CASCADE'), primary_key=True)

    __table_args__ = (
        Index('ix_band_member_band_id', 'band_id'),
    )
