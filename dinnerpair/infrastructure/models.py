# dinnerpair/infrastructure/models.py
"""
SQLAlchemy ORM models for dinner pairing.

Ids are opaque strings; the default is a uuid4 in text form.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from dinnerpair.infrastructure.db.session import Base


def now():
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Group(Base):
    __tablename__ = "groups"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    city = Column(String(255), nullable=True)
    cadence = Column(String(32), nullable=True)  # biweekly | monthly | quarterly
    created_at = Column(DateTime(timezone=True), default=now)

    # Relationships
    members = relationship("GroupMember", back_populates="group")
    events = relationship("PairingEvent", back_populates="group")


class Member(Base):
    __tablename__ = "members"

    id = Column(String(64), primary_key=True, default=new_id)
    display_name = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now)

    group_memberships = relationship("GroupMember", back_populates="member")


class GroupMember(Base):
    __tablename__ = "group_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String(64), ForeignKey("groups.id"), index=True, nullable=False)
    member_id = Column(String(64), ForeignKey("members.id"), index=True, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=now)

    __table_args__ = (
        UniqueConstraint("group_id", "member_id", name="uq_group_member"),
    )

    # Relationships
    group = relationship("Group", back_populates="members")
    member = relationship("Member", back_populates="group_memberships")


class Venue(Base):
    __tablename__ = "venues"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    city = Column(String(255), nullable=False, index=True)


class PairingEvent(Base):
    __tablename__ = "pairing_events"

    id = Column(String(64), primary_key=True, default=new_id)
    group_id = Column(String(64), ForeignKey("groups.id"), index=True, nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=now)

    # Relationships
    group = relationship("Group", back_populates="events")
    matches = relationship("Match", back_populates="event")


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(64), primary_key=True, default=new_id)
    event_id = Column(String(64), ForeignKey("pairing_events.id"), index=True, nullable=False)
    venue_id = Column(String(64), ForeignKey("venues.id"), index=True, nullable=True)
    position = Column(Integer, default=0, nullable=False)  # creation order within the event
    status = Column(String(32), default="pending", nullable=False)  # pending | confirmed
    confirmed_date = Column(String(10), nullable=True)  # YYYY-MM-DD
    confirmed_slot = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now)

    # Relationships
    event = relationship("PairingEvent", back_populates="matches")
    guests = relationship("MatchGuest", back_populates="match")


class MatchGuest(Base):
    __tablename__ = "match_guests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(String(64), ForeignKey("matches.id"), index=True, nullable=False)
    member_id = Column(String(64), ForeignKey("members.id"), index=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("match_id", "member_id", name="uq_match_guest"),
    )

    match = relationship("Match", back_populates="guests")


class Invite(Base):
    __tablename__ = "invites"

    id = Column(String(64), primary_key=True, default=new_id)
    event_id = Column(String(64), ForeignKey("pairing_events.id"), index=True, nullable=False)
    member_id = Column(String(64), ForeignKey("members.id"), index=True, nullable=False)
    status = Column(String(32), default="pending", nullable=False)  # pending | accepted | declined
    created_at = Column(DateTime(timezone=True), default=now)

    __table_args__ = (
        UniqueConstraint("event_id", "member_id", name="uq_event_invitee"),
    )


class AvailabilitySlot(Base):
    __tablename__ = "availability_slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(String(64), ForeignKey("members.id"), index=True, nullable=False)
    # NULL event_id means standing availability
    event_id = Column(String(64), ForeignKey("pairing_events.id"), index=True, nullable=True)
    available_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time_slot = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now)
