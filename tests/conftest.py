# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from faker import Faker
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from dinnerpair.infrastructure.db.session import Base
from dinnerpair.infrastructure.models import (
    Group, Member, GroupMember, Venue, Invite, PairingEvent, Match, MatchGuest,
)

FAKE = Faker()

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def make_group(db_session):
    """
    Create a group with `size` members joined one second apart, so join
    order is the creation order. Returns (group, [member ids]).
    """
    async def _make(size: int, city: str = "Charlotte", cadence: str = "monthly", name: str = None):
        group = Group(name=name or FAKE.word(), city=city, cadence=cadence)
        db_session.add(group)
        await db_session.flush()

        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        member_ids = []
        for i in range(size):
            member = Member(id=f"{group.id[:8]}-m{i}", display_name=FAKE.name())
            db_session.add(member)
            db_session.add(GroupMember(group_id=group.id, member_id=member.id, joined_at=start + timedelta(seconds=i)))
            member_ids.append(member.id)
        await db_session.commit()
        return group, member_ids

    return _make


@pytest.fixture
def make_venues(db_session):
    async def _make(count: int, city: str = "Charlotte"):
        venues = [Venue(id=f"{city.lower()}-v{i}", name=f"{FAKE.company()} {i}", city=city) for i in range(count)]
        db_session.add_all(venues)
        await db_session.commit()
        return [v.id for v in venues]

    return _make


@pytest.fixture
def make_match(db_session):
    """
    A stored event with one match for the given guests, invites pending.
    Returns (event_id, match_id).
    """
    async def _make(group_id: str, guest_ids, scheduled_date, venue_id: str = None):
        event = PairingEvent(group_id=group_id, scheduled_date=scheduled_date)
        db_session.add(event)
        await db_session.flush()
        match = Match(event_id=event.id, venue_id=venue_id, status="pending")
        db_session.add(match)
        await db_session.flush()
        for gid in guest_ids:
            db_session.add(MatchGuest(match_id=match.id, member_id=gid))
            db_session.add(Invite(event_id=event.id, member_id=gid, status="pending"))
        await db_session.commit()
        return event.id, match.id

    return _make
