# dinnerpair/repositories/pairing_repos.py
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from dinnerpair.infrastructure.models import (
    Group, Member, GroupMember, Venue, PairingEvent, Match, MatchGuest, Invite, AvailabilitySlot,
)

# ----------------------------
# Groups / members / venues
# ----------------------------

async def get_group_repo(db: AsyncSession, group_id: str) -> Optional[Group]:
    result = await db.execute(select(Group).where(Group.id == group_id))
    return result.scalars().first()


async def list_groups_repo(db: AsyncSession) -> List[Group]:
    result = await db.execute(select(Group).order_by(Group.created_at, Group.id))
    return result.scalars().all()


async def list_members_repo(db: AsyncSession, group_id: str) -> List[Member]:
    """
    Members of a group in join order.
    """
    result = await db.execute(
        select(Member)
        .join(GroupMember, GroupMember.member_id == Member.id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at, GroupMember.id)
    )
    return result.scalars().all()


async def list_venues_repo(db: AsyncSession, city: Optional[str]) -> List[Venue]:
    if not city:
        return []
    result = await db.execute(select(Venue).where(Venue.city == city).order_by(Venue.id))
    return result.scalars().all()


# ----------------------------
# History
# ----------------------------

async def list_past_match_guests_repo(db: AsyncSession, group_id: str) -> List[Tuple[str, str]]:
    """
    (match_id, member_id) rows for every match of every event of the group.
    """
    result = await db.execute(
        select(MatchGuest.match_id, MatchGuest.member_id)
        .join(Match, Match.id == MatchGuest.match_id)
        .join(PairingEvent, PairingEvent.id == Match.event_id)
        .where(PairingEvent.group_id == group_id)
        .order_by(MatchGuest.id)
    )
    return [(row.match_id, row.member_id) for row in result.all()]


async def get_last_event_date_repo(db: AsyncSession, group_id: str) -> Optional[date]:
    result = await db.execute(
        select(func.max(PairingEvent.scheduled_date)).where(PairingEvent.group_id == group_id)
    )
    return result.scalar()


# ----------------------------
# Event / match / guests / invites
# ----------------------------

async def create_event_repo(db: AsyncSession, group_id: str, scheduled_date: date) -> PairingEvent:
    event = PairingEvent(group_id=group_id, scheduled_date=scheduled_date)
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


async def get_event_repo(db: AsyncSession, event_id: str) -> Optional[PairingEvent]:
    result = await db.execute(select(PairingEvent).where(PairingEvent.id == event_id))
    return result.scalars().first()


async def create_match_repo(db: AsyncSession, event_id: str, position: int = 0) -> Match:
    match = Match(event_id=event_id, position=position, status="pending")
    db.add(match)
    await db.commit()
    await db.refresh(match)
    return match


async def get_match_repo(db: AsyncSession, match_id: str) -> Optional[Match]:
    result = await db.execute(select(Match).where(Match.id == match_id))
    return result.scalars().first()


async def get_match_confirmation_repo(db: AsyncSession, match_id: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Stored (confirmed_date, confirmed_slot) straight from the table, not from
    an already loaded Match that may predate another writer's commit.
    """
    result = await db.execute(
        select(Match.confirmed_date, Match.confirmed_slot).where(Match.id == match_id)
    )
    row = result.first()
    return (row.confirmed_date, row.confirmed_slot) if row else (None, None)


async def list_event_matches_repo(db: AsyncSession, event_id: str) -> List[Match]:
    result = await db.execute(
        select(Match).where(Match.event_id == event_id).order_by(Match.position, Match.created_at)
    )
    return result.scalars().all()


async def add_match_guests_repo(db: AsyncSession, match_id: str, member_ids: Sequence[str]) -> List[MatchGuest]:
    guests = [MatchGuest(match_id=match_id, member_id=mid) for mid in member_ids]
    db.add_all(guests)
    await db.commit()
    return guests


async def list_match_guest_ids_repo(db: AsyncSession, match_id: str) -> List[str]:
    result = await db.execute(
        select(MatchGuest.member_id).where(MatchGuest.match_id == match_id).order_by(MatchGuest.id)
    )
    return list(result.scalars().all())


async def find_member_match_repo(db: AsyncSession, event_id: str, member_id: str) -> Optional[Match]:
    """
    The match of an event that has this member as a guest.
    """
    result = await db.execute(
        select(Match)
        .join(MatchGuest, MatchGuest.match_id == Match.id)
        .where(Match.event_id == event_id, MatchGuest.member_id == member_id)
        .limit(1)
    )
    return result.scalars().first()


async def create_invites_repo(db: AsyncSession, event_id: str, member_ids: Sequence[str]) -> List[Invite]:
    invites = [Invite(event_id=event_id, member_id=mid, status="pending") for mid in member_ids]
    db.add_all(invites)
    await db.commit()
    return invites


async def get_invite_status_repo(db: AsyncSession, event_id: str, member_id: str) -> Optional[str]:
    result = await db.execute(
        select(Invite.status).where(Invite.event_id == event_id, Invite.member_id == member_id)
    )
    return result.scalars().first()


# ----------------------------
# Venue assignment
# ----------------------------

async def list_booked_venue_ids_repo(
    db: AsyncSession,
    scheduled_date: date,
    exclude_match_ids: Sequence[str] = (),
) -> List[str]:
    """
    Venues already given to a match whose event falls on scheduled_date.
    """
    stmt = (
        select(Match.venue_id)
        .join(PairingEvent, PairingEvent.id == Match.event_id)
        .where(PairingEvent.scheduled_date == scheduled_date, Match.venue_id.is_not(None))
    )
    if exclude_match_ids:
        stmt = stmt.where(Match.id.not_in(list(exclude_match_ids)))
    result = await db.execute(stmt.distinct())
    return list(result.scalars().all())


async def update_match_venue_repo(db: AsyncSession, match_id: str, venue_id: str) -> None:
    await db.execute(update(Match).where(Match.id == match_id).values(venue_id=venue_id))
    await db.commit()


async def list_event_venues_repo(db: AsyncSession, event_id: str) -> List[Tuple[str, Optional[Venue]]]:
    """(match_id, venue or None) for every match of the event."""
    result = await db.execute(
        select(Match.id, Venue)
        .outerjoin(Venue, Venue.id == Match.venue_id)
        .where(Match.event_id == event_id)
        .order_by(Match.position, Match.created_at)
    )
    return [(row[0], row[1]) for row in result.all()]


# ----------------------------
# Confirmation
# ----------------------------

async def update_match_confirmation_repo(
    db: AsyncSession,
    match_id: str,
    confirmed_date: str,
    confirmed_slot: str,
) -> bool:
    """
    Confirm a match once. Only a match without a confirmed_date is updated, so
    a second caller writes nothing. Returns True when this call wrote the row.
    """
    result = await db.execute(
        update(Match)
        .where(Match.id == match_id, Match.confirmed_date.is_(None))
        .values(confirmed_date=confirmed_date, confirmed_slot=confirmed_slot, status="confirmed")
    )
    await db.commit()
    return result.rowcount > 0


# ----------------------------
# Availability
# ----------------------------

def _event_filter(event_id: Optional[str]):
    if event_id is None:
        return AvailabilitySlot.event_id.is_(None)
    return AvailabilitySlot.event_id == event_id


async def replace_availability_slots_repo(
    db: AsyncSession,
    member_id: str,
    event_id: Optional[str],
    slots: Sequence[Tuple[str, str]],
) -> int:
    """
    Replace the member's slot set for an event (or standing availability when
    event_id is None): delete everything, then insert the new (date, slot) rows.
    """
    await db.execute(
        delete(AvailabilitySlot).where(
            AvailabilitySlot.member_id == member_id,
            _event_filter(event_id),
        )
    )
    db.add_all([
        AvailabilitySlot(member_id=member_id, event_id=event_id, available_date=d, time_slot=s)
        for d, s in slots
    ])
    await db.commit()
    return len(slots)


async def list_availability_slots_repo(
    db: AsyncSession,
    member_id: str,
    event_id: Optional[str],
) -> List[Tuple[str, str]]:
    result = await db.execute(
        select(AvailabilitySlot.available_date, AvailabilitySlot.time_slot)
        .where(AvailabilitySlot.member_id == member_id, _event_filter(event_id))
        .order_by(AvailabilitySlot.id)
    )
    return [(row.available_date, row.time_slot) for row in result.all()]


async def count_standing_slots_repo(db: AsyncSession, member_ids: Sequence[str]) -> Dict[str, int]:
    if not member_ids:
        return {}
    result = await db.execute(
        select(AvailabilitySlot.member_id, func.count(AvailabilitySlot.id))
        .where(AvailabilitySlot.member_id.in_(list(member_ids)), AvailabilitySlot.event_id.is_(None))
        .group_by(AvailabilitySlot.member_id)
    )
    return {row[0]: row[1] for row in result.all()}
