# dinnerpair/services/availability_service.py
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from dinnerpair.domain.availability_logic import decide_match_status
from dinnerpair.domain.errors import MatchResolutionError
from dinnerpair.domain.models import (
    MatchState,
    MatchStatusDTO,
    MemberAvailabilitySummary,
    SlotDTO,
    TimeSlot,
)
from dinnerpair.repositories.pairing_repos import (
    count_standing_slots_repo,
    find_member_match_repo,
    get_invite_status_repo,
    get_match_confirmation_repo,
    get_match_repo,
    list_availability_slots_repo,
    list_match_guest_ids_repo,
    list_members_repo,
    replace_availability_slots_repo,
    update_match_confirmation_repo,
)

logger = logging.getLogger(__name__)

VALID_SLOTS = {s.value for s in TimeSlot}


def check_date(day) -> str:
    # zero-padded ISO only; dates compare as text
    if isinstance(day, date):
        return day.isoformat()
    try:
        parsed = date.fromisoformat(day)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid availability date: {day!r}, expected YYYY-MM-DD")
    if parsed.isoformat() != day:
        raise ValueError(f"Invalid availability date: {day!r}, expected YYYY-MM-DD")
    return day


def flatten_availability(availability: Dict[str, Iterable[str]]) -> List[Tuple[str, str]]:
    """
    {date: [slots]} -> sorted unique (date, slot) rows.
    Raises ValueError for unknown slot names and dates not in YYYY-MM-DD form.
    """
    rows = set()
    for day, slots in availability.items():
        day = check_date(day)
        for slot in slots:
            slot = slot.value if isinstance(slot, TimeSlot) else slot
            if slot not in VALID_SLOTS:
                raise ValueError(f"Unknown time slot: {slot}")
            rows.add((day, slot))
    return sorted(rows)


async def get_slots(db: AsyncSession, member_id: str, event_id: Optional[str]) -> List[SlotDTO]:
    rows = await list_availability_slots_repo(db, member_id, event_id)
    return [SlotDTO(date=d, slot=s) for d, s in rows]


async def resolve_match(db: AsyncSession, match_id: str, member_id: str):
    """
    Load the match and split its guests into me and my partners.
    """
    match = await get_match_repo(db, match_id)
    if not match:
        raise MatchResolutionError(f"Match {match_id} not found")
    guest_ids = await list_match_guest_ids_repo(db, match_id)
    if member_id not in guest_ids:
        raise MatchResolutionError(f"Member {member_id} is not a guest of match {match_id}")
    partner_ids = [g for g in guest_ids if g != member_id]
    if not partner_ids:
        raise MatchResolutionError(f"Match {match_id} has no partner for member {member_id}")
    return match, partner_ids


async def try_confirm(db: AsyncSession, match_id: str, confirmed_date: str, confirmed_slot: str) -> bool:
    """
    Write the confirmation unless the match is already confirmed.
    """
    written = await update_match_confirmation_repo(db, match_id, confirmed_date, confirmed_slot)
    if written:
        logger.info(f"Match {match_id} confirmed for {confirmed_date} ({confirmed_slot})")
    return written


async def compute_match_status(db: AsyncSession, match_id: str, member_id: str) -> MatchStatusDTO:
    """
    Where does this member's match stand?

    A match with a stored confirmation short-circuits without any write.
    Otherwise the overlap is recomputed, and a found overlap is confirmed on
    the spot. An unresolvable match gives status `error`, never `waiting`.
    """
    try:
        match, partner_ids = await resolve_match(db, match_id, member_id)
    except MatchResolutionError as e:
        logger.exception(f"Could not resolve match {match_id} for member {member_id}")
        return MatchStatusDTO(status=MatchState.error, match_id=match_id, error=str(e))

    event_id = match.event_id
    confirmed_date, confirmed_slot = match.confirmed_date, match.confirmed_slot

    partner_declined = False
    partner_slots = {}
    my_slots = []
    if not confirmed_date:
        for pid in partner_ids:
            if await get_invite_status_repo(db, event_id, pid) == "declined":
                partner_declined = True
        if not partner_declined:
            for pid in partner_ids:
                partner_slots[pid] = await get_slots(db, pid, event_id)
            my_slots = await get_slots(db, member_id, event_id)

    status = decide_match_status(
        match_id,
        partner_ids,
        confirmed_date,
        confirmed_slot,
        partner_declined,
        my_slots,
        partner_slots,
    )

    if status.status == MatchState.matched and not confirmed_date:
        if not await try_confirm(db, match_id, status.confirmed_date, status.confirmed_slot):
            # another guest confirmed first; their slot is the one that stands
            stored_date, stored_slot = await get_match_confirmation_repo(db, match_id)
            if not stored_date:
                logger.error(f"Match {match_id} could not be confirmed and has no stored confirmation")
                return MatchStatusDTO(
                    status=MatchState.error,
                    match_id=match_id,
                    partner_ids=partner_ids,
                    error=f"Match {match_id} could not be confirmed",
                )
            logger.info(f"Match {match_id} was already confirmed for {stored_date} ({stored_slot})")
            status = decide_match_status(match_id, partner_ids, stored_date, stored_slot, False, [], {})
    return status


async def compute_event_status(db: AsyncSession, event_id: str, member_id: str) -> MatchStatusDTO:
    match = await find_member_match_repo(db, event_id, member_id)
    if not match:
        logger.error(f"No match found for member {member_id} in event {event_id}")
        return MatchStatusDTO(
            status=MatchState.error,
            error=f"Member {member_id} has no match in event {event_id}",
        )
    return await compute_match_status(db, match.id, member_id)


async def save_availability(
    db: AsyncSession,
    member_id: str,
    event_id: Optional[str],
    availability: Dict[str, Iterable[str]],
) -> Optional[MatchStatusDTO]:
    """
    Replace a member's availability, then try to confirm their match.

    event_id None saves standing availability; there is no match to confirm
    then and None is returned.
    """
    rows = flatten_availability(availability)
    count = await replace_availability_slots_repo(db, member_id, event_id, rows)
    logger.info(f"Saved {count} availability slots for member {member_id} (event={event_id})")

    if event_id is None:
        return None
    return await compute_event_status(db, event_id, member_id)


async def get_standing_availability(db: AsyncSession, member_id: str) -> Dict[str, List[str]]:
    availability: Dict[str, List[str]] = {}
    for slot in await get_slots(db, member_id, None):
        availability.setdefault(slot.date, []).append(slot.slot)
    return availability


async def get_group_availability_summary(db: AsyncSession, group_id: str) -> List[MemberAvailabilitySummary]:
    """
    Who in the group has submitted standing availability, and how much.
    """
    members = await list_members_repo(db, group_id)
    counts = await count_standing_slots_repo(db, [m.id for m in members])
    return [
        MemberAvailabilitySummary(
            member_id=m.id,
            display_name=m.display_name,
            has_submitted=counts.get(m.id, 0) > 0,
            slot_count=counts.get(m.id, 0),
        )
        for m in members
    ]
