# dinnerpair/services/pairing_service.py
"""
Pairing orchestration: history -> pairs -> persisted matches -> venues.

Writes go out in a fixed order (event, match, guests, invites) and each is
committed on its own. A failure is reported, not rolled back.
"""
import logging
import random
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dinnerpair.config.settings import settings
from dinnerpair.domain.errors import PartialPersistenceError, PersistenceError, UpstreamReadError
from dinnerpair.domain.models import CreatedMatch, PairingRunResult, VenueAssignmentResult
from dinnerpair.domain.pairing_logic import make_pair_groups
from dinnerpair.repositories.pairing_repos import (
    add_match_guests_repo,
    create_event_repo,
    create_invites_repo,
    create_match_repo,
    get_group_repo,
    list_members_repo,
    list_past_match_guests_repo,
)
from dinnerpair.services.venue_service import assign_venues_for_matches

logger = logging.getLogger(__name__)


def default_scheduled_date(today: Optional[date] = None) -> date:
    today = today or date.today()
    return today + timedelta(days=settings.DINNER_LEAD_DAYS)


async def load_pairing_inputs(db: AsyncSession, group_id: str):
    """
    Group, ordered member ids and (match_id, member_id) history rows.
    Read failures are wrapped, never retried.
    """
    try:
        group = await get_group_repo(db, group_id)
        if not group:
            raise UpstreamReadError(f"Group {group_id} not found")
        members = await list_members_repo(db, group_id)
        history_rows = await list_past_match_guests_repo(db, group_id)
    except SQLAlchemyError as e:
        raise UpstreamReadError(f"Failed to load pairing inputs for group {group_id}: {e}") from e

    return group, [m.id for m in members], history_rows


async def generate_pairings_for_group(
    db: AsyncSession,
    group_id: str,
    scheduled_date: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> PairingRunResult:
    """
    Run one pairing round for a group and persist it.

    Raises EmptyGroupError / InsufficientMembersError before anything is
    written, UpstreamReadError when inputs cannot be read, PersistenceError
    when the event itself cannot be stored (nothing committed), and
    PartialPersistenceError (carrying the result) when some pair groups could
    not be stored. Venue problems never fail the run; see result.venues.
    """
    logger.info(f"Starting pairing for group {group_id}")
    group, member_ids, history_rows = await load_pairing_inputs(db, group_id)
    city = group.city
    logger.info(f"Group {group_id}: {len(member_ids)} members, {len(history_rows)} history rows, city={city}")

    groups, dropped = make_pair_groups(member_ids, history_rows)
    if dropped:
        logger.warning(f"Group {group_id}: {len(dropped)} members left out of this round")

    scheduled_date = scheduled_date or default_scheduled_date()
    result = PairingRunResult(group_id=group_id, scheduled_date=scheduled_date, dropped_member_ids=dropped)

    try:
        event = await create_event_repo(db, group_id, scheduled_date)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Failed to create pairing event for group {group_id}")
        raise PersistenceError(f"Failed to create pairing event for group {group_id}: {e}") from e
    # rollbacks below expire ORM objects, so keep plain values
    event_id = result.event_id = event.id

    for position, guest_ids in enumerate(groups):
        match_id = None
        guests_stored = False
        try:
            match = await create_match_repo(db, event_id, position=position)
            match_id = match.id
            await add_match_guests_repo(db, match_id, guest_ids)
            guests_stored = True
            await create_invites_repo(db, event_id, guest_ids)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception(f"Failed to store pair group {guest_ids} (match {match_id})")
            result.failures.append(f"group {position} {guest_ids} (match {match_id}): {e}")
            if guests_stored:
                # match and guests are committed; report it and give it a venue
                result.matches.append(
                    CreatedMatch(match_id=match_id, member_ids=list(guest_ids), invites_created=False)
                )
            continue

        result.matches.append(CreatedMatch(match_id=match_id, member_ids=list(guest_ids)))
        logger.info(f"Created match {match_id} with {len(guest_ids)} guests")

    if result.matches:
        match_ids = [m.match_id for m in result.matches]
        try:
            result.venues = await assign_venues_for_matches(db, match_ids, scheduled_date, city, rng=rng)
        except UpstreamReadError as e:
            logger.exception(f"Venue assignment failed for event {event_id}")
            result.venues = VenueAssignmentResult(total_matches=len(match_ids), errors=[str(e)])
        for m in result.matches:
            m.venue_id = result.venues.assignments.get(m.match_id)

    if result.failures:
        raise PartialPersistenceError(result)

    logger.info(f"Pairing for group {group_id} completed: {len(result.matches)} matches")
    return result
