# dinnerpair/services/venue_service.py
import logging
import random
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dinnerpair.domain.errors import NoVenuesInCityError, UpstreamReadError
from dinnerpair.domain.models import VenueAssignmentResult, VenueDTO
from dinnerpair.domain.venue_logic import assign_venues
from dinnerpair.repositories.pairing_repos import (
    get_event_repo,
    get_group_repo,
    list_booked_venue_ids_repo,
    list_event_matches_repo,
    list_event_venues_repo,
    list_venues_repo,
    update_match_venue_repo,
)

logger = logging.getLogger(__name__)


async def get_venue_pool(db: AsyncSession, city: Optional[str]) -> List[VenueDTO]:
    try:
        venues = await list_venues_repo(db, city)
    except SQLAlchemyError as e:
        raise UpstreamReadError(f"Failed to fetch venues for city {city}: {e}") from e
    return [VenueDTO(id=v.id, name=v.name, city=v.city) for v in venues]


async def assign_venues_for_matches(
    db: AsyncSession,
    match_ids: List[str],
    scheduled_date: date,
    city: Optional[str],
    rng: Optional[random.Random] = None,
) -> VenueAssignmentResult:
    """
    Choose and store a venue for each match of one scheduled date.

    Never raises for an empty city or failed writes: those end up in
    result.errors so pair creation stands on its own.
    """
    if not city:
        logger.warning("No city set, skipping venue assignment")
        return VenueAssignmentResult(total_matches=len(match_ids), errors=["Group has no city specified"])

    venues = await get_venue_pool(db, city)
    try:
        booked = await list_booked_venue_ids_repo(db, scheduled_date, exclude_match_ids=match_ids)
    except SQLAlchemyError as e:
        raise UpstreamReadError(f"Failed to check venue bookings on {scheduled_date}: {e}") from e

    try:
        result = assign_venues(match_ids, venues, booked, rng=rng, city=city)
    except NoVenuesInCityError as e:
        logger.warning(f"{e}; matches keep no venue")
        return VenueAssignmentResult(total_matches=len(match_ids), errors=[str(e)])

    failed: Dict[str, str] = {}
    for match_id, venue_id in result.assignments.items():
        try:
            await update_match_venue_repo(db, match_id, venue_id)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception(f"Failed to store venue {venue_id} for match {match_id}")
            failed[match_id] = str(e)

    for match_id in failed:
        del result.assignments[match_id]
    if failed:
        first = next(iter(failed.values()))
        result.errors.append(f"Failed to update {len(failed)} matches: {first}")
    result.assigned_count = len(result.assignments)

    logger.info(
        f"Assigned venues to {result.assigned_count}/{result.total_matches} matches in {city} "
        f"(reused={result.reused_any_venue})"
    )
    return result


async def assign_venues_to_event(
    db: AsyncSession,
    event_id: str,
    rng: Optional[random.Random] = None,
) -> VenueAssignmentResult:
    """
    (Re)assign venues to every match of an existing event.
    """
    event = await get_event_repo(db, event_id)
    if not event:
        return VenueAssignmentResult(errors=[f"Event {event_id} not found"])

    group = await get_group_repo(db, event.group_id)
    matches = await list_event_matches_repo(db, event_id)
    if not matches:
        return VenueAssignmentResult(errors=["No matches found for this event"])

    return await assign_venues_for_matches(
        db,
        [m.id for m in matches],
        event.scheduled_date,
        group.city if group else None,
        rng=rng,
    )


async def get_venue_assignment_summary(db: AsyncSession, event_id: str) -> Dict:
    """
    Per-match venue names for an event, for admins to review.
    """
    rows = await list_event_venues_repo(db, event_id)
    matches = []
    names = set()
    for match_id, venue in rows:
        matches.append({
            "match_id": match_id,
            "venue_name": venue.name if venue else "Not assigned",
            "venue_city": venue.city if venue else "",
        })
        if venue:
            names.add(venue.name)

    return {
        "matches": matches,
        "total_matches": len(rows),
        "unique_venues": len(names),
    }
