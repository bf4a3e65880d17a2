# dinnerpair/domain/venue_logic.py
"""
Pure venue selection for one batch of matches sharing a scheduled date.

Venue spreading is a soft concern: the first free venue in a shuffled pool is
taken, and when none is free the first shuffled venue is reused.
"""
import random
from typing import Iterable, List, Optional, Set

from dinnerpair.domain.errors import NoVenuesInCityError
from dinnerpair.domain.models import VenueAssignmentResult, VenueDTO


def shuffle_venues(venues: List[VenueDTO], rng: Optional[random.Random] = None) -> List[VenueDTO]:
    """Return a shuffled copy of the pool (Fisher-Yates through rng.shuffle)."""
    rng = rng or random.SystemRandom()
    shuffled = list(venues)
    rng.shuffle(shuffled)
    return shuffled


def assign_venues(
    match_ids: List[str],
    venues: List[VenueDTO],
    booked_venue_ids: Iterable[str] = (),
    rng: Optional[random.Random] = None,
    city: Optional[str] = None,
) -> VenueAssignmentResult:
    """
    Assign a venue to each match, in match order.

    booked_venue_ids: venues already used on the same scheduled date by
    matches outside this batch. Bookings on other dates do not count.

    Example:
    >>> v = [VenueDTO(id="v1", name="A", city="X")]
    >>> r = assign_venues(["m1", "m2"], v, rng=random.Random(0))
    >>> r.assignments, r.reused_any_venue
    ({'m1': 'v1', 'm2': 'v1'}, True)
    """
    if not venues:
        raise NoVenuesInCityError(city)

    shuffled = shuffle_venues(venues, rng)
    taken: Set[str] = set(booked_venue_ids)
    result = VenueAssignmentResult(total_matches=len(match_ids))

    for match_id in match_ids:
        chosen = None
        for venue in shuffled:
            if venue.id not in taken:
                chosen = venue.id
                break

        if chosen is None:
            result.reused_any_venue = True
            chosen = shuffled[0].id

        taken.add(chosen)
        result.assignments[match_id] = chosen

    return result
