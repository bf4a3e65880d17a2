# tests/test_venue_service.py
import random
from datetime import date

import pytest

from dinnerpair.infrastructure.models import Match, PairingEvent
from dinnerpair.repositories.pairing_repos import list_booked_venue_ids_repo
from dinnerpair.services.venue_service import (
    assign_venues_for_matches,
    assign_venues_to_event,
    get_venue_assignment_summary,
)

DINNER_DATE = date(2025, 7, 4)


async def add_event_matches(db, group_id, n, scheduled_date=DINNER_DATE):
    event = PairingEvent(group_id=group_id, scheduled_date=scheduled_date)
    db.add(event)
    await db.flush()
    matches = [Match(event_id=event.id, position=i, status="pending") for i in range(n)]
    db.add_all(matches)
    await db.commit()
    return event.id, [m.id for m in matches]


@pytest.mark.asyncio
async def test_five_matches_three_venues_reuse(db_session, make_group, make_venues):
    group, _ = await make_group(2)
    await make_venues(3)
    _, match_ids = await add_event_matches(db_session, group.id, 5)

    result = await assign_venues_for_matches(db_session, match_ids, DINNER_DATE, "Charlotte", rng=random.Random(2))

    assert result.reused_any_venue is True
    assert result.assigned_count == 5
    assert result.success
    assert len(set(result.assignments.values())) == 3


@pytest.mark.asyncio
async def test_venue_taken_on_same_date_by_other_group(db_session, make_group, make_venues):
    group_a, _ = await make_group(2)
    group_b, _ = await make_group(2)
    venue_ids = await make_venues(2)
    _, (other_match,) = await add_event_matches(db_session, group_a.id, 1)
    await assign_venues_for_matches(db_session, [other_match], DINNER_DATE, "Charlotte", rng=random.Random(0))

    booked = await list_booked_venue_ids_repo(db_session, DINNER_DATE)
    assert len(booked) == 1

    _, (match_id,) = await add_event_matches(db_session, group_b.id, 1)
    result = await assign_venues_for_matches(db_session, [match_id], DINNER_DATE, "Charlotte", rng=random.Random(0))

    assert result.reused_any_venue is False
    assert result.assignments[match_id] != booked[0]
    assert result.assignments[match_id] in venue_ids


@pytest.mark.asyncio
async def test_venue_booked_on_other_date_is_eligible(db_session, make_group, make_venues):
    group, _ = await make_group(2)
    await make_venues(1)
    _, (earlier,) = await add_event_matches(db_session, group.id, 1, scheduled_date=date(2025, 6, 1))
    await assign_venues_for_matches(db_session, [earlier], date(2025, 6, 1), "Charlotte")

    _, (match_id,) = await add_event_matches(db_session, group.id, 1)
    result = await assign_venues_for_matches(db_session, [match_id], DINNER_DATE, "Charlotte")

    assert result.reused_any_venue is False


@pytest.mark.asyncio
async def test_group_without_city(db_session, make_group):
    group, _ = await make_group(2, city=None)
    _, match_ids = await add_event_matches(db_session, group.id, 1)

    result = await assign_venues_for_matches(db_session, match_ids, DINNER_DATE, None)

    assert result.assignments == {}
    assert result.errors == ["Group has no city specified"]


@pytest.mark.asyncio
async def test_reassign_event_and_summary(db_session, make_group, make_venues):
    group, _ = await make_group(2)
    await make_venues(3)
    event_id, match_ids = await add_event_matches(db_session, group.id, 2)

    summary = await get_venue_assignment_summary(db_session, event_id)
    assert [m["venue_name"] for m in summary["matches"]] == ["Not assigned", "Not assigned"]
    assert summary["unique_venues"] == 0

    result = await assign_venues_to_event(db_session, event_id, rng=random.Random(4))
    assert result.assigned_count == 2
    assert result.reused_any_venue is False

    summary = await get_venue_assignment_summary(db_session, event_id)
    assert [m["match_id"] for m in summary["matches"]] == match_ids
    assert summary["total_matches"] == 2
    assert summary["unique_venues"] == 2


@pytest.mark.asyncio
async def test_reassign_unknown_event(db_session):
    result = await assign_venues_to_event(db_session, "nope")
    assert result.errors == ["Event nope not found"]
