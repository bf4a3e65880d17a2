# tests/test_scheduling_service.py
import random
from datetime import date

import pytest

from dinnerpair.repositories.pairing_repos import get_last_event_date_repo
from dinnerpair.services.scheduling_service import run_scheduled_pairings, should_generate_pairings

TODAY = date(2025, 6, 30)


@pytest.mark.asyncio
async def test_group_without_events_is_due(db_session, make_group):
    group, _ = await make_group(2, cadence="biweekly")
    assert await should_generate_pairings(db_session, group.id, TODAY) is True


@pytest.mark.asyncio
async def test_recent_event_is_not_due(db_session, make_group, make_match):
    group, members = await make_group(2, cadence="monthly")
    await make_match(group.id, members, date(2025, 6, 10))
    assert await should_generate_pairings(db_session, group.id, TODAY) is False
    assert await should_generate_pairings(db_session, group.id, date(2025, 7, 10)) is True


@pytest.mark.asyncio
@pytest.mark.parametrize("cadence", [None, "weekly"])
async def test_missing_or_unknown_cadence_is_skipped(db_session, make_group, cadence):
    group, _ = await make_group(2, cadence=cadence)
    assert await should_generate_pairings(db_session, group.id, TODAY) is False


@pytest.mark.asyncio
async def test_unknown_group_is_not_due(db_session):
    assert await should_generate_pairings(db_session, "missing", TODAY) is False


@pytest.mark.asyncio
async def test_sweep_outcomes(db_session, make_group, make_match, make_venues):
    await make_venues(3)
    due, _ = await make_group(4, cadence="biweekly")
    recent, recent_members = await make_group(2, cadence="quarterly")
    await make_match(recent.id, recent_members, date(2025, 6, 1))
    lonely, _ = await make_group(1, cadence="monthly")
    idle, _ = await make_group(3, cadence=None)

    outcomes = {o.group_id: o for o in await run_scheduled_pairings(db_session, TODAY, rng=random.Random(1))}

    assert outcomes[due.id].status == "success"
    assert outcomes[due.id].pairs_generated == 2
    assert outcomes[recent.id].status == "skipped"
    assert outcomes[idle.id].status == "skipped"
    assert outcomes[lonely.id].status == "error"
    assert "only 1 member" in outcomes[lonely.id].reason

    # scheduled one lead time out, so the next sweep the same day skips it
    assert await get_last_event_date_repo(db_session, due.id) == date(2025, 7, 7)
    again = {o.group_id: o for o in await run_scheduled_pairings(db_session, TODAY)}
    assert again[due.id].status == "skipped"
