# dinnerpair/services/scheduling_service.py
import logging
import random
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dinnerpair.config.settings import settings
from dinnerpair.domain.cadence_logic import days_since, is_pairing_due
from dinnerpair.domain.errors import PairingError, PartialPersistenceError
from dinnerpair.domain.models import ScheduleOutcome
from dinnerpair.repositories.pairing_repos import (
    get_group_repo,
    get_last_event_date_repo,
    list_groups_repo,
)
from dinnerpair.services.pairing_service import default_scheduled_date, generate_pairings_for_group

logger = logging.getLogger(__name__)


async def should_generate_pairings(db: AsyncSession, group_id: str, today: Optional[date] = None) -> bool:
    """
    Cadence check for one group. Read failures count as "not due".
    """
    today = today or date.today()
    try:
        group = await get_group_repo(db, group_id)
        if not group:
            logger.warning(f"Group {group_id} not found, skipping")
            return False
        cadence = group.cadence
        last_date = await get_last_event_date_repo(db, group_id)
    except SQLAlchemyError:
        logger.exception(f"Failed to read cadence state for group {group_id}")
        return False

    if not cadence:
        logger.info(f"Group {group_id} has no cadence set, skipping")
        return False
    if cadence not in settings.CADENCE_THRESHOLDS:
        logger.warning(f"Unknown cadence '{cadence}' for group {group_id}")
        return False
    if last_date is None:
        logger.info(f"No previous pairing events for group {group_id}, should generate pairings")
        return True

    due = is_pairing_due(cadence, last_date, today)
    logger.info(
        f"Checking cadence for group {group_id}: cadence={cadence}, "
        f"days_since_last={days_since(last_date, today)}, due={due}"
    )
    return due


async def run_scheduled_pairings(
    db: AsyncSession,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[ScheduleOutcome]:
    """
    Sweep every group and pair the ones whose cadence says they are due.
    One group failing does not stop the sweep.
    """
    logger.info("Starting scheduled pairing check")
    groups = [(g.id, g.name) for g in await list_groups_repo(db)]
    outcomes: List[ScheduleOutcome] = []

    for group_id, group_name in groups:
        if not await should_generate_pairings(db, group_id, today):
            outcomes.append(ScheduleOutcome(
                group_id=group_id,
                group_name=group_name,
                status="skipped",
                reason="Not time for next pairing based on cadence",
            ))
            continue

        try:
            result = await generate_pairings_for_group(
                db, group_id, scheduled_date=default_scheduled_date(today), rng=rng
            )
        except PartialPersistenceError as e:
            logger.exception(f"Pairing for group {group_id} partially persisted")
            outcomes.append(ScheduleOutcome(
                group_id=group_id,
                group_name=group_name,
                status="error",
                pairs_generated=len(e.result.matches),
                reason=str(e),
            ))
            continue
        except PairingError as e:
            logger.exception(f"Failed to generate pairings for group {group_id}")
            outcomes.append(ScheduleOutcome(
                group_id=group_id, group_name=group_name, status="error", reason=str(e),
            ))
            continue

        outcomes.append(ScheduleOutcome(
            group_id=group_id,
            group_name=group_name,
            status="success",
            pairs_generated=len(result.matches),
        ))

    logger.info(
        f"Scheduled pairing check completed: {len(groups)} groups, "
        f"{sum(o.status == 'success' for o in outcomes)} successful, "
        f"{sum(o.status == 'skipped' for o in outcomes)} skipped, "
        f"{sum(o.status == 'error' for o in outcomes)} errors"
    )
    return outcomes
