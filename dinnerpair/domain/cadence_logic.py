# dinnerpair/domain/cadence_logic.py
from datetime import date
from typing import Dict, Optional

from dinnerpair.config.settings import settings


def days_since(last_event_date: date, today: date) -> int:
    return (today - last_event_date).days


def is_pairing_due(
    cadence: Optional[str],
    last_event_date: Optional[date],
    today: date,
    thresholds: Optional[Dict[str, int]] = None,
) -> bool:
    """
    True when a group should get a new pairing round.

    No cadence or an unknown cadence is never due. A group with a cadence and
    no previous event is always due.
    """
    thresholds = thresholds or settings.CADENCE_THRESHOLDS
    if not cadence or cadence not in thresholds:
        return False
    if last_event_date is None:
        return True
    return days_since(last_event_date, today) >= thresholds[cadence]
