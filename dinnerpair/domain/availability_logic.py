# dinnerpair/domain/availability_logic.py
"""
Pure availability matching.

Slots are (date, slot) tokens. Dates are YYYY-MM-DD strings and sort
correctly as text; slots sort by a fixed meal rank, not alphabetically.
"""
from typing import Dict, List, Optional, Sequence

from dinnerpair.domain.models import MatchState, MatchStatusDTO, SlotDTO

SLOT_ORDER: Dict[str, int] = {
    "breakfast": 0,
    "lunch": 1,
    "dinner": 2,
    "late_night": 3,
}
UNKNOWN_SLOT_RANK = 99


def slot_rank(slot: str) -> int:
    return SLOT_ORDER.get(slot, UNKNOWN_SLOT_RANK)


def overlapping_slots(my_slots: Sequence[SlotDTO], *partner_slot_sets: Sequence[SlotDTO]) -> List[SlotDTO]:
    """
    My slots that every partner also holds, in my original order.
    """
    common = None
    for partner_slots in partner_slot_sets:
        keys = {s.key for s in partner_slots}
        common = keys if common is None else common & keys
    if common is None:
        return []
    return [s for s in my_slots if s.key in common]


def earliest_overlap(my_slots: Sequence[SlotDTO], *partner_slot_sets: Sequence[SlotDTO]) -> Optional[SlotDTO]:
    """
    Earliest (date, slot rank) common to me and every partner, or None.

    Example:
    >>> mine = [SlotDTO(date="2025-06-01", slot="lunch"), SlotDTO(date="2025-06-02", slot="dinner")]
    >>> theirs = [SlotDTO(date="2025-06-02", slot="dinner"), SlotDTO(date="2025-06-02", slot="breakfast")]
    >>> earliest_overlap(mine, theirs).key
    ('2025-06-02', 'dinner')
    """
    overlaps = overlapping_slots(my_slots, *partner_slot_sets)
    if not overlaps:
        return None
    overlaps.sort(key=lambda s: (s.date, slot_rank(s.slot)))
    return overlaps[0]


def decide_match_status(
    match_id: str,
    partner_ids: List[str],
    confirmed_date: Optional[str],
    confirmed_slot: Optional[str],
    partner_declined: bool,
    my_slots: Sequence[SlotDTO],
    partner_slots: Dict[str, Sequence[SlotDTO]],
) -> MatchStatusDTO:
    """
    State transition for one match, in fixed decision order:
    confirmed -> partner declined -> partner without slots -> overlap.

    A `matched` result with no stored confirmation tells the caller to
    confirm the match.
    """
    base = {"match_id": match_id, "partner_ids": list(partner_ids)}

    if confirmed_date:
        return MatchStatusDTO(
            status=MatchState.matched,
            confirmed_date=confirmed_date,
            confirmed_slot=confirmed_slot,
            **base,
        )

    if partner_declined:
        return MatchStatusDTO(status=MatchState.partner_skipped, **base)

    if any(not partner_slots.get(pid) for pid in partner_ids):
        return MatchStatusDTO(status=MatchState.waiting_for_partner, **base)

    slot_sets = [partner_slots[pid] for pid in partner_ids]
    earliest = earliest_overlap(my_slots, *slot_sets)
    if earliest is None:
        return MatchStatusDTO(status=MatchState.no_match, **base)

    return MatchStatusDTO(
        status=MatchState.matched,
        confirmed_date=earliest.date,
        confirmed_slot=earliest.slot,
        overlapping_slots=overlapping_slots(my_slots, *slot_sets),
        **base,
    )
