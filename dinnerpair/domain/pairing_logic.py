# dinnerpair/domain/pairing_logic.py
"""
Pure pairing logic.

This module contains only pure functions operating on plain Python data
(lists, sets, tuples). Service-layer code loads members and history from the
database and calls these functions; persistence happens there.

Functions included:
- pair_key
- build_history_index
- generate_pairs
- absorb_leftovers
"""
from typing import FrozenSet, Iterable, List, Set, Tuple

from dinnerpair.domain.errors import EmptyGroupError, InsufficientMembersError

PairKey = FrozenSet[str]


def pair_key(a: str, b: str) -> PairKey:
    return frozenset((a, b))


def build_history_index(past_match_guests: Iterable[Tuple[str, str]]) -> Set[PairKey]:
    """
    Build the set of unordered member pairs that already shared a match.
    past_match_guests: iterable of (match_id, member_id) rows.

    Example:
    >>> idx = build_history_index([("m1", "a"), ("m1", "b"), ("m2", "c")])
    >>> idx == {frozenset({"a", "b"})}
    True
    """
    by_match = {}
    for match_id, member_id in past_match_guests:
        attendees = by_match.setdefault(match_id, [])
        if member_id not in attendees:
            attendees.append(member_id)

    history = set()
    for attendees in by_match.values():
        for i in range(len(attendees)):
            for j in range(i + 1, len(attendees)):
                history.add(pair_key(attendees[i], attendees[j]))
    return history


def generate_pairs(member_ids: List[str], history: Set[PairKey]) -> Tuple[List[List[str]], List[str]]:
    """
    Greedy first-fit pairing in member order.

    For each unplaced member i, the first unplaced j > i that i has not dined
    with becomes i's partner. No look-ahead and no backtracking, so the output
    depends on the input order. Members with no eligible partner are returned
    as the unpaired list, in input order.

    Returns (pairs, unpaired).

    Example:
    >>> generate_pairs(["a", "b", "c", "d"], {frozenset({"a", "b"})})
    ([['a', 'c'], ['b', 'd']], [])
    """
    n = len(member_ids)
    if n == 0:
        raise EmptyGroupError(0)
    if n == 1:
        raise InsufficientMembersError(1)

    pairs: List[List[str]] = []
    placed = set()

    for i in range(n):
        if member_ids[i] in placed:
            continue
        for j in range(i + 1, n):
            if member_ids[j] in placed:
                continue
            if pair_key(member_ids[i], member_ids[j]) not in history:
                pairs.append([member_ids[i], member_ids[j]])
                placed.add(member_ids[i])
                placed.add(member_ids[j])
                break

    unpaired = [m for m in member_ids if m not in placed]
    return pairs, unpaired


def absorb_leftovers(pairs: List[List[str]], unpaired: List[str]) -> Tuple[List[List[str]], List[str]]:
    """
    Turn the last pair into a triple with the first unpaired member.

    A match never holds more than three guests, so anyone else left over is
    dropped from this round, as is everyone when no pair exists at all.

    Returns (groups, dropped).

    Example:
    >>> absorb_leftovers([["a", "b"], ["c", "d"]], ["e"])
    ([['a', 'b'], ['c', 'd', 'e']], [])
    >>> absorb_leftovers([], ["a", "b"])
    ([], ['a', 'b'])
    """
    groups = [list(p) for p in pairs]
    if not unpaired:
        return groups, []
    if not groups:
        return groups, list(unpaired)

    groups[-1].append(unpaired[0])
    return groups, list(unpaired[1:])


def make_pair_groups(member_ids: List[str], past_match_guests: Iterable[Tuple[str, str]]):
    """History index, greedy pass and leftover post-pass in one call."""
    history = build_history_index(past_match_guests)
    pairs, unpaired = generate_pairs(member_ids, history)
    return absorb_leftovers(pairs, unpaired)
