# tests/test_cadence_logic.py
from datetime import date

import pytest

from dinnerpair.domain.cadence_logic import is_pairing_due

TODAY = date(2025, 6, 30)


@pytest.mark.parametrize("cadence,days,expected", [
    ("biweekly", 13, False),
    ("biweekly", 14, True),
    ("monthly", 29, False),
    ("monthly", 30, True),
    ("quarterly", 89, False),
    ("quarterly", 90, True),
])
def test_thresholds(cadence, days, expected):
    last = date.fromordinal(TODAY.toordinal() - days)
    assert is_pairing_due(cadence, last, TODAY) is expected


def test_no_previous_event_is_due():
    assert is_pairing_due("monthly", None, TODAY) is True


def test_missing_or_unknown_cadence_is_never_due():
    assert is_pairing_due(None, None, TODAY) is False
    assert is_pairing_due("weekly", date(2020, 1, 1), TODAY) is False


def test_future_event_is_not_due():
    assert is_pairing_due("biweekly", date(2025, 7, 7), TODAY) is False
