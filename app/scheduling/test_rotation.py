"""
Batch rotation: parity, half-week split, weekend rejection.
"""
from datetime import date, timedelta

import pytest

from app.errors import ErrorKind, InvalidDateError
from app.scheduling.roster import Batch
from app.scheduling.rotation import (
    allowed_batch, is_even_week, rotation_for_week, week_offset
)

EVEN_MONDAY = date(2026, 10, 19)
ODD_MONDAY = date(2026, 10, 26)


def test_anchor_week_is_even():
    assert week_offset(date(2024, 1, 1)) == 0
    assert allowed_batch(date(2024, 1, 1)) == Batch.BATCH_1
    assert allowed_batch(date(2024, 1, 4)) == Batch.BATCH_2


def test_week_before_anchor_is_odd():
    assert week_offset(date(2023, 12, 25)) == -1
    assert not is_even_week(date(2023, 12, 25))
    assert allowed_batch(date(2023, 12, 25)) == Batch.BATCH_2


def test_offset_counts_from_the_dates_own_monday():
    # every weekday of a week shares one offset
    offsets = {week_offset(EVEN_MONDAY + timedelta(days=i)) for i in range(7)}
    assert offsets == {146}


def test_even_week_split():
    week = rotation_for_week(EVEN_MONDAY)
    assert list(week.values()) == [
        Batch.BATCH_1, Batch.BATCH_1, Batch.BATCH_1,
        Batch.BATCH_2, Batch.BATCH_2,
    ]


def test_odd_week_split():
    week = rotation_for_week(ODD_MONDAY + timedelta(days=2))
    assert list(week) == [ODD_MONDAY + timedelta(days=i) for i in range(5)]
    assert list(week.values()) == [
        Batch.BATCH_2, Batch.BATCH_2, Batch.BATCH_2,
        Batch.BATCH_1, Batch.BATCH_1,
    ]


def test_adjacent_weeks_disagree_on_first_half():
    start = date(2025, 1, 6)
    for w in range(60):
        monday = start + timedelta(weeks=w)
        this_week = allowed_batch(monday)
        next_week = allowed_batch(monday + timedelta(weeks=1))
        assert this_week != next_week
        # Thu–Fri always goes to the other batch
        assert allowed_batch(monday + timedelta(days=3)) != this_week


def test_stable_across_calls():
    d = date(2031, 5, 14)
    assert len({allowed_batch(d) for _ in range(10)}) == 1


def test_custom_anchor_shifts_parity():
    assert allowed_batch(EVEN_MONDAY, anchor=date(2024, 1, 8)) == Batch.BATCH_2


@pytest.mark.parametrize("weekend", [date(2026, 10, 24), date(2026, 10, 25)])
def test_weekend_is_rejected(weekend):
    with pytest.raises(InvalidDateError) as exc:
        allowed_batch(weekend)
    assert exc.value.kind == ErrorKind.INVALID_DATE
    assert exc.value.code == "WEEKEND"
