"""
Rule pipeline: each rule on its own, then the order they fire in.
Clock is always passed in — no test depends on today's date.
"""
from datetime import date, datetime, time

import pytest

from app.errors import ConflictError, ErrorKind, ForbiddenError
from app.scheduling.booking_rules import (
    check_booking, check_date_range, check_seat_type, validate_booking
)

MON = date(2026, 10, 19)          # even week, BATCH_1 Mon–Wed
TUE = date(2026, 10, 20)
WED = date(2026, 10, 21)
THU = date(2026, 10, 22)          # BATCH_2
SAT = date(2026, 10, 24)
MORNING = datetime(2026, 10, 19, 9, 0)


def _check(roster, store, user_id, seat_id, d, now=MORNING):
    return check_booking(roster.get_user(user_id), roster.get_seat(seat_id), d, now, store)


# ── Date range ────────────────────────────────────────────────────────────────

def test_today_is_bookable(roster, store):
    assert _check(roster, store, "U01", "S01", MON) is None


def test_past_date(roster, store):
    r = _check(roster, store, "U01", "S01", date(2026, 10, 16))
    assert (r.kind, r.code) == (ErrorKind.INVALID_DATE, "DATE_IN_PAST")


def test_fourteen_days_out_is_the_last_bookable_day(roster, store):
    # 2026-11-02 is an even-week Monday
    assert _check(roster, store, "U01", "S01", date(2026, 11, 2)) is None

    r = _check(roster, store, "U01", "S01", date(2026, 11, 3))
    assert (r.kind, r.code) == (ErrorKind.INVALID_DATE, "BEYOND_BOOKING_WINDOW")


def test_window_length_is_configurable():
    assert check_date_range(date(2026, 10, 22), MON, max_advance_days=3) is None
    assert check_date_range(date(2026, 10, 23), MON, max_advance_days=3).code == "BEYOND_BOOKING_WINDOW"


# ── Weekday / rotation ────────────────────────────────────────────────────────

def test_weekend(roster, store):
    r = _check(roster, store, "U01", "S01", SAT)
    assert (r.kind, r.code) == (ErrorKind.INVALID_DATE, "WEEKEND")


def test_wrong_batch_is_forbidden(roster, store):
    r = _check(roster, store, "U05", "S01", MON)
    assert (r.kind, r.code) == (ErrorKind.FORBIDDEN, "WRONG_BATCH")

    r = _check(roster, store, "U01", "S01", THU)
    assert (r.kind, r.code) == (ErrorKind.FORBIDDEN, "WRONG_BATCH")
    assert _check(roster, store, "U05", "S01", THU) is None


# ── Floater seats ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("clock", [time(9, 0), time(15, 0), time(23, 59)])
def test_floater_only_for_tomorrow(roster, store, clock):
    now = datetime.combine(MON, clock)
    for d in (MON, WED, date(2026, 10, 30)):
        r = _check(roster, store, "U01", "S41", d, now)
        assert (r.kind, r.code) == (ErrorKind.INVALID_DATE, "FLOATER_NOT_TOMORROW")


def test_floater_before_cutoff_is_forbidden(roster, store):
    r = _check(roster, store, "U01", "S41", TUE, datetime(2026, 10, 19, 14, 59, 59))
    assert (r.kind, r.code) == (ErrorKind.FORBIDDEN, "FLOATER_TOO_EARLY")


@pytest.mark.parametrize("clock", [time(15, 0), time(18, 30)])
def test_floater_from_cutoff_succeeds(roster, store, clock):
    assert _check(roster, store, "U01", "S41", TUE, datetime.combine(MON, clock)) is None


def test_floater_cutoff_is_configurable(roster):
    seat = roster.get_seat("S41")
    assert check_seat_type(seat, TUE, datetime(2026, 10, 19, 12, 0), cutoff=time(12, 0)) is None


def test_fixed_seat_has_no_time_restriction(roster, store):
    assert _check(roster, store, "U01", "S40", WED, datetime(2026, 10, 19, 6, 0)) is None


# ── Duplicates ────────────────────────────────────────────────────────────────

def test_user_already_booked(roster, store):
    store.create("U01", "S01", MON, MORNING)
    r = _check(roster, store, "U01", "S02", MON)
    assert (r.kind, r.code) == (ErrorKind.CONFLICT, "USER_ALREADY_BOOKED")


def test_seat_already_booked(roster, store):
    store.create("U01", "S01", MON, MORNING)
    r = _check(roster, store, "U02", "S01", MON)
    assert (r.kind, r.code) == (ErrorKind.CONFLICT, "SEAT_ALREADY_BOOKED")


def test_other_dates_are_unaffected(roster, store):
    store.create("U01", "S01", MON, MORNING)
    assert _check(roster, store, "U01", "S01", TUE) is None


# ── Order ─────────────────────────────────────────────────────────────────────

def test_range_is_checked_before_weekday(roster, store):
    assert _check(roster, store, "U01", "S01", date(2026, 10, 18)).code == "DATE_IN_PAST"
    assert _check(roster, store, "U01", "S01", date(2026, 11, 7)).code == "BEYOND_BOOKING_WINDOW"


def test_rotation_is_checked_before_seat_type(roster, store):
    # U05 on a floater for tomorrow, before cutoff: batch fails first
    r = _check(roster, store, "U05", "S41", TUE, datetime(2026, 10, 19, 10, 0))
    assert r.code == "WRONG_BATCH"


def test_seat_type_is_checked_before_duplicates(roster, store):
    store.create("U01", "S02", TUE, MORNING)
    r = _check(roster, store, "U01", "S41", TUE, MORNING)
    assert r.code == "FLOATER_TOO_EARLY"


def test_rules_do_not_mutate_the_store(roster, store):
    _check(roster, store, "U01", "S01", MON)
    _check(roster, store, "U05", "S01", MON)
    assert len(store) == 0
    assert store.indices() == ({}, {})


# ── Raising form ──────────────────────────────────────────────────────────────

def test_validate_booking_raises_typed_errors(roster, store):
    with pytest.raises(ForbiddenError):
        validate_booking(roster.get_user("U05"), roster.get_seat("S01"), MON, MORNING, store)

    store.create("U01", "S01", MON, MORNING)
    with pytest.raises(ConflictError) as exc:
        validate_booking(roster.get_user("U02"), roster.get_seat("S01"), MON, MORNING, store)
    assert exc.value.code == "SEAT_ALREADY_BOOKED"
