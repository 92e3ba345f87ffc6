"""
Shared fixtures. Calendar used throughout the tests:

  2026-10-19  Monday, even rotation week  → Mon–Wed BATCH_1, Thu–Fri BATCH_2
  2026-10-26  Monday, odd rotation week   → Mon–Wed BATCH_2, Thu–Fri BATCH_1

Default roster: U01–U04 are BATCH_1, U05–U08 BATCH_2;
S01–S40 FIXED, S41–S50 FLOATER.
"""
from datetime import datetime

import pytest

from app.booking.engine import BookingEngine
from app.scheduling.roster import build_default_roster
from app.scheduling.state import BookingStore


@pytest.fixture
def roster():
    return build_default_roster()


@pytest.fixture
def store():
    return BookingStore()


@pytest.fixture
def monday_morning():
    return datetime(2026, 10, 19, 9, 0)


@pytest.fixture
def engine(roster, store, monday_morning):
    return BookingEngine(roster, store, clock=lambda: monday_morning)
