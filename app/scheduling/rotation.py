"""
Batch rotation — which half of the roster may book on a given date.

  week_offset = whole weeks from ROTATION_ANCHOR (a Monday) to the date's Monday

  even week:  Mon–Wed → BATCH_1   Thu–Fri → BATCH_2
  odd week:   Mon–Wed → BATCH_2   Thu–Fri → BATCH_1

Pure function of the date. Validation and every display path call
allowed_batch() so the rule exists exactly once.
"""
from datetime import date

from app.config import ROTATION_ANCHOR
from app.errors import InvalidDateError
from app.scheduling.availability import is_weekend, monday_of, week_dates
from app.scheduling.roster import Batch


FIRST_HALF = (0, 1, 2)   # Mon, Tue, Wed


def week_offset(d: date, anchor: date = ROTATION_ANCHOR) -> int:
    return (monday_of(d) - anchor).days // 7


def is_even_week(d: date, anchor: date = ROTATION_ANCHOR) -> bool:
    return week_offset(d, anchor) % 2 == 0


def allowed_batch(d: date, anchor: date = ROTATION_ANCHOR) -> Batch:
    if is_weekend(d):
        raise InvalidDateError("WEEKEND", f"Booking not allowed on weekends ({d.isoformat()})")

    first_half = d.weekday() in FIRST_HALF
    if is_even_week(d, anchor):
        return Batch.BATCH_1 if first_half else Batch.BATCH_2
    return Batch.BATCH_2 if first_half else Batch.BATCH_1


def rotation_for_week(d: date, anchor: date = ROTATION_ANCHOR) -> dict[date, Batch]:
    """Mon–Fri of d's week → permitted batch."""
    return {day: allowed_batch(day, anchor) for day in week_dates(d)}
