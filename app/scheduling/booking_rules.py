"""
Business rules for seat bookings.
Keeps the engine clean — all rule logic lives here.

Check order (first failure wins):
  1. date range     past / beyond window        → INVALID_DATE
  2. weekday        Sat / Sun                   → INVALID_DATE
  3. rotation       user's batch not allowed    → FORBIDDEN
  4. seat type      floater: not tomorrow       → INVALID_DATE
                    floater: before cutoff      → FORBIDDEN
  5. duplicates     user or seat already taken  → CONFLICT

`now` is always passed in; nothing here reads the clock or mutates state.
"""
from datetime import date, datetime, time
from typing import Optional

from app.config import FLOATER_CUTOFF, MAX_ADVANCE_DAYS
from app.errors import ErrorKind, Rejection
from app.scheduling.availability import (
    booking_window, get_day_name, is_weekend, tomorrow_of
)
from app.scheduling.roster import Seat, SeatType, User
from app.scheduling.rotation import allowed_batch
from app.scheduling.state import BookingStore


def check_date_range(booking_date: date, today: date,
                     max_advance_days: int = MAX_ADVANCE_DAYS) -> Optional[Rejection]:
    first, last = booking_window(today, max_advance_days)
    if booking_date < first:
        return Rejection(ErrorKind.INVALID_DATE, "DATE_IN_PAST",
                         "Cannot book a seat for a past date.")
    if booking_date > last:
        return Rejection(ErrorKind.INVALID_DATE, "BEYOND_BOOKING_WINDOW",
                         f"Cannot book more than {max_advance_days} days in advance.")
    return None


def check_weekday(booking_date: date) -> Optional[Rejection]:
    if is_weekend(booking_date):
        return Rejection(ErrorKind.INVALID_DATE, "WEEKEND",
                         "Bookings are only allowed on working days (Mon-Fri).")
    return None


def check_rotation(user: User, booking_date: date) -> Optional[Rejection]:
    """Caller guarantees a weekday."""
    permitted = allowed_batch(booking_date)
    if user.batch != permitted:
        return Rejection(
            ErrorKind.FORBIDDEN, "WRONG_BATCH",
            f"Your batch ({user.batch.value}) is not allowed to book on "
            f"{get_day_name(booking_date)} {booking_date.isoformat()}. "
            f"Allowed batch: {permitted.value}.",
        )
    return None


def check_seat_type(seat: Seat, booking_date: date, now: datetime,
                    cutoff: time = FLOATER_CUTOFF) -> Optional[Rejection]:
    """FIXED seats have no extra restriction beyond the window."""
    if seat.seat_type != SeatType.FLOATER:
        return None

    if booking_date != tomorrow_of(now.date()):
        return Rejection(ErrorKind.INVALID_DATE, "FLOATER_NOT_TOMORROW",
                         "Floater seats can only be booked for tomorrow.")
    if now.time() < cutoff:
        return Rejection(ErrorKind.FORBIDDEN, "FLOATER_TOO_EARLY",
                         f"Floater seats can only be booked after {cutoff.strftime('%H:%M')}.")
    return None


def check_duplicates(user: User, seat: Seat, booking_date: date,
                     store: BookingStore) -> Optional[Rejection]:
    if store.is_user_booked(user.user_id, booking_date):
        return Rejection(ErrorKind.CONFLICT, "USER_ALREADY_BOOKED",
                         f"You already have an active booking on {booking_date.isoformat()}.")
    if store.is_seat_booked(seat.seat_id, booking_date):
        return Rejection(ErrorKind.CONFLICT, "SEAT_ALREADY_BOOKED",
                         f"Seat {seat.seat_id} is already booked on {booking_date.isoformat()}.")
    return None


def check_booking(user: User, seat: Seat, booking_date: date, now: datetime,
                  store: BookingStore,
                  max_advance_days: int = MAX_ADVANCE_DAYS,
                  floater_cutoff: time = FLOATER_CUTOFF) -> Optional[Rejection]:
    """Run every rule in order; None means the booking may be committed."""
    checks = (
        lambda: check_date_range(booking_date, now.date(), max_advance_days),
        lambda: check_weekday(booking_date),
        lambda: check_rotation(user, booking_date),
        lambda: check_seat_type(seat, booking_date, now, floater_cutoff),
        lambda: check_duplicates(user, seat, booking_date, store),
    )
    for check in checks:
        rejection = check()
        if rejection is not None:
            return rejection
    return None


def validate_booking(user: User, seat: Seat, booking_date: date, now: datetime,
                     store: BookingStore, **limits):
    """Raising form of check_booking()."""
    rejection = check_booking(user, seat, booking_date, now, store, **limits)
    if rejection is not None:
        raise rejection.to_error()
