"""
Utility functions for calendar checks and the per-date seat availability view.
"""
from dataclasses import dataclass
from datetime import date, timedelta

from app.scheduling.roster import Roster, SeatType


WEEKEND = (5, 6)   # Sat, Sun


def is_weekend(d: date) -> bool:
    return d.weekday() in WEEKEND


def get_day_name(d: date) -> str:
    """date → 'Mon', 'Tue', etc."""
    return d.strftime("%a")


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_dates(week_start: date) -> list[date]:
    """Return Mon–Fri dates for the week containing week_start."""
    monday = monday_of(week_start)
    return [monday + timedelta(days=i) for i in range(5)]  # Mon-Fri only


def tomorrow_of(today: date) -> date:
    return today + timedelta(days=1)


def booking_window(today: date, max_advance_days: int) -> tuple[date, date]:
    """Inclusive (first, last) dates bookable from `today`."""
    return today, today + timedelta(days=max_advance_days)


# ── Availability projection ───────────────────────────────────────────────────

@dataclass(frozen=True)
class SeatAvailability:
    seat_id: str
    seat_number: int
    seat_type: SeatType
    available: bool


def seat_availability(roster: Roster, booked_seat_ids) -> list[SeatAvailability]:
    """Every seat in seat-number order, flagged free or taken."""
    return [
        SeatAvailability(
            seat_id=seat.seat_id,
            seat_number=seat.seat_number,
            seat_type=seat.seat_type,
            available=seat.seat_id not in booked_seat_ids,
        )
        for seat in roster.seats()
    ]
