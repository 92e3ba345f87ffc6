"""
Booking engine — the operations the HTTP layer (or any other caller) uses.

  create_booking    resolve → rules → journal + store commit (one lock)
  cancel_booking    journal + store cancel (one lock)
  get_availability  every seat, free/taken for a date
  list_users / list_seats / get_allowed_batch / bookings_for_user

One engine owns one roster and one store; tests build as many as they like.
The clock is injected so rule evaluation is deterministic.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Optional

from app.config import FLOATER_CUTOFF, MAX_ADVANCE_DAYS
from app.errors import NotFoundError
from app.scheduling.availability import SeatAvailability, seat_availability
from app.scheduling.booking_rules import check_booking
from app.scheduling.roster import Batch, Roster, Seat, SeatType, User
from app.scheduling.rotation import allowed_batch
from app.scheduling.state import Booking, BookingStatus, BookingStore

logger = logging.getLogger(__name__)

CONFIRMED_MESSAGE = "Booking confirmed successfully."
CANCELLED_MESSAGE = "Booking cancelled. Seat is now available."


@dataclass(frozen=True)
class BookingResult:
    booking_id: str
    user_name: str
    seat_number: int
    seat_type: SeatType
    booking_date: date
    status: BookingStatus
    message: str = ""


class BookingEngine:

    def __init__(self, roster: Roster, store: Optional[BookingStore] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 journal=None,
                 max_advance_days: int = MAX_ADVANCE_DAYS,
                 floater_cutoff: time = FLOATER_CUTOFF):
        self.roster = roster
        self.store = store if store is not None else BookingStore()
        self.clock = clock
        self.journal = journal
        self.max_advance_days = max_advance_days
        self.floater_cutoff = floater_cutoff

    # ── Commands ──────────────────────────────────────────────────────────────

    def create_booking(self, user_id: str, seat_id: str, booking_date: date,
                       now: Optional[datetime] = None) -> BookingResult:
        now = now or self.clock()
        user = self.roster.get_user(user_id)
        seat = self.roster.get_seat(seat_id)

        rejection = check_booking(
            user, seat, booking_date, now, self.store,
            max_advance_days=self.max_advance_days,
            floater_cutoff=self.floater_cutoff,
        )
        if rejection is not None:
            logger.info("rejected %s/%s on %s: %s",
                        user_id, seat_id, booking_date, rejection.code)
            raise rejection.to_error()

        # store re-checks duplicates under its lock; a failed journal write
        # leaves nothing behind
        on_commit = self.journal.record_created if self.journal is not None else None
        booking = self.store.create(user_id, seat_id, booking_date,
                                    created_at=now, on_commit=on_commit)
        logger.info("booked %s: %s → %s on %s",
                    booking.booking_id, user_id, seat_id, booking_date)
        return self._result(booking, user, seat, CONFIRMED_MESSAGE)

    def cancel_booking(self, booking_id: str) -> BookingResult:
        on_commit = None
        if self.journal is not None:
            cancelled_at = self.clock()
            on_commit = lambda b: self.journal.record_cancelled(b.booking_id, cancelled_at)

        if not self.store.cancel(booking_id, on_commit=on_commit):
            raise NotFoundError("BOOKING_NOT_FOUND",
                                f"Active booking not found with id: {booking_id}")

        booking = self.store.get(booking_id)
        logger.info("cancelled %s (%s on %s)",
                    booking_id, booking.seat_id, booking.booking_date)

        return self._result(
            booking,
            self.roster.get_user(booking.user_id),
            self.roster.get_seat(booking.seat_id),
            CANCELLED_MESSAGE,
        )

    # ── Queries ───────────────────────────────────────────────────────────────

    def get_availability(self, booking_date: date) -> list[SeatAvailability]:
        return seat_availability(self.roster, self.store.booked_seat_ids(booking_date))

    def list_users(self) -> list[User]:
        return self.roster.users()

    def list_seats(self) -> list[Seat]:
        return self.roster.seats()

    def get_allowed_batch(self, d: date) -> Batch:
        return allowed_batch(d)

    def bookings_for_user(self, user_id: str,
                          include_cancelled: bool = False) -> list[BookingResult]:
        user = self.roster.get_user(user_id)
        return [
            self._result(b, user, self.roster.get_seat(b.seat_id))
            for b in self.store.bookings_for_user(user_id, include_cancelled)
        ]

    def bookings_for_date(self, booking_date: date) -> list[BookingResult]:
        return [
            self._result(b, self.roster.get_user(b.user_id), self.roster.get_seat(b.seat_id))
            for b in self.store.bookings_for_date(booking_date)
        ]

    # ── Mapper ────────────────────────────────────────────────────────────────

    @staticmethod
    def _result(booking: Booking, user: User, seat: Seat, message: str = "") -> BookingResult:
        return BookingResult(
            booking_id=booking.booking_id,
            user_name=user.name,
            seat_number=seat.seat_number,
            seat_type=seat.seat_type,
            booking_date=booking.booking_date,
            status=booking.status,
            message=message,
        )
