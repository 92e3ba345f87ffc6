"""
Tracks what's booked — the authoritative in-memory booking state.

  _bookings        booking_id → Booking (canonical; cancelled rows stay)
  _seats_by_date   date → {seat_id}  of ACTIVE bookings
  _users_by_date   date → {user_id}  of ACTIVE bookings

The two indices are derived data. Every create/cancel updates them under
one lock together with the canonical map, so rebuild_indices() always
equals indices().
"""
import enum
import itertools
import re
import threading
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Optional

from app.errors import ConflictError


class BookingStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class Booking:
    booking_id: str
    user_id: str
    seat_id: str
    booking_date: date
    created_at: datetime
    status: BookingStatus = BookingStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.ACTIVE


_ID_PATTERN = re.compile(r"^BK(\d+)$")


def _sequence_of(booking_id: str) -> int:
    match = _ID_PATTERN.match(booking_id)
    if not match:
        raise ValueError(f"Malformed booking id: {booking_id}")
    return int(match.group(1))


class BookingStore:

    def __init__(self):
        self._lock = threading.Lock()
        self._bookings: dict[str, Booking] = {}
        self._seats_by_date: dict[date, set[str]] = {}
        self._users_by_date: dict[date, set[str]] = {}
        self._sequence = itertools.count(1)

    # ── Lookups ───────────────────────────────────────────────────────────────

    def is_seat_booked(self, seat_id: str, d: date) -> bool:
        return seat_id in self._seats_by_date.get(d, ())

    def is_user_booked(self, user_id: str, d: date) -> bool:
        return user_id in self._users_by_date.get(d, ())

    def booked_seat_ids(self, d: date) -> frozenset:
        with self._lock:
            return frozenset(self._seats_by_date.get(d, ()))

    def get(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def bookings_for_date(self, d: date) -> list[Booking]:
        with self._lock:
            return [b for b in self._bookings.values()
                    if b.booking_date == d and b.is_active]

    def bookings_for_user(self, user_id: str,
                          include_cancelled: bool = False) -> list[Booking]:
        with self._lock:
            rows = [b for b in self._bookings.values()
                    if b.user_id == user_id and (include_cancelled or b.is_active)]
        # dict order is creation order, sort is stable
        return sorted(rows, key=lambda b: b.booking_date)

    # ── Mutations ─────────────────────────────────────────────────────────────

    def create(self, user_id: str, seat_id: str, d: date,
               created_at: datetime,
               on_commit: Optional[Callable[[Booking], None]] = None) -> Booking:
        """
        on_commit runs under the lock before the booking becomes visible;
        if it raises, nothing is stored (the id is still burned).
        """
        with self._lock:
            self._check_free(user_id, seat_id, d)
            booking = Booking(
                booking_id=f"BK{next(self._sequence):06d}",
                user_id=user_id, seat_id=seat_id,
                booking_date=d, created_at=created_at,
            )
            if on_commit is not None:
                on_commit(booking)
            self._insert(booking)
            return booking

    def cancel(self, booking_id: str,
               on_commit: Optional[Callable[[Booking], None]] = None) -> bool:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None or not booking.is_active:
                return False

            cancelled = replace(booking, status=BookingStatus.CANCELLED)
            if on_commit is not None:
                on_commit(cancelled)
            self._bookings[booking_id] = cancelled
            _discard(self._seats_by_date, booking.booking_date, booking.seat_id)
            _discard(self._users_by_date, booking.booking_date, booking.user_id)
            return True

    def restore(self, booking: Booking):
        """Re-insert a previously committed booking; rules are not re-run."""
        with self._lock:
            if booking.booking_id in self._bookings:
                raise ValueError(f"Duplicate booking id: {booking.booking_id}")
            floor = _sequence_of(booking.booking_id)
            if booking.is_active:
                self._check_free(booking.user_id, booking.seat_id, booking.booking_date)
                self._insert(booking)
            else:
                self._bookings[booking.booking_id] = booking

            # never hand out an id at or below a restored one
            current = next(self._sequence)
            self._sequence = itertools.count(max(current, floor + 1))

    # ── Index consistency ─────────────────────────────────────────────────────

    def indices(self) -> tuple[dict, dict]:
        with self._lock:
            return (
                {d: set(s) for d, s in self._seats_by_date.items()},
                {d: set(u) for d, u in self._users_by_date.items()},
            )

    def rebuild_indices(self) -> tuple[dict, dict]:
        seats: dict[date, set[str]] = {}
        users: dict[date, set[str]] = {}
        with self._lock:
            for b in self._bookings.values():
                if b.is_active:
                    seats.setdefault(b.booking_date, set()).add(b.seat_id)
                    users.setdefault(b.booking_date, set()).add(b.user_id)
        return seats, users

    def __len__(self) -> int:
        return len(self._bookings)

    # ── Internals (lock held) ─────────────────────────────────────────────────

    def _check_free(self, user_id: str, seat_id: str, d: date):
        if self.is_user_booked(user_id, d):
            raise ConflictError("USER_ALREADY_BOOKED",
                                f"User {user_id} already has an active booking on {d.isoformat()}")
        if self.is_seat_booked(seat_id, d):
            raise ConflictError("SEAT_ALREADY_BOOKED",
                                f"Seat {seat_id} is already booked on {d.isoformat()}")

    def _insert(self, booking: Booking):
        self._bookings[booking.booking_id] = booking
        self._seats_by_date.setdefault(booking.booking_date, set()).add(booking.seat_id)
        self._users_by_date.setdefault(booking.booking_date, set()).add(booking.user_id)


def _discard(index: dict, d: date, member: str):
    members = index.get(d)
    if members is None:
        return
    members.discard(member)
    if not members:
        del index[d]
