"""
Roster — the closed set of users and seats a process books against.

  Squad → Batch is a lookup table (SQUAD_BATCH), not baked into the enum.
  A user's batch is always derived from its squad, never stored.

Default layout:
  8 users, one per squad (4 per batch)
  50 seats in a 5 x 10 grid, row-major: S01–S40 FIXED, S41–S50 FLOATER
"""
import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable

from app.errors import NotFoundError


# ── Enums ────────────────────────────────────────────────────────────────────

class Batch(str, enum.Enum):
    BATCH_1 = "BATCH_1"
    BATCH_2 = "BATCH_2"

    @property
    def display_name(self) -> str:
        return BATCH_LABELS[self]


class Squad(str, enum.Enum):
    SQUAD_A1 = "SQUAD_A1"
    SQUAD_B1 = "SQUAD_B1"
    SQUAD_C1 = "SQUAD_C1"
    SQUAD_D1 = "SQUAD_D1"
    SQUAD_A2 = "SQUAD_A2"
    SQUAD_B2 = "SQUAD_B2"
    SQUAD_C2 = "SQUAD_C2"
    SQUAD_D2 = "SQUAD_D2"


class SeatType(str, enum.Enum):
    FIXED = "FIXED"
    FLOATER = "FLOATER"


BATCH_LABELS = {
    Batch.BATCH_1: "Batch 1",
    Batch.BATCH_2: "Batch 2",
}

SQUAD_BATCH = MappingProxyType({
    Squad.SQUAD_A1: Batch.BATCH_1,
    Squad.SQUAD_B1: Batch.BATCH_1,
    Squad.SQUAD_C1: Batch.BATCH_1,
    Squad.SQUAD_D1: Batch.BATCH_1,
    Squad.SQUAD_A2: Batch.BATCH_2,
    Squad.SQUAD_B2: Batch.BATCH_2,
    Squad.SQUAD_C2: Batch.BATCH_2,
    Squad.SQUAD_D2: Batch.BATCH_2,
})

SEAT_DISPLAY_CHARS = {SeatType.FIXED: "F", SeatType.FLOATER: "L"}

GRID_ROWS = 5
GRID_COLUMNS = 10
FIXED_SEAT_COUNT = 40


# ── Entities ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class User:
    user_id: str
    name: str
    squad: Squad

    @property
    def batch(self) -> Batch:
        return SQUAD_BATCH[self.squad]


@dataclass(frozen=True)
class Seat:
    seat_id: str
    seat_number: int
    seat_type: SeatType
    row: int
    column: int

    @property
    def display_char(self) -> str:
        return SEAT_DISPLAY_CHARS[self.seat_type]


class Roster:
    """Read-only after construction; safe to share across threads."""

    def __init__(self, users: Iterable[User], seats: Iterable[Seat]):
        self._users = {u.user_id: u for u in users}
        self._seats = {s.seat_id: s for s in seats}

    def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("USER_NOT_FOUND", f"User not found: {user_id}")
        return user

    def get_seat(self, seat_id: str) -> Seat:
        seat = self._seats.get(seat_id)
        if seat is None:
            raise NotFoundError("SEAT_NOT_FOUND", f"Seat not found: {seat_id}")
        return seat

    def users(self) -> list[User]:
        return sorted(self._users.values(), key=lambda u: u.user_id)

    def seats(self) -> list[Seat]:
        return sorted(self._seats.values(), key=lambda s: s.seat_number)

    def users_in_batch(self, batch: Batch) -> list[User]:
        return [u for u in self.users() if u.batch == batch]


# ── Default layout ────────────────────────────────────────────────────────────

def default_users() -> list[User]:
    return [
        User(user_id=f"U{i:02d}", name=f"User {i}", squad=squad)
        for i, squad in enumerate(Squad, start=1)
    ]


def default_seats(rows: int = GRID_ROWS, columns: int = GRID_COLUMNS,
                  fixed_count: int = FIXED_SEAT_COUNT) -> list[Seat]:
    seats = []
    number = 1
    for row in range(1, rows + 1):
        for col in range(1, columns + 1):
            seat_type = SeatType.FIXED if number <= fixed_count else SeatType.FLOATER
            seats.append(Seat(
                seat_id=f"S{number:02d}", seat_number=number,
                seat_type=seat_type, row=row, column=col,
            ))
            number += 1
    return seats


def build_default_roster() -> Roster:
    return Roster(default_users(), default_seats())
