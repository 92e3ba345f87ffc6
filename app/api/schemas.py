from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.scheduling.roster import Batch, Squad, SeatType, Seat, User
from app.scheduling.state import BookingStatus


class BookingCreate(BaseModel):
    user_id: str
    seat_id: str
    booking_date: date


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    booking_id: str
    user_name: str
    seat_number: int
    seat_type: SeatType
    booking_date: date
    status: BookingStatus
    message: Optional[str] = None


class SeatAvailabilityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    seat_id: str
    seat_number: int
    seat_type: SeatType
    available: bool


class UserOut(BaseModel):
    user_id: str
    name: str
    squad: Squad
    batch: Batch

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(user_id=user.user_id, name=user.name,
                   squad=user.squad, batch=user.batch)


class SeatOut(BaseModel):
    seat_id: str
    seat_number: int
    seat_type: SeatType
    row: int
    column: int
    display_char: str

    @classmethod
    def from_seat(cls, seat: Seat) -> "SeatOut":
        return cls(seat_id=seat.seat_id, seat_number=seat.seat_number,
                   seat_type=seat.seat_type, row=seat.row, column=seat.column,
                   display_char=seat.display_char)


class RotationOut(BaseModel):
    target_date: date
    day: str
    week_offset: int
    allowed_batch: Batch
    label: str
