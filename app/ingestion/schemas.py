from pydantic import BaseModel, field_validator

from app.scheduling.roster import Squad, SeatType


class UserSchema(BaseModel):
    id: str
    name: str
    squad: Squad

    @field_validator("id")
    @classmethod
    def valid_user_id(cls, v):
        if not (v.startswith("U") and v[1:].isdigit()):
            raise ValueError(f"Bad user id: {v}")
        return v

    @field_validator("name")
    @classmethod
    def non_empty_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("User name cannot be empty")
        return v


class SeatSchema(BaseModel):
    id: str
    seat_number: int
    seat_type: SeatType
    row: int
    column: int

    @field_validator("id")
    @classmethod
    def valid_seat_id(cls, v):
        if not (v.startswith("S") and v[1:].isdigit()):
            raise ValueError(f"Bad seat id: {v}")
        return v

    @field_validator("seat_number", "row", "column")
    @classmethod
    def positive(cls, v):
        if v < 1:
            raise ValueError(f"Must be >= 1: {v}")
        return v
