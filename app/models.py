from sqlalchemy import (
    Column, String, Integer, DateTime, Date, JSON, ForeignKey, Index,
    Enum as SAEnum
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from app.scheduling.roster import Squad, SeatType
from app.scheduling.state import BookingStatus

Base = declarative_base()


# ── Roster mirror ─────────────────────────────────────────────────────────────

class UserRecord(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)              # e.g. "U01"
    name = Column(String, nullable=False)
    squad = Column(SAEnum(Squad), nullable=False)      # batch is derived, never stored
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class SeatRecord(Base):
    __tablename__ = "seats"

    id = Column(String, primary_key=True)              # e.g. "S01"
    seat_number = Column(Integer, nullable=False, unique=True)
    seat_type = Column(SAEnum(SeatType), nullable=False)
    row = Column(Integer, nullable=False)
    column = Column(Integer, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


# ── Booking journal ───────────────────────────────────────────────────────────

class BookingRecord(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # cancelled rows keep their (seat, date), so no unique constraint here;
        # the in-memory store enforces one ACTIVE booking per seat/user per date
        Index("ix_bookings_date_status", "booking_date", "status"),
    )

    id = Column(String, primary_key=True)              # e.g. "BK000001"
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    seat_id = Column(String, ForeignKey("seats.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    status = Column(SAEnum(BookingStatus), nullable=False)
    created_at = Column(DateTime, nullable=False)
    cancelled_at = Column(DateTime, nullable=True)


# ── Ingestion tracking ────────────────────────────────────────────────────────

class IngestionRun(Base):
    __tablename__ = "ingestion_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_at = Column(DateTime, server_default=func.now())
    source_hash = Column(String, nullable=False)       # hash of input files
    status = Column(String, default="success")
    diff_summary = Column(JSON, default=dict)          # what changed
