"""
Booking journal — mirrors committed bookings into the DB so a restarted
process can restore its state.

Writes run inside the store's locked commit: if one raises, the in-memory
change is not applied. No durability guarantee beyond what the DB commit gives.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from app.models import BookingRecord
from app.scheduling.state import Booking, BookingStatus, BookingStore

logger = logging.getLogger(__name__)


def _to_record(booking: Booking) -> BookingRecord:
    return BookingRecord(
        id=booking.booking_id,
        user_id=booking.user_id,
        seat_id=booking.seat_id,
        booking_date=booking.booking_date,
        status=booking.status,
        created_at=booking.created_at,
    )


def _to_booking(record: BookingRecord) -> Booking:
    return Booking(
        booking_id=record.id,
        user_id=record.user_id,
        seat_id=record.seat_id,
        booking_date=record.booking_date,
        created_at=record.created_at,
        status=record.status,
    )


class BookingJournal:

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def record_created(self, booking: Booking):
        with self._session_factory() as db:
            db.add(_to_record(booking))
            db.commit()

    def record_cancelled(self, booking_id: str, cancelled_at: datetime):
        with self._session_factory() as db:
            record = db.get(BookingRecord, booking_id)
            if record is None:
                # created before the journal was attached
                logger.warning("cancel of unjournaled booking %s", booking_id)
                return
            record.status = BookingStatus.CANCELLED
            record.cancelled_at = cancelled_at
            db.commit()

    def restore_into(self, store: BookingStore) -> int:
        """Replay every journaled booking (cancelled ones too, to keep ids unique)."""
        with self._session_factory() as db:
            records = _ordered_records(db)
            for record in records:
                store.restore(_to_booking(record))
        logger.info("restored %d journaled bookings", len(records))
        return len(records)


def _ordered_records(db: Session) -> list[BookingRecord]:
    return (
        db.query(BookingRecord)
        .order_by(BookingRecord.created_at, BookingRecord.id)
        .all()
    )
