"""
FastAPI app — seat booking endpoints:
  POST   /api/book
  DELETE /api/cancel/{booking_id}
  GET    /api/availability?date=YYYY-MM-DD
  GET    /api/users
  GET    /api/users/{user_id}/bookings
  GET    /api/seats
  GET    /api/rotation?date=YYYY-MM-DD
  POST   /ingest/run

Rule violations come back as {"error": kind, "code": code, "detail": message}
with 404 / 400 / 403 / 409 per kind.
"""
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import FastAPI, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.schemas import (
    BookingCreate, BookingOut, RotationOut, SeatAvailabilityOut, SeatOut, UserOut
)
from app.booking.engine import BookingEngine
from app.booking.journal import BookingJournal
from app.config import BUCKET_DIR, configure_logging
from app.database import SessionLocal, get_db, init_db
from app.errors import BookingError, ErrorKind
from app.ingestion.job import load_roster, run_ingestion
from app.scheduling.availability import get_day_name
from app.scheduling.rotation import week_offset

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_DATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def build_engine() -> BookingEngine:
    """Mirror the bucket into the DB, load the roster, replay the journal."""
    init_db()
    with SessionLocal() as db:
        run_ingestion(db, BUCKET_DIR)
        roster = load_roster(db)

    journal = BookingJournal(SessionLocal)
    engine = BookingEngine(roster, journal=journal)
    journal.restore_into(engine.store)
    return engine


def create_app(engine: Optional[BookingEngine] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "engine", None) is None:
            configure_logging()
            app.state.engine = build_engine()
            logger.info("engine ready: %d users, %d seats",
                        len(app.state.engine.list_users()),
                        len(app.state.engine.list_seats()))
        yield

    app = FastAPI(title="Seat Booking API", version="1.0.0", lifespan=lifespan)
    app.state.engine = engine

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        return JSONResponse(
            status_code=STATUS_BY_KIND[exc.kind],
            content={"error": exc.kind.value, "code": exc.code, "detail": exc.detail},
        )

    _register_routes(app)
    return app


def get_engine(request: Request) -> BookingEngine:
    engine = request.app.state.engine
    if engine is None:
        raise HTTPException(status_code=503, detail="Booking engine not initialised")
    return engine


def _register_routes(app: FastAPI):

    # ── Bookings ──────────────────────────────────────────────────────────────

    @app.post("/api/book", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
    def book_seat(payload: BookingCreate, engine: BookingEngine = Depends(get_engine)):
        """Book a seat for a user on a given date."""
        result = engine.create_booking(payload.user_id, payload.seat_id, payload.booking_date)
        return BookingOut.model_validate(result)

    @app.delete("/api/cancel/{booking_id}", response_model=BookingOut)
    def cancel_booking(booking_id: str, engine: BookingEngine = Depends(get_engine)):
        """Cancel an active booking and free the seat immediately."""
        return BookingOut.model_validate(engine.cancel_booking(booking_id))

    @app.get("/api/availability", response_model=list[SeatAvailabilityOut])
    def get_availability(
        target_date: date = Query(..., alias="date"),
        engine: BookingEngine = Depends(get_engine),
    ):
        """All seats and whether each is free on the given date."""
        return [SeatAvailabilityOut.model_validate(a)
                for a in engine.get_availability(target_date)]

    # ── Roster ────────────────────────────────────────────────────────────────

    @app.get("/api/users", response_model=list[UserOut])
    def list_users(engine: BookingEngine = Depends(get_engine)):
        return [UserOut.from_user(u) for u in engine.list_users()]

    @app.get("/api/users/{user_id}/bookings", response_model=list[BookingOut])
    def user_bookings(
        user_id: str,
        include_cancelled: bool = False,
        engine: BookingEngine = Depends(get_engine),
    ):
        """A user's bookings, earliest date first."""
        return [BookingOut.model_validate(b)
                for b in engine.bookings_for_user(user_id, include_cancelled)]

    @app.get("/api/seats", response_model=list[SeatOut])
    def list_seats(engine: BookingEngine = Depends(get_engine)):
        return [SeatOut.from_seat(s) for s in engine.list_seats()]

    @app.get("/api/rotation", response_model=RotationOut)
    def rotation(
        target_date: date = Query(..., alias="date"),
        engine: BookingEngine = Depends(get_engine),
    ):
        """Which batch may book on the given date. Weekends → 400."""
        batch = engine.get_allowed_batch(target_date)
        return RotationOut(
            target_date=target_date,
            day=get_day_name(target_date),
            week_offset=week_offset(target_date),
            allowed_batch=batch,
            label=batch.display_name,
        )

    # ── Ingestion ─────────────────────────────────────────────────────────────

    @app.post("/ingest/run")
    def ingest_run(force: bool = False, db: Session = Depends(get_db)):
        """
        Re-mirror the roster bucket into the DB.
        The running roster is closed; changes apply on next start.
        """
        try:
            return run_ingestion(db, BUCKET_DIR, force=force)
        except (OSError, ValueError) as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/")
    def root():
        return {
            "service": "Seat Booking API",
            "version": "1.0.0",
            "endpoints": ["/api/book", "/api/cancel/{booking_id}", "/api/availability",
                          "/api/users", "/api/seats", "/api/rotation", "/ingest/run"],
        }


app = create_app()
