"""
Ingestion pipeline — reads roster bucket files, validates, upserts to DB.
Idempotent: same input = same hash = skips re-insert.
The DB mirrors the bucket exactly: records dropped from a file are deleted,
unless a journaled booking still references them (the run then fails).

  data/bucket/users.json   [{"id": "U01", "name": "User 1", "squad": "SQUAD_A1"}, ...]
  data/bucket/seats.json   [{"id": "S01", "seat_number": 1, "seat_type": "FIXED",
                             "row": 1, "column": 1}, ...]

The running engine never sees these writes; the roster is closed for the
life of a process and load_roster() is only called at startup.
"""
import json
import hashlib
import logging
from collections import Counter
from pathlib import Path

from sqlalchemy.orm import Session

from app.config import BUCKET_DIR
from app.models import UserRecord, SeatRecord, BookingRecord, IngestionRun
from app.ingestion.schemas import UserSchema, SeatSchema
from app.scheduling.roster import Roster, User, Seat

logger = logging.getLogger(__name__)

USERS_FILE = "users.json"
SEATS_FILE = "seats.json"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _hash_file(path: Path) -> str:
    return hashlib.md5(path.read_bytes()).hexdigest()

def _bucket_hash(bucket_dir: Path) -> str:
    """Single hash of all bucket files combined."""
    combined = "".join(
        _hash_file(f) for f in sorted(bucket_dir.iterdir()) if f.is_file()
    )
    return hashlib.md5(combined.encode()).hexdigest()

def _load_json(bucket_dir: Path, filename: str) -> list:
    return json.loads((bucket_dir / filename).read_text())

def _ensure_unique(values: list, what: str):
    dupes = sorted(v for v, n in Counter(values).items() if n > 1)
    if dupes:
        raise ValueError(f"Duplicate {what}: {dupes}")


def read_bucket(bucket_dir: Path = BUCKET_DIR) -> tuple[list[UserSchema], list[SeatSchema]]:
    """Parse + validate both roster files. Raises on any bad record."""
    users = [UserSchema(**r) for r in _load_json(bucket_dir, USERS_FILE)]
    seats = [SeatSchema(**r) for r in _load_json(bucket_dir, SEATS_FILE)]

    _ensure_unique([u.id for u in users], "user ids")
    _ensure_unique([s.id for s in seats], "seat ids")
    _ensure_unique([s.seat_number for s in seats], "seat numbers")
    _ensure_unique([(s.row, s.column) for s in seats], "seat positions")
    return users, seats


# ── Upsert ────────────────────────────────────────────────────────────────────

def _upsert(db: Session, model, records: list) -> dict:
    diff = {"upserted": [], "unchanged": []}

    for r in records:
        existing = db.get(model, r.id)
        data = r.model_dump()

        if existing:
            changed = {k: v for k, v in data.items() if getattr(existing, k) != v}
            if changed:
                for k, v in changed.items():
                    setattr(existing, k, v)
                diff["upserted"].append(r.id)
            else:
                diff["unchanged"].append(r.id)
        else:
            db.add(model(**data))
            diff["upserted"].append(r.id)

    return diff


def _prune(db: Session, model, keep_ids: set, booking_column) -> list:
    """Delete mirror rows gone from the bucket. Refuses while bookings point at them."""
    stale = [r for r in db.query(model).all() if r.id not in keep_ids]
    if not stale:
        return []

    ids = sorted(r.id for r in stale)
    in_use = sorted({
        v for (v,) in db.query(booking_column).filter(booking_column.in_(ids)).distinct()
    })
    if in_use:
        raise ValueError(
            f"Cannot remove {model.__tablename__} still referenced by bookings: {in_use}"
        )
    for r in stale:
        db.delete(r)
    return ids


# ── Main entry points ─────────────────────────────────────────────────────────

def run_ingestion(db: Session, bucket_dir: Path = BUCKET_DIR, force: bool = False) -> dict:
    """
    Run full ingestion. Skips if bucket hash unchanged (idempotent).
    Set force=True to re-ingest regardless.
    """
    bucket_hash = _bucket_hash(bucket_dir)

    # Idempotency check
    if not force:
        last_run = (
            db.query(IngestionRun)
            .filter(IngestionRun.status == "success")
            .order_by(IngestionRun.id.desc())
            .first()
        )
        if last_run and last_run.source_hash == bucket_hash:
            logger.info("bucket unchanged (%s), skipping", bucket_hash)
            return {
                "status": "skipped",
                "reason": "bucket unchanged",
                "hash": bucket_hash
            }

    diff_summary = {}
    try:
        users, seats = read_bucket(bucket_dir)
        diff_summary["users"] = _upsert(db, UserRecord, users)
        diff_summary["seats"] = _upsert(db, SeatRecord, seats)
        diff_summary["users"]["removed"] = _prune(
            db, UserRecord, {u.id for u in users}, BookingRecord.user_id)
        diff_summary["seats"]["removed"] = _prune(
            db, SeatRecord, {s.id for s in seats}, BookingRecord.seat_id)

        db.add(IngestionRun(
            source_hash=bucket_hash,
            status="success",
            diff_summary=diff_summary
        ))
        db.commit()

    except Exception as e:
        db.rollback()
        db.add(IngestionRun(
            source_hash=bucket_hash,
            status="failed",
            diff_summary={"error": str(e)}
        ))
        db.commit()
        logger.error("ingestion failed: %s", e)
        raise

    logger.info(
        "ingested users=%d/%d seats=%d/%d (upserted/total)",
        len(diff_summary["users"]["upserted"]), len(users),
        len(diff_summary["seats"]["upserted"]), len(seats),
    )
    return {
        "status": "success",
        "hash": bucket_hash,
        "diff": diff_summary,
    }


def load_roster(db: Session) -> Roster:
    """Build the process roster from the DB mirror."""
    users = [
        User(user_id=u.id, name=u.name, squad=u.squad)
        for u in db.query(UserRecord).all()
    ]
    seats = [
        Seat(seat_id=s.id, seat_number=s.seat_number, seat_type=s.seat_type,
             row=s.row, column=s.column)
        for s in db.query(SeatRecord).all()
    ]
    return Roster(users, seats)
