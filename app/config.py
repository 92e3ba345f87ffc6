"""
Runtime settings — read once from the environment.

  DATABASE_URL      journal + roster mirror (default: local sqlite file)
  BUCKET_DIR        roster JSON files for ingestion
  MAX_ADVANCE_DAYS  forward booking window in days
  FLOATER_CUTOFF    earliest time of day a floater seat may be booked
  ROTATION_ANCHOR   Monday that starts week 0 of the batch rotation
  LOG_LEVEL         root log level
"""
import logging
import os
from datetime import date, time
from pathlib import Path

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./seat_booking.db")
BUCKET_DIR = Path(os.getenv("BUCKET_DIR", "data/bucket"))

MAX_ADVANCE_DAYS = int(os.getenv("MAX_ADVANCE_DAYS", "14"))
FLOATER_CUTOFF = time.fromisoformat(os.getenv("FLOATER_CUTOFF", "15:00"))
ROTATION_ANCHOR = date.fromisoformat(os.getenv("ROTATION_ANCHOR", "2024-01-01"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

if ROTATION_ANCHOR.weekday() != 0:
    raise ValueError(f"ROTATION_ANCHOR must be a Monday, got {ROTATION_ANCHOR}")


def configure_logging(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=level,
        format="[%(name)s] %(levelname)s %(message)s",
    )
