"""
Booking error taxonomy.

Every rule violation carries a kind (what the transport maps to a status)
and a code (which rule fired). Callers branch on those, never on message text.
"""
import enum
from dataclasses import dataclass


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_DATE = "INVALID_DATE"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"


class BookingError(Exception):
    """Base booking exception."""

    kind: ErrorKind

    def __init__(self, code: str, detail: str) -> None:
        super().__init__(detail)
        self.code = code
        self.detail = detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, detail={self.detail!r})"


class NotFoundError(BookingError):
    """Unknown user, seat or booking identifier."""

    kind = ErrorKind.NOT_FOUND


class InvalidDateError(BookingError):
    """Date outside the window, on a weekend, or wrong day for a floater."""

    kind = ErrorKind.INVALID_DATE


class ForbiddenError(BookingError):
    """Wrong rotation batch, or floater requested before the cutoff."""

    kind = ErrorKind.FORBIDDEN


class ConflictError(BookingError):
    """Seat or user already holds an active booking on that date."""

    kind = ErrorKind.CONFLICT


_ERRORS_BY_KIND = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.INVALID_DATE: InvalidDateError,
    ErrorKind.FORBIDDEN: ForbiddenError,
    ErrorKind.CONFLICT: ConflictError,
}


@dataclass(frozen=True)
class Rejection:
    kind: ErrorKind
    code: str
    detail: str

    def to_error(self) -> BookingError:
        return _ERRORS_BY_KIND[self.kind](self.code, self.detail)
