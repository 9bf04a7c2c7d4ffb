import logging
from contextlib import contextmanager
from enum import Enum
from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlmodel import Session

logger = logging.getLogger(__name__)


class StoreErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


# User-facing text for each kind
MESSAGES = {
    StoreErrorKind.PERMISSION_DENIED: "You do not have permission to save this. Make sure you are signed in as an administrator.",
    StoreErrorKind.UNAVAILABLE: "The database is unreachable. Check the connection and try again.",
    StoreErrorKind.QUOTA_EXCEEDED: "Storage quota exceeded. Contact support.",
    StoreErrorKind.CONFLICT: "The record conflicts with an existing one.",
    StoreErrorKind.NOT_FOUND: "The record no longer exists.",
    StoreErrorKind.UNKNOWN: "An unexpected error occurred while saving.",
}

STATUS_CODES = {
    StoreErrorKind.PERMISSION_DENIED: 403,
    StoreErrorKind.UNAVAILABLE: 503,
    StoreErrorKind.QUOTA_EXCEEDED: 429,
    StoreErrorKind.CONFLICT: 409,
    StoreErrorKind.NOT_FOUND: 404,
    StoreErrorKind.UNKNOWN: 500,
}

SQLITE_KINDS = {
    "SQLITE_PERM": StoreErrorKind.PERMISSION_DENIED,
    "SQLITE_READONLY": StoreErrorKind.PERMISSION_DENIED,
    "SQLITE_AUTH": StoreErrorKind.PERMISSION_DENIED,
    "SQLITE_BUSY": StoreErrorKind.UNAVAILABLE,
    "SQLITE_LOCKED": StoreErrorKind.UNAVAILABLE,
    "SQLITE_CANTOPEN": StoreErrorKind.UNAVAILABLE,
    "SQLITE_IOERR": StoreErrorKind.UNAVAILABLE,
    "SQLITE_FULL": StoreErrorKind.QUOTA_EXCEEDED,
    "SQLITE_CONSTRAINT": StoreErrorKind.CONFLICT,
}


class StoreError(Exception):
    """A failed read or write against the database, with a typed kind."""

    def __init__(self, kind: StoreErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or MESSAGES[kind]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @classmethod
    def from_exception(cls, exc: Exception) -> "StoreError":
        return cls(classify_error(exc))


def _pg_kind(pgcode: str) -> Optional[StoreErrorKind]:
    if pgcode == "42501":
        return StoreErrorKind.PERMISSION_DENIED
    if pgcode.startswith("08") or pgcode.startswith("57P"):
        return StoreErrorKind.UNAVAILABLE
    if pgcode.startswith("53"):
        return StoreErrorKind.QUOTA_EXCEEDED
    if pgcode.startswith("23"):
        return StoreErrorKind.CONFLICT
    return None


def classify_error(exc: Exception) -> StoreErrorKind:
    """Map a driver/ORM exception onto a StoreErrorKind."""
    if isinstance(exc, StoreError):
        return exc.kind
    if isinstance(exc, IntegrityError):
        return StoreErrorKind.CONFLICT

    orig = exc.orig if isinstance(exc, DBAPIError) else exc

    sqlite_name = getattr(orig, "sqlite_errorname", None)
    if sqlite_name:
        # Extended codes look like SQLITE_IOERR_WRITE
        for prefix, kind in SQLITE_KINDS.items():
            if sqlite_name.startswith(prefix):
                return kind

    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode:
        kind = _pg_kind(pgcode)
        if kind:
            return kind

    # Drivers without error codes
    text = str(orig).lower()
    if "permission" in text or "readonly" in text or "read-only" in text:
        return StoreErrorKind.PERMISSION_DENIED
    if "locked" in text or "unable to open" in text or "connection" in text:
        return StoreErrorKind.UNAVAILABLE
    if "quota" in text or "disk is full" in text:
        return StoreErrorKind.QUOTA_EXCEEDED
    return StoreErrorKind.UNKNOWN


@contextmanager
def store_errors(session: Session):
    """Run writes against the session; roll back and raise StoreError on failure."""
    try:
        yield session
    except SQLAlchemyError as e:
        session.rollback()
        error = StoreError.from_exception(e)
        logger.error("Database error (%s): %s", error.kind.value, e)
        raise error from e
