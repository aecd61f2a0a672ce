"""
Store error taxonomy.

Every SQLAlchemy/DBAPI failure raised by the table client is translated into
one of these so callers can branch on the class instead of parsing driver
messages. The original message is kept verbatim on the exception.
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError, SQLAlchemyError


class StoreError(Exception):
    """Generic backend failure. The message is safe to surface as-is."""


class RecordNotFoundError(StoreError):
    """An update/delete matched no row."""


class UniqueViolationError(StoreError):
    """Insert collided with an existing primary or unique key."""


class SchemaMismatchError(StoreError):
    """The backend is missing a column the client expects (legacy schema)."""


_UNIQUE_PGCODE = "23505"

_SCHEMA_MARKERS = (
    "no such column",
    "has no column named",
    "unconsumed column names",
    "schema cache",
)


def _message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).strip()


def is_schema_mismatch_message(message: str) -> bool:
    lowered = (message or "").lower()
    if any(marker in lowered for marker in _SCHEMA_MARKERS):
        return True
    # postgres: column "foo" of relation "jobs" does not exist
    return "column" in lowered and "does not exist" in lowered


def translate_db_error(exc: SQLAlchemyError) -> StoreError:
    message = _message(exc)
    if isinstance(exc, IntegrityError):
        pgcode = getattr(getattr(exc, "orig", None), "pgcode", None)
        lowered = message.lower()
        if pgcode == _UNIQUE_PGCODE or "unique" in lowered or "duplicate key" in lowered:
            return UniqueViolationError(message)
    if is_schema_mismatch_message(message):
        return SchemaMismatchError(message)
    return StoreError(message)
