"""
Read-modify-write with optimistic concurrency.

Course and XPProfile rows carry a version column. When another request commits
first, our flush raises StaleDataError (or IntegrityError for a duplicate
profile insert). The whole operation is rolled back, re-read and re-applied.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from api.utils.errors import LearnSphereError, PersistenceError
from api.utils.logger import configure_logging

logger = configure_logging()

T = TypeVar("T")


def run_atomic(db: Session, operation: Callable[[], T], *, name: str, retries: int = 3) -> T:
    """
    Run `operation` (which loads, mutates and stages rows on `db`) and commit it.
    Conflicting concurrent writes retry the whole operation up to `retries` times.
    """
    attempts = max(1, retries)
    last_conflict: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            db.commit()
            return result
        except (StaleDataError, IntegrityError) as exc:
            db.rollback()
            last_conflict = exc
            logger.warning("write conflict op=%s attempt=%s/%s error=%s", name, attempt, attempts, type(exc).__name__)
        except LearnSphereError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("storage failure op=%s error=%s", name, exc)
            raise PersistenceError(f"{name} failed", {"operation": name}) from exc
    logger.error("write conflict retries exhausted op=%s", name)
    raise PersistenceError(f"{name} failed after {attempts} conflicting writes", {"operation": name}) from last_conflict


def run_read(db: Session, operation: Callable[[], T], *, name: str) -> T:
    """Run a read-only operation, mapping storage failures to PersistenceError."""
    try:
        return operation()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("storage failure op=%s error=%s", name, exc)
        raise PersistenceError(f"{name} failed", {"operation": name}) from exc
