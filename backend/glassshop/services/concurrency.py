# Overview: Row locking and retry helpers shared by stock, document-number and payment writes.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query, of=None):
    """
    Apply row-level locking for critical operations.

    Pass `of` when the query eager-joins other tables: PostgreSQL refuses
    FOR UPDATE on the nullable side of an outer join, so only the named
    table is locked.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    if of is not None:
        return query.with_for_update(of=of)
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on: tuple = ()):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks), StaleDataError
    (optimistic locking conflicts) and any extra exception types passed in
    retry_on (e.g. IntegrityError when two requests race to create the
    same row). The session is rolled back before each retry, so func must
    redo all of its work.
    """
    retryable = RETRYABLE_ERRORS + tuple(retry_on)
    for attempt in range(attempts):
        try:
            return func()
        except retryable as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning("Retrying after %s (attempt %d/%d)", type(exc).__name__, attempt + 1, attempts)
            time.sleep(backoff_base * (2 ** attempt))


def atomic(func):
    """Run func and commit; roll back and re-raise on any failure."""
    try:
        result = func()
        db.session.commit()
        return result
    except Exception:
        db.session.rollback()
        raise
