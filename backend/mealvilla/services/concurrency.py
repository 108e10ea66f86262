# Overview: Service-layer retry helper around store writes that can hit concurrency conflicts.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float = 0.1, retry_on_integrity: bool = False):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). With retry_on_integrity, an
    IntegrityError is retried too; used where a concurrent insert of the
    same key is expected and the next attempt will find the row.
    """
    if attempts is None:
        attempts = current_app.config.get("STORE_RETRY_ATTEMPTS", 3)

    retryable: tuple = (OperationalError, StaleDataError)
    if retry_on_integrity:
        retryable = retryable + (IntegrityError,)

    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except retryable as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            current_app.logger.info(
                "Retrying store operation after %s (attempt %d/%d)",
                type(exc).__name__, attempt + 1, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
