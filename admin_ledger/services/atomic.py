"""
Atomic unit of work.

A balance change and the audit record describing it must commit
together or not at all. Each mutating service operation runs inside
atomic(): the account locks are taken first, the body reads, checks
and writes through the session, and the unit commits before the
locks are released. Any exception rolls the session back, so no
partial effect survives a failure and a retry is always safe.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from admin_ledger.exceptions import LedgerError, Busy, StorageError
from admin_ledger.services.locking import AccountLockRegistry, account_locks

logger = logging.getLogger(__name__)

# Driver messages that mean "someone else holds the row/database"
_LOCK_ERROR_MARKERS = (
    "database is locked",
    "lock timeout",
    "could not obtain lock",
    "deadlock detected",
)


def _is_lock_error(error: SQLAlchemyError) -> bool:
    if not isinstance(error, OperationalError):
        return False
    message = str(error.orig).lower()
    return any(marker in message for marker in _LOCK_ERROR_MARKERS)


@contextmanager
def atomic(
    db: Session,
    user_ids: Iterable[str],
    operation: str,
    locks: AccountLockRegistry | None = None,
) -> Iterator[None]:
    """
    Run the enclosed block as one atomic unit over the given accounts.

    Business-rule errors propagate unchanged. Storage faults become
    StorageError (or Busy for lock conflicts) with the driver error
    chained, never exposed in the message.
    """
    registry = locks if locks is not None else account_locks
    with registry.hold(user_ids):
        try:
            yield
            db.commit()
        except LedgerError as e:
            db.rollback()
            logger.info("%s rejected: %s (%s)", operation, e, e.kind)
            raise
        except IntegrityError as e:
            # A concurrent unit committed a conflicting row first
            db.rollback()
            logger.warning("%s conflicted with a concurrent write: %s", operation, e.orig)
            raise StorageError("The ledger store is unavailable") from e
        except SQLAlchemyError as e:
            db.rollback()
            if _is_lock_error(e):
                logger.warning("%s hit a database lock: %s", operation, e)
                raise Busy("The account is busy, try again shortly") from e
            logger.exception("%s failed in storage", operation)
            raise StorageError("The ledger store is unavailable") from e
        except Exception:
            db.rollback()
            logger.exception("%s failed unexpectedly", operation)
            raise
