"""
Per-account locks.

Every mutation of an account row runs while holding that account's
lock, from the first read of the row until after the commit. This
gives a total order of mutations per account and rules out lost
updates between concurrent callers in this process. On PostgreSQL
the same rows are additionally locked with SELECT ... FOR UPDATE,
which covers other processes.

Transfers hold two locks. They are always acquired in ascending
user id order, so two transfers moving funds in opposite directions
between the same pair of accounts cannot deadlock.

An account's lock exists only while some caller holds or waits on
it, so user ids that pass through once (unknown ones included) do
not accumulate.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator

from admin_ledger.config import get_settings
from admin_ledger.exceptions import Busy

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class AccountLockRegistry:
    """Hands out one lock per user id, created on demand."""

    def __init__(self, timeout: float | None = None):
        self.timeout = (
            timeout if timeout is not None
            else get_settings().LOCK_TIMEOUT_SECONDS
        )
        self._entries: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    def active_count(self) -> int:
        """Number of accounts currently locked or waited on."""
        with self._guard:
            return len(self._entries)

    def _checkout(self, user_id: str) -> threading.Lock:
        with self._guard:
            entry = self._entries.get(user_id)
            if entry is None:
                entry = self._entries[user_id] = _Entry()
            entry.users += 1
            return entry.lock

    def _checkin(self, user_id: str) -> None:
        with self._guard:
            entry = self._entries[user_id]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[user_id]

    @contextmanager
    def hold(self, user_ids: Iterable[str]) -> Iterator[list[str]]:
        """
        Acquire the locks for all given accounts, in ascending order.

        Raises Busy if any lock can't be acquired within the timeout.
        Locks already taken are released before raising.
        """
        ordered = sorted(set(user_ids))
        acquired: list[tuple[str, threading.Lock]] = []
        try:
            for user_id in ordered:
                lock = self._checkout(user_id)
                if not lock.acquire(timeout=self.timeout):
                    self._checkin(user_id)
                    logger.warning(
                        "Timed out after %ss waiting for account lock %s",
                        self.timeout, user_id,
                    )
                    raise Busy(
                        f"Account {user_id} is busy, try again shortly"
                    )
                acquired.append((user_id, lock))
            yield ordered
        finally:
            for user_id, lock in reversed(acquired):
                lock.release()
                self._checkin(user_id)


# Shared by every service instance in the process
account_locks = AccountLockRegistry()
