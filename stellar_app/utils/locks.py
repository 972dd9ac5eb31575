"""Per-account gate for ledger-mutating actions."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

__all__ = ["AccountBusy", "AccountGate"]


class AccountBusy(RuntimeError):
    """Raised when another ledger transaction for the account is still in flight."""

    def __init__(self, account: str) -> None:
        super().__init__(f"Another transaction for account {account} is still in flight.")
        self.account = account


class AccountGate:
    """Non-blocking mutual exclusion keyed by account public key.

    Transactions from one account share a sequence number, so two concurrent
    submissions would race for it. The gate refuses the second one instead of
    queueing it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._held: set[str] = set()

    def try_acquire(self, account: str) -> bool:
        with self._lock:
            if account in self._held:
                return False
            self._held.add(account)
            return True

    def release(self, account: str) -> None:
        with self._lock:
            self._held.discard(account)

    def is_held(self, account: str) -> bool:
        with self._lock:
            return account in self._held

    @contextmanager
    def hold(self, account: str) -> Iterator[None]:
        if not self.try_acquire(account):
            raise AccountBusy(account)
        try:
            yield
        finally:
            self.release(account)
