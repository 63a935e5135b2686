"""Mini README: Per-round mutual exclusion.

``RoundLocks`` lazily creates two locks for every round id:

    * ledger - re-entrant lock guarding budget-affecting check-then-act
      sequences (funding credits, approvals, the distribution commit and
      lazy expiry). Held only for in-memory work, never across network calls.
    * distribution - serialises whole distribution runs of one round so an
      allocation can never be picked up by two concurrent payout batches.

Distinct rounds never share a lock.
"""

from __future__ import annotations

import threading
from typing import Callable, ContextManager, Dict

_AnyLock = ContextManager


class RoundLocks:
    """Lazily allocated lock pairs keyed by round id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._ledger: Dict[str, _AnyLock] = {}
        self._distribution: Dict[str, _AnyLock] = {}

    def ledger(self, round_id: str) -> _AnyLock:
        return self._lookup(self._ledger, round_id, threading.RLock)

    def distribution(self, round_id: str) -> _AnyLock:
        return self._lookup(self._distribution, round_id, threading.Lock)

    def _lookup(self, table: Dict[str, _AnyLock], round_id: str, factory: Callable[[], _AnyLock]) -> _AnyLock:
        with self._guard:
            lock = table.get(round_id)
            if lock is None:
                lock = table[round_id] = factory()
            return lock
