"""Mini README: Cached invite-only allow-list.

Structure:
    * AllowList - fetches the list of admitted addresses over HTTP and
      answers ``is_allowed`` from a cache refreshed at most every TTL.

The remote list is a JSON array whose entries are either address strings
or objects with an ``address`` key. A failed refresh never raises: the last
good list keeps being served, and before any successful fetch the list is
empty, which denies everyone. A failed refresh does not restart the TTL, so
the next request tries again.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, FrozenSet, Optional

import httpx

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class AllowList:
    """Address allow-list backed by a remote JSON endpoint."""

    def __init__(
        self,
        url: str,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
        timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._client = client or httpx.Client(timeout=timeout)
        self._clock = clock
        self._cache: Optional[FrozenSet[str]] = None
        self._fetched_at = 0.0
        self._lock = threading.Lock()

    def is_allowed(self, address: Optional[str]) -> bool:
        """Return whether ``address`` is on the list (case-insensitive)."""

        if not address:
            return False
        return address.strip().lower() in self.entries()

    def entries(self) -> FrozenSet[str]:
        """Return the cached list, refreshing it when the TTL has lapsed."""

        with self._lock:
            now = self._clock()
            if self._cache is not None and now - self._fetched_at < self.ttl_seconds:
                return self._cache
            try:
                fetched = self._fetch()
            except (httpx.HTTPError, ValueError, TypeError) as error:
                LOGGER.error("Whitelist fetch failed: %s", error)
                return self._cache if self._cache is not None else frozenset()
            self._cache = fetched
            self._fetched_at = now
            LOGGER.debug("Whitelist refreshed with %s addresses", len(fetched))
            return fetched

    def _fetch(self) -> FrozenSet[str]:
        response = self._client.get(self.url)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError("whitelist payload must be a JSON array")
        addresses = set()
        for entry in payload:
            value = entry.get("address") if isinstance(entry, dict) else entry
            if not isinstance(value, str):
                raise TypeError(f"unsupported whitelist entry: {entry!r}")
            addresses.add(value.strip().lower())
        return frozenset(addresses)

    def close(self) -> None:
        self._client.close()
