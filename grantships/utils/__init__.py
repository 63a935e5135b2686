"""Mini README: Small shared helpers.

Currently exposes the clock used to stamp ledger entities and to evaluate
round expiry, kept injectable so tests control time.
"""

from .clock import Clock, utc_now

__all__ = ["Clock", "utc_now"]
