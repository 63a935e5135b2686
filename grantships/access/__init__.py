"""Mini README: Access control helpers.

Exposes the cached allow-list consulted by the HTTP layer before any
state-changing request is accepted.
"""

from .allowlist import AllowList

__all__ = ["AllowList"]
