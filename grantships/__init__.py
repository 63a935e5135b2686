"""Mini README: Core package initializer for the Grant Ships platform.

Grant Ships runs time-boxed grant rounds ("ships"): captains allocate a
round's verified budget to applications and the platform pays approved
allocations out on chain, net of a fee. The ledger lives in
``grantships.ledger``; the HTTP surface in ``grantships.interface``.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
