"""Mini README: Budget accounting and allocation/distribution ledger.

This package holds everything with money-correctness risk: the round and
application registries, the allocation ledger that gates budget debits, the
distribution engine that pays allocations, and the funding verifier that
credits budgets. Modules keep state in ``Repository`` instances and
serialise budget-affecting work per round through ``RoundLocks``.
"""

from .allocations import AllocationLedger, Decision
from .amounts import WEI_PER_ETHER, format_ether, parse_amount, parse_ether, split_fee
from .applications import ApplicationRegistry
from .distribution import DEFAULT_FEE_PERCENT, DistributionEngine
from .funding import FundingVerifier
from .locks import RoundLocks
from .models import (
    Allocation,
    Application,
    ApplicationStatus,
    DistributionRecord,
    FundingCredit,
    Payout,
    Round,
    RoundStatus,
    effective_status,
)
from .rounds import RoundRegistry
from .store import InMemoryRepository, Repository

__all__ = [
    "Allocation",
    "AllocationLedger",
    "Application",
    "ApplicationRegistry",
    "ApplicationStatus",
    "DEFAULT_FEE_PERCENT",
    "Decision",
    "DistributionEngine",
    "DistributionRecord",
    "FundingCredit",
    "FundingVerifier",
    "InMemoryRepository",
    "Payout",
    "Repository",
    "Round",
    "RoundLocks",
    "RoundRegistry",
    "RoundStatus",
    "WEI_PER_ETHER",
    "effective_status",
    "format_ether",
    "parse_amount",
    "parse_ether",
    "split_fee",
]
