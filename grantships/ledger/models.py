"""Mini README: Ledger entities and their serialisable views.

Structure:
    * RoundStatus / ApplicationStatus - lifecycle enums.
    * Round - a grant ship with its budget, allocated and distributed totals.
    * Application - a funding request scoped to one round.
    * Allocation - an approved reservation of part of a round's budget.
    * Payout / DistributionRecord - audit trail of a distribution run.
    * FundingCredit - a verified inbound transaction credited to a round.
    * effective_status - pure helper applying lazy expiry at read time.

Entities are mutable dataclasses owned by the repositories in
``grantships.ledger.store``. Applications and allocations refer to their
round by ``round_id`` only; lookups go through the registries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .amounts import format_ether


class RoundStatus(str, Enum):
    """Lifecycle of a grant round."""

    OPEN = "open"
    CLOSED = "closed"
    DISTRIBUTING = "distributing"
    COMPLETED = "completed"

    @classmethod
    def from_str(cls, value: str) -> "RoundStatus":
        """Coerce arbitrary casing into a valid round status."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported round status: {value}") from error


class ApplicationStatus(str, Enum):
    """Decision state of an application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def from_str(cls, value: str) -> "ApplicationStatus":
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported application status: {value}") from error


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None


@dataclass(slots=True)
class Round:
    """A time-boxed grant round ("ship")."""

    id: str
    name: str
    description: str
    captain: str
    criteria: List[str]
    start_time: datetime
    end_time: datetime
    created_at: datetime
    budget: int = 0
    allocated: int = 0
    distributed: int = 0
    fees_retained: int = 0
    status: RoundStatus = RoundStatus.OPEN

    @property
    def remaining(self) -> int:
        """Budget not yet reserved by allocations."""

        return self.budget - self.allocated

    @property
    def settled(self) -> int:
        """Allocated amount already paid out, fees included."""

        return self.distributed + self.fees_retained

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "captain": self.captain,
            "criteria": list(self.criteria),
            "budget": str(self.budget),
            "allocated": str(self.allocated),
            "distributed": str(self.distributed),
            "fees_retained": str(self.fees_retained),
            "remaining": str(self.remaining),
            "budget_formatted": format_ether(self.budget),
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "status": self.status.value,
            "created_at": _iso(self.created_at),
        }


def effective_status(round_: Round, now: datetime) -> RoundStatus:
    """Return the status ``round_`` has at ``now``, expiring open rounds."""

    if round_.status is RoundStatus.OPEN and now > round_.end_time:
        return RoundStatus.CLOSED
    return round_.status


@dataclass(slots=True)
class Application:
    """A project's request for funding from a round."""

    id: str
    round_id: str
    applicant: str
    project_name: str
    created_at: datetime
    description: str = ""
    requested_amount: int = 0
    links: List[str] = field(default_factory=list)
    status: ApplicationStatus = ApplicationStatus.PENDING
    allocated_amount: int = 0

    @property
    def decided(self) -> bool:
        return self.status is not ApplicationStatus.PENDING

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "round_id": self.round_id,
            "applicant": self.applicant,
            "project_name": self.project_name,
            "description": self.description,
            "requested_amount": str(self.requested_amount),
            "requested_formatted": format_ether(self.requested_amount),
            "links": list(self.links),
            "status": self.status.value,
            "allocated_amount": str(self.allocated_amount),
            "created_at": _iso(self.created_at),
        }


@dataclass(slots=True)
class Allocation:
    """Budget reserved for one approved application."""

    id: str
    round_id: str
    application_id: str
    recipient: str
    project_name: str
    amount: int
    created_at: datetime
    distributed: bool = False
    distributed_at: Optional[datetime] = None
    payment_reference: Optional[str] = None

    @property
    def pending(self) -> bool:
        """True while the allocation still awaits a payout."""

        return not self.distributed and self.amount > 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "round_id": self.round_id,
            "application_id": self.application_id,
            "recipient": self.recipient,
            "project_name": self.project_name,
            "amount": str(self.amount),
            "amount_formatted": format_ether(self.amount),
            "distributed": self.distributed,
            "distributed_at": _iso(self.distributed_at),
            "payment_reference": self.payment_reference,
            "created_at": _iso(self.created_at),
        }


@dataclass(slots=True)
class Payout:
    """Outcome of paying a single allocation."""

    allocation_id: str
    project_name: str
    recipient: str
    gross: int
    fee: int
    net: int
    succeeded: bool
    payment_reference: Optional[str] = None
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "allocation_id": self.allocation_id,
            "project_name": self.project_name,
            "recipient": self.recipient,
            "gross": str(self.gross),
            "fee": str(self.fee),
            "net": str(self.net),
            "net_formatted": format_ether(self.net),
            "succeeded": self.succeeded,
            "payment_reference": self.payment_reference,
            "error": self.error,
        }


@dataclass(slots=True)
class DistributionRecord:
    """Append-only record of one distribution run."""

    id: str
    round_id: str
    payouts: List[Payout]
    created_at: datetime

    @property
    def total_gross(self) -> int:
        return sum(payout.gross for payout in self.payouts)

    @property
    def total_net(self) -> int:
        return sum(payout.net for payout in self.payouts)

    @property
    def total_fee(self) -> int:
        return self.total_gross - self.total_net

    @property
    def paid_net(self) -> int:
        return sum(payout.net for payout in self.payouts if payout.succeeded)

    @property
    def paid_fee(self) -> int:
        return sum(payout.fee for payout in self.payouts if payout.succeeded)

    @property
    def failed(self) -> List[Payout]:
        return [payout for payout in self.payouts if not payout.succeeded]

    @property
    def complete(self) -> bool:
        """True when every attempted payout succeeded."""

        return not self.failed

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "round_id": self.round_id,
            "total_gross": str(self.total_gross),
            "total_fee": str(self.total_fee),
            "total_net": str(self.total_net),
            "paid_net": str(self.paid_net),
            "total_net_formatted": format_ether(self.total_net),
            "payouts": [payout.as_dict() for payout in self.payouts],
            "complete": self.complete,
            "created_at": _iso(self.created_at),
        }


@dataclass(slots=True)
class FundingCredit:
    """A verified funding transaction credited to a round's budget."""

    transaction_ref: str
    round_id: str
    sender: Optional[str]
    amount: int
    credited_at: datetime

    def as_dict(self) -> Dict[str, object]:
        return {
            "round_id": self.round_id,
            "transaction_ref": self.transaction_ref,
            "sender": self.sender,
            "amount": str(self.amount),
            "funded": format_ether(self.amount),
            "credited_at": _iso(self.credited_at),
        }
