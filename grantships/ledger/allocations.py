"""Mini README: Allocation ledger, the budget consistency gate.

Structure:
    * Decision - result of a captain's decision on one application.
    * AllocationLedger - records approvals and rejections against rounds.

Every decision for a round runs under that round's ledger lock. The
"already decided" check, the remaining-budget check and the three writes
(allocation, application, round total) therefore form one atomic unit, so
two approvals can never both pass against the same stale budget and an
application can never be allocated twice.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import List, Optional

from ..errors import Forbidden, InsufficientBudget, InvalidState, NotFound
from ..logging_utils import get_logger
from .addresses import same_address
from .amounts import AmountLike, format_ether, parse_amount
from .applications import ApplicationRegistry
from .models import Allocation, Application, ApplicationStatus
from .rounds import RoundRegistry
from .store import InMemoryRepository, Repository

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Decision:
    """Outcome of ``AllocationLedger.decide``."""

    application: Application
    allocation: Optional[Allocation]
    remaining: int

    @property
    def approved(self) -> bool:
        return self.allocation is not None


class AllocationLedger:
    """Apply captain decisions to applications and round budgets."""

    def __init__(
        self,
        rounds: RoundRegistry,
        applications: ApplicationRegistry,
        repository: Optional[Repository[Allocation]] = None,
    ) -> None:
        self.rounds = rounds
        self.applications = applications
        if repository is None:
            repository = InMemoryRepository()
        self._allocations: Repository[Allocation] = repository

    def decide(
        self,
        application_id: str,
        actor: Optional[str],
        approved: bool,
        amount: Optional[AmountLike] = None,
    ) -> Decision:
        """Approve or reject an application on behalf of the round's captain.

        When ``amount`` is omitted on approval the application's requested
        amount is allocated.
        """

        application = self.applications.get_application(application_id)
        round_ = self.rounds.get_round(application.round_id)
        if not same_address(actor, round_.captain):
            raise Forbidden("Only captain can allocate")

        if not approved:
            return self._reject(round_.id, application.id)

        wei = application.requested_amount if amount is None else parse_amount(amount)
        with self.rounds.locks.ledger(round_.id):
            # re-read under the lock; repositories may hand out copies
            application = self.applications.get_application(application.id)
            round_ = self.rounds.get_round(round_.id)
            self._ensure_pending(application)
            remaining = round_.remaining
            if wei > remaining:
                LOGGER.info(
                    "Allocation of %s to '%s' refused: only %s remaining",
                    format_ether(wei),
                    application.project_name,
                    format_ether(remaining),
                )
                raise InsufficientBudget(remaining=remaining, requested=wei)

            allocation = Allocation(
                id=str(uuid.uuid4()),
                round_id=round_.id,
                application_id=application.id,
                recipient=application.applicant,
                project_name=application.project_name,
                amount=wei,
                created_at=self.rounds.clock(),
            )
            self._allocations.add(allocation)
            application.status = ApplicationStatus.APPROVED
            application.allocated_amount = wei
            self.applications.save(application)
            round_.allocated += wei
            self.rounds.save(round_)
            remaining = round_.remaining

        LOGGER.info("Allocated %s to '%s'", format_ether(wei), application.project_name)
        return Decision(application=application, allocation=allocation, remaining=remaining)

    def _reject(self, round_id: str, application_id: str) -> Decision:
        with self.rounds.locks.ledger(round_id):
            application = self.applications.get_application(application_id)
            round_ = self.rounds.get_round(round_id)
            self._ensure_pending(application)
            application.status = ApplicationStatus.REJECTED
            self.applications.save(application)
            remaining = round_.remaining
        LOGGER.info("Rejected '%s'", application.project_name)
        return Decision(application=application, allocation=None, remaining=remaining)

    @staticmethod
    def _ensure_pending(application: Application) -> None:
        if application.decided:
            raise InvalidState(f"Application already {application.status.value}")

    def get_allocation(self, allocation_id: str) -> Allocation:
        allocation = self._allocations.get(allocation_id)
        if allocation is None:
            raise NotFound("Allocation not found")
        return allocation

    def list_allocations(self, round_id: Optional[str] = None) -> List[Allocation]:
        """Return allocations in creation order."""

        return self._allocations.list(
            lambda allocation: round_id is None or allocation.round_id == round_id
        )

    def pending_allocations(self, round_id: str) -> List[Allocation]:
        """Allocations of ``round_id`` still awaiting a non-zero payout."""

        return self._allocations.list(
            lambda allocation: allocation.round_id == round_id and allocation.pending
        )

    def save(self, allocation: Allocation) -> Allocation:
        return self._allocations.update(allocation)
