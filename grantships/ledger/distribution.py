"""Mini README: Distribution engine paying out approved allocations.

Structure:
    * DEFAULT_FEE_PERCENT - platform fee retained on each payout.
    * DistributionEngine - runs payout batches and keeps the audit trail.

A run selects every allocation of the round that is not yet distributed and
has a non-zero amount, pays each one sequentially through the chain gateway
and folds the results into a list of ``Payout`` outcomes. A failed payout is
recorded and skipped; it never aborts the batch or undoes earlier payouts,
and the allocation stays eligible for the next run.

Fees are computed per allocation (``net = gross * (100 - fee) // 100``) and
the record totals are sums of those per-allocation values, so the amounts
actually sent always match the reported totals. Round totals are committed
once per run under the round's ledger lock; whole runs for a round are
serialised by the round's distribution lock, which is never held by funding
or decisions.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from ..chain.base import ChainGateway
from ..errors import NothingToDistribute, NotFound, PaymentsUnavailable
from ..logging_utils import get_logger
from .allocations import AllocationLedger
from .amounts import format_ether, split_fee
from .models import Allocation, DistributionRecord, Payout, Round, RoundStatus
from .rounds import RoundRegistry
from .store import InMemoryRepository, Repository, newest_first

LOGGER = get_logger(__name__)

DEFAULT_FEE_PERCENT = 5


class DistributionEngine:
    """Pay pending allocations of a round, net of the platform fee."""

    def __init__(
        self,
        rounds: RoundRegistry,
        ledger: AllocationLedger,
        gateway: ChainGateway,
        *,
        fee_percent: int = DEFAULT_FEE_PERCENT,
        repository: Optional[Repository[DistributionRecord]] = None,
    ) -> None:
        if not 0 <= fee_percent <= 100:
            raise ValueError(f"fee_percent must be between 0 and 100, got {fee_percent}")
        self.rounds = rounds
        self.ledger = ledger
        self.gateway = gateway
        self.fee_percent = fee_percent
        if repository is None:
            repository = InMemoryRepository()
        self._records: Repository[DistributionRecord] = repository

    def distribute(self, round_id: str) -> DistributionRecord:
        """Run one payout batch for ``round_id``."""

        round_ = self.rounds.get_round(round_id)
        if not self.gateway.can_sign:
            raise PaymentsUnavailable("Wallet not configured")

        with self.rounds.locks.distribution(round_.id):
            pending = self.ledger.pending_allocations(round_.id)
            if not pending:
                raise NothingToDistribute("No pending allocations to distribute")
            LOGGER.info(
                "Distributing %s allocations for '%s'", len(pending), round_.name
            )
            payouts = [self._pay(allocation) for allocation in pending]
            record = DistributionRecord(
                id=str(uuid.uuid4()),
                round_id=round_.id,
                payouts=payouts,
                created_at=self.rounds.clock(),
            )
            round_ = self._commit(round_.id, record)
            self._records.add(record)

        LOGGER.info(
            "Distribution %s for '%s': paid %s of %s, %s failed, round %s",
            record.id,
            round_.name,
            format_ether(record.paid_net),
            format_ether(record.total_net),
            len(record.failed),
            round_.status.value,
        )
        return record

    def _pay(self, allocation: Allocation) -> Payout:
        net, fee = split_fee(allocation.amount, self.fee_percent)
        outcome = Payout(
            allocation_id=allocation.id,
            project_name=allocation.project_name,
            recipient=allocation.recipient,
            gross=allocation.amount,
            fee=fee,
            net=net,
            succeeded=False,
        )
        try:
            reference = self.gateway.send_payment(allocation.recipient, net)
        except Exception as error:  # payout failures are reported, not raised
            LOGGER.warning("Payout failed for '%s': %s", allocation.project_name, error)
            outcome.error = str(error) or error.__class__.__name__
            return outcome

        allocation.distributed = True
        allocation.distributed_at = self.rounds.clock()
        allocation.payment_reference = reference
        self.ledger.save(allocation)
        outcome.succeeded = True
        outcome.payment_reference = reference
        LOGGER.info("Paid %s to '%s' (%s)", format_ether(net), allocation.project_name, reference)
        return outcome

    def _commit(self, round_id: str, record: DistributionRecord) -> Round:
        with self.rounds.locks.ledger(round_id):
            round_ = self.rounds.get_round(round_id)
            round_.distributed += record.paid_net
            round_.fees_retained += record.paid_fee
            if round_.settled >= round_.allocated:
                round_.status = RoundStatus.COMPLETED
            else:
                round_.status = RoundStatus.DISTRIBUTING
            self.rounds.save(round_)
        return round_

    def get_distribution(self, distribution_id: str) -> DistributionRecord:
        record = self._records.get(distribution_id)
        if record is None:
            raise NotFound("Distribution not found")
        return record

    def list_distributions(self, round_id: Optional[str] = None) -> List[DistributionRecord]:
        """Return distribution records newest first."""

        return newest_first(
            self._records.list(lambda record: round_id is None or record.round_id == round_id)
        )
