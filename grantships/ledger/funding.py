"""Mini README: Funding verifier crediting round budgets.

Structure:
    * FundingVerifier - confirms an inbound treasury transfer on chain and
      credits exactly its value to a round.

Each transaction reference can be credited once. The reference is reserved
before the chain lookup and released afterwards, so two concurrent
submissions of the same transaction cannot both pass; a credited reference
stays in the credit ledger for good.
"""

from __future__ import annotations

import threading
from operator import attrgetter
from typing import List, Optional, Set

from ..chain.base import ChainGateway
from ..errors import DuplicateFunding, InvalidInput, NotFound, TransactionNotFound, WrongRecipient
from ..logging_utils import get_logger
from .addresses import same_address
from .models import FundingCredit, Round
from .rounds import RoundRegistry
from .store import InMemoryRepository, Repository, newest_first

LOGGER = get_logger(__name__)


class FundingVerifier:
    """Verify funding transactions before they reach a round's budget."""

    def __init__(
        self,
        rounds: RoundRegistry,
        gateway: ChainGateway,
        repository: Optional[Repository[FundingCredit]] = None,
    ) -> None:
        self.rounds = rounds
        self.gateway = gateway
        if repository is None:
            repository = InMemoryRepository(key=attrgetter("transaction_ref"))
        self._credits: Repository[FundingCredit] = repository
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def verify_and_credit(self, round_id: str, transaction_ref: Optional[str]) -> Round:
        """Credit the value of ``transaction_ref`` to the round's budget."""

        round_ = self.rounds.get_round(round_id)
        if not transaction_ref or not str(transaction_ref).strip():
            raise InvalidInput("txHash required")
        reference = str(transaction_ref).strip().lower()

        self._reserve(reference)
        try:
            transaction = self.gateway.get_transaction(reference)
            if transaction is None or not transaction.succeeded:
                raise TransactionNotFound("Transaction not found or failed")
            if not same_address(transaction.recipient, self.gateway.treasury_address):
                raise WrongRecipient("Not sent to treasury")
            round_ = self.rounds.credit_budget(round_.id, transaction.value)
            self._credits.add(
                FundingCredit(
                    transaction_ref=reference,
                    round_id=round_.id,
                    sender=transaction.sender,
                    amount=transaction.value,
                    credited_at=self.rounds.clock(),
                )
            )
        finally:
            self._release(reference)
        return round_

    def _reserve(self, reference: str) -> None:
        with self._lock:
            if reference in self._in_flight or self._credits.get(reference) is not None:
                LOGGER.warning("Rejected duplicate funding transaction %s", reference)
                raise DuplicateFunding(reference)
            self._in_flight.add(reference)

    def _release(self, reference: str) -> None:
        with self._lock:
            self._in_flight.discard(reference)

    def get_credit(self, transaction_ref: str) -> FundingCredit:
        credit = self._credits.get(transaction_ref.strip().lower())
        if credit is None:
            raise NotFound("Funding credit not found")
        return credit

    def list_credits(self, round_id: Optional[str] = None) -> List[FundingCredit]:
        return newest_first(
            self._credits.list(lambda credit: round_id is None or credit.round_id == round_id),
            attribute="credited_at",
        )
