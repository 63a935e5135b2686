"""Mini README: Tests for on-chain funding verification and idempotency."""

from __future__ import annotations

import threading

import pytest

from conftest import CAPTAIN, FUNDER, STRANGER, TREASURY
from grantships.chain import SimulatedGateway
from grantships.errors import (
    DuplicateFunding,
    InvalidInput,
    NotFound,
    TransactionNotFound,
    WrongRecipient,
)
from grantships.ledger import FundingVerifier, RoundRegistry


def test_credit_increases_budget_by_exact_value(platform, gateway) -> None:
    """A verified transfer credits exactly its value."""

    round_ = platform.rounds.create_round("Round", CAPTAIN)
    transaction = gateway.record_transfer(FUNDER, 123_456)

    platform.funding.verify_and_credit(round_.id, transaction.reference)

    assert platform.rounds.get_round(round_.id).budget == 123_456
    credit = platform.funding.get_credit(transaction.reference)
    assert (credit.round_id, credit.amount, credit.sender) == (round_.id, 123_456, FUNDER)


def test_same_transaction_cannot_be_credited_twice(platform, gateway) -> None:
    """A reference is credited once, whatever the round or case."""

    first_round = platform.rounds.create_round("First", CAPTAIN)
    second_round = platform.rounds.create_round("Second", CAPTAIN)
    transaction = gateway.record_transfer(FUNDER, 10)
    platform.funding.verify_and_credit(first_round.id, transaction.reference)

    with pytest.raises(DuplicateFunding):
        platform.funding.verify_and_credit(first_round.id, transaction.reference.upper())
    with pytest.raises(DuplicateFunding):
        platform.funding.verify_and_credit(second_round.id, transaction.reference)

    assert platform.rounds.get_round(first_round.id).budget == 10
    assert platform.rounds.get_round(second_round.id).budget == 0


def test_verification_failures(platform, gateway) -> None:
    """Missing, failed and misdirected transfers are refused without credit."""

    round_ = platform.rounds.create_round("Round", CAPTAIN)
    failed = gateway.record_transfer(FUNDER, 10, succeeded=False)
    elsewhere = gateway.record_transfer(FUNDER, 10, recipient=STRANGER)

    with pytest.raises(NotFound):
        platform.funding.verify_and_credit("missing", failed.reference)
    with pytest.raises(InvalidInput):
        platform.funding.verify_and_credit(round_.id, "  ")
    with pytest.raises(TransactionNotFound):
        platform.funding.verify_and_credit(round_.id, "0x" + "0" * 64)
    with pytest.raises(TransactionNotFound):
        platform.funding.verify_and_credit(round_.id, failed.reference)
    with pytest.raises(WrongRecipient):
        platform.funding.verify_and_credit(round_.id, elsewhere.reference)

    assert platform.rounds.get_round(round_.id).budget == 0
    assert platform.funding.list_credits() == []


def test_failed_verification_releases_reference(platform, gateway) -> None:
    """A failed verification leaves the reference free for a retry."""

    round_ = platform.rounds.create_round("Round", CAPTAIN)
    reference = "0x" + "1" * 64

    with pytest.raises(TransactionNotFound):
        platform.funding.verify_and_credit(round_.id, reference)

    gateway.record_transfer(FUNDER, 7, reference=reference)
    platform.funding.verify_and_credit(round_.id, reference)
    assert platform.rounds.get_round(round_.id).budget == 7


class _BlockingGateway(SimulatedGateway):
    """Simulated gateway whose lookups wait until released."""

    def __init__(self) -> None:
        super().__init__(TREASURY)
        self.entered = threading.Event()
        self.release = threading.Event()

    def get_transaction(self, reference):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().get_transaction(reference)


def test_concurrent_submissions_of_one_transaction_credit_once(clock) -> None:
    """Simultaneous submissions of one transfer credit it once."""

    gateway = _BlockingGateway()
    rounds = RoundRegistry(clock=clock)
    verifier = FundingVerifier(rounds, gateway)
    round_ = rounds.create_round("Round", CAPTAIN)
    transaction = gateway.record_transfer(FUNDER, 10)
    worker = threading.Thread(
        target=verifier.verify_and_credit, args=(round_.id, transaction.reference)
    )
    worker.start()
    assert gateway.entered.wait(timeout=5)

    with pytest.raises(DuplicateFunding):
        verifier.verify_and_credit(round_.id, transaction.reference)

    gateway.release.set()
    worker.join(timeout=5)
    assert rounds.get_round(round_.id).budget == 10
