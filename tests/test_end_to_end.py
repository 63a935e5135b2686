"""Mini README: End-to-end ledger scenario and invariant sweep.

Walks a round from creation to completed distribution using smallest-unit
amounts and checks ``0 <= distributed <= allocated <= budget`` after every
step.
"""

from __future__ import annotations

import pytest

from conftest import APPLICANT, CAPTAIN, OTHER_APPLICANT, fund
from grantships.chain import SimulatedGateway
from grantships.configuration import GrantShipsSettings
from grantships.errors import InsufficientBudget
from grantships.ledger import RoundStatus
from grantships.platform import build_platform


def _check(platform, round_id):
    round_ = platform.rounds.get_round(round_id)
    assert 0 <= round_.distributed <= round_.allocated <= round_.budget
    return round_


def test_round_lifecycle(platform, gateway) -> None:
    """A round goes from launch through funding and allocation to completion."""

    round_ = platform.rounds.create_round("Builders", CAPTAIN)
    assert _check(platform, round_.id).budget == 0

    fund(platform, gateway, round_.id, 10)
    assert _check(platform, round_.id).budget == 10

    first = platform.applications.create_application(
        round_.id, APPLICANT, "First", requested_amount=5
    )
    decision = platform.allocations.decide(first.id, CAPTAIN, approved=True, amount=4)
    assert decision.remaining == 6
    assert _check(platform, round_.id).allocated == 4

    second = platform.applications.create_application(round_.id, OTHER_APPLICANT, "Second")
    with pytest.raises(InsufficientBudget) as excinfo:
        platform.allocations.decide(second.id, CAPTAIN, approved=True, amount=7)
    assert excinfo.value.remaining == 6
    _check(platform, round_.id)

    record = platform.distributions.distribute(round_.id)

    assert len(record.payouts) == 1
    assert record.payouts[0].net == 3
    assert gateway.payments[0][1:] == (APPLICANT, 3)
    final = _check(platform, round_.id)
    assert final.status is RoundStatus.COMPLETED
    assert (final.distributed, final.fees_retained) == (3, 1)


def test_build_platform_uses_configured_backend_and_fee() -> None:
    """The platform factory honours the configured backend and fee."""

    platform = build_platform(
        GrantShipsSettings(
            chain_backend="simulated", fee_percent=10, treasury_private_key="0x" + "22" * 32
        )
    )

    assert isinstance(platform.gateway, SimulatedGateway)
    assert platform.fee_percent == 10
    assert platform.health()["payouts_enabled"] is True
