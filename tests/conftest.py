"""Mini README: Shared fixtures for the Grant Ships test-suite.

Structure:
    * FrozenClock - deterministic, manually advanced clock.
    * Address constants - well-formed lowercase addresses for the roles.
    * CopyingRepository - store handing out copies, like a database backend.
    * clock / gateway / platform - a fresh simulated platform per test.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone

import pytest

from grantships.chain import SimulatedGateway
from grantships.ledger import InMemoryRepository
from grantships.platform import GrantShipsPlatform

TREASURY = "0x" + "7" * 40
CAPTAIN = "0x" + "a" * 40
APPLICANT = "0x" + "b" * 40
OTHER_APPLICANT = "0x" + "c" * 40
FUNDER = "0x" + "d" * 40
STRANGER = "0x" + "e" * 40


class FrozenClock:
    """Clock returning a fixed instant until advanced."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def gateway() -> SimulatedGateway:
    return SimulatedGateway(TREASURY)


@pytest.fixture
def platform(gateway: SimulatedGateway, clock: FrozenClock) -> GrantShipsPlatform:
    return GrantShipsPlatform(gateway, clock=clock)


def fund(platform: GrantShipsPlatform, gateway: SimulatedGateway, round_id: str, value: int):
    """Credit ``value`` wei to a round through a verified simulated transfer."""

    transaction = gateway.record_transfer(FUNDER, value)
    return platform.funding.verify_and_credit(round_id, transaction.reference)


class CopyingRepository(InMemoryRepository):
    """Repository that stores and returns copies instead of shared objects."""

    def add(self, entity):
        super().add(copy.deepcopy(entity))
        return entity

    def get(self, key):
        entity = super().get(key)
        return None if entity is None else copy.deepcopy(entity)

    def list(self, predicate=None):
        return [copy.deepcopy(entity) for entity in super().list(predicate)]

    def update(self, entity):
        super().update(copy.deepcopy(entity))
        return entity


@pytest.fixture
def copying_platform(gateway: SimulatedGateway, clock: FrozenClock) -> GrantShipsPlatform:
    return GrantShipsPlatform(gateway, clock=clock, repository_factory=CopyingRepository)
