"""Mini README: Platform facade wiring the ledger to a chain gateway.

Structure:
    * GrantShipsPlatform - owns one instance of every ledger component.
    * build_platform - construct the platform from ``GrantShipsSettings``.

The web layer and the CLI talk to this facade only. It adds the read-side
views the service exposes (round detail, platform statistics, health) on
top of the ledger components.
"""

from __future__ import annotations

from operator import attrgetter
from typing import Callable, Dict, Optional

from .chain import REGISTRY as GATEWAYS
from .chain.base import ChainGateway
from .configuration import GrantShipsSettings, get_settings
from .ledger import (
    DEFAULT_FEE_PERCENT,
    AllocationLedger,
    ApplicationRegistry,
    ApplicationStatus,
    DistributionEngine,
    FundingVerifier,
    InMemoryRepository,
    Repository,
    RoundRegistry,
    RoundStatus,
    format_ether,
)
from .logging_utils import get_logger
from .utils import Clock, utc_now

LOGGER = get_logger(__name__)


class GrantShipsPlatform:
    """Single in-process grant platform."""

    def __init__(
        self,
        gateway: ChainGateway,
        *,
        fee_percent: int = DEFAULT_FEE_PERCENT,
        default_duration_days: int = 30,
        clock: Clock = utc_now,
        network_name: str = "Base",
        repository_factory: Callable[..., Repository] = InMemoryRepository,
    ) -> None:
        self.gateway = gateway
        self.network_name = network_name
        self.rounds = RoundRegistry(
            repository_factory(), clock=clock, default_duration_days=default_duration_days
        )
        self.applications = ApplicationRegistry(self.rounds, repository_factory())
        self.allocations = AllocationLedger(self.rounds, self.applications, repository_factory())
        self.distributions = DistributionEngine(
            self.rounds,
            self.allocations,
            gateway,
            fee_percent=fee_percent,
            repository=repository_factory(),
        )
        self.funding = FundingVerifier(
            self.rounds, gateway, repository_factory(key=attrgetter("transaction_ref"))
        )
        LOGGER.debug(
            "Platform initialised with %s gateway and %s%% fee", gateway.gateway_name, fee_percent
        )

    @property
    def fee_percent(self) -> int:
        return self.distributions.fee_percent

    def round_detail(self, round_id: str) -> Dict[str, object]:
        """Round view including its applications and allocations."""

        round_ = self.rounds.get_round(round_id)
        payload = round_.as_dict()
        payload["applications"] = [
            application.as_dict()
            for application in self.applications.list_applications(round_id=round_.id)
        ]
        payload["allocations"] = [
            allocation.as_dict() for allocation in self.allocations.list_allocations(round_.id)
        ]
        return payload

    def stats(self) -> Dict[str, object]:
        """Aggregate platform statistics."""

        rounds = self.rounds.list_rounds()
        applications = self.applications.list_applications()
        total_budget = sum(round_.budget for round_ in rounds)
        total_distributed = sum(round_.distributed for round_ in rounds)
        return {
            "ships": len(rounds),
            "active_ships": sum(1 for round_ in rounds if round_.status is RoundStatus.OPEN),
            "applications": len(applications),
            "approved_applications": sum(
                1 for application in applications if application.status is ApplicationStatus.APPROVED
            ),
            "total_budget": str(total_budget),
            "total_distributed": str(total_distributed),
            "total_budget_formatted": format_ether(total_budget),
            "total_distributed_formatted": format_ether(total_distributed),
        }

    def health(self) -> Dict[str, object]:
        """Service status merged with the gateway's diagnostic metadata."""

        return {
            "status": "ok",
            "platform": "Grant Ships",
            "network": self.network_name,
            "fee_percent": self.fee_percent,
            **self.gateway.metadata(),
        }

    def close(self) -> None:
        self.gateway.close()


def build_platform(settings: Optional[GrantShipsSettings] = None) -> GrantShipsPlatform:
    """Create a platform using the configured chain backend."""

    settings = settings or get_settings()
    gateway = GATEWAYS.create(settings.chain_backend, settings)
    return GrantShipsPlatform(
        gateway,
        fee_percent=settings.fee_percent,
        default_duration_days=settings.default_duration_days,
        network_name=settings.network_name,
    )
