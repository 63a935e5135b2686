"""Mini README: Round registry owning budgets and round status.

Structure:
    * RoundRegistry - create, look up, list and fund grant rounds.

The registry is the only writer of ``Round.budget`` and of the lazy
open -> closed transition. Expiry is evaluated on every read through
``effective_status`` against the injected clock; no background timer runs.
Budget changes happen under the round's ledger lock so they serialise with
approvals and distribution commits on the same round.
"""

from __future__ import annotations

import math
import uuid
from datetime import timedelta
from typing import Iterable, List, Optional, Union

from ..errors import InvalidInput, NotFound
from ..logging_utils import get_logger
from ..utils import Clock, utc_now
from .addresses import normalize_address
from .amounts import AmountLike, format_ether, parse_amount
from .locks import RoundLocks
from .models import Round, RoundStatus, effective_status
from .store import InMemoryRepository, Repository, newest_first

LOGGER = get_logger(__name__)

SECONDS_PER_DAY = 86_400


class RoundRegistry:
    """Create and track grant rounds."""

    def __init__(
        self,
        repository: Optional[Repository[Round]] = None,
        *,
        locks: Optional[RoundLocks] = None,
        clock: Clock = utc_now,
        default_duration_days: int = 30,
    ) -> None:
        if repository is None:
            repository = InMemoryRepository()
        self._rounds: Repository[Round] = repository
        self.locks = locks or RoundLocks()
        self.clock = clock
        self.default_duration_days = default_duration_days

    def create_round(
        self,
        name: Optional[str],
        captain: Optional[str],
        *,
        criteria: Optional[Iterable[str]] = None,
        duration_days: Optional[Union[int, float]] = None,
        description: Optional[str] = None,
    ) -> Round:
        """Open a new round with an empty budget."""

        if not name or not str(name).strip() or not captain:
            raise InvalidInput("name and captain required")
        captain_address = normalize_address(captain, field="captain")
        days = self.default_duration_days if duration_days is None else duration_days
        if (
            isinstance(days, bool)
            or not isinstance(days, (int, float))
            or (isinstance(days, float) and not math.isfinite(days))
            or days <= 0
        ):
            raise InvalidInput("durationDays must be a positive number")
        if isinstance(criteria, str):
            raise InvalidInput("criteria must be a list of strings")

        now = self.clock()
        try:
            end_time = now + timedelta(seconds=days * SECONDS_PER_DAY)
        except (OverflowError, ValueError) as error:
            raise InvalidInput("durationDays is out of range") from error
        round_ = Round(
            id=str(uuid.uuid4()),
            name=str(name).strip(),
            description=description or "",
            captain=captain_address,
            criteria=[str(item) for item in (criteria or [])],
            start_time=now,
            end_time=end_time,
            created_at=now,
        )
        self._rounds.add(round_)
        LOGGER.info("Round '%s' (%s) created by %s", round_.name, round_.id, captain_address[:10])
        return round_

    def get_round(self, round_id: str) -> Round:
        """Return the round, applying lazy expiry first."""

        round_ = self._rounds.get(round_id)
        if round_ is None:
            raise NotFound("Ship not found")
        return self._expire(round_)

    def list_rounds(self, status: Optional[Union[RoundStatus, str]] = None) -> List[Round]:
        """Return rounds newest first, optionally filtered by status."""

        try:
            wanted = RoundStatus.from_str(status) if isinstance(status, str) else status
        except ValueError as error:
            raise InvalidInput(str(error)) from error
        rounds = [self._expire(round_) for round_ in self._rounds.list()]
        if wanted is not None:
            rounds = [round_ for round_ in rounds if round_.status is wanted]
        return newest_first(rounds)

    def credit_budget(self, round_id: str, amount: AmountLike) -> Round:
        """Add verified funds to a round's budget."""

        wei = parse_amount(amount)
        with self.locks.ledger(round_id):
            round_ = self._rounds.get(round_id)
            if round_ is None:
                raise NotFound("Ship not found")
            round_.budget += wei
            self._rounds.update(round_)
        LOGGER.info(
            "Round '%s' funded: +%s (total: %s)",
            round_.name,
            format_ether(wei),
            format_ether(round_.budget),
        )
        return round_

    def save(self, round_: Round) -> Round:
        """Write back a round mutated by another ledger component."""

        return self._rounds.update(round_)

    def _expire(self, round_: Round) -> Round:
        status = effective_status(round_, self.clock())
        if status is round_.status:
            return round_
        with self.locks.ledger(round_.id):
            round_ = self._rounds.get(round_.id) or round_
            status = effective_status(round_, self.clock())
            if status is not round_.status:
                round_.status = status
                self._rounds.update(round_)
                LOGGER.info("Round '%s' (%s) closed after deadline", round_.name, round_.id)
        return round_
