"""Mini README: Application registry scoped to grant rounds.

Structure:
    * ApplicationRegistry - create, fetch and list funding applications.

Applications may only be created while their round is open (after lazy
expiry is applied). Decision state is written exclusively by the
allocation ledger through ``save``.
"""

from __future__ import annotations

import uuid
from typing import Iterable, List, Optional, Union

from ..errors import InvalidInput, InvalidState, NotFound
from ..logging_utils import get_logger
from .addresses import normalize_address
from .amounts import AmountLike, parse_amount
from .models import Application, ApplicationStatus, RoundStatus
from .rounds import RoundRegistry
from .store import InMemoryRepository, Repository, newest_first

LOGGER = get_logger(__name__)


class ApplicationRegistry:
    """Track funding applications submitted to rounds."""

    def __init__(
        self,
        rounds: RoundRegistry,
        repository: Optional[Repository[Application]] = None,
    ) -> None:
        self.rounds = rounds
        if repository is None:
            repository = InMemoryRepository()
        self._applications: Repository[Application] = repository

    def create_application(
        self,
        round_id: str,
        applicant: Optional[str],
        project_name: Optional[str],
        *,
        requested_amount: Optional[AmountLike] = None,
        description: Optional[str] = None,
        links: Optional[Iterable[str]] = None,
    ) -> Application:
        """Submit an application to an open round."""

        round_ = self.rounds.get_round(round_id)
        if round_.status is not RoundStatus.OPEN:
            raise InvalidState("Ship is not accepting applications")
        if not applicant or not project_name or not str(project_name).strip():
            raise InvalidInput("applicant and projectName required")
        applicant_address = normalize_address(applicant, field="applicant")
        requested = 0 if requested_amount is None else parse_amount(
            requested_amount, field="requestAmount"
        )
        if isinstance(links, str):
            raise InvalidInput("links must be a list")

        application = Application(
            id=str(uuid.uuid4()),
            round_id=round_.id,
            applicant=applicant_address,
            project_name=str(project_name).strip(),
            description=description or "",
            requested_amount=requested,
            links=[str(link) for link in (links or [])],
            created_at=self.rounds.clock(),
        )
        self._applications.add(application)
        LOGGER.info("Application '%s' submitted to '%s'", application.project_name, round_.name)
        return application

    def get_application(self, application_id: str) -> Application:
        application = self._applications.get(application_id)
        if application is None:
            raise NotFound("Application not found")
        return application

    def list_applications(
        self,
        round_id: Optional[str] = None,
        status: Optional[Union[ApplicationStatus, str]] = None,
    ) -> List[Application]:
        """Return applications newest first, optionally filtered."""

        try:
            wanted = ApplicationStatus.from_str(status) if isinstance(status, str) else status
        except ValueError as error:
            raise InvalidInput(str(error)) from error
        applications = self._applications.list(
            lambda application: (round_id is None or application.round_id == round_id)
            and (wanted is None or application.status is wanted)
        )
        return newest_first(applications)

    def save(self, application: Application) -> Application:
        return self._applications.update(application)
