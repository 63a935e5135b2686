"""Mini README: FastAPI service exposing the grant ledger over HTTP.

Structure:
    * Request models - pydantic bodies accepting the camelCase field names
      clients already send (``durationDays``, ``requestAmount``, ``txHash``).
    * create_application - application factory wiring routes, the allow-list
      guard, the error translation and a lifespan that closes HTTP clients.

Every route is a thin adapter over ``GrantShipsPlatform``. Amounts arrive as
ether-denominated decimal strings and are converted to wei before they reach
the ledger. Ledger errors are rendered as ``{"error", "code", ...}`` bodies
with the status code listed in ``STATUS_CODES``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Union

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..access import AllowList
from ..configuration import GrantShipsSettings, get_settings
from ..errors import (
    ChainError,
    DuplicateFunding,
    Forbidden,
    GrantShipsError,
    InsufficientBudget,
    InvalidAmount,
    InvalidInput,
    InvalidState,
    NothingToDistribute,
    NotFound,
    PaymentsUnavailable,
    TransactionNotFound,
    WrongRecipient,
)
from ..ledger import format_ether, parse_ether
from ..logging_utils import get_logger
from ..platform import GrantShipsPlatform, build_platform

LOGGER = get_logger(__name__)

STATUS_CODES = {
    InvalidInput: 400,
    InvalidAmount: 400,
    InsufficientBudget: 400,
    InvalidState: 400,
    NothingToDistribute: 400,
    TransactionNotFound: 400,
    WrongRecipient: 400,
    Forbidden: 403,
    NotFound: 404,
    DuplicateFunding: 409,
    PaymentsUnavailable: 500,
}

EtherAmount = Optional[Union[str, int, float]]


def status_for(error: GrantShipsError) -> int:
    """Resolve the HTTP status for a ledger error, defaulting to 500."""

    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


class _CallerRequest(BaseModel):
    """Body carrying the caller's address for the allow-list guard."""

    model_config = ConfigDict(populate_by_name=True)

    address: Optional[str] = None

    def caller(self) -> Optional[str]:
        return self.address


class ShipCreateRequest(_CallerRequest):
    name: Optional[str] = None
    captain: Optional[str] = None
    description: Optional[str] = None
    criteria: Optional[List[str]] = None
    duration_days: Optional[float] = Field(
        None, validation_alias=AliasChoices("durationDays", "duration_days")
    )

    def caller(self) -> Optional[str]:
        return self.address or self.captain


class FundRequest(_CallerRequest):
    tx_hash: Optional[str] = Field(None, validation_alias=AliasChoices("txHash", "tx_hash"))


class ApplyRequest(_CallerRequest):
    applicant: Optional[str] = None
    project_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("projectName", "project_name")
    )
    description: Optional[str] = None
    links: Optional[List[str]] = None
    request_amount: EtherAmount = Field(
        None,
        validation_alias=AliasChoices(
            "requestAmount", "requested_amount", "requestedAmount", "request_amount"
        ),
    )

    def caller(self) -> Optional[str]:
        return self.address or self.applicant


class AllocateRequest(_CallerRequest):
    captain: Optional[str] = None
    amount: EtherAmount = None
    approved: bool = True

    def caller(self) -> Optional[str]:
        return self.address or self.captain


def create_application(
    platform: Optional[GrantShipsPlatform] = None,
    *,
    allow_list: Optional[AllowList] = None,
    settings: Optional[GrantShipsSettings] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    platform = platform or build_platform(settings)
    if allow_list is None and settings.allowlist_enabled:
        allow_list = AllowList(settings.allowlist_url, ttl_seconds=settings.allowlist_ttl_seconds)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        platform.close()
        if allow_list is not None:
            allow_list.close()

    app = FastAPI(title="Grant Ships", version="0.1.0", lifespan=lifespan)
    app.state.platform = platform

    @app.exception_handler(GrantShipsError)
    async def ledger_error(request: Request, error: GrantShipsError) -> JSONResponse:
        status_code = status_for(error)
        LOGGER.debug("%s %s -> %s %s", request.method, request.url.path, status_code, error.code)
        return JSONResponse(
            {"error": error.message, "code": error.code, **error.details()},
            status_code=status_code,
        )

    @app.exception_handler(ChainError)
    async def chain_error(request: Request, error: ChainError) -> JSONResponse:
        LOGGER.error("Chain gateway failure on %s: %s", request.url.path, error)
        return JSONResponse({"error": str(error), "code": "chain_error"}, status_code=502)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, error: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {
                "error": "Invalid request body",
                "code": InvalidInput.code,
                "detail": [str(item.get("msg")) for item in error.errors()],
            },
            status_code=400,
        )

    def require_allowed(body: Optional[_CallerRequest]) -> None:
        if allow_list is None:
            return
        address = body.caller() if body is not None else None
        if not address:
            raise InvalidInput("Address required")
        if not allow_list.is_allowed(address):
            raise Forbidden("Invite-only. Ask the operators to request access.")

    @app.post("/ships")
    def create_ship(body: ShipCreateRequest) -> JSONResponse:
        """Launch a new grant round."""

        require_allowed(body)
        round_ = platform.rounds.create_round(
            body.name,
            body.captain,
            criteria=body.criteria,
            duration_days=body.duration_days,
            description=body.description,
        )
        return JSONResponse(round_.as_dict(), status_code=201)

    @app.get("/ships")
    def list_ships(status: Optional[str] = None) -> JSONResponse:
        rounds = platform.rounds.list_rounds(status=status)
        return JSONResponse([round_.as_dict() for round_ in rounds])

    @app.get("/ships/{ship_id}")
    def get_ship(ship_id: str) -> JSONResponse:
        return JSONResponse(platform.round_detail(ship_id))

    @app.post("/ships/{ship_id}/fund")
    def fund_ship(ship_id: str, body: FundRequest) -> JSONResponse:
        """Credit a verified treasury transfer to the round's budget."""

        require_allowed(body)
        round_ = platform.funding.verify_and_credit(ship_id, body.tx_hash)
        credit = platform.funding.get_credit(body.tx_hash or "")
        return JSONResponse(
            {
                "ship": round_.as_dict(),
                "credit": credit.as_dict(),
                "funded": format_ether(credit.amount),
            }
        )

    @app.post("/ships/{ship_id}/apply")
    def apply(ship_id: str, body: ApplyRequest) -> JSONResponse:
        """Submit a funding application to an open round."""

        require_allowed(body)
        requested = (
            None
            if body.request_amount in (None, "")
            else parse_ether(body.request_amount, field="requestAmount")
        )
        application = platform.applications.create_application(
            ship_id,
            body.applicant,
            body.project_name,
            requested_amount=requested,
            description=body.description,
            links=body.links,
        )
        return JSONResponse(application.as_dict(), status_code=201)

    @app.get("/applications")
    def list_applications(
        ship_id: Optional[str] = Query(None, alias="shipId"),
        status: Optional[str] = None,
    ) -> JSONResponse:
        applications = platform.applications.list_applications(round_id=ship_id, status=status)
        return JSONResponse([application.as_dict() for application in applications])

    @app.post("/applications/{application_id}/allocate")
    def allocate(application_id: str, body: AllocateRequest) -> JSONResponse:
        """Record the captain's decision on an application."""

        require_allowed(body)
        amount = None if body.amount in (None, "") else parse_ether(body.amount)
        decision = platform.allocations.decide(
            application_id, body.captain, body.approved, amount=amount
        )
        if decision.allocation is None:
            return JSONResponse(
                {"application": decision.application.as_dict(), "message": "Application rejected"}
            )
        return JSONResponse(
            {
                "allocation": decision.allocation.as_dict(),
                "application": decision.application.as_dict(),
                "ship_budget_remaining": str(decision.remaining),
                "ship_budget_remaining_formatted": format_ether(decision.remaining),
            },
            status_code=201,
        )

    @app.get("/allocations/{allocation_id}")
    def get_allocation(allocation_id: str) -> JSONResponse:
        return JSONResponse(platform.allocations.get_allocation(allocation_id).as_dict())

    @app.post("/ships/{ship_id}/distribute")
    def distribute(ship_id: str, body: Optional[_CallerRequest] = None) -> JSONResponse:
        """Pay out pending allocations of a round."""

        require_allowed(body)
        record = platform.distributions.distribute(ship_id)
        round_ = platform.rounds.get_round(ship_id)
        return JSONResponse(
            {
                "success": record.complete,
                "distribution": record.as_dict(),
                "ship": {
                    "id": round_.id,
                    "name": round_.name,
                    "budget": str(round_.budget),
                    "allocated": str(round_.allocated),
                    "distributed": str(round_.distributed),
                    "status": round_.status.value,
                },
            }
        )

    @app.get("/distributions")
    def list_distributions(
        ship_id: Optional[str] = Query(None, alias="shipId"),
    ) -> JSONResponse:
        records = platform.distributions.list_distributions(round_id=ship_id)
        return JSONResponse([record.as_dict() for record in records])

    @app.get("/distributions/{distribution_id}")
    def get_distribution(distribution_id: str) -> JSONResponse:
        return JSONResponse(platform.distributions.get_distribution(distribution_id).as_dict())

    @app.get("/stats")
    def stats() -> JSONResponse:
        return JSONResponse(platform.stats())

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse(platform.health())

    return app
