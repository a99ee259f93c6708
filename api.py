"""
Land Registry — FastAPI Server
==============================

HTTP front for the registry state machine. The caller identity travels in the
``X-Caller-Identity`` header; the registry decides what that caller may do.

Endpoints:
    POST /lands                          Register a parcel
    GET  /lands                          Every record (admin only)
    GET  /lands/for-sale                 Records currently listed
    GET  /lands/count                    Number of records ever created
    GET  /lands/{id}                     Full record
    GET  /lands/{id}/verify              Public verification (never 404s)
    GET  /lands/{id}/history             Chain of title
    POST /lands/{id}/sale                List for sale (owner)
    POST /lands/{id}/transfer-request    Request transfer (anyone but owner)
    POST /lands/{id}/approve             Approve pending request (owner)
    POST /lands/{id}/deny                Deny pending request (owner)
    GET  /owners/{identity}/lands        Ids owned by an identity
    GET  /owners/{identity}/pending-requests
    GET  /health                         Health check / readiness probe

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Configuration comes from the environment (or a .env file); see
land_registry/config.py.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from land_registry import __version__
from land_registry.config import build_registry, load_settings
from land_registry.exceptions import RegistryError
from land_registry.models import (
    NULL_IDENTITY,
    LandRecord,
    LandVerification,
    OwnershipEntry,
    ParcelDetails,
)
from land_registry.registry import LandRegistry

load_dotenv()

logger = logging.getLogger(__name__)


# ─── Application Lifespan (build the registry) ──────────────────────

_registry: LandRegistry | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the registry from environment settings on startup."""
    global _registry  # noqa: PLW0603
    settings = load_settings()
    _registry = build_registry(settings)
    logger.info(
        "Registry ready (admin=%s, relist=%s, deny_clears_listing=%s)",
        settings.admin_identity,
        settings.relist_policy.value,
        settings.deny_clears_listing,
    )
    yield
    _registry = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Land Registry API",
    description=(
        "Land-parcel ownership records with duplicate prevention, "
        "a request/approve/deny transfer workflow and a full ownership history."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ─── Error Mapping ───────────────────────────────────────────────────

_STATUS_BY_CODE: dict[str, int] = {
    "VALIDATION_FAILED": 422,
    "NOT_AUTHORIZED": 403,
    "LAND_NOT_FOUND": 404,
    "DUPLICATE_PARCEL": 409,
    "NOT_FOR_SALE": 409,
    "ALREADY_LISTED": 409,
    "SELF_TRANSFER": 409,
    "NO_PENDING_REQUEST": 409,
}


@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(exc.code, 500),
        content={"code": exc.code, "message": exc.message, "details": exc.details},
    )


# ─── Request / Response Schemas ─────────────────────────────────────


class RegisterRequest(ParcelDetails):
    """Request body for POST /lands."""

    model_config = {"json_schema_extra": {"example": {
        "plot_number": "PLT-001",
        "area": "Andheri",
        "district": "Mumbai",
        "city": "Mumbai",
        "state": "Maharashtra",
        "area_sq_yd": 500,
    }}}


class RegisterResponse(BaseModel):
    id: int


class CountResponse(BaseModel):
    land_count: int


class LandIdsResponse(BaseModel):
    identity: str
    land_ids: list[int]


class HealthResponse(BaseModel):
    status: str
    version: str
    land_count: int
    admin_configured: bool


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_registry() -> LandRegistry:
    if _registry is None:
        raise HTTPException(status_code=503, detail="Registry not initialised")
    return _registry


CallerHeader = Annotated[Optional[str], Header(alias="X-Caller-Identity")]


# ─── Endpoints: Registration & Listings ──────────────────────────────


@app.post("/lands", status_code=201, summary="Register a land parcel", tags=["Lands"])
def register_land(
    request: RegisterRequest, caller: CallerHeader = None
) -> RegisterResponse:
    """Register a parcel owned by the caller. Duplicate parcels are rejected."""
    registry = _get_registry()
    land_id = registry.register_land(**request.model_dump(), caller=caller)
    return RegisterResponse(id=land_id)


@app.get("/lands", summary="List every land (admin only)", tags=["Admin"])
def get_all_lands(caller: CallerHeader = None) -> list[LandRecord]:
    return _get_registry().get_all_lands(caller)


@app.get("/lands/for-sale", summary="Lands currently listed for sale", tags=["Lands"])
def get_lands_for_sale() -> list[LandRecord]:
    return _get_registry().get_lands_for_sale()


@app.get("/lands/count", summary="Number of lands ever registered", tags=["Lands"])
def land_count() -> CountResponse:
    return CountResponse(land_count=_get_registry().land_count())


@app.get("/lands/{land_id}", summary="Full land record", tags=["Lands"])
def get_land(land_id: int) -> LandRecord:
    return _get_registry().get_land(land_id)


@app.get("/lands/{land_id}/verify", summary="Verify a land and its owner", tags=["Lands"])
def verify_land(land_id: int) -> LandVerification:
    """Always 200. An unknown id comes back with ``exists: false``."""
    return _get_registry().verify_land(land_id)


@app.get("/lands/{land_id}/history", summary="Ownership history", tags=["Lands"])
def get_property_history(land_id: int) -> list[OwnershipEntry]:
    return _get_registry().get_property_history(land_id)


# ─── Endpoints: Transfer Workflow ────────────────────────────────────


@app.post("/lands/{land_id}/sale", summary="List a land for sale", tags=["Transfers"])
def put_land_for_sale(land_id: int, caller: CallerHeader = None) -> LandRecord:
    registry = _get_registry()
    registry.put_land_for_sale(land_id, caller=caller)
    return registry.get_land(land_id)


@app.post(
    "/lands/{land_id}/transfer-request",
    summary="Request transfer of a listed land",
    tags=["Transfers"],
)
def request_transfer(land_id: int, caller: CallerHeader = None) -> LandRecord:
    registry = _get_registry()
    registry.request_transfer(land_id, caller=caller)
    return registry.get_land(land_id)


@app.post("/lands/{land_id}/approve", summary="Approve the pending transfer", tags=["Transfers"])
def approve_transfer(land_id: int, caller: CallerHeader = None) -> LandRecord:
    registry = _get_registry()
    registry.approve_transfer(land_id, caller=caller)
    return registry.get_land(land_id)


@app.post("/lands/{land_id}/deny", summary="Deny the pending transfer", tags=["Transfers"])
def deny_transfer(land_id: int, caller: CallerHeader = None) -> LandRecord:
    registry = _get_registry()
    registry.deny_transfer(land_id, caller=caller)
    return registry.get_land(land_id)


# ─── Endpoints: Owners ───────────────────────────────────────────────


@app.get("/owners/{identity}/lands", summary="Lands owned by an identity", tags=["Owners"])
def get_lands_by_owner(identity: str) -> LandIdsResponse:
    return LandIdsResponse(
        identity=identity, land_ids=_get_registry().get_lands_by_owner(identity)
    )


@app.get(
    "/owners/{identity}/pending-requests",
    summary="Owned lands with a transfer request awaiting decision",
    tags=["Owners"],
)
def get_pending_transfer_requests(identity: str) -> LandIdsResponse:
    return LandIdsResponse(
        identity=identity,
        land_ids=_get_registry().get_pending_transfer_requests(identity),
    )


# ─── Endpoints: System ───────────────────────────────────────────────


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Registry not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and configuration info."""
    registry = _get_registry()
    return HealthResponse(
        status="healthy",
        version=__version__,
        land_count=registry.land_count(),
        admin_configured=registry.admin_identity != NULL_IDENTITY,
    )
