"""
Pydantic models for land records, strictly typed at every boundary.

A ``LandRecord`` is owned by the registry. Everything handed to callers is a
deep copy, so nothing outside the registry can alias a record or its history.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field

# The zero identity: "nobody". Never a valid owner.
NULL_IDENTITY = "0x0000000000000000000000000000000000000000"


# ─── Listing Status ─────────────────────────────────────────────────


class ListingStatus(str, Enum):
    """Where a record sits in the transfer state machine."""

    UNLISTED = "UNLISTED"
    LISTED = "LISTED"
    PENDING_APPROVAL = "PENDING_APPROVAL"


class RelistPolicy(str, Enum):
    """What listing an already-listed land does."""

    ERROR = "error"  # raise AlreadyListedError
    IGNORE = "ignore"  # silent no-op


# ─── Registration Input ─────────────────────────────────────────────


class ParcelDetails(BaseModel):
    """The descriptive fields a registrant submits.

    Only the types are enforced here; the validators report every content
    problem at once instead of failing on the first bad field. The size is a
    strict int so ``True`` or ``"500"`` never slip through as a number.
    """

    plot_number: str
    area: str
    district: str
    city: str
    state: str
    area_sq_yd: int = Field(strict=True)


class FieldProblem(BaseModel):
    """One reason a registration was rejected."""

    code: str  # Machine-readable, e.g. "EMPTY_FIELD"
    field: str
    message: str
    details: dict = Field(default_factory=dict)


# ─── Ownership History ──────────────────────────────────────────────


class OwnershipEntry(BaseModel):
    """A single link in the chain of title."""

    owner: str
    timestamp: datetime


# ─── Land Record ────────────────────────────────────────────────────


class LandRecord(BaseModel):
    """The unit of registration."""

    id: int
    plot_number: str
    area: str
    district: str
    city: str
    state: str
    area_sq_yd: int
    owner: str
    is_for_sale: bool = False
    transfer_request: str = NULL_IDENTITY
    ownership_history: list[OwnershipEntry] = Field(default_factory=list)

    @property
    def has_transfer_request(self) -> bool:
        return self.transfer_request != NULL_IDENTITY

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> ListingStatus:
        if self.has_transfer_request:
            return ListingStatus.PENDING_APPROVAL
        if self.is_for_sale:
            return ListingStatus.LISTED
        return ListingStatus.UNLISTED


# ─── Verification Result ────────────────────────────────────────────


class LandVerification(BaseModel):
    """Public view of a parcel: descriptive fields plus current owner.

    For an unknown id every field is blank and ``owner`` is the null identity.
    """

    plot_number: str = ""
    area: str = ""
    district: str = ""
    city: str = ""
    state: str = ""
    area_sq_yd: int = 0
    owner: str = NULL_IDENTITY

    @computed_field  # type: ignore[prop-decorator]
    @property
    def exists(self) -> bool:
        return self.owner != NULL_IDENTITY
