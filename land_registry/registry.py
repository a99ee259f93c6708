"""
The registry state machine: every land record and every rule that guards it.

Per-record lifecycle:

  ┌──────────┐  put_land_for_sale   ┌────────┐  request_transfer  ┌──────────────────┐
  │ Unlisted │ ───────────────────▶ │ Listed │ ─────────────────▶ │ PendingApproval  │
  └────▲─────┘                      └───▲────┘ ◀── (re-request) ──└───┬──────────┬───┘
       │                                │                             │          │
       │                                └──────── deny_transfer ──────┘          │
       └────────────── approve_transfer (owner := requester) ────────────────────┘

Internal structure:
  - record storage   id → LandRecord, ids dense from 1
  - parcel key index set of canonical keys, one per registered parcel
  - owner index      identity → ids in acquisition order
  - history log      list owned by each record, append-only

Design principles:
  - Every precondition is checked before the first write; a rejected call
    leaves no trace.
  - One mutation at a time (re-entrant lock); reads see committed state only.
  - Nothing returned to a caller aliases internal state.
  - Timestamps come from an injectable clock, so runs are reproducible.
"""

from __future__ import annotations

import functools
import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    AlreadyListedError,
    AuthorizationError,
    ConfigurationError,
    DuplicateError,
    InvariantViolation,
    NoRequestError,
    NotForSaleError,
    NotFoundError,
    RegistryError,
    SelfTransferError,
    ValidationError,
)
from .keys import canonical_identity, parcel_key
from .models import (
    NULL_IDENTITY,
    FieldProblem,
    LandRecord,
    LandVerification,
    OwnershipEntry,
    ParcelDetails,
    RelistPolicy,
)
from .validators import validate_all

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _admitted(method):
    """Serialise a mutating operation and log it if it is rejected."""

    @functools.wraps(method)
    def wrapper(self: LandRegistry, *args, **kwargs):
        with self._lock:
            try:
                return method(self, *args, **kwargs)
            except RegistryError as exc:
                logger.warning("%s rejected [%s]: %s", method.__name__, exc.code, exc)
                raise

    return wrapper


class LandRegistry:
    """Holds all land records and applies operations one at a time.

    Usage:
        registry = LandRegistry(admin_identity="0xadmin...")
        land_id = registry.register_land(
            "PLT-001", "Andheri", "Mumbai", "Mumbai", "Maharashtra", 500, caller=alice
        )
        registry.put_land_for_sale(land_id, caller=alice)
        registry.request_transfer(land_id, caller=bob)
        registry.approve_transfer(land_id, caller=alice)
    """

    def __init__(
        self,
        admin_identity: str = NULL_IDENTITY,
        *,
        relist_policy: RelistPolicy | str = RelistPolicy.ERROR,
        deny_clears_listing: bool = False,
        clock: Clock | None = None,
    ):
        try:
            self._relist_policy = RelistPolicy(relist_policy)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown relist policy '{relist_policy}'",
                details={"allowed": [p.value for p in RelistPolicy]},
            ) from exc

        self._admin = canonical_identity(admin_identity)
        self._deny_clears_listing = deny_clears_listing
        self._clock = clock or _utc_now

        self._lands: dict[int, LandRecord] = {}
        self._registered_keys: set[str] = set()
        self._owned: dict[str, list[int]] = {}
        self._lock = threading.RLock()

    # ─── Configuration (read-only) ───────────────────────────────────

    @property
    def admin_identity(self) -> str:
        return self._admin

    @property
    def relist_policy(self) -> RelistPolicy:
        return self._relist_policy

    @property
    def deny_clears_listing(self) -> bool:
        return self._deny_clears_listing

    # ─── Registration ────────────────────────────────────────────────

    @_admitted
    def register_land(
        self,
        plot_number: str,
        area: str,
        district: str,
        city: str,
        state: str,
        area_sq_yd: int,
        caller: str,
    ) -> int:
        """Register a new parcel owned by ``caller``.

        Returns:
            The new land id.

        Raises:
            ValidationError: a text field is blank or the size is not positive.
            AuthorizationError: the caller is the null identity.
            DuplicateError: the same parcel is already registered.
        """
        parcel = self._parse_parcel(
            plot_number=plot_number,
            area=area,
            district=district,
            city=city,
            state=state,
            area_sq_yd=area_sq_yd,
        )
        problems = validate_all(parcel)
        if problems:
            raise ValidationError(
                "; ".join(p.message for p in problems),
                details={"problems": [p.model_dump() for p in problems]},
            )

        owner = self._require_caller(caller)

        key = parcel_key(parcel.plot_number, parcel.area, parcel.district, parcel.city, parcel.state)
        if key in self._registered_keys:
            raise DuplicateError(
                f"Land plot {parcel.plot_number} in {parcel.area}, {parcel.city} is already registered",
                details={"parcel_key": key, "plot_number": parcel.plot_number},
            )

        land_id = len(self._lands) + 1
        record = LandRecord(
            id=land_id,
            plot_number=parcel.plot_number,
            area=parcel.area,
            district=parcel.district,
            city=parcel.city,
            state=parcel.state,
            area_sq_yd=parcel.area_sq_yd,
            owner=owner,
            ownership_history=[OwnershipEntry(owner=owner, timestamp=self._clock())],
        )

        self._lands[land_id] = record
        self._registered_keys.add(key)
        self._owned.setdefault(owner, []).append(land_id)
        self._check_record(record)

        logger.info("Registered land #%d (plot %s) to %s", land_id, record.plot_number, owner)
        return land_id

    # ─── Transfer Workflow ───────────────────────────────────────────

    @_admitted
    def put_land_for_sale(self, land_id: int, caller: str) -> None:
        """List a land for sale. Only its owner may do this."""
        record = self._get(land_id)
        self._require_owner(record, caller, "list it for sale")

        if record.is_for_sale:
            if self._relist_policy is RelistPolicy.ERROR:
                raise AlreadyListedError(
                    f"Land #{land_id} is already listed for sale",
                    details={"land_id": land_id},
                )
            logger.info("Land #%d already listed; relist ignored", land_id)
            return

        record.is_for_sale = True
        self._check_record(record)
        logger.info("Land #%d listed for sale by %s", land_id, record.owner)

    @_admitted
    def request_transfer(self, land_id: int, caller: str) -> None:
        """Claim a listed land. A later request replaces an earlier one."""
        record = self._get(land_id)
        requester = self._require_caller(caller)

        if not record.is_for_sale:
            raise NotForSaleError(
                f"Land #{land_id} is not for sale",
                details={"land_id": land_id},
            )
        if requester == record.owner:
            raise SelfTransferError(
                f"Owner cannot request transfer of their own land #{land_id}",
                details={"land_id": land_id, "owner": record.owner},
            )

        superseded = record.transfer_request
        record.transfer_request = requester
        self._check_record(record)

        if superseded != NULL_IDENTITY and superseded != requester:
            logger.info("Land #%d: request by %s supersedes %s", land_id, requester, superseded)
        else:
            logger.info("Land #%d: transfer requested by %s", land_id, requester)

    @_admitted
    def approve_transfer(self, land_id: int, caller: str) -> None:
        """Hand the land to the pending requester. Irreversible."""
        record = self._get(land_id)
        self._require_owner(record, caller, "approve its transfer")
        self._require_pending_request(record)

        seller = record.owner
        buyer = record.transfer_request
        entry = OwnershipEntry(owner=buyer, timestamp=self._clock())

        record.ownership_history.append(entry)
        record.owner = buyer
        record.transfer_request = NULL_IDENTITY
        record.is_for_sale = False

        seller_lands = self._owned[seller]
        seller_lands.remove(land_id)
        if not seller_lands:
            del self._owned[seller]
        self._owned.setdefault(buyer, []).append(land_id)
        self._check_record(record)

        logger.info("Land #%d transferred from %s to %s", land_id, seller, buyer)

    @_admitted
    def deny_transfer(self, land_id: int, caller: str) -> None:
        """Reject the pending request. Owner and history stay as they are."""
        record = self._get(land_id)
        self._require_owner(record, caller, "deny its transfer")
        self._require_pending_request(record)

        denied = record.transfer_request
        record.transfer_request = NULL_IDENTITY
        if self._deny_clears_listing:
            record.is_for_sale = False
        self._check_record(record)

        logger.info(
            "Land #%d: request by %s denied (still listed: %s)",
            land_id,
            denied,
            record.is_for_sale,
        )

    # ─── Reads ───────────────────────────────────────────────────────

    def verify_land(self, land_id: int) -> LandVerification:
        """Public lookup. Unknown ids give a blank result with the null owner."""
        with self._lock:
            record = self._lands.get(land_id)
            if record is None:
                return LandVerification()
            return LandVerification(
                plot_number=record.plot_number,
                area=record.area,
                district=record.district,
                city=record.city,
                state=record.state,
                area_sq_yd=record.area_sq_yd,
                owner=record.owner,
            )

    def get_land(self, land_id: int) -> LandRecord:
        with self._lock:
            return self._get(land_id).model_copy(deep=True)

    def get_lands_by_owner(self, identity: str) -> list[int]:
        """Ids currently owned by ``identity``, in the order acquired."""
        with self._lock:
            return list(self._owned.get(canonical_identity(identity), []))

    def get_pending_transfer_requests(self, identity: str) -> list[int]:
        """Ids owned by ``identity`` that have a request awaiting a decision."""
        with self._lock:
            return [
                land_id
                for land_id in self._owned.get(canonical_identity(identity), [])
                if self._lands[land_id].has_transfer_request
            ]

    def get_lands_for_sale(self) -> list[LandRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._lands.values() if r.is_for_sale]

    def get_property_history(self, land_id: int) -> list[OwnershipEntry]:
        """Full chain of title, oldest first.

        Raises:
            NotFoundError: the id was never registered.
        """
        with self._lock:
            return [entry.model_copy() for entry in self._get(land_id).ownership_history]

    def get_past_ownership_details(self, land_id: int) -> list[OwnershipEntry]:
        return self.get_property_history(land_id)

    def get_all_lands(self, caller: str) -> list[LandRecord]:
        """Every record in id order. Admin only."""
        with self._lock:
            identity = canonical_identity(caller)
            if identity == NULL_IDENTITY or identity != self._admin:
                logger.warning("get_all_lands rejected for %s", identity)
                raise AuthorizationError(
                    "Only the admin can list all lands",
                    details={"caller": identity},
                )
            return [record.model_copy(deep=True) for record in self._lands.values()]

    def land_count(self) -> int:
        with self._lock:
            return len(self._lands)

    # ─── Integrity ───────────────────────────────────────────────────

    def verify_integrity(self) -> None:
        """Check every structural invariant across the whole registry.

        Raises:
            InvariantViolation: on the first broken invariant found.
        """
        with self._lock:
            expected_ids = list(range(1, len(self._lands) + 1))
            if sorted(self._lands) != expected_ids:
                raise InvariantViolation(
                    "Land ids are not dense from 1",
                    details={"ids": sorted(self._lands)},
                )

            keys = {
                parcel_key(r.plot_number, r.area, r.district, r.city, r.state)
                for r in self._lands.values()
            }
            if len(keys) != len(self._lands) or keys != self._registered_keys:
                raise InvariantViolation(
                    "Parcel key index does not match stored records",
                    details={"records": len(self._lands), "keys": len(self._registered_keys)},
                )

            indexed = [land_id for ids in self._owned.values() for land_id in ids]
            if sorted(indexed) != expected_ids:
                raise InvariantViolation(
                    "Owner index does not cover every land exactly once",
                    details={"indexed": sorted(indexed)},
                )

            for record in self._lands.values():
                self._check_record(record)

    # ─── Internal Helpers ────────────────────────────────────────────

    def _get(self, land_id: int) -> LandRecord:
        record = self._lands.get(land_id)
        if record is None:
            raise NotFoundError(
                f"No land registered with id {land_id}",
                details={"land_id": land_id},
            )
        return record

    def _require_caller(self, caller: str) -> str:
        identity = canonical_identity(caller)
        if identity == NULL_IDENTITY:
            raise AuthorizationError("A caller identity is required")
        return identity

    def _require_owner(self, record: LandRecord, caller: str, action: str) -> None:
        identity = canonical_identity(caller)
        if identity != record.owner:
            raise AuthorizationError(
                f"Only the owner of land #{record.id} can {action}",
                details={"land_id": record.id, "caller": identity},
            )

    def _require_pending_request(self, record: LandRecord) -> None:
        if not record.has_transfer_request:
            raise NoRequestError(
                f"No transfer request pending for land #{record.id}",
                details={"land_id": record.id},
            )

    def _parse_parcel(self, **fields) -> ParcelDetails:
        """Build ParcelDetails, turning type errors into a ValidationError."""
        try:
            return ParcelDetails(**fields)
        except PydanticValidationError as exc:
            problems = [
                FieldProblem(
                    code="WRONG_TYPE",
                    field=".".join(str(part) for part in error["loc"]),
                    message=error["msg"],
                )
                for error in exc.errors()
            ]
            raise ValidationError(
                "; ".join(p.message for p in problems),
                details={"problems": [p.model_dump() for p in problems]},
            ) from exc

    def _check_record(self, record: LandRecord) -> None:
        problems: list[str] = []

        if record.owner == NULL_IDENTITY:
            problems.append("owner is the null identity")
        if not record.ownership_history:
            problems.append("ownership history is empty")
        elif record.ownership_history[-1].owner != record.owner:
            problems.append("last history entry is not the current owner")
        if record.has_transfer_request and not record.is_for_sale:
            problems.append("transfer request pending on an unlisted land")
        if record.id not in self._owned.get(record.owner, []):
            problems.append("owner index is missing this land")

        if problems:
            raise InvariantViolation(
                f"Land #{record.id} is inconsistent: {', '.join(problems)}",
                details={"land_id": record.id, "problems": problems},
            )
