"""
Land Registry — ownership records and a request/approve/deny transfer workflow.

Architecture: Validators → Parcel key index → Registry state machine → History log
Philosophy:  Check every precondition first. Write nothing until all of them pass.
"""

from .exceptions import (
    AlreadyListedError,
    AuthorizationError,
    DuplicateError,
    NoRequestError,
    NotForSaleError,
    NotFoundError,
    RegistryError,
    SelfTransferError,
    ValidationError,
)
from .models import NULL_IDENTITY, LandRecord, LandVerification, OwnershipEntry
from .registry import LandRegistry

__version__ = "1.0.0"

__all__ = [
    "AlreadyListedError",
    "AuthorizationError",
    "DuplicateError",
    "LandRecord",
    "LandRegistry",
    "LandVerification",
    "NULL_IDENTITY",
    "NoRequestError",
    "NotForSaleError",
    "NotFoundError",
    "OwnershipEntry",
    "RegistryError",
    "SelfTransferError",
    "ValidationError",
]
