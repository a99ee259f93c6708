"""
Custom exception hierarchy for the land registry.

Each exception type maps to one category of rejected operation, so callers
(and the HTTP layer) can react to the machine-readable ``code`` without
parsing messages. Every error is raised before the registry writes anything.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base exception for every rejected registry operation."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(RegistryError):
    """Malformed input: empty text field or non-positive size."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("VALIDATION_FAILED", message, details)


class DuplicateError(RegistryError):
    """The parcel key is already registered under another id."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("DUPLICATE_PARCEL", message, details)


class NotFoundError(RegistryError):
    """No record exists for the requested land id."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("LAND_NOT_FOUND", message, details)


class AuthorizationError(RegistryError):
    """The caller lacks the right to perform this operation."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("NOT_AUTHORIZED", message, details)


class NotForSaleError(RegistryError):
    """A transfer was requested on a land that is not listed."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("NOT_FOR_SALE", message, details)


class AlreadyListedError(RegistryError):
    """The land is already listed for sale."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("ALREADY_LISTED", message, details)


class SelfTransferError(RegistryError):
    """The owner tried to request a transfer of their own land."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("SELF_TRANSFER", message, details)


class NoRequestError(RegistryError):
    """Approve or deny was called with no transfer request pending."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("NO_PENDING_REQUEST", message, details)


class InvariantViolation(RegistryError):
    """Registry state broke one of its structural invariants."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INVARIANT_VIOLATION", message, details)


class ConfigurationError(RegistryError):
    """A configuration value could not be parsed."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INVALID_CONFIGURATION", message, details)
