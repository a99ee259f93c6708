"""
Deployment configuration using pydantic-settings.

    LAND_REGISTRY_ADMIN               admin identity (default: nobody)
    LAND_REGISTRY_RELIST_POLICY       "error" | "ignore" (default: "error")
    LAND_REGISTRY_DENY_CLEARS_LISTING true/false (default: false)

Values come from the environment or a ``.env`` file. The admin is fixed for
the life of a registry; there is no way to change it after construction.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .keys import canonical_identity
from .models import NULL_IDENTITY, RelistPolicy
from .registry import LandRegistry


class RegistrySettings(BaseSettings):
    """Immutable settings for one registry instance."""

    model_config = SettingsConfigDict(
        env_prefix="LAND_REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    admin_identity: str = Field(
        default=NULL_IDENTITY,
        validation_alias=AliasChoices("admin_identity", "LAND_REGISTRY_ADMIN"),
    )
    relist_policy: RelistPolicy = RelistPolicy.ERROR
    deny_clears_listing: bool = False

    @field_validator("admin_identity", mode="before")
    @classmethod
    def canonicalise_admin(cls, v: Any) -> str:
        return canonical_identity(v)

    @field_validator("relist_policy", mode="before")
    @classmethod
    def lower_policy(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


def load_settings(**overrides: Any) -> RegistrySettings:
    """Build settings from the environment, with keyword overrides on top.

    Raises:
        ConfigurationError: a variable holds a value we cannot interpret.
    """
    try:
        return RegistrySettings(**overrides)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        raise ConfigurationError(
            "Invalid registry configuration: "
            + "; ".join(f"{e['field']}: {e['message']}" for e in errors),
            details={"errors": errors},
        ) from exc


def build_registry(settings: RegistrySettings | None = None) -> LandRegistry:
    """Create an empty registry configured from ``settings`` (or the environment)."""
    if settings is None:
        settings = load_settings()
    return LandRegistry(
        admin_identity=settings.admin_identity,
        relist_policy=settings.relist_policy,
        deny_clears_listing=settings.deny_clears_listing,
    )
