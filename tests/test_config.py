"""Tests for environment-driven registry configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from land_registry.config import RegistrySettings, build_registry, load_settings
from land_registry.exceptions import ConfigurationError
from land_registry.models import NULL_IDENTITY, RelistPolicy

ADMIN = "0x7F585D7A9751a7388909Ed940E29732306A98f0c"

_VARIABLES = (
    "LAND_REGISTRY_ADMIN",
    "LAND_REGISTRY_RELIST_POLICY",
    "LAND_REGISTRY_DENY_CLEARS_LISTING",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch, tmp_path) -> None:
    """No inherited variables and no stray .env file."""
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings()
        assert settings.admin_identity == NULL_IDENTITY
        assert settings.relist_policy is RelistPolicy.ERROR
        assert settings.deny_clears_listing is False

    def test_reads_every_variable(self, monkeypatch):
        monkeypatch.setenv("LAND_REGISTRY_ADMIN", ADMIN)
        monkeypatch.setenv("LAND_REGISTRY_RELIST_POLICY", "Ignore")
        monkeypatch.setenv("LAND_REGISTRY_DENY_CLEARS_LISTING", "yes")
        settings = load_settings()
        assert settings.admin_identity == ADMIN.lower()
        assert settings.relist_policy is RelistPolicy.IGNORE
        assert settings.deny_clears_listing is True

    def test_reads_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text(
            "LAND_REGISTRY_ADMIN=registrar\nLAND_REGISTRY_DENY_CLEARS_LISTING=true\n",
            encoding="utf-8",
        )
        settings = load_settings()
        assert settings.admin_identity == "registrar"
        assert settings.deny_clears_listing is True

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("LAND_REGISTRY_ADMIN", "registrar")
        assert load_settings(admin_identity="auditor").admin_identity == "auditor"

    def test_bad_policy(self, monkeypatch):
        monkeypatch.setenv("LAND_REGISTRY_RELIST_POLICY", "sometimes")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()
        assert exc_info.value.code == "INVALID_CONFIGURATION"
        assert exc_info.value.details["errors"][0]["field"] == "relist_policy"

    def test_bad_bool(self, monkeypatch):
        monkeypatch.setenv("LAND_REGISTRY_DENY_CLEARS_LISTING", "perhaps")
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_settings_are_frozen(self):
        settings = load_settings()
        with pytest.raises(PydanticValidationError):
            settings.admin_identity = "someone"  # type: ignore[misc]


class TestBuildRegistry:
    def test_settings_flow_into_registry(self):
        registry = build_registry(
            RegistrySettings(
                admin_identity="registrar",
                relist_policy=RelistPolicy.IGNORE,
                deny_clears_listing=True,
            )
        )
        assert registry.admin_identity == "registrar"
        assert registry.relist_policy is RelistPolicy.IGNORE
        assert registry.deny_clears_listing is True
        assert registry.land_count() == 0

    def test_reads_environment_when_no_settings_given(self, monkeypatch):
        monkeypatch.setenv("LAND_REGISTRY_ADMIN", "registrar")
        assert build_registry().admin_identity == "registrar"
