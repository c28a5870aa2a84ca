import logging

import pytest

from tenant_rbac import config
from tenant_rbac.config import Settings, get_settings, reset_settings
from tenant_rbac.log_config import configure_logging, resolve_log_level

# Tests for Settings.from_env() and the lazily created settings instance


def test_defaults_without_environment() -> None:
    """Test that every setting has a usable default."""
    settings = Settings.from_env()

    assert settings.app_name == "Tenant RBAC"
    assert settings.log_level == "INFO"
    assert settings.super_admin_role_name == "Super Administrator"
    assert settings.super_admin_priority == 1000
    assert settings.default_inheritance_mode == "additive"


def test_values_are_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that environment variables override defaults."""
    monkeypatch.setenv("APP_NAME", "Acme Access")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SUPER_ADMIN_ROLE_NAME", " Owner ")
    monkeypatch.setenv("SUPER_ADMIN_PRIORITY", "500")
    monkeypatch.setenv("DEFAULT_INHERITANCE_MODE", "Restrictive")

    settings = Settings.from_env()

    assert settings.app_name == "Acme Access"
    assert settings.log_level == "DEBUG"
    assert settings.super_admin_role_name == "Owner"
    assert settings.super_admin_priority == 500
    assert settings.default_inheritance_mode == "restrictive"


def test_log_level_rejects_unknown_name(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that LOG_LEVEL must be a logging level name."""
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    with pytest.raises(ValueError, match="LOG_LEVEL must be a logging level name"):
        Settings.from_env()


def test_super_admin_name_rejects_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that SUPER_ADMIN_ROLE_NAME cannot be blank."""
    monkeypatch.setenv("SUPER_ADMIN_ROLE_NAME", "   ")

    with pytest.raises(ValueError, match="SUPER_ADMIN_ROLE_NAME must not be empty"):
        Settings.from_env()


def test_priority_rejects_non_integer(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that SUPER_ADMIN_PRIORITY must be an integer."""
    monkeypatch.setenv("SUPER_ADMIN_PRIORITY", "high")

    with pytest.raises(ValueError, match="SUPER_ADMIN_PRIORITY must be an integer"):
        Settings.from_env()


def test_priority_rejects_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that SUPER_ADMIN_PRIORITY must be positive."""
    monkeypatch.setenv("SUPER_ADMIN_PRIORITY", "0")

    with pytest.raises(ValueError, match="SUPER_ADMIN_PRIORITY must be greater than 0"):
        Settings.from_env()


def test_inheritance_mode_rejects_unknown(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that DEFAULT_INHERITANCE_MODE is one of the supported modes."""
    monkeypatch.setenv("DEFAULT_INHERITANCE_MODE", "union")

    with pytest.raises(ValueError, match="DEFAULT_INHERITANCE_MODE must be one of"):
        Settings.from_env()


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that settings are built once until reset."""
    first = get_settings()
    monkeypatch.setenv("APP_NAME", "Changed")

    assert get_settings() is first

    reset_settings()
    assert get_settings().app_name == "Changed"


def test_settings_proxy_reads_current_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that the module-level proxy defers to get_settings()."""
    monkeypatch.setenv("SUPER_ADMIN_PRIORITY", "42")
    reset_settings()

    assert config.settings.super_admin_priority == 42


def test_resolve_log_level_falls_back_to_info() -> None:
    """Test that unknown level names resolve to INFO."""
    assert resolve_log_level("debug") == logging.DEBUG
    assert resolve_log_level("chatty") == logging.INFO


def test_configure_logging_sets_package_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that configure_logging applies LOG_LEVEL to the package logger."""
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    package_logger = logging.getLogger("tenant_rbac")
    previous = package_logger.level

    try:
        logger = configure_logging()
        assert logger is package_logger
        assert logger.level == logging.WARNING

        assert configure_logging("debug").level == logging.DEBUG
    finally:
        package_logger.setLevel(previous)
