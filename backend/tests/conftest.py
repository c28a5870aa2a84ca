"""Shared test fixtures and configuration."""
import pytest

from tenant_rbac.config import reset_settings

SETTINGS_ENV_VARS = (
    "APP_NAME",
    "LOG_LEVEL",
    "SUPER_ADMIN_ROLE_NAME",
    "SUPER_ADMIN_PRIORITY",
    "DEFAULT_INHERITANCE_MODE",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Every test starts from default settings, whatever the shell exports."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
