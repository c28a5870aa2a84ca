import logging
import os
import threading

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()

INHERITANCE_MODES: frozenset[str] = frozenset({"additive", "restrictive", "override"})


class Settings(BaseModel):
    app_name: str = Field(default="Tenant RBAC")
    log_level: str = Field(default="INFO")
    super_admin_role_name: str = Field(default="Super Administrator")
    super_admin_priority: int = Field(default=1000)
    default_inheritance_mode: str = Field(default="additive")

    @classmethod
    def from_env(cls) -> "Settings":
        log_level = os.getenv("LOG_LEVEL", cls.model_fields["log_level"].default).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got '{log_level}'")

        super_admin_role_name = os.getenv(
            "SUPER_ADMIN_ROLE_NAME", cls.model_fields["super_admin_role_name"].default
        ).strip()
        if not super_admin_role_name:
            raise ValueError("SUPER_ADMIN_ROLE_NAME must not be empty")

        raw_priority = os.getenv(
            "SUPER_ADMIN_PRIORITY", str(cls.model_fields["super_admin_priority"].default)
        ).strip()
        try:
            super_admin_priority = int(raw_priority)
        except ValueError as exc:
            raise ValueError(f"SUPER_ADMIN_PRIORITY must be an integer: {exc}") from exc
        if super_admin_priority <= 0:
            raise ValueError("SUPER_ADMIN_PRIORITY must be greater than 0")

        default_inheritance_mode = os.getenv(
            "DEFAULT_INHERITANCE_MODE", cls.model_fields["default_inheritance_mode"].default
        ).strip().lower()
        if default_inheritance_mode not in INHERITANCE_MODES:
            raise ValueError(
                "DEFAULT_INHERITANCE_MODE must be one of: "
                f"{', '.join(sorted(INHERITANCE_MODES))}"
            )

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            log_level=log_level,
            super_admin_role_name=super_admin_role_name,
            super_admin_priority=super_admin_priority,
            default_inheritance_mode=default_inheritance_mode,
        )


# Settings are created on first access, not at import time
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first calls build exactly one
    instance.

    Raises:
        ValueError: If an environment variable is present but invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


class _SettingsProxy:
    """Proxy to defer settings creation until first attribute access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
