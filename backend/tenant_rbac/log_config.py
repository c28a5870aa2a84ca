import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def resolve_log_level(value: str) -> int:
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str | None = None) -> logging.Logger:
    """Install a basic handler (unless the host already did) and return the package logger."""
    if level_name is None:
        from .config import get_settings

        level_name = get_settings().log_level

    log_level = resolve_log_level(level_name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=log_level, format=LOG_FORMAT)

    logger = logging.getLogger("tenant_rbac")
    logger.setLevel(log_level)
    return logger
