import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict, Optional

# Per-area overrides, e.g. SERVICES_LOG_LEVEL=DEBUG to trace the ledger and
# budget engines without turning on debug output for every request.
AREA_LOG_LEVEL_ENV = {
    "finanza.services": "SERVICES_LOG_LEVEL",
    "finanza.crud": "CRUD_LOG_LEVEL",
    "finanza.routers": "ROUTERS_LOG_LEVEL",
}


def _parse_level(value: Optional[str], default: int) -> int:
    if not value:
        return default
    return getattr(logging, value.strip().upper(), default)


def area_log_levels() -> Dict[str, int]:
    """Levels for the finanza sub-loggers that have an override set."""
    levels = {}
    for logger_name, env_var in AREA_LOG_LEVEL_ENV.items():
        raw = os.getenv(env_var)
        if raw:
            levels[logger_name] = _parse_level(raw, logging.INFO)
    return levels


def setup_logging(
    app_log_level: Optional[str] = None,
    third_party_log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Set up logging configuration for the Finanza API.

    Args:
        app_log_level: Log level for application logs (default: INFO)
        third_party_log_level: Log level for third-party libraries (default: WARNING)
        log_file: Optional log file path. If None, logs only to console
        max_file_size: Maximum size of log file before rotation (bytes)
        backup_count: Number of backup log files to keep

    Area levels (SERVICES_LOG_LEVEL, CRUD_LOG_LEVEL, ROUTERS_LOG_LEVEL) apply
    to finanza.services, finanza.crud and finanza.routers; an area without
    an override follows the application level.

    Returns:
        Logger instance for the application
    """
    app_log_level = app_log_level or os.getenv("APP_LOG_LEVEL", "INFO")
    third_party_log_level = third_party_log_level or os.getenv("THIRD_PARTY_LOG_LEVEL", "WARNING")
    log_file = log_file or os.getenv("LOG_FILE")

    app_level = _parse_level(app_log_level, logging.INFO)
    third_party_level = _parse_level(third_party_log_level, logging.WARNING)
    area_levels = area_log_levels()

    app_logger = logging.getLogger("finanza")
    app_logger.setLevel(app_level)

    for logger_name in AREA_LOG_LEVEL_ENV:
        logging.getLogger(logger_name).setLevel(area_levels.get(logger_name, logging.NOTSET))

    # Handlers must pass the most verbose area through
    handler_level = min([app_level, *area_levels.values()])

    # Clear any existing handlers to avoid duplicates
    app_logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(handler_level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count
        )
        file_handler.setLevel(handler_level)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    # SQL echo and request access logs stay quiet unless asked for
    third_party_loggers = [
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "alembic",
        "uvicorn.access",
        "faker",
    ]

    for logger_name in third_party_loggers:
        logging.getLogger(logger_name).setLevel(third_party_level)

    app_logger.propagate = False

    return app_logger


def get_logger(name: str = "finanza") -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    if name == "finanza" or name.startswith("finanza."):
        return logging.getLogger(name)
    return logging.getLogger(f"finanza.{name}")
