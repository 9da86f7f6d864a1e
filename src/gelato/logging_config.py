import sys
import os
from loguru import logger

from gelato.exceptions import ConfigError

# Flag to track if logging has been configured
_logging_configured = False

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def parse_level(level: str) -> str:
    """
    Normalizes a user supplied level name.

    Raises:
        ConfigError: the name is not a loguru level.
    """
    normalized = str(level).strip().upper()
    if normalized not in LOG_LEVELS:
        raise ConfigError(f"unknown log level '{level}', expected one of {', '.join(LOG_LEVELS)}")
    return normalized


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    Configures the global logger.

    By default, only console logging is enabled. File logging is opt-in via
    GELATO_FILE_LOGGING=1 environment variable or enable_file_logging=True.

    Args:
        level: Logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check GELATO_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check GELATO_FILE_LOGGING env var.
        force: Reconfigure even if logging was already configured (used by the CLI to apply --level).

    Raises:
        ConfigError: level is not a known level name.
    """
    global _logging_configured
    level = parse_level(level)

    # Only configure once to avoid duplicate handlers
    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = os.getenv("GELATO_MACHINE_MODE", "").lower() in ("1", "true", "yes")

    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )

    if enable_file_logging is None:
        enable_file_logging = os.getenv("GELATO_FILE_LOGGING", "").lower() in ("1", "true", "yes")

    if enable_file_logging:
        from gelato.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
            serialize=False
        )


# Configure the logger on import (will check env var for machine mode)
setup_logging()
