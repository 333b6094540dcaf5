"""Central configuration for the GST invoicing engine."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_app_name() -> str:
    """Get application name."""
    return "GST Invoicing Engine"


def get_app_version() -> str:
    """Get application version from pyproject.toml."""
    try:
        import tomli
        pyproject_path = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            pyproject = tomli.load(f)
            return pyproject.get("project", {}).get("version", "0.1.0")
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read version from pyproject.toml: {e}")
        return "0.1.0"


def get_profile_name() -> str:
    """Get name of the configuration profile to activate.

    Returns:
        GST_INVOICING_PROFILE environment variable, default "default"
    """
    return os.getenv('GST_INVOICING_PROFILE', 'default')


def get_log_level() -> str:
    """Get logging level name.

    Returns:
        GST_INVOICING_LOG_LEVEL upper-cased, "WARNING" when unset or invalid
    """
    level = os.getenv('GST_INVOICING_LOG_LEVEL', 'WARNING').upper()
    if level not in _VALID_LOG_LEVELS:
        logger.warning(f"Invalid log level: {level}, using 'WARNING'")
        return 'WARNING'
    return level


__all__ = [
    'get_app_name',
    'get_app_version',
    'get_profile_name',
    'get_log_level',
]
