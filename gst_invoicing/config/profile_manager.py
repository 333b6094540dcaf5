"""Active invoicing profile shared by the session, validation, CLI and API."""

import logging
from typing import Optional

from . import get_profile_name
from .profile_loader import DEFAULT_PROFILE_NAME, ProfileConfig, get_default_profile, load_profile

logger = logging.getLogger(__name__)

_active_profile: Optional[ProfileConfig] = None


def activate_profile(profile_name: Optional[str] = None) -> ProfileConfig:
    """Load a profile and make it the active one.

    Args:
        profile_name: Profile to load; GST_INVOICING_PROFILE (or "default") when None

    Returns:
        Activated ProfileConfig. A missing default.yaml activates the
        built-in defaults; any other missing profile is an error.

    Raises:
        FileNotFoundError: If a non-default profile doesn't exist
        ValueError: If the profile file is invalid
    """
    global _active_profile
    name = profile_name or get_profile_name()
    if name == DEFAULT_PROFILE_NAME:
        profile = get_default_profile()
    else:
        profile = load_profile(name)
    logger.debug(
        f"Active profile: {profile.name} (rate {profile.default_tax_rate}, unit {profile.default_unit})"
    )
    _active_profile = profile
    return profile


def set_profile(profile_name: str) -> ProfileConfig:
    """Activate a profile that must exist on disk.

    Raises:
        FileNotFoundError: If the profile file doesn't exist
        ValueError: If the profile file is invalid
    """
    global _active_profile
    _active_profile = load_profile(profile_name)
    return _active_profile


def get_profile() -> ProfileConfig:
    """Active profile, activating the environment-selected one on first use."""
    if _active_profile is None:
        return activate_profile()
    return _active_profile


def reset_profile() -> None:
    """Forget the active profile; the next get_profile() re-reads the environment."""
    global _active_profile
    _active_profile = None
