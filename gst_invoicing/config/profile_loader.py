"""Profile loader for configurable invoicing defaults."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List
from dataclasses import dataclass, field

from ..models.line_item import DEFAULT_UNIT, STANDARD_GST_RATE, UNIT_TYPES

DEFAULT_PROFILE_NAME = "default"
DEFAULT_TAX_PRESETS = [0.0, 5.0, 18.0, 40.0]


@dataclass
class ProfileConfig:
    """Configuration profile for line defaults and tolerances."""
    name: str
    description: str = ""
    default_tax_rate: float = float(STANDARD_GST_RATE)
    tax_presets: List[float] = field(default_factory=lambda: list(DEFAULT_TAX_PRESETS))
    unit_types: List[str] = field(default_factory=lambda: list(UNIT_TYPES))
    default_unit: str = DEFAULT_UNIT
    tolerances: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if not 0 <= self.default_tax_rate <= 100:
            raise ValueError(
                f"default_tax_rate must be between 0 and 100, got {self.default_tax_rate}"
            )
        if self.default_unit not in self.unit_types:
            raise ValueError(
                f"default_unit '{self.default_unit}' is not one of {self.unit_types}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfileConfig':
        """Create ProfileConfig from dictionary."""
        return cls(
            name=data.get('name', DEFAULT_PROFILE_NAME),
            description=data.get('description', ''),
            default_tax_rate=float(data.get('default_tax_rate', STANDARD_GST_RATE)),
            tax_presets=[float(v) for v in data.get('tax_presets', DEFAULT_TAX_PRESETS)],
            unit_types=list(data.get('unit_types', UNIT_TYPES)),
            default_unit=data.get('default_unit', DEFAULT_UNIT),
            tolerances=data.get('tolerances', {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'description': self.description,
            'default_tax_rate': self.default_tax_rate,
            'tax_presets': self.tax_presets,
            'unit_types': self.unit_types,
            'default_unit': self.default_unit,
            'tolerances': self.tolerances,
        }


def get_profiles_dir() -> Path:
    """Get directory containing profile YAML files.

    Returns:
        GST_INVOICING_PROFILES_DIR if set, else configs/profiles under the project root
    """
    env_dir = os.getenv('GST_INVOICING_PROFILES_DIR')
    if env_dir:
        return Path(env_dir)
    # gst_invoicing/config/profile_loader.py -> gst_invoicing/config -> gst_invoicing -> root
    project_root = Path(__file__).resolve().parent.parent.parent
    return project_root / "configs" / "profiles"


def load_profile(profile_name: str = DEFAULT_PROFILE_NAME) -> ProfileConfig:
    """Load a configuration profile.

    Args:
        profile_name: Name of profile to load (without .yaml extension)

    Returns:
        ProfileConfig object

    Raises:
        FileNotFoundError: If profile file doesn't exist
        ValueError: If profile file is invalid
    """
    profile_path = get_profiles_dir() / f"{profile_name}.yaml"

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_name} (expected at {profile_path})")

    try:
        with open(profile_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in profile {profile_name}: {e}") from e

    if not data:
        raise ValueError(f"Profile file is empty: {profile_path}")
    if not isinstance(data, dict):
        raise ValueError(f"Profile {profile_name} must be a mapping, got {type(data).__name__}")

    try:
        return ProfileConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Error loading profile {profile_name}: {e}") from e


def list_available_profiles() -> list[str]:
    """List all available profile names.

    Returns:
        List of profile names (without .yaml extension)
    """
    profiles_dir = get_profiles_dir()

    if not profiles_dir.exists():
        return [DEFAULT_PROFILE_NAME]

    profiles = [profile_file.stem for profile_file in profiles_dir.glob("*.yaml")]
    return sorted(profiles) if profiles else [DEFAULT_PROFILE_NAME]


def get_default_profile() -> ProfileConfig:
    """Get default profile (always available).

    Returns:
        Default ProfileConfig
    """
    try:
        return load_profile(DEFAULT_PROFILE_NAME)
    except FileNotFoundError:
        # Fallback: built-in defaults
        return ProfileConfig(name=DEFAULT_PROFILE_NAME, description="Built-in defaults")
