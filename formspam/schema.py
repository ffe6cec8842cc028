"""Run profile loading and validation."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import validate, ValidationError

from .config import EngineConfig
from .errors import ConfigError


DEFAULT_SCHEMA_PATH = Path(__file__).parent / 'profile-schema.json'


class ProfileValidator:
    """Validates run profiles against the profile schema"""

    def __init__(self, schema_path: Path = DEFAULT_SCHEMA_PATH):
        with open(schema_path, 'r', encoding='utf-8') as f:
            self.schema = json.load(f)

    def check(self, profile: Dict[str, Any], what: str = "run profile") -> Dict[str, Any]:
        """Validate an already loaded profile and return it"""
        try:
            validate(instance=profile, schema=self.schema)
        except ValidationError as e:
            where = '.'.join(str(p) for p in e.absolute_path)
            prefix = f"{where}: " if where else ""
            raise ConfigError(f"Invalid {what}: {prefix}{e.message}") from None
        return profile

    def validate(self, profile_path: Path) -> Dict[str, Any]:
        """Load a profile file, validate it and return parsed data"""
        try:
            with open(profile_path, 'r', encoding='utf-8') as f:
                profile = json.load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read run profile {profile_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Run profile {profile_path} is not valid JSON: {e}") from e
        return self.check(profile)


def build_engine_config(profile: Optional[Dict[str, Any]] = None,
                        **overrides: Any) -> EngineConfig:
    """Merge a profile with overrides; ``None`` overrides are ignored.

    The merged settings are checked against the profile schema, so
    overrides obey the same limits as profile values.
    """
    values = dict(profile or {})
    values.update({k: v for k, v in overrides.items() if v is not None})
    ProfileValidator().check(values, what="settings")

    missing = [key for key in ('url', 'max_open') if key not in values]
    if missing:
        raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")

    return EngineConfig(**values)
