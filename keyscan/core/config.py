"""
KeyScan Configuration Management

Loads the optional scanner configuration from a YAML file, usually
.github/ai-key-scanner.yml in the scanned repository:

    ignorePaths:
      - test/fixtures/
    allowlistRegex:
      - "^sk-test-.*"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


CONFIG_PATH = ".github/ai-key-scanner.yml"

# YAML key -> accepted aliases
_FIELD_KEYS = {
    "ignore_paths": ("ignorePaths", "ignore_paths"),
    "allowlist_regex": ("allowlistRegex", "allowlist_regex"),
}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is malformed."""


@dataclass(frozen=True)
class ScanConfig:
    """Filters applied to a scan. Empty lists mean no filtering."""

    ignore_paths: list[str] = field(default_factory=list)
    allowlist_regex: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "ScanConfig":
        """Load configuration from a YAML file, falling back to defaults."""
        if config_path is None:
            config_path = Path.cwd() / CONFIG_PATH

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load config file {config_path}: {exc}") from exc

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "ScanConfig":
        """Build config from a parsed YAML dictionary."""
        values: dict[str, list[str]] = {}
        for name, keys in _FIELD_KEYS.items():
            value = None
            for key in keys:
                if key in data:
                    value = data[key]
                    break
            values[name] = _string_list(keys[0], value)
        return cls(**values)


def _string_list(key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def generate_default_config() -> str:
    """Generate default .github/ai-key-scanner.yml content."""
    return """\
# KeyScan configuration

# Files whose path contains any of these strings are not scanned.
ignorePaths:
  - test/fixtures/
  # - docs/

# Matched keys satisfying any of these regular expressions are ignored,
# e.g. placeholders used in documentation.
allowlistRegex:
  - "^sk-(?:proj-)?(?:x+|X+)$"
  # - "^AIzaSyEXAMPLE"
"""
