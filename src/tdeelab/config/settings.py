"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from tdeelab.tracking.models import LinearConfig, RegressionConfig


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".tdeelab"


def default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class DefaultsConfig:
    """Default values for CLI output."""

    output_format: str = "table"  # "table" or "json"


def _merge(base: Any, data: Optional[dict]) -> Any:
    """Replace the known fields of a config dataclass from a YAML mapping."""
    if not data:
        return base
    known = {f.name for f in fields(base)}
    updates = {k: v for k, v in data.items() if k in known}
    return replace(base, **updates)


@dataclass
class Settings:
    """Main application settings."""

    regression: RegressionConfig = field(default_factory=RegressionConfig)
    linear: LinearConfig = field(default_factory=LinearConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Unknown keys are ignored so older config files keep loading.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.tdeelab/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()
        settings.regression = _merge(settings.regression, data.get("regression"))
        settings.linear = _merge(settings.linear, data.get("linear"))
        settings.defaults = _merge(settings.defaults, data.get("defaults"))
        return settings

    def to_dict(self) -> dict:
        return {
            "regression": asdict(self.regression),
            "linear": asdict(self.linear),
            "defaults": asdict(self.defaults),
        }

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.tdeelab/config.yaml

        Returns:
            Path written
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        return config_path


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
