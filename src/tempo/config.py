"""
Configuration models for tempo.

Configuration is read from ``tempo.yaml`` (or ``tempo.yml``) in the working
directory and merged over defaults. A few values can be overridden from the
environment.

Example YAML:
    tempo_root: .tempo-files
    templates:
      user_data:
        author: Jane
      function_providers:
        - name: strings
          type: url
          value: https://github.com/acme/tempo-strings.git
        - name: local-funcs
          type: path
          value: ./funcs
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from tempo.errors import ConfigError

CONFIG_FILES = ("tempo.yaml", "tempo.yml")

DEFAULT_TEMPO_ROOT = ".tempo-files"

ProviderType = Literal["url", "path"]


@dataclass
class FunctionProviderEntry:
    """A function provider loaded from a repository URL or a local path."""

    name: str = ""
    type: ProviderType = "path"
    value: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionProviderEntry:
        provider_type = data.get("type", "path")
        if provider_type not in ("url", "path"):
            raise ConfigError(f"unknown function provider type: {provider_type}")
        return cls(
            name=data.get("name", ""),
            type=provider_type,
            value=data.get("value", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "value": self.value}


@dataclass
class TemplatesConfig:
    """Settings related to template files and rendering."""

    user_data: dict[str, Any] = field(default_factory=dict)
    function_providers: list[FunctionProviderEntry] = field(default_factory=list)


@dataclass
class TempoConfig:
    """Main configuration for tempo."""

    tempo_root: Path = field(default_factory=lambda: Path(DEFAULT_TEMPO_ROOT))
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TempoConfig:
        """Create config from a dictionary, keeping defaults for empty values."""
        config = cls()

        if data.get("tempo_root"):
            config.tempo_root = Path(data["tempo_root"])
        if data.get("log_level"):
            config.log_level = str(data["log_level"]).upper()

        templates = data.get("templates") or {}
        if not isinstance(templates, dict):
            raise ConfigError("'templates' must be a mapping")

        if templates.get("user_data"):
            config.templates.user_data = dict(templates["user_data"])
        config.templates.function_providers = [
            FunctionProviderEntry.from_dict(entry)
            for entry in templates.get("function_providers") or []
        ]
        return config

    @classmethod
    def from_yaml(cls, path: Path) -> TempoConfig:
        """Load config from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to parse config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"failed to read config file {path}: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        return cls.from_dict(data or {})

    @classmethod
    def load(cls, cwd: Path | None = None) -> TempoConfig:
        """Load ``tempo.yaml``/``tempo.yml`` from *cwd*, then apply env overrides."""
        cwd = cwd or Path.cwd()
        config = cls()
        for name in CONFIG_FILES:
            path = cwd / name
            if path.is_file():
                config = cls.from_yaml(path)
                break

        if not config.tempo_root.is_absolute():
            config.tempo_root = cwd / config.tempo_root

        env_root = os.environ.get("TEMPO_ROOT")
        if env_root:
            env_path = Path(env_root).expanduser()
            config.tempo_root = env_path if env_path.is_absolute() else cwd / env_path
        env_level = os.environ.get("TEMPO_LOG_LEVEL")
        if env_level:
            config.log_level = env_level.upper()
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "tempo_root": str(self.tempo_root),
            "log_level": self.log_level,
            "templates": {
                "user_data": self.templates.user_data,
                "function_providers": [
                    p.to_dict() for p in self.templates.function_providers
                ],
            },
        }
