"""
Config system - Typed middleware configuration with layered loading.

Merge precedence (later overrides earlier):
config files > .env file > environment variables > explicit overrides
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault

logger = logging.getLogger("assets_manager.config")

OPTION_KEYS = ("paths", "web_dir", "mime_types")


@dataclass(frozen=True)
class AssetsConfig:
    """
    Immutable middleware configuration.

    Attributes:
        paths: Directories searched for assets, in order
        web_dir: Public directory that found assets are copied into
        mime_types: Extension → MIME type entries merged over the defaults
    """

    paths: Tuple[str, ...] = ()
    web_dir: Optional[str] = None
    mime_types: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "AssetsConfig":
        """
        Normalise a loose options mapping.

        ``paths`` may be a single string or a sequence of strings.
        Values of the wrong shape are dropped rather than rejected.
        """
        options = options or {}

        raw_paths = options.get("paths")
        if raw_paths is None:
            paths: Tuple[str, ...] = ()
        elif isinstance(raw_paths, (str, os.PathLike)):
            paths = (os.fspath(raw_paths),)
        elif isinstance(raw_paths, (list, tuple)):
            paths = tuple(os.fspath(p) for p in raw_paths if isinstance(p, (str, os.PathLike)))
        else:
            logger.warning("Ignoring paths of type %s", type(raw_paths).__name__)
            paths = ()

        raw_web_dir = options.get("web_dir")
        web_dir = os.fspath(raw_web_dir) if isinstance(raw_web_dir, (str, os.PathLike)) else None

        raw_mime_types = options.get("mime_types")
        mime_types = dict(raw_mime_types) if isinstance(raw_mime_types, Mapping) else {}

        return cls(paths=paths, web_dir=web_dir, mime_types=mime_types)

    def to_dict(self) -> dict:
        return {
            "paths": list(self.paths),
            "web_dir": self.web_dir,
            "mime_types": dict(self.mime_types),
        }


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files
    """

    def __init__(self, env_prefix: str = "ASSETS_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "ASSETS_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (YAML or JSON), merged in order
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or []:
            loader._load_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_file(self, path: Path):
        """Load config from a YAML or JSON file."""
        if not path.exists():
            logger.warning("Config file %s does not exist, skipping", path)
            return

        try:
            with open(path) as f:
                if path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigInvalidFault(str(path), str(e)) from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), f"expected a mapping, got {type(data).__name__}")

        logger.debug("Loaded config file %s", path)
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert ASSETS_MIME_TYPES__JS to a nested dict entry."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def get_assets_config(self) -> AssetsConfig:
        """
        Build the middleware configuration.

        Reads the ``assets`` section, or the document root when the
        section is absent.  Root-level ``paths``, ``web_dir`` and
        ``mime_types`` (where ``ASSETS_WEB_DIR`` and friends land) are
        merged over the section and win on collision.
        """
        section = self.config_data.get("assets")
        if not isinstance(section, dict):
            return AssetsConfig.from_options(self.config_data)

        options = copy.deepcopy(section)
        root = {
            key: self.config_data[key]
            for key in OPTION_KEYS
            if key in self.config_data
        }
        self._merge_dict(options, copy.deepcopy(root))
        return AssetsConfig.from_options(options)

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()
