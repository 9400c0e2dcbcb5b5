"""Bundled configuration with optional override fetched from a path or URI."""

import copy
import hashlib
import logging
import os
import time
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml

from .rule import SchemaOptions

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles two-layer configuration: bundled config + optional override."""

    # Hardcoded cache directory for remote overrides
    CACHE_DIR = Path.home() / ".cache" / "validation-schema"
    FETCH_TIMEOUT = 10

    def __init__(self, override_uri: Optional[str] = None):
        """
        Initialize config loader with bundled schema-config.yaml.

        Args:
            override_uri: Optional config to merge over the bundled one. Takes
                precedence over config_override_uri in the bundled file.

        Raises:
            ValueError: If the merged config contains invalid values
            RuntimeError: If a remote override cannot be fetched
        """
        config_file = files("validation_schema").joinpath("schema-config.yaml")
        self.bundled_config_path = str(config_file)
        self.cache_dir = self.CACHE_DIR

        with config_file.open("r") as f:
            self.bundled_config = yaml.safe_load(f) or {}

        self.override_uri = override_uri or self.bundled_config.get("config_override_uri")
        self.config = copy.deepcopy(self.bundled_config)

        if self.override_uri:
            override = self._load_config_from_uri(self.override_uri)
            self.config = self._merge(self.config, override)
            logger.info(f"Loaded config override from {self.override_uri}")

        # Fail early on bad option values
        self.options = SchemaOptions.from_dict(self.config.get("options"))
        self.loaded_at = time.time()

    @staticmethod
    def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow merge, except `options` which is merged key by key."""
        merged = dict(base)
        for key, value in override.items():
            if key == "options" and isinstance(value, dict):
                merged["options"] = {**(base.get("options") or {}), **value}
            else:
                merged[key] = value
        return merged

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file from disk."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config at {path} must be a mapping, got {type(data).__name__}")
        return data

    def _load_config_from_uri(self, uri: str) -> Dict[str, Any]:
        """
        Load config from URI (with caching for remote URIs).

        Supports:
        - Relative or absolute paths - ./my-config.yaml
        - file:// - Local filesystem
        - https:// / http:// - Remote, cached by SHA-256 of the URI

        Args:
            uri: Config URI or path

        Returns:
            Parsed YAML config
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            return self._load_yaml(os.path.abspath(uri))

        if parsed.scheme == "file":
            return self._load_yaml(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"config_{cache_key}.yaml"

            if cache_path.exists():
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            data = yaml.safe_load(content) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config at {uri} must be a mapping")
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content)
            return data

        raise ValueError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.FETCH_TIMEOUT)
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to fetch config from {uri}: {e}") from e

    def clear_cache(self) -> None:
        """Remove cached remote overrides."""
        if not self.cache_dir.exists():
            return
        for cached in self.cache_dir.glob("config_*.yaml"):
            cached.unlink()

    def get_config(self) -> Dict[str, Any]:
        """Get merged configuration."""
        return self.config

    def get_options(self) -> SchemaOptions:
        return self.options

    def get_disabled_rules(self) -> List[str]:
        return list(self.config.get("disabled_rules") or [])

    def get_extra_rules(self) -> List[str]:
        return list(self.config.get("extra_rules") or [])

    def get_config_age(self) -> Optional[float]:
        """
        Get age of configuration in seconds since it was loaded.

        Returns:
            Age in seconds, or None if not loaded
        """
        if hasattr(self, "loaded_at"):
            return time.time() - self.loaded_at
        return None
