"""Manifest loader for reconfig.yaml files.

A manifest lists the sources an application registers, so that the list
lives in one file instead of being spread over startup code::

    environment: staging
    required_environments: [default, prod]
    sources:
      - path: config/base.yaml
      - path: config/local.yaml
        optional: true
      - path: config/svc.json
        nested: svc
        raw: true

Relative source paths are resolved against the manifest's directory. The
``RECONFIG_ENV`` environment variable overrides ``environment``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import MalformedContent
from .registry import Registry

logger = logging.getLogger(__name__)

MANIFEST_NAME = "reconfig.yaml"
ENVIRONMENT_VARIABLE = "RECONFIG_ENV"


class ManifestLoader:
    """Handles loading and parsing of reconfig.yaml manifests."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize manifest loader.

        Args:
            config_path: Path to the manifest. If None, looks in the current
                directory and its parents.
        """
        self.config_path = self._find_config_file(config_path)
        self._config: Optional[Dict[str, Any]] = None

    def _find_config_file(
        self, config_path: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        if config_path is not None:
            path = Path(config_path)
            if path.exists():
                return path.resolve()
            return None

        current = Path.cwd()
        for directory in [current] + list(current.parents):
            candidate = directory / MANIFEST_NAME
            if candidate.exists():
                return candidate
        return None

    def load(self) -> Dict[str, Any]:
        """Load the manifest.

        Returns:
            Parsed manifest, or an empty dict if there is no manifest.

        Raises:
            MalformedContent: The manifest is invalid YAML or not a mapping.
        """
        if self.config_path is None:
            return {}
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise MalformedContent(
                f"Invalid {MANIFEST_NAME} at {self.config_path}: {e}", self.config_path
            ) from e
        if not isinstance(data, dict):
            raise MalformedContent(
                f"{MANIFEST_NAME} at {self.config_path} must be a mapping", self.config_path
            )
        self._config = data
        return data

    def get_environment(self) -> Optional[str]:
        """Environment to activate: RECONFIG_ENV, then the manifest's value."""
        override = os.environ.get(ENVIRONMENT_VARIABLE)
        if override:
            return override
        return self.load().get("environment")

    def get_required_environments(self) -> Optional[List[str]]:
        required = self.load().get("required_environments")
        if required is None:
            return None
        if isinstance(required, str):
            return [required]
        return [str(name) for name in required]

    def get_sources(self) -> List[Dict[str, Any]]:
        return self.load().get("sources") or []

    def parse_source(self, source_config: Dict[str, Any]) -> Dict[str, Any]:
        """Parse one ``sources`` entry into register() arguments.

        Returns:
            Dictionary with ``path`` (absolute) plus ``optional``, ``raw``
            and ``nested``.
        """
        if not isinstance(source_config, dict) or "path" not in source_config:
            raise ValueError("Source must have a 'path'")

        path = Path(os.path.expanduser(str(source_config["path"])))
        if not path.is_absolute():
            base = self.config_path.parent if self.config_path else Path.cwd()
            path = base / path

        nested = source_config.get("nested")
        return {
            "path": path,
            "optional": bool(source_config.get("optional", False)),
            "raw": bool(source_config.get("raw", False)),
            "nested": str(nested) if nested is not None else None,
        }


def apply_manifest(
    registry: Registry,
    loader: ManifestLoader,
    environment: Optional[str] = None,
    required_environments: Optional[List[str]] = None,
) -> Registry:
    """Configure ``registry`` from a manifest.

    Required environments are set first, then the environment, then every
    source is registered in manifest order. The keyword arguments, when
    given, take precedence over the manifest's own values.
    """
    required = required_environments or loader.get_required_environments()
    if required is not None:
        registry.set_required_environments(required)

    environment = environment or loader.get_environment()
    if environment:
        registry.set_environment(environment)

    for entry in loader.get_sources():
        parsed = loader.parse_source(entry)
        registry.register(
            parsed["path"],
            optional=parsed["optional"],
            raw=parsed["raw"],
            nested=parsed["nested"],
        )
    logger.debug("Applied manifest %s", loader.config_path)
    return registry
