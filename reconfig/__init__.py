"""reconfig - environment-aware configuration registry.

Register YAML/JSON files and in-memory mappings, merge them into one
configuration tree, and rebuild that tree whenever the active environment
changes or a file is reloaded.
"""

from __future__ import annotations

from typing import Optional

from .core.directive import Directive, RegisterOptions
from .core.errors import (
    DisallowedEnvironment,
    DuplicateRegistration,
    EmptyContent,
    MalformedContent,
    MissingEnvironment,
    NotRegistered,
    ReconfigError,
    SourceError,
    SourceNotFound,
    TreeLocked,
)
from .core.manifest import ManifestLoader, apply_manifest
from .core.registry import Registry
from .core.tree import ConfigTree

_registry: Optional[Registry] = None


def get_registry() -> Registry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = Registry()
    return _registry


def reset_registry() -> None:
    """Forget the process-wide registry; the next get_registry() starts fresh."""
    global _registry
    _registry = None


__all__ = [
    "ConfigTree",
    "Directive",
    "RegisterOptions",
    "Registry",
    "ManifestLoader",
    "apply_manifest",
    "get_registry",
    "reset_registry",
    "ReconfigError",
    "DuplicateRegistration",
    "NotRegistered",
    "MissingEnvironment",
    "DisallowedEnvironment",
    "SourceError",
    "SourceNotFound",
    "EmptyContent",
    "MalformedContent",
    "TreeLocked",
]
