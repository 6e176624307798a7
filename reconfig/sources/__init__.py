"""Configuration source implementations.

File sources are picked by suffix: ``.json`` files are read as JSON and
everything else (``.yaml``, ``.yml`` or no suffix) as YAML.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.source import Source
from .json_file import JsonFileSource
from .yaml_file import YamlFileSource


def create_source(path: Union[str, Path], name: Optional[str] = None) -> Source:
    """Create a Source instance based on the file suffix.

    Args:
        path: Path of the configuration file.
        name: Optional custom name for the source.

    Returns:
        Source instance.
    """
    p = Path(path)
    if p.suffix.lower() == ".json":
        return JsonFileSource(p, name=name)
    return YamlFileSource(p, name=name)


def load_source(path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse a configuration file into a mapping."""
    return create_source(path).load()


__all__ = [
    "JsonFileSource",
    "YamlFileSource",
    "create_source",
    "load_source",
]
