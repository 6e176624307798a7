"""YAML file configuration source."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.errors import MalformedContent, SourceNotFound
from ..core.source import Source, ensure_mapping


class YamlFileSource(Source):
    """Configuration source for YAML files, parsed with ``yaml.safe_load``."""

    def __init__(self, path: Path, name: Optional[str] = None):
        self.path = Path(path)
        self.name = name or f"yaml:{self.path.name}"
        self.id = str(self.path)
        self.extension = ".yaml"

    def load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise SourceNotFound(f"Config file not found: {self.id}", self.path) from e
        except yaml.YAMLError as e:
            # Parse errors carry a position but not always the file name.
            raise MalformedContent(f"Invalid YAML in {self.id}: {e}", self.path) from e
        return ensure_mapping(data, self.path, "YAML")
