"""JSON file configuration source."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.errors import EmptyContent, MalformedContent, SourceNotFound
from ..core.source import Source, ensure_mapping


class JsonFileSource(Source):
    """Configuration source for JSON files."""

    def __init__(self, path: Path, name: Optional[str] = None):
        self.path = Path(path)
        self.name = name or f"json:{self.path.name}"
        self.id = str(self.path)
        self.extension = ".json"

    def load(self) -> Dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SourceNotFound(f"Config file not found: {self.id}", self.path) from e
        if not text.strip():
            raise EmptyContent(f"JSON document {self.id!r} is empty", self.path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedContent(f"Invalid JSON in {self.id}: {e}", self.path) from e
        return ensure_mapping(data, self.path, "JSON")
