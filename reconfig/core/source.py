"""Source protocol for configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .errors import EmptyContent, MalformedContent


class Source(Protocol):
    """Protocol defining the interface for configuration sources.

    A source reads one file and parses it into a mapping. Implementations
    must distinguish three failure kinds:

    - :class:`~reconfig.core.errors.SourceNotFound` when the file is absent
    - :class:`~reconfig.core.errors.EmptyContent` when it parses to nothing
    - :class:`~reconfig.core.errors.MalformedContent` when it cannot be
      parsed or is not a mapping
    """

    id: str
    name: str
    path: Path
    extension: Optional[str]

    def load(self) -> Dict[str, Any]:
        """Read and parse the source.

        Returns:
            The parsed top-level mapping. ``{}`` is a valid result.
        """
        ...


def ensure_mapping(data: Any, path: Path, fmt: str) -> Dict[str, Any]:
    """Validate the top-level value a parser produced.

    ``None`` and ``False`` mean the document was empty; any other
    non-mapping is malformed.
    """
    if data is None or data is False:
        raise EmptyContent(
            f"{fmt} document {str(path)!r} is empty (parses to {data!r})", path
        )
    if not isinstance(data, dict):
        raise MalformedContent(
            f"{fmt} document {str(path)!r} parses into a {type(data).__name__}, not a mapping",
            path,
        )
    return data
