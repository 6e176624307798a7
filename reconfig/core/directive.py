"""Registration directives: one entry per registered configuration source."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RegisterOptions:
    """Options controlling how a source is applied.

    Attributes:
        optional: A missing (or empty) file is tolerated and contributes nothing.
        raw: The file has no environment keys and is merged as-is.
        nested: Dotted key path to namespace the content under.
    """

    optional: bool = False
    raw: bool = False
    nested: Optional[str] = None


@dataclass(frozen=True)
class Directive:
    """A registered source together with its loaded content.

    Attributes:
        config: Parsed content, or None when an optional source was absent.
        source_id: Absolute file path, or None for an in-memory registration.
        options: How the content is extracted and merged.
    """

    config: Optional[Dict[str, Any]]
    source_id: Optional[str] = None
    options: RegisterOptions = field(default_factory=RegisterOptions)

    @property
    def is_file_derived(self) -> bool:
        return self.source_id is not None

    def with_config(self, config: Optional[Dict[str, Any]]) -> "Directive":
        """Copy of this directive carrying ``config`` instead."""
        return replace(self, config=config)
