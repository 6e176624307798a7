from .directive import Directive, RegisterOptions
from .errors import (
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
from .registry import Registry
from .tree import ConfigTree

__all__ = [
    "ConfigTree",
    "Directive",
    "RegisterOptions",
    "Registry",
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
