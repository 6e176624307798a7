"""Lockable nested configuration tree."""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterator, Mapping, Optional

from .errors import TreeLocked
from .merge import KeyPath, deep_merge_into, split_path

_MISSING = object()


class ConfigTree:
    """A nested key/value store supporting deep merge and a write lock.

    The tree starts unlocked. While locked, every write (``set``,
    ``merge_at``, ``reset`` and ``navigate(..., create=True)``) raises
    :class:`TreeLocked`; reads are always allowed.

    Keys are addressed with dotted strings (``"db.host"``) or sequences of
    keys (``["db", "host"]``).
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = {}
        self._locked = False
        if data:
            deep_merge_into(self._data, data)

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    def _check_writable(self) -> None:
        if self._locked:
            raise TreeLocked(
                "Configuration tree is locked; changes must go through the registry"
            )

    def reset(self) -> None:
        """Drop every key."""
        self._check_writable()
        self._data = {}

    def navigate(self, path: KeyPath, create: bool = False) -> Dict[str, Any]:
        """Return the mapping stored at ``path``.

        With ``create=True`` missing intermediate maps are created, and a
        non-map value found on the way is replaced by an empty map.
        Without it, a missing or non-map segment raises ``KeyError``.

        While the tree is locked the result is a deep copy, so changes to it
        never reach the tree.
        """
        if create:
            self._check_writable()
        node = self._node(path, create)
        if self._locked:
            return copy.deepcopy(node)
        return node

    def _node(self, path: KeyPath, create: bool) -> Dict[str, Any]:
        node = self._data
        for key in split_path(path):
            child = node.get(key, _MISSING)
            if not isinstance(child, dict):
                if not create:
                    raise KeyError(key)
                child = {}
                node[key] = child
            node = child
        return node

    def merge_at(self, path: KeyPath, value: Mapping[str, Any]) -> None:
        """Deep-merge ``value`` under ``path`` (the root when empty)."""
        self._check_writable()
        if not isinstance(value, Mapping):
            raise TypeError(f"Can only merge a mapping, not {type(value).__name__}")
        deep_merge_into(self._node(path, create=True), value)

    def set(self, path: KeyPath, value: Any) -> None:
        self._check_writable()
        keys = split_path(path)
        if not keys:
            raise ValueError("Cannot set the root of the tree; use merge_at")
        parent = self._node(keys[:-1], create=True)
        parent[keys[-1]] = copy.deepcopy(value)

    def get(self, path: KeyPath, default: Any = None) -> Any:
        try:
            return self[path]
        except KeyError:
            return default

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the tree contents."""
        return copy.deepcopy(self._data)

    def __getitem__(self, path: KeyPath) -> Any:
        node: Any = self._data
        for key in split_path(path):
            if not isinstance(node, dict) or key not in node:
                raise KeyError(path)
            node = node[key]
        if isinstance(node, (dict, list)):
            return copy.deepcopy(node)
        return node

    def __contains__(self, path: object) -> bool:
        try:
            self[path]  # type: ignore[index]
        except (KeyError, ValueError, TypeError):
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ConfigTree):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        state = "locked" if self._locked else "unlocked"
        return f"ConfigTree({self._data!r}, {state})"
