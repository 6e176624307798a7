"""Deep-merge helpers shared by the configuration tree and the registry."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Sequence, Union

KeyPath = Union[str, Sequence[str], None]


def split_path(path: KeyPath) -> List[str]:
    """Turn a dotted string (or a sequence of keys) into a list of keys.

    ``None`` and the empty string both mean the root.
    """
    if path is None:
        return []
    if isinstance(path, str):
        if not path:
            return []
        parts = path.split(".")
    else:
        parts = [str(p) for p in path]
    if any(not p for p in parts):
        raise ValueError(f"Invalid key path {path!r}: empty segment")
    return parts


def deep_merge_into(target: Dict[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``overlay`` onto ``target`` in place, overlay wins.

    - dict + dict -> recursive merge
    - anything else (lists included) -> overlay replaces target

    Values taken from ``overlay`` are deep-copied so the target never
    aliases the caller's data.
    """
    for key, value in overlay.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge_into(current, value)
        elif isinstance(value, Mapping):
            target[key] = deep_merge_into({}, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a new dict with ``overlay`` deep-merged onto ``base``."""
    return deep_merge_into(deep_merge_into({}, base), overlay)

