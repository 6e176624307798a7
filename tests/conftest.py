from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

import reconfig
from reconfig import Registry


@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write ``data`` to ``tmp_path/name`` as YAML or JSON (by suffix).

    A string is written verbatim.
    """

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data)
        elif path.suffix == ".json":
            path.write_text(json.dumps(data))
        else:
            path.write_text(yaml.safe_dump(data))
        return path

    return _write


@pytest.fixture(autouse=True)
def _fresh_process_registry():
    reconfig.reset_registry()
    yield
    reconfig.reset_registry()
