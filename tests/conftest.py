from __future__ import annotations

from pathlib import Path

import pytest

from pycats.config.models import EngineConfig
from pycats.tools.builtin import create_tool_registry


def write_numbered(path: Path, n: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"line {i}\n" for i in range(1, n + 1)), encoding="utf-8")
    return path


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    d = tmp_path / "work"
    d.mkdir()
    return d.resolve()


@pytest.fixture
def registry(workdir: Path):
    return create_tool_registry(workdir, config=EngineConfig())
