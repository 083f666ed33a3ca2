from __future__ import annotations

from pathlib import Path

import pytest

from tikgrab.config import Settings, ServerSettings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(server=ServerSettings(output_dir=tmp_path))
