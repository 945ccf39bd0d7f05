from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.records import Workspace


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Provide a generation workspace rooted at the pytest tmp_path."""
    return Workspace(tmp_path)
