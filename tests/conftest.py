from __future__ import annotations

from pathlib import Path

import pytest

from rsloc.analyzers import FileAnalyzer
from tests._fixtures.source_builder import SourceBuilder


@pytest.fixture
def source_builder(tmp_path: Path) -> SourceBuilder:
    """Provide a reusable crate builder rooted at the pytest tmp_path."""
    return SourceBuilder(tmp_path)


@pytest.fixture(scope="session")
def analyzer() -> FileAnalyzer:
    """Share one analyzer across tests; it keeps no per-file state."""
    return FileAnalyzer()
