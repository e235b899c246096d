"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from retail_assistant.config.settings import Settings


@pytest.fixture
def settings():
    """Deterministic settings: no API key, fixed simulation seed, no .env."""
    tmp = tempfile.mkdtemp()
    return Settings(
        _env_file=None,
        google_api_key="",
        sqlite_db_path=str(Path(tmp) / "retail.db"),
        simulation_seed=42,
    )


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    return tempfile.mkdtemp()
