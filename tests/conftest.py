"""Shared fixtures for mailarchive tests."""

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "emails"


@pytest.fixture
def fixture_bytes():
    """Return a loader for raw fixture emails."""

    def load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return load
