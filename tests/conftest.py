"""Shared test fixtures."""

import pytest

from src.db.preferences import MemoryPreferenceStore


@pytest.fixture
def memory_store() -> MemoryPreferenceStore:
    """Preference store with nothing saved yet."""
    return MemoryPreferenceStore()
