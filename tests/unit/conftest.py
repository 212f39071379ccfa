"""
Unit test fixtures. Use mocks; no real LLM. Engine tests work on plain documents.
"""
from datetime import datetime

import pytest


@pytest.fixture
def fixed_now():
    """Wednesday 10 January 2024, noon."""
    return datetime(2024, 1, 10, 12, 0, 0)


@pytest.fixture
def profile(fixed_now):
    """Fresh zero-state XP profile."""
    from api.services.leveling import new_profile

    return new_profile("user-1", now=fixed_now)
