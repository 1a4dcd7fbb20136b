"""
Pytest configuration and shared fixtures.
"""

import matplotlib

matplotlib.use("Agg")

import pytest

from xorwow.engine import XorwowEngine
from xorwow.tables import build_table


@pytest.fixture
def engine():
    """Engine with a seed whose high and low words are both non-trivial."""
    return XorwowEngine(0x0123456789ABCDEF)


@pytest.fixture(scope="session")
def shallow_table():
    """Step table of depth 3: A^1, A^4, A^16, covering 5 bits before the fallback."""
    return build_table(0, 3, 2)
