"""
Pytest fixtures for the deexcitation_mc test suite.
"""

import numpy as np
import pytest

from deexcitation_mc.core.nuclear_data import NuclearData
from deexcitation_mc.core.particle import ParticleTable
from deexcitation_mc.handler.excitation_handler import ExcitationHandler


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long statistical runs (deselect with -m \"not slow\")")


@pytest.fixture(scope="session")
def nuclear_data():
    """Built-in nuclear data (read-only apart from memoisation)."""
    return NuclearData()


@pytest.fixture
def particle_table(nuclear_data):
    return ParticleTable(nuclear_data)


@pytest.fixture
def rng():
    """Seeded generator so every test is reproducible."""
    return np.random.default_rng(12345)


@pytest.fixture
def handler(nuclear_data, rng):
    return ExcitationHandler(nuclear_data=nuclear_data, rng=rng)
