"""
Tests for the stage gate predicates.
"""

import numpy as np
import pytest

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.physics.conditions import (
    FermiBreakUpCondition,
    MultiFragmentationCondition,
    always_true,
)


def hot(A, Z, excitation):
    """Fragment with a given excitation; the mass is irrelevant to the gates."""
    mass = 931.5 * A
    return Fragment(A, Z, [0.0, 0.0, 0.0, mass + excitation], mass,
                    excitation_energy=excitation)


class TestMultiFragmentationCondition:
    def test_light_nuclei_never_multifragment(self, rng):
        condition = MultiFragmentationCondition(rng)
        assert not condition(hot(12, 6, 1000.0))
        assert not condition(hot(18, 8, 1000.0))

    def test_closed_below_lower_bound(self, rng):
        condition = MultiFragmentationCondition(rng)
        assert not any(condition(hot(100, 44, 2.9 * 100)) for _ in range(100))

    def test_open_above_upper_bound(self, rng):
        condition = MultiFragmentationCondition(rng)
        assert all(condition(hot(100, 44, 5.1 * 100)) for _ in range(100))

    def test_heavy_charge_alone_is_enough(self, rng):
        condition = MultiFragmentationCondition(rng)
        assert condition(hot(18, 9, 6.0 * 18))

    def test_transition_midpoint(self, rng):
        condition = MultiFragmentationCondition(rng)
        assert condition.transition_probability(100, 400.0) == pytest.approx(0.5)
        fraction = np.mean([condition(hot(100, 44, 400.0)) for _ in range(4000)])
        assert fraction == pytest.approx(0.5, abs=0.05)

    def test_transition_is_monotonic(self, rng):
        condition = MultiFragmentationCondition(rng)
        probabilities = [condition.transition_probability(100, e * 100) for e in (3.2, 4.0, 4.8)]
        assert probabilities == sorted(probabilities)
        assert probabilities[0] < 0.05
        assert probabilities[-1] > 0.95


class TestFermiBreakUpCondition:
    def test_default_region(self):
        condition = FermiBreakUpCondition()
        assert condition(hot(12, 6, 10.0))
        assert not condition(hot(19, 8, 10.0))
        assert not condition(hot(18, 9, 10.0))

    def test_delegates_to_model(self):
        class Everything:
            def is_applicable(self, Z, A, excitation_energy):
                return True

        assert FermiBreakUpCondition(Everything())(hot(200, 80, 10.0))


def test_always_true():
    assert always_true(hot(200, 80, 0.0))
