"""
Tests for converting final fragments into reaction products.
"""

import numpy as np
import pytest

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.exceptions import IdentityResolutionError
from deexcitation_mc.handler.conversion import ResultConverter, correct_momentum


class TestCorrectMomentum:
    def test_below_mass_sets_at_rest(self):
        assert correct_momentum(np.array([1.0, 2.0, 3.0, 90.0]), 100.0) == pytest.approx(
            [0.0, 0.0, 0.0, 100.0])

    def test_rescales_along_direction(self):
        corrected = correct_momentum(np.array([0.0, 3.0, 4.0, 130.0]), 120.0)
        assert corrected[3] == 130.0
        assert np.linalg.norm(corrected[:3]) == pytest.approx(50.0)
        assert corrected[1] / corrected[2] == pytest.approx(0.75)

    def test_zero_direction_stays_zero(self):
        corrected = correct_momentum(np.array([0.0, 0.0, 0.0, 130.0]), 120.0)
        assert corrected == pytest.approx([0.0, 0.0, 0.0, 130.0])


class TestResultConverter:
    def test_special_particles(self, particle_table, nuclear_data):
        converter = ResultConverter(particle_table)
        products = converter.convert([
            Fragment.photon([0.0, 0.0, 2.0, 2.0], creation_time=3.0),
            Fragment.at_rest(4, 2, 0.0, nuclear_data),
            Fragment.at_rest(1, 0, 0.0, nuclear_data),
        ])
        assert [p.definition.name for p in products] == ['gamma', 'alpha', 'neutron']
        assert products[0].formation_time == 3.0
        assert products[0].momentum == pytest.approx([0.0, 0.0, 2.0])

    def test_ground_state_ion(self, particle_table, nuclear_data):
        # Below the ground-state threshold the excitation is dropped
        fragment = Fragment.at_rest(12, 6, 0.005, nuclear_data)
        product = ResultConverter(particle_table).convert_fragment(fragment)
        assert product.definition.name == 'C12'
        assert product.total_energy == pytest.approx(fragment.total_energy)

    def test_registered_isomer(self, particle_table, nuclear_data):
        fragment = Fragment.at_rest(99, 43, 0.14268, nuclear_data)
        product = ResultConverter(particle_table).convert_fragment(fragment)
        assert product.definition.excitation_energy == pytest.approx(0.14268)

    def test_unknown_level_falls_back_to_ground_state(self, particle_table, nuclear_data):
        mass = nuclear_data.nuclear_mass(26, 56)
        energy = np.sqrt(200.0**2 + (mass + 5.0)**2)
        fragment = Fragment(56, 26, [0.0, 0.0, 200.0, energy], mass, excitation_energy=5.0)
        product = ResultConverter(particle_table).convert_fragment(fragment)

        assert product.definition.name == 'Fe56'
        assert product.total_energy == pytest.approx(energy)
        assert product.momentum[2] == pytest.approx(np.sqrt((energy - mass) * (energy + mass)))
        # Caller's fragment is left alone
        assert fragment.momentum[2] == 200.0

    def test_unresolvable(self, particle_table):
        fragment = Fragment(4, 0, [0.0, 0.0, 0.0, 4000.0], 4000.0)
        with pytest.raises(IdentityResolutionError) as excinfo:
            ResultConverter(particle_table).convert_fragment(fragment)
        assert (excinfo.value.Z, excinfo.value.A) == (0, 4)
