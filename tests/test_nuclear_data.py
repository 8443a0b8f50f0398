"""
Tests for nuclear masses, abundances and the external mass table.
"""

import numpy as np
import pytest

from deexcitation_mc.core.nuclear_data import (
    AMU_MeV,
    ELECTRON_MASS,
    NEUTRON_MASS,
    PROTON_MASS,
    NuclearData,
    semf_binding_energy,
)
from deexcitation_mc.exceptions import ConfigurationError


class TestMasses:
    def test_carbon12_is_twelve_amu(self, nuclear_data):
        expected = 12 * AMU_MeV - 6 * ELECTRON_MASS
        assert nuclear_data.nuclear_mass(6, 12) == pytest.approx(expected, abs=1e-6)

    def test_nucleon_masses(self, nuclear_data):
        assert nuclear_data.nuclear_mass(1, 1) == pytest.approx(PROTON_MASS, abs=1e-3)
        assert nuclear_data.nuclear_mass(0, 1) == pytest.approx(NEUTRON_MASS, abs=1e-3)

    def test_alpha_binding(self, nuclear_data):
        binding = (2 * nuclear_data.nuclear_mass(1, 1) + 2 * nuclear_data.nuclear_mass(0, 1)
                   - nuclear_data.nuclear_mass(2, 4))
        assert binding == pytest.approx(28.3, abs=0.1)

    def test_heavy_nucleus_uses_mass_formula(self, nuclear_data):
        mass = nuclear_data.nuclear_mass(82, 208)
        binding = 82 * PROTON_MASS + 126 * NEUTRON_MASS - mass
        # ~7.87 MeV per nucleon
        assert binding / 208 == pytest.approx(7.87, abs=0.15)
        assert semf_binding_energy(82, 208) == pytest.approx(binding)

    @pytest.mark.parametrize("Z, A", [(0, 4), (4, 4), (3, 2), (-1, 5), (1, 0)])
    def test_unbound_or_invalid_is_unknown(self, nuclear_data, Z, A):
        assert nuclear_data.nuclear_mass(Z, A) == 0.0

    def test_spin_degeneracy(self, nuclear_data):
        assert nuclear_data.spin_degeneracy(1, 2) == 3
        assert nuclear_data.spin_degeneracy(2, 4) == 1
        assert nuclear_data.spin_degeneracy(40, 90) == 1


class TestAbundance:
    def test_tabulated(self, nuclear_data):
        assert nuclear_data.isotope_abundance(6, 12) == pytest.approx(0.9893)
        assert nuclear_data.isotope_abundance(6, 11) == 0.0
        assert nuclear_data.isotope_abundance(4, 8) == 0.0

    def test_heavy_beta_stable(self, nuclear_data):
        assert nuclear_data.is_stable_isotope(26, 56)
        assert not nuclear_data.is_stable_isotope(20, 56)

    def test_no_stable_technetium(self, nuclear_data):
        assert not any(nuclear_data.is_stable_isotope(43, A) for A in range(90, 105))

    def test_beyond_bismuth_is_not_stable(self, nuclear_data):
        assert not nuclear_data.is_stable_isotope(92, 238)


class TestLightNuclides:
    def test_sorted_and_bounded(self, nuclear_data):
        nuclides = nuclear_data.light_nuclides(19, 9)
        assert nuclides == sorted(nuclides)
        assert all(A < 19 and Z < 9 for A, Z, _ in nuclides)
        assert (4, 2) in {(A, Z) for A, Z, _ in nuclides}


class TestMassFile:
    def test_csv_overrides_masses(self, tmp_path):
        path = tmp_path / "masses.csv"
        path.write_text("A,Z,mass,abundance\n12,6,11175.0,0.5\n20,10,18617.0,0.9\n")
        data = NuclearData(mass_file=path)
        assert data.nuclear_mass(6, 12) == 11175.0
        assert data.isotope_abundance(6, 12) == 0.5
        assert data.nuclear_mass(10, 20) == 18617.0

    def test_csv_without_header(self, tmp_path):
        path = tmp_path / "masses.csv"
        path.write_text("12,6,11175.0\n")
        assert NuclearData(mass_file=path).nuclear_mass(6, 12) == 11175.0

    def test_npy(self, tmp_path):
        path = tmp_path / "masses.npy"
        np.save(path, np.array([[12, 6, 11175.0]]))
        assert NuclearData(mass_file=path).nuclear_mass(6, 12) == 11175.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            NuclearData(mass_file=tmp_path / "missing.csv")

    def test_too_few_columns(self, tmp_path):
        path = tmp_path / "masses.csv"
        path.write_text("12,6\n")
        with pytest.raises(ConfigurationError):
            NuclearData(mass_file=path)
