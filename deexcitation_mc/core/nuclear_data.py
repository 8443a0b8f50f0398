"""
Nuclear masses and natural abundances.

Light nuclei (A < 20) use tabulated mass excesses; everything else falls
back to the Bethe-Weizsaecker semi-empirical mass formula. An external
mass table (CSV or .npy with columns A, Z, mass [MeV] and an optional
abundance column) can override both.

References:
    - AME2016 atomic mass evaluation (mass excesses below, rounded to 0.1 keV)
    - IUPAC isotopic compositions of the elements (abundances)
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numba
import numpy as np

from deexcitation_mc.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

AMU_MeV = 931.49410242        # atomic mass unit [MeV/c²]
ELECTRON_MASS = 0.51099895    # [MeV/c²]
PROTON_MASS = 938.27208816    # [MeV/c²]
NEUTRON_MASS = 939.56542052   # [MeV/c²]

MAX_ATOMIC_MASS = 300
MAX_CHARGE = 120

# (A, Z): (mass excess [MeV], ground-state spin degeneracy 2J+1)
LIGHT_NUCLEI = {
    (1, 0): (8.0713, 2),      # n
    (1, 1): (7.2890, 2),      # p
    (2, 1): (13.1357, 3),     # d
    (3, 1): (14.9498, 2),     # t
    (3, 2): (14.9312, 2),     # He-3
    (4, 2): (2.4249, 1),      # alpha
    (5, 2): (11.2312, 4),
    (6, 2): (17.5921, 1),
    (5, 3): (11.6793, 4),
    (6, 3): (14.0869, 3),
    (7, 3): (14.9071, 4),
    (8, 3): (20.9458, 5),
    (9, 3): (24.9549, 4),
    (7, 4): (15.7690, 4),
    (8, 4): (4.9416, 1),
    (9, 4): (11.3484, 4),
    (10, 4): (12.6074, 1),
    (8, 5): (22.9215, 5),
    (9, 5): (12.4161, 4),
    (10, 5): (12.0506, 7),
    (11, 5): (8.6677, 4),
    (12, 5): (13.3689, 3),
    (9, 6): (28.9107, 4),
    (10, 6): (15.6987, 1),
    (11, 6): (10.6503, 4),
    (12, 6): (0.0, 1),
    (13, 6): (3.1250, 2),
    (14, 6): (3.0199, 1),
    (15, 6): (9.8732, 2),
    (12, 7): (17.3381, 3),
    (13, 7): (5.3455, 2),
    (14, 7): (2.8634, 3),
    (15, 7): (0.1014, 2),
    (16, 7): (5.6839, 5),
    (14, 8): (8.0073, 1),
    (15, 8): (2.8554, 2),
    (16, 8): (-4.7370, 1),
    (17, 8): (-0.8087, 6),
    (18, 8): (-0.7828, 1),
    (19, 8): (3.3329, 6),
    (17, 9): (1.9517, 6),
    (18, 9): (0.8731, 3),
    (19, 9): (-1.4874, 2),
}

# (A, Z): natural abundance. Above A = 41 stability is taken from the mass formula.
NATURAL_ABUNDANCE = {
    (1, 1): 0.999885, (2, 1): 0.000115,
    (3, 2): 1.34e-6, (4, 2): 0.99999866,
    (6, 3): 0.0759, (7, 3): 0.9241,
    (9, 4): 1.0,
    (10, 5): 0.199, (11, 5): 0.801,
    (12, 6): 0.9893, (13, 6): 0.0107,
    (14, 7): 0.99636, (15, 7): 0.00364,
    (16, 8): 0.99757, (17, 8): 0.00038, (18, 8): 0.00205,
    (19, 9): 1.0,
    (20, 10): 0.9048, (21, 10): 0.0027, (22, 10): 0.0925,
    (23, 11): 1.0,
    (24, 12): 0.7899, (25, 12): 0.1000, (26, 12): 0.1101,
    (27, 13): 1.0,
    (28, 14): 0.92223, (29, 14): 0.04685, (30, 14): 0.03092,
    (31, 15): 1.0,
    (32, 16): 0.9499, (33, 16): 0.0075, (34, 16): 0.0425, (36, 16): 0.0001,
    (35, 17): 0.7576, (37, 17): 0.2424,
    (36, 18): 0.003336, (38, 18): 0.000629, (40, 18): 0.996035,
    (39, 19): 0.932581, (40, 19): 0.000117, (41, 19): 0.067302,
    (40, 20): 0.96941,
}
TABULATED_ABUNDANCE_MAX_A = 41

# Elements without stable isotopes below bismuth
NO_STABLE_ISOTOPES = (43, 61)
HEAVIEST_STABLE_A = 209


@numba.njit(fastmath=True, cache=True)
def semf_binding_energy(Z: int, A: int) -> float:
    """
    Binding energy from the Bethe-Weizsaecker formula.

    B = aV*A - aS*A^(2/3) - aC*Z(Z-1)/A^(1/3) - aA*(A-2Z)²/A + delta

    Parameters:
        Z: Charge number
        A: Mass number

    Returns:
        Binding energy [MeV] (positive for bound nuclei)
    """
    a = float(A)
    z = float(Z)
    a_third = a ** (1.0 / 3.0)

    volume = 15.75 * a
    surface = 17.8 * a_third * a_third
    coulomb = 0.711 * z * (z - 1.0) / a_third
    asymmetry = 23.7 * (a - 2.0 * z) ** 2 / a

    if A % 2 == 1:
        pairing = 0.0
    elif Z % 2 == 0:
        pairing = 11.18 / np.sqrt(a)
    else:
        pairing = -11.18 / np.sqrt(a)

    return volume - surface - coulomb - asymmetry + pairing


def mass_from_excess(Z: int, A: int, mass_excess: float) -> float:
    """Nuclear mass [MeV] from an atomic mass excess (electron binding neglected)."""
    return A * AMU_MeV + mass_excess - Z * ELECTRON_MASS


class NuclearData:
    """
    Nuclear mass and abundance provider.

    All lookups take (Z, A). A mass of zero means "unknown nucleus".

    Usage:
        data = NuclearData()
        m = data.nuclear_mass(6, 12)        # 11174.86 MeV
        data.isotope_abundance(6, 12)        # 0.9893
        data = NuclearData(mass_file='masses.csv')
    """

    def __init__(self, mass_file: Optional[Union[str, Path]] = None):
        """
        Initialize nuclear data.

        Parameters:
            mass_file: Optional CSV (A,Z,mass[,abundance]) or .npy table
                       overriding the built-in masses
        """
        self._masses: Dict[Tuple[int, int], float] = {
            (A, Z): mass_from_excess(Z, A, excess)
            for (A, Z), (excess, _) in LIGHT_NUCLEI.items()
        }
        self._abundance: Dict[Tuple[int, int], float] = dict(NATURAL_ABUNDANCE)
        self._stability_cache: Dict[Tuple[int, int], bool] = {}
        self.mass_file = None

        if mass_file is not None:
            self.mass_file = Path(mass_file)
            self._load_mass_file(self.mass_file)

    def _load_mass_file(self, path: Path):
        """
        Load an external mass table.

        Tries .npy first (binary), falls back to comma-separated text with an
        optional header line.
        """
        if not path.exists():
            raise ConfigurationError(f"Nuclear mass file not found: {path}")

        if path.suffix == '.npy':
            data = np.load(path)
        else:
            with open(path, 'r') as f:
                first_line = f.readline()
            has_header = any(c.isalpha() for c in first_line)
            try:
                data = np.loadtxt(path, delimiter=',', comments='#', ndmin=2,
                                  skiprows=1 if has_header else 0)
            except ValueError as e:
                raise ConfigurationError(f"Cannot parse nuclear mass file {path}: {e}") from e

        data = np.atleast_2d(data)
        if data.shape[1] < 3:
            raise ConfigurationError(
                f"Nuclear mass file {path} needs columns A, Z, mass[, abundance]"
            )

        for row in data:
            A, Z = int(row[0]), int(row[1])
            self._masses[(A, Z)] = float(row[2])
            if data.shape[1] > 3:
                self._abundance[(A, Z)] = float(row[3])

        logger.info("Loaded %d nuclear masses from %s", len(data), path.name)

    @staticmethod
    def _is_valid(Z: int, A: int) -> bool:
        if A < 1 or Z < 0 or Z > A:
            return False
        if A > MAX_ATOMIC_MASS or Z > MAX_CHARGE:
            return False
        # No bound multi-neutron or multi-proton systems
        return A == 1 or 0 < Z < A

    def nuclear_mass(self, Z: int, A: int) -> float:
        """
        Ground-state nuclear mass.

        Parameters:
            Z: Charge number
            A: Mass number

        Returns:
            Mass [MeV/c²], or 0.0 for an unknown nucleus
        """
        mass = self._masses.get((A, Z))
        if mass is not None:
            return mass

        if not self._is_valid(Z, A):
            return 0.0

        binding = semf_binding_energy(Z, A)
        if binding <= 0.0:
            return 0.0

        return Z * PROTON_MASS + (A - Z) * NEUTRON_MASS - binding

    def spin_degeneracy(self, Z: int, A: int) -> int:
        """Ground-state 2J+1 (1 when not tabulated)."""
        entry = LIGHT_NUCLEI.get((A, Z))
        return entry[1] if entry is not None else 1

    def isotope_abundance(self, Z: int, A: int) -> float:
        """
        Natural isotopic abundance.

        Tabulated up to A = 41. Heavier nuclides count as present
        (abundance 1.0) when they are beta-stable according to the mass
        formula.
        """
        abundance = self._abundance.get((A, Z))
        if abundance is not None:
            return abundance

        if A <= TABULATED_ABUNDANCE_MAX_A:
            return 0.0

        return 1.0 if self._is_beta_stable(Z, A) else 0.0

    def is_stable_isotope(self, Z: int, A: int) -> bool:
        return self.isotope_abundance(Z, A) > 0.0

    def _is_beta_stable(self, Z: int, A: int) -> bool:
        key = (A, Z)
        cached = self._stability_cache.get(key)
        if cached is not None:
            return cached

        stable = False
        if A <= HEAVIEST_STABLE_A and Z not in NO_STABLE_ISOTOPES:
            mass = self.nuclear_mass(Z, A)
            if mass > 0.0:
                stable = True
                for neighbour in (Z - 1, Z + 1):
                    other = self.nuclear_mass(neighbour, A)
                    if other > 0.0 and other < mass:
                        stable = False
                        break

        self._stability_cache[key] = stable
        return stable

    def light_nuclides(self, max_A: int, max_Z: int) -> List[Tuple[int, int, float]]:
        """
        Tabulated nuclides with A < max_A and Z < max_Z.

        Returns:
            List of (A, Z, mass [MeV]) sorted by (A, Z)
        """
        nuclides = [
            (A, Z, mass)
            for (A, Z), mass in self._masses.items()
            if A < max_A and Z < max_Z and mass > 0.0
        ]
        return sorted(nuclides)
