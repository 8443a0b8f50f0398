"""
Fermi break-up of light excited nuclei.

The nucleus disintegrates in one step into 2..N ground-state fragments
drawn from the tabulated light-nucleus pool. Each partition is weighted
by its statistical (phase-space) weight:

    W ∝ (V / (2πħc)³)^(k-1) · (Π m_i / Σ m_i)^(3/2) · (2π)^(3(k-1)/2) / Γ(3(k-1)/2)
        · K^(3k/2 - 5/2) · Π g_i / Π n_j!

with K the kinetic energy left after the Coulomb barrier of the
freeze-out configuration.

References:
    - E. Fermi, Prog. Theor. Phys. 5, 570 (1950)
    - J. P. Bondorf et al., Phys. Rep. 257, 133 (1995), section 3
"""

import logging
from collections import Counter
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from scipy.special import gammaln, logsumexp

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.physics.cache import LFUCache
from deexcitation_mc.physics.kinematics import n_body_decay

logger = logging.getLogger(__name__)

MAX_A = 19
MAX_Z = 9
DEFAULT_CACHE_SIZE = MAX_A * MAX_A // 2

R0 = 1.3                  # fm
KAPPA = 1.0               # freeze-out volume / normal volume - 1
HBARC = 197.3269804       # MeV fm
COULOMB_CONSTANT = 1.43996  # e²/4πε0 [MeV fm]


class FragmentSplits(NamedTuple):
    """Cached partitions of one (A, Z) with their energy-independent terms."""

    splits: List[Tuple[int, ...]]
    total_mass: np.ndarray          # Σ m_i [MeV]
    coulomb_energy: np.ndarray      # freeze-out Coulomb energy [MeV]
    static_log_weight: np.ndarray   # log W without the kinetic-energy factor
    multiplicity: np.ndarray        # k


class FermiBreakUp:
    """
    Statistical one-step break-up for A < 19, Z < 9.

    Usage:
        fbu = FermiBreakUp(NuclearData(), rng=np.random.default_rng(1))
        products = fbu.split(fragment)
    """

    def __init__(self, nuclear_data, rng: Optional[np.random.Generator] = None,
                 cache=None, max_multiplicity: int = 4):
        """
        Initialize Fermi break-up.

        Parameters:
            nuclear_data: Provider of masses and spin degeneracies
            rng: Random generator
            cache: Split cache (SimpleCache or LFUCache); bounded LFU by default
            max_multiplicity: Largest number of fragments in one break-up
        """
        self.nuclear_data = nuclear_data
        self.rng = rng if rng is not None else np.random.default_rng()
        self.cache = cache if cache is not None else LFUCache(DEFAULT_CACHE_SIZE)
        self.max_multiplicity = max_multiplicity

        # Fragment pool sorted by (A, Z)
        self._pool = nuclear_data.light_nuclides(MAX_A, MAX_Z)
        self._index = {(A, Z): i for i, (A, Z, _) in enumerate(self._pool)}
        self._log_spin = np.log([nuclear_data.spin_degeneracy(Z, A) for A, Z, _ in self._pool])

    @staticmethod
    def is_fermi_possible(Z: int, A: int, excitation_energy: float) -> bool:
        return Z < MAX_Z and A < MAX_A

    def is_applicable(self, Z: int, A: int, excitation_energy: float) -> bool:
        return self.is_fermi_possible(Z, A, excitation_energy)

    def possible_splits(self, A: int, Z: int) -> FragmentSplits:
        """Partitions of (A, Z) into 2..max_multiplicity pool fragments (cached)."""
        key = (A, Z)
        splits = self.cache.get(key)
        if splits is None:
            splits = self._build_splits(A, Z)
            self.cache.insert(key, splits)
        return splits

    def _partitions(self, A: int, Z: int, k: int, start: int) -> List[Tuple[int, ...]]:
        if k == 1:
            index = self._index.get((A, Z))
            return [(index,)] if index is not None and index >= start else []

        result = []
        for i in range(start, len(self._pool)):
            a, z, _ = self._pool[i]
            # Pool is sorted by A, so the remaining k-1 parts weigh at least a each
            if a * k > A:
                break
            if z > Z:
                continue
            for rest in self._partitions(A - a, Z - z, k - 1, i):
                result.append((i,) + rest)
        return result

    def _build_splits(self, A: int, Z: int) -> FragmentSplits:
        splits = []
        for k in range(2, self.max_multiplicity + 1):
            splits.extend(self._partitions(A, Z, k, 0))

        n = len(splits)
        total_mass = np.zeros(n)
        coulomb_energy = np.zeros(n)
        static_log_weight = np.zeros(n)
        multiplicity = np.zeros(n)

        volume = 4.0 / 3.0 * np.pi * R0 ** 3 * A * (1.0 + KAPPA)
        log_phase_volume = np.log(volume / (2.0 * np.pi * HBARC) ** 3)
        coulomb_factor = 0.6 * COULOMB_CONSTANT / R0 / (1.0 + KAPPA) ** (1.0 / 3.0)

        for j, split in enumerate(splits):
            k = len(split)
            masses = np.array([self._pool[i][2] for i in split])
            charges = np.array([self._pool[i][1] for i in split], dtype=np.float64)
            mass_numbers = np.array([self._pool[i][0] for i in split], dtype=np.float64)

            total_mass[j] = masses.sum()
            coulomb_energy[j] = coulomb_factor * (
                Z * Z / A ** (1.0 / 3.0) - np.sum(charges ** 2 / mass_numbers ** (1.0 / 3.0))
            )
            identical = sum(gammaln(n_same + 1.0) for n_same in Counter(split).values())
            static_log_weight[j] = (
                (k - 1) * log_phase_volume
                + 1.5 * (np.log(masses).sum() - np.log(total_mass[j]))
                + 1.5 * (k - 1) * np.log(2.0 * np.pi)
                - gammaln(1.5 * (k - 1))
                + self._log_spin[list(split)].sum()
                - identical
            )
            multiplicity[j] = k

        logger.debug("Fermi break-up: %d partitions for A=%d, Z=%d", n, A, Z)
        return FragmentSplits(splits, total_mass, coulomb_energy, static_log_weight, multiplicity)

    def split_log_weights(self, splits: FragmentSplits, mass: float) -> np.ndarray:
        """Log statistical weights of each partition for a nucleus of invariant mass `mass`."""
        kinetic = mass - splits.total_mass - splits.coulomb_energy
        log_weights = np.full(len(splits.splits), -np.inf)
        open_channels = kinetic > 0.0
        log_weights[open_channels] = (
            splits.static_log_weight[open_channels]
            + (1.5 * splits.multiplicity[open_channels] - 2.5) * np.log(kinetic[open_channels])
        )
        return log_weights

    def split(self, fragment: Fragment) -> List[Fragment]:
        """
        Break a fragment up.

        Returns:
            Ground-state products, or [fragment] when no partition is open
        """
        splits = self.possible_splits(fragment.A, fragment.Z)
        if not splits.splits:
            return [fragment]

        log_weights = self.split_log_weights(splits, fragment.invariant_mass)
        if not np.isfinite(log_weights).any():
            return [fragment]

        probabilities = np.exp(log_weights - logsumexp(log_weights))
        probabilities /= probabilities.sum()
        chosen = splits.splits[self.rng.choice(len(splits.splits), p=probabilities)]

        masses = [self._pool[i][2] for i in chosen]
        momenta = n_body_decay(fragment.momentum, masses, self.rng)

        products = []
        for i, momentum in zip(chosen, momenta):
            A, Z, mass = self._pool[i]
            products.append(Fragment(A, Z, momentum, mass, excitation_energy=0.0,
                                     creation_time=fragment.creation_time))
        return products
