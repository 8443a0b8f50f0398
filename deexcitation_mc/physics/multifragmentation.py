"""
Statistical multifragmentation of hot heavy nuclei.

Simplified freeze-out picture:
    1. Pieces are chipped off the source one after another. Piece sizes
       follow a power law P(a) ∝ a^-τ whose exponent grows with the
       excitation per nucleon (hotter sources break into smaller pieces).
    2. Piece charges follow the Z/A of what is left, restricted to
       bound nuclei; A and Z are conserved exactly.
    3. Every piece must be paid for out of the excitation energy: its
       separation cost plus 3/2·T of translational energy per fragment.
       Chipping stops after `max_attempts` consecutive unaffordable draws.
    4. The energy left above the summed ground-state masses is shared
       between kinetic energy and internal excitation of the heavier
       fragments (proportional to mass number), and momenta come from an
       isotropic n-body break-up of the source four-momentum.

References:
    - J. P. Bondorf et al., Phys. Rep. 257, 133 (1995)
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.physics.kinematics import n_body_decay

logger = logging.getLogger(__name__)

# Fragments lighter than this carry no internal excitation
MIN_EXCITED_FRAGMENT_A = 5


class MultiFragmentation:
    """
    Simultaneous break-up of a hot source into many fragments.

    Usage:
        smm = MultiFragmentation(NuclearData(), rng=rng)
        fragments = smm.split(hot_fragment)
    """

    def __init__(self, nuclear_data, rng: Optional[np.random.Generator] = None,
                 max_attempts: int = 5, level_density_divisor: float = 8.0):
        """
        Initialize multifragmentation.

        Parameters:
            nuclear_data: Provider of nuclear_mass(Z, A)
            rng: Random generator
            max_attempts: Consecutive rejected pieces before the partition is closed
            level_density_divisor: a = A / divisor [MeV⁻¹] for the source temperature
        """
        self.nuclear_data = nuclear_data
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts
        self.level_density_divisor = level_density_divisor
        self._bound_charges: Dict[int, np.ndarray] = {}

    def is_applicable(self, Z: int, A: int, excitation_energy: float) -> bool:
        return A >= 4 and excitation_energy > 0.0

    @staticmethod
    def power_law_exponent(excitation_per_nucleon: float) -> float:
        """τ as a function of E*/A [MeV]."""
        return float(np.clip(1.0 + 0.3 * excitation_per_nucleon, 1.2, 4.0))

    def bound_charges(self, a: int) -> np.ndarray:
        """Charges z for which (z, a) has a known mass."""
        charges = self._bound_charges.get(a)
        if charges is None:
            charges = np.array([z for z in range(a + 1)
                                if self.nuclear_data.nuclear_mass(z, a) > 0.0], dtype=np.int64)
            self._bound_charges[a] = charges
        return charges

    def sample_piece(self, residue_A: int, residue_Z: int, tau: float) -> Optional[Tuple[int, int]]:
        """
        Draw one piece (a, z) to remove from a residue.

        Returns:
            (a, z), or None when no bound piece leaves a bound residue
        """
        sizes = np.arange(1, residue_A)
        weights = sizes ** (-tau)
        a = int(self.rng.choice(sizes, p=weights / weights.sum()))

        charges = np.array([z for z in self.bound_charges(a)
                            if self.nuclear_data.nuclear_mass(residue_Z - z, residue_A - a) > 0.0])
        if len(charges) == 0:
            return None

        mean = a * residue_Z / residue_A
        width = 0.5 * np.sqrt(a) + 0.3
        weights = np.exp(-0.5 * ((charges - mean) / width) ** 2)
        z = int(self.rng.choice(charges, p=weights / weights.sum()))
        return a, z

    def sample_partition(self, A: int, Z: int, excitation_energy: float,
                         temperature: float) -> List[Tuple[int, int]]:
        """
        Partition (A, Z) into pieces affordable with the given excitation.

        Returns:
            (a, z) pieces, the residue last
        """
        tau = self.power_law_exponent(excitation_energy / A)
        pieces = []
        residue_A, residue_Z = A, Z
        residue_mass = self.nuclear_data.nuclear_mass(Z, A)
        spent = 0.0
        failures = 0

        while residue_A > 1 and failures < self.max_attempts:
            piece = self.sample_piece(residue_A, residue_Z, tau)
            if piece is None:
                failures += 1
                continue

            a, z = piece
            new_mass = self.nuclear_data.nuclear_mass(residue_Z - z, residue_A - a)
            cost = self.nuclear_data.nuclear_mass(z, a) + new_mass - residue_mass
            thermal = 1.5 * temperature * (len(pieces) + 1)
            if spent + cost + thermal > excitation_energy:
                failures += 1
                continue

            failures = 0
            pieces.append(piece)
            spent += cost
            residue_A -= a
            residue_Z -= z
            residue_mass = new_mass

        pieces.append((residue_A, residue_Z))
        return pieces

    def split(self, fragment: Fragment) -> List[Fragment]:
        """
        Break a hot fragment into many pieces.

        Returns:
            Fragments of the partition, or [fragment] when nothing could be chipped off
        """
        A, Z = fragment.A, fragment.Z
        excitation = fragment.excitation_energy
        if A < 2 or excitation <= 0.0:
            return [fragment]

        temperature = np.sqrt(excitation * self.level_density_divisor / A)
        pieces = self.sample_partition(A, Z, excitation, temperature)
        if len(pieces) < 2:
            logger.debug("Multifragmentation: no partition for A=%d, Z=%d, E*=%.1f MeV",
                         A, Z, excitation)
            return [fragment]

        sizes = np.array([a for a, _ in pieces])
        masses = np.array([self.nuclear_data.nuclear_mass(z, a) for a, z in pieces])
        available = fragment.invariant_mass - masses.sum()
        excitations = self._share_excitation(sizes, available, temperature)
        momenta = n_body_decay(fragment.momentum, masses + excitations, self.rng)

        logger.debug("Multifragmentation: A=%d, Z=%d -> %d fragments", A, Z, len(pieces))
        return [
            Fragment(a, z, momentum, mass, excitation_energy=e,
                     creation_time=fragment.creation_time)
            for (a, z), momentum, mass, e in zip(pieces, momenta, masses, excitations)
        ]

    def _share_excitation(self, sizes: np.ndarray, available: float,
                          temperature: float) -> np.ndarray:
        """Split the available energy into kinetic and internal parts."""
        kinetic = min(available, 1.5 * temperature * (len(sizes) - 1))
        internal = available - kinetic

        excitations = np.zeros(len(sizes))
        heavy = sizes >= MIN_EXCITED_FRAGMENT_A
        if internal > 0.0 and np.any(heavy):
            excitations[heavy] = internal * sizes[heavy] / sizes[heavy].sum()
        return excitations
