"""
Conversion of final fragments into reaction products.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from deexcitation_mc.core.fragment import GROUND_STATE_THRESHOLD, Fragment
from deexcitation_mc.core.particle import ParticleDefinition, ParticleTable, ReactionProduct
from deexcitation_mc.exceptions import IdentityResolutionError

logger = logging.getLogger(__name__)


def correct_momentum(momentum: np.ndarray, mass: float) -> np.ndarray:
    """
    Put a four-momentum on the mass shell of `mass`, keeping its energy.

    If E <= m the particle is set at rest with energy m. Otherwise the
    3-momentum is rescaled to |p| = sqrt((E - m)(E + m)) along its
    original direction (a zero 3-momentum stays zero).

    Parameters:
        momentum: Four-momentum [px, py, pz, E] [MeV]
        mass: Target mass [MeV/c²]

    Returns:
        New four-momentum
    """
    energy = momentum[3]
    if energy <= mass:
        return np.array([0.0, 0.0, 0.0, mass])

    modulus = np.sqrt((energy - mass) * (energy + mass))
    vector = np.asarray(momentum[:3], dtype=np.float64)
    norm = np.linalg.norm(vector)
    direction = vector / norm if norm > 0.0 else np.zeros(3)
    return np.append(direction * modulus, energy)


class ResultConverter:
    """
    Resolves final fragments to particle definitions.

    Usage:
        converter = ResultConverter(ParticleTable(NuclearData()))
        products = converter.convert(results)
    """

    def __init__(self, particle_table: ParticleTable,
                 ground_state_threshold: float = GROUND_STATE_THRESHOLD):
        self.particle_table = particle_table
        self.ground_state_threshold = ground_state_threshold

    def _lookup(self, fragment: Fragment) -> Optional[ParticleDefinition]:
        definition = self.particle_table.special_particle(fragment.A, fragment.Z)
        if definition is not None:
            return definition

        excitation = fragment.excitation_energy
        level = fragment.float_level
        if fragment.is_ground_state(self.ground_state_threshold):
            excitation = 0.0
            level = 0
        return self.particle_table.get_ion(fragment.Z, fragment.A, excitation, level)

    def convert_fragment(self, fragment: Fragment) -> ReactionProduct:
        """
        Build the reaction product of one final fragment.

        Raises:
            IdentityResolutionError: Not even the ground-state ion exists
        """
        momentum = fragment.momentum
        definition = self._lookup(fragment)

        if definition is None:
            # Level not in the table: emit the ground-state ion on its mass shell
            definition = self.particle_table.get_ground_state_ion(fragment.Z, fragment.A)
            if definition is None:
                raise IdentityResolutionError(fragment.Z, fragment.A)
            logger.debug("No level at E*=%.3f MeV for Z=%d, A=%d; using ground state",
                         fragment.excitation_energy, fragment.Z, fragment.A)
            momentum = correct_momentum(momentum, definition.pdg_mass)

        return ReactionProduct(
            definition=definition,
            momentum=np.array(momentum[:3], dtype=np.float64),
            total_energy=float(momentum[3]),
            formation_time=fragment.creation_time,
        )

    def convert(self, results: Sequence[Fragment]) -> List[ReactionProduct]:
        return [self.convert_fragment(fragment) for fragment in results]
