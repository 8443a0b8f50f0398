"""
Statistical gamma cascade.

The excited nucleus emits photons until it reaches its ground state.
Above the discrete-level region the photon energy follows an E1-like
spectrum  ε³ · exp(-ε/T)  with the nuclear temperature T = sqrt(E*/a),
a = A/8 MeV⁻¹. Below it a single transition goes to the ground state.
"""

import logging
from typing import List, Optional

import numpy as np

from deexcitation_mc.core.fragment import GROUND_STATE_THRESHOLD, Fragment
from deexcitation_mc.physics.kinematics import two_body_decay

logger = logging.getLogger(__name__)


class PhotonEvaporation:
    """
    Photon de-excitation chain.

    Usage:
        photon_evaporation = PhotonEvaporation(rng=np.random.default_rng(7))
        photons = photon_evaporation.break_up_chain(fragment)  # fragment now cold
    """

    def __init__(self, rng: Optional[np.random.Generator] = None,
                 discrete_level_limit: float = 2.0,
                 level_density_divisor: float = 8.0,
                 max_chain_length: int = 100):
        """
        Initialize the photon cascade.

        Parameters:
            rng: Random generator
            discrete_level_limit: Below this excitation [MeV] one photon goes to the ground state
            level_density_divisor: a = A / divisor [MeV⁻¹]
            max_chain_length: Maximum number of photons per chain
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.discrete_level_limit = discrete_level_limit
        self.level_density_divisor = level_density_divisor
        self.max_chain_length = max_chain_length

    def is_applicable(self, Z: int, A: int, excitation_energy: float) -> bool:
        return A >= 1

    def sample_transition(self, A: int, excitation_energy: float) -> float:
        """
        Excitation energy [MeV] left after one photon emission.
        """
        if excitation_energy <= self.discrete_level_limit:
            return 0.0

        temperature = np.sqrt(excitation_energy * self.level_density_divisor / max(A, 1))
        photon_energy = self.rng.gamma(4.0, temperature)
        if photon_energy >= excitation_energy:
            return 0.0
        return excitation_energy - photon_energy

    def break_up_chain(self, fragment: Fragment) -> List[Fragment]:
        """
        De-excite a fragment in place.

        Parameters:
            fragment: Excited fragment; left in its ground state on return

        Returns:
            Emitted photons in emission order
        """
        photons = []
        for step in range(self.max_chain_length):
            if fragment.excitation_energy < GROUND_STATE_THRESHOLD:
                break

            if step == self.max_chain_length - 1:
                residual_excitation = 0.0
            else:
                residual_excitation = self.sample_transition(fragment.A, fragment.excitation_energy)

            photon_momentum, residual_momentum = two_body_decay(
                fragment.momentum, 0.0,
                fragment.ground_state_mass + residual_excitation, self.rng
            )
            photons.append(Fragment.photon(photon_momentum, fragment.creation_time))

            fragment.momentum = residual_momentum
            fragment.excitation_energy = residual_excitation
            fragment.float_level = 0

        logger.debug("Photon cascade: %d photons from A=%d, Z=%d",
                     len(photons), fragment.A, fragment.Z)
        return photons
