"""
Evaporation of nucleons and light clusters.

Competition between n, p, d, t, He-3 and alpha emission follows a
Weisskopf-Ewing estimate of the decay widths:

    Γ_j ∝ g_j · m_j · R_j² · T_j² · exp(2·sqrt(a·E_max,j))

where E_max,j = E* - S_j - B_j is the energy available above the
separation energy S_j and Coulomb barrier B_j, a = A_res/8 MeV⁻¹ and
T_j = sqrt(E_max,j / a). Emission continues until no particle channel
is open or the residual enters the Fermi break-up region; leftover
excitation is then radiated by the photon cascade, if one is attached.

References:
    - V. F. Weisskopf, D. H. Ewing, Phys. Rev. 57, 472 (1940)
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
from scipy.special import logsumexp

from deexcitation_mc.core.fragment import GROUND_STATE_THRESHOLD, Fragment
from deexcitation_mc.physics.kinematics import two_body_decay

logger = logging.getLogger(__name__)

# (name, A, Z, 2s+1)
EVAPORATION_CHANNELS = (
    ('neutron', 1, 0, 2),
    ('proton', 1, 1, 2),
    ('deuteron', 2, 1, 3),
    ('triton', 3, 1, 2),
    ('helium3', 3, 2, 2),
    ('alpha', 4, 2, 1),
)

COULOMB_CONSTANT = 1.43996  # e²/4πε0 [MeV fm]


class Evaporation:
    """
    Sequential light-particle evaporation.

    The input fragment is modified in place and becomes the residual
    nucleus; it is always the last element of the returned list.

    Usage:
        evaporation = Evaporation(NuclearData(), rng=rng)
        evaporation.set_photon_evaporation(PhotonEvaporation(rng=rng))
        products = evaporation.split(fragment)
    """

    def __init__(self, nuclear_data, rng: Optional[np.random.Generator] = None,
                 level_density_divisor: float = 8.0, barrier_radius: float = 1.5):
        """
        Initialize evaporation.

        Parameters:
            nuclear_data: Provider of nuclear_mass(Z, A)
            rng: Random generator
            level_density_divisor: a = A_res / divisor [MeV⁻¹]
            barrier_radius: r0 of the Coulomb barrier radius R = r0(A_res^1/3 + a^1/3) [fm]
        """
        self.nuclear_data = nuclear_data
        self.rng = rng if rng is not None else np.random.default_rng()
        self.level_density_divisor = level_density_divisor
        self.barrier_radius = barrier_radius
        self.fermi_break_up = None
        self.photon_evaporation = None

    def set_fermi_break_up(self, model):
        """Stop evaporating once `model.is_applicable` accepts the residual."""
        self.fermi_break_up = model

    def set_photon_evaporation(self, model):
        """Radiate leftover excitation with `model.break_up_chain`."""
        self.photon_evaporation = model

    def is_applicable(self, Z: int, A: int, excitation_energy: float) -> bool:
        return A > 1

    def channel_log_widths(self, fragment: Fragment) -> Tuple[np.ndarray, np.ndarray]:
        """
        Log decay widths and available energies for every channel.

        Returns:
            (log_widths, e_max): closed channels have log width -inf
        """
        n = len(EVAPORATION_CHANNELS)
        log_widths = np.full(n, -np.inf)
        e_max = np.zeros(n)

        A, Z = fragment.A, fragment.Z
        excitation = fragment.excitation_energy

        for j, (_, a, z, degeneracy) in enumerate(EVAPORATION_CHANNELS):
            A_res, Z_res = A - a, Z - z
            if A_res < 1 or Z_res < 0 or Z_res > A_res:
                continue

            m_res = self.nuclear_data.nuclear_mass(Z_res, A_res)
            m_emit = self.nuclear_data.nuclear_mass(z, a)
            if m_res <= 0.0 or m_emit <= 0.0:
                continue

            separation = m_res + m_emit - fragment.ground_state_mass
            radius = self.barrier_radius * (A_res ** (1.0 / 3.0) + a ** (1.0 / 3.0))
            barrier = COULOMB_CONSTANT * z * Z_res / radius if z > 0 else 0.0

            available = excitation - separation - barrier
            if available <= 0.0:
                continue

            level_density = A_res / self.level_density_divisor
            temperature = np.sqrt(available / level_density)
            e_max[j] = available
            log_widths[j] = (np.log(degeneracy) + np.log(m_emit) + 2.0 * np.log(radius)
                             + 2.0 * np.log(temperature) + 2.0 * np.sqrt(level_density * available))

        return log_widths, e_max

    def _sample_kinetic_energy(self, temperature: float, e_max: float) -> float:
        """Maxwellian ε·exp(-ε/T) truncated to [0, e_max]."""
        for _ in range(20):
            energy = self.rng.gamma(2.0, temperature)
            if energy <= e_max:
                return energy
        return self.rng.uniform(0.0, e_max)

    def emit(self, fragment: Fragment, channel: int, e_max: float) -> Fragment:
        """
        Emit one particle, turning `fragment` into the residual.

        Returns:
            The emitted particle
        """
        _, a, z, _ = EVAPORATION_CHANNELS[channel]
        A_res, Z_res = fragment.A - a, fragment.Z - z
        m_res = self.nuclear_data.nuclear_mass(Z_res, A_res)
        m_emit = self.nuclear_data.nuclear_mass(z, a)

        level_density = A_res / self.level_density_divisor
        kinetic = self._sample_kinetic_energy(np.sqrt(e_max / level_density), e_max)

        # Residual excitation cannot exceed what the invariant mass allows
        headroom = fragment.invariant_mass - m_res - m_emit
        residual_excitation = min(e_max - kinetic, headroom)
        residual_excitation = max(residual_excitation, 0.0)

        p_emit, p_res = two_body_decay(fragment.momentum, m_emit,
                                       m_res + residual_excitation, self.rng)

        emitted = Fragment(a, z, p_emit, m_emit, excitation_energy=0.0,
                           creation_time=fragment.creation_time)

        fragment.A = A_res
        fragment.Z = Z_res
        fragment.ground_state_mass = m_res
        fragment.excitation_energy = residual_excitation
        fragment.momentum = p_res
        fragment.float_level = 0
        return emitted

    def split(self, fragment: Fragment) -> List[Fragment]:
        """
        Evaporate particles from a fragment.

        Parameters:
            fragment: Excited fragment, modified in place into the residual

        Returns:
            Emitted particles (and photons) followed by the residual
        """
        products = []
        while fragment.excitation_energy >= GROUND_STATE_THRESHOLD:
            if (self.fermi_break_up is not None and products
                    and self.fermi_break_up.is_applicable(fragment.Z, fragment.A,
                                                          fragment.excitation_energy)):
                break

            log_widths, e_max = self.channel_log_widths(fragment)
            if not np.isfinite(log_widths).any():
                if self.photon_evaporation is not None:
                    products.extend(self.photon_evaporation.break_up_chain(fragment))
                break

            probabilities = np.exp(log_widths - logsumexp(log_widths))
            probabilities /= probabilities.sum()
            channel = self.rng.choice(len(EVAPORATION_CHANNELS), p=probabilities)
            products.append(self.emit(fragment, channel, e_max[channel]))

        logger.debug("Evaporation: %d products, residual A=%d, Z=%d, E*=%.3f MeV",
                     len(products), fragment.A, fragment.Z, fragment.excitation_energy)
        products.append(fragment)
        return products
