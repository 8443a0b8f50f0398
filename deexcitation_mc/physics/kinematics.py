"""
Relativistic kinematics for fragment decays.

Four-momenta are [px, py, pz, E] arrays in MeV. Every decay helper
returns daughter four-momenta in the lab frame whose sum equals the
parent four-momentum.
"""

from typing import List, Sequence

import numba
import numpy as np
from scipy.optimize import brentq


@numba.njit(fastmath=True, cache=True)
def boost(four_momentum: np.ndarray, beta: np.ndarray) -> np.ndarray:
    """
    Lorentz-boost a four-momentum by velocity beta.

    Parameters:
        four_momentum: [px, py, pz, E]
        beta: Boost velocity (v/c) as a 3-vector

    Returns:
        Boosted [px, py, pz, E]
    """
    b2 = beta[0] * beta[0] + beta[1] * beta[1] + beta[2] * beta[2]

    result = np.empty(4, dtype=np.float64)
    if b2 < 1e-20:
        for i in range(4):
            result[i] = four_momentum[i]
        return result

    gamma = 1.0 / np.sqrt(1.0 - b2)
    bp = beta[0] * four_momentum[0] + beta[1] * four_momentum[1] + beta[2] * four_momentum[2]
    gamma2 = (gamma - 1.0) / b2

    for i in range(3):
        result[i] = four_momentum[i] + gamma2 * bp * beta[i] + gamma * beta[i] * four_momentum[3]
    result[3] = gamma * (four_momentum[3] + bp)

    return result


def boost_vector(four_momentum: np.ndarray) -> np.ndarray:
    """Velocity (v/c) of a system with the given four-momentum."""
    return four_momentum[:3] / four_momentum[3]


def isotropic_direction(rng: np.random.Generator) -> np.ndarray:
    """Random unit vector, uniform on the sphere."""
    cos_theta = rng.uniform(-1.0, 1.0)
    sin_theta = np.sqrt(1.0 - cos_theta * cos_theta)
    phi = rng.uniform(0.0, 2.0 * np.pi)
    return np.array([sin_theta * np.cos(phi), sin_theta * np.sin(phi), cos_theta])


def two_body_momentum(M: float, m1: float, m2: float) -> float:
    """
    Momentum of either daughter in the rest frame of a two-body decay.

    Returns 0 at (or slightly below) threshold.
    """
    value = (M * M - (m1 + m2) ** 2) * (M * M - (m1 - m2) ** 2)
    if value <= 0.0:
        return 0.0
    return np.sqrt(value) / (2.0 * M)


def two_body_decay(parent: np.ndarray, m1: float, m2: float,
                   rng: np.random.Generator) -> List[np.ndarray]:
    """
    Isotropic two-body decay.

    Parameters:
        parent: Parent four-momentum (lab)
        m1, m2: Daughter masses [MeV/c²]
        rng: Random generator

    Returns:
        [p1, p2] lab four-momenta
    """
    M = _parent_mass(parent)
    p = two_body_momentum(M, m1, m2)
    direction = isotropic_direction(rng)

    p1 = np.empty(4)
    p1[:3] = p * direction
    p1[3] = np.sqrt(p * p + m1 * m1)

    beta = boost_vector(parent)
    p1 = boost(p1, beta)
    # Second daughter from four-momentum balance keeps the sum exact
    return [p1, parent - p1]


def n_body_decay(parent: np.ndarray, masses: Sequence[float],
                 rng: np.random.Generator) -> List[np.ndarray]:
    """
    Isotropic n-body break-up conserving four-momentum.

    Random rest-frame momenta are drawn, shifted so they sum to zero and
    scaled (Brent root finding) until the total energy equals the parent
    mass. The result is then boosted to the lab.

    Parameters:
        parent: Parent four-momentum (lab)
        masses: Daughter masses [MeV/c²]
        rng: Random generator

    Returns:
        List of lab four-momenta, one per daughter
    """
    masses = np.asarray(masses, dtype=np.float64)
    n = len(masses)
    if n == 1:
        return [parent.copy()]
    if n == 2:
        return two_body_decay(parent, masses[0], masses[1], rng)

    M = _parent_mass(parent)
    available = M - masses.sum()

    momenta = np.zeros((n, 3))
    if available > 0.0:
        for i in range(n):
            momenta[i] = rng.exponential(1.0) * isotropic_direction(rng)

        # Remove net momentum, weighting by mass so light daughters keep theirs
        weights = (masses + 1.0) / (masses + 1.0).sum()
        momenta -= np.outer(weights, momenta.sum(axis=0))

        p2 = np.einsum('ij,ij->i', momenta, momenta)
        if p2.sum() > 0.0:
            def energy_balance(scale):
                return np.sqrt(scale * scale * p2 + masses * masses).sum() - M

            upper = 1.0
            while energy_balance(upper) < 0.0:
                upper *= 2.0
            momenta *= brentq(energy_balance, 0.0, upper, xtol=1e-12)

    beta = boost_vector(parent)
    result = []
    for i in range(n):
        four = np.empty(4)
        four[:3] = momenta[i]
        four[3] = np.sqrt(momenta[i] @ momenta[i] + masses[i] * masses[i])
        result.append(boost(four, beta))

    # Absorb rounding in the last daughter
    result[-1] = parent - np.sum(result[:-1], axis=0)
    return result


def _parent_mass(parent: np.ndarray) -> float:
    mass2 = parent[3] ** 2 - parent[:3] @ parent[:3]
    return float(np.sqrt(mass2)) if mass2 > 0.0 else 0.0
