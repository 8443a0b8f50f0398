"""
Fragment state for the de-excitation cascade.

A fragment is a (possibly excited) nucleus in flight. Light particles use
the same container by convention: photons are (A=0, Z=0), electrons
(A=0, Z=-1) and pions (A=-1, Z=charge).

Four-momenta are NumPy arrays laid out as [px, py, pz, E] in MeV.
"""

from typing import Optional

import numpy as np

# Excitation energies below this count as ground state [MeV]
GROUND_STATE_THRESHOLD = 0.01


def invariant_mass(momentum: np.ndarray) -> float:
    """Invariant mass of a [px, py, pz, E] four-vector (0 for space-like)."""
    mass2 = momentum[3] ** 2 - momentum[0] ** 2 - momentum[1] ** 2 - momentum[2] ** 2
    return float(np.sqrt(mass2)) if mass2 > 0.0 else 0.0


class Fragment:
    """
    Excited nucleus travelling through the cascade.

    Attributes:
        A: Mass number
        Z: Charge number
        momentum: Four-momentum [px, py, pz, E] [MeV]
        ground_state_mass: Nuclear ground-state mass [MeV/c²]
        excitation_energy: Excitation energy above the ground state [MeV]
        creation_time: Time of creation [ns]
        float_level: Floating level index of the excited state
        creator_model: Name of the channel that produced the fragment
    """

    def __init__(self, A: int, Z: int, momentum, ground_state_mass: float,
                 excitation_energy: Optional[float] = None,
                 creation_time: float = 0.0, float_level: int = 0,
                 creator_model: str = ""):
        """
        Initialize a fragment.

        Parameters:
            A: Mass number
            Z: Charge number
            momentum: Four-momentum [px, py, pz, E] [MeV]
            ground_state_mass: Ground-state mass [MeV/c²]
            excitation_energy: Excitation energy [MeV]; derived from the
                               invariant mass when None
            creation_time: Creation time [ns]
            float_level: Floating level index
            creator_model: Producing channel name
        """
        self.A = int(A)
        self.Z = int(Z)
        self.momentum = np.array(momentum, dtype=np.float64)
        self.ground_state_mass = float(ground_state_mass)
        self.creation_time = float(creation_time)
        self.float_level = int(float_level)
        self.creator_model = creator_model

        if excitation_energy is None:
            excitation_energy = self._excitation_from_momentum()
        self.excitation_energy = max(0.0, float(excitation_energy))

    @classmethod
    def from_momentum(cls, A: int, Z: int, momentum, nuclear_data,
                      creation_time: float = 0.0) -> 'Fragment':
        """
        Build a fragment whose excitation is the invariant mass above the ground state.

        Parameters:
            A: Mass number
            Z: Charge number
            momentum: Four-momentum [px, py, pz, E] [MeV]
            nuclear_data: Provider of nuclear_mass(Z, A)
            creation_time: Creation time [ns]
        """
        mass = nuclear_data.nuclear_mass(Z, A) if A > 0 else 0.0
        if A > 0 and mass <= 0.0:
            raise ValueError(f"Unknown nuclear mass for Z={Z}, A={A}")
        return cls(A, Z, momentum, mass, creation_time=creation_time)

    @classmethod
    def at_rest(cls, A: int, Z: int, excitation_energy: float, nuclear_data,
                creation_time: float = 0.0) -> 'Fragment':
        """Build a fragment at rest with the given excitation energy [MeV]."""
        mass = nuclear_data.nuclear_mass(Z, A)
        if mass <= 0.0:
            raise ValueError(f"Unknown nuclear mass for Z={Z}, A={A}")
        momentum = np.array([0.0, 0.0, 0.0, mass + excitation_energy])
        return cls(A, Z, momentum, mass, excitation_energy=excitation_energy,
                   creation_time=creation_time)

    @classmethod
    def photon(cls, momentum, creation_time: float = 0.0) -> 'Fragment':
        """Build a photon (A=0, Z=0)."""
        return cls(0, 0, momentum, 0.0, excitation_energy=0.0, creation_time=creation_time)

    def _excitation_from_momentum(self) -> float:
        return invariant_mass(self.momentum) - self.ground_state_mass

    @property
    def total_energy(self) -> float:
        return float(self.momentum[3])

    @property
    def momentum_vector(self) -> np.ndarray:
        return self.momentum[:3].copy()

    @property
    def invariant_mass(self) -> float:
        return invariant_mass(self.momentum)

    @property
    def kinetic_energy(self) -> float:
        return self.total_energy - self.ground_state_mass - self.excitation_energy

    def is_ground_state(self, threshold: float = GROUND_STATE_THRESHOLD) -> bool:
        return self.excitation_energy < threshold

    def set_momentum(self, momentum):
        """Replace the four-momentum and re-derive the excitation energy."""
        self.momentum = np.array(momentum, dtype=np.float64)
        self.excitation_energy = max(0.0, self._excitation_from_momentum())

    def copy(self) -> 'Fragment':
        return Fragment(self.A, self.Z, self.momentum.copy(), self.ground_state_mass,
                        excitation_energy=self.excitation_energy,
                        creation_time=self.creation_time,
                        float_level=self.float_level,
                        creator_model=self.creator_model)

    def __repr__(self) -> str:
        px, py, pz, e = self.momentum
        return (f"Fragment(A={self.A}, Z={self.Z}, "
                f"E*={self.excitation_energy:.3f} MeV, "
                f"P=({px:.3f}, {py:.3f}, {pz:.3f}; {e:.3f}) MeV, "
                f"t={self.creation_time:.3g} ns)")
