"""
Stage gate predicates.

A gate is any callable taking a Fragment and returning bool. The handler
asks the multifragmentation gate once per call, the Fermi and evaporation
gates for every fragment taken from the evaporation queue, and the photon
gate for every fragment taken from the photon queue.
"""

from typing import Callable, Optional

import numpy as np

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.physics.fermi_breakup import MAX_A, MAX_Z, FermiBreakUp

Condition = Callable[[Fragment], bool]


class MultiFragmentationCondition:
    """
    Smooth onset of multifragmentation between 3 and 5 MeV per nucleon.

    Below the lower bound the gate is closed, above the upper bound it is
    open, and in between it opens with probability

        P = 0.5 · tanh((E*/A - E_mid) / w) + 0.5,

    E_mid = (lower + upper)/2, w = 1 / (2·(upper - lower)).
    Light nuclei (A < 19 and Z < 9) never multifragment.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None,
                 lower_bound: float = 3.0, upper_bound: float = 5.0,
                 max_A: int = MAX_A, max_Z: int = MAX_Z):
        """
        Initialize the gate.

        Parameters:
            rng: Random generator (one uniform draw per decision)
            lower_bound: E*/A below which the gate is closed [MeV]
            upper_bound: E*/A above which the gate is open [MeV]
            max_A, max_Z: Nuclei with A < max_A and Z < max_Z are rejected
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.max_A = max_A
        self.max_Z = max_Z

    def transition_probability(self, A: int, excitation_energy: float) -> float:
        scale = 1.0 / (2.0 * (self.upper_bound - self.lower_bound))
        offset = (self.upper_bound + self.lower_bound) / 2.0
        return 0.5 * np.tanh((excitation_energy / A - offset) / scale) + 0.5

    def __call__(self, fragment: Fragment) -> bool:
        A, Z = fragment.A, fragment.Z
        if A < self.max_A and Z < self.max_Z:
            return False

        excitation = fragment.excitation_energy
        probability = self.transition_probability(A, excitation)
        random = self.rng.random()

        if excitation < self.lower_bound * A:
            return False
        if excitation < self.upper_bound * A:
            return bool(random < probability)
        return excitation > self.upper_bound * A


class FermiBreakUpCondition:
    """Open for nuclei inside the Fermi break-up region of `model`."""

    def __init__(self, model=None):
        self.model = model

    def __call__(self, fragment: Fragment) -> bool:
        if self.model is None:
            return FermiBreakUp.is_fermi_possible(fragment.Z, fragment.A,
                                                  fragment.excitation_energy)
        return self.model.is_applicable(fragment.Z, fragment.A, fragment.excitation_energy)


def always_true(fragment: Fragment) -> bool:
    return True


# Evaporation and photon evaporation accept whatever reaches them
evaporation_condition = always_true
photon_evaporation_condition = always_true
