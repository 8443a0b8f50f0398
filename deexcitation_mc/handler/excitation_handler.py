"""
De-excitation cascade engine.

Routes an excited nucleus through the de-excitation channels until only
particle-stable fragments are left:

    1. stable input -> returned unchanged
    2. multifragmentation (hot heavy nuclei, probabilistic gate)
    3. evaporation queue: Fermi break-up for light nuclei, evaporation otherwise
    4. photon queue: gamma cascade of every remaining excited fragment
    5. conversion of the final fragments to reaction products

A fragment is held by exactly one container at a time (one of the two
FIFO queues or the result list). All containers belong to a per-call
state object that is cleared when the call returns or raises.
"""

import logging
from collections import Counter, deque
from typing import Deque, List, Optional

import numpy as np

from deexcitation_mc.core.fragment import GROUND_STATE_THRESHOLD, Fragment
from deexcitation_mc.core.nuclear_data import NuclearData
from deexcitation_mc.core.particle import ParticleTable, ReactionProduct
from deexcitation_mc.exceptions import DivergentCascadeError, NoApplicableChannelError
from deexcitation_mc.handler.conversion import ResultConverter
from deexcitation_mc.physics.conditions import (
    Condition,
    FermiBreakUpCondition,
    MultiFragmentationCondition,
    evaporation_condition,
    photon_evaporation_condition,
)
from deexcitation_mc.physics.evaporation import Evaporation
from deexcitation_mc.physics.fermi_breakup import FermiBreakUp
from deexcitation_mc.physics.multifragmentation import MultiFragmentation
from deexcitation_mc.physics.photon_evaporation import PhotonEvaporation

logger = logging.getLogger(__name__)

# Fragments dispatched from the evaporation queue before the cascade is
# declared divergent
EVAPORATION_ITERATION_THRESHOLD = 1000

MULTIFRAGMENTATION = 'multifragmentation'
FERMI_BREAK_UP = 'fermi_break_up'
EVAPORATION = 'evaporation'
PHOTON_EVAPORATION = 'photon_evaporation'


class _CascadeState:
    """Containers of one break_it_up call; emptied on exit."""

    def __init__(self):
        self.results: List[Fragment] = []
        self.evaporation_queue: Deque[Fragment] = deque()
        self.photon_queue: Deque[Fragment] = deque()

    def held(self) -> int:
        return len(self.results) + len(self.evaporation_queue) + len(self.photon_queue)

    def release(self) -> int:
        """Drop every held fragment and return how many there were."""
        n_held = self.held()
        self.results.clear()
        self.evaporation_queue.clear()
        self.photon_queue.clear()
        return n_held

    def __enter__(self) -> '_CascadeState':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class ExcitationHandler:
    """
    Statistical de-excitation of an excited nucleus.

    Channel models and stage gates are replaceable. Any object with
    `split(fragment)` can serve as multifragmentation, Fermi break-up or
    evaporation model; the photon model needs `break_up_chain(fragment)`.
    Gates are callables taking a Fragment and returning bool.

    Usage:
        handler = ExcitationHandler(seed=42)
        products = handler.break_it_up(Fragment.at_rest(12, 6, 50.0, handler.nuclear_data))
    """

    def __init__(self, nuclear_data: Optional[NuclearData] = None,
                 particle_table: Optional[ParticleTable] = None,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 fermi_cache=None):
        """
        Initialize the handler with the default models and gates.

        Parameters:
            nuclear_data: Nuclear mass and abundance provider
            particle_table: Particle registry used for conversion
            rng: Random generator shared by models and gates
            seed: Seed for a new generator when rng is None
            fermi_cache: Split cache for the default Fermi break-up model
        """
        self.nuclear_data = nuclear_data if nuclear_data is not None else NuclearData()
        self.particle_table = (particle_table if particle_table is not None
                               else ParticleTable(self.nuclear_data))
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.converter = ResultConverter(self.particle_table)

        self.multi_fragmentation_model = MultiFragmentation(self.nuclear_data, rng=self.rng)
        self.fermi_break_up_model = FermiBreakUp(self.nuclear_data, rng=self.rng, cache=fermi_cache)
        self.photon_evaporation_model = PhotonEvaporation(rng=self.rng)
        self.evaporation_model = Evaporation(self.nuclear_data, rng=self.rng)
        self._wire_evaporation()

        self.multi_fragmentation_condition: Condition = MultiFragmentationCondition(rng=self.rng)
        self.fermi_condition: Condition = FermiBreakUpCondition(self.fermi_break_up_model)
        self.evaporation_condition: Condition = evaporation_condition
        self.photon_evaporation_condition: Condition = photon_evaporation_condition

        self.last_iteration_count = 0
        self.channel_counts = Counter()

    def _wire_evaporation(self):
        model = self.evaporation_model
        if hasattr(model, 'set_fermi_break_up'):
            model.set_fermi_break_up(self.fermi_break_up_model)
        if hasattr(model, 'set_photon_evaporation'):
            model.set_photon_evaporation(self.photon_evaporation_model)

    # ------------------------------------------------------------------
    # Model and gate setters (chainable)
    # ------------------------------------------------------------------

    def set_multi_fragmentation(self, model) -> 'ExcitationHandler':
        self.multi_fragmentation_model = model
        return self

    def set_fermi_break_up(self, model) -> 'ExcitationHandler':
        self.fermi_break_up_model = model
        if isinstance(self.fermi_condition, FermiBreakUpCondition):
            self.fermi_condition.model = model
        self._wire_evaporation()
        return self

    def set_evaporation(self, model) -> 'ExcitationHandler':
        self.evaporation_model = model
        self._wire_evaporation()
        return self

    def set_photon_evaporation(self, model) -> 'ExcitationHandler':
        self.photon_evaporation_model = model
        self._wire_evaporation()
        return self

    def set_multi_fragmentation_condition(self, condition: Condition) -> 'ExcitationHandler':
        self.multi_fragmentation_condition = condition
        return self

    def set_fermi_condition(self, condition: Condition) -> 'ExcitationHandler':
        self.fermi_condition = condition
        return self

    def set_evaporation_condition(self, condition: Condition) -> 'ExcitationHandler':
        self.evaporation_condition = condition
        return self

    def set_photon_evaporation_condition(self, condition: Condition) -> 'ExcitationHandler':
        self.photon_evaporation_condition = condition
        return self

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @staticmethod
    def is_ground_state(fragment: Fragment) -> bool:
        return fragment.excitation_energy < GROUND_STATE_THRESHOLD

    def is_stable(self, fragment: Fragment) -> bool:
        """Nucleons, light particles, and naturally occurring nuclei in their ground state."""
        return fragment.A <= 1 or (
            self.is_ground_state(fragment)
            and self.nuclear_data.isotope_abundance(fragment.Z, fragment.A) > 0.0
        )

    # ------------------------------------------------------------------
    # Cascade
    # ------------------------------------------------------------------

    def break_it_up(self, fragment: Fragment) -> List[ReactionProduct]:
        """
        De-excite a nucleus.

        Parameters:
            fragment: Excited nucleus (not modified)

        Returns:
            Reaction products in the order they became final

        Raises:
            DivergentCascadeError: Evaporation queue did not drain within
                                   EVAPORATION_ITERATION_THRESHOLD dispatches
            NoApplicableChannelError: No gate accepted a fragment
            IdentityResolutionError: A final fragment has no particle definition
        """
        initial = fragment.copy()
        self.last_iteration_count = 0

        with _CascadeState() as state:
            current = fragment.copy()
            if self.is_stable(current):
                state.results.append(current)
            else:
                if self.multi_fragmentation_condition(current):
                    self.apply_multi_fragmentation(current, state.results, state.evaporation_queue)
                else:
                    state.evaporation_queue.append(current)

                self._drain_evaporation_queue(initial, state)
                self._drain_photon_queue(state)

            products = self.converter.convert(state.results)

        logger.debug("Cascade of A=%d, Z=%d, E*=%.2f MeV: %d products after %d iterations",
                     initial.A, initial.Z, initial.excitation_energy,
                     len(products), self.last_iteration_count)
        return products

    def _drain_evaporation_queue(self, initial: Fragment, state: _CascadeState):
        iteration = 0
        while state.evaporation_queue:
            current = state.evaporation_queue.popleft()

            if iteration == EVAPORATION_ITERATION_THRESHOLD:
                n_discarded = state.release() + 1
                logger.error("Cascade did not converge after %d iterations: "
                             "initial %s, current %s", iteration, initial, current)
                raise DivergentCascadeError(initial, current.copy(), iteration, n_discarded)

            iteration += 1
            self.last_iteration_count = iteration

            if self.fermi_condition(current):
                self.apply_fermi_break_up(current, state.results, state.photon_queue)
            elif self.evaporation_condition(current):
                self.apply_evaporation(current, state.results, state.evaporation_queue)
            else:
                self._no_channel(current, state, EVAPORATION)

    def _drain_photon_queue(self, state: _CascadeState):
        while state.photon_queue:
            current = state.photon_queue.popleft()
            if self.photon_evaporation_condition(current):
                self.apply_photon_evaporation(current, state.results)
            else:
                self._no_channel(current, state, PHOTON_EVAPORATION)

    def _no_channel(self, fragment: Fragment, state: _CascadeState, stage: str):
        state.release()
        logger.error("No %s gate accepted %s", stage, fragment)
        raise NoApplicableChannelError(fragment.copy(), stage)

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def apply_multi_fragmentation(self, fragment: Fragment, results: List[Fragment],
                                  next_stage: Deque[Fragment]):
        self.channel_counts[MULTIFRAGMENTATION] += 1
        fragments = self.multi_fragmentation_model.split(fragment)
        if fragments is None or len(fragments) <= 1:
            next_stage.append(fragment)
            return

        self._tag(fragments, MULTIFRAGMENTATION)
        logger.debug("Multifragmentation of A=%d, Z=%d: %d fragments",
                     fragment.A, fragment.Z, len(fragments))
        self.group(fragments, results, next_stage)

    def apply_fermi_break_up(self, fragment: Fragment, results: List[Fragment],
                             next_stage: Deque[Fragment]):
        """Break up a light nucleus; the unsplit nucleus and unstable pieces go to `next_stage`."""
        self.channel_counts[FERMI_BREAK_UP] += 1
        fragments = self.fermi_break_up_model.split(fragment)
        if len(fragments) <= 1:
            next_stage.append(fragment)
            return

        self._tag(fragments, FERMI_BREAK_UP)
        self.group(fragments, results, next_stage)

    def apply_evaporation(self, fragment: Fragment, results: List[Fragment],
                          next_stage: Deque[Fragment]):
        """
        Evaporate from a nucleus.

        The model may turn `fragment` into the residual in place. When the
        returned products do not account for the full mass number, the
        residual is missing from the list and is appended.
        """
        self.channel_counts[EVAPORATION] += 1
        A = fragment.A
        fragments = list(self.evaporation_model.split(fragment))
        if sum(f.A for f in fragments if f.A > 0) < A:
            fragments.append(fragment)

        if len(fragments) == 1:
            results.append(fragments[0])
            return

        self._tag([f for f in fragments if f is not fragment], EVAPORATION)
        self.group(fragments, results, next_stage)

    def apply_photon_evaporation(self, fragment: Fragment, results: List[Fragment]):
        """Cool a fragment with the photon cascade; the fragment itself is always final."""
        self.channel_counts[PHOTON_EVAPORATION] += 1
        if not self.is_ground_state(fragment):
            photons = self.photon_evaporation_model.break_up_chain(fragment)
            self._tag(photons, PHOTON_EVAPORATION)
            results.extend(photons)

        results.append(fragment)

    def group(self, fragments: List[Fragment], results: List[Fragment],
              next_stage: Deque[Fragment]):
        """Stable fragments are final; the rest go to `next_stage`."""
        for fragment in fragments:
            if self.is_stable(fragment):
                results.append(fragment)
            else:
                next_stage.append(fragment)

    @staticmethod
    def _tag(fragments: List[Fragment], model: str):
        for fragment in fragments:
            if not fragment.creator_model:
                fragment.creator_model = model

    def reset_statistics(self):
        self.last_iteration_count = 0
        self.channel_counts.clear()


# ============================================================================
# Example Usage
# ============================================================================

if __name__ == "__main__":
    from deexcitation_mc.logging_config import setup_logging

    setup_logging()

    print("\n" + "="*70)
    print("Excitation Handler Test")
    print("="*70)

    handler = ExcitationHandler(seed=1)
    n_runs = 1000

    for A, Z, energy_per_nucleon in [(12, 6, 50.0 / 12), (56, 26, 3.0), (197, 79, 6.0)]:
        fragment = Fragment.at_rest(A, Z, energy_per_nucleon * A, handler.nuclear_data)
        multiplicity = []
        charge = []
        for _ in range(n_runs):
            products = handler.break_it_up(fragment)
            multiplicity.append(len(products))
            charge.append(sum(p.atomic_number for p in products))

        print(f"\n{fragment}")
        print(f"  Mean multiplicity: {np.mean(multiplicity):.2f}")
        print(f"  Mean total charge: {np.mean(charge):.2f} (input Z={Z})")

    print(f"\nChannel counts: {dict(handler.channel_counts)}")

    print("\n" + "="*70)
    print("Test complete!")
    print("="*70 + "\n")
